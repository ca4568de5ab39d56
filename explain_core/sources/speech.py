"""faster-whisper speech source.

One recorded audio file is one speech session. The transcript is the
stripped segment texts joined by single spaces. faster-whisper comes from the
`speech` extra and is loaded on first use; the model is cached per
(name, device, compute type).
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from explain_core.domain.exceptions import SpeechError
from explain_core.infrastructure.logging.logger import logger

DEFAULT_MODEL = "small.en"
DEVICE = "cpu"
COMPUTE_TYPE = "int8"

_models: Dict[Tuple[str, str, str], Any] = {}


def _load_model(name: str, device: str, compute_type: str):
    key = (name, device, compute_type)
    if key not in _models:
        from faster_whisper import WhisperModel

        _models[key] = WhisperModel(name, device=device, compute_type=compute_type)
    return _models[key]


class WhisperSpeechSource:
    def __init__(self, audio_path: str | Path, settings: Optional[Any] = None, model: Any = None):
        self.audio_path = Path(audio_path)
        self.language = getattr(settings, "speech_language", "en")
        self._model_name = getattr(settings, "whisper_model", DEFAULT_MODEL)
        self._device = getattr(settings, "whisper_device", DEVICE)
        self._compute_type = getattr(settings, "whisper_compute_type", COMPUTE_TYPE)
        self._model = model

    async def transcribe(self) -> str:
        return await asyncio.to_thread(self._transcribe)

    def _transcribe(self) -> str:
        model = self._model or _load_model(self._model_name, self._device, self._compute_type)
        try:
            segments, info = model.transcribe(str(self.audio_path), language=self.language, word_timestamps=False)
            parts = [seg.text.strip() for seg in segments]
        except (OSError, RuntimeError, ValueError) as e:
            raise SpeechError(code="SPEECH_ERROR", message=str(e), path=str(self.audio_path))
        text = " ".join(p for p in parts if p)
        logger.info(
            "Transcribed speech session",
            extra={"extra": {"path": str(self.audio_path), "segments": len(parts), "language": getattr(info, "language", None)}},
        )
        return text
