"""Text producers: document scanning and speech transcription."""

from pathlib import Path
from typing import Any, Iterable, Optional

from .base import DocumentSource, SpeechSource, join_page_texts
from .ocr import TesseractDocumentSource
from .speech import WhisperSpeechSource
from .text_file import TextFileDocumentSource


def source_for_paths(paths: Iterable[str], settings: Optional[Any] = None) -> DocumentSource:
    """Pick the text-file source when every page is a .txt file, OCR otherwise."""

    paths = [Path(p) for p in paths]
    if paths and all(p.suffix.lower() == ".txt" for p in paths):
        return TextFileDocumentSource(paths)
    return TesseractDocumentSource(paths, settings)


__all__ = [
    "DocumentSource",
    "SpeechSource",
    "join_page_texts",
    "source_for_paths",
    "TesseractDocumentSource",
    "TextFileDocumentSource",
    "WhisperSpeechSource",
]
