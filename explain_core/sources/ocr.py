"""Tesseract OCR document source.

Each image is one scanned page. Tesseract reports words; they are regrouped
into lines (block, paragraph, line) so a page yields the same kind of
line-level observations a camera scanner would.

pytesseract and Pillow come from the `ocr` extra and are imported when a page
is actually recognized.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from explain_core.domain.exceptions import ScanError
from explain_core.infrastructure.logging.logger import logger

from .base import join_page_texts


def lines_from_ocr_data(data: Mapping[str, List[Any]], min_confidence: float = 0.0) -> List[str]:
    """Group `pytesseract.image_to_data(..., output_type=DICT)` words into lines.

    Lines keep the order Tesseract first reports them in. Entries with
    conf == -1 are layout rows, not words.
    """

    lines: Dict[Tuple[int, int, int], List[str]] = {}
    texts = data.get("text", [])
    for i, raw in enumerate(texts):
        word = (raw or "").strip()
        if not word:
            continue
        try:
            conf = float(data["conf"][i])
        except (KeyError, IndexError, TypeError, ValueError):
            conf = 0.0
        if conf < 0 or conf < min_confidence:
            continue
        key = (
            int(data["block_num"][i]),
            int(data["par_num"][i]),
            int(data["line_num"][i]),
        )
        lines.setdefault(key, []).append(word)
    return [" ".join(words) for words in lines.values()]


class TesseractDocumentSource:
    """Run OCR over image files, one image per page, in the given order."""

    def __init__(self, paths: Iterable[str | Path], settings: Optional[Any] = None, min_confidence: float = 0.0):
        self.paths = [Path(p) for p in paths]
        self.language = getattr(settings, "ocr_language", "eng")
        self.tesseract_cmd = getattr(settings, "tesseract_cmd", None)
        self.min_confidence = min_confidence

    async def scan(self) -> str:
        return await asyncio.to_thread(self._recognize_pages)

    def _recognize_pages(self) -> str:
        pages = []
        for number, path in enumerate(self.paths):
            lines = self._recognize_page(path)
            logger.info(
                "Recognized page",
                extra={"extra": {"page": number, "path": str(path), "lines": len(lines)}},
            )
            pages.append(lines)
        return join_page_texts(pages)

    def _recognize_page(self, path: Path) -> List[str]:
        import pytesseract
        from PIL import Image

        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
        try:
            with Image.open(path) as image:
                data = pytesseract.image_to_data(
                    image.convert("L"),
                    lang=self.language,
                    output_type=pytesseract.Output.DICT,
                )
        except (OSError, pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            raise ScanError(code="SCAN_ERROR", message=str(e), path=str(path))
        return lines_from_ocr_data(data, self.min_confidence)
