"""Document source backed by plain-text files, one file per page."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterable, List

from explain_core.domain.exceptions import ScanError

from .base import join_page_texts


class TextFileDocumentSource:
    """Treat each text file as a scanned page; its non-blank lines are the
    recognized observations."""

    def __init__(self, paths: Iterable[str | Path]):
        self.paths = [Path(p) for p in paths]

    async def scan(self) -> str:
        return await asyncio.to_thread(self._read_pages)

    def _read_pages(self) -> str:
        pages: List[List[str]] = []
        for path in self.paths:
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                raise ScanError(code="SCAN_ERROR", message=str(e), path=str(path))
            pages.append([line.strip() for line in text.splitlines() if line.strip()])
        return join_page_texts(pages)
