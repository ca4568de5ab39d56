import asyncio
from types import SimpleNamespace

import pytest

from explain_core.domain.exceptions import ScanError
from explain_core.sources import (
    TesseractDocumentSource,
    TextFileDocumentSource,
    WhisperSpeechSource,
    join_page_texts,
    source_for_paths,
)
from explain_core.sources.ocr import lines_from_ocr_data


def test_pages_join_in_capture_order_with_trailing_separator():
    assert join_page_texts([["Page one."], ["Page two."]]) == "Page one. Page two. "


def test_join_handles_multiline_and_empty_pages():
    assert join_page_texts([["a", "b"], [], ["c"]]) == "a b c "
    assert join_page_texts([]) == ""


def test_ocr_words_grouped_into_lines():
    data = {
        "text": ["", "Hello", "world", "", "Second", "line", "noise"],
        "conf": ["-1", "96", "91.5", "-1", "88", 90, "12"],
        "block_num": [1, 1, 1, 1, 1, 1, 2],
        "par_num": [1, 1, 1, 1, 1, 1, 1],
        "line_num": [0, 1, 1, 2, 2, 2, 1],
    }
    assert lines_from_ocr_data(data) == ["Hello world", "Second line", "noise"]
    assert lines_from_ocr_data(data, min_confidence=30) == ["Hello world", "Second line"]


def test_text_file_source_reads_pages(tmp_path):
    first = tmp_path / "p1.txt"
    second = tmp_path / "p2.txt"
    first.write_text("Page one.\n\n", encoding="utf-8")
    second.write_text("  Page two.\n", encoding="utf-8")
    text = asyncio.run(TextFileDocumentSource([first, second]).scan())
    assert text == "Page one. Page two. "


def test_text_file_source_missing_page(tmp_path):
    with pytest.raises(ScanError):
        asyncio.run(TextFileDocumentSource([tmp_path / "missing.txt"]).scan())


def test_source_for_paths_selection():
    assert isinstance(source_for_paths(["a.txt", "b.TXT"]), TextFileDocumentSource)
    assert isinstance(source_for_paths(["a.png", "b.txt"]), TesseractDocumentSource)


def test_whisper_source_joins_segments(tmp_path):
    class FakeModel:
        def __init__(self):
            self.calls = []

        def transcribe(self, path, language=None, word_timestamps=False):
            self.calls.append((path, language))
            segments = iter([SimpleNamespace(text=" What does "), SimpleNamespace(text="this mean? "), SimpleNamespace(text=" ")])
            return segments, SimpleNamespace(language="en")

    model = FakeModel()
    audio = tmp_path / "question.wav"
    settings = SimpleNamespace(speech_language="en")
    text = asyncio.run(WhisperSpeechSource(audio, settings, model=model).transcribe())
    assert text == "What does this mean?"
    assert model.calls == [(str(audio), "en")]
