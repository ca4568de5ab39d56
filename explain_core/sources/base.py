"""Text producer protocols.

A producer runs one user-initiated session (a document scan or a speech
session) and hands back one finished string. Producers never touch
conversation state; they only feed ConversationOrchestrator.
"""

from typing import Iterable, Protocol, Sequence


class DocumentSource(Protocol):
    """Scan pages and return their recognized text."""

    async def scan(self) -> str:
        ...


class SpeechSource(Protocol):
    """Run one speech session and return the final transcript."""

    async def transcribe(self) -> str:
        ...


def join_page_texts(pages: Iterable[Sequence[str]]) -> str:
    """Concatenate recognized lines of every page in capture order.

    Each line is followed by one space, so the result keeps a trailing
    separator: [["Page one."], ["Page two."]] -> "Page one. Page two. ".
    """

    return "".join(f"{line} " for page in pages for line in page)
