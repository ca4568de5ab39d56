"""Chat-completion client protocol.

The orchestrator never touches HTTP directly; it depends on this protocol so
tests can hand it a fake and other backends can be plugged in.
"""

from typing import Protocol
from explain_core.domain.models import ChatRequest


class ChatCompletionClient(Protocol):
    """Chat-completion client.

    - name: client name, used in logs.
    - complete(req): send one request, return the explanation text or raise a
      BusinessError subclass (NetworkError / ApiError / ResponseParseError).
    """

    name: str

    async def complete(self, req: ChatRequest) -> str:
        ...
