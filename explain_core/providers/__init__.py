"""Chat-completion integration layer.

- base: the ChatCompletionClient protocol.
- chat_completions: the httpx implementation and the response reducer.
"""

from typing import Optional

from explain_core.config.settings import settings
from explain_core.providers.base import ChatCompletionClient
from explain_core.providers.chat_completions import ChatCompletionsClient


def create_client(cfg: Optional[object] = None) -> ChatCompletionClient:
    """Build the chat-completion client, defaulting to the global settings."""

    return ChatCompletionsClient(cfg or settings)
