from typing import List, Tuple

from .models import ChatMessage, Role


class ConversationHistory:
    """Ordered, append-only list of messages sent as context on every request.

    The first message is always the system instruction. Only reset() rebuilds
    the list, and it restores that same single system message.
    """

    def __init__(self, system_prompt: str):
        self._system_message = ChatMessage(role="system", content=system_prompt)
        self._messages: List[ChatMessage] = [self._system_message]

    @property
    def system_message(self) -> ChatMessage:
        return self._system_message

    def append(self, role: Role, content: str) -> ChatMessage:
        if role == "system":
            raise ValueError("system message is fixed at the start of the history")
        message = ChatMessage(role=role, content=content)
        self._messages.append(message)
        return message

    def reset(self) -> None:
        self._messages = [self._system_message]

    def snapshot(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(list(self._messages))
