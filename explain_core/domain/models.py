"""Shared chat and result data models.

- ChatMessage: one role-tagged message of the conversation.
- ChatRequest: the request handed to a chat-completion client.
- ErrorKind: why a submission produced no explanation.
- ExplainResult: success-or-error value returned by the reducer and by
  ConversationOrchestrator.submit_text.
- OrchestratorState: snapshot of the observable state for the presentation layer.

Clients convert between these models and the wire JSON; nothing else should
build request dictionaries by hand.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Optional, List


# Roles accepted by OpenAI-compatible chat-completion endpoints
Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """One conversation message. Immutable once appended to a history."""

    role: Role
    content: str

    def to_payload(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatRequest:
    """A complete chat-completion request.

    `messages` is the whole conversation history, system message first.
    """

    model: str
    messages: List[ChatMessage] = field(default_factory=list)

    def to_payload(self) -> dict:
        return {
            "model": self.model,
            "messages": [m.to_payload() for m in self.messages],
        }


class ErrorKind(str, Enum):
    NOT_READY = "not_ready"
    REQUEST_IN_FLIGHT = "request_in_flight"
    TRANSPORT_FAILURE = "transport_failure"
    SERVER_ERROR = "server_error"
    UNPARSEABLE_RESPONSE = "unparseable_response"
    RESPONSE_UNUSABLE = "response_unusable"


@dataclass(frozen=True)
class ExplainResult:
    """Either an explanation (`content`) or a failure (`error`).

    `detail` carries diagnostic text for logs; it is never shown to the user.
    """

    content: Optional[str] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, content: str) -> "ExplainResult":
        return cls(content=content)

    @classmethod
    def failure(cls, error: ErrorKind, detail: Optional[str] = None) -> "ExplainResult":
        return cls(error=error, detail=detail)


@dataclass(frozen=True)
class OrchestratorState:
    """What the presentation layer renders."""

    result: Optional[str]
    document_scanned: bool
    busy: bool
    listening: bool
    history_length: int
