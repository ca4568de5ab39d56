"""Conversation orchestrator.

Owns the conversation history, the scan gate and the observable result, and
merges the single in-flight chat-completion call back into that state.

All state is mutated on the event loop that runs these coroutines; the await
on the client is the only suspension point in submit_text.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4
import asyncio
import logging
import time

from explain_core.domain.conversation import ConversationHistory
from explain_core.domain.exceptions import BusinessError
from explain_core.domain.models import (
    ChatMessage,
    ChatRequest,
    ErrorKind,
    ExplainResult,
    OrchestratorState,
)
from explain_core.providers.base import ChatCompletionClient
from explain_core.sources.base import DocumentSource, SpeechSource
from explain_core.prompts import load_system_prompt
from explain_core.infrastructure.logging.logger import logger


NOT_READY_MESSAGE = "Please scan a document or notes before asking a question."
FAILURE_MESSAGE = "Sorry, the explanation failed. Please try again."

StateListener = Callable[[OrchestratorState], None]


@dataclass
class OrchestratorConfig:
    """Per-orchestrator behaviour.

    Attributes:
        model: model id sent with every request.
        surface_failures: show FAILURE_MESSAGE when a request fails.
        record_assistant_replies: append successful replies to the history.
        prompt_locale: directory of the system prompt under prompts/.
    """

    model: str = "gpt-3.5-turbo"
    surface_failures: bool = True  # False keeps the previous result on failure
    record_assistant_replies: bool = False
    prompt_locale: str = "en"

    @classmethod
    def from_settings(cls, cfg: Any) -> "OrchestratorConfig":
        return cls(
            model=getattr(cfg, "chat_model", cls.model),
            surface_failures=getattr(cfg, "surface_failures", cls.surface_failures),
            record_assistant_replies=getattr(cfg, "record_assistant_replies", cls.record_assistant_replies),
            prompt_locale=getattr(cfg, "prompt_locale", cls.prompt_locale),
        )


class ConversationOrchestrator:
    def __init__(
        self,
        client: ChatCompletionClient,
        config: Optional[OrchestratorConfig] = None,
        system_prompt: Optional[str] = None,
    ):
        self._client = client
        self._config = config or OrchestratorConfig()
        self._history = ConversationHistory(system_prompt or load_system_prompt(self._config.prompt_locale))
        self._document_scanned = False
        self._result: Optional[str] = None
        self._busy = False
        self._listening = False
        self._in_flight = False
        self._listeners: List[StateListener] = []

    # ---- observable state ----

    @property
    def history(self) -> Tuple[ChatMessage, ...]:
        return self._history.snapshot()

    @property
    def result(self) -> Optional[str]:
        return self._result

    @property
    def document_scanned(self) -> bool:
        return self._document_scanned

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def listening(self) -> bool:
        return self._listening

    def state(self) -> OrchestratorState:
        return OrchestratorState(
            result=self._result,
            document_scanned=self._document_scanned,
            busy=self._busy,
            listening=self._listening,
            history_length=len(self._history),
        )

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        snapshot = self.state()
        for listener in list(self._listeners):
            listener(snapshot)

    # ---- core operations ----

    async def submit_text(self, text: str, is_override: bool = False) -> ExplainResult:
        """Send `text` as the next user turn and merge the reply into state.

        Args:
            text: recognized document text, transcript or typed query.
            is_override: True for manual queries, which skip the scan gate.

        Returns:
            ExplainResult with the explanation, or the ErrorKind that stopped it.
            The user turn stays in the history even when the call fails.
        """
        if not self._document_scanned and not is_override:
            self._result = NOT_READY_MESSAGE
            self._notify()
            return ExplainResult.failure(ErrorKind.NOT_READY)

        if self._in_flight:
            self._log(logging.WARNING, "Rejected submission while a request is in flight", {})
            return ExplainResult.failure(ErrorKind.REQUEST_IN_FLIGHT)

        # Flag is set before the first await so a concurrent submit sees it
        self._in_flight = True
        self._history.append("user", text)
        req = ChatRequest(model=self._config.model, messages=list(self._history.snapshot()))
        log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "client": getattr(self._client, "name", None),
            "history_length": len(req.messages),
            "override": is_override,
        }
        self._busy = True
        self._notify()
        start_time = time.time()
        try:
            content = await self._client.complete(req)
        except BusinessError as e:
            self._log(
                logging.ERROR,
                "Explanation request failed",
                log_ctx,
                code=e.code,
                error=e.message,
                http_status=e.http_status,
                elapsed_seconds=round(time.time() - start_time, 2),
            )
            if self._config.surface_failures:
                self._result = FAILURE_MESSAGE
            return ExplainResult.failure(e.kind, e.message)
        else:
            self._result = content
            self._document_scanned = True
            if self._config.record_assistant_replies:
                self._history.append("assistant", content)
            self._log(
                logging.INFO,
                "Explanation received",
                log_ctx,
                elapsed_seconds=round(time.time() - start_time, 2),
            )
            return ExplainResult.success(content)
        finally:
            self._in_flight = False
            self._busy = False
            self._notify()

    def reset_conversation(self) -> None:
        """Drop every turn; only the original system message remains."""
        self._history.reset()
        self._log(logging.INFO, "Conversation reset", {})
        self._notify()

    # ---- producer entry points ----

    def begin_scan(self) -> None:
        """Start a new scan session: clear the result and close the gate."""
        self._result = None
        self._document_scanned = False
        self._notify()

    async def on_document_scanned(self, text: str) -> ExplainResult:
        if text.strip():
            self._document_scanned = True
        else:
            self._log(logging.WARNING, "Scan produced no text", {})
        return await self.submit_text(text)

    async def on_speech_session_ended(self, text: str) -> ExplainResult:
        return await self.submit_text(text)

    async def search(self, query: str) -> ExplainResult:
        return await self.submit_text(query, is_override=True)

    async def scan_document(self, source: DocumentSource) -> ExplainResult:
        """Run one scan session and submit the recognized text.

        ScanError from the source propagates; the gate stays closed.
        """
        self.begin_scan()
        text = await source.scan()
        return await self.on_document_scanned(text)

    async def listen(self, source: SpeechSource) -> ExplainResult:
        """Run one speech session and submit the transcript.

        Cancelling this coroutine while it is listening stops the session and
        submits nothing. Once the transcript is submitted the request runs as
        its own task, so cancelling here no longer reaches it.
        """
        self._listening = True
        self._notify()
        try:
            text = await source.transcribe()
        finally:
            self._listening = False
            self._notify()
        submission = asyncio.ensure_future(self.on_speech_session_ended(text))
        return await asyncio.shield(submission)

    def _log(self, level: int, msg: str, ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(ctx)
        payload.update(fields)
        logger.log(level, msg, extra={"extra": payload})
