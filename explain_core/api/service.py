"""Synchronous service facade.

Simple function entry points for scripts and other callers that do not run an
event loop. All of them share one process-wide orchestrator, so the
conversation history carries over between calls.
"""

import asyncio
from typing import Any, Dict, Iterable, Optional

from explain_core.config.settings import settings
from explain_core.agents.orchestrator import ConversationOrchestrator, OrchestratorConfig
from explain_core.domain.models import ExplainResult
from explain_core.providers import create_client
from explain_core.sources import WhisperSpeechSource, source_for_paths
from explain_core.infrastructure.logging.logger import logger


_orchestrator: Optional[ConversationOrchestrator] = None


def get_default_orchestrator() -> ConversationOrchestrator:
    """Return the shared orchestrator, building it on first use.

    Raises:
        ConfigurationError: API_ENDPOINT is missing or invalid.
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ConversationOrchestrator(
            client=create_client(settings),
            config=OrchestratorConfig.from_settings(settings),
        )
    return _orchestrator


def _to_dict(result: ExplainResult) -> Dict[str, Any]:
    orchestrator = get_default_orchestrator()
    state = orchestrator.state()
    return {
        "ok": result.ok,
        "content": result.content,
        "error": result.error.value if result.error else None,
        "result": state.result,
        "document_scanned": state.document_scanned,
        "history_length": state.history_length,
    }


def explain_document(paths: Iterable[str]) -> Dict[str, Any]:
    """Scan the given pages (images or .txt files) and explain them.

    Args:
        paths: page files in capture order

    Returns:
        dict with ok / content / error and the resulting observable state
    """
    orchestrator = get_default_orchestrator()
    paths = list(paths)
    try:
        result = asyncio.run(orchestrator.scan_document(source_for_paths(paths, settings)))
    except Exception as e:
        logger.error(f"Scan failed: {e}", extra={"extra": {
            "paths": paths,
            "error": str(e),
        }})
        raise
    return _to_dict(result)


def ask_question(question: str) -> Dict[str, Any]:
    """Ask a follow-up question about the scanned document."""
    orchestrator = get_default_orchestrator()
    return _to_dict(asyncio.run(orchestrator.on_speech_session_ended(question)))


def ask_by_voice(audio_path: str) -> Dict[str, Any]:
    """Transcribe a recorded question and ask it."""
    orchestrator = get_default_orchestrator()
    return _to_dict(asyncio.run(orchestrator.listen(WhisperSpeechSource(audio_path, settings))))


def search(query: str) -> Dict[str, Any]:
    """Send a manual query; it does not require a scanned document."""
    orchestrator = get_default_orchestrator()
    return _to_dict(asyncio.run(orchestrator.search(query)))


def reset_conversation() -> None:
    get_default_orchestrator().reset_conversation()


def current_state() -> Dict[str, Any]:
    state = get_default_orchestrator().state()
    return {
        "result": state.result,
        "document_scanned": state.document_scanned,
        "busy": state.busy,
        "listening": state.listening,
        "history_length": state.history_length,
    }
