"""Explain Core top-level package.

Scan a document, send its text to a chat-completion endpoint and keep a
follow-up conversation about it: configuration, domain models, the HTTP
client, text producers (OCR, speech) and the conversation orchestrator.
"""

from explain_core.agents.orchestrator import ConversationOrchestrator, OrchestratorConfig

__all__ = ["ConversationOrchestrator", "OrchestratorConfig"]
