"""System prompt loading.

The instruction prompt lives in prompts/<locale>/explain_system.md and becomes
the first ChatMessage(role="system") of every conversation.
"""

from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent


def load_system_prompt(locale: str = "en") -> str:
    """Load the system prompt text for the given locale."""

    fname = PROMPTS_DIR / locale / "explain_system.md"
    return fname.read_text(encoding="utf-8").strip()
