"""Minimal demonstration: explain a text page, then ask a follow-up."""

import sys

from explain_core.api import service

if __name__ == "__main__":
    page = sys.argv[1] if len(sys.argv) > 1 else "README.md"
    scanned = service.explain_document([page])
    print("Explanation:", scanned["result"])
    followup = service.ask_question("What is the single most important point?")
    print("Follow-up:", followup["result"])
