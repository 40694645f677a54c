"""Interactive input and session orchestration."""

from ask_cli.session.input import InputSession
from ask_cli.session.orchestrator import FILE_PROMPT_TEMPLATE, SessionOrchestrator

__all__ = [
    "FILE_PROMPT_TEMPLATE",
    "InputSession",
    "SessionOrchestrator",
]
