"""Scoped interactive line input."""

import logging
import sys
from typing import Any, Callable

from prompt_toolkit import PromptSession

logger = logging.getLogger(__name__)


class InputSession:
    """
    Owns the prompt_toolkit session used for every interactive read.

    The session is created on first use. When stdin is not a terminal the
    builtin ``input`` is used instead. Use as a context manager so the
    session is released on every exit path.
    """

    def __init__(self, session_factory: Callable[[], Any] | None = None) -> None:
        self._factory = session_factory or PromptSession
        self._session: Any = None
        self._closed = False

    def __enter__(self) -> "InputSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def ask(self, prompt: str) -> str:
        """
        Read one line.

        Raises:
            EOFError: At end of input, or after the session was closed
            KeyboardInterrupt: On Ctrl-C
        """
        if self._closed:
            raise EOFError("Input session is closed")

        if not sys.stdin.isatty():
            return input(prompt)

        if self._session is None:
            self._session = self._factory()
            logger.debug("Prompt session created")
        return self._session.prompt(prompt)

    def close(self) -> None:
        if self._session is not None:
            logger.debug("Prompt session closed")
        self._session = None
        self._closed = True
