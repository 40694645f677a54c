"""Gemini command-line client with persistent history and project context."""

__version__ = "0.9.0"
