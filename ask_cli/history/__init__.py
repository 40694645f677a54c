"""Chat history components."""

from ask_cli.history.manager import HistoryManager, StoredExchange, messages_to_exchanges

__all__ = [
    "HistoryManager",
    "StoredExchange",
    "messages_to_exchanges",
]
