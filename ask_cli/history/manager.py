"""Chat history persistence and conversion to conversation messages."""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from config.settings import settings
from ask_cli.llm.messages import ConversationMessage, Role
from ask_cli.store.files import JsonListStore

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class StoredExchange:
    """One persisted prompt/response pair."""

    prompt: str
    response: str
    model: str = ""
    timestamp: str = field(default_factory=_now_iso)

    @classmethod
    def from_record(cls, record: Any) -> "StoredExchange | None":
        """Build from a stored JSON object; returns None for unusable records."""
        if not isinstance(record, dict):
            return None
        return cls(
            prompt=str(record.get("prompt") or ""),
            response=str(record.get("response") or ""),
            model=str(record.get("model") or ""),
            timestamp=str(record.get("timestamp") or ""),
        )

    def to_record(self) -> dict[str, str]:
        return asdict(self)

    @property
    def is_empty(self) -> bool:
        return not self.prompt and not self.response

    def to_messages(self) -> list[ConversationMessage]:
        return [
            ConversationMessage.user(self.prompt),
            ConversationMessage.model(self.response),
        ]


def messages_to_exchanges(
    messages: Sequence[ConversationMessage],
    model: str = "",
) -> list[StoredExchange]:
    """
    Pair user/model messages into stored exchanges.

    Consecutive messages with the same role are merged (newline-joined)
    before pairing. A trailing user message without a reply is dropped,
    and so is a model message with no preceding user message.
    """
    merged: list[tuple[Role, str]] = []
    for msg in messages:
        text = msg.text.strip()
        if not text:
            continue
        if merged and merged[-1][0] == msg.role:
            role, previous = merged[-1]
            if previous != text:
                merged[-1] = (role, f"{previous}\n{text}")
            continue
        merged.append((msg.role, text))

    exchanges: list[StoredExchange] = []
    pending_prompt: str | None = None
    for role, text in merged:
        if role == Role.USER:
            pending_prompt = text
        elif pending_prompt is not None:
            exchanges.append(StoredExchange(prompt=pending_prompt, response=text, model=model))
            pending_prompt = None

    return exchanges


class HistoryManager:
    """Loads, saves and clears the chat history file."""

    def __init__(
        self,
        path: Path | None = None,
        load_pairs: int | None = None,
        keep_pairs: int | None = None,
    ) -> None:
        """Initialize the history manager.

        Args:
            path: History file. Defaults to settings.history_file.
            load_pairs: Exchanges fed back to the model on load.
            keep_pairs: Exchanges retained on disk after a save.
        """
        self._store = JsonListStore(path or settings.history_file)
        self.load_pairs = load_pairs if load_pairs is not None else settings.history_load_pairs
        self.keep_pairs = keep_pairs if keep_pairs is not None else settings.history_keep_pairs

    @property
    def path(self) -> Path:
        return self._store.path

    def records(self) -> list[StoredExchange]:
        """Return every usable stored exchange, oldest first."""
        exchanges = []
        for record in self._store.read_list():
            exchange = StoredExchange.from_record(record)
            if exchange is None:
                logger.debug(f"Skipping malformed history record: {record!r}")
                continue
            exchanges.append(exchange)
        return exchanges

    def load(self) -> list[ConversationMessage]:
        """
        Load recent history as conversation messages.

        Returns:
            Alternating user/model messages for the most recent exchanges.
            Never raises on a missing or corrupt file.
        """
        recent = self.records()[-self.load_pairs:] if self.load_pairs > 0 else []
        messages: list[ConversationMessage] = []
        for exchange in recent:
            if exchange.is_empty:
                continue
            messages.extend(exchange.to_messages())

        logger.debug(f"Loaded {len(messages) // 2} exchanges from {self.path}")
        return messages

    def save(self, turns: Sequence[ConversationMessage], model: str = "") -> int:
        """
        Append the given turns to the stored history.

        ``turns`` holds only the messages produced since the previous save.
        The file is rewritten with at most ``keep_pairs`` exchanges.

        Returns:
            Number of exchanges appended.
        """
        return self.append_exchanges(messages_to_exchanges(turns, model=model))

    def append(self, prompt: str, response: str, model: str = "") -> None:
        """Append a single exchange."""
        self.append_exchanges([StoredExchange(prompt=prompt, response=response, model=model)])

    def append_exchanges(self, exchanges: Sequence[StoredExchange]) -> int:
        combined = [e.to_record() for e in self.records()]
        combined.extend(e.to_record() for e in exchanges)
        if self.keep_pairs > 0:
            combined = combined[-self.keep_pairs:]
        else:
            combined = []

        self._store.write_list(combined)
        logger.debug(f"Saved {len(exchanges)} new exchanges ({len(combined)} retained)")
        return len(exchanges)

    def clear(self) -> bool:
        """Delete the history file. Returns True if one existed."""
        return self._store.delete()
