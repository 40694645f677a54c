"""Conversation message types sent to the model."""

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    """Speaker of a conversation message."""

    USER = "user"
    MODEL = "model"


@dataclass(frozen=True)
class Fragment:
    """One piece of message content: text, or inline bytes with a MIME type."""

    text: str | None = None
    data: bytes | None = None
    mime_type: str | None = None

    @classmethod
    def from_text(cls, text: str) -> "Fragment":
        return cls(text=text)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> "Fragment":
        return cls(data=data, mime_type=mime_type)

    @property
    def is_text(self) -> bool:
        return self.text is not None


@dataclass(frozen=True)
class ConversationMessage:
    """A role-tagged, ordered list of content fragments."""

    role: Role
    fragments: tuple[Fragment, ...] = field(default_factory=tuple)

    @classmethod
    def user(cls, text: str, *extra: Fragment) -> "ConversationMessage":
        return cls(Role.USER, (Fragment.from_text(text), *extra))

    @classmethod
    def model(cls, text: str) -> "ConversationMessage":
        return cls(Role.MODEL, (Fragment.from_text(text),))

    @property
    def text(self) -> str:
        """Concatenated text of all text fragments."""
        return "".join(f.text for f in self.fragments if f.text is not None)

    def same_as(self, other: "ConversationMessage | None") -> bool:
        """True when role and trimmed text match ``other``."""
        if other is None:
            return False
        return self.role == other.role and self.text.strip() == other.text.strip()
