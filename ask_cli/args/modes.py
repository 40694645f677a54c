"""Operating modes and tri-state toggles."""

from dataclasses import dataclass
from enum import Enum


class OperatingMode(str, Enum):
    """Mutually exclusive ways an invocation can run."""

    ADMINISTRATIVE = "administrative"
    DEFINE_CONTEXT = "define-context"
    CHAT = "chat"
    SINGLE_SHOT = "single-shot"


class Toggle(str, Enum):
    """A boolean flag that may also be left unset."""

    UNSET = "unset"
    ON = "on"
    OFF = "off"


@dataclass
class ModeConfig:
    """Toggle defaults for an operating mode."""

    chat_memory_default: bool
    context_default: bool


# Mode configurations
MODE_CONFIGS: dict[OperatingMode, ModeConfig] = {
    OperatingMode.ADMINISTRATIVE: ModeConfig(chat_memory_default=False, context_default=True),
    OperatingMode.DEFINE_CONTEXT: ModeConfig(chat_memory_default=False, context_default=True),
    OperatingMode.CHAT: ModeConfig(chat_memory_default=True, context_default=True),
    # Records the exchange; history is never fed back in this mode.
    OperatingMode.SINGLE_SHOT: ModeConfig(chat_memory_default=True, context_default=True),
}


def effective(toggle: Toggle, default: bool) -> bool:
    """Resolve a tri-state toggle to a boolean."""
    if toggle == Toggle.UNSET:
        return default
    return toggle == Toggle.ON


def effective_chat_memory(toggle: Toggle, mode: OperatingMode) -> bool:
    return effective(toggle, MODE_CONFIGS[mode].chat_memory_default)


def effective_context(toggle: Toggle, mode: OperatingMode) -> bool:
    return effective(toggle, MODE_CONFIGS[mode].context_default)
