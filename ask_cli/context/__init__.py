"""Context primer components."""

from ask_cli.context.manager import PRIMER_ACK, TIER_LABELS, ContextManager, ContextTier

__all__ = [
    "ContextManager",
    "ContextTier",
    "PRIMER_ACK",
    "TIER_LABELS",
]
