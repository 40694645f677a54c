"""Argument parsing and mode resolution."""

from ask_cli.args.modes import (
    MODE_CONFIGS,
    ModeConfig,
    OperatingMode,
    Toggle,
    effective,
)
from ask_cli.args.resolver import (
    AdminActions,
    InvocationConfig,
    ParsedArgs,
    UsageError,
    classify,
    parse_args,
    resolve,
)
from ask_cli.args.usage import print_usage, usage_text

__all__ = [
    "AdminActions",
    "InvocationConfig",
    "MODE_CONFIGS",
    "ModeConfig",
    "OperatingMode",
    "ParsedArgs",
    "Toggle",
    "UsageError",
    "classify",
    "effective",
    "parse_args",
    "print_usage",
    "resolve",
    "usage_text",
]
