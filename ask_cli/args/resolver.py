"""Argument parsing, mode classification and cross-flag validation."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from ask_cli.args.modes import OperatingMode, Toggle, effective_chat_memory, effective_context
from ask_cli.llm.catalog import ModelCatalog, load_model_catalog
from ask_cli.llm.gemini import GenerationParams

logger = logging.getLogger(__name__)


class UsageError(ValueError):
    """Malformed or contradictory command-line flags."""


VALUE_FLAGS = {
    "--image",
    "--file",
    "--system-instruction",
    "--max-tokens",
    "--temperature",
    "--set-context-local",
    "--set-context-general",
}

# Flags whose argument may be an empty string.
EMPTY_VALUE_ALLOWED = {"--set-context-local", "--set-context-general"}

SWITCH_FLAGS = {
    "--chat",
    "--stream",
    "--enable-chat-memory",
    "--disable-chat-memory",
    "--enable-context",
    "--disable-context",
    "--force-new-context",
    "--verbose",
    "--help",
    "--clear-history",
    "--clear-context-local",
    "--clear-context-general",
}

TEMPERATURE_RANGE = (0.0, 2.0)


@dataclass
class ParsedArgs:
    """Raw flag values collected from the argument vector."""

    model: str
    model_flags: list[str] = field(default_factory=list)
    prompt_parts: list[str] = field(default_factory=list)
    chat: bool = False
    stream: bool = False
    verbose: bool = False
    help: bool = False
    image_path: str | None = None
    file_path: str | None = None
    system_instruction: str | None = None
    max_output_tokens: int | None = None
    temperature: float | None = None
    chat_memory: Toggle = Toggle.UNSET
    context: Toggle = Toggle.UNSET
    force_new_context: bool = False
    clear_history: bool = False
    set_local: str | None = None
    clear_local: bool = False
    set_general: str | None = None
    clear_general: bool = False

    @property
    def prompt(self) -> str:
        return " ".join(self.prompt_parts)


@dataclass(frozen=True)
class AdminActions:
    """Requested mutations of stored history and context."""

    clear_history: bool = False
    set_local: str | None = None
    clear_local: bool = False
    set_general: str | None = None
    clear_general: bool = False

    @property
    def active(self) -> bool:
        return self.clear_history or self.touches_context

    @property
    def touches_context(self) -> bool:
        return (
            self.set_local is not None
            or self.clear_local
            or self.set_general is not None
            or self.clear_general
        )


@dataclass(frozen=True)
class InvocationConfig:
    """Validated, immutable result of argument resolution."""

    model: str
    mode: OperatingMode
    prompt: str = ""
    file_path: Path | None = None
    image_path: Path | None = None
    system_instruction: str | None = None
    generation: GenerationParams = field(default_factory=GenerationParams)
    stream: bool = False
    verbose: bool = False
    chat_memory: Toggle = Toggle.UNSET
    context: Toggle = Toggle.UNSET
    force_new_context: bool = False
    admin: AdminActions = field(default_factory=AdminActions)
    warnings: tuple[str, ...] = ()

    @property
    def use_chat_memory(self) -> bool:
        return effective_chat_memory(self.chat_memory, self.mode)

    @property
    def use_context(self) -> bool:
        return effective_context(self.context, self.mode)


def _take_value(argv: Sequence[str], index: int, flag: str, known_flags: set[str]) -> str:
    """Return the argument following ``flag`` or raise UsageError."""
    if index + 1 >= len(argv) or argv[index + 1] in known_flags:
        raise UsageError(f"{flag} requires an argument.")
    value = argv[index + 1]
    if value == "" and flag not in EMPTY_VALUE_ALLOWED:
        raise UsageError(f"{flag} requires a non-empty argument.")
    return value


def _parse_max_tokens(value: str) -> int:
    try:
        tokens = int(value)
    except ValueError:
        raise UsageError("--max-tokens requires a valid integer.") from None
    if tokens <= 0:
        raise UsageError("--max-tokens must be a positive integer.")
    return tokens


def _parse_temperature(value: str) -> float:
    try:
        temperature = float(value)
    except ValueError:
        raise UsageError("--temperature requires a valid number (e.g. 0.7).") from None
    low, high = TEMPERATURE_RANGE
    if not low <= temperature <= high:
        raise UsageError(f"--temperature must be between {low} and {high}.")
    return temperature


def parse_args(argv: Sequence[str], catalog: ModelCatalog | None = None) -> ParsedArgs:
    """
    Parse a flat argument vector.

    Flags may appear anywhere. Tokens that are not recognized flags are
    accumulated into the prompt in order.

    Raises:
        UsageError: If a flag argument is missing or invalid
    """
    catalog = catalog or load_model_catalog()
    known_flags = VALUE_FLAGS | SWITCH_FLAGS | set(catalog.flags)
    parsed = ParsedArgs(model=catalog.default)

    i = 0
    while i < len(argv):
        arg = argv[i]

        tier = catalog.by_flag(arg)
        if tier is not None:
            parsed.model = tier.model
            if arg not in parsed.model_flags:
                parsed.model_flags.append(arg)
            i += 1
            continue

        if arg in VALUE_FLAGS:
            value = _take_value(argv, i, arg, known_flags)
            if arg == "--image":
                parsed.image_path = value
            elif arg == "--file":
                parsed.file_path = value
            elif arg == "--system-instruction":
                parsed.system_instruction = value
            elif arg == "--max-tokens":
                parsed.max_output_tokens = _parse_max_tokens(value)
            elif arg == "--temperature":
                parsed.temperature = _parse_temperature(value)
            elif arg == "--set-context-local":
                parsed.set_local = value
            elif arg == "--set-context-general":
                parsed.set_general = value
            i += 2
            continue

        if arg == "--chat":
            parsed.chat = True
        elif arg == "--stream":
            parsed.stream = True
        elif arg == "--enable-chat-memory":
            parsed.chat_memory = Toggle.ON
        elif arg == "--disable-chat-memory":
            parsed.chat_memory = Toggle.OFF
        elif arg == "--enable-context":
            parsed.context = Toggle.ON
        elif arg == "--disable-context":
            parsed.context = Toggle.OFF
        elif arg == "--force-new-context":
            parsed.force_new_context = True
        elif arg == "--verbose":
            parsed.verbose = True
        elif arg == "--help":
            parsed.help = True
        elif arg == "--clear-history":
            parsed.clear_history = True
        elif arg == "--clear-context-local":
            parsed.clear_local = True
        elif arg == "--clear-context-general":
            parsed.clear_general = True
        else:
            parsed.prompt_parts.append(arg)
        i += 1

    return parsed


def _admin_conflicts(parsed: ParsedArgs) -> list[str]:
    """Names of chat/generation flags present alongside administrative flags."""
    checks = [
        ("--chat", parsed.chat),
        ("--stream", parsed.stream),
        ("prompt", bool(parsed.prompt)),
        ("--image", parsed.image_path is not None),
        ("--file", parsed.file_path is not None),
        ("--system-instruction", parsed.system_instruction is not None),
        ("--max-tokens", parsed.max_output_tokens is not None),
        ("--temperature", parsed.temperature is not None),
        ("--enable/--disable-chat-memory", parsed.chat_memory != Toggle.UNSET),
        ("--force-new-context", parsed.force_new_context),
        ("model flag", bool(parsed.model_flags)),
    ]
    return [name for name, present in checks if present]


def classify(
    parsed: ParsedArgs,
    local_context_exists: Callable[[], bool],
) -> InvocationConfig:
    """
    Validate cross-flag constraints and pick the operating mode.

    Args:
        parsed: Result of parse_args
        local_context_exists: Reports whether a non-empty local context is stored

    Returns:
        InvocationConfig with the selected mode and any warnings

    Raises:
        UsageError: On contradictory or incomplete flags
    """
    warnings: list[str] = []

    if len(parsed.model_flags) > 1:
        raise UsageError(f"Only one of {', '.join(parsed.model_flags)} may be given.")

    admin = AdminActions(
        clear_history=parsed.clear_history,
        set_local=parsed.set_local,
        clear_local=parsed.clear_local,
        set_general=parsed.set_general,
        clear_general=parsed.clear_general,
    )

    prompt = parsed.prompt
    has_file = parsed.file_path is not None
    has_image = parsed.image_path is not None

    if admin.active:
        conflicts = _admin_conflicts(parsed)
        if conflicts:
            raise UsageError(
                "Administrative options (--clear-*, --set-context-*) cannot be combined "
                f"with chat or generation options (found: {', '.join(conflicts)})."
            )
        if admin.set_local is not None and admin.clear_local:
            raise UsageError("--set-context-local and --clear-context-local cannot be used together.")
        if admin.set_general is not None and admin.clear_general:
            raise UsageError("--set-context-general and --clear-context-general cannot be used together.")
        if parsed.context == Toggle.OFF and admin.touches_context:
            warnings.append(
                "--disable-context was given together with a context set/clear. "
                "The set/clear will run, but context will NOT be used in this run."
            )
        mode = OperatingMode.ADMINISTRATIVE
    else:
        if parsed.chat_memory == Toggle.ON and not parsed.chat:
            raise UsageError("--enable-chat-memory only has an effect in --chat mode.")
        if parsed.chat_memory == Toggle.OFF and parsed.chat:
            warnings.append(
                "--disable-chat-memory in --chat mode means this conversation will not be "
                "saved to history. Use --clear-history if you want a fresh chat."
            )
        if parsed.force_new_context and (parsed.chat or not prompt or has_file or has_image):
            raise UsageError(
                "--force-new-context only works with a plain text prompt and no other input "
                "options. Provide an initial prompt for the new context."
            )
        if parsed.chat and (has_image or has_file):
            raise UsageError("--image and --file are not compatible with --chat.")
        if has_image and has_file:
            raise UsageError("--image and --file cannot be used together.")

        has_action = parsed.chat or bool(prompt) or has_file or has_image
        if parsed.force_new_context:
            mode = OperatingMode.DEFINE_CONTEXT
        elif not has_action:
            if local_context_exists():
                raise UsageError(
                    "A prompt, a file (--file), --chat, or --force-new-context with an "
                    "initial prompt is required."
                )
            mode = OperatingMode.DEFINE_CONTEXT
        elif parsed.chat:
            mode = OperatingMode.CHAT
        else:
            mode = OperatingMode.SINGLE_SHOT

    config = InvocationConfig(
        model=parsed.model,
        mode=mode,
        prompt=prompt,
        file_path=Path(parsed.file_path) if has_file else None,
        image_path=Path(parsed.image_path) if has_image else None,
        system_instruction=parsed.system_instruction,
        generation=GenerationParams(
            max_output_tokens=parsed.max_output_tokens,
            temperature=parsed.temperature,
        ),
        stream=parsed.stream,
        verbose=parsed.verbose,
        chat_memory=parsed.chat_memory,
        context=parsed.context,
        force_new_context=parsed.force_new_context,
        admin=admin,
        warnings=tuple(warnings),
    )
    logger.debug(f"Resolved mode={config.mode.value} model={config.model}")
    return config


def resolve(
    argv: Sequence[str],
    local_context_exists: Callable[[], bool],
    catalog: ModelCatalog | None = None,
) -> InvocationConfig:
    """Parse and classify in one step. ``--help`` is not handled here."""
    return classify(parse_args(argv, catalog), local_context_exists)
