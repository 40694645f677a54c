import pytest

from ask_cli.args import OperatingMode, Toggle, UsageError, effective, parse_args, resolve
from ask_cli.llm.catalog import ModelCatalog

CATALOG = ModelCatalog()


def no_context():
    return False


def has_context():
    return True


def must_not_check():
    raise AssertionError("local context lookup was not expected")


def run(argv, local_context_exists=must_not_check):
    return resolve(argv, local_context_exists, CATALOG)


def test_bare_prompt_is_single_shot():
    config = run(["what", "is", "a", "monad?"])
    assert config.mode == OperatingMode.SINGLE_SHOT
    assert config.prompt == "what is a monad?"
    assert config.model == CATALOG.default
    assert config.warnings == ()


def test_flags_may_appear_anywhere():
    config = run(["explain", "--stream", "this", "--temperature", "0.7", "code"])
    assert config.prompt == "explain this code"
    assert config.stream is True
    assert config.generation.temperature == 0.7


def test_model_tier_selects_model():
    assert run(["--pro", "hi"]).model == "gemini-2.5-pro"
    assert run(["hi", "--lite"]).model == "gemini-2.5-flash-lite"


def test_two_model_tiers_conflict():
    with pytest.raises(UsageError, match="--pro"):
        run(["--pro", "--lite", "hi"])


def test_repeated_model_tier_is_allowed():
    assert run(["--pro", "--pro", "hi"]).model == "gemini-2.5-pro"


def test_no_action_without_local_context_defines_context():
    config = run([], no_context)
    assert config.mode == OperatingMode.DEFINE_CONTEXT
    assert config.force_new_context is False


def test_no_action_with_local_context_is_missing_action():
    with pytest.raises(UsageError, match="required"):
        run([], has_context)


def test_verbose_alone_still_needs_an_action():
    with pytest.raises(UsageError):
        run(["--verbose"], has_context)


def test_chat_runs_even_without_local_context():
    config = run(["--chat"])
    assert config.mode == OperatingMode.CHAT
    assert config.use_chat_memory is True
    assert config.use_context is True


def test_chat_rejects_file_and_image():
    with pytest.raises(UsageError, match="--chat"):
        run(["--chat", "--file", "notes.txt"])
    with pytest.raises(UsageError, match="--chat"):
        run(["--chat", "--image", "pic.png"])


def test_image_and_file_together_conflict():
    with pytest.raises(UsageError, match="cannot be used together"):
        run(["--image", "pic.png", "--file", "notes.txt", "describe"])


def test_file_without_prompt_is_single_shot():
    config = run(["--file", "notes.txt"])
    assert config.mode == OperatingMode.SINGLE_SHOT
    assert config.file_path.name == "notes.txt"


def test_administrative_flags_select_administrative_mode():
    config = run(["--clear-history", "--clear-context-general", "--verbose"])
    assert config.mode == OperatingMode.ADMINISTRATIVE
    assert config.admin.clear_history is True
    assert config.admin.clear_general is True
    assert config.verbose is True


@pytest.mark.parametrize(
    "extra",
    [
        ["--chat"],
        ["--stream"],
        ["some", "prompt"],
        ["--file", "a.txt"],
        ["--image", "a.png"],
        ["--system-instruction", "be terse"],
        ["--max-tokens", "10"],
        ["--temperature", "1"],
        ["--enable-chat-memory"],
        ["--disable-chat-memory"],
        ["--force-new-context"],
        ["--flash"],
    ],
)
def test_administrative_flags_are_exclusive(extra):
    with pytest.raises(UsageError, match="Administrative"):
        run(["--clear-history", *extra])


def test_set_context_accepts_empty_text():
    config = run(["--set-context-local", ""])
    assert config.mode == OperatingMode.ADMINISTRATIVE
    assert config.admin.set_local == ""


def test_set_and_clear_same_tier_conflict():
    with pytest.raises(UsageError, match="--set-context-local"):
        run(["--set-context-local", "x", "--clear-context-local"])


@pytest.mark.parametrize("tier", ["local", "general"])
def test_empty_set_and_clear_same_tier_conflict(tier):
    with pytest.raises(UsageError, match=f"--set-context-{tier}"):
        run([f"--set-context-{tier}", "", f"--clear-context-{tier}"])


def test_set_local_and_clear_general_is_fine():
    config = run(["--set-context-local", "x", "--clear-context-general"])
    assert config.admin.set_local == "x"
    assert config.admin.clear_general is True


def test_disable_context_with_context_mutation_warns():
    config = run(["--disable-context", "--clear-context-local"])
    assert config.mode == OperatingMode.ADMINISTRATIVE
    assert len(config.warnings) == 1
    assert "--disable-context" in config.warnings[0]


def test_enable_chat_memory_outside_chat_is_error():
    with pytest.raises(UsageError, match="--enable-chat-memory"):
        run(["--enable-chat-memory", "hi"])


def test_disable_chat_memory_in_chat_warns():
    config = run(["--chat", "--disable-chat-memory"])
    assert config.mode == OperatingMode.CHAT
    assert config.use_chat_memory is False
    assert any("--disable-chat-memory" in w for w in config.warnings)


def test_disable_chat_memory_in_single_shot_stops_recording():
    config = run(["--disable-chat-memory", "hi"])
    assert config.use_chat_memory is False


def test_disable_context():
    assert run(["--disable-context", "hi"]).use_context is False
    assert run(["hi"]).use_context is True


def test_force_new_context_with_prompt_defines_context():
    config = run(["--force-new-context", "I", "build", "games"])
    assert config.mode == OperatingMode.DEFINE_CONTEXT
    assert config.force_new_context is True
    assert config.prompt == "I build games"


@pytest.mark.parametrize(
    "argv",
    [
        ["--force-new-context"],
        ["--force-new-context", "--chat", "x"],
        ["--force-new-context", "--file", "a.txt", "x"],
        ["--force-new-context", "--image", "a.png", "x"],
    ],
)
def test_force_new_context_requires_plain_prompt(argv):
    with pytest.raises(UsageError, match="--force-new-context"):
        run(argv)


@pytest.mark.parametrize("flag", ["--file", "--image", "--system-instruction", "--max-tokens", "--set-context-local"])
def test_missing_flag_argument(flag):
    with pytest.raises(UsageError, match="requires an argument"):
        run(["hi", flag])


def test_flag_is_not_taken_as_argument():
    with pytest.raises(UsageError, match="--file requires an argument"):
        run(["--file", "--chat"])


def test_empty_path_is_rejected():
    with pytest.raises(UsageError, match="non-empty"):
        run(["--file", "", "hi"])


@pytest.mark.parametrize("value", ["abc", "0", "-5", "1.5"])
def test_invalid_max_tokens(value):
    with pytest.raises(UsageError, match="--max-tokens"):
        run(["--max-tokens", value, "hi"])


@pytest.mark.parametrize("value", ["warm", "2.5", "-0.1"])
def test_invalid_temperature(value):
    with pytest.raises(UsageError, match="--temperature"):
        run(["--temperature", value, "hi"])


def test_generation_params():
    config = run(["--max-tokens", "256", "--temperature", "0", "--system-instruction", "be brief", "hi"])
    assert config.generation.max_output_tokens == 256
    assert config.generation.temperature == 0.0
    assert config.system_instruction == "be brief"


def test_help_is_recorded_not_prompted():
    parsed = parse_args(["--help"], CATALOG)
    assert parsed.help is True
    assert parsed.prompt == ""


def test_effective_toggle():
    assert effective(Toggle.UNSET, True) is True
    assert effective(Toggle.UNSET, False) is False
    assert effective(Toggle.ON, False) is True
    assert effective(Toggle.OFF, True) is False
