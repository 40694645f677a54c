"""Command-line entry point for ask."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from config.settings import configure_working_dir, settings
from ask_cli import __version__
from ask_cli.args import (
    AdminActions,
    InvocationConfig,
    OperatingMode,
    UsageError,
    classify,
    parse_args,
    print_usage,
)
from ask_cli.context import ContextManager, ContextTier
from ask_cli.history import HistoryManager
from ask_cli.llm import GeminiClient, ModelCatalog, TransportError, load_model_catalog
from ask_cli.session import InputSession, SessionOrchestrator

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="ask",
    help="Ask Gemini from the terminal, with persistent history and project context.",
    add_completion=False,
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _usage_error(message: str, catalog: ModelCatalog) -> int:
    console.print(f"[red]Error:[/red] {escape(message)}")
    print_usage(console, catalog)
    return 1


def _run_admin(actions: AdminActions, history: HistoryManager, contexts: ContextManager) -> int:
    """Apply every requested history/context mutation."""
    try:
        if actions.clear_history:
            if history.clear():
                console.print(f"[green]Chat history cleared ({history.path}).[/green]")
            else:
                console.print("[yellow]No chat history to clear.[/yellow]")

        for tier, new_text, clear in (
            (ContextTier.LOCAL, actions.set_local, actions.clear_local),
            (ContextTier.GENERAL, actions.set_general, actions.clear_general),
        ):
            if clear:
                if contexts.clear(tier):
                    console.print(f"[green]{tier.value.capitalize()} context cleared.[/green]")
                else:
                    console.print(f"[yellow]No {tier.value} context to clear.[/yellow]")
            if new_text is not None:
                path = contexts.set(tier, new_text)
                console.print(f"[green]{tier.value.capitalize()} context set in {path}.[/green]")
                console.print("[yellow]It will be loaded while context is enabled.[/yellow]")
    except OSError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1
    return 0


def _define_context(config: InvocationConfig, contexts: ContextManager, session: InputSession) -> int:
    """Run the interactive local-context definition."""
    summarize = None
    if config.prompt:
        try:
            summarize = GeminiClient(config.model).summarize_context
        except TransportError as e:
            console.print(f"[yellow]Warning:[/yellow] {escape(str(e))} Enter the context manually.")

    try:
        saved = contexts.prompt_for_local_context(
            session.ask,
            force_new=config.force_new_context,
            initial_prompt=config.prompt,
            summarize=summarize,
        )
    except (EOFError, KeyboardInterrupt):
        console.print("\n[yellow]Context definition cancelled.[/yellow]")
        return 0
    except OSError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1

    if saved:
        console.print("[dim]The new context is used from the next run while context is enabled.[/dim]")
    else:
        console.print("[dim]Local context not saved.[/dim]")
    return 0


def run(argv: list[str]) -> int:
    """
    Resolve ``argv`` and run the selected mode.

    Returns:
        Process exit code
    """
    configure_working_dir(Path.cwd())
    catalog = load_model_catalog()
    try:
        parsed = parse_args(argv, catalog)
    except UsageError as e:
        _configure_logging(verbose=False)
        return _usage_error(str(e), catalog)

    _configure_logging(parsed.verbose)
    logger.debug(f"ask {__version__} argv={argv}")

    if parsed.help:
        print_usage(console, catalog)
        return 0

    contexts = ContextManager(console=console)
    history = HistoryManager()

    try:
        config = classify(parsed, local_context_exists=lambda: contexts.exists(ContextTier.LOCAL))
    except UsageError as e:
        return _usage_error(str(e), catalog)

    for warning in config.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")

    if config.mode == OperatingMode.ADMINISTRATIVE:
        return _run_admin(config.admin, history, contexts)

    with InputSession() as session:
        if config.mode == OperatingMode.DEFINE_CONTEXT:
            return _define_context(config, contexts, session)

        try:
            client = GeminiClient(config.model)
        except TransportError as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            return 1

        orchestrator = SessionOrchestrator(config, client, history, contexts, console=console)
        if config.mode == OperatingMode.CHAT:
            return orchestrator.run_chat(session.ask)
        return orchestrator.run_single_shot()


@app.command(
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "help_option_names": [],
    }
)
def ask(ctx: typer.Context) -> None:
    """Send a prompt, start a chat, or manage history and context."""
    raise typer.Exit(code=run(list(ctx.args)))


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
