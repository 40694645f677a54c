"""Usage panel shown for --help and after usage errors."""

from rich.console import Console
from rich.panel import Panel

from config.settings import settings
from ask_cli.llm.catalog import ModelCatalog


def usage_text(catalog: ModelCatalog) -> str:
    """Build the usage text with rich markup."""
    model_lines = "\n".join(
        f"  [cyan]{tier.flag:<28}[/cyan] {tier.model} ({tier.description})"
        for tier in catalog.tiers
    )
    return (
        '[bold]Usage:[/bold] ask \\[options] "your question"\n'
        "       ask --chat \\[options]\n\n"
        "[bold]Models[/bold] (mutually exclusive, default "
        f"[green]{catalog.default}[/green]):\n"
        f"{model_lines}\n\n"
        "[bold]Input:[/bold]\n"
        "  [cyan]--chat[/cyan]                       Interactive chat ('exit' or 'quit' to leave)\n"
        "  [cyan]--stream[/cyan]                     Print the response as it is generated\n"
        "  [cyan]--file <PATH>[/cyan]                Ask a question about a text file\n"
        "  [cyan]--image <PATH>[/cyan]               Attach an image (png, jpg, jpeg, webp, gif)\n\n"
        "[bold]Generation:[/bold]\n"
        '  [cyan]--system-instruction "<TEXT>"[/cyan] Define the role or behavior of the model\n'
        "  [cyan]--max-tokens <N>[/cyan]             Maximum output tokens (positive integer)\n"
        "  [cyan]--temperature <T>[/cyan]            Sampling temperature, 0.0 to 2.0\n\n"
        "[bold]Memory and context:[/bold]\n"
        "  [cyan]--enable-chat-memory[/cyan]         Load and save history in --chat (default)\n"
        "  [cyan]--disable-chat-memory[/cyan]        Do not load or save history\n"
        "  [cyan]--enable-context[/cyan]             Use local and general context (default)\n"
        "  [cyan]--disable-context[/cyan]            Ignore stored context for this run\n"
        "  [cyan]--force-new-context[/cyan]          Redefine the local context from a prompt\n\n"
        "[bold]Administration[/bold] (cannot be combined with the options above):\n"
        "  [cyan]--clear-history[/cyan]              Delete the chat history\n"
        '  [cyan]--set-context-local "<TEXT>"[/cyan]  Set the local (directory) context\n'
        "  [cyan]--clear-context-local[/cyan]        Delete the local context\n"
        '  [cyan]--set-context-general "<TEXT>"[/cyan] Set the general (user) context\n'
        "  [cyan]--clear-context-general[/cyan]      Delete the general context\n\n"
        "[bold]Other:[/bold]\n"
        "  [cyan]--verbose[/cyan]                    Debug logging\n"
        "  [cyan]--help[/cyan]                       Show this help\n\n"
        "[dim]Files:[/dim]\n"
        f"  [dim]history {settings.history_file}[/dim]\n"
        f"  [dim]local context {settings.local_context_file}[/dim]\n"
        f"  [dim]general context {settings.general_context_file}[/dim]"
    )


def print_usage(console: Console, catalog: ModelCatalog) -> None:
    console.print(Panel(usage_text(catalog), title="ask"))
