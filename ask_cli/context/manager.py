"""Local and general context primers."""

import logging
from enum import Enum
from pathlib import Path
from typing import Callable

from rich.console import Console
from rich.markup import escape

from config.settings import settings
from ask_cli.llm.gemini import TransportError
from ask_cli.llm.messages import ConversationMessage, Role
from ask_cli.store.files import FileStore

logger = logging.getLogger(__name__)


class ContextTier(str, Enum):
    """Scope of a context primer."""

    LOCAL = "local"
    GENERAL = "general"


TIER_LABELS: dict[ContextTier, str] = {
    ContextTier.LOCAL: "LOCAL CONTEXT",
    ContextTier.GENERAL: "GENERAL CONTEXT",
}

PRIMER_ACK = "Understood."

CONTEXT_EXAMPLE = (
    'Tell me what we will be doing. For example: "I am building a desktop app in '
    'Python with PostgreSQL that answers Telegram queries through a bot."'
)


class ContextManager:
    """Reads, writes and formats the two context tiers."""

    def __init__(
        self,
        local_path: Path | None = None,
        general_path: Path | None = None,
        console: Console | None = None,
    ) -> None:
        self._stores = {
            ContextTier.LOCAL: FileStore(local_path or settings.local_context_file),
            ContextTier.GENERAL: FileStore(general_path or settings.general_context_file),
        }
        self.console = console or Console()

    def path(self, tier: ContextTier) -> Path:
        return self._stores[tier].path

    def text(self, tier: ContextTier) -> str:
        """Return the trimmed context text for a tier ("" if absent)."""
        return self._stores[tier].read_text().strip()

    def exists(self, tier: ContextTier) -> bool:
        return bool(self.text(tier))

    def get_history(self, tier: ContextTier) -> list[ConversationMessage]:
        """
        Format a tier as a primer exchange.

        Returns:
            ``[]`` when the tier is empty, otherwise a labelled user message
            followed by a fixed acknowledgment from the model.
        """
        content = self.text(tier)
        if not content:
            return []
        return [
            ConversationMessage.user(f"{TIER_LABELS[tier]}: {content}"),
            ConversationMessage.model(PRIMER_ACK),
        ]

    def primers(self) -> list[ConversationMessage]:
        """General primer followed by local primer."""
        return self.get_history(ContextTier.GENERAL) + self.get_history(ContextTier.LOCAL)

    def context_text(self) -> str:
        """Primer user texts joined by newlines, for single-shot prompts."""
        return "\n".join(msg.text for msg in self.primers() if msg.role == Role.USER)

    def set(self, tier: ContextTier, content: str) -> Path:
        """Write a tier's context (trimmed). Returns the file path."""
        store = self._stores[tier]
        store.write_text(content.strip())
        logger.info(f"Set {tier.value} context in {store.path}")
        return store.path

    def clear(self, tier: ContextTier) -> bool:
        """Delete a tier's context. Returns True if a file existed."""
        removed = self._stores[tier].delete()
        logger.info(f"Clear {tier.value} context: {'removed' if removed else 'nothing to remove'}")
        return removed

    def prompt_for_local_context(
        self,
        ask: Callable[[str], str],
        force_new: bool,
        initial_prompt: str = "",
        summarize: Callable[[str], str] | None = None,
    ) -> bool:
        """
        Interactively define the local project context.

        Args:
            ask: Reads one line of user input for the given prompt
            force_new: Overwrite an existing context; empty input clears it
            initial_prompt: Text to summarize into a proposed context
            summarize: Generates the proposal; may raise TransportError

        Returns:
            True if a non-empty context was saved
        """
        self.console.print("\n[yellow]--- LOCAL PROJECT CONTEXT ---[/yellow]")
        had_context = self.exists(ContextTier.LOCAL)

        if force_new:
            question = (
                "You asked to force a new local context. The existing one will be overwritten.\n"
                f"{CONTEXT_EXAMPLE}\n"
                "Your new project context (leave empty to clear the existing one)? "
            )
        else:
            question = (
                "There is no local project context defined for this directory.\n"
                'This context is the "explanation of what you will do here".\n'
                f"{CONTEXT_EXAMPLE}\n"
                "Your project context (leave empty to skip)? "
            )

        if initial_prompt.strip():
            proposed = self._propose_context(ask, initial_prompt, summarize)
        else:
            proposed = ask(question)

        proposed = proposed.strip()
        if proposed:
            path = self.set(ContextTier.LOCAL, proposed)
            self.console.print(f"[green]Local context saved to {path}.[/green]")
            return True

        if force_new and had_context:
            self.clear(ContextTier.LOCAL)
            self.console.print("[yellow]Existing local context cleared.[/yellow]")
        return False

    def _propose_context(
        self,
        ask: Callable[[str], str],
        initial_prompt: str,
        summarize: Callable[[str], str] | None,
    ) -> str:
        """Summarize the initial prompt and confirm it, or fall back to manual entry."""
        if summarize is None:
            return ask("Your project context (leave empty to skip/clear): ")

        logger.debug("Requesting context summary from the model")
        try:
            proposal = summarize(initial_prompt).strip()
        except TransportError as e:
            self.console.print(
                "[yellow]Warning:[/yellow] Could not generate a context proposal. "
                "Please enter the context manually."
            )
            self.console.print(f"[red]Error:[/red] {escape(str(e))}")
            return ask("Your project context (leave empty to skip/clear): ")

        self.console.print("\n[yellow]Proposed context:[/yellow]")
        self.console.print(f'[cyan]"{escape(proposal)}"[/cyan]')
        confirm = ask("Is this correct? (Y/n) ")
        if confirm.strip().lower() == "n":
            self.console.print("[yellow]Enter your own context or leave empty:[/yellow]")
            return ask("Your context: ")
        return proposal
