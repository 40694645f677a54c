"""Single-shot and interactive chat sessions."""

import logging
from typing import Callable, Iterable, Protocol, Sequence

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape

from ask_cli.args.resolver import InvocationConfig
from ask_cli.context.manager import ContextManager
from ask_cli.history.manager import HistoryManager
from ask_cli.llm.gemini import (
    GenerationParams,
    ImageAttachmentError,
    StreamInterrupted,
    TransportError,
    attach_image,
)
from ask_cli.llm.messages import ConversationMessage

logger = logging.getLogger(__name__)


FILE_PROMPT_TEMPLATE = (
    "Based on the content of the following file, answer my question.\n\n"
    "--- BEGIN FILE: {name} ---\n\n"
    "{content}\n\n"
    "--- END FILE ---\n\n"
    "My question is: {prompt}"
)

EXIT_COMMANDS = {"exit", "quit"}


class ChatLike(Protocol):
    def send(self, text: str) -> str: ...

    def send_stream(self, text: str) -> Iterable[str]: ...


class ClientLike(Protocol):
    model: str

    def generate(
        self,
        messages: Sequence[ConversationMessage],
        params: GenerationParams | None = None,
        system_instruction: str | None = None,
    ) -> str: ...

    def stream(
        self,
        messages: Sequence[ConversationMessage],
        params: GenerationParams | None = None,
        system_instruction: str | None = None,
    ) -> Iterable[str]: ...

    def start_chat(
        self,
        history: Sequence[ConversationMessage],
        params: GenerationParams | None = None,
        system_instruction: str | None = None,
    ) -> ChatLike: ...


class SessionOrchestrator:
    """Composes outgoing conversations and runs one invocation."""

    def __init__(
        self,
        config: InvocationConfig,
        client: ClientLike,
        history: HistoryManager,
        contexts: ContextManager,
        console: Console | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.history = history
        self.contexts = contexts
        self.console = console or Console()
        self.transcript: list[ConversationMessage] = []
        self._unsaved: list[ConversationMessage] = []

    # Single-shot

    def compose_prompt(self) -> ConversationMessage:
        """
        Build the single user message for a single-shot request.

        Returns:
            User message with the composed text and any image attachment

        Raises:
            OSError: If the --file cannot be read
            UnicodeDecodeError: If the --file is not UTF-8 text
            ImageAttachmentError: If the --image cannot be attached
        """
        config = self.config
        text = config.prompt

        if config.file_path is not None:
            content = config.file_path.read_text(encoding="utf-8")
            text = FILE_PROMPT_TEMPLATE.format(
                name=config.file_path.name,
                content=content,
                prompt=config.prompt,
            )

        if config.use_context:
            if config.system_instruction:
                self.console.print(
                    "[yellow]Warning:[/yellow] Local/general context was not added to the "
                    "prompt because --system-instruction was given."
                )
            elif config.image_path is None:
                context = self.contexts.context_text()
                if context:
                    text = f"{context}\n\n{text}"

        if config.image_path is not None:
            image = attach_image(config.image_path)
            return ConversationMessage.user(config.prompt, image.to_fragment())

        return ConversationMessage.user(text)

    def run_single_shot(self) -> int:
        """Send one prompt and render the reply. Returns the exit code."""
        config = self.config
        try:
            message = self.compose_prompt()
        except ImageAttachmentError as e:
            self.console.print(f"[red]Error processing image:[/red] {escape(str(e))}")
            return 1
        except (OSError, UnicodeDecodeError) as e:
            self.console.print(f"[red]Error reading file {escape(str(config.file_path))}:[/red] {escape(str(e))}")
            return 1

        logger.debug(f"Single-shot prompt of {len(message.text)} chars")
        self.console.print("[bold green]Gemini:[/bold green]")
        try:
            if config.stream:
                response = self._print_stream(
                    self.client.stream([message], config.generation, config.system_instruction)
                )
            else:
                response = self.client.generate([message], config.generation, config.system_instruction)
                self.console.print(Markdown(response))
        except StreamInterrupted as e:
            self.console.print(f"\n[red]Error:[/red] Response interrupted: {escape(str(e))}")
            return 1
        except TransportError as e:
            self.console.print(f"\n[red]Error:[/red] {escape(str(e))}")
            return 1

        if config.use_chat_memory:
            self._persist(lambda: self.history.append(config.prompt, response.strip(), self.client.model))
        return 0

    # Interactive chat

    def initial_history(self) -> list[ConversationMessage]:
        """General primer, local primer, then recent history, as enabled."""
        messages: list[ConversationMessage] = []
        if self.config.use_context:
            messages.extend(self.contexts.primers())
        if self.config.use_chat_memory:
            messages.extend(self.history.load())
        return messages

    def run_chat(self, ask: Callable[[str], str]) -> int:
        """
        Run the interactive chat loop until exit/quit, EOF or Ctrl-C.

        Args:
            ask: Reads one line of user input

        Returns:
            Exit code (always 0)
        """
        config = self.config
        self.transcript = self.initial_history()
        self._unsaved = []
        logger.debug(f"Chat seeded with {len(self.transcript)} messages")

        chat = self.client.start_chat(self.transcript, config.generation, config.system_instruction)

        self.console.print(
            f"Chat mode. Model: [green]{self.client.model}[/green]. Type 'exit' or 'quit' to leave."
        )
        if config.stream:
            self.console.print("[dim]Streaming enabled.[/dim]")

        try:
            while True:
                try:
                    line = ask("You: ")
                except EOFError:
                    break

                prompt = line.strip()
                if prompt.lower() in EXIT_COMMANDS:
                    break
                if not prompt:
                    continue

                self.console.print("[bold green]Gemini:[/bold green]")
                try:
                    if config.stream:
                        response = self._print_stream(chat.send_stream(prompt))
                    else:
                        response = chat.send(prompt)
                        self.console.print(Markdown(response))
                except StreamInterrupted as e:
                    self.console.print(f"\n[red]Error:[/red] Response interrupted: {escape(str(e))}\n")
                    continue
                except TransportError as e:
                    self.console.print(f"\n[red]Error:[/red] {escape(str(e))}\n")
                    continue

                self._add_turn(ConversationMessage.user(prompt))
                self._add_turn(ConversationMessage.model(response.strip()))
                if config.use_chat_memory:
                    self.flush()
                self.console.print()
        except KeyboardInterrupt:
            self.console.print()
        finally:
            if config.use_chat_memory:
                self.flush()

        self.console.print("\n[cyan]Goodbye![/cyan]")
        return 0

    def flush(self) -> None:
        """Persist turns not yet written to history."""
        if not self._unsaved:
            return
        turns = list(self._unsaved)
        if self._persist(lambda: self.history.save(turns, self.client.model)):
            del self._unsaved[: len(turns)]

    def _add_turn(self, message: ConversationMessage) -> None:
        """Append to the transcript unless it repeats the previous entry."""
        last = self.transcript[-1] if self.transcript else None
        if message.same_as(last):
            logger.debug(f"Skipping duplicate {message.role.value} turn")
            return
        self.transcript.append(message)
        self._unsaved.append(message)

    def _persist(self, write: Callable[[], object]) -> bool:
        try:
            write()
        except OSError as e:
            logger.warning(f"Failed to save history to {self.history.path}: {e}")
            self.console.print(f"[yellow]Warning:[/yellow] Could not save history: {escape(str(e))}")
            return False
        return True

    def _print_stream(self, chunks: Iterable[str]) -> str:
        """Print chunks as they arrive and return the full text."""
        produced: list[str] = []
        for chunk in chunks:
            produced.append(chunk)
            self.console.print(chunk, end="", markup=False, highlight=False, soft_wrap=True)
        self.console.print()
        return "".join(produced)
