"""Gemini API integration via the google-genai SDK."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Sequence

import httpx
from google import genai
from google.genai import errors, types

from config.settings import settings
from ask_cli.llm.messages import ConversationMessage, Fragment

logger = logging.getLogger(__name__)


IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}

SUMMARIZE_CONTEXT_PROMPT = (
    "Based on the following text, write one concise sentence (50 words at most) "
    "that can serve as project context for my AI assistant, focusing on what I "
    "will be doing or the main purpose. If the text is a question, rephrase it as "
    'a context statement. Example format: "I am building an app with X for Y". '
    'Text: "{text}"'
)


class TransportError(RuntimeError):
    """A generation request failed."""


class StreamInterrupted(TransportError):
    """A streamed response failed after some output was produced."""

    def __init__(self, message: str, partial: str) -> None:
        super().__init__(message)
        self.partial = partial


class ImageAttachmentError(ValueError):
    """An image could not be attached to a request."""


@dataclass
class GenerationParams:
    """Optional generation settings; None means the model default."""

    max_output_tokens: int | None = None
    temperature: float | None = None


@dataclass
class ImageAttachment:
    """Raw image bytes and their MIME type."""

    data: bytes
    mime_type: str

    def to_fragment(self) -> Fragment:
        return Fragment.from_bytes(self.data, self.mime_type)


def attach_image(path: str | Path) -> ImageAttachment:
    """
    Read an image file for inline attachment.

    Args:
        path: Path to a PNG, JPEG, WEBP or GIF file

    Returns:
        ImageAttachment with bytes and MIME type

    Raises:
        ImageAttachmentError: If the file is missing, unreadable or unsupported
    """
    image_path = Path(path)
    if not image_path.is_file():
        raise ImageAttachmentError(f"Image file does not exist: {image_path}")

    mime_type = IMAGE_MIME_TYPES.get(image_path.suffix.lower())
    if mime_type is None:
        raise ImageAttachmentError(f"Unsupported image type: {image_path.suffix or '(none)'}")

    try:
        data = image_path.read_bytes()
    except OSError as e:
        raise ImageAttachmentError(f"Could not read image {image_path}: {e}") from e

    return ImageAttachment(data=data, mime_type=mime_type)


def to_contents(messages: Sequence[ConversationMessage]) -> list[types.Content]:
    """Convert conversation messages to SDK content objects."""
    contents = []
    for msg in messages:
        parts = []
        for fragment in msg.fragments:
            if fragment.is_text:
                parts.append(types.Part(text=fragment.text))
            else:
                parts.append(types.Part.from_bytes(data=fragment.data, mime_type=fragment.mime_type))
        contents.append(types.Content(role=msg.role.value, parts=parts))
    return contents


def build_config(
    params: GenerationParams | None = None,
    system_instruction: str | None = None,
) -> types.GenerateContentConfig:
    """Build the request config with safety settings and optional overrides."""
    params = params or GenerationParams()
    return types.GenerateContentConfig(
        system_instruction=system_instruction or None,
        max_output_tokens=params.max_output_tokens,
        temperature=params.temperature,
        safety_settings=[
            types.SafetySetting(
                category=types.HarmCategory.HARM_CATEGORY_HARASSMENT,
                threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
            )
        ],
    )


def _iter_text(chunks: Any) -> Iterator[str]:
    """Yield text from streamed chunks, wrapping failures."""
    produced: list[str] = []
    try:
        for chunk in chunks:
            text = chunk.text
            if text:
                produced.append(text)
                yield text
    except (errors.APIError, httpx.HTTPError) as e:
        partial = "".join(produced)
        if partial:
            raise StreamInterrupted(str(e), partial) from e
        raise TransportError(str(e)) from e


class ChatSession:
    """A persistent multi-turn chat seeded with prior history."""

    def __init__(self, chat: Any) -> None:
        self._chat = chat

    def send(self, text: str) -> str:
        try:
            response = self._chat.send_message(text)
        except (errors.APIError, httpx.HTTPError) as e:
            logger.error(f"Chat message failed: {e}")
            raise TransportError(str(e)) from e
        return response.text or ""

    def send_stream(self, text: str) -> Iterator[str]:
        try:
            chunks = self._chat.send_message_stream(text)
        except (errors.APIError, httpx.HTTPError) as e:
            logger.error(f"Chat stream failed: {e}")
            raise TransportError(str(e)) from e
        return _iter_text(chunks)


class GeminiClient:
    """Thin wrapper around the google-genai client."""

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        timeout: int | None = None,
        sdk: Any = None,
    ) -> None:
        """Initialize the client.

        Args:
            model: Model identifier used for every request.
            api_key: API key. Defaults to settings.gemini_api_key.
            timeout: Request timeout in seconds.
            sdk: Preconfigured ``genai.Client`` (mainly for tests).

        Raises:
            TransportError: If no API key is configured.
        """
        self.model = model
        if sdk is not None:
            self._sdk = sdk
            return

        api_key = api_key or settings.gemini_api_key
        if not api_key:
            raise TransportError("GEMINI_API_KEY is not set. Export it or add it to .env.")

        timeout = timeout or settings.request_timeout
        self._sdk = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=timeout * 1000),
        )
        logger.debug(f"Gemini client initialized for model {model}")

    def generate(
        self,
        messages: Sequence[ConversationMessage],
        params: GenerationParams | None = None,
        system_instruction: str | None = None,
    ) -> str:
        """
        Generate a complete response.

        Args:
            messages: Conversation to send
            params: Optional generation parameters
            system_instruction: Optional system instruction

        Returns:
            Response text
        """
        logger.debug(f"generate_content model={self.model} messages={len(messages)}")
        try:
            response = self._sdk.models.generate_content(
                model=self.model,
                contents=to_contents(messages),
                config=build_config(params, system_instruction),
            )
        except (errors.APIError, httpx.HTTPError) as e:
            logger.error(f"Generation failed: {e}")
            raise TransportError(str(e)) from e
        return response.text or ""

    def stream(
        self,
        messages: Sequence[ConversationMessage],
        params: GenerationParams | None = None,
        system_instruction: str | None = None,
    ) -> Iterator[str]:
        """
        Stream a response.

        Yields:
            Response text chunks
        """
        logger.debug(f"generate_content_stream model={self.model} messages={len(messages)}")
        try:
            chunks = self._sdk.models.generate_content_stream(
                model=self.model,
                contents=to_contents(messages),
                config=build_config(params, system_instruction),
            )
        except (errors.APIError, httpx.HTTPError) as e:
            logger.error(f"Streaming failed: {e}")
            raise TransportError(str(e)) from e
        return _iter_text(chunks)

    def start_chat(
        self,
        history: Sequence[ConversationMessage],
        params: GenerationParams | None = None,
        system_instruction: str | None = None,
    ) -> ChatSession:
        """Open a chat session seeded with ``history``."""
        chat = self._sdk.chats.create(
            model=self.model,
            config=build_config(params, system_instruction),
            history=to_contents(history),
        )
        logger.debug(f"Chat started with {len(history)} seeded messages")
        return ChatSession(chat)

    def summarize_context(self, text: str) -> str:
        """Ask the model to compress ``text`` into a short project context."""
        prompt = SUMMARIZE_CONTEXT_PROMPT.format(text=text)
        return self.generate([ConversationMessage.user(prompt)]).strip()
