"""LLM integration components."""

from ask_cli.llm.catalog import ModelCatalog, ModelTier, load_model_catalog
from ask_cli.llm.gemini import (
    ChatSession,
    GeminiClient,
    GenerationParams,
    ImageAttachment,
    ImageAttachmentError,
    StreamInterrupted,
    TransportError,
    attach_image,
)
from ask_cli.llm.messages import ConversationMessage, Fragment, Role

__all__ = [
    "ChatSession",
    "ConversationMessage",
    "Fragment",
    "GeminiClient",
    "GenerationParams",
    "ImageAttachment",
    "ImageAttachmentError",
    "ModelCatalog",
    "ModelTier",
    "Role",
    "StreamInterrupted",
    "TransportError",
    "attach_image",
    "load_model_catalog",
]
