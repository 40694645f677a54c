"""Application settings using Pydantic Settings."""

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Gemini settings
    gemini_api_key: str | None = Field(default=None)
    default_model: str | None = Field(default=None)
    catalog_file: Path = Field(default=Path(__file__).parent / "models.yaml")
    request_timeout: int = Field(default=120)

    # Persisted state
    history_file: Path = Field(default=Path.cwd() / ".ask_history.json")
    local_context_file: Path = Field(default=Path.cwd() / ".ask_context.local")
    general_context_file: Path = Field(default=Path.home() / ".ask_context.general")

    # History retention
    history_load_pairs: int = Field(default=10)
    history_keep_pairs: int = Field(default=20)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="WARNING")


settings = Settings()


def configure_working_dir(root: Path) -> None:
    """Rebase the per-directory state files when not explicitly configured."""
    resolved_root = root.expanduser().resolve()

    if os.getenv("HISTORY_FILE") is None:
        settings.history_file = resolved_root / ".ask_history.json"

    if os.getenv("LOCAL_CONTEXT_FILE") is None:
        settings.local_context_file = resolved_root / ".ask_context.local"
