"""Model tier catalog loaded from YAML."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from config.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class ModelTier:
    """A command-line selectable model tier."""

    name: str
    flag: str
    model: str
    description: str = ""


DEFAULT_MODEL = "gemini-2.5-flash"

DEFAULT_TIERS = [
    ModelTier(name="lite", flag="--lite", model="gemini-2.5-flash-lite", description="Fast, low-cost variant"),
    ModelTier(name="flash", flag="--flash", model="gemini-2.5-flash", description="Balanced speed and quality"),
    ModelTier(name="pro", flag="--pro", model="gemini-2.5-pro", description="Highest quality, slower"),
]


@dataclass
class ModelCatalog:
    """Default model plus the mutually exclusive tier flags."""

    default: str = DEFAULT_MODEL
    tiers: list[ModelTier] = field(default_factory=lambda: list(DEFAULT_TIERS))

    def by_flag(self, flag: str) -> ModelTier | None:
        for tier in self.tiers:
            if tier.flag == flag:
                return tier
        return None

    @property
    def flags(self) -> list[str]:
        return [tier.flag for tier in self.tiers]


def _read_catalog(config_path: Path) -> ModelCatalog:
    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    tiers = []
    for t in config.get("tiers", []):
        tiers.append(
            ModelTier(
                name=t["name"],
                flag=t.get("flag", f"--{t['name']}"),
                model=t["model"],
                description=t.get("description", ""),
            )
        )
    return ModelCatalog(
        default=config.get("default", DEFAULT_MODEL),
        tiers=tiers or list(DEFAULT_TIERS),
    )


def load_model_catalog(config_path: Path | None = None) -> ModelCatalog:
    """Load the model catalog from YAML, falling back to built-in tiers."""
    config_path = config_path or settings.catalog_file

    if not config_path.exists():
        logger.warning(f"Model config not found: {config_path}")
        catalog = ModelCatalog()
    else:
        try:
            catalog = _read_catalog(config_path)
        except (OSError, ValueError, yaml.YAMLError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Invalid model config {config_path} ({e}); using built-in tiers")
            catalog = ModelCatalog()

    if settings.default_model:
        catalog.default = settings.default_model

    return catalog
