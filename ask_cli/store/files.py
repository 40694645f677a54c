"""File-backed persistence for history and context resources."""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class FileStore:
    """
    Read, write and delete a single file-backed resource.

    Missing, unreadable or non-UTF-8 files read as empty. Writes propagate
    ``OSError`` to the caller.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read_text(self) -> str:
        """Return the file contents, or an empty string if it cannot be read."""
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read {self.path}: {e}")
            return ""

    def write_text(self, content: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(content, encoding="utf-8")
        logger.debug(f"Wrote {len(content)} chars to {self.path}")

    def delete(self) -> bool:
        """Delete the file. Returns True if a file existed and was removed."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted {self.path}")
        return True


class JsonListStore(FileStore):
    """A file holding a JSON array. Corrupt content degrades to an empty list."""

    def read_list(self) -> list[Any]:
        content = self.read_text()
        if not content.strip():
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupt JSON in {self.path} ({e}); starting fresh")
            return []

        if not isinstance(data, list):
            logger.warning(f"Expected a JSON array in {self.path}; starting fresh")
            return []

        return data

    def write_list(self, items: list[Any]) -> None:
        self.write_text(json.dumps(items, indent=2, ensure_ascii=False))
