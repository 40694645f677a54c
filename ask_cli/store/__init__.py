"""Persistent store components."""

from ask_cli.store.files import FileStore, JsonListStore

__all__ = [
    "FileStore",
    "JsonListStore",
]
