"""Advisory store clients for LibShield."""

from pathlib import Path
from typing import Union

from .base import AdvisoryStore, BucketPolicy
from .file import FileAdvisoryStore
from .sqlite import SqliteAdvisoryStore, build_database

SQLITE_SUFFIXES = (".db", ".sqlite", ".sqlite3")


def open_store(path: Union[str, Path]) -> AdvisoryStore:
    """Create the store client matching a database path.

    SQLite files are recognized by suffix; anything else (a YAML/JSON file
    or a directory of them) is read as fixtures. The store is returned
    unopened.
    """
    path = Path(path)
    if path.suffix in SQLITE_SUFFIXES:
        return SqliteAdvisoryStore(path)
    return FileAdvisoryStore(path)


__all__ = [
    "AdvisoryStore",
    "BucketPolicy",
    "FileAdvisoryStore",
    "SqliteAdvisoryStore",
    "build_database",
    "open_store",
]
