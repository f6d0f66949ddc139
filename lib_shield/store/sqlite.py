"""SQLite-backed advisory store."""

import json
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..core.models import Advisory
from ..errors import StoreError
from ..utils.logging import get_logger
from .base import AdvisoryStore
from .file import FileAdvisoryStore

PathLike = Union[str, Path]

SCHEMA = """
CREATE TABLE IF NOT EXISTS advisories (
    bucket           TEXT    NOT NULL,
    pkg_name         TEXT    NOT NULL,
    position         INTEGER NOT NULL,
    vulnerability_id TEXT    NOT NULL,
    record           TEXT    NOT NULL,
    PRIMARY KEY (bucket, pkg_name, position)
)
"""


class SqliteAdvisoryStore(AdvisoryStore):
    """Read-only advisory store backed by a SQLite database file.

    One connection is opened per store and shared across threads; access to
    it is serialized.
    """

    def __init__(self, db_path: PathLike) -> None:
        super().__init__()
        self.db_path = Path(db_path)
        self.logger = get_logger("SqliteAdvisoryStore")
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()
        self._bucket_names: List[str] = []

    def open(self) -> None:
        if self._is_open:
            return
        if not self.db_path.is_file():
            raise StoreError(f"Advisory database not found: {self.db_path}")
        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        try:
            conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open advisory database {self.db_path}: {e}") from e
        try:
            conn.row_factory = sqlite3.Row
            rows = conn.execute("SELECT DISTINCT bucket FROM advisories ORDER BY bucket").fetchall()
        except sqlite3.Error as e:
            conn.close()
            raise StoreError(f"Cannot open advisory database {self.db_path}: {e}") from e

        self._conn = conn
        self._bucket_names = [row["bucket"] for row in rows]
        self._is_open = True
        self.logger.info(f"Opened {self.db_path} with {len(self._bucket_names)} buckets")

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
        self._bucket_names = []
        self._is_open = False

    def get(self, bucket: str, pkg_name: str) -> List[Advisory]:
        self._ensure_open()
        try:
            with self._lock:
                rows = self._conn.execute(
                    "SELECT vulnerability_id, record FROM advisories "
                    "WHERE bucket = ? AND pkg_name = ? ORDER BY position",
                    (bucket, pkg_name),
                ).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Advisory lookup failed for {bucket}/{pkg_name}: {e}") from e

        advisories = []
        for row in rows:
            try:
                record = json.loads(row["record"])
                if not isinstance(record, dict):
                    raise ValueError("record is not a JSON object")
                record["id"] = row["vulnerability_id"]
                advisories.append(Advisory.from_dict(pkg_name, record))
            except ValueError as e:
                raise StoreError(
                    f"Corrupt record {row['vulnerability_id']} in {bucket}/{pkg_name}: {e}"
                ) from e
        return advisories

    def bucket_names(self) -> List[str]:
        self._ensure_open()
        return list(self._bucket_names)


def build_database(db_path: PathLike, fixture_paths: Sequence[PathLike]) -> int:
    """Write fixture files into a SQLite advisory database.

    Buckets present in the fixtures replace their existing rows.

    Args:
        db_path: Database file to create or update
        fixture_paths: YAML/JSON fixture files or directories

    Returns:
        Number of advisories written
    """
    source = FileAdvisoryStore(fixture_paths)
    count = 0
    with source:
        try:
            conn = sqlite3.connect(str(db_path))
        except sqlite3.Error as e:
            raise StoreError(f"Cannot create advisory database {db_path}: {e}") from e
        try:
            with conn:
                conn.execute(SCHEMA)
                for bucket in source.bucket_names():
                    conn.execute("DELETE FROM advisories WHERE bucket = ?", (bucket,))
                position = 0
                previous = None
                for bucket, pkg_name, advisory in source.iter_records():
                    if (bucket, pkg_name) != previous:
                        previous = (bucket, pkg_name)
                        position = 0
                    record = advisory.to_dict()
                    record.pop("id")
                    conn.execute(
                        "INSERT INTO advisories (bucket, pkg_name, position, vulnerability_id, record) "
                        "VALUES (?, ?, ?, ?, ?)",
                        (bucket, pkg_name, position, advisory.vulnerability_id, json.dumps(record)),
                    )
                    position += 1
                    count += 1
        except sqlite3.Error as e:
            raise StoreError(f"Cannot write advisory database {db_path}: {e}") from e
        finally:
            conn.close()
    return count
