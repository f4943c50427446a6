"""Key-value blob storage over named collections."""

from __future__ import annotations

import copy
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Protocol

from .config_loader import get_storage_config, resolve_repo_path

USERS = "users"
MESSAGES = "messages"
DAMAGE_REPORTS = "damage_reports"
REPORT_TOKENS = "report_tokens"
DEMO_DAMAGE_REPORTS = "demo_damage_reports"
DEMO_PROJECTS = "demo_projects"
DEMO_ROLES = "demo_roles"
DEMO_SESSIONS = "demo_sessions"
DEMO_AREA_STATS = "demo_area_stats"
DEMO_CONTRACTOR_STATS = "demo_contractor_stats"
DEMO_META = "demo_meta"


class BlobStore(Protocol):
    def get(self, collection: str, key: str) -> Any | None: ...

    def set(self, collection: str, key: str, value: Any) -> None: ...

    def list(self, collection: str, prefix: str = "") -> list[str]: ...

    def delete(self, collection: str, key: str) -> None: ...


class MemoryBlobStore:
    """Process-local store; values are deep-copied on the way in and out."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._data: dict[str, dict[str, Any]] = {}

    def get(self, collection: str, key: str) -> Any | None:
        with self._lock:
            value = self._data.get(collection, {}).get(key)
            return copy.deepcopy(value)

    def set(self, collection: str, key: str, value: Any) -> None:
        # Round-trip through JSON so non-serializable values fail like the sqlite backend.
        encoded = json.loads(json.dumps(value))
        with self._lock:
            self._data.setdefault(collection, {})[key] = encoded

    def list(self, collection: str, prefix: str = "") -> list[str]:
        with self._lock:
            keys = [key for key in self._data.get(collection, {}) if key.startswith(prefix)]
        return sorted(keys)

    def delete(self, collection: str, key: str) -> None:
        with self._lock:
            self._data.get(collection, {}).pop(key, None)


class SqliteBlobStore:
    """Durable store backed by a single sqlite table."""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self.ensure_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS blobs (
                    collection TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (collection, key)
                );
                """
            )

    def get(self, collection: str, key: str) -> Any | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM blobs WHERE collection = ? AND key = ?;",
                (collection, key),
            ).fetchone()
        if row is None:
            return None
        return json.loads(row["value"])

    def set(self, collection: str, key: str, value: Any) -> None:
        encoded = json.dumps(value, ensure_ascii=False)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO blobs(collection, key, value, updated_at)
                VALUES(?, ?, ?, ?)
                ON CONFLICT(collection, key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at;
                """,
                (collection, key, encoded, datetime.now(timezone.utc).isoformat()),
            )

    def list(self, collection: str, prefix: str = "") -> list[str]:
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT key FROM blobs WHERE collection = ? AND key LIKE ? ESCAPE '\\' ORDER BY key ASC;",
                (collection, f"{escaped}%"),
            ).fetchall()
        return [str(row["key"]) for row in rows]

    def delete(self, collection: str, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM blobs WHERE collection = ? AND key = ?;", (collection, key))


_BLOB_STORE: BlobStore | None = None


def _create_blob_store() -> BlobStore:
    storage = get_storage_config()
    if storage["backend"] == "memory":
        return MemoryBlobStore()
    return SqliteBlobStore(resolve_repo_path(storage["db_path"]))


def get_blob_store() -> BlobStore:
    global _BLOB_STORE
    if _BLOB_STORE is None:
        _BLOB_STORE = _create_blob_store()
    return _BLOB_STORE


def set_blob_store(store: BlobStore | None) -> None:
    """Replace the process store; `None` re-resolves from config on next use."""
    global _BLOB_STORE
    _BLOB_STORE = store
