import json
import logging
import os
import sqlite3
from typing import Any, Optional, Protocol

from config import STORE_BACKEND, STORE_PATH
from exceptions import CorruptStoreError

logger = logging.getLogger(__name__)

_MISSING = object()


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Process-local store. Used by tests and throwaway instances."""

    def __init__(self) -> None:
        self.items: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove(self, key: str) -> None:
        self.items.pop(key, None)


class FileStore:
    """One JSON file per key inside a directory."""

    def __init__(self, directory: str) -> None:
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str) -> Optional[str]:
        try:
            with open(self._path(key), "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path + ".tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def remove(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass


class SqliteStore:
    """Single key/value table in an SQLite database file."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)")

    def get(self, key: str) -> Optional[str]:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)", (key, value))
            conn.commit()

    def remove(self, key: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()


def make_store(backend: str = STORE_BACKEND, path: str = STORE_PATH) -> KeyValueStore:
    """Build the configured key/value backend."""
    if backend == "memory":
        return MemoryStore()
    if backend == "file":
        return FileStore(path)
    if backend == "sqlite":
        return SqliteStore(path if path.endswith(".db") else f"{path}.db")
    raise ValueError(f"Unknown store backend: {backend}")


class Persistence:
    """Whole-collection JSON load/save on top of a key/value backend.

    Every write replaces the full value under its key. There is no locking,
    so two writers interleaving read-modify-write cycles lose updates.
    """

    def __init__(self, backend: KeyValueStore) -> None:
        self.backend = backend

    def load(self, key: str, default: Any = None) -> Any:
        raw = self.backend.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Corrupt data under key %s: %s", key, e)
            raise CorruptStoreError(key, str(e)) from e

    def save(self, key: str, value: Any) -> None:
        self.backend.set(key, json.dumps(value, ensure_ascii=False))

    def remove(self, key: str) -> None:
        self.backend.remove(key)

    def load_or_seed(self, key: str, seed: Any) -> Any:
        """Return the stored value, persisting ``seed`` first if the key was never written."""
        value = self.load(key, _MISSING)
        if value is _MISSING:
            logger.info("Seeding default data under key %s", key)
            self.save(key, seed)
            return seed
        return value
