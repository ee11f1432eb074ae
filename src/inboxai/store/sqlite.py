"""Document store persisted to a local SQLite file."""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from inboxai.errors.exceptions import DocumentNotFoundError, StoreError
from inboxai.store.base import (
    Document,
    DocumentStore,
    apply_increment,
    apply_update,
    deep_merge,
    split_path,
)

logger = logging.getLogger(__name__)

_DEFAULT_DB_PATH = Path.home() / ".inboxai" / "store.db"
_DATETIME_TAG = "__datetime__"


class SqliteDocumentStore(DocumentStore):
    """SQLite-backed store holding each document as a JSON blob.

    Blocking sqlite calls run in a worker thread; a thread lock serializes
    read-modify-write so that single-document writes stay atomic.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        super().__init__()
        self._db_path = db_path or _DEFAULT_DB_PATH
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._create_table()

    async def get(self, path: str) -> Document | None:
        key = _doc_key(path)
        return await asyncio.to_thread(self._read, key)

    async def set(self, path: str, data: Document, merge: bool = False) -> None:
        key = _doc_key(path)

        def _write() -> Document:
            with self._lock:
                existing = self._read_unlocked(key)
                doc = deep_merge(existing, data) if merge and existing is not None else data
                self._write_unlocked(key, doc)
                return doc

        doc = await asyncio.to_thread(_write)
        self._notify(key, doc)

    async def update(self, path: str, data: Document) -> None:
        key = _doc_key(path)

        def _write() -> Document:
            with self._lock:
                existing = self._read_unlocked(key)
                if existing is None:
                    raise DocumentNotFoundError(key)
                doc = apply_update(existing, data)
                self._write_unlocked(key, doc)
                return doc

        doc = await asyncio.to_thread(_write)
        self._notify(key, doc)

    async def delete(self, path: str) -> None:
        key = _doc_key(path)

        def _delete() -> int:
            with self._lock:
                cursor = self._conn.execute("DELETE FROM documents WHERE path = ?", (key,))
                self._conn.commit()
                return cursor.rowcount

        if await asyncio.to_thread(_delete):
            self._notify(key, None)

    async def increment(self, path: str, field: str, amount: float = 1) -> float:
        key = _doc_key(path)

        def _increment() -> tuple[Document, float]:
            with self._lock:
                doc, value = apply_increment(self._read_unlocked(key), field, amount)
                self._write_unlocked(key, doc)
                return doc, value

        doc, value = await asyncio.to_thread(_increment)
        self._notify(key, doc)
        return value

    async def _list_collection(self, collection: str) -> list[tuple[str, Document]]:
        collection = collection.strip("/")

        def _select() -> list[tuple[str, Document]]:
            with self._lock:
                rows = self._conn.execute(
                    "SELECT path, data FROM documents WHERE collection = ?", (collection,)
                ).fetchall()
            return [(split_path(row["path"])[1], _loads(row["data"])) for row in rows]

        return await asyncio.to_thread(_select)

    @property
    def document_count(self) -> int:
        with self._lock:
            row = self._conn.execute("SELECT COUNT(*) FROM documents").fetchone()
        return row[0]

    def close(self) -> None:
        self._conn.close()

    def _create_table(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS documents (
                path TEXT PRIMARY KEY,
                collection TEXT NOT NULL,
                data TEXT NOT NULL
            )
        """)
        self._conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents (collection)"
        )
        self._conn.commit()

    def _read(self, key: str) -> Document | None:
        with self._lock:
            return self._read_unlocked(key)

    def _read_unlocked(self, key: str) -> Document | None:
        row = self._conn.execute("SELECT data FROM documents WHERE path = ?", (key,)).fetchone()
        if row is None:
            return None
        return _loads(row["data"])

    def _write_unlocked(self, key: str, doc: Document) -> None:
        collection, _ = split_path(key)
        try:
            payload = json.dumps(doc, default=_encode_value)
        except TypeError as e:
            raise StoreError(f"Document at {key} is not serializable: {e}") from e
        self._conn.execute(
            "INSERT OR REPLACE INTO documents (path, collection, data) VALUES (?, ?, ?)",
            (key, collection, payload),
        )
        self._conn.commit()


def _doc_key(path: str) -> str:
    split_path(path)
    return path.strip("/")


def _encode_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DATETIME_TAG: value.isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode_object(obj: dict[str, Any]) -> Any:
    if len(obj) == 1 and _DATETIME_TAG in obj:
        return datetime.fromisoformat(obj[_DATETIME_TAG])
    return obj


def _loads(payload: str) -> Document:
    return json.loads(payload, object_hook=_decode_object)
