"""In-process document store."""

from __future__ import annotations

import asyncio
import copy

from inboxai.errors.exceptions import DocumentNotFoundError
from inboxai.store.base import (
    Document,
    DocumentStore,
    apply_increment,
    apply_update,
    deep_merge,
    split_path,
)


class MemoryDocumentStore(DocumentStore):
    """Dict-backed store. Every read and write works on deep copies."""

    def __init__(self) -> None:
        super().__init__()
        self._docs: dict[str, Document] = {}
        self._lock = asyncio.Lock()

    async def get(self, path: str) -> Document | None:
        split_path(path)
        doc = self._docs.get(path.strip("/"))
        return copy.deepcopy(doc) if doc is not None else None

    async def set(self, path: str, data: Document, merge: bool = False) -> None:
        split_path(path)
        key = path.strip("/")
        async with self._lock:
            existing = self._docs.get(key)
            if merge and existing is not None:
                new_doc = deep_merge(existing, data)
            else:
                new_doc = copy.deepcopy(data)
            self._docs[key] = new_doc
        self._notify(key, new_doc)

    async def update(self, path: str, data: Document) -> None:
        split_path(path)
        key = path.strip("/")
        async with self._lock:
            existing = self._docs.get(key)
            if existing is None:
                raise DocumentNotFoundError(key)
            new_doc = apply_update(existing, data)
            self._docs[key] = new_doc
        self._notify(key, new_doc)

    async def delete(self, path: str) -> None:
        split_path(path)
        key = path.strip("/")
        async with self._lock:
            removed = self._docs.pop(key, None)
        if removed is not None:
            self._notify(key, None)

    async def increment(self, path: str, field: str, amount: float = 1) -> float:
        split_path(path)
        key = path.strip("/")
        async with self._lock:
            new_doc, new_value = apply_increment(self._docs.get(key), field, amount)
            self._docs[key] = new_doc
        self._notify(key, new_doc)
        return new_value

    async def _list_collection(self, collection: str) -> list[tuple[str, Document]]:
        collection = collection.strip("/")
        rows = []
        for key, doc in self._docs.items():
            parent, doc_id = split_path(key)
            if parent == collection:
                rows.append((doc_id, copy.deepcopy(doc)))
        return rows

    def __len__(self) -> int:
        return len(self._docs)
