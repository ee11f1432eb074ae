"""Document store interface: the hosted backend seen from the client."""

from __future__ import annotations

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Document = dict[str, Any]
Filter = tuple[str, str, Any]
Snapshot = Callable[[Document | None], None]

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a is not None and a < b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    ">=": lambda a, b: a is not None and a >= b,
    "array-contains": lambda a, b: isinstance(a, list) and b in a,
}


class DocumentStore(ABC):
    """Schemaless document store addressed by slash-separated paths.

    Documents live at even-length paths (``rate_limits/abc``,
    ``users/u1/ai_cache/k``); their parent collection is the path minus the
    last segment. Single-document writes are atomic; nothing spans documents.
    """

    def __init__(self) -> None:
        self._watchers: dict[str, list[Snapshot]] = {}

    @abstractmethod
    async def get(self, path: str) -> Document | None:
        """Return a copy of the document or None."""

    @abstractmethod
    async def set(self, path: str, data: Document, merge: bool = False) -> None:
        """Replace the document, or deep-merge into it when ``merge``."""

    @abstractmethod
    async def update(self, path: str, data: Document) -> None:
        """Apply dotted-key field updates to an existing document.

        Raises DocumentNotFoundError if the document does not exist.
        """

    @abstractmethod
    async def delete(self, path: str) -> None: ...

    @abstractmethod
    async def increment(self, path: str, field: str, amount: float = 1) -> float:
        """Atomically add ``amount`` to a numeric field, creating it as needed."""

    @abstractmethod
    async def _list_collection(self, collection: str) -> list[tuple[str, Document]]:
        """All (id, document) pairs directly inside ``collection``."""

    async def add(self, collection: str, data: Document) -> str:
        """Append a document with a generated id and return the id."""
        doc_id = uuid.uuid4().hex[:20]
        await self.set(f"{collection}/{doc_id}", data)
        return doc_id

    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[tuple[str, Document]]:
        """Filter, order and limit the documents of one collection."""
        rows = [
            (doc_id, doc)
            for doc_id, doc in await self._list_collection(collection)
            if all(matches(doc, f) for f in filters or [])
        ]
        if order_by:
            rows = [r for r in rows if get_field(r[1], order_by) is not None]
            rows.sort(key=lambda r: get_field(r[1], order_by), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def watch(self, path: str, callback: Snapshot) -> Callable[[], None]:
        """Call ``callback`` with the new snapshot after every write to ``path``."""
        self._watchers.setdefault(path, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._watchers.get(path, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def close(self) -> None:
        """Release resources. No-op by default."""

    def _notify(self, path: str, snapshot: Document | None) -> None:
        for callback in list(self._watchers.get(path, [])):
            try:
                callback(copy.deepcopy(snapshot))
            except Exception:
                logger.exception("Snapshot listener for %s failed", path)


# ── Helpers shared by implementations ──


def split_path(path: str) -> tuple[str, str]:
    """Split a document path into (collection, id)."""
    path = path.strip("/")
    parts = path.split("/")
    if len(parts) < 2 or len(parts) % 2:
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(parts[:-1]), parts[-1]


def get_field(doc: Document, field: str) -> Any:
    """Read a possibly dotted field name; None when any segment is missing."""
    value: Any = doc
    for part in field.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def set_field(doc: Document, field: str, value: Any) -> None:
    """Write a dotted field name, creating intermediate maps."""
    parts = field.split(".")
    target = doc
    for part in parts[:-1]:
        nested = target.get(part)
        if not isinstance(nested, dict):
            nested = {}
            target[part] = nested
        target = nested
    target[parts[-1]] = value


def deep_merge(base: Document, updates: Document) -> Document:
    """Recursively merge ``updates`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def apply_update(doc: Document, updates: Document) -> Document:
    """Apply dotted-key updates to a copy of ``doc``."""
    result = copy.deepcopy(doc)
    for key, value in updates.items():
        set_field(result, key, copy.deepcopy(value))
    return result


def apply_increment(doc: Document | None, field: str, amount: float) -> tuple[Document, float]:
    result = copy.deepcopy(doc) if doc is not None else {}
    current = get_field(result, field) or 0
    new_value = current + amount
    set_field(result, field, new_value)
    return result, new_value


def matches(doc: Document, flt: Filter) -> bool:
    field, op, expected = flt
    try:
        compare = _OPERATORS[op]
    except KeyError as err:
        raise ValueError(f"Unsupported query operator: {op!r}") from err
    try:
        return compare(get_field(doc, field), expected)
    except TypeError:
        return False
