"""Document store: hosted database abstraction with memory and SQLite backends."""

from inboxai.store.base import DocumentStore
from inboxai.store.memory import MemoryDocumentStore
from inboxai.store.sqlite import SqliteDocumentStore

__all__ = ["DocumentStore", "MemoryDocumentStore", "SqliteDocumentStore"]
