"""Concurrency: background queue for fire-and-forget writes."""

from inboxai.concurrency.background import BackgroundTasks

__all__ = ["BackgroundTasks"]
