"""Outbound AI clients."""

from inboxai.client.categorization import CategorizationClient

__all__ = ["CategorizationClient"]
