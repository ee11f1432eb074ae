"""inboxai: AI service layer for a creator messaging inbox."""

from inboxai.core import ServiceContext

__version__ = "0.1.0"

__all__ = ["ServiceContext", "__version__"]
