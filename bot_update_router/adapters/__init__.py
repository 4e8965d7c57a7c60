"""Infrastructure adapter exports."""

from .session import InMemorySession
from .telegram import raw_update_from_telegram

__all__ = ["InMemorySession", "raw_update_from_telegram"]
