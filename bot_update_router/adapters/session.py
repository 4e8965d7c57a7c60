"""In-memory session adapter implementing ``SessionPort``."""

from __future__ import annotations

import threading
from typing import Any

from bot_update_router.core.ports import SessionPort


class InMemorySession(SessionPort):
    """Hold one chat's current state token in process memory."""

    def __init__(self, state: Any = "") -> None:
        self._lock = threading.Lock()
        self._state = state

    def current_state(self) -> Any:
        with self._lock:
            return self._state

    def set_state(self, state: Any) -> None:
        """Move the conversation to ``state``."""
        with self._lock:
            self._state = state


__all__ = ["InMemorySession"]
