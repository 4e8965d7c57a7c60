"""Protocol definitions for router collaborators."""

# pylint: disable=unnecessary-ellipsis

from __future__ import annotations

from typing import Any, Optional, Protocol

from bot_update_router.core.models import ActionKind, Handler, HandlerEntry


class SessionPort(Protocol):
    """Port exposing the conversation state tracked for one chat."""

    def current_state(self) -> Any:
        """Return the current state token; it must be string convertible."""
        ...


class RouterPort(Protocol):
    """Port exposing handler registration and lookup."""

    def add_handler(self, name: str, kind: ActionKind, handler: Handler) -> HandlerEntry:
        """Register ``handler`` under ``(kind, name)``."""
        ...

    def get_handler(self, name: str, kind: ActionKind) -> Optional[HandlerEntry]:
        """Return the entry registered under ``(kind, name)`` if any."""
        ...


__all__ = ["SessionPort", "RouterPort"]
