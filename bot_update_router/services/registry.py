"""Handler registry keyed by action kind and name."""

from __future__ import annotations

import threading
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from bot_update_router.core.exceptions import HandlerAlreadyExistsError, InvalidArgumentError
from bot_update_router.core.logging import get_logger
from bot_update_router.core.models import ActionKind, Handler, HandlerEntry

logger = get_logger(__name__)

RegistryTable = Mapping[ActionKind, Mapping[str, HandlerEntry]]


class HandlerRegistry:
    """Store handlers per ``ActionKind`` partition with duplicate rejection.

    Reads go against an immutable snapshot and never take the lock, so
    concurrent dispatches always observe a consistent table. Writers
    serialize on the lock and publish a fresh snapshot.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._table: RegistryTable = MappingProxyType({})

    def add_handler(self, name: str, kind: ActionKind | str, handler: Handler) -> HandlerEntry:
        """Register ``handler`` under ``(kind, name)``.

        Raises:
            InvalidArgumentError: ``name`` is empty or ``kind`` is unknown.
            HandlerAlreadyExistsError: the name is already taken for ``kind``.
        """
        if not name:
            raise InvalidArgumentError("name must not be empty.", "name")
        action_kind = _coerce_kind(kind)
        if not callable(handler):
            raise InvalidArgumentError("handler must be callable.", "handler")

        with self._lock:
            partition = self._table.get(action_kind, {})
            if name in partition:
                raise HandlerAlreadyExistsError(name, action_kind)

            entry = HandlerEntry(name=name, kind=action_kind, handler=handler)
            table = dict(self._table)
            table[action_kind] = MappingProxyType({**partition, name: entry})
            self._table = MappingProxyType(table)

        logger.debug(
            "handler registered", extra={"handler_name": name, "handler_kind": action_kind.value}
        )
        return entry

    def get_handler(self, name: str, kind: ActionKind | str) -> Optional[HandlerEntry]:
        """Return the entry registered under ``(kind, name)`` or ``None``."""
        try:
            action_kind = ActionKind(kind)
        except (TypeError, ValueError):
            return None
        partition = self._table.get(action_kind)
        if partition is None:
            return None
        return partition.get(name)

    def route(self, name: str, kind: ActionKind | str) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`add_handler` returning the function unchanged."""

        def decorator(func: Handler) -> Handler:
            self.add_handler(name, kind, func)
            return func

        return decorator

    def handlers(self, kind: ActionKind | str | None = None) -> dict[str, HandlerEntry]:
        """Return a shallow copy of the entries, optionally for a single kind."""
        table = self._table
        if kind is not None:
            return dict(table.get(_coerce_kind(kind), {}))
        return {
            f"{action_kind.value}:{name}": entry
            for action_kind, partition in table.items()
            for name, entry in partition.items()
        }

    def __len__(self) -> int:
        return sum(len(partition) for partition in self._table.values())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        kind, name = key
        return self.get_handler(name, kind) is not None


def _coerce_kind(kind: ActionKind | str) -> ActionKind:
    try:
        return ActionKind(kind)
    except ValueError as exc:
        raise InvalidArgumentError(f"unknown action kind: {kind!r}", "kind") from exc


__all__ = ["HandlerRegistry", "RegistryTable"]
