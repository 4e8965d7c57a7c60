"""Service layer wiring for handler registration and dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bot_update_router.core.models import Handler

from .dispatcher import Dispatcher
from .registry import HandlerRegistry


@dataclass(slots=True)
class RouterServices:
    """Aggregate of the registry and the dispatcher reading from it."""

    registry: HandlerRegistry
    dispatcher: Dispatcher


def build_default_services(
    *,
    default_handler: Optional[Handler] = None,
    registry: Optional[HandlerRegistry] = None,
) -> RouterServices:
    """Return a container with a dispatcher bound to ``registry``."""

    handler_registry = registry if registry is not None else HandlerRegistry()
    dispatcher = Dispatcher(handler_registry, default_handler=default_handler)
    return RouterServices(registry=handler_registry, dispatcher=dispatcher)


__all__ = ["RouterServices", "build_default_services"]
