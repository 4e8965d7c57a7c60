"""Application bootstrap helpers for assembling the router."""

from __future__ import annotations

from typing import Iterable, Optional

from bot_update_router.core.models import ActionKind, Handler
from bot_update_router.services import RouterServices, build_default_services

Route = tuple[str, ActionKind, Handler]


def build_router(
    routes: Iterable[Route] = (), *, default_handler: Optional[Handler] = None
) -> RouterServices:
    """Return router services with every ``(name, kind, handler)`` registered."""

    services = build_default_services(default_handler=default_handler)
    for name, kind, handler in routes:
        services.registry.add_handler(name, kind, handler)
    return services


__all__ = ["Route", "build_router"]
