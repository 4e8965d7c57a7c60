"""Middleware composition around the dispatcher."""

from __future__ import annotations

import time
from typing import Callable, Optional, Sequence

from bot_update_router.core.logging import get_logger, update_context
from bot_update_router.core.models import DispatchContext, RawUpdate
from bot_update_router.core.ports import SessionPort
from bot_update_router.services.dispatcher import NextHandler, invoke_handler

logger = get_logger(__name__)

Middleware = Callable[[DispatchContext, NextHandler], None]


def build_pipeline(
    middlewares: Sequence[Middleware], terminal: NextHandler = invoke_handler
) -> NextHandler:
    """Compose ``middlewares`` so the first one listed runs outermost."""

    handler = terminal
    for middleware in reversed(middlewares):
        handler = _bind(middleware, handler)
    return handler


def _bind(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
    def run(context: DispatchContext) -> None:
        middleware(context, next_handler)

    return run


def run_pipeline(
    pipeline: NextHandler, update: RawUpdate, session: Optional[SessionPort] = None
) -> DispatchContext:
    """Run a composed pipeline for a single update and return its context."""

    context = DispatchContext(update=update, session=session)
    pipeline(context)
    return context


class UpdateContextMiddleware:  # pylint: disable=too-few-public-methods
    """Bind update and chat ids for logging while the rest of the chain runs."""

    def __call__(self, context: DispatchContext, next_handler: NextHandler) -> None:
        update = context.update
        update_id = str(update.update_id) if update.update_id is not None else None
        chat_id = str(update.chat_id) if update.chat_id is not None else None

        start_time = time.perf_counter()
        with update_context(update_id, chat_id):
            try:
                next_handler(context)
            finally:
                duration_ms = (time.perf_counter() - start_time) * 1000.0
                handler = context.handler
                logger.info(
                    "update processed",
                    extra={
                        "event": "update_dispatch",
                        "update_type": type(update).__name__,
                        "handler": getattr(handler, "__name__", repr(handler)),
                        "duration_ms": round(duration_ms, 2),
                    },
                )


__all__ = ["Middleware", "build_pipeline", "run_pipeline", "UpdateContextMiddleware"]
