"""Classify inbound updates and hand them to the registered handler."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional

from bot_update_router.core.logging import get_logger
from bot_update_router.core.models import (
    FIELD_DELIMITER,
    ActionKind,
    CallbackUpdate,
    CommandUpdate,
    DispatchContext,
    Handler,
    MediaUpdate,
    MessageUpdate,
    RawUpdate,
)
from bot_update_router.core.ports import RouterPort, SessionPort

logger = get_logger(__name__)

NextHandler = Callable[[DispatchContext], None]


def extract_callback(callback_data: str) -> tuple[str, list[str]]:
    """Split callback data into ``(action, args)``.

    >>> extract_callback("buy|42|usd")
    ('buy', ['42', 'usd'])
    >>> extract_callback("")
    ('', [])
    """
    if not callback_data:
        return "", []
    action, *args = callback_data.split(FIELD_DELIMITER)
    return action, args


def split_command_arguments(arguments: str) -> list[str]:
    """Split trailing command arguments; an empty string yields ``[""]``."""
    return arguments.split(FIELD_DELIMITER)


def state_key(state: Any) -> str:
    """Return the registry name for a session state token."""
    if isinstance(state, Enum):
        return str(state.value)
    return str(state)


def log_missing_handler(context: DispatchContext) -> None:
    """Built-in default handler: record the miss and do nothing else."""
    logger.warning("No handler found.", extra={"update_type": type(context.update).__name__})


def invoke_handler(context: DispatchContext) -> None:
    """Terminal continuation running the handler resolved for ``context``."""
    if context.handler is not None:
        context.handler(context)


class Dispatcher:
    """Resolve exactly one handler per update and continue the chain.

    Instances are middleware: ``dispatcher(context, next_handler)``
    resolves the handler onto ``context`` and calls ``next_handler`` once.
    """

    def __init__(self, router: RouterPort, default_handler: Optional[Handler] = None) -> None:
        self._router = router
        self._default_handler: Handler = (
            default_handler if default_handler is not None else log_missing_handler
        )

    @property
    def default_handler(self) -> Handler:
        """Handler used whenever classification finds no registered match."""
        return self._default_handler

    def __call__(self, context: DispatchContext, next_handler: NextHandler) -> None:
        context.set_handler(self.resolve(context))
        next_handler(context)

    def dispatch(
        self,
        update: RawUpdate,
        session: Optional[SessionPort] = None,
        next_handler: NextHandler = invoke_handler,
    ) -> DispatchContext:
        """Build a context for ``update``, route it and return the context."""
        context = DispatchContext(update=update, session=session)
        self(context, next_handler)
        return context

    def resolve(self, context: DispatchContext) -> Handler:
        """Pick the handler for ``context`` and populate ``context.params``."""
        update = context.update

        if isinstance(update, CallbackUpdate):
            action, context.params = extract_callback(update.data)
            entry = self._router.get_handler(action, ActionKind.CALLBACK)
            if entry is None:
                logger.warning(
                    "No handler found for callback.", extra={"callback_name": update.data}
                )
                return self._default_handler
            return entry.handler

        if isinstance(update, CommandUpdate):
            entry = self._router.get_handler(update.command, ActionKind.COMMAND)
            if entry is None:
                logger.warning(
                    "No handler found for command.", extra={"command_name": update.command}
                )
                return self._default_handler
            context.params = split_command_arguments(update.arguments)
            return entry.handler

        if isinstance(update, MediaUpdate):
            entry = self._router.get_handler(update.document_type, ActionKind.DOCUMENT)
            if entry is not None:
                return entry.handler
            return self._resolve_message_state(context)

        if isinstance(update, MessageUpdate):
            return self._resolve_message_state(context)

        return self._default_handler

    def _resolve_message_state(self, context: DispatchContext) -> Handler:
        if context.session is None:
            return self._default_handler

        state = state_key(context.session.current_state())
        entry = self._router.get_handler(state, ActionKind.MESSAGE_STATE)
        if entry is None:
            logger.warning("No handler found for message state.", extra={"message_state": state})
            return self._default_handler
        return entry.handler


__all__ = [
    "Dispatcher",
    "NextHandler",
    "extract_callback",
    "split_command_arguments",
    "state_key",
    "log_missing_handler",
    "invoke_handler",
]
