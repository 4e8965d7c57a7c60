"""Core data transfer objects shared across layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from bot_update_router.core.exceptions import InvalidUpdateError

if TYPE_CHECKING:  # pragma: no cover - import for static analysis only
    from bot_update_router.core.ports import SessionPort


FIELD_DELIMITER = "|"


class ActionKind(str, Enum):
    """Registry partitions a handler can be registered under."""

    COMMAND = "command"
    CALLBACK = "callback"
    MESSAGE_STATE = "message_state"
    DOCUMENT = "document"

    @property
    def label(self) -> str:
        """Human readable name used in diagnostics."""
        return _ACTION_LABELS[self]


_ACTION_LABELS = {
    ActionKind.COMMAND: "Command Handler",
    ActionKind.CALLBACK: "Callback Handler",
    ActionKind.MESSAGE_STATE: "Message State Handler",
    ActionKind.DOCUMENT: "Document Handler",
}


class DocumentType(str, Enum):
    """Attachment tags used as keys for document handlers."""

    DOCUMENT = "document"
    PHOTO = "photo"
    VIDEO = "video"
    AUDIO = "audio"
    VOICE = "voice"
    VIDEO_NOTE = "video_note"
    STICKER = "sticker"


# Earliest wins when a message carries more than one attachment field.
DOCUMENT_TYPE_PRECEDENCE: tuple[DocumentType, ...] = (
    DocumentType.DOCUMENT,
    DocumentType.PHOTO,
    DocumentType.VIDEO,
    DocumentType.AUDIO,
    DocumentType.VOICE,
    DocumentType.VIDEO_NOTE,
    DocumentType.STICKER,
)


Handler = Callable[["DispatchContext"], Any]


@dataclass(frozen=True, slots=True)
class HandlerEntry:
    """A handler bound to its registry name and action kind."""

    name: str
    kind: ActionKind
    handler: Handler


@dataclass(frozen=True, slots=True, kw_only=True)
class RawUpdate:
    """Inbound update classified once at the transport boundary.

    Concrete updates are always one of the subclasses below; the
    dispatcher branches on the subclass, never on optional fields.
    """

    update_id: Optional[int] = None
    chat_id: Optional[int] = None
    payload: Mapping[str, Any] = field(
        default_factory=dict, compare=False, hash=False, repr=False
    )

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "RawUpdate":
        """Build a RawUpdate from a Telegram Bot API update payload.

        Classification follows the routing priority: callback query,
        command message, media message, plain message. Anything else is
        an ``UnsupportedUpdate``.
        """
        if not isinstance(data, Mapping):
            raise InvalidUpdateError("update payload must be a mapping")

        update_id = data.get("update_id")
        if update_id is not None and not isinstance(update_id, int):
            raise InvalidUpdateError("update_id must be an integer")

        callback = data.get("callback_query")
        if callback is not None:
            if not isinstance(callback, Mapping):
                raise InvalidUpdateError("callback_query payload malformed")
            callback_data = callback.get("data")
            return CallbackUpdate(
                update_id=update_id,
                chat_id=_chat_id_of(callback.get("message")),
                payload=data,
                data=callback_data if isinstance(callback_data, str) else "",
            )

        message = data.get("message")
        if message is None:
            kind = next((key for key in data if key != "update_id"), "")
            return UnsupportedUpdate(update_id=update_id, payload=data, kind=kind)
        if not isinstance(message, Mapping):
            raise InvalidUpdateError("message payload malformed")

        chat_id = _chat_id_of(message)
        text = message.get("text") if isinstance(message.get("text"), str) else ""

        command = _parse_command(message)
        if command is not None:
            name, arguments = command
            return CommandUpdate(
                update_id=update_id,
                chat_id=chat_id,
                payload=data,
                command=name,
                arguments=arguments,
            )

        attachments = tuple(
            doc_type
            for doc_type in DOCUMENT_TYPE_PRECEDENCE
            if message.get(doc_type.value) is not None
        )
        if attachments:
            caption = message.get("caption")
            return MediaUpdate(
                update_id=update_id,
                chat_id=chat_id,
                payload=data,
                attachments=attachments,
                caption=caption if isinstance(caption, str) else "",
            )

        return MessageUpdate(update_id=update_id, chat_id=chat_id, payload=data, text=text)


@dataclass(frozen=True, slots=True, kw_only=True)
class CallbackUpdate(RawUpdate):
    """Response to an inline keyboard button carrying one encoded string."""

    data: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class CommandUpdate(RawUpdate):
    """Message flagged as a bot command."""

    command: str
    arguments: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class MediaUpdate(RawUpdate):
    """Message carrying one or more attachments."""

    attachments: tuple[DocumentType, ...] = ()
    caption: str = ""

    @property
    def document_type(self) -> str:
        """Return the tag of the highest-precedence attachment."""
        for doc_type in DOCUMENT_TYPE_PRECEDENCE:
            if doc_type in self.attachments:
                return doc_type.value
        # NOTE: no attachment still resolves as a document.
        return DocumentType.DOCUMENT.value


@dataclass(frozen=True, slots=True, kw_only=True)
class MessageUpdate(RawUpdate):
    """Plain message that is neither a command nor carries media."""

    text: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class UnsupportedUpdate(RawUpdate):
    """Update that is neither a callback nor a message."""

    kind: str = ""


@dataclass(slots=True)
class DispatchContext:
    """Mutable per-update state handed through the middleware chain."""

    update: RawUpdate
    params: list[str] = field(default_factory=list)
    session: Optional["SessionPort"] = None
    handler: Optional[Handler] = None
    values: dict[str, Any] = field(default_factory=dict)

    def set_handler(self, handler: Handler) -> None:
        """Store the handler the terminal continuation should invoke."""
        self.handler = handler


def _chat_id_of(message: Any) -> Optional[int]:
    if not isinstance(message, Mapping):
        return None
    chat = message.get("chat")
    if not isinstance(chat, Mapping):
        return None
    chat_id = chat.get("id")
    return chat_id if isinstance(chat_id, int) else None


def _parse_command(message: Mapping[str, Any]) -> Optional[tuple[str, str]]:
    """Return ``(command, arguments)`` when the message starts with a bot command."""
    text = message.get("text")
    entities = message.get("entities")
    if not isinstance(text, str) or not isinstance(entities, list) or not entities:
        return None

    entity = entities[0]
    if not isinstance(entity, Mapping):
        return None
    if entity.get("offset") != 0 or entity.get("type") != "bot_command":
        return None

    length = entity.get("length")
    if not isinstance(length, int) or length < 1:
        raise InvalidUpdateError("bot_command entity has no length")

    command = text[1:length]
    if "@" in command:
        command = command.split("@", 1)[0]
    # One separator character follows the command entity.
    arguments = "" if len(text) <= length else text[length + 1 :]
    return command, arguments


__all__ = [
    "FIELD_DELIMITER",
    "ActionKind",
    "DocumentType",
    "DOCUMENT_TYPE_PRECEDENCE",
    "Handler",
    "HandlerEntry",
    "RawUpdate",
    "CallbackUpdate",
    "CommandUpdate",
    "MediaUpdate",
    "MessageUpdate",
    "UnsupportedUpdate",
    "DispatchContext",
]
