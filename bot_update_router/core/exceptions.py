"""Core exception types shared across layers."""

from __future__ import annotations

from typing import Any


class RouterError(Exception):
    """Base error for router failures."""


class InvalidArgumentError(RouterError, ValueError):
    """Raised when a registration argument is missing or malformed."""

    def __init__(self, message: str, argument: str) -> None:
        super().__init__(message)
        self.argument = argument


class HandlerAlreadyExistsError(RouterError):
    """Raised when a handler name is already taken within its action kind."""

    def __init__(self, name: str, kind: Any) -> None:
        label = getattr(kind, "label", kind)
        super().__init__(f"{label} '{name}' already exists.")
        self.name = name
        self.kind = kind


class InvalidUpdateError(RouterError, ValueError):
    """Raised when an inbound platform payload cannot be classified."""


__all__ = [
    "RouterError",
    "InvalidArgumentError",
    "HandlerAlreadyExistsError",
    "InvalidUpdateError",
]
