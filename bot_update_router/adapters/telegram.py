"""Adapter converting python-telegram-bot updates into router updates."""

from __future__ import annotations

from telegram import Update

from bot_update_router.core.models import RawUpdate


def raw_update_from_telegram(update: Update) -> RawUpdate:
    """Classify a ``telegram.Update`` into the router's update union."""
    return RawUpdate.from_data(update.to_dict())


__all__ = ["raw_update_from_telegram"]
