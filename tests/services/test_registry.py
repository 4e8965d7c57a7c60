"""Unit tests for the handler registry."""

from __future__ import annotations

import threading

import pytest

from bot_update_router.core.exceptions import HandlerAlreadyExistsError, InvalidArgumentError
from bot_update_router.core.models import ActionKind, DispatchContext
from bot_update_router.services.registry import HandlerRegistry


def first_handler(context: DispatchContext) -> None:
    """Handler registered first in duplicate tests."""
    context.values["called"] = "first"


def second_handler(context: DispatchContext) -> None:
    """Handler attempting to replace the first one."""
    context.values["called"] = "second"


def test_add_and_get_handler():
    """Registered handlers are returned with their name and kind."""
    registry = HandlerRegistry()
    entry = registry.add_handler("start", ActionKind.COMMAND, first_handler)

    found = registry.get_handler("start", ActionKind.COMMAND)
    assert found is entry
    assert found.name == "start"
    assert found.kind is ActionKind.COMMAND
    assert found.handler is first_handler


def test_duplicate_registration_keeps_first_handler():
    """The second registration fails and the first handler stays."""
    registry = HandlerRegistry()
    registry.add_handler("buy", ActionKind.CALLBACK, first_handler)

    with pytest.raises(HandlerAlreadyExistsError) as excinfo:
        registry.add_handler("buy", ActionKind.CALLBACK, second_handler)

    assert excinfo.value.name == "buy"
    assert excinfo.value.kind is ActionKind.CALLBACK
    assert "Callback Handler" in str(excinfo.value)
    entry = registry.get_handler("buy", ActionKind.CALLBACK)
    assert entry is not None and entry.handler is first_handler


def test_same_name_allowed_across_kinds():
    """Names are only unique within one action kind."""
    registry = HandlerRegistry()
    registry.add_handler("photo", ActionKind.DOCUMENT, first_handler)
    registry.add_handler("photo", ActionKind.MESSAGE_STATE, second_handler)

    assert registry.get_handler("photo", ActionKind.DOCUMENT).handler is first_handler
    assert registry.get_handler("photo", ActionKind.MESSAGE_STATE).handler is second_handler
    assert len(registry) == 2


@pytest.mark.parametrize("kind", list(ActionKind))
def test_empty_name_rejected_for_every_kind(kind: ActionKind):
    """Empty names fail with InvalidArgumentError regardless of kind."""
    registry = HandlerRegistry()
    with pytest.raises(InvalidArgumentError) as excinfo:
        registry.add_handler("", kind, first_handler)
    assert excinfo.value.argument == "name"
    assert len(registry) == 0


def test_unknown_kind_and_non_callable_rejected():
    """Registration validates the kind and the handler."""
    registry = HandlerRegistry()
    with pytest.raises(InvalidArgumentError) as excinfo:
        registry.add_handler("start", "inline_query", first_handler)
    assert excinfo.value.argument == "kind"

    with pytest.raises(InvalidArgumentError) as excinfo:
        registry.add_handler("start", ActionKind.COMMAND, "not callable")  # type: ignore[arg-type]
    assert excinfo.value.argument == "handler"


def test_kind_accepts_string_values():
    """String kind values are coerced to ActionKind members."""
    registry = HandlerRegistry()
    entry = registry.add_handler("help", "command", first_handler)
    assert entry.kind is ActionKind.COMMAND
    assert registry.get_handler("help", "command") is entry


def test_lookup_misses_do_not_create_partitions():
    """Lookups on empty partitions return None without side effects."""
    registry = HandlerRegistry()
    assert registry.get_handler("anything", ActionKind.DOCUMENT) is None
    assert registry.handlers() == {}

    registry.add_handler("start", ActionKind.COMMAND, first_handler)
    assert registry.get_handler("stop", ActionKind.COMMAND) is None
    assert registry.handlers(ActionKind.DOCUMENT) == {}
    assert ("command", "start") in registry
    assert ("command", "stop") not in registry
    assert "start" not in registry


def test_route_decorator_registers_and_returns_function():
    """The decorator registers the function and leaves it unchanged."""
    registry = HandlerRegistry()

    @registry.route("awaiting_name", ActionKind.MESSAGE_STATE)
    def on_name(context: DispatchContext) -> None:
        context.values["name"] = True

    assert on_name.__name__ == "on_name"
    assert registry.get_handler("awaiting_name", ActionKind.MESSAGE_STATE).handler is on_name


def test_handlers_snapshot_is_a_copy():
    """Mutating a snapshot does not touch the registry."""
    registry = HandlerRegistry()
    registry.add_handler("start", ActionKind.COMMAND, first_handler)

    snapshot = registry.handlers(ActionKind.COMMAND)
    snapshot.pop("start")
    assert registry.get_handler("start", ActionKind.COMMAND) is not None
    assert list(registry.handlers()) == ["command:start"]


def test_concurrent_registration_keeps_every_entry():
    """Writers on several threads never lose entries."""
    registry = HandlerRegistry()
    errors: list[Exception] = []

    def register(prefix: str) -> None:
        try:
            for index in range(50):
                registry.add_handler(f"{prefix}-{index}", ActionKind.CALLBACK, first_handler)
        except Exception as exc:  # pylint: disable=broad-except
            errors.append(exc)

    threads = [threading.Thread(target=register, args=(f"t{n}",)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert not errors
    assert len(registry) == 200
    assert registry.get_handler("t3-49", ActionKind.CALLBACK) is not None


def test_lookup_with_unhashable_or_unknown_kind_returns_none():
    """Lookups never raise for kinds outside ActionKind."""
    registry = HandlerRegistry()
    registry.add_handler("start", ActionKind.COMMAND, first_handler)

    assert registry.get_handler("start", ["command"]) is None  # type: ignore[arg-type]
    assert registry.get_handler("start", "inline_query") is None
    assert (["command"], "start") not in registry


def test_readers_see_existing_entries_during_registration():
    """Lookups running alongside a writer always find existing entries."""
    registry = HandlerRegistry()
    registry.add_handler("start", ActionKind.COMMAND, first_handler)
    done = threading.Event()
    misses: list[int] = []
    reads = 0

    def read() -> None:
        nonlocal reads
        while True:
            finished = done.is_set()
            if registry.get_handler("start", ActionKind.COMMAND) is None:
                misses.append(reads)
            reads += 1
            if finished:
                break

    def write() -> None:
        try:
            for index in range(500):
                registry.add_handler(f"cmd-{index}", ActionKind.COMMAND, second_handler)
        finally:
            done.set()

    reader = threading.Thread(target=read)
    writer = threading.Thread(target=write)
    reader.start()
    writer.start()
    writer.join()
    reader.join()

    assert not misses
    assert reads > 0
    assert len(registry) == 501
