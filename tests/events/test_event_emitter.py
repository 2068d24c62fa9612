"""
Tests for the event system.

This module contains tests for the EventEmitter and EventBus classes
to ensure they provide the expected behavior for event handling.
"""

import logging
import threading
from unittest.mock import MagicMock

from cribsharp.events import EventEmitter, EventBus, EngineEventType, EventPriority


def test_on_with_string_event_type():
    """Test subscribing to an event with a string event type."""
    emitter = EventEmitter()
    callback = MagicMock()

    unsubscribe = emitter.on("test_event", callback)

    test_data = {"value": "test"}
    emitter.emit("test_event", test_data)
    callback.assert_called_once_with(test_data)

    # Unsubscribe and emit again
    unsubscribe()
    emitter.emit("test_event", {"value": "test2"})
    assert callback.call_count == 1


def test_enum_and_name_are_the_same_event():
    emitter = EventEmitter()
    callback = MagicMock()

    emitter.on(EngineEventType.CARD_PLAYED, callback)
    emitter.emit("CARD_PLAYED", {"card": "5 of ♥"})

    callback.assert_called_once_with({"card": "5 of ♥"})


def test_once():
    """Test that a once handler runs a single time."""
    emitter = EventEmitter()
    callback = MagicMock()

    emitter.once(EngineEventType.POINTS_SCORED, callback)
    emitter.emit(EngineEventType.POINTS_SCORED, {"points": 2})
    emitter.emit(EngineEventType.POINTS_SCORED, {"points": 1})

    callback.assert_called_once_with({"points": 2})


def test_on_any_receives_event_name_and_data():
    emitter = EventEmitter()
    callback = MagicMock()

    unsubscribe = emitter.on_any(callback)
    emitter.emit(EngineEventType.GAME_ENDED, {"winner": "ai"})
    callback.assert_called_once_with(("GAME_ENDED", {"winner": "ai"}))

    unsubscribe()
    emitter.emit(EngineEventType.GAME_ENDED, {"winner": "user"})
    assert callback.call_count == 1


def test_priority_order():
    """Test that handlers run from highest to lowest priority."""
    emitter = EventEmitter()
    calls = []

    emitter.on("evt", lambda _: calls.append("low"), EventPriority.LOW)
    emitter.on("evt", lambda _: calls.append("normal"))
    emitter.on("evt", lambda _: calls.append("critical"), EventPriority.CRITICAL)
    emitter.on("evt", lambda _: calls.append("high"), EventPriority.HIGH)
    emitter.on("evt", lambda _: calls.append("normal-2"))

    emitter.emit("evt", {})

    assert calls == ["critical", "high", "normal", "normal-2", "low"]


def test_handler_error_is_logged(caplog):
    """Test that a failing handler does not stop the others."""
    emitter = EventEmitter()
    after = MagicMock()

    def broken(_):
        raise RuntimeError("boom")

    emitter.on("evt", broken, EventPriority.HIGH)
    emitter.on("evt", after)

    with caplog.at_level(logging.ERROR, logger="cribsharp.events"):
        emitter.emit("evt", {"x": 1})

    after.assert_called_once_with({"x": 1})
    assert "boom" in caplog.text


def test_remove_all_listeners():
    emitter = EventEmitter()
    specific = MagicMock()
    other = MagicMock()
    global_cb = MagicMock()

    emitter.on("a", specific)
    emitter.on("b", other)
    emitter.on_any(global_cb)

    emitter.remove_all_listeners("a")
    emitter.emit("a", {})
    emitter.emit("b", {})
    specific.assert_not_called()
    other.assert_called_once()
    assert global_cb.call_count == 2

    emitter.remove_all_listeners()
    emitter.emit("b", {})
    assert other.call_count == 1
    assert global_cb.call_count == 2


def test_event_bus_singleton():
    """Test that EventBus always hands out the same emitter."""
    first = EventBus.get_instance()
    second = EventBus.get_instance()
    assert first is second
    assert isinstance(first, EventEmitter)


def test_emit_from_threads():
    emitter = EventEmitter()
    received = []
    lock = threading.Lock()

    def handler(data):
        with lock:
            received.append(data["n"])

    emitter.on("evt", handler)
    threads = [
        threading.Thread(target=emitter.emit, args=("evt", {"n": i}))
        for i in range(20)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(received) == list(range(20))
