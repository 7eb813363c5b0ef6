"""Unit tests for the event listener leak and its emitter."""

from __future__ import annotations

import asyncio

from leaklab.patterns.emitter import EventEmitter
from leaklab.patterns.event import EVENT_NAME, EventLeak, create_listener


class TestEventEmitter:
    def test_emit_calls_listeners_in_order(self):
        emitter = EventEmitter()
        calls = []
        emitter.on("x", lambda v: calls.append(("a", v)))
        emitter.on("x", lambda v: calls.append(("b", v)))

        assert emitter.emit("x", 1) is True
        assert calls == [("a", 1), ("b", 1)]

    def test_emit_without_listeners(self):
        assert EventEmitter().emit("nothing") is False

    def test_listener_added_during_emit_waits_for_next(self):
        emitter = EventEmitter()
        calls = []

        def adder():
            calls.append("adder")
            emitter.on("x", lambda: calls.append("late"))

        emitter.on("x", adder)
        emitter.emit("x")
        assert calls == ["adder"]
        assert emitter.listener_count("x") == 2

    def test_remove_all_for_one_event(self):
        emitter = EventEmitter()
        emitter.on("a", print)
        emitter.on("b", print)
        emitter.remove_all_listeners("a")
        assert emitter.listener_count("a") == 0
        assert emitter.listener_count("b") == 1

    def test_remove_all_events(self):
        emitter = EventEmitter()
        emitter.on("a", print)
        emitter.on("b", print)
        emitter.remove_all_listeners()
        assert repr(emitter) == "EventEmitter({})"


class TestEventLeak:
    def test_listener_runs(self):
        create_listener()("payload")

    def test_trigger_reports_listener_count(self):
        engine = EventLeak()
        for _ in range(3):
            engine._tick()
        assert engine.trigger() == 3
        assert engine.count == 3

    def test_trigger_without_listeners(self):
        assert EventLeak().trigger() == 0

    def test_shared_emitter(self):
        emitter = EventEmitter()
        received = []
        emitter.on(EVENT_NAME, received.append)
        engine = EventLeak(emitter=emitter, interval_ms=10)

        async def scenario():
            engine.start()
            await asyncio.sleep(0.035)
            notified = engine.trigger()
            response = engine.stop()
            return notified, response

        notified, response = asyncio.run(scenario())

        assert received == ["test-data"]
        assert notified == response.cleared_count
        assert response.message == f"Event leak stopped, removed {notified} listeners"
        assert emitter.listener_count(EVENT_NAME) == 0

    def test_stats_dict(self):
        engine = EventLeak()
        engine._tick()
        engine._tick()
        assert engine.status().to_dict() == {
            "activeListeners": 2,
            "totalMemoryAllocated": 16,
            "isLeaking": False,
        }
