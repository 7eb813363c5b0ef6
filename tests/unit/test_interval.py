"""Unit tests for the Interval timer handle."""

import asyncio

import pytest

from leaklab.core.interval import Interval


class TestIntervalCreation:
    def test_requires_running_loop(self):
        with pytest.raises(RuntimeError):
            Interval(lambda: None, 0.01)

    def test_zero_interval_raises(self):
        async def scenario():
            with pytest.raises(ValueError, match="interval_s must be > 0"):
                Interval(lambda: None, 0)

        asyncio.run(scenario())

    def test_repr(self):
        async def scenario():
            handle = Interval(lambda: None, 0.5)
            text = repr(handle)
            handle.cancel()
            return text

        assert asyncio.run(scenario()) == "Interval(0.5s, active, ticks=0)"


class TestIntervalTicking:
    def test_fires_repeatedly(self):
        calls = []

        async def scenario():
            handle = Interval(lambda: calls.append(1), 0.02)
            await asyncio.sleep(0.11)
            handle.cancel()
            return handle.ticks

        ticks = asyncio.run(scenario())
        assert ticks == len(calls)
        assert 3 <= len(calls) <= 6

    def test_does_not_fire_before_first_interval(self):
        calls = []

        async def scenario():
            handle = Interval(lambda: calls.append(1), 0.2)
            await asyncio.sleep(0.05)
            handle.cancel()

        asyncio.run(scenario())
        assert calls == []

    def test_cancel_stops_ticks(self):
        calls = []

        async def scenario():
            handle = Interval(lambda: calls.append(1), 0.02)
            await asyncio.sleep(0.05)
            handle.cancel()
            seen = len(calls)
            await asyncio.sleep(0.06)
            return seen, handle

        seen, handle = asyncio.run(scenario())
        assert len(calls) == seen
        assert handle.cancelled

    def test_cancel_is_idempotent(self):
        async def scenario():
            handle = Interval(lambda: None, 0.02)
            handle.cancel()
            handle.cancel()
            return handle.cancelled

        assert asyncio.run(scenario())

    def test_raising_callback_keeps_schedule(self):
        errors = []

        def boom():
            raise RuntimeError("tick failed")

        async def scenario():
            asyncio.get_running_loop().set_exception_handler(
                lambda loop, context: errors.append(context["exception"])
            )
            handle = Interval(boom, 0.02)
            await asyncio.sleep(0.09)
            handle.cancel()
            return handle.ticks

        ticks = asyncio.run(scenario())
        assert ticks >= 2
        assert len(errors) == ticks
        assert all(isinstance(e, RuntimeError) for e in errors)
