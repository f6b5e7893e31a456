"""Tests for the Clock tick source."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from sequencer.clock import Clock


class FakeTime:
    """Monotonic time source stepped by hand, in seconds."""

    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now


# ---------------------------------------------------------------------------
# Subscription
# ---------------------------------------------------------------------------


class TestSubscription:
    def test_invalid_fps(self):
        with pytest.raises(ValueError):
            Clock(fps=0)

    def test_subscribe_returns_distinct_handles(self):
        clock = Clock()
        first = clock.subscribe(lambda d, e: None)
        second = clock.subscribe(lambda d, e: None)
        assert first != second
        assert clock.subscriber_count == 2

    def test_advance_delivers_delta_and_elapsed(self):
        clock = Clock()
        ticks = []
        clock.subscribe(lambda d, e: ticks.append((d, e)))

        clock.advance(16)
        clock.advance(4)

        assert ticks == [(16, 16), (4, 20)]
        assert clock.elapsed == 20

    def test_subscribers_called_in_order(self):
        clock = Clock()
        order = []
        clock.subscribe(lambda d, e: order.append("a"))
        clock.subscribe(lambda d, e: order.append("b"))
        clock.advance(1)
        assert order == ["a", "b"]

    def test_unsubscribe(self):
        clock = Clock()
        ticks = []
        handle = clock.subscribe(lambda d, e: ticks.append(d))
        assert clock.unsubscribe(handle) is True
        clock.advance(10)
        assert ticks == []

    def test_unsubscribe_unknown_handle(self):
        clock = Clock()
        assert clock.unsubscribe(42) is False
        assert clock.unsubscribe(None) is False

    def test_subscribed_during_step_waits_for_next_step(self):
        clock = Clock()
        late = []

        def first(delta, elapsed):
            if not late:
                clock.subscribe(lambda d, e: late.append(e))
                late.append("subscribed")

        clock.subscribe(first)
        clock.advance(5)
        assert late == ["subscribed"]

        clock.advance(5)
        assert late == ["subscribed", 10]

    def test_unsubscribed_during_step_is_skipped(self):
        clock = Clock()
        calls = []
        handles = {}

        def first(delta, elapsed):
            calls.append("first")
            clock.unsubscribe(handles["second"])

        handles["first"] = clock.subscribe(first)
        handles["second"] = clock.subscribe(lambda d, e: calls.append("second"))

        clock.advance(1)
        assert calls == ["first"]

    def test_reentry_raises(self):
        clock = Clock()
        clock.subscribe(lambda d, e: clock.advance(1))
        with pytest.raises(RuntimeError):
            clock.advance(1)

    def test_clock_usable_after_subscriber_error(self):
        clock = Clock()
        handle = clock.subscribe(lambda d, e: 1 / 0)
        with pytest.raises(ZeroDivisionError):
            clock.advance(1)

        clock.unsubscribe(handle)
        clock.advance(1)
        assert clock.elapsed == 2


# ---------------------------------------------------------------------------
# Real-time ticks
# ---------------------------------------------------------------------------


class TestTick:
    def test_first_tick_is_zero(self):
        fake = FakeTime()
        clock = Clock(time_fn=fake)
        assert clock.tick() == 0.0

    def test_first_tick_only_samples(self):
        fake = FakeTime()
        clock = Clock(time_fn=fake)
        ticks = []
        clock.subscribe(lambda d, e: ticks.append(d))

        clock.tick()
        assert ticks == []
        assert clock.elapsed == 0

    def test_tick_measures_milliseconds(self):
        fake = FakeTime()
        clock = Clock(time_fn=fake)
        ticks = []
        clock.subscribe(lambda d, e: ticks.append(d))

        clock.tick()
        fake.now += 0.016
        assert clock.tick() == pytest.approx(16.0)

        assert ticks == [pytest.approx(16.0)]

    def test_reset_restarts_measurement(self):
        fake = FakeTime()
        clock = Clock(time_fn=fake)
        clock.tick()
        fake.now += 5
        clock.reset()
        assert clock.tick() == 0.0


# ---------------------------------------------------------------------------
# asyncio loop
# ---------------------------------------------------------------------------


class TestRun:
    @pytest.mark.asyncio
    async def test_run_returns_without_subscribers(self):
        clock = Clock(fps=1000)
        await asyncio.wait_for(clock.run(), timeout=1.0)
        assert clock.running is False

    @pytest.mark.asyncio
    async def test_run_stops_when_last_subscriber_leaves(self):
        clock = Clock(fps=1000)
        seen = []
        handles = {}

        def once(delta, elapsed):
            seen.append(delta)
            if len(seen) == 3:
                clock.unsubscribe(handles["once"])

        handles["once"] = clock.subscribe(once)
        with patch("asyncio.sleep", AsyncMock()):
            await clock.run()

        assert len(seen) == 3
        assert clock.running is False

    @pytest.mark.asyncio
    async def test_stop_ends_loop(self):
        clock = Clock(fps=1000)
        count = []

        def subscriber(delta, elapsed):
            count.append(delta)
            if len(count) == 2:
                clock.stop()

        clock.subscribe(subscriber)
        with patch("asyncio.sleep", AsyncMock()):
            await clock.run()

        assert len(count) == 2
        assert clock.subscriber_count == 1

    @pytest.mark.asyncio
    async def test_run_sleeps_frame_interval(self):
        clock = Clock(fps=50)
        handle = clock.subscribe(lambda d, e: clock.unsubscribe(handle))
        mock_sleep = AsyncMock()

        with patch("asyncio.sleep", mock_sleep):
            await clock.run()

        # one frame to take the first time sample, one to deliver
        assert mock_sleep.await_count == 2
        assert mock_sleep.await_args.args[0] == pytest.approx(0.02)
