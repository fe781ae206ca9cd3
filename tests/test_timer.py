"""Tests for strider.timer -- asyncio and manual duration tickers."""

import asyncio

from strider.timer import DurationTimer, ManualTimer


class TestManualTimer:
    def test_inactive_until_started(self):
        t = ManualTimer()
        assert t.active is False
        assert t.advance(5) == 0

    def test_ticks_per_interval(self):
        ticks = []
        t = ManualTimer()
        t.start(lambda: ticks.append(1))
        assert t.advance(3) == 3
        assert len(ticks) == 3

    def test_fractional_carry(self):
        ticks = []
        t = ManualTimer()
        t.start(lambda: ticks.append(1))
        t.advance(0.6)
        assert ticks == []
        t.advance(0.6)
        assert len(ticks) == 1

    def test_cancel_stops_ticks(self):
        ticks = []
        t = ManualTimer()
        t.start(lambda: ticks.append(1))
        t.advance(2)
        t.cancel()
        assert t.advance(10) == 0
        assert len(ticks) == 2

    def test_cancel_from_callback(self):
        t = ManualTimer()
        ticks = []

        def on_tick():
            ticks.append(1)
            t.cancel()

        t.start(on_tick)
        assert t.advance(5) == 1
        assert t.active is False

    def test_restart_replaces_previous(self):
        first, second = [], []
        t = ManualTimer()
        t.start(lambda: first.append(1))
        t.advance(0.5)
        t.start(lambda: second.append(1))
        t.advance(1)
        assert first == []
        assert second == [1]


class TestDurationTimer:
    def test_ticks_on_event_loop(self):
        ticks = []

        async def run():
            t = DurationTimer(interval=0.01)
            t.start(lambda: ticks.append(1))
            await asyncio.sleep(0.055)
            t.cancel()

        asyncio.run(run())
        assert 2 <= len(ticks) <= 6

    def test_no_tick_after_cancel(self):
        ticks = []

        async def run():
            t = DurationTimer(interval=0.01)
            t.start(lambda: ticks.append(1))
            await asyncio.sleep(0.025)
            t.cancel()
            count = len(ticks)
            await asyncio.sleep(0.05)
            return count

        count = asyncio.run(run())
        assert len(ticks) == count
        assert count >= 1

    def test_cancel_inside_callback(self):
        ticks = []

        async def run():
            t = DurationTimer(interval=0.01)

            def on_tick():
                ticks.append(1)
                t.cancel()

            t.start(on_tick)
            await asyncio.sleep(0.05)
            return t.active

        assert asyncio.run(run()) is False
        assert ticks == [1]

    def test_restart_keeps_single_ticker(self):
        first, second = [], []

        async def run():
            t = DurationTimer(interval=0.01)
            t.start(lambda: first.append(1))
            t.start(lambda: second.append(1))
            await asyncio.sleep(0.035)
            t.cancel()

        asyncio.run(run())
        assert first == []
        assert len(second) >= 2

    def test_cancel_idempotent(self):
        t = DurationTimer()
        t.cancel()
        t.cancel()
        assert t.active is False

    def test_reusable_on_a_new_event_loop(self):
        ticks = []
        t = DurationTimer(interval=0.01)

        async def run():
            t.start(lambda: ticks.append(1))
            await asyncio.sleep(0.025)
            t.cancel()

        asyncio.run(run())
        first = len(ticks)
        asyncio.run(run())
        assert first >= 1
        assert len(ticks) > first
        assert t.active is False
