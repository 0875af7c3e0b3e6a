from __future__ import annotations

import asyncio
import threading

import pytest

from promptverse.services.scheduler import Ticker


class TestTicker:
    def test_rejects_non_positive_interval(self) -> None:
        with pytest.raises(ValueError):
            Ticker("bad", 0, lambda: None)

    def test_fire_counts_runs(self) -> None:
        calls = []
        ticker = Ticker("count", 60, lambda: calls.append(1))
        ticker.fire()
        ticker.fire()
        assert ticker.runs == 2
        assert len(calls) == 2

    def test_failing_callback_does_not_raise(self) -> None:
        def boom():
            raise RuntimeError("nope")

        ticker = Ticker("boom", 60, boom)
        ticker.fire()
        assert ticker.runs == 1

    def test_start_fires_and_stop_cancels(self) -> None:
        calls = []

        async def scenario() -> None:
            ticker = Ticker("loop", 0.01, lambda: calls.append(1))
            await ticker.start()
            await ticker.start()
            assert ticker.running
            await asyncio.sleep(0.05)
            await ticker.stop()
            assert not ticker.running
            stopped_at = len(calls)
            await asyncio.sleep(0.03)
            assert len(calls) == stopped_at

        asyncio.run(scenario())
        assert len(calls) >= 2

    def test_callback_runs_off_the_event_loop_thread(self) -> None:
        threads = []

        async def scenario() -> int:
            ticker = Ticker("worker", 0.01, lambda: threads.append(threading.get_ident()))
            await ticker.start()
            await asyncio.sleep(0.03)
            await ticker.stop()
            return threading.get_ident()

        loop_thread = asyncio.run(scenario())
        assert threads
        assert loop_thread not in threads

    def test_stop_without_start(self) -> None:
        async def scenario() -> None:
            ticker = Ticker("idle", 1, lambda: None)
            await ticker.stop()
            assert not ticker.running

        asyncio.run(scenario())
