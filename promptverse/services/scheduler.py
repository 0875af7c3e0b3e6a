from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from starlette.concurrency import run_in_threadpool

log = logging.getLogger("scheduler")


class Ticker:
    """Runs a synchronous callback on a fixed interval, off the event loop, until stopped."""

    def __init__(self, name: str, interval_seconds: float, callback: Callable[[], object]) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self.interval_seconds = interval_seconds
        self._callback = callback
        self._task: Optional[asyncio.Task[None]] = None
        self._lock = asyncio.Lock()
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        async with self._lock:
            if self.running:
                return
            self._task = asyncio.create_task(self._run(), name=f"ticker-{self.name}")
            log.info("ticker.started name=%s interval=%s", self.name, self.interval_seconds)

    async def stop(self) -> None:
        async with self._lock:
            if not self._task:
                return
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            finally:
                self._task = None
            log.info("ticker.stopped name=%s runs=%d", self.name, self.runs)

    def fire(self) -> None:
        try:
            self._callback()
        except Exception:
            log.exception("ticker.callback_failed name=%s", self.name)
        finally:
            self.runs += 1

    async def _run(self) -> None:
        while True:
            await run_in_threadpool(self.fire)
            await asyncio.sleep(self.interval_seconds)
