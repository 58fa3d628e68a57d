"""Cooperative 1 Hz tick source that drives the workout timer."""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import Callable, Optional


TickCallback = Callable[[int], None]
Clock = Callable[[], int]


def epoch_ms() -> int:
    return int(time.time() * 1000)


class TickSource:
    """Repeating asyncio task whose only job is to call ``on_tick(clock())``.

    ``cancel()`` is synchronous: once it returns, no tick from the cancelled
    run can reach ``on_tick``, even one whose sleep has already elapsed.
    """

    def __init__(
        self,
        on_tick: TickCallback,
        clock: Clock = epoch_ms,
        interval_sec: float = 1.0,
    ) -> None:
        if interval_sec <= 0:
            raise ValueError("Tick interval must be > 0")
        self._on_tick = on_tick
        self._clock = clock
        self._interval_sec = interval_sec
        self._task: Optional[asyncio.Task[None]] = None
        self._generation = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            raise RuntimeError("Tick source already running")
        self._generation += 1
        self._task = asyncio.get_running_loop().create_task(self._run(self._generation))

    def cancel(self) -> None:
        self._generation += 1
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def restart(self) -> None:
        self.cancel()
        self.start()

    async def stop(self) -> None:
        task = self._task
        self.cancel()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _run(self, generation: int) -> None:
        while True:
            await asyncio.sleep(self._interval_sec)
            if generation != self._generation:
                return
            try:
                self._on_tick(self._clock())
            except Exception as exc:  # pragma: no cover - callback bugs must not kill the clock
                print(f"[TICK] tick handler failed: {exc}")
