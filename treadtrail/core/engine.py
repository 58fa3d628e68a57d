"""Single-owner runtime around the pure timer machine."""

from __future__ import annotations

from collections import deque
from typing import Callable

from treadtrail.core.machine import Transition, apply
from treadtrail.core.selectors import WorkoutProgress, progress_snapshot
from treadtrail.core.state import (
    IDLE_STATE,
    Pause,
    Reset,
    Resume,
    Skip,
    Start,
    Tick,
    TimerEvent,
    TimerState,
)
from treadtrail.workout.metrics import DEFAULT_PACE_SETTINGS, PaceSettings
from treadtrail.workout.model import WorkoutDefinition
from treadtrail.workout.runner import Clock, TickSource, epoch_ms


StateCallback = Callable[[TimerState], None]
ProgressCallback = Callable[[WorkoutProgress], None]


class WorkoutEngine:
    """Owns the ``TimerState`` and applies events strictly in arrival order.

    Events dispatched from inside a callback are queued and applied after the
    current one, never interleaved with it. Tick scheduling follows the effects
    returned by each transition, so the tick source is already cancelled when
    ``pause()`` or ``reset()`` returns.
    """

    def __init__(
        self,
        clock: Clock = epoch_ms,
        tick_interval_sec: float = 1.0,
        autotick: bool = True,
        debug_timer: bool = False,
        pace_settings: PaceSettings = DEFAULT_PACE_SETTINGS,
        weight_kg: float | None = None,
        on_change: StateCallback | None = None,
        on_segment_change: ProgressCallback | None = None,
        on_completed: StateCallback | None = None,
    ) -> None:
        self.state: TimerState = IDLE_STATE
        self._clock = clock
        self._autotick = autotick
        self._debug_timer = debug_timer
        self.pace_settings = pace_settings
        self.weight_kg = weight_kg
        self._on_change = on_change
        self._on_segment_change = on_segment_change
        self._on_completed = on_completed
        self._ticks = TickSource(self._on_tick, clock=clock, interval_sec=tick_interval_sec)
        self._queue: deque[TimerEvent] = deque()
        self._draining = False

    @property
    def progress(self) -> WorkoutProgress | None:
        return progress_snapshot(self.state, self.pace_settings, self.weight_kg)

    @property
    def ticking(self) -> bool:
        return self._ticks.is_running

    def now_ms(self) -> int:
        return self._clock()

    def dispatch(self, event: TimerEvent) -> Transition | None:
        """Apply ``event``; returns None when it was queued behind a running dispatch."""
        self._queue.append(event)
        if self._draining:
            return None

        self._draining = True
        result: Transition | None = None
        try:
            while self._queue:
                current = self._queue.popleft()
                transition = self._apply(current)
                if current is event:
                    result = transition
        finally:
            self._draining = False
        return result

    def start(self, workout: WorkoutDefinition) -> Transition | None:
        return self.dispatch(Start(workout=workout, timestamp_ms=self._clock()))

    def pause(self) -> Transition | None:
        return self.dispatch(Pause(timestamp_ms=self._clock()))

    def resume(self) -> Transition | None:
        return self.dispatch(Resume(timestamp_ms=self._clock()))

    def skip(self) -> Transition | None:
        return self.dispatch(Skip(timestamp_ms=self._clock()))

    def tick(self, timestamp_ms: int | None = None) -> Transition | None:
        ts = self._clock() if timestamp_ms is None else timestamp_ms
        return self.dispatch(Tick(timestamp_ms=ts))

    def reset(self) -> Transition | None:
        return self.dispatch(Reset(timestamp_ms=self._clock()))

    async def shutdown(self) -> None:
        await self._ticks.stop()

    def _on_tick(self, timestamp_ms: int) -> None:
        self.dispatch(Tick(timestamp_ms=timestamp_ms))

    def _apply(self, event: TimerEvent) -> Transition:
        previous = self.state
        transition = apply(previous, event)
        self.state = transition.state

        if transition.rejection is not None:
            if self._debug_timer:
                print(f"[TIMER] {type(event).__name__.lower()} rejected: {transition.rejection}")
            return transition

        for effect in transition.effects:
            if effect == "start_ticks":
                self._start_ticks()
            elif effect == "stop_ticks":
                self._ticks.cancel()
            elif effect == "restart_ticks":
                self._restart_ticks()

        if transition.state is not previous and self._on_change is not None:
            self._on_change(transition.state)

        if "segment_changed" in transition.effects:
            progress = progress_snapshot(transition.state, self.pace_settings, self.weight_kg)
            if progress is not None:
                if self._debug_timer:
                    print(
                        f"[TIMER] segment {progress.segment_index + 1}/{progress.segment_total} "
                        f"{progress.segment_label} at {progress.elapsed_total_sec}s"
                    )
                if self._on_segment_change is not None:
                    self._on_segment_change(progress)

        if transition.signal == "completed":
            if self._debug_timer:
                print(f"[TIMER] workout completed at {transition.state.elapsed_seconds}s")
            if self._on_completed is not None:
                self._on_completed(transition.state)
        return transition

    def _start_ticks(self) -> None:
        if self._autotick and not self._ticks.is_running:
            self._ticks.start()

    def _restart_ticks(self) -> None:
        if self._autotick:
            self._ticks.restart()
