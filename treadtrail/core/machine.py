"""Pure transition function for the workout timer.

``apply(state, event)`` is the only way a ``TimerState`` changes. It never
reads the wall clock: every event carries its own epoch-millisecond timestamp.
Invalid transitions come back as the unchanged state plus a rejection reason,
and side effects (ticking, cues, completion) come back as instructions for the
caller to carry out.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from treadtrail.core.state import (
    IDLE_STATE,
    Pause,
    PauseInterval,
    Reset,
    Resume,
    SegmentResult,
    Skip,
    Start,
    Tick,
    TimerEvent,
    TimerState,
)


Rejection = Literal[
    "invalid_workout",
    "nothing_to_skip",
    "not_running",
    "not_paused",
    "already_skipping",
    "already_active",
]
Effect = Literal["start_ticks", "stop_ticks", "restart_ticks", "segment_changed"]
Signal = Literal["completed"]


@dataclass(frozen=True)
class Transition:
    state: TimerState
    rejection: Rejection | None = None
    signal: Signal | None = None
    effects: tuple[Effect, ...] = ()

    @property
    def accepted(self) -> bool:
        return self.rejection is None


def apply(state: TimerState, event: TimerEvent) -> Transition:
    if isinstance(event, Tick):
        return _tick(state, event)
    if isinstance(event, Skip):
        return _skip(state, event)
    if isinstance(event, Pause):
        return _pause(state, event)
    if isinstance(event, Resume):
        return _resume(state, event)
    if isinstance(event, Start):
        return _start(state, event)
    if isinstance(event, Reset):
        return Transition(state=IDLE_STATE, effects=("stop_ticks",))
    raise TypeError(f"Unsupported timer event {event!r}")


def _reject(state: TimerState, reason: Rejection) -> Transition:
    return Transition(state=state, rejection=reason)


def _start(state: TimerState, event: Start) -> Transition:
    if not event.workout.is_valid():
        return _reject(state, "invalid_workout")
    if state.workout is not None and not state.completed:
        return _reject(state, "already_active")

    return Transition(
        state=TimerState(
            workout=event.workout,
            running=True,
            started_at_epoch_ms=event.timestamp_ms,
            last_tick_at_epoch_ms=event.timestamp_ms,
        ),
        effects=("start_ticks", "segment_changed"),
    )


def _pause(state: TimerState, event: Pause) -> Transition:
    if not state.running:
        return _reject(state, "not_running")
    return Transition(
        state=replace(state, running=False, paused_at_epoch_ms=event.timestamp_ms),
        effects=("stop_ticks",),
    )


def _resume(state: TimerState, event: Resume) -> Transition:
    if state.running or state.workout is None or state.completed:
        return _reject(state, "not_paused")

    # The paused interval is recorded but never added to elapsed time.
    return Transition(
        state=replace(
            _close_pause(state, event.timestamp_ms),
            running=True,
            last_tick_at_epoch_ms=event.timestamp_ms,
        ),
        effects=("start_ticks",),
    )


def _tick(state: TimerState, event: Tick) -> Transition:
    if state.skipping:
        return _reject(state, "already_skipping")
    if not state.running or state.workout is None:
        return _reject(state, "not_running")

    last_tick = state.last_tick_at_epoch_ms
    if last_tick is None:
        return Transition(state=replace(state, last_tick_at_epoch_ms=event.timestamp_ms))

    delta = (event.timestamp_ms - last_tick) // 1000
    if delta < 1:
        # last_tick stays put so sub-second fragments add up across ticks.
        return Transition(state=state)

    advanced, effects = _advance(state, delta)
    return Transition(
        state=replace(advanced, last_tick_at_epoch_ms=event.timestamp_ms),
        signal="completed" if advanced.completed else None,
        effects=effects,
    )


def _advance(state: TimerState, seconds: int) -> tuple[TimerState, tuple[Effect, ...]]:
    """Play ``seconds`` forward, crossing as many segment boundaries as needed."""
    assert state.workout is not None
    segments = state.workout.segments
    index = state.current_segment_index
    segment_elapsed = state.segment_elapsed_seconds
    elapsed = state.elapsed_seconds
    results = list(state.segment_results)
    effects: list[Effect] = []

    remaining = seconds
    while remaining > 0:
        segment = segments[index]
        step = min(remaining, segment.duration_sec - segment_elapsed)
        segment_elapsed += step
        elapsed += step
        remaining -= step
        if segment_elapsed < segment.duration_sec:
            break

        results.append(
            SegmentResult(
                index=index,
                pace_class=segment.pace_class,
                planned_sec=segment.duration_sec,
                played_sec=segment_elapsed,
                skipped=False,
            )
        )
        if index + 1 >= len(segments):
            # Anything past the end of the last segment is dropped.
            return (
                replace(
                    state,
                    elapsed_seconds=elapsed,
                    current_segment_index=index,
                    segment_elapsed_seconds=segment_elapsed,
                    segment_results=tuple(results),
                    running=False,
                    completed=True,
                ),
                tuple(effects) + ("stop_ticks",),
            )
        index += 1
        segment_elapsed = 0
        effects.append("segment_changed")

    return (
        replace(
            state,
            elapsed_seconds=elapsed,
            current_segment_index=index,
            segment_elapsed_seconds=segment_elapsed,
            segment_results=tuple(results),
        ),
        tuple(effects),
    )


def _skip(state: TimerState, event: Skip) -> Transition:
    if state.workout is None or state.completed:
        return _reject(state, "nothing_to_skip")
    if state.skipping:
        return _reject(state, "already_skipping")

    skipping = replace(state, skipping=True)
    segment = skipping.current_segment
    assert segment is not None
    index = skipping.current_segment_index

    # Land exactly on the cumulative boundary from the counters already held,
    # never from a wall-clock delta.
    remaining = segment.duration_sec - skipping.segment_elapsed_seconds
    results = skipping.segment_results + (
        SegmentResult(
            index=index,
            pace_class=segment.pace_class,
            planned_sec=segment.duration_sec,
            played_sec=skipping.segment_elapsed_seconds,
            skipped=True,
        ),
    )

    if skipping.is_last_segment:
        finished = replace(
            _close_pause(skipping, event.timestamp_ms),
            elapsed_seconds=skipping.elapsed_seconds + remaining,
            segment_elapsed_seconds=segment.duration_sec,
            segment_results=results,
            last_tick_at_epoch_ms=event.timestamp_ms,
            running=False,
            completed=True,
            skipping=False,
        )
        return Transition(state=finished, signal="completed", effects=("stop_ticks",))

    advanced = replace(
        skipping,
        elapsed_seconds=skipping.elapsed_seconds + remaining,
        current_segment_index=index + 1,
        segment_elapsed_seconds=0,
        segment_results=results,
        last_tick_at_epoch_ms=event.timestamp_ms,
        skipping=False,
    )
    effects: tuple[Effect, ...] = ("segment_changed",)
    if advanced.running:
        effects += ("restart_ticks",)
    return Transition(state=advanced, effects=effects)


def _close_pause(state: TimerState, timestamp_ms: int) -> TimerState:
    paused_at = state.paused_at_epoch_ms
    if paused_at is None:
        return state
    duration_sec = max(0, (timestamp_ms - paused_at) // 1000)
    return replace(
        state,
        paused_at_epoch_ms=None,
        paused_accumulated_seconds=state.paused_accumulated_seconds + duration_sec,
        pauses=state.pauses + (PauseInterval(paused_at, timestamp_ms, duration_sec),),
    )
