"""Timer state record and the events that drive it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from treadtrail.workout.model import PaceClass, Segment, WorkoutDefinition


@dataclass(frozen=True)
class SegmentResult:
    index: int
    pace_class: PaceClass
    planned_sec: int
    played_sec: int
    skipped: bool


@dataclass(frozen=True)
class PauseInterval:
    started_at_epoch_ms: int
    ended_at_epoch_ms: int
    duration_sec: int


@dataclass(frozen=True)
class TimerState:
    workout: WorkoutDefinition | None = None
    running: bool = False
    started_at_epoch_ms: int | None = None
    last_tick_at_epoch_ms: int | None = None
    paused_at_epoch_ms: int | None = None
    paused_accumulated_seconds: int = 0
    elapsed_seconds: int = 0
    current_segment_index: int = 0
    segment_elapsed_seconds: int = 0
    skipping: bool = False
    completed: bool = False
    segment_results: tuple[SegmentResult, ...] = ()
    pauses: tuple[PauseInterval, ...] = ()

    @property
    def current_segment(self) -> Segment | None:
        if self.workout is None:
            return None
        return self.workout.segments[self.current_segment_index]

    @property
    def is_last_segment(self) -> bool:
        if self.workout is None:
            return False
        return self.current_segment_index >= len(self.workout.segments) - 1


IDLE_STATE = TimerState()


@dataclass(frozen=True)
class Start:
    workout: WorkoutDefinition
    timestamp_ms: int


@dataclass(frozen=True)
class Pause:
    timestamp_ms: int


@dataclass(frozen=True)
class Resume:
    timestamp_ms: int


@dataclass(frozen=True)
class Tick:
    timestamp_ms: int


@dataclass(frozen=True)
class Skip:
    timestamp_ms: int


@dataclass(frozen=True)
class Reset:
    timestamp_ms: int | None = None


TimerEvent = Union[Start, Pause, Resume, Tick, Skip, Reset]
