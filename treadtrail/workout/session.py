"""Session hand-off for completed or ended-early workout runs."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from treadtrail.core.state import PauseInterval, SegmentResult, TimerState
from treadtrail.workout.metrics import (
    DEFAULT_PACE_SETTINGS,
    PaceSettings,
    calories_kcal,
    distance_miles,
)


@dataclass(frozen=True)
class SessionSummary:
    workout_id: str
    workout_name: str
    started_at_utc: str
    ended_at_utc: str
    completed: bool
    planned_duration_sec: int
    elapsed_duration_sec: int
    paused_duration_sec: int
    final_segment_index: int
    segments: tuple[SegmentResult, ...]
    pauses: tuple[PauseInterval, ...]
    distance_miles: float = 0.0
    calories_kcal: int = 0

    @property
    def skipped_count(self) -> int:
        return sum(1 for result in self.segments if result.skipped)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class SessionRecorder(Protocol):
    def record(self, summary: SessionSummary) -> None:
        ...


class MemorySessionRecorder:
    def __init__(self) -> None:
        self.sessions: list[SessionSummary] = []

    def record(self, summary: SessionSummary) -> None:
        self.sessions.append(summary)

    def recent(self, limit: int = 20) -> list[SessionSummary]:
        return list(reversed(self.sessions))[:limit]


def epoch_ms_to_utc_iso(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc).isoformat()


def build_session_summary(
    state: TimerState,
    ended_at_ms: int,
    pace: PaceSettings = DEFAULT_PACE_SETTINGS,
    weight_kg: float | None = None,
) -> SessionSummary:
    """Freeze the final timer state into the record handed to a recorder.

    When the run ends early the segment in progress is appended as skipped,
    and a pause still open at the end is counted up to ``ended_at_ms``.
    Distance and calories cover every second actually played.
    """
    workout = state.workout
    if workout is None or state.started_at_epoch_ms is None:
        raise ValueError("No workout run to summarize")

    segments = state.segment_results
    if not state.completed:
        segment = workout.segments[state.current_segment_index]
        segments += (
            SegmentResult(
                index=state.current_segment_index,
                pace_class=segment.pace_class,
                planned_sec=segment.duration_sec,
                played_sec=state.segment_elapsed_seconds,
                skipped=True,
            ),
        )

    paused_sec = state.paused_accumulated_seconds
    pauses = state.pauses
    if state.paused_at_epoch_ms is not None:
        open_sec = max(0, (ended_at_ms - state.paused_at_epoch_ms) // 1000)
        paused_sec += open_sec
        pauses += (PauseInterval(state.paused_at_epoch_ms, ended_at_ms, open_sec),)

    return SessionSummary(
        workout_id=workout.id,
        workout_name=workout.name,
        started_at_utc=epoch_ms_to_utc_iso(state.started_at_epoch_ms),
        ended_at_utc=epoch_ms_to_utc_iso(ended_at_ms),
        completed=state.completed,
        planned_duration_sec=workout.total_duration_sec,
        elapsed_duration_sec=state.elapsed_seconds,
        paused_duration_sec=paused_sec,
        final_segment_index=state.current_segment_index,
        segments=segments,
        pauses=pauses,
        distance_miles=distance_miles(state, pace),
        calories_kcal=calories_kcal(state, pace, weight_kg),
    )
