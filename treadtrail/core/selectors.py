"""Read-only values derived from a ``TimerState``."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from treadtrail.core.state import TimerState
from treadtrail.workout.metrics import (
    DEFAULT_PACE_SETTINGS,
    PaceSettings,
    calories_kcal,
    distance_miles,
)
from treadtrail.workout.model import PaceClass, Segment


Phase = Literal["idle", "running", "paused", "completed"]


@dataclass(frozen=True)
class WorkoutProgress:
    phase: Phase
    workout_name: str
    segment_index: int
    segment_total: int
    segment_label: str
    pace_class: PaceClass
    incline_pct: float
    segment_duration_sec: int
    segment_elapsed_sec: int
    segment_remaining_sec: int
    elapsed_total_sec: int
    total_duration_sec: int
    total_remaining_sec: int
    progress_fraction: float
    next_pace_class: PaceClass | None
    skipping: bool
    distance_miles: float = 0.0
    calories_kcal: int = 0


def phase(state: TimerState) -> Phase:
    if state.workout is None:
        return "idle"
    if state.completed:
        return "completed"
    return "running" if state.running else "paused"


def total_duration_seconds(state: TimerState) -> int:
    if state.workout is None:
        return 0
    return state.workout.total_duration_sec


def segment_remaining_seconds(state: TimerState) -> int:
    # Ceiling, so a countdown never shows 0 while time remains.
    segment = state.current_segment
    if segment is None:
        return 0
    return max(0, math.ceil(segment.duration_sec - state.segment_elapsed_seconds))


def total_remaining_seconds(state: TimerState) -> int:
    return max(0, total_duration_seconds(state) - state.elapsed_seconds)


def progress_fraction(state: TimerState) -> float:
    total = total_duration_seconds(state)
    if total <= 0:
        return 0.0
    return min(1.0, max(0.0, state.elapsed_seconds / total))


def next_segment(state: TimerState) -> Segment | None:
    if state.workout is None or state.is_last_segment:
        return None
    return state.workout.segments[state.current_segment_index + 1]


def segment_label(segment: Segment, index: int) -> str:
    label = segment.metadata.get("label") if segment.metadata else None
    if isinstance(label, str) and label.strip():
        return label.strip()
    return f"{segment.pace_class.title()} {index + 1}"


def progress_snapshot(
    state: TimerState,
    pace: PaceSettings = DEFAULT_PACE_SETTINGS,
    weight_kg: float | None = None,
) -> WorkoutProgress | None:
    """Bundle every display value for the current state, or None when idle."""
    segment = state.current_segment
    if state.workout is None or segment is None:
        return None
    upcoming = next_segment(state)
    return WorkoutProgress(
        phase=phase(state),
        workout_name=state.workout.name,
        segment_index=state.current_segment_index,
        segment_total=len(state.workout.segments),
        segment_label=segment_label(segment, state.current_segment_index),
        pace_class=segment.pace_class,
        incline_pct=segment.incline_pct,
        segment_duration_sec=segment.duration_sec,
        segment_elapsed_sec=state.segment_elapsed_seconds,
        segment_remaining_sec=segment_remaining_seconds(state),
        elapsed_total_sec=state.elapsed_seconds,
        total_duration_sec=total_duration_seconds(state),
        total_remaining_sec=total_remaining_seconds(state),
        progress_fraction=progress_fraction(state),
        next_pace_class=upcoming.pace_class if upcoming is not None else None,
        skipping=state.skipping,
        distance_miles=distance_miles(state, pace),
        calories_kcal=calories_kcal(state, pace, weight_kg),
    )


def format_clock(total_seconds: float) -> str:
    """Count-up display: floors partial seconds."""
    minutes, seconds = divmod(max(0, math.floor(total_seconds)), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours:d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def format_countdown(total_seconds: float) -> str:
    """Count-down display: rounds partial seconds up."""
    return format_clock(math.ceil(max(0.0, total_seconds)))


def format_duration(total_seconds: int, show_seconds: bool = True) -> str:
    if total_seconds <= 0:
        return "0s"
    hours, rest = divmod(int(total_seconds), 3600)
    minutes, seconds = divmod(rest, 60)

    parts: list[str] = []
    if hours:
        parts.append(f"{hours}h")
    if minutes or hours:
        parts.append(f"{minutes}m")
    if show_seconds and (seconds or not parts):
        parts.append(f"{seconds}s")
    return " ".join(parts) or "0m"
