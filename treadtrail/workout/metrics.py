"""Distance and calorie estimates from per-pace-class treadmill speeds."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, cast

from treadtrail.core.state import TimerState
from treadtrail.workout.model import PACE_CLASSES, PaceClass, Segment

METERS_PER_MILE = 1609.34
# ACSM switches from the walking to the running equation at 5 mph.
RUNNING_THRESHOLD_MPH = 5.0


@dataclass(frozen=True)
class PaceSettings:
    """Treadmill speed (mph) the runner uses for each pace class."""

    recovery: float = 3.0
    base: float = 5.0
    run: float = 7.0
    sprint: float = 9.0

    def speed_mph(self, pace_class: PaceClass) -> float:
        return float(getattr(self, pace_class))

    def with_speed(self, pace_class: PaceClass, speed_mph: float) -> PaceSettings:
        if pace_class not in PACE_CLASSES:
            raise ValueError(f"Unknown pace class '{pace_class}'")
        if speed_mph <= 0:
            raise ValueError(f"Speed for {pace_class} must be > 0")
        return replace(self, **{pace_class: float(speed_mph)})


DEFAULT_PACE_SETTINGS = PaceSettings()


def parse_pace_override(text: str) -> tuple[PaceClass, float]:
    """Parse ``CLASS=MPH`` (e.g. ``run=7.5``)."""
    name, sep, value = text.partition("=")
    pace_class = name.strip().lower()
    if not sep or pace_class not in PACE_CLASSES:
        raise ValueError(f"Expected CLASS=MPH with CLASS one of {', '.join(PACE_CLASSES)}")
    try:
        speed = float(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid speed '{value.strip()}' for {pace_class}") from exc
    if speed <= 0:
        raise ValueError(f"Speed for {pace_class} must be > 0")
    return cast(PaceClass, pace_class), speed


def segment_distance_miles(speed_mph: float, seconds: float) -> float:
    return speed_mph * seconds / 3600.0


def vo2_ml_kg_min(speed_mph: float, incline_pct: float) -> float:
    meters_per_min = speed_mph * METERS_PER_MILE / 60.0
    if speed_mph < RUNNING_THRESHOLD_MPH:
        return 3.5 + 0.1 * meters_per_min + 1.8 * meters_per_min * incline_pct / 100.0
    return 3.5 + 0.2 * meters_per_min + 0.9 * meters_per_min * incline_pct / 100.0


def segment_calories(
    speed_mph: float, incline_pct: float, weight_kg: float, seconds: float
) -> float:
    mets = vo2_ml_kg_min(speed_mph, incline_pct) / 3.5
    return mets * weight_kg * seconds / 3600.0


def played_segments(state: TimerState) -> Iterator[tuple[Segment, int]]:
    """Yield every segment that has been on the belt with its played seconds.

    Finished and skipped segments come from ``segment_results``; the segment
    in progress contributes its elapsed seconds.
    """
    workout = state.workout
    if workout is None:
        return
    for result in state.segment_results:
        yield workout.segments[result.index], result.played_sec
    if not state.completed and state.segment_elapsed_seconds > 0:
        yield workout.segments[state.current_segment_index], state.segment_elapsed_seconds


def distance_miles(state: TimerState, pace: PaceSettings = DEFAULT_PACE_SETTINGS) -> float:
    total = sum(
        segment_distance_miles(pace.speed_mph(segment.pace_class), seconds)
        for segment, seconds in played_segments(state)
    )
    return round(total, 2)


def calories_kcal(
    state: TimerState,
    pace: PaceSettings = DEFAULT_PACE_SETTINGS,
    weight_kg: float | None = None,
) -> int:
    if not weight_kg or weight_kg <= 0:
        return 0
    total = sum(
        segment_calories(
            pace.speed_mph(segment.pace_class), segment.incline_pct, weight_kg, seconds
        )
        for segment, seconds in played_segments(state)
    )
    return round(total)
