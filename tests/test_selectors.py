from __future__ import annotations

from dataclasses import replace

import pytest

from treadtrail.core.machine import apply
from treadtrail.core.selectors import (
    format_clock,
    format_countdown,
    format_duration,
    next_segment,
    phase,
    progress_fraction,
    progress_snapshot,
    segment_label,
    segment_remaining_seconds,
    total_remaining_seconds,
)
from treadtrail.core.state import IDLE_STATE, Pause, Start, Tick, TimerState
from treadtrail.workout.model import Segment, WorkoutDefinition


def _running(at_sec: int = 0) -> TimerState:
    workout = WorkoutDefinition(
        id="sel",
        name="Selector Run",
        segments=(
            Segment(pace_class="base", duration_sec=60, metadata={"label": "Warmup"}),
            Segment(pace_class="sprint", duration_sec=30, incline_pct=2.0),
        ),
    )
    state = apply(IDLE_STATE, Start(workout=workout, timestamp_ms=0)).state
    if at_sec:
        state = apply(state, Tick(timestamp_ms=at_sec * 1_000)).state
    return state


def test_idle_values() -> None:
    assert phase(IDLE_STATE) == "idle"
    assert segment_remaining_seconds(IDLE_STATE) == 0
    assert total_remaining_seconds(IDLE_STATE) == 0
    assert progress_fraction(IDLE_STATE) == 0.0
    assert progress_snapshot(IDLE_STATE) is None


def test_phases() -> None:
    running = _running(5)
    paused = apply(running, Pause(timestamp_ms=5_000)).state
    done = apply(running, Tick(timestamp_ms=90_000)).state

    assert phase(running) == "running"
    assert phase(paused) == "paused"
    assert phase(done) == "completed"


def test_remaining_and_progress() -> None:
    state = _running(45)

    assert segment_remaining_seconds(state) == 15
    assert total_remaining_seconds(state) == 45
    assert progress_fraction(state) == pytest.approx(0.5)


def test_segment_remaining_never_negative() -> None:
    state = replace(_running(), segment_elapsed_seconds=75)
    assert segment_remaining_seconds(state) == 0


def test_next_segment_is_none_on_last() -> None:
    first = _running()
    last = _running(70)

    assert next_segment(first) is not None
    assert next_segment(last) is None


def test_segment_label_prefers_metadata() -> None:
    labelled = Segment(pace_class="base", duration_sec=60, metadata={"label": " Warmup "})
    plain = Segment(pace_class="recovery", duration_sec=60)

    assert segment_label(labelled, 0) == "Warmup"
    assert segment_label(plain, 3) == "Recovery 4"


def test_progress_snapshot_fields() -> None:
    snapshot = progress_snapshot(_running(70))

    assert snapshot is not None
    assert snapshot.phase == "running"
    assert snapshot.workout_name == "Selector Run"
    assert snapshot.segment_index == 1
    assert snapshot.segment_total == 2
    assert snapshot.segment_label == "Sprint 2"
    assert snapshot.pace_class == "sprint"
    assert snapshot.incline_pct == 2.0
    assert snapshot.segment_elapsed_sec == 10
    assert snapshot.segment_remaining_sec == 20
    assert snapshot.elapsed_total_sec == 70
    assert snapshot.total_remaining_sec == 20
    assert snapshot.next_pace_class is None
    assert snapshot.skipping is False


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "00:00"), (59.9, "00:59"), (61, "01:01"), (3_725, "1:02:05"), (-4, "00:00")],
)
def test_format_clock(seconds: float, expected: str) -> None:
    assert format_clock(seconds) == expected


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "00:00"), (0.2, "00:01"), (59.1, "01:00"), (90, "01:30")],
)
def test_format_countdown_rounds_up(seconds: float, expected: str) -> None:
    assert format_countdown(seconds) == expected


def test_format_duration() -> None:
    assert format_duration(0) == "0s"
    assert format_duration(45) == "45s"
    assert format_duration(90) == "1m 30s"
    assert format_duration(3_600) == "1h 0m"
    assert format_duration(5_400) == "1h 30m"
    assert format_duration(2_730) == "45m 30s"
    assert format_duration(2_730, show_seconds=False) == "45m"
    assert format_duration(30, show_seconds=False) == "0m"


def test_progress_snapshot_carries_distance_and_calories() -> None:
    state = _running(70)

    plain = progress_snapshot(state)
    with_weight = progress_snapshot(state, weight_kg=70.0)

    assert plain is not None and with_weight is not None
    # 60 s at 5 mph plus 10 s at 9 mph.
    assert plain.distance_miles == pytest.approx(0.11)
    assert plain.calories_kcal == 0
    assert with_weight.calories_kcal > 0
