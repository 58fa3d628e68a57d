from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from treadtrail.cli import main as cli_main
from treadtrail.ui.controller import UIController
from treadtrail.workout.library import BuiltinCatalog
from treadtrail.workout.metrics import PaceSettings
from treadtrail.workout.model import Segment, WorkoutDefinition
from treadtrail.workout.session import MemorySessionRecorder, SessionSummary


class ManualClock:
    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> int:
        self.now += int(seconds * 1000)
        return self.now


SHORT = WorkoutDefinition(
    id="short",
    name="Short",
    segments=(
        Segment(pace_class="base", duration_sec=3),
        Segment(pace_class="sprint", duration_sec=2),
    ),
)


def _controller(clock: ManualClock, **kwargs: object) -> tuple[UIController, MemorySessionRecorder]:
    recorder = MemorySessionRecorder()
    controller = UIController(
        catalog=BuiltinCatalog(extra=(SHORT,)),
        recorder=recorder,
        clock=clock,
        autotick=False,
        **kwargs,  # type: ignore[arg-type]
    )
    return controller, recorder


def test_start_by_id_and_unknown_id() -> None:
    controller, _ = _controller(ManualClock())

    controller.start_workout("quick-hiit")
    assert controller.workout_active
    assert controller.progress is not None
    assert controller.progress.workout_name == "Quick HIIT"

    with pytest.raises(ValueError, match="Unknown workout"):
        controller.start_workout("missing")


def test_completion_records_summary_and_calls_on_finish() -> None:
    clock = ManualClock()
    finished: list[SessionSummary] = []
    controller, recorder = _controller(clock, on_finish=finished.append)

    controller.start_workout("short")
    controller.engine.tick(clock.advance(5))

    assert len(finished) == 1
    assert finished[0].completed is True
    assert recorder.sessions == finished
    assert controller.last_summary is finished[0]
    assert not controller.workout_active

    # Ending after completion hands back the same record without a second entry.
    assert controller.end_workout() is finished[0]
    assert len(recorder.sessions) == 1
    assert controller.state.workout is None


def test_end_workout_early_records_partial_session() -> None:
    clock = ManualClock()
    controller, recorder = _controller(clock)

    controller.start_workout("short")
    controller.engine.tick(clock.advance(2))
    controller.toggle_pause()
    clock.advance(4)
    summary = controller.end_workout()

    assert summary is not None
    assert summary.completed is False
    assert summary.elapsed_duration_sec == 2
    assert summary.paused_duration_sec == 4
    assert recorder.recent() == [summary]
    assert controller.end_workout() is None


def test_pause_toggle_and_skip() -> None:
    clock = ManualClock()
    controller, _ = _controller(clock)
    controller.start_workout("short")

    paused = controller.toggle_pause()
    assert paused is not None and paused.accepted
    assert controller.progress is not None and controller.progress.phase == "paused"

    skipped = controller.skip_segment()
    assert skipped is not None and skipped.accepted
    assert controller.state.current_segment_index == 1
    assert controller.state.elapsed_seconds == 3

    clock.advance(10)
    resumed = controller.toggle_pause()
    assert resumed is not None and resumed.accepted
    assert controller.state.running


def test_new_start_replaces_active_run() -> None:
    clock = ManualClock()
    controller, recorder = _controller(clock)
    controller.start_workout("quick-hiit")
    controller.engine.tick(clock.advance(30))

    transition = controller.start_workout("short")

    assert transition is not None and transition.accepted
    assert controller.state.workout is SHORT
    assert controller.state.elapsed_seconds == 0
    assert recorder.sessions == []


def test_invalid_start_keeps_active_run() -> None:
    clock = ManualClock()
    controller, recorder = _controller(clock)
    controller.start_workout("quick-hiit")
    controller.engine.tick(clock.advance(30))

    transition = controller.start_definition(WorkoutDefinition(id="bad", name="Bad", segments=()))

    assert transition is not None
    assert transition.rejection == "invalid_workout"
    assert controller.state.workout is not None
    assert controller.state.workout.id == "quick-hiit"
    assert controller.state.elapsed_seconds == 30
    assert controller.state.running
    assert recorder.sessions == []


def test_invalid_start_after_completion_keeps_last_summary() -> None:
    clock = ManualClock()
    controller, _ = _controller(clock)
    controller.start_workout("short")
    controller.engine.tick(clock.advance(5))
    summary = controller.last_summary
    assert summary is not None

    controller.start_definition(WorkoutDefinition(id="bad", name="Bad", segments=()))

    assert controller.last_summary is summary
    assert controller.state.completed


def test_controller_summary_uses_pace_and_weight() -> None:
    clock = ManualClock()
    controller, _ = _controller(clock, pace_settings=PaceSettings(base=12.0), weight_kg=70.0)
    controller.start_workout("short")
    controller.engine.tick(clock.advance(3))

    progress = controller.progress
    assert progress is not None
    assert progress.distance_miles == pytest.approx(0.01)
    assert progress.calories_kcal > 0
    summary = controller.end_workout()

    assert summary is not None
    assert summary.distance_miles == pytest.approx(0.01)
    assert summary.calories_kcal == progress.calories_kcal


def test_cli_list(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(sys, "argv", ["treadtrail", "--list"])

    assert cli_main.main() == 0
    out = capsys.readouterr().out
    assert "quick-hiit" in out
    assert "Pyramid Run 20" in out


def test_cli_rejects_unknown_workout(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "argv", ["treadtrail", "--run", "nope"])

    assert cli_main.main() == 2
    assert "unknown workout" in capsys.readouterr().out


def test_cli_rejects_bad_workout_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    workout_file = tmp_path / "bad.json"
    workout_file.write_text('{"segments": []}', encoding="utf-8")
    monkeypatch.setattr(sys, "argv", ["treadtrail", "--workout-file", str(workout_file)])

    assert cli_main.main() == 2
    assert "at least one segment" in capsys.readouterr().out


def test_cli_run_workout_to_completion(capsys: pytest.CaptureFixture[str]) -> None:
    one_second = WorkoutDefinition(
        id="blip", name="Blip", segments=(Segment(pace_class="run", duration_sec=1),)
    )

    code = asyncio.run(cli_main.run_workout(one_second, tick_interval=0.05, debug_timer=False))

    assert code == 0
    out = capsys.readouterr().out
    assert "Starting Blip" in out
    assert "Blip: completed after 1s" in out


def test_cli_rejects_bad_pace_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["treadtrail", "--list", "--pace", "jog=4"])

    with pytest.raises(SystemExit) as exc_info:
        cli_main.main()
    assert exc_info.value.code == 2


def test_cli_run_prints_distance_and_calories(capsys: pytest.CaptureFixture[str]) -> None:
    one_second = WorkoutDefinition(
        id="blip", name="Blip", segments=(Segment(pace_class="sprint", duration_sec=1),)
    )

    asyncio.run(
        cli_main.run_workout(
            one_second,
            tick_interval=0.05,
            debug_timer=False,
            pace_settings=PaceSettings(sprint=36.0),
            weight_kg=80.0,
        )
    )

    out = capsys.readouterr().out
    assert "0.01 mi" in out
    assert "kcal" in out
