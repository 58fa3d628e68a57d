"""Controller used by the CLI and web UI."""

from __future__ import annotations

from typing import Callable

from treadtrail.core.engine import WorkoutEngine
from treadtrail.core.machine import Transition
from treadtrail.core.selectors import WorkoutProgress
from treadtrail.core.state import TimerState
from treadtrail.workout.library import BuiltinCatalog, WorkoutCatalog
from treadtrail.workout.metrics import DEFAULT_PACE_SETTINGS, PaceSettings
from treadtrail.workout.model import WorkoutDefinition
from treadtrail.workout.runner import Clock, epoch_ms
from treadtrail.workout.session import (
    MemorySessionRecorder,
    SessionRecorder,
    SessionSummary,
    build_session_summary,
)


class UIController:
    def __init__(
        self,
        catalog: WorkoutCatalog | None = None,
        recorder: SessionRecorder | None = None,
        clock: Clock = epoch_ms,
        tick_interval_sec: float = 1.0,
        autotick: bool = True,
        debug_timer: bool = False,
        pace_settings: PaceSettings = DEFAULT_PACE_SETTINGS,
        weight_kg: float | None = None,
        on_segment_change: Callable[[WorkoutProgress], None] | None = None,
        on_finish: Callable[[SessionSummary], None] | None = None,
    ) -> None:
        self._catalog: WorkoutCatalog = catalog or BuiltinCatalog()
        self._recorder: SessionRecorder = recorder or MemorySessionRecorder()
        self._on_finish = on_finish
        self._last_summary: SessionSummary | None = None
        self._engine = WorkoutEngine(
            clock=clock,
            tick_interval_sec=tick_interval_sec,
            autotick=autotick,
            debug_timer=debug_timer,
            pace_settings=pace_settings,
            weight_kg=weight_kg,
            on_segment_change=on_segment_change,
            on_completed=self._handle_completed,
        )

    @property
    def engine(self) -> WorkoutEngine:
        return self._engine

    @property
    def state(self) -> TimerState:
        return self._engine.state

    @property
    def progress(self) -> WorkoutProgress | None:
        return self._engine.progress

    @property
    def last_summary(self) -> SessionSummary | None:
        return self._last_summary

    @property
    def workout_active(self) -> bool:
        return self.state.workout is not None and not self.state.completed

    def list_workouts(self) -> list[WorkoutDefinition]:
        return self._catalog.list_workouts()

    def start_workout(self, workout_id: str) -> Transition | None:
        workout = self._catalog.get_workout(workout_id)
        if workout is None:
            raise ValueError(f"Unknown workout '{workout_id}'")
        return self.start_definition(workout)

    def start_definition(self, workout: WorkoutDefinition) -> Transition | None:
        # A valid new start replaces whatever run is loaded; an invalid one is
        # rejected by the machine with the current run untouched.
        if self.state.workout is not None and workout.is_valid():
            self._engine.reset()
        transition = self._engine.start(workout)
        if transition is not None and transition.accepted:
            self._last_summary = None
        return transition

    def pause_workout(self) -> Transition | None:
        return self._engine.pause()

    def resume_workout(self) -> Transition | None:
        return self._engine.resume()

    def toggle_pause(self) -> Transition | None:
        if self.state.running:
            return self.pause_workout()
        return self.resume_workout()

    def skip_segment(self) -> Transition | None:
        return self._engine.skip()

    def end_workout(self) -> SessionSummary | None:
        """End the run early, hand the session to the recorder and go idle."""
        if self.state.workout is None:
            return None
        summary = self._last_summary
        if not self.state.completed:
            summary = self._record(self.state)
        self._engine.reset()
        return summary

    def reset(self) -> None:
        self._engine.reset()
        self._last_summary = None

    async def shutdown(self) -> None:
        await self._engine.shutdown()

    def _handle_completed(self, state: TimerState) -> None:
        self._record(state)

    def _record(self, state: TimerState) -> SessionSummary:
        summary = build_session_summary(
            state,
            self._engine.now_ms(),
            pace=self._engine.pace_settings,
            weight_kg=self._engine.weight_kg,
        )
        self._last_summary = summary
        self._recorder.record(summary)
        if self._on_finish is not None:
            self._on_finish(summary)
        return summary
