"""NiceGUI web UI for TreadTrail."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, cast

from nicegui import ui

from treadtrail.core.selectors import (
    WorkoutProgress,
    format_clock,
    format_countdown,
    format_duration,
    segment_label,
)
from treadtrail.ui.controller import UIController
from treadtrail.workout.metrics import DEFAULT_PACE_SETTINGS, PaceSettings
from treadtrail.workout.model import PaceClass, WorkoutDefinition
from treadtrail.workout.session import MemorySessionRecorder, SessionSummary

PACE_COLORS: dict[PaceClass, str] = {
    "recovery": "#22c55e",
    "base": "#38bdf8",
    "run": "#f59e0b",
    "sprint": "#ef4444",
}
ACTIVE_SEGMENT_COLOR = "#ffffff"


@dataclass
class WebState:
    status: str = "Pick a workout"
    selected_id: str | None = None
    workout: WorkoutDefinition | None = None
    cue: str = ""


def run_web_ui(
    *,
    host: str = "127.0.0.1",
    port: int = 8090,
    tick_interval_sec: float = 1.0,
    debug_timer: bool = False,
    pace_settings: PaceSettings = DEFAULT_PACE_SETTINGS,
    weight_kg: float | None = None,
) -> int:
    state = WebState()
    recorder = MemorySessionRecorder()

    def on_segment_change(progress: WorkoutProgress) -> None:
        state.cue = (
            f"Now: {progress.segment_label} ({progress.pace_class}, {progress.incline_pct:g}%)"
        )

    def on_finish(summary: SessionSummary) -> None:
        state.status = "Workout completed" if summary.completed else "Workout ended early"
        refresh_history()

    controller = UIController(
        recorder=recorder,
        tick_interval_sec=tick_interval_sec,
        debug_timer=debug_timer,
        pace_settings=pace_settings,
        weight_kg=weight_kg,
        on_segment_change=on_segment_change,
        on_finish=on_finish,
    )
    workouts = {workout.id: workout for workout in controller.list_workouts()}
    workout_choices = {
        key: f"{workout.name} ({format_duration(workout.total_duration_sec)})"
        for key, workout in workouts.items()
    }

    ui.add_head_html(
        """
        <style>
          body { background: #0b1220; color: #e5e7eb; font-family: Arial, "Segoe UI", sans-serif; }
          .tt-card { background: #0f1b35; border: 1px solid rgba(148, 163, 184, 0.22); border-radius: 14px; }
          .tt-clock { font-size: 3rem; font-weight: 700; color: #f8fafc; }
          .tt-muted { color: #9caecf; }
        </style>
        """
    )

    with ui.column().classes("w-full gap-2"):
        ui.label("TREADTRAIL").classes("text-xl font-semibold tracking-wide")
        status_label = ui.label("Status: -").classes("text-lg font-semibold")

    with ui.card().classes("w-full tt-card"):
        with ui.row().classes("w-full items-end gap-2"):
            workout_select = ui.select(workout_choices, label="Workout").classes("min-w-[320px]")
            start_btn = ui.button("Start")
        course_info = ui.label("No workout selected").classes("text-sm tt-muted")

    with ui.row().classes("w-full gap-2"):
        with ui.card().classes("tt-card"):
            ui.label("Elapsed").classes("text-xs tt-muted")
            elapsed_label = ui.label("00:00").classes("tt-clock")
        with ui.card().classes("tt-card"):
            ui.label("Segment remaining").classes("text-xs tt-muted")
            segment_clock = ui.label("00:00").classes("tt-clock")
        with ui.card().classes("tt-card"):
            ui.label("Total remaining").classes("text-xs tt-muted")
            total_label = ui.label("00:00").classes("tt-clock")
        with ui.card().classes("tt-card"):
            ui.label("Distance").classes("text-xs tt-muted")
            distance_label = ui.label("0.00 mi").classes("tt-clock")
            calories_label = ui.label("").classes("text-sm tt-muted")

    with ui.card().classes("w-full tt-card"):
        step_info = ui.label("Segment: -").classes("text-base font-semibold")
        next_label = ui.label("Next: -").classes("text-sm tt-muted")
        cue_label = ui.label("").classes("text-sm")
        progress_bar = ui.linear_progress(value=0.0, show_value=False).classes("w-full")
        with ui.row().classes("gap-2"):
            pause_btn = ui.button("Pause")
            skip_btn = ui.button("Skip segment")
            end_btn = ui.button("End workout").props("color=negative")

    plan_chart = ui.echart(
        {
            "title": {"text": "Segments", "left": "center", "textStyle": {"color": "#ffffff"}},
            "tooltip": {"trigger": "axis"},
            "xAxis": {"type": "category", "data": [], "axisLabel": {"color": "#ffffff"}},
            "yAxis": {"type": "value", "name": "sec", "axisLabel": {"color": "#ffffff"}},
            "series": [{"type": "bar", "data": []}],
            "grid": {"left": 50, "right": 20, "top": 48, "bottom": 40},
        }
    ).classes("w-full h-64")

    ui.label("Recent sessions").classes("text-base font-medium")
    history = ui.table(
        columns=[
            {"name": "ended", "label": "Ended", "field": "ended"},
            {"name": "status", "label": "Status", "field": "status"},
            {"name": "workout", "label": "Workout", "field": "workout"},
            {"name": "elapsed", "label": "Elapsed", "field": "elapsed"},
            {"name": "distance", "label": "Distance", "field": "distance"},
            {"name": "calories", "label": "kcal", "field": "calories"},
            {"name": "skipped", "label": "Skipped", "field": "skipped"},
        ],
        rows=[],
    ).classes("w-full")

    def refresh_history() -> None:
        history.rows = [
            {
                "ended": item.ended_at_utc.split(".")[0].replace("T", " "),
                "status": "OK" if item.completed else "STOP",
                "workout": item.workout_name,
                "elapsed": format_clock(item.elapsed_duration_sec),
                "distance": f"{item.distance_miles:.2f} mi",
                "calories": str(item.calories_kcal) if item.calories_kcal else "-",
                "skipped": str(item.skipped_count),
            }
            for item in recorder.recent(limit=12)
        ]
        history.update()

    def refresh_plan_chart(progress: WorkoutProgress | None) -> None:
        options = cast(dict[str, Any], plan_chart.options)
        workout = state.workout
        if workout is None:
            options["xAxis"]["data"] = []
            options["series"][0]["data"] = []
            plan_chart.update()
            return
        active_index = progress.segment_index if progress is not None else -1
        options["xAxis"]["data"] = [
            segment_label(segment, idx) for idx, segment in enumerate(workout.segments)
        ]
        options["series"][0]["data"] = [
            {
                "value": segment.duration_sec,
                "itemStyle": {
                    "color": ACTIVE_SEGMENT_COLOR
                    if idx == active_index
                    else PACE_COLORS[segment.pace_class]
                },
            }
            for idx, segment in enumerate(workout.segments)
        ]
        plan_chart.update()

    def refresh_ui() -> None:
        progress = controller.progress
        status_label.text = f"Status: {state.status}"
        cue_label.text = state.cue
        if state.workout is not None:
            course_info.text = (
                f"{state.workout.name} | {len(state.workout.segments)} segments | "
                f"total {format_duration(state.workout.total_duration_sec)}"
            )
        else:
            course_info.text = "No workout selected"

        if progress is not None:
            elapsed_label.text = format_clock(progress.elapsed_total_sec)
            segment_clock.text = format_countdown(progress.segment_remaining_sec)
            total_label.text = format_countdown(progress.total_remaining_sec)
            distance_label.text = f"{progress.distance_miles:.2f} mi"
            calories_label.text = (
                f"{progress.calories_kcal} kcal" if weight_kg else "Set --weight-kg for calories"
            )
            step_info.text = (
                f"Segment {progress.segment_index + 1}/{progress.segment_total}"
                f" | {progress.segment_label} | {progress.pace_class}"
                f" | incline {progress.incline_pct:g}%"
            )
            next_label.text = (
                f"Next: {progress.next_pace_class}"
                if progress.next_pace_class is not None
                else "Next: finish"
            )
            progress_bar.value = progress.progress_fraction
            pause_btn.text = "Resume" if progress.phase == "paused" else "Pause"
        else:
            elapsed_label.text = "00:00"
            segment_clock.text = "00:00"
            total_label.text = "00:00"
            distance_label.text = "0.00 mi"
            calories_label.text = ""
            step_info.text = "Segment: -"
            next_label.text = "Next: -"
            progress_bar.value = 0.0
            pause_btn.text = "Pause"

        active = controller.workout_active
        start_btn.set_enabled(state.selected_id is not None and not active)
        pause_btn.set_enabled(active)
        skip_btn.set_enabled(active)
        end_btn.set_enabled(controller.state.workout is not None)
        refresh_plan_chart(progress)

    def on_select() -> None:
        state.selected_id = cast(str | None, workout_select.value)
        if not controller.workout_active:
            state.workout = workouts.get(state.selected_id) if state.selected_id else None
            state.status = f"Loaded {state.workout.name}" if state.workout else "Pick a workout"
        refresh_ui()

    async def on_start() -> None:
        if state.selected_id is None:
            return
        state.workout = workouts[state.selected_id]
        state.cue = ""
        transition = controller.start_workout(state.selected_id)
        if transition is not None and transition.rejection is not None:
            state.status = f"Cannot start: {transition.rejection}"
        else:
            state.status = "Workout running"
        refresh_ui()

    async def on_pause() -> None:
        transition = controller.toggle_pause()
        if transition is not None and transition.accepted:
            state.status = "Workout running" if controller.state.running else "Paused"
        refresh_ui()

    async def on_skip() -> None:
        # Double taps come back as rejections; the button just has no effect.
        controller.skip_segment()
        refresh_ui()

    async def on_end() -> None:
        controller.end_workout()
        refresh_ui()

    workout_select.on_value_change(lambda _: on_select())
    start_btn.on_click(on_start)
    pause_btn.on_click(on_pause)
    skip_btn.on_click(on_skip)
    end_btn.on_click(on_end)

    refresh_history()
    refresh_ui()
    ui.timer(0.25, refresh_ui)
    ui.run(host=host, port=port, reload=False, title="TreadTrail")
    return 0
