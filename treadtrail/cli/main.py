"""Terminal CLI entrypoint for TreadTrail."""

from __future__ import annotations

import argparse
import asyncio
import contextlib

from treadtrail.core.selectors import (
    WorkoutProgress,
    format_clock,
    format_countdown,
    format_duration,
)
from treadtrail.ui.controller import UIController
from treadtrail.workout.library import BuiltinCatalog
from treadtrail.workout.metrics import DEFAULT_PACE_SETTINGS, PaceSettings, parse_pace_override
from treadtrail.workout.model import WorkoutDefinition
from treadtrail.workout.parser import WorkoutParseError, load_workout
from treadtrail.workout.session import SessionSummary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TreadTrail treadmill workout timer")
    parser.add_argument("--list", action="store_true", help="List built-in workouts")
    parser.add_argument("--run", default=None, help="Run a built-in workout by id")
    parser.add_argument(
        "--workout-file",
        default=None,
        help="Run a workout from a .json or .csv file",
    )
    parser.add_argument(
        "--ui-web",
        action="store_true",
        help="Launch web UI (NiceGUI) with timer controls",
    )
    parser.add_argument(
        "--web-host",
        default="127.0.0.1",
        help="Host bind for --ui-web",
    )
    parser.add_argument(
        "--web-port",
        type=int,
        default=8090,
        help="Port for --ui-web",
    )
    parser.add_argument(
        "--tick-interval",
        type=float,
        default=1.0,
        help="Seconds between timer ticks",
    )
    parser.add_argument(
        "--debug-timer",
        action="store_true",
        help="Print timer transitions, rejections and segment changes",
    )
    parser.add_argument(
        "--pace",
        action="append",
        default=[],
        metavar="CLASS=MPH",
        help="Treadmill speed for a pace class, e.g. run=7.5 (repeatable)",
    )
    parser.add_argument(
        "--weight-kg",
        type=float,
        default=None,
        help="Body weight for calorie estimates",
    )
    return parser


def run_list() -> int:
    for workout in BuiltinCatalog().list_workouts():
        print(
            f"{workout.id:<16} {workout.name:<20} "
            f"{format_duration(workout.total_duration_sec):>8}  "
            f"({len(workout.segments)} segments)"
        )
    return 0


def _status_line(progress: WorkoutProgress) -> str:
    return (
        f"[{progress.segment_index + 1}/{progress.segment_total}] "
        f"{progress.segment_label} ({progress.pace_class}, {progress.incline_pct:g}%) | "
        f"segment {format_countdown(progress.segment_remaining_sec)} left | "
        f"elapsed {format_clock(progress.elapsed_total_sec)} / "
        f"{format_clock(progress.total_duration_sec)} | "
        f"{progress.progress_fraction * 100:.0f}% | "
        f"{progress.distance_miles:.2f} mi"
        + (f" | {progress.calories_kcal} kcal" if progress.calories_kcal else "")
    )


def _print_summary(summary: SessionSummary) -> None:
    status = "completed" if summary.completed else "ended early"
    print(
        f"{summary.workout_name}: {status} after {format_duration(summary.elapsed_duration_sec)} "
        f"of {format_duration(summary.planned_duration_sec)} "
        f"(paused {format_duration(summary.paused_duration_sec)}, "
        f"{summary.skipped_count} segment(s) skipped), "
        f"{summary.distance_miles:.2f} mi"
        + (f", {summary.calories_kcal} kcal" if summary.calories_kcal else "")
    )


async def run_workout(
    workout: WorkoutDefinition,
    tick_interval: float,
    debug_timer: bool,
    pace_settings: PaceSettings = DEFAULT_PACE_SETTINGS,
    weight_kg: float | None = None,
) -> int:
    finished = asyncio.Event()
    controller = UIController(
        tick_interval_sec=tick_interval,
        debug_timer=debug_timer,
        pace_settings=pace_settings,
        weight_kg=weight_kg,
        on_finish=lambda _summary: finished.set(),
    )
    print(f"Starting {workout.name} ({format_duration(workout.total_duration_sec)})")
    controller.start_definition(workout)
    try:
        while not finished.is_set():
            progress = controller.progress
            if progress is not None:
                print(_status_line(progress))
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(finished.wait(), timeout=tick_interval)
    finally:
        summary = controller.last_summary or controller.end_workout()
        await controller.shutdown()
        if summary is not None:
            _print_summary(summary)
    return 0


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    if args.tick_interval <= 0:
        parser.error("--tick-interval must be > 0")
    if args.weight_kg is not None and args.weight_kg <= 0:
        parser.error("--weight-kg must be > 0")
    pace_settings = DEFAULT_PACE_SETTINGS
    for override in args.pace:
        try:
            pace_settings = pace_settings.with_speed(*parse_pace_override(override))
        except ValueError as exc:
            parser.error(f"--pace: {exc}")

    if args.ui_web:
        from treadtrail.ui.web_app import run_web_ui

        return run_web_ui(
            host=args.web_host,
            port=args.web_port,
            tick_interval_sec=args.tick_interval,
            debug_timer=args.debug_timer,
            pace_settings=pace_settings,
            weight_kg=args.weight_kg,
        )

    if args.list:
        return run_list()

    workout: WorkoutDefinition | None = None
    if args.workout_file is not None:
        try:
            workout = load_workout(args.workout_file)
        except (OSError, WorkoutParseError) as exc:
            print(f"Error: {exc}")
            return 2
    elif args.run is not None:
        workout = BuiltinCatalog().get_workout(args.run)
        if workout is None:
            print(f"Error: unknown workout '{args.run}' (see --list)")
            return 2

    if workout is None:
        parser.print_help()
        return 1

    try:
        return asyncio.run(
            run_workout(
                workout,
                args.tick_interval,
                args.debug_timer,
                pace_settings=pace_settings,
                weight_kg=args.weight_kg,
            )
        )
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
