"""Built-in treadmill programs and the catalog lookup used by the controller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from treadtrail.workout.model import PaceClass, Segment, WorkoutDefinition


@dataclass(frozen=True)
class WorkoutTemplateSegment:
    duration_sec: int
    pace_class: PaceClass
    incline_pct: float
    label: str


@dataclass(frozen=True)
class WorkoutTemplate:
    key: str
    name: str
    focus: str
    segments: tuple[WorkoutTemplateSegment, ...]


def _intervals(
    rounds: int,
    work: WorkoutTemplateSegment,
    rest: WorkoutTemplateSegment,
) -> tuple[WorkoutTemplateSegment, ...]:
    out: list[WorkoutTemplateSegment] = []
    for n in range(1, rounds + 1):
        for step in (work, rest):
            out.append(
                WorkoutTemplateSegment(
                    step.duration_sec, step.pace_class, step.incline_pct, f"{step.label} {n}"
                )
            )
    return tuple(out)


TEMPLATES: tuple[WorkoutTemplate, ...] = (
    WorkoutTemplate(
        key="quick-hiit",
        name="Quick HIIT",
        focus="hiit",
        segments=(
            WorkoutTemplateSegment(120, "base", 1.0, "Warmup"),
            *_intervals(
                6,
                WorkoutTemplateSegment(30, "sprint", 1.0, "Sprint"),
                WorkoutTemplateSegment(90, "recovery", 1.0, "Recover"),
            ),
            WorkoutTemplateSegment(180, "recovery", 0.0, "Cool-down"),
        ),
    ),
    WorkoutTemplate(
        key="base-builder",
        name="Base Builder 30",
        focus="endurance",
        segments=(
            WorkoutTemplateSegment(300, "recovery", 1.0, "Warmup"),
            WorkoutTemplateSegment(600, "base", 1.0, "Base 1"),
            WorkoutTemplateSegment(300, "run", 1.0, "Steady"),
            WorkoutTemplateSegment(360, "base", 1.0, "Base 2"),
            WorkoutTemplateSegment(240, "recovery", 0.0, "Cool-down"),
        ),
    ),
    WorkoutTemplate(
        key="hill-climb",
        name="Hill Climb 25",
        focus="fat_burn",
        segments=(
            WorkoutTemplateSegment(240, "base", 1.0, "Warmup"),
            WorkoutTemplateSegment(180, "base", 4.0, "Hill 4%"),
            WorkoutTemplateSegment(180, "base", 6.0, "Hill 6%"),
            WorkoutTemplateSegment(180, "base", 8.0, "Hill 8%"),
            WorkoutTemplateSegment(120, "recovery", 2.0, "Recover"),
            WorkoutTemplateSegment(180, "run", 5.0, "Summit Push"),
            WorkoutTemplateSegment(420, "recovery", 0.0, "Cool-down"),
        ),
    ),
    WorkoutTemplate(
        key="pyramid",
        name="Pyramid Run 20",
        focus="hiit",
        segments=(
            WorkoutTemplateSegment(180, "base", 1.0, "Warmup"),
            WorkoutTemplateSegment(60, "run", 1.0, "Up 1"),
            WorkoutTemplateSegment(60, "recovery", 1.0, "Recover"),
            WorkoutTemplateSegment(120, "run", 1.0, "Up 2"),
            WorkoutTemplateSegment(60, "recovery", 1.0, "Recover"),
            WorkoutTemplateSegment(180, "sprint", 1.0, "Peak"),
            WorkoutTemplateSegment(90, "recovery", 1.0, "Recover"),
            WorkoutTemplateSegment(120, "run", 1.0, "Down 2"),
            WorkoutTemplateSegment(60, "recovery", 1.0, "Recover"),
            WorkoutTemplateSegment(60, "run", 1.0, "Down 1"),
            WorkoutTemplateSegment(210, "recovery", 0.0, "Cool-down"),
        ),
    ),
)


class WorkoutCatalog(Protocol):
    def get_workout(self, workout_id: str) -> WorkoutDefinition | None:
        ...

    def list_workouts(self) -> list[WorkoutDefinition]:
        ...


def list_templates() -> tuple[WorkoutTemplate, ...]:
    return TEMPLATES


def build_workout_from_template(template_key: str) -> WorkoutDefinition:
    template = next((item for item in TEMPLATES if item.key == template_key), None)
    if template is None:
        raise ValueError(f"Unknown workout template '{template_key}'")

    segments = tuple(
        Segment(
            pace_class=step.pace_class,
            duration_sec=step.duration_sec,
            incline_pct=step.incline_pct,
            metadata={"label": step.label, "focus": template.focus},
        )
        for step in template.segments
    )
    return WorkoutDefinition(id=template.key, name=template.name, segments=segments)


class BuiltinCatalog:
    """Catalog backed by ``TEMPLATES`` plus any workouts added at runtime."""

    def __init__(self, extra: tuple[WorkoutDefinition, ...] = ()) -> None:
        self._workouts: dict[str, WorkoutDefinition] = {
            template.key: build_workout_from_template(template.key) for template in TEMPLATES
        }
        for workout in extra:
            self.add(workout)

    def add(self, workout: WorkoutDefinition) -> None:
        self._workouts[workout.id] = workout

    def get_workout(self, workout_id: str) -> WorkoutDefinition | None:
        return self._workouts.get(workout_id)

    def list_workouts(self) -> list[WorkoutDefinition]:
        return list(self._workouts.values())
