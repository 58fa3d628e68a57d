"""Workout domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping


PaceClass = Literal["recovery", "base", "run", "sprint"]

PACE_CLASSES: tuple[PaceClass, ...] = ("recovery", "base", "run", "sprint")


@dataclass(frozen=True)
class Segment:
    pace_class: PaceClass
    duration_sec: int
    incline_pct: float = 0.0
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class WorkoutDefinition:
    id: str
    name: str
    segments: tuple[Segment, ...]

    @property
    def total_duration_sec(self) -> int:
        return sum(segment.duration_sec for segment in self.segments)

    def boundary_sec(self, index: int) -> int:
        """Cumulative duration of segments ``0..index`` inclusive."""
        return sum(segment.duration_sec for segment in self.segments[: index + 1])

    def is_valid(self) -> bool:
        return bool(self.segments) and all(
            isinstance(segment.duration_sec, int)
            and not isinstance(segment.duration_sec, bool)
            and segment.duration_sec > 0
            for segment in self.segments
        )
