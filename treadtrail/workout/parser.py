"""Workout definition parser (JSON/CSV or catalog payloads)."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Mapping, cast

from treadtrail.workout.model import PACE_CLASSES, PaceClass, Segment, WorkoutDefinition


class WorkoutParseError(ValueError):
    """Raised when a workout definition is invalid."""


_SEGMENT_FIELDS = frozenset(
    {"pace_class", "type", "duration_sec", "duration", "incline_pct", "incline"}
)


def load_workout(path: str | Path) -> WorkoutDefinition:
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return _load_json(file_path)
    if suffix == ".csv":
        return _load_csv(file_path)
    raise WorkoutParseError(
        f"Unsupported workout format '{file_path.suffix}'. Use .json or .csv"
    )


def parse_workout(
    data: object, *, default_id: str = "custom", default_name: str = "Custom workout"
) -> WorkoutDefinition:
    """Validate a catalog payload shaped like ``{"id", "name", "segments": [...]}``."""
    if not isinstance(data, dict):
        raise WorkoutParseError("Workout payload must be an object")

    id_obj = data.get("id", default_id)
    if not isinstance(id_obj, str) or not id_obj.strip():
        raise WorkoutParseError("Workout field 'id' must be a non-empty string")

    name_obj = data.get("name", default_name)
    if not isinstance(name_obj, str):
        raise WorkoutParseError("Workout field 'name' must be a string")

    segments_obj = data.get("segments")
    if not isinstance(segments_obj, list):
        raise WorkoutParseError("Workout field 'segments' must be an array")

    segments: list[Segment] = []
    for i, raw in enumerate(segments_obj):
        if not isinstance(raw, dict):
            raise WorkoutParseError(f"Segment {i + 1}: must be an object")
        segments.append(
            _build_segment(
                pace_obj=raw.get("pace_class", raw.get("type")),
                duration_obj=raw.get("duration_sec", raw.get("duration")),
                incline_obj=raw.get("incline_pct", raw.get("incline")),
                extra={
                    key: value
                    for key, value in raw.items()
                    if key not in _SEGMENT_FIELDS
                },
                index=i,
            )
        )

    return _build_workout(
        workout_id=id_obj.strip(),
        name=name_obj.strip() or default_name,
        segments=segments,
    )


def _load_json(path: Path) -> WorkoutDefinition:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise WorkoutParseError(f"Invalid JSON: {exc}") from exc
    return parse_workout(data, default_id=path.stem, default_name=path.stem)


def _load_csv(path: Path) -> WorkoutDefinition:
    rows: list[Segment] = []
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        fields = set(reader.fieldnames or [])
        required = {"pace_class", "duration_sec"}
        if not required.issubset(fields):
            raise WorkoutParseError(
                "CSV must contain headers: pace_class,duration_sec[,incline_pct,label]"
            )

        for i, row in enumerate(reader):
            label = (row.get("label") or "").strip()
            rows.append(
                _build_segment(
                    pace_obj=row.get("pace_class"),
                    duration_obj=row.get("duration_sec"),
                    incline_obj=row.get("incline_pct"),
                    extra={"label": label} if label else {},
                    index=i,
                )
            )

    return _build_workout(workout_id=path.stem, name=path.stem, segments=rows)


def _build_segment(
    *,
    pace_obj: object,
    duration_obj: object,
    incline_obj: object,
    extra: Mapping[str, Any],
    index: int,
) -> Segment:
    if not isinstance(pace_obj, str) or pace_obj.strip().lower() not in PACE_CLASSES:
        raise WorkoutParseError(
            f"Segment {index + 1}: pace_class must be one of {', '.join(PACE_CLASSES)}"
        )
    pace_class = cast(PaceClass, pace_obj.strip().lower())

    duration_sec = _parse_int_field(raw=duration_obj, field_name="duration_sec", index=index)
    if duration_sec <= 0:
        raise WorkoutParseError(f"Segment {index + 1}: duration_sec must be > 0")

    incline_pct = 0.0
    if incline_obj is not None and str(incline_obj).strip() != "":
        try:
            incline_pct = float(str(incline_obj).strip())
        except ValueError as exc:
            raise WorkoutParseError(f"Segment {index + 1}: invalid incline_pct") from exc
        if not -10.0 <= incline_pct <= 30.0:
            raise WorkoutParseError(
                f"Segment {index + 1}: incline_pct must be between -10 and 30"
            )

    return Segment(
        pace_class=pace_class,
        duration_sec=duration_sec,
        incline_pct=incline_pct,
        metadata=dict(extra),
    )


def _build_workout(*, workout_id: str, name: str, segments: list[Segment]) -> WorkoutDefinition:
    if not segments:
        raise WorkoutParseError("Workout must contain at least one segment")
    return WorkoutDefinition(id=workout_id, name=name, segments=tuple(segments))


def _parse_int_field(*, raw: object, field_name: str, index: int) -> int:
    if raw is None or isinstance(raw, bool):
        raise WorkoutParseError(f"Segment {index + 1}: invalid {field_name}")
    if isinstance(raw, float):
        if not raw.is_integer():
            raise WorkoutParseError(f"Segment {index + 1}: {field_name} must be whole seconds")
        return int(raw)
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise WorkoutParseError(f"Segment {index + 1}: invalid {field_name}") from exc
