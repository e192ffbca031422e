"""
JSON serialization for workout data models.

Handles conversion between dataclasses and JSON-compatible dicts, plus
parsing of the rep and entry strings typed on the command line.
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.models import (
    DECISIONS,
    Decision,
    ExerciseConfig,
    ExerciseResult,
    RoutineDay,
    UserProfile,
    WorkoutSession,
)

# Decision strings written by older versions of the app.
_LEGACY_DECISIONS: dict[str, str] = {
    "incrementar": "increase",
    "mantener": "maintain",
}


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate and normalize date string to ISO format.

    Full ISO timestamps (``2026-02-16T18:30:00.000Z``) are cut to their date.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str):
        raise ValidationError(f"Invalid date: {date_str!r}")
    if re.match(r"^\d{4}-\d{2}-\d{2}T", date_str):
        date_str = date_str[:10]
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def validate_decision(decision: str) -> Decision:
    """
    Validate a stored decision, mapping legacy names.

    Raises:
        ValidationError: If decision is not recognised
    """
    decision = _LEGACY_DECISIONS.get(decision, decision)
    if decision not in DECISIONS:
        raise ValidationError(
            f"Invalid decision: {decision}. Must be one of {DECISIONS}"
        )
    return decision  # type: ignore


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_positive(value: int | float, name: str) -> int | float:
    """
    Validate that a value is positive.

    Raises:
        ValidationError: If value is not positive
    """
    if value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


def exercise_result_to_dict(result: ExerciseResult) -> dict[str, Any]:
    """Convert ExerciseResult to JSON-compatible dict."""
    return {
        "exercise_id": result.exercise_id,
        "weight": result.weight,
        "sets": list(result.sets),
        "next_weight": result.next_weight,
        "decision": result.decision,
    }


def dict_to_exercise_result(data: dict[str, Any]) -> ExerciseResult:
    """
    Convert dict to ExerciseResult.

    Accepts the camelCase keys of older exports (exerciseId, nextWeight).

    Raises:
        ValidationError: If data is invalid
    """
    exercise_id = data.get("exercise_id", data.get("exerciseId"))
    if not exercise_id:
        raise ValidationError("exercise result is missing exercise_id")

    weight = float(validate_non_negative(data.get("weight", 0.0), "weight"))
    sets = [int(validate_non_negative(r, "reps")) for r in data.get("sets", [])]
    next_weight = data.get("next_weight", data.get("nextWeight"))
    next_weight = float(next_weight) if next_weight is not None else weight
    validate_non_negative(next_weight, "next_weight")

    return ExerciseResult(
        exercise_id=str(exercise_id),
        weight=weight,
        sets=sets,
        next_weight=next_weight,
        decision=validate_decision(data.get("decision", "maintain")),
    )


def session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    """Convert WorkoutSession to JSON-compatible dict."""
    data: dict[str, Any] = {
        "date": session.date,
        "day_id": session.day_id,
        "exercises": [exercise_result_to_dict(r) for r in session.exercises],
    }
    if session.notes:
        data["notes"] = session.notes
    return data


def dict_to_session(data: dict[str, Any]) -> WorkoutSession:
    """
    Convert dict to WorkoutSession.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        date = validate_date(data["date"])
        day_id = data.get("day_id", data.get("dayId"))
        if not day_id:
            raise ValidationError("session is missing day_id")
        return WorkoutSession(
            date=date,
            day_id=str(day_id),
            exercises=[dict_to_exercise_result(r) for r in data.get("exercises", [])],
            notes=data.get("notes"),
        )
    except KeyError as e:
        raise ValidationError(f"Missing required field: {e}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e


def exercise_config_to_dict(ex: ExerciseConfig) -> dict[str, Any]:
    """Convert ExerciseConfig to JSON-compatible dict."""
    data: dict[str, Any] = {
        "exercise_id": ex.exercise_id,
        "name": ex.name,
        "target_reps": ex.target_reps,
        "sets": ex.sets,
        "increment": ex.increment,
    }
    if ex.rounding_increment is not None:
        data["rounding_increment"] = ex.rounding_increment
    return data


def dict_to_exercise_config(data: dict[str, Any]) -> ExerciseConfig:
    """Convert dict to ExerciseConfig."""
    exercise_id = data.get("exercise_id", data.get("id"))
    target_reps = data.get("target_reps", data.get("targetReps"))
    rounding = data.get("rounding_increment")
    return ExerciseConfig(
        exercise_id=str(exercise_id),
        name=str(data.get("name", exercise_id)),
        target_reps=int(validate_positive(target_reps, "target_reps")),
        sets=int(validate_positive(data.get("sets", 3), "sets")),
        increment=float(validate_positive(data.get("increment", 2.5), "increment")),
        rounding_increment=float(rounding) if rounding is not None else None,
    )


def routine_day_to_dict(day: RoutineDay) -> dict[str, Any]:
    """Convert RoutineDay to JSON-compatible dict."""
    return {
        "day_id": day.day_id,
        "name": day.name,
        "exercises": [exercise_config_to_dict(ex) for ex in day.exercises],
    }


def dict_to_routine_day(data: dict[str, Any]) -> RoutineDay:
    """Convert dict to RoutineDay."""
    day_id = data.get("day_id", data.get("id"))
    return RoutineDay(
        day_id=str(day_id),
        name=str(data.get("name", day_id)),
        exercises=[dict_to_exercise_config(ex) for ex in data.get("exercises", [])],
    )


def user_profile_to_dict(profile: UserProfile) -> dict[str, Any]:
    """Convert UserProfile to JSON-compatible dict."""
    data: dict[str, Any] = {
        "unit_preference": profile.unit_preference,
        "routine": [routine_day_to_dict(d) for d in profile.routine],
    }
    if profile.name:
        data["name"] = profile.name
    if profile.bodyweight_kg is not None:
        data["bodyweight_kg"] = profile.bodyweight_kg
    return data


def dict_to_user_profile(data: dict[str, Any]) -> UserProfile:
    """
    Convert dict to UserProfile.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        bodyweight = data.get("bodyweight_kg")
        return UserProfile(
            routine=[dict_to_routine_day(d) for d in data.get("routine", [])],
            unit_preference=data.get("unit_preference", data.get("unitPreference", "kg")),
            name=data.get("name"),
            bodyweight_kg=float(bodyweight) if bodyweight is not None else None,
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e


def session_to_json_line(session: WorkoutSession) -> str:
    """
    Serialize a session to a single JSON line.

    Returns:
        JSON string (single line, no trailing newline)
    """
    return json.dumps(session_to_dict(session), separators=(",", ":"))


def json_line_to_session(line: str) -> WorkoutSession:
    """
    Parse a single JSON line to WorkoutSession.

    Raises:
        ValidationError: If JSON is invalid or data is invalid
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e

    return dict_to_session(data)


def parse_reps_string(reps_str: str) -> list[int]:
    """
    Parse the reps of each set from a user string.

    Accepted forms (may be mixed, comma or space separated):
        "10,8,7"     → [10, 8, 7]
        "10 8 7"     → [10, 8, 7]
        "8x3"        → 3 sets of 8 reps
        "10, 8x2"    → [10, 8, 8]

    Args:
        reps_str: Reps string

    Returns:
        List of reps per set, top set first

    Raises:
        ValidationError: If a group is not understood
    """
    text = reps_str.strip()
    if not text:
        raise ValidationError("Enter at least one set.")

    groups = [g for g in re.split(r"[,\s]+", re.sub(r"\s*[xX×]\s*", "x", text)) if g]
    reps: list[int] = []
    for group in groups:
        m = re.fullmatch(r"(\d+)x(\d+)", group)
        if m:
            n_reps, n_sets = int(m.group(1)), int(m.group(2))
            if n_sets < 1:
                raise ValidationError(f"Set count must be at least 1 in '{group}'")
            reps.extend([n_reps] * n_sets)
            continue
        if re.fullmatch(r"\d+", group):
            reps.append(int(group))
            continue
        raise ValidationError(
            f"Invalid reps '{group}'. Use e.g. '10,8,7' or '8x3' (8 reps x 3 sets)"
        )
    return reps


def parse_entry(entry: str) -> tuple[str, float, list[int]]:
    """
    Parse one logged exercise: ``<exercise_id>=<weight>:<reps>``.

    Examples:
        "bench_press=80:10,8,7"  → ("bench_press", 80.0, [10, 8, 7])
        "squat=100:5x5"          → ("squat", 100.0, [5, 5, 5, 5, 5])

    Raises:
        ValidationError: If the entry is malformed
    """
    m = re.fullmatch(r"\s*([\w\-]+)\s*=\s*([0-9]+(?:\.[0-9]+)?)\s*:\s*(.*)", entry)
    if not m:
        raise ValidationError(
            f"Invalid entry '{entry}'. Expected <exercise_id>=<weight>:<reps>, "
            "e.g. bench_press=80:10,8,7"
        )
    return m.group(1), float(m.group(2)), parse_reps_string(m.group(3))


def slugify(name: str) -> str:
    """Turn a display name into an id: ``Bench Press`` → ``bench_press``."""
    slug = re.sub(r"[^a-z0-9]+", "_", name.strip().lower()).strip("_")
    if not slug:
        raise ValidationError(f"Cannot derive an id from {name!r}")
    return slug
