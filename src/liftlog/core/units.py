"""Weight unit conversion and display."""

from dataclasses import replace

from .config import KG_TO_LBS, UNIT_ROUNDING, UNITS
from .metrics import round_to_increment
from .models import ExerciseResult, RoutineDay, WorkoutSession


def _check_unit(unit: str) -> None:
    if unit not in UNITS:
        raise ValueError(f"Unknown unit '{unit}'. Valid units: {', '.join(UNITS)}")


def convert_weight(weight: float, from_unit: str, to_unit: str) -> float:
    """
    Convert a weight between kg and lbs (1 kg = 2.20462 lbs).

    Raises:
        ValueError: If either unit is unknown
    """
    _check_unit(from_unit)
    _check_unit(to_unit)
    if from_unit == to_unit:
        return weight
    if from_unit == "kg":
        return weight * KG_TO_LBS
    return weight / KG_TO_LBS


def round_weight(weight: float, unit: str) -> float:
    """Round to the nearest loadable step: 0.5 for kg, 1 for lbs."""
    _check_unit(unit)
    return round_to_increment(weight, UNIT_ROUNDING[unit])


def format_weight(weight: float, unit: str) -> str:
    """Format a weight for display, e.g. ``82.5 kg``."""
    _check_unit(unit)
    return f"{weight:.1f} {unit}"


def _convert(weight: float, from_unit: str, to_unit: str) -> float:
    return round_weight(convert_weight(weight, from_unit, to_unit), to_unit)


def convert_session(session: WorkoutSession, from_unit: str, to_unit: str) -> WorkoutSession:
    """Copy of a session with every weight converted and rounded to to_unit."""
    if from_unit == to_unit:
        return session
    return replace(
        session,
        exercises=[
            ExerciseResult(
                exercise_id=r.exercise_id,
                weight=_convert(r.weight, from_unit, to_unit),
                sets=list(r.sets),
                next_weight=_convert(r.next_weight, from_unit, to_unit),
                decision=r.decision,
            )
            for r in session.exercises
        ],
    )


def convert_routine(routine: list[RoutineDay], from_unit: str, to_unit: str) -> list[RoutineDay]:
    """
    Copy of a routine with increments converted to to_unit.

    Per-exercise rounding overrides are converted too, never below the
    unit's own rounding step.
    """
    if from_unit == to_unit:
        return routine
    step = UNIT_ROUNDING[to_unit]
    days: list[RoutineDay] = []
    for day in routine:
        exercises = []
        for ex in day.exercises:
            rounding = ex.rounding_increment
            if rounding is not None:
                rounding = max(step, _convert(rounding, from_unit, to_unit))
            exercises.append(
                replace(
                    ex,
                    increment=max(step, _convert(ex.increment, from_unit, to_unit)),
                    rounding_increment=rounding,
                )
            )
        days.append(RoutineDay(day_id=day.day_id, name=day.name, exercises=exercises))
    return days
