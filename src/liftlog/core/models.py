"""
Data models for liftlog.

All core dataclasses representing the overload calculation, the weekly
routine, and logged workout sessions.  Validation happens in
``__post_init__`` and raises ValueError (or a subclass) on bad data.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Sequence

from .config import (
    DEFAULT_ENGINE,
    DEFAULT_INCREMENT_KG,
    ENGINE_NAMES,
    FAILURE_STREAK_REQUIRED,
    FAILURE_TOP_SET_THRESHOLD,
    FAILURE_VOLUME_THRESHOLD,
    MAX_DECREASE_FRACTION,
    MAX_INCREASE_FRACTION,
    REMAINING_SETS_WEIGHT,
    ROUNDING_INCREMENT,
    TOP_SET_WEIGHT,
    UNITS,
)

Decision = Literal["increase", "maintain", "deload"]
Unit = Literal["kg", "lbs"]

DECISIONS: tuple[str, ...] = ("increase", "maintain", "deload")


class InvalidConfiguration(ValueError):
    """Raised when the overload formula is undefined for the given parameters."""

    pass


@dataclass(frozen=True)
class OverloadInput:
    """
    Everything the overload engine needs for one exercise.

    Built by the caller right before the calculation and discarded after.
    ``reps_performed`` is stored as a tuple, index 0 being the top set.
    """

    current_weight: float
    reps_performed: tuple[int, ...]
    target_reps: float
    top_set_weight: float = TOP_SET_WEIGHT
    remaining_sets_weight: float = REMAINING_SETS_WEIGHT
    max_increase_fraction: float = MAX_INCREASE_FRACTION
    max_decrease_fraction: float = MAX_DECREASE_FRACTION
    rounding_increment: float = ROUNDING_INCREMENT

    def __post_init__(self) -> None:
        """Validate input and freeze the rep sequence."""
        object.__setattr__(self, "reps_performed", tuple(self.reps_performed))

        for name in (
            "current_weight",
            "target_reps",
            "top_set_weight",
            "remaining_sets_weight",
            "max_increase_fraction",
            "max_decrease_fraction",
            "rounding_increment",
        ):
            if not math.isfinite(getattr(self, name)):
                raise InvalidConfiguration(f"{name} must be finite, got {getattr(self, name)}")

        if self.target_reps <= 0:
            raise InvalidConfiguration(
                f"target_reps must be positive, got {self.target_reps}"
            )
        if self.current_weight < 0:
            raise InvalidConfiguration(
                f"current_weight must be non-negative, got {self.current_weight}"
            )
        if any(r < 0 for r in self.reps_performed):
            raise InvalidConfiguration("reps_performed must be non-negative")
        if self.rounding_increment <= 0:
            raise InvalidConfiguration(
                f"rounding_increment must be positive, got {self.rounding_increment}"
            )
        if self.max_increase_fraction < 0:
            raise InvalidConfiguration("max_increase_fraction must be non-negative")
        if not 0 <= self.max_decrease_fraction < 1:
            raise InvalidConfiguration("max_decrease_fraction must be in [0, 1)")


@dataclass(frozen=True)
class OverloadOutput:
    """Recommended weight for the next session and the direction of change."""

    next_weight: float
    decision: Decision


@dataclass(frozen=True)
class OverloadParams:
    """Tuning parameters shared by every calculation of one configuration."""

    top_set_weight: float = TOP_SET_WEIGHT
    remaining_sets_weight: float = REMAINING_SETS_WEIGHT
    max_increase_fraction: float = MAX_INCREASE_FRACTION
    max_decrease_fraction: float = MAX_DECREASE_FRACTION
    rounding_increment: float = ROUNDING_INCREMENT

    def input_for(
        self,
        current_weight: float,
        reps_performed: Sequence[int],
        target_reps: float,
        rounding_increment: float | None = None,
    ) -> OverloadInput:
        """Build an OverloadInput carrying these parameters."""
        return OverloadInput(
            current_weight=current_weight,
            reps_performed=tuple(reps_performed),
            target_reps=target_reps,
            top_set_weight=self.top_set_weight,
            remaining_sets_weight=self.remaining_sets_weight,
            max_increase_fraction=self.max_increase_fraction,
            max_decrease_fraction=self.max_decrease_fraction,
            rounding_increment=(
                rounding_increment if rounding_increment is not None else self.rounding_increment
            ),
        )


@dataclass(frozen=True)
class FailurePolicy:
    """When a run of bad sessions forces a deload on top of the engine."""

    enabled: bool = True
    top_set_threshold: float = FAILURE_TOP_SET_THRESHOLD
    volume_threshold: float = FAILURE_VOLUME_THRESHOLD
    streak_required: int = FAILURE_STREAK_REQUIRED

    def __post_init__(self) -> None:
        if self.top_set_threshold < 0 or self.volume_threshold < 0:
            raise ValueError("failure thresholds must be non-negative")
        if self.streak_required < 1:
            raise ValueError("streak_required must be at least 1")


@dataclass(frozen=True)
class EngineSettings:
    """Resolved engine configuration (bundled YAML merged with user overrides)."""

    engine: str = DEFAULT_ENGINE
    params: OverloadParams = field(default_factory=OverloadParams)
    failure_policy: FailurePolicy = field(default_factory=FailurePolicy)

    def __post_init__(self) -> None:
        if self.engine not in ENGINE_NAMES:
            raise ValueError(
                f"Unknown engine '{self.engine}'. Valid engines: {', '.join(ENGINE_NAMES)}"
            )


@dataclass
class ExerciseConfig:
    """
    One exercise in a routine day.

    ``increment`` is the fixed step used by the threshold engine.
    ``rounding_increment`` overrides the global rounding for this exercise
    (e.g. 5 kg for a machine stack); None means use the configured default.
    """

    exercise_id: str
    name: str
    target_reps: int
    sets: int = 3
    increment: float = DEFAULT_INCREMENT_KG
    rounding_increment: float | None = None

    def __post_init__(self) -> None:
        """Validate exercise configuration."""
        if not self.exercise_id.strip():
            raise ValueError("exercise_id must be a non-empty string")
        if self.target_reps <= 0:
            raise InvalidConfiguration("target_reps must be positive")
        if self.sets <= 0:
            raise ValueError("sets must be positive")
        if self.increment <= 0:
            raise ValueError("increment must be positive")
        if self.rounding_increment is not None and self.rounding_increment <= 0:
            raise ValueError("rounding_increment must be positive")


@dataclass
class RoutineDay:
    """A named training day and its ordered exercises."""

    day_id: str
    name: str
    exercises: list[ExerciseConfig] = field(default_factory=list)

    def find_exercise(self, exercise_id: str) -> ExerciseConfig | None:
        """Return the exercise with this id, or None."""
        for ex in self.exercises:
            if ex.exercise_id == exercise_id:
                return ex
        return None


@dataclass
class ExerciseResult:
    """
    What was done for one exercise in a session and what comes next.

    ``sets`` holds the reps of each set in order; ``next_weight`` and
    ``decision`` are the engine output stored alongside the session.
    """

    exercise_id: str
    weight: float
    sets: list[int] = field(default_factory=list)
    next_weight: float = 0.0
    decision: Decision = "maintain"

    def __post_init__(self) -> None:
        """Validate result data."""
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if any(r < 0 for r in self.sets):
            raise ValueError("reps must be non-negative")
        if self.next_weight < 0:
            raise ValueError("next_weight must be non-negative")
        if self.decision not in DECISIONS:
            raise ValueError(f"Invalid decision: {self.decision}")


@dataclass
class WorkoutSession:
    """A completed workout: one routine day performed on one date."""

    date: str  # ISO format: YYYY-MM-DD
    day_id: str
    exercises: list[ExerciseResult] = field(default_factory=list)
    notes: str | None = None

    def __post_init__(self) -> None:
        """Validate session data."""
        self._validate_date(self.date)

    @staticmethod
    def _validate_date(date_str: str) -> None:
        """Validate date string is ISO format YYYY-MM-DD."""
        if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
            raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")
        try:
            datetime.strptime(date_str, "%Y-%m-%d")
        except ValueError as e:
            raise ValueError(f"Invalid date: {date_str}") from e

    def result_for(self, exercise_id: str) -> ExerciseResult | None:
        """Return this session's result for an exercise, or None."""
        for result in self.exercises:
            if result.exercise_id == exercise_id:
                return result
        return None


@dataclass
class UserProfile:
    """
    User profile: the weekly routine plus display preferences.

    ``unit_preference`` is the unit every stored weight is expressed in,
    history and routine increments alike.  Switching units converts them.
    """

    routine: list[RoutineDay] = field(default_factory=list)
    unit_preference: Unit = "kg"
    name: str | None = None
    bodyweight_kg: float | None = None

    def __post_init__(self) -> None:
        """Validate profile data."""
        if self.unit_preference not in UNITS:
            raise ValueError(
                f"Invalid unit_preference: {self.unit_preference!r}. Must be 'kg' or 'lbs'."
            )
        if self.bodyweight_kg is not None and self.bodyweight_kg <= 0:
            raise ValueError("bodyweight_kg must be positive")

        seen: set[str] = set()
        for day in self.routine:
            if day.day_id in seen:
                raise ValueError(f"Duplicate routine day id: {day.day_id!r}")
            seen.add(day.day_id)

    def find_day(self, day_id: str) -> RoutineDay | None:
        """Return the routine day with this id, or None."""
        for day in self.routine:
            if day.day_id == day_id:
                return day
        return None

    def find_exercise(self, exercise_id: str) -> ExerciseConfig | None:
        """Return the first exercise with this id across all days."""
        for day in self.routine:
            ex = day.find_exercise(exercise_id)
            if ex is not None:
                return ex
        return None

    def all_exercises(self) -> list[ExerciseConfig]:
        """Unique exercises in routine order."""
        seen: dict[str, ExerciseConfig] = {}
        for day in self.routine:
            for ex in day.exercises:
                seen.setdefault(ex.exercise_id, ex)
        return list(seen.values())


@dataclass
class ExerciseHistoryEntry:
    """One exercise result tagged with the date of its session."""

    date: str
    result: ExerciseResult


@dataclass
class PersonalRecord:
    """Heaviest weight ever logged for one exercise."""

    exercise_id: str
    weight: float
    volume: float  # weight x total reps of that session
    date: str


@dataclass
class DayProgressPoint:
    """Aggregate numbers for one session of a routine day."""

    date: str
    total_volume: float
    avg_weight: float
