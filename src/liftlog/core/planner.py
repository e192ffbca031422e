"""
Workout flow: suggested weights before a session, recommendations after it.

This is the caller side of the overload engine.  It gathers the few values
the engine needs from the routine and the history, runs the configured
engine, layers the failure policy on top, and packages the result for
storage.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Sequence

from .adaptation import apply_failure_policy, failure_streak
from .config import UNIT_ROUNDING
from .models import (
    EngineSettings,
    ExerciseConfig,
    ExerciseHistoryEntry,
    ExerciseResult,
    RoutineDay,
    WorkoutSession,
)
from .overload import run_engine


@dataclass
class PrefilledExercise:
    """Starting point shown for one exercise when a workout begins."""

    exercise: ExerciseConfig
    suggested_weight: float | None  # None = never logged, ask for a start weight
    reps: list[int | None] = field(default_factory=list)


def exercise_history(
    history: Sequence[WorkoutSession],
    exercise_id: str,
) -> list[ExerciseHistoryEntry]:
    """
    Extract one exercise's results from the session history.

    Args:
        history: Sessions in chronological order
        exercise_id: Exercise to extract

    Returns:
        Chronological list of (date, result) entries
    """
    entries: list[ExerciseHistoryEntry] = []
    for session in history:
        result = session.result_for(exercise_id)
        if result is not None:
            entries.append(ExerciseHistoryEntry(date=session.date, result=result))
    return entries


def suggested_weight(
    history: Sequence[WorkoutSession],
    exercise_id: str,
) -> float | None:
    """
    Weight to pre-fill for an exercise's next occurrence.

    Uses the latest stored recommendation, falling back to the weight that
    was actually used.  Returns None when the exercise has no history.
    """
    entries = exercise_history(history, exercise_id)
    if not entries:
        return None
    last = entries[-1].result
    if last.next_weight > 0:
        return last.next_weight
    return last.weight


def prefill_day(
    day: RoutineDay,
    history: Sequence[WorkoutSession],
) -> list[PrefilledExercise]:
    """Suggested weight and one empty rep slot per configured set."""
    return [
        PrefilledExercise(
            exercise=ex,
            suggested_weight=suggested_weight(history, ex.exercise_id),
            reps=[None] * ex.sets,
        )
        for ex in day.exercises
    ]


def recommend(
    exercise: ExerciseConfig,
    weight: float,
    reps: Sequence[int],
    history: Sequence[WorkoutSession],
    settings: EngineSettings | None = None,
    unit: str = "kg",
) -> ExerciseResult:
    """
    Run the engine for one exercise and package the result.

    The failure streak is computed over the exercise's earlier results only;
    the current session is what the engine and the policy judge.

    Args:
        exercise: Routine configuration (target reps, increment)
        weight: Load used in this session
        reps: Reps per set, top set first
        history: Earlier sessions, chronological
        settings: Engine settings (defaults if None)
        unit: Unit the weights are in; lbs without an exercise override
            rounds to whole pounds

    Returns:
        ExerciseResult with next_weight and decision filled in
    """
    settings = settings or EngineSettings()
    rounding = exercise.rounding_increment
    if rounding is None and unit != "kg":
        rounding = UNIT_ROUNDING[unit]
    inp = settings.params.input_for(
        current_weight=weight,
        reps_performed=reps,
        target_reps=exercise.target_reps,
        rounding_increment=rounding,
    )

    previous = [e.result for e in exercise_history(history, exercise.exercise_id)]
    streak = failure_streak(previous, exercise.target_reps, settings.failure_policy)

    output = run_engine(
        settings.engine,
        inp,
        increment=exercise.increment,
        previous_failures=streak,
        policy=settings.failure_policy,
    )
    output = apply_failure_policy(inp, output, streak, settings.failure_policy)

    return ExerciseResult(
        exercise_id=exercise.exercise_id,
        weight=weight,
        sets=list(reps),
        next_weight=output.next_weight,
        decision=output.decision,
    )


def finish_workout(
    day: RoutineDay,
    entries: Mapping[str, tuple[float, Sequence[int]]],
    history: Sequence[WorkoutSession],
    settings: EngineSettings | None = None,
    date: str | None = None,
    notes: str | None = None,
    unit: str = "kg",
) -> WorkoutSession:
    """
    Turn the weights and reps logged for a day into a stored session.

    Exercises of the day that have no entry are left out of the session.

    Args:
        day: Routine day that was performed
        entries: {exercise_id: (weight, reps_per_set)}
        history: Earlier sessions, chronological
        settings: Engine settings (defaults if None)
        date: Session date (YYYY-MM-DD, default: today)
        notes: Free-text notes
        unit: Unit the weights are in

    Returns:
        WorkoutSession with one ExerciseResult per logged exercise

    Raises:
        ValueError: If an entry names an exercise not in the day
    """
    unknown = set(entries) - {ex.exercise_id for ex in day.exercises}
    if unknown:
        raise ValueError(
            f"Exercises not in day '{day.day_id}': {', '.join(sorted(unknown))}"
        )

    if date is None:
        date = datetime.now().strftime("%Y-%m-%d")

    results: list[ExerciseResult] = []
    for ex in day.exercises:
        if ex.exercise_id not in entries:
            continue
        weight, reps = entries[ex.exercise_id]
        results.append(recommend(ex, weight, reps, history, settings, unit=unit))

    return WorkoutSession(date=date, day_id=day.day_id, exercises=results, notes=notes)
