"""
Pure metric computation functions.

All functions are pure and typed for testability.  Rep sequences are in
set order: index 0 is the top set.
"""

import math
from typing import Sequence

from .config import EPLEY_REPS_DIVISOR
from .models import ExerciseResult, WorkoutSession


def performance_ratio(actual: float, target: float) -> float:
    """
    Fractional deviation of actual reps from target reps.

    ratio = (actual - target) / target

    Args:
        actual: Reps performed (or mean reps)
        target: Prescribed reps, must be positive

    Returns:
        Positive when the target was exceeded, negative when missed
    """
    return (actual - target) / target


def top_set_performance(reps: Sequence[int], target: float) -> float:
    """Performance ratio of the first set; 0.0 when no sets were logged."""
    if not reps:
        return 0.0
    return performance_ratio(reps[0], target)


def remaining_sets_performance(reps: Sequence[int], target: float) -> float:
    """
    Performance ratio of the mean of every set after the first.

    Returns 0.0 when fewer than two sets were performed, so a single-set
    session is judged on its top set alone.
    """
    rest = reps[1:]
    if not rest:
        return 0.0
    avg_rest = sum(rest) / len(rest)
    return performance_ratio(avg_rest, target)


def total_reps(reps: Sequence[int]) -> int:
    """Sum of reps across all sets."""
    return sum(reps)


def volume_performance(reps: Sequence[int], target: float) -> float:
    """
    Performance ratio of total reps against target reps times set count.

    ratio = (sum(reps) - target * n) / (target * n)
    """
    if not reps:
        return 0.0
    target_volume = target * len(reps)
    return performance_ratio(total_reps(reps), target_volume)


def estimate_1rm(weight: float, reps: float) -> float:
    """
    Estimate one-rep max with the Epley formula.

    1RM = weight * (1 + reps / 30)

    Args:
        weight: Load lifted
        reps: Reps completed at that load

    Returns:
        Estimated one-rep max in the same unit as weight
    """
    return weight * (1 + reps / EPLEY_REPS_DIVISOR)


def weight_for_reps(one_rm: float, reps: float) -> float:
    """
    Invert Epley: the load that should allow ``reps`` reps at this 1RM.

    w = 1RM / (1 + reps / 30)
    """
    return one_rm / (1 + reps / EPLEY_REPS_DIVISOR)


def clamp(value: float, low: float, high: float) -> float:
    """Restrict value to [low, high]."""
    return max(low, min(high, value))


def round_to_increment(value: float, increment: float) -> float:
    """
    Snap value to the nearest multiple of increment, ties rounding up.

    Args:
        value: Weight to round
        increment: Positive granularity (e.g. 0.5 kg, 2.5 kg, 5 lbs)

    Returns:
        An integer multiple of increment
    """
    steps = math.floor(value / increment + 0.5)
    return steps * increment


def exercise_volume(result: ExerciseResult) -> float:
    """Tonnage of one exercise: weight x total reps."""
    return result.weight * total_reps(result.sets)


def session_volume(session: WorkoutSession) -> float:
    """Tonnage of a whole session."""
    return sum(exercise_volume(r) for r in session.exercises)


def session_avg_weight(session: WorkoutSession) -> float:
    """Mean working weight across the session's exercises; 0.0 if none."""
    if not session.exercises:
        return 0.0
    return sum(r.weight for r in session.exercises) / len(session.exercises)
