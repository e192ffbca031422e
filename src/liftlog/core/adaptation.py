"""
Adaptation rules: failure streaks and forced deloads.

A session "fails" when its top set or its total reps fall clearly short of
target.  A run of failed sessions is a stronger signal than any single one,
so after enough of them the recommendation is forced down regardless of
what the engine proposed for the current session.
"""

from typing import Sequence

from .metrics import round_to_increment, top_set_performance, volume_performance
from .models import ExerciseResult, FailurePolicy, OverloadInput, OverloadOutput
from .overload import decide


def is_failed_session(
    reps: Sequence[int],
    target_reps: float,
    policy: FailurePolicy | None = None,
) -> bool:
    """
    Check whether one session's sets count as a failure.

    Failure = P_top <= -top_set_threshold OR P_vol <= -volume_threshold

    Args:
        reps: Reps per set, top set first
        target_reps: Prescribed reps per set
        policy: Thresholds (defaults if None)

    Returns:
        True if the session failed; a session without sets never fails
    """
    if not reps:
        return False
    policy = policy or FailurePolicy()
    p_top = top_set_performance(reps, target_reps)
    p_vol = volume_performance(reps, target_reps)
    return p_top <= -policy.top_set_threshold or p_vol <= -policy.volume_threshold


def failure_streak(
    results: Sequence[ExerciseResult],
    target_reps: float,
    policy: FailurePolicy | None = None,
) -> int:
    """
    Count consecutive failed sessions ending at the most recent one.

    Results without any sets are skipped rather than breaking the streak.

    Args:
        results: One exercise's results in chronological order
        target_reps: Prescribed reps per set
        policy: Thresholds (defaults if None)

    Returns:
        Number of failures since the last non-failed session
    """
    streak = 0
    for result in reversed(results):
        if not result.sets:
            continue
        if is_failed_session(result.sets, target_reps, policy):
            streak += 1
        else:
            break
    return streak


def should_force_deload(
    reps: Sequence[int],
    target_reps: float,
    previous_failures: int,
    policy: FailurePolicy | None = None,
) -> bool:
    """
    Check whether the failure policy overrides the engine.

    Requires the current session to fail and at least ``streak_required``
    failures immediately before it.
    """
    policy = policy or FailurePolicy()
    if not policy.enabled:
        return False
    if previous_failures < policy.streak_required:
        return False
    return is_failed_session(reps, target_reps, policy)


def apply_failure_policy(
    inp: OverloadInput,
    output: OverloadOutput,
    previous_failures: int,
    policy: FailurePolicy | None = None,
) -> OverloadOutput:
    """
    Force a deload on top of an engine result when the streak calls for it.

    The forced weight is the bottom of the safety window, rounded; a result
    that is already a deload is returned unchanged.

    Args:
        inp: The input the engine was called with
        output: The engine result
        previous_failures: Failure streak before the current session
        policy: Failure policy (defaults if None)

    Returns:
        The original output, or a deload output
    """
    if output.decision == "deload":
        return output
    if not should_force_deload(inp.reps_performed, inp.target_reps, previous_failures, policy):
        return output

    forced = round_to_increment(
        inp.current_weight * (1 - inp.max_decrease_fraction),
        inp.rounding_increment,
    )
    return OverloadOutput(next_weight=forced, decision=decide(forced, inp.current_weight))
