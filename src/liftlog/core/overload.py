"""
Progressive-overload recommendation engine.

Given the weight used for an exercise and the reps performed in each set,
compute the weight to prescribe next time.  Every function here is pure:
no I/O, no clock, no shared state.

Two engines are available:

- ``epley``: blends top-set and remaining-set performance, moves the Epley
  1RM estimate by the damped blend, back-solves the load for the target
  reps, then clamps and rounds.
- ``threshold``: the fixed-increment rule (add ``increment`` on a clearly
  good session, cut by the max decrease fraction after repeated failures).
"""

import math

from .config import (
    ENGINE_NAMES,
    PF_DAMPING,
    THRESHOLD_TOP_SET_INCREASE,
    THRESHOLD_VOLUME_INCREASE,
)
from .metrics import (
    clamp,
    estimate_1rm,
    remaining_sets_performance,
    round_to_increment,
    top_set_performance,
    volume_performance,
    weight_for_reps,
)
from .models import (
    Decision,
    FailurePolicy,
    InvalidConfiguration,
    OverloadInput,
    OverloadOutput,
)


def decide(next_weight: float, current_weight: float) -> Decision:
    """Classify the change from current_weight to next_weight."""
    if next_weight > current_weight:
        return "increase"
    if next_weight < current_weight:
        return "deload"
    return "maintain"


def weight_bounds(inp: OverloadInput) -> tuple[float, float]:
    """
    Safety window for the next weight.

    Returns:
        (lower, upper) = (w * (1 - max_decrease), w * (1 + max_increase))
    """
    lower = inp.current_weight * (1 - inp.max_decrease_fraction)
    upper = inp.current_weight * (1 + inp.max_increase_fraction)
    return lower, upper


def performance_factor(inp: OverloadInput) -> float:
    """
    Blended performance factor PF.

    PF = top_set_weight * P_top + remaining_sets_weight * P_rest
    """
    p_top = top_set_performance(inp.reps_performed, inp.target_reps)
    p_rest = remaining_sets_performance(inp.reps_performed, inp.target_reps)
    return inp.top_set_weight * p_top + inp.remaining_sets_weight * p_rest


def compute_next_weight(inp: OverloadInput) -> OverloadOutput:
    """
    Recommend the next working weight using the Epley-based engine.

    Steps:
    1. PF from the blended top-set / remaining-set performance ratios
    2. PF is damped by half
    3. 1RM is estimated from the top set and scaled by (1 + damped PF)
    4. The load for target_reps at that 1RM is back-solved
    5. Clamped to [w * (1 - max_decrease), w * (1 + max_increase)]
    6. Rounded to the nearest rounding_increment

    An empty rep list short-circuits to the current weight.

    Args:
        inp: Validated engine input (target_reps > 0 is guaranteed)

    Returns:
        OverloadOutput whose decision is derived from the final weight
    """
    if not inp.reps_performed:
        return OverloadOutput(next_weight=inp.current_weight, decision="maintain")

    adjusted_pf = performance_factor(inp) * PF_DAMPING

    estimated_max = estimate_1rm(inp.current_weight, inp.reps_performed[0])
    new_estimated_max = estimated_max * (1 + adjusted_pf)
    raw_next = weight_for_reps(new_estimated_max, inp.target_reps)

    lower, upper = weight_bounds(inp)
    next_weight = round_to_increment(clamp(raw_next, lower, upper), inp.rounding_increment)

    return OverloadOutput(
        next_weight=next_weight,
        decision=decide(next_weight, inp.current_weight),
    )


def compute_threshold_weight(
    inp: OverloadInput,
    increment: float,
    previous_failures: int = 0,
    policy: FailurePolicy | None = None,
) -> OverloadOutput:
    """
    Recommend the next working weight using the fixed-increment rule.

    - P_top >= 0.10 or P_vol >= 0.05: add ``increment``
    - P_top <= -0.10 or P_vol <= -0.15 after a long enough failure streak:
      cut to w * (1 - max_decrease_fraction)
    - otherwise: keep the weight

    Args:
        inp: Validated engine input
        increment: Fixed step for this exercise (e.g. 2.5 kg)
        previous_failures: Consecutive failed sessions before this one
        policy: Failure thresholds and streak length (defaults if None)

    Returns:
        OverloadOutput rounded to rounding_increment

    Raises:
        InvalidConfiguration: If increment is negative or not finite
    """
    if not math.isfinite(increment) or increment < 0:
        raise InvalidConfiguration(
            f"increment must be a non-negative finite number, got {increment}"
        )
    if not inp.reps_performed:
        return OverloadOutput(next_weight=inp.current_weight, decision="maintain")

    policy = policy or FailurePolicy()
    p_top = top_set_performance(inp.reps_performed, inp.target_reps)
    p_vol = volume_performance(inp.reps_performed, inp.target_reps)
    streak_reached = previous_failures >= policy.streak_required

    if p_top >= THRESHOLD_TOP_SET_INCREASE or p_vol >= THRESHOLD_VOLUME_INCREASE:
        raw_next = inp.current_weight + increment
    elif streak_reached and (
        p_top <= -policy.top_set_threshold or p_vol <= -policy.volume_threshold
    ):
        raw_next = inp.current_weight * (1 - inp.max_decrease_fraction)
    else:
        return OverloadOutput(next_weight=inp.current_weight, decision="maintain")

    next_weight = round_to_increment(raw_next, inp.rounding_increment)
    return OverloadOutput(
        next_weight=next_weight,
        decision=decide(next_weight, inp.current_weight),
    )


def run_engine(
    engine: str,
    inp: OverloadInput,
    increment: float,
    previous_failures: int = 0,
    policy: FailurePolicy | None = None,
) -> OverloadOutput:
    """
    Dispatch to the named engine.

    Raises:
        ValueError: If engine is not one of ENGINE_NAMES
    """
    if engine == "epley":
        return compute_next_weight(inp)
    if engine == "threshold":
        return compute_threshold_weight(inp, increment, previous_failures, policy)
    valid = ", ".join(ENGINE_NAMES)
    raise ValueError(f"Unknown engine '{engine}'. Valid engines: {valid}")
