"""
Formula-focused unit tests for the overload engines and their helpers.

Values are hand-computed from the formulas so the tests double as
documentation of the model:

    PF      = 0.6 * P_top + 0.4 * P_rest, damped by 0.5
    1RM     = w * (1 + r0 / 30) * (1 + PF_adj)
    next    = 1RM / (1 + T / 30), clamped to [w * 0.90, w * 1.08], rounded
"""

import math

import pytest

from liftlog.core.adaptation import (
    apply_failure_policy,
    failure_streak,
    is_failed_session,
    should_force_deload,
)
from liftlog.core.config import (
    FAILURE_STREAK_REQUIRED,
    MAX_DECREASE_FRACTION,
    MAX_INCREASE_FRACTION,
    PF_DAMPING,
    ROUNDING_INCREMENT,
)
from liftlog.core.metrics import (
    clamp,
    estimate_1rm,
    performance_ratio,
    remaining_sets_performance,
    round_to_increment,
    top_set_performance,
    volume_performance,
    weight_for_reps,
)
from liftlog.core.models import (
    ExerciseResult,
    FailurePolicy,
    InvalidConfiguration,
    OverloadInput,
    OverloadOutput,
    OverloadParams,
)
from liftlog.core.overload import (
    compute_next_weight,
    compute_threshold_weight,
    decide,
    performance_factor,
    run_engine,
    weight_bounds,
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _inp(weight: float, reps: list[int], target: float, **kw) -> OverloadInput:
    return OverloadInput(current_weight=weight, reps_performed=tuple(reps), target_reps=target, **kw)


def _result(reps: list[int], weight: float = 80.0) -> ExerciseResult:
    return ExerciseResult(exercise_id="bench_press", weight=weight, sets=reps)


# ===========================================================================
# config.py — defaults
# ===========================================================================

class TestDefaults:
    def test_default_constants(self):
        assert PF_DAMPING == 0.5
        assert MAX_INCREASE_FRACTION == 0.08
        assert MAX_DECREASE_FRACTION == 0.10
        assert ROUNDING_INCREMENT == 0.5
        assert FAILURE_STREAK_REQUIRED == 2

    def test_input_defaults_match_config(self):
        inp = _inp(80, [8], 8)
        assert inp.top_set_weight == 0.6
        assert inp.remaining_sets_weight == 0.4
        assert inp.max_increase_fraction == MAX_INCREASE_FRACTION
        assert inp.max_decrease_fraction == MAX_DECREASE_FRACTION
        assert inp.rounding_increment == ROUNDING_INCREMENT


# ===========================================================================
# metrics.py — performance ratios
# ===========================================================================

class TestPerformanceRatios:
    """ratio = (actual - target) / target"""

    def test_performance_ratio(self):
        assert performance_ratio(10, 8) == pytest.approx(0.25)
        assert performance_ratio(6, 8) == pytest.approx(-0.25)
        assert performance_ratio(8, 8) == 0.0

    def test_top_set_uses_first_set(self):
        assert top_set_performance([10, 8, 7], 8) == pytest.approx(0.25)

    def test_top_set_empty_is_zero(self):
        assert top_set_performance([], 8) == 0.0

    def test_remaining_sets_mean(self):
        # mean(8, 7) = 7.5 → (7.5 - 8) / 8 = -0.0625
        assert remaining_sets_performance([10, 8, 7], 8) == pytest.approx(-0.0625)

    def test_single_set_has_no_remaining_signal(self):
        assert remaining_sets_performance([12], 8) == 0.0

    def test_volume_performance(self):
        # (10 + 8 + 7 - 24) / 24
        assert volume_performance([10, 8, 7], 8) == pytest.approx(1 / 24)

    def test_volume_performance_empty(self):
        assert volume_performance([], 8) == 0.0


# ===========================================================================
# metrics.py — Epley and rounding
# ===========================================================================

class TestEpley:
    """1RM = w * (1 + r / 30); w = 1RM / (1 + r / 30)"""

    def test_estimate_1rm(self):
        assert estimate_1rm(80, 10) == pytest.approx(80 * (1 + 10 / 30))

    def test_zero_reps_is_the_weight(self):
        assert estimate_1rm(100, 0) == pytest.approx(100.0)

    def test_inverse(self):
        one_rm = estimate_1rm(80, 8)
        assert weight_for_reps(one_rm, 8) == pytest.approx(80.0)

    def test_more_reps_means_lighter_load(self):
        assert weight_for_reps(100, 12) < weight_for_reps(100, 5)


class TestClampAndRounding:
    def test_clamp(self):
        assert clamp(5, 0, 10) == 5
        assert clamp(-1, 0, 10) == 0
        assert clamp(11, 0, 10) == 10

    def test_round_to_nearest(self):
        assert round_to_increment(86.4, 0.5) == pytest.approx(86.5)
        assert round_to_increment(86.2, 0.5) == pytest.approx(86.0)

    def test_tie_rounds_up(self):
        assert round_to_increment(86.25, 0.5) == pytest.approx(86.5)
        assert round_to_increment(102.5, 5) == pytest.approx(105.0)

    def test_coarse_increment(self):
        assert round_to_increment(104.0, 5) == pytest.approx(105.0)
        assert round_to_increment(101.0, 2.5) == pytest.approx(100.0)


# ===========================================================================
# models.py — input validation
# ===========================================================================

class TestOverloadInputValidation:
    def test_zero_target_reps_rejected(self):
        with pytest.raises(InvalidConfiguration):
            _inp(80, [8], 0)

    def test_negative_target_reps_rejected(self):
        with pytest.raises(InvalidConfiguration):
            _inp(80, [8], -3)

    def test_invalid_configuration_is_value_error(self):
        with pytest.raises(ValueError):
            _inp(80, [8], 0)

    def test_negative_weight_rejected(self):
        with pytest.raises(InvalidConfiguration):
            _inp(-5, [8], 8)

    def test_zero_weight_allowed(self):
        assert _inp(0, [8], 8).current_weight == 0

    def test_negative_reps_rejected(self):
        with pytest.raises(InvalidConfiguration):
            _inp(80, [8, -1], 8)

    def test_non_positive_rounding_rejected(self):
        with pytest.raises(InvalidConfiguration):
            _inp(80, [8], 8, rounding_increment=0)

    def test_decrease_fraction_must_be_below_one(self):
        with pytest.raises(InvalidConfiguration):
            _inp(80, [8], 8, max_decrease_fraction=1.0)

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_non_finite_weight_rejected(self, value):
        with pytest.raises(InvalidConfiguration, match="finite"):
            _inp(value, [10, 8, 7], 8)

    @pytest.mark.parametrize("field_name", [
        "top_set_weight",
        "remaining_sets_weight",
        "max_increase_fraction",
        "max_decrease_fraction",
        "rounding_increment",
    ])
    def test_non_finite_tuning_rejected(self, field_name):
        with pytest.raises(InvalidConfiguration, match=field_name):
            _inp(80, [10, 8, 7], 8, **{field_name: math.nan})

    def test_non_finite_target_rejected(self):
        with pytest.raises(InvalidConfiguration):
            _inp(80, [8], math.inf)

    def test_reps_frozen_to_tuple(self):
        inp = OverloadInput(current_weight=80, reps_performed=[10, 8], target_reps=8)
        assert inp.reps_performed == (10, 8)

    def test_params_input_for_override(self):
        params = OverloadParams(max_increase_fraction=0.05)
        inp = params.input_for(100, [10], 10, rounding_increment=5)
        assert inp.max_increase_fraction == 0.05
        assert inp.rounding_increment == 5
        assert params.input_for(100, [10], 10).rounding_increment == 0.5


# ===========================================================================
# overload.py — decision and Epley engine
# ===========================================================================

class TestDecide:
    def test_increase(self):
        assert decide(82.5, 80) == "increase"

    def test_deload(self):
        assert decide(72, 80) == "deload"

    def test_maintain(self):
        assert decide(80, 80) == "maintain"


class TestEpleyEngine:
    def test_empty_reps_short_circuit(self):
        out = compute_next_weight(_inp(80, [], 8))
        assert out == OverloadOutput(next_weight=80, decision="maintain")

    def test_weight_bounds(self):
        lower, upper = weight_bounds(_inp(100, [10], 10))
        assert lower == pytest.approx(90.0)
        assert upper == pytest.approx(108.0)

    def test_performance_factor(self):
        # 0.6 * 0.25 + 0.4 * (-0.0625) = 0.125
        assert performance_factor(_inp(80, [10, 8, 7], 8)) == pytest.approx(0.125)

    def test_strong_session_clamped_at_upper_bound(self):
        # raw ≈ 89.47 → clamp 86.4 → 86.5
        out = compute_next_weight(_inp(80, [10, 8, 7], 8))
        assert out.next_weight == pytest.approx(86.5)
        assert out.decision == "increase"

    def test_slight_miss_rounds_down(self):
        # PF_adj = -0.00833; raw ≈ 49.58 → 49.5
        out = compute_next_weight(_inp(50, [12, 12, 11], 12))
        assert out.next_weight == pytest.approx(49.5)
        assert out.decision == "deload"

    def test_weak_session_clamped_at_lower_bound(self):
        # raw ≈ 71.08 → clamp 72.0
        out = compute_next_weight(_inp(80, [7, 6, 6], 8))
        assert out.next_weight == pytest.approx(72.0)
        assert out.decision == "deload"

    def test_coarse_rounding_override(self):
        # PF_adj = 0.04; raw = 104.0 → 105 with a 5 kg step
        out = compute_next_weight(_inp(100, [10, 12, 12], 10, rounding_increment=5))
        assert out.next_weight == pytest.approx(105.0)
        assert out.decision == "increase"

    def test_exact_target_with_matching_reps_holds(self):
        # PF = 0 and r0 == T → raw == w
        out = compute_next_weight(_inp(60, [8, 8, 8], 8))
        assert out.next_weight == pytest.approx(60.0)
        assert out.decision == "maintain"

    def test_single_set(self):
        # PF = 0.6 * 0.25 = 0.15 → adj 0.075
        # 1RM = 80 * 4/3 * 1.075 = 114.67; raw = 114.67 / (38/30) = 90.53 → clamp 86.4
        out = compute_next_weight(_inp(80, [10], 8))
        assert out.next_weight == pytest.approx(86.5)

    def test_zero_weight_stays_zero(self):
        out = compute_next_weight(_inp(0, [10, 10], 8))
        assert out.next_weight == 0
        assert out.decision == "maintain"

    def test_custom_blend_weights(self):
        # Only the top set counts: PF = 0.25 → adj 0.125
        inp = _inp(80, [10, 2, 2], 8, top_set_weight=1.0, remaining_sets_weight=0.0)
        out = compute_next_weight(inp)
        assert out.decision == "increase"


# ===========================================================================
# overload.py — threshold engine
# ===========================================================================

class TestThresholdEngine:
    """
    P_top >= 0.10 or P_vol >= 0.05 → + increment
    (P_top <= -0.10 or P_vol <= -0.15) and streak >= 2 → w * 0.90
    """

    def test_top_set_beat_adds_increment(self):
        out = compute_threshold_weight(_inp(80, [10, 8, 7], 8), increment=2.5)
        assert out.next_weight == pytest.approx(82.5)
        assert out.decision == "increase"

    @pytest.mark.parametrize("increment", [math.inf, math.nan, -2.5])
    def test_bad_increment_rejected(self, increment):
        with pytest.raises(InvalidConfiguration, match="increment"):
            compute_threshold_weight(_inp(80, [10, 8, 7], 8), increment=increment)

    def test_slight_miss_maintains(self):
        out = compute_threshold_weight(_inp(50, [12, 12, 11], 12), increment=2.5)
        assert out.next_weight == pytest.approx(50.0)
        assert out.decision == "maintain"

    def test_failure_without_streak_maintains(self):
        out = compute_threshold_weight(_inp(80, [7, 6, 6], 8), increment=2.5)
        assert out.next_weight == pytest.approx(80.0)
        assert out.decision == "maintain"

    def test_failure_with_streak_deloads(self):
        out = compute_threshold_weight(_inp(80, [7, 6, 6], 8), increment=2.5, previous_failures=3)
        assert out.next_weight == pytest.approx(72.0)
        assert out.decision == "deload"

    def test_volume_beat_with_coarse_increment(self):
        # P_vol = (34 - 30) / 30 = 0.133
        out = compute_threshold_weight(
            _inp(100, [10, 12, 12], 10, rounding_increment=5), increment=5
        )
        assert out.next_weight == pytest.approx(105.0)
        assert out.decision == "increase"

    def test_empty_reps_short_circuit(self):
        out = compute_threshold_weight(_inp(80, [], 8), increment=2.5, previous_failures=5)
        assert out == OverloadOutput(next_weight=80, decision="maintain")

    def test_policy_streak_length(self):
        policy = FailurePolicy(streak_required=4)
        out = compute_threshold_weight(
            _inp(80, [7, 6, 6], 8), increment=2.5, previous_failures=3, policy=policy
        )
        assert out.decision == "maintain"


class TestRunEngine:
    def test_dispatch_epley(self):
        out = run_engine("epley", _inp(80, [10, 8, 7], 8), increment=2.5)
        assert out.next_weight == pytest.approx(86.5)

    def test_dispatch_threshold(self):
        out = run_engine("threshold", _inp(80, [10, 8, 7], 8), increment=2.5)
        assert out.next_weight == pytest.approx(82.5)

    def test_unknown_engine(self):
        with pytest.raises(ValueError, match="Unknown engine"):
            run_engine("linear", _inp(80, [8], 8), increment=2.5)


# ===========================================================================
# adaptation.py — failure streaks and forced deloads
# ===========================================================================

class TestFailedSession:
    """Failure = P_top <= -0.10 or P_vol <= -0.15 (inclusive)"""

    def test_top_set_exactly_ten_percent_short(self):
        assert is_failed_session([9], 10)

    def test_top_set_just_inside(self):
        assert not is_failed_session([10, 10], 10)

    def test_volume_exactly_fifteen_percent_short(self):
        # top set on target, total 17 / 20
        assert is_failed_session([10, 7], 10)

    def test_empty_sets_never_fail(self):
        assert not is_failed_session([], 10)

    def test_custom_thresholds(self):
        policy = FailurePolicy(top_set_threshold=0.30, volume_threshold=0.30)
        assert not is_failed_session([7, 6, 6], 8, policy)


class TestFailureStreak:
    def test_counts_back_from_latest(self):
        results = [_result([8, 8, 8]), _result([6, 6, 6]), _result([6, 5, 5])]
        assert failure_streak(results, 8) == 2

    def test_stops_at_first_success(self):
        results = [_result([6, 6, 6]), _result([8, 8, 8]), _result([6, 6, 6])]
        assert failure_streak(results, 8) == 1

    def test_skips_results_without_sets(self):
        results = [_result([6, 6, 6]), _result([]), _result([6, 6, 6])]
        assert failure_streak(results, 8) == 2

    def test_empty_history(self):
        assert failure_streak([], 8) == 0

    def test_latest_success_resets(self):
        results = [_result([6, 6, 6]), _result([6, 6, 6]), _result([9, 8, 8])]
        assert failure_streak(results, 8) == 0


class TestFailurePolicy:
    def test_should_force_deload_needs_current_failure(self):
        assert not should_force_deload([8, 8, 8], 8, previous_failures=3)

    def test_should_force_deload_needs_streak(self):
        assert not should_force_deload([6, 6, 6], 8, previous_failures=1)
        assert should_force_deload([6, 6, 6], 8, previous_failures=2)

    def test_disabled_policy(self):
        policy = FailurePolicy(enabled=False)
        assert not should_force_deload([6, 6, 6], 8, previous_failures=5, policy=policy)

    def test_forces_deload_over_engine_increase(self):
        # Top set 10 beats target but the back-off sets collapse:
        # Epley says 82.0 (increase), volume ratio is -0.25 → failure
        inp = _inp(80, [10, 4, 4], 8)
        engine_out = compute_next_weight(inp)
        assert engine_out.next_weight == pytest.approx(82.0)
        assert engine_out.decision == "increase"

        out = apply_failure_policy(inp, engine_out, previous_failures=2)
        assert out.next_weight == pytest.approx(72.0)
        assert out.decision == "deload"

    def test_keeps_engine_deload(self):
        inp = _inp(80, [7, 6, 6], 8)
        engine_out = compute_next_weight(inp)
        assert apply_failure_policy(inp, engine_out, previous_failures=5) is engine_out

    def test_short_streak_keeps_output(self):
        inp = _inp(80, [10, 4, 4], 8)
        engine_out = compute_next_weight(inp)
        assert apply_failure_policy(inp, engine_out, previous_failures=1) is engine_out

    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            FailurePolicy(streak_required=0)
        with pytest.raises(ValueError):
            FailurePolicy(top_set_threshold=-0.1)


def test_rounding_is_exact_multiple():
    out = compute_next_weight(_inp(77.3, [9, 9, 8], 8, rounding_increment=2.5))
    steps = out.next_weight / 2.5
    assert math.isclose(steps, round(steps), abs_tol=1e-9)
