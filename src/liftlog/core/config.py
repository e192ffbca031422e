"""
Configuration constants for the progressive-overload model.

All adjustable parameters are centralized here for easy tuning.  The
bundled liftlog.yaml mirrors these values; see core/engine/config_loader.py
for how user overrides are merged on top.
"""

from typing import Final

# =============================================================================
# BLENDED PERFORMANCE FACTOR
# =============================================================================

TOP_SET_WEIGHT: Final[float] = 0.6  # Contribution of the first (top) set
REMAINING_SETS_WEIGHT: Final[float] = 0.4  # Contribution of the mean of sets 2..n
PF_DAMPING: Final[float] = 0.5  # Halves the raw signal before it touches the 1RM

# =============================================================================
# EPLEY 1RM ESTIMATE
# =============================================================================

EPLEY_REPS_DIVISOR: Final[float] = 30.0  # 1RM = w * (1 + reps / 30)

# =============================================================================
# SAFETY BOUNDS AND ROUNDING
# =============================================================================

MAX_INCREASE_FRACTION: Final[float] = 0.08  # Largest step up in one session
MAX_DECREASE_FRACTION: Final[float] = 0.10  # Largest step down in one session
ROUNDING_INCREMENT: Final[float] = 0.5  # kg granularity of the final weight

# =============================================================================
# THRESHOLD RULE (alternative engine)
# =============================================================================

THRESHOLD_TOP_SET_INCREASE: Final[float] = 0.10  # top-set ratio that earns +increment
THRESHOLD_VOLUME_INCREASE: Final[float] = 0.05  # volume ratio that earns +increment
DEFAULT_INCREMENT_KG: Final[float] = 2.5  # Fixed step per exercise when unset

# =============================================================================
# FAILURE STREAK / FORCED DELOAD
# =============================================================================

FAILURE_TOP_SET_THRESHOLD: Final[float] = 0.10  # top set short of target by >= 10%
FAILURE_VOLUME_THRESHOLD: Final[float] = 0.15  # total reps short of target by >= 15%
FAILURE_STREAK_REQUIRED: Final[int] = 2  # Prior failed sessions before forcing deload

# =============================================================================
# ENGINES
# =============================================================================

DEFAULT_ENGINE: Final[str] = "epley"
ENGINE_NAMES: Final[tuple[str, ...]] = ("epley", "threshold")

# =============================================================================
# UNITS
# =============================================================================

KG_TO_LBS: Final[float] = 2.20462
UNITS: Final[tuple[str, ...]] = ("kg", "lbs")
UNIT_ROUNDING: Final[dict[str, float]] = {
    "kg": 0.5,
    "lbs": 1.0,
}

# =============================================================================
# PROGRESS STATISTICS
# =============================================================================

STREAK_MAX_GAP_DAYS: Final[int] = 7  # Sessions further apart than this break a streak
DEFAULT_VOLUME_WEEKS: Final[int] = 4
