"""
YAML → typed engine settings loader.

Loads engine settings from liftlog.yaml (bundled with the package) and
optionally merges user overrides from ~/.liftlog/config.yaml.

Usage:
    from liftlog.core.engine.config_loader import load_engine_settings
    settings = load_engine_settings()
    settings.params.rounding_increment  # 0.5

If the bundled YAML cannot be read, the Python defaults from config.py are
used.  If the user override file exists but has parse errors or invalid
values, a warning is issued and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..models import EngineSettings, FailurePolicy, OverloadParams

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; raises yaml.YAMLError / OSError on failure."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled liftlog.yaml, or None if not found."""
    ref = importlib.resources.files("liftlog").joinpath("liftlog.yaml")
    if ref.is_file():
        return Path(str(ref))
    candidate = Path(__file__).parent.parent.parent / "liftlog.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.liftlog/config.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".liftlog" / "config.yaml"
    return p if p.exists() else None


def load_model_config(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge engine configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/liftlog/liftlog.yaml
    2. User override (``user_path`` or ~/.liftlog/config.yaml)

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        try:
            config = _deep_merge(config, _load_yaml_file(bundled))
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"liftlog: cannot read bundled config {bundled} ({exc}); using defaults.",
                stacklevel=2,
            )

    user = user_path if user_path is not None else get_user_yaml_path()
    if user is not None and user.exists():
        try:
            user_cfg = _load_yaml_file(user)
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"liftlog: ignoring user config {user} ({exc})",
                stacklevel=2,
            )
        else:
            try:
                settings_from_dict(_deep_merge(config, user_cfg))
            except (TypeError, ValueError) as exc:
                warnings.warn(
                    f"liftlog: ignoring user config {user}: {exc}",
                    stacklevel=2,
                )
            else:
                config = _deep_merge(config, user_cfg)

    return config


def settings_from_dict(cfg: dict[str, Any]) -> EngineSettings:
    """
    Convert a merged config dict to EngineSettings.

    Missing keys fall back to the dataclass defaults.

    Raises:
        ValueError: If a value is out of range or an unknown key is present
        TypeError: If a section is not a mapping
    """
    defaults = EngineSettings()
    overload = cfg.get("overload") or {}
    policy = cfg.get("failure_policy") or {}
    if not isinstance(overload, dict) or not isinstance(policy, dict):
        raise TypeError("'overload' and 'failure_policy' must be mappings")

    unknown = set(overload) - set(OverloadParams.__dataclass_fields__)
    if unknown:
        raise ValueError(f"unknown overload keys: {sorted(unknown)}")
    unknown = set(policy) - set(FailurePolicy.__dataclass_fields__)
    if unknown:
        raise ValueError(f"unknown failure_policy keys: {sorted(unknown)}")

    params = OverloadParams(**{k: float(v) for k, v in overload.items()})
    # Validate ranges by building a throwaway input.
    params.input_for(current_weight=0.0, reps_performed=(), target_reps=1)

    enabled = policy.get("enabled", defaults.failure_policy.enabled)
    if not isinstance(enabled, bool):
        raise ValueError(f"failure_policy.enabled must be true or false, got {enabled!r}")

    failure_policy = FailurePolicy(
        enabled=enabled,
        top_set_threshold=float(
            policy.get("top_set_threshold", defaults.failure_policy.top_set_threshold)
        ),
        volume_threshold=float(
            policy.get("volume_threshold", defaults.failure_policy.volume_threshold)
        ),
        streak_required=int(
            policy.get("streak_required", defaults.failure_policy.streak_required)
        ),
    )

    return EngineSettings(
        engine=str(cfg.get("engine", defaults.engine)),
        params=params,
        failure_policy=failure_policy,
    )


def load_engine_settings(user_path: Path | None = None) -> EngineSettings:
    """Load YAML configuration and return typed EngineSettings."""
    return settings_from_dict(load_model_config(user_path))
