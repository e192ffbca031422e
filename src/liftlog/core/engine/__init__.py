"""Engine configuration loading."""

from .config_loader import load_engine_settings, load_model_config

__all__ = ["load_engine_settings", "load_model_config"]
