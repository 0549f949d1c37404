"""Configuration package for runtime settings and startup validation."""

from .settings import JobTriggerSettings, SettingsLoadError, config_load_input_arguments, config_load_settings

__all__ = ["JobTriggerSettings", "SettingsLoadError", "config_load_input_arguments", "config_load_settings"]
