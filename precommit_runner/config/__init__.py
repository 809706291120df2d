"""Configuration package for the pre-commit runner."""

from .env_file import find_env_file, load_env_file
from .loader import ConfigLoader, load_config, settings_to_config_dict
from .models import CheckTimeouts, ChecksConfig, RunnerConfig

__all__ = [
    "RunnerConfig",
    "ChecksConfig",
    "CheckTimeouts",
    "ConfigLoader",
    "load_config",
    "load_env_file",
    "find_env_file",
    "settings_to_config_dict",
]
