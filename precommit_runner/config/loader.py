"""Configuration loading with environment precedence."""

import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..errors import ConfigurationError
from ..runner_logging import LogCategory, get_category_logger
from .env_file import find_env_file, load_env_file
from .models import RunnerConfig

logger = get_category_logger(LogCategory.CONFIG)

BYTES_PER_MB = 1024 * 1024

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")

# Setting name -> location in RunnerConfig
BOOL_SETTINGS: dict[str, tuple[str, ...]] = {
    "ENABLE_PRE_COMMIT_SYSTEM": ("enabled",),
    "PRE_COMMIT_SYSTEM_FAIL_FAST": ("fail_fast",),
    "PRE_COMMIT_SYSTEM_COLOR_OUTPUT": ("color_output",),
    "PRE_COMMIT_SYSTEM_ENABLE_FUMPT": ("checks", "fumpt"),
    "PRE_COMMIT_SYSTEM_ENABLE_LINT": ("checks", "lint"),
    "PRE_COMMIT_SYSTEM_ENABLE_MOD_TIDY": ("checks", "mod_tidy"),
    "PRE_COMMIT_SYSTEM_ENABLE_WHITESPACE": ("checks", "whitespace"),
    "PRE_COMMIT_SYSTEM_ENABLE_EOF": ("checks", "eof"),
}

INT_SETTINGS: dict[str, tuple[str, ...]] = {
    "PRE_COMMIT_SYSTEM_TIMEOUT_SECONDS": ("timeout_seconds",),
    "PRE_COMMIT_SYSTEM_PARALLEL_WORKERS": ("parallel_workers",),
    "PRE_COMMIT_SYSTEM_MAX_FILE_SIZE_MB": ("max_file_size",),
    "PRE_COMMIT_SYSTEM_FUMPT_TIMEOUT": ("check_timeouts", "fumpt"),
    "PRE_COMMIT_SYSTEM_LINT_TIMEOUT": ("check_timeouts", "lint"),
    "PRE_COMMIT_SYSTEM_MOD_TIDY_TIMEOUT": ("check_timeouts", "mod_tidy"),
    "PRE_COMMIT_SYSTEM_WHITESPACE_TIMEOUT": ("check_timeouts", "whitespace"),
    "PRE_COMMIT_SYSTEM_EOF_TIMEOUT": ("check_timeouts", "eof"),
}

STRING_SETTINGS: dict[str, tuple[str, ...]] = {
    "PRE_COMMIT_SYSTEM_LOG_LEVEL": ("log_level",),
    "PRE_COMMIT_SYSTEM_HOOKS_PATH": ("hooks_path",),
    "PRE_COMMIT_SYSTEM_MAKE_COMMAND": ("make_command",),
    "PRE_COMMIT_SYSTEM_FUMPT_VERSION": ("tool_versions", "gofumpt"),
    "PRE_COMMIT_SYSTEM_GOLANGCI_LINT_VERSION": ("tool_versions", "golangci-lint"),
}

LIST_SETTINGS: dict[str, tuple[str, ...]] = {
    "PRE_COMMIT_SYSTEM_EXCLUDE_PATTERNS": ("exclude_patterns",),
}

KNOWN_SETTINGS = (
    set(BOOL_SETTINGS) | set(INT_SETTINGS) | set(STRING_SETTINGS) | set(LIST_SETTINGS)
)


def parse_bool(key: str, value: str) -> bool | None:
    """Parse a boolean setting; None (with a warning) when unparseable."""
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    logger.warning(f"Ignoring invalid boolean {key}={value!r}, using default")
    return None


def parse_int(key: str, value: str) -> int | None:
    """Parse an integer setting; None (with a warning) when unparseable."""
    try:
        return int(value.strip())
    except ValueError:
        logger.warning(f"Ignoring invalid integer {key}={value!r}, using default")
        return None


def _assign(config_dict: dict[str, Any], location: tuple[str, ...], value: Any) -> None:
    target = config_dict
    for part in location[:-1]:
        target = target.setdefault(part, {})
    target[location[-1]] = value


def _merge(base: dict[str, Any], updates: dict[str, Any]) -> None:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value


def settings_to_config_dict(settings: dict[str, str]) -> dict[str, Any]:
    """Convert raw KEY=VALUE settings into nested RunnerConfig fields.

    Unknown keys are ignored. Unparseable booleans and integers are
    dropped so that the model default applies.
    """
    config_dict: dict[str, Any] = {}

    for key, raw in settings.items():
        if key in BOOL_SETTINGS:
            flag = parse_bool(key, raw)
            if flag is not None:
                _assign(config_dict, BOOL_SETTINGS[key], flag)
        elif key in INT_SETTINGS:
            number = parse_int(key, raw)
            if number is None:
                continue
            if key == "PRE_COMMIT_SYSTEM_MAX_FILE_SIZE_MB":
                number *= BYTES_PER_MB
            _assign(config_dict, INT_SETTINGS[key], number)
        elif key in STRING_SETTINGS:
            value = raw.strip()
            if value:
                _assign(config_dict, STRING_SETTINGS[key], value)
        elif key in LIST_SETTINGS:
            patterns = [p.strip() for p in raw.split(",") if p.strip()]
            _assign(config_dict, LIST_SETTINGS[key], patterns)

    return config_dict


class ConfigLoader:
    """Configuration loader for the runner.

    Precedence (highest to lowest):
    1. Explicit overrides
    2. Environment variables
    3. Shared env file (.github/.env.shared)
    4. Defaults
    """

    def __init__(
        self,
        start_path: Path | None = None,
        env_file: Path | None = None,
        environ: dict[str, str] | None = None,
    ):
        self.start_path = Path(start_path) if start_path else Path.cwd()
        self._env_file_override = env_file
        self._environ = environ

    @property
    def env_file(self) -> Path | None:
        if self._env_file_override is not None:
            return self._env_file_override
        return find_env_file(self.start_path)

    def load(self, **overrides: Any) -> RunnerConfig:
        """Load configuration from all sources.

        Raises:
            ConfigurationError: A value parsed but failed validation.
        """
        config_dict: dict[str, Any] = {}

        # 1. Shared env file
        env_file = self.env_file
        if env_file is not None:
            try:
                file_settings = load_env_file(env_file)
            except OSError as e:
                raise ConfigurationError(
                    f"Failed to read configuration file: {e}",
                    config_file=str(env_file),
                ) from e
            _merge(config_dict, settings_to_config_dict(file_settings))
        else:
            logger.debug("No .github/.env.shared found, using defaults")

        # 2. Environment variables
        environ = self._environ if self._environ is not None else os.environ
        env_settings = {k: v for k, v in environ.items() if k in KNOWN_SETTINGS}
        if env_settings:
            _merge(config_dict, settings_to_config_dict(env_settings))
            logger.debug(f"Applied {len(env_settings)} environment variables")

        # 3. Explicit overrides
        _merge(config_dict, {k: v for k, v in overrides.items() if v is not None})
        if overrides:
            logger.debug(f"Applied {len(overrides)} explicit overrides")

        try:
            return RunnerConfig(**config_dict)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(
                f"Invalid configuration: {problems}",
                config_file=str(env_file) if env_file else None,
            ) from e


def load_config(start_path: Path | None = None, **overrides: Any) -> RunnerConfig:
    """Load configuration for the repository containing ``start_path``."""
    return ConfigLoader(start_path=start_path).load(**overrides)
