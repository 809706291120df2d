"""Parser for the KEY=VALUE shared environment file."""

from pathlib import Path

from ..runner_logging import LogCategory, get_category_logger

logger = get_category_logger(LogCategory.CONFIG)

ENV_FILE_NAME = ".env.shared"
ENV_FILE_DIR = ".github"


def find_env_file(start_path: Path) -> Path | None:
    """Walk up from ``start_path`` looking for ``.github/.env.shared``."""
    current = start_path.resolve()
    for directory in (current, *current.parents):
        candidate = directory / ENV_FILE_DIR / ENV_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def _strip_value(raw_value: str) -> str:
    value = raw_value.strip()
    if value[:1] in ("'", '"'):
        closing = value.find(value[0], 1)
        if closing != -1:
            return value[1:closing]
    if " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    return value


def load_env_file(env_file: Path) -> dict[str, str]:
    """Load raw string settings from an env file.

    Blank lines and ``#`` comments are ignored, an ``export`` prefix is
    accepted, and surrounding quotes are removed. Values stay strings;
    conversion happens in the loader.
    """
    settings: dict[str, str] = {}

    if not env_file.exists():
        return settings

    with open(env_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, raw_value = line.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export ") :].strip()
            if not key:
                continue
            settings[key] = _strip_value(raw_value)

    logger.debug(f"Loaded {len(settings)} settings from {env_file}")
    return settings
