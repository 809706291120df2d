"""Git hook management for the pre-commit runner.

Installs, removes and detects hook scripts. Every operation keys off the
ownership marker embedded in the script: a hook without it is foreign and is
never overwritten (without ``force``), removed, or reported as installed.
"""

import os
import stat
from dataclasses import dataclass
from pathlib import Path

from ..errors import HookExistsError
from ..runner_logging import LogCategory, get_category_logger

logger = get_category_logger(LogCategory.GIT)

HOOK_MARKER = "# precommit-runner: managed hook"
RUNNER_BINARY = "precommit-runner"

# Arguments passed to ``run`` per hook type. Git's own positional arguments
# (pre-push gets "<remote> <url>") are never forwarded.
HOOK_RUN_ARGS = {
    "pre-commit": "run",
    "pre-push": "run --all-files",
}

SUPPORTED_HOOK_TYPES = tuple(HOOK_RUN_ARGS)

_HOOK_TEMPLATE = """#!/usr/bin/env bash
{marker}
# Installed by '{binary} install'. Remove with '{binary} uninstall'.
#
# Runner lookup order:
#   1. {binary} on PATH
#   2. $HOME/.local/bin, $HOME/go/bin, /usr/local/bin
#   3. .venv/bin inside the repository

RUNNER=""
if command -v {binary} >/dev/null 2>&1; then
    RUNNER="$(command -v {binary})"
else
    REPO_ROOT="$(git rev-parse --show-toplevel 2>/dev/null)"
    for dir in "$HOME/.local/bin" "$HOME/go/bin" "/usr/local/bin" "$REPO_ROOT/.venv/bin"; do
        if [ -x "$dir/{binary}" ]; then
            RUNNER="$dir/{binary}"
            break
        fi
    done
fi

if [ -z "$RUNNER" ]; then
    echo "{binary} not found. Install it with: pip install {binary}" >&2
    exit 1
fi

exec "$RUNNER" {run_args}
"""


def _check_hook_type(hook_type: str) -> None:
    if hook_type not in SUPPORTED_HOOK_TYPES:
        raise ValueError(
            f"Unsupported hook type '{hook_type}'. "
            f"Expected one of: {', '.join(SUPPORTED_HOOK_TYPES)}"
        )


def hook_script(hook_type: str = "pre-commit") -> str:
    """Render the hook body for ``hook_type``."""
    _check_hook_type(hook_type)
    return _HOOK_TEMPLATE.format(
        marker=HOOK_MARKER,
        binary=RUNNER_BINARY,
        run_args=HOOK_RUN_ARGS[hook_type],
    )


@dataclass
class HookStatus:
    """Detailed state of a single hook slot."""

    hook_type: str
    path: Path
    exists: bool = False
    installed: bool = False
    executable: bool = False

    @property
    def foreign(self) -> bool:
        """A hook file is present but not managed by this runner."""
        return self.exists and not self.installed

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "hook_type": self.hook_type,
            "path": str(self.path),
            "exists": self.exists,
            "installed": self.installed,
            "executable": self.executable,
            "foreign": self.foreign,
        }


class HookInstaller:
    """Manage runner-owned hooks in a git hooks directory.

    State of one hook slot:
        absent  --install-->          ours
        ours    --uninstall-->        absent
        foreign --install(force)-->   ours
        foreign --uninstall-->        foreign
    """

    def __init__(self, hooks_dir: Path | str):
        self.hooks_dir = Path(hooks_dir)

    def hook_path(self, hook_type: str = "pre-commit") -> Path:
        """Path of the hook file for ``hook_type``."""
        _check_hook_type(hook_type)
        return self.hooks_dir / hook_type

    def _has_marker(self, path: Path) -> bool:
        try:
            return HOOK_MARKER in path.read_text(errors="replace")
        except OSError as e:
            logger.debug(f"Could not read hook {path}: {e}")
            return False

    def is_installed(self, hook_type: str = "pre-commit") -> bool:
        """True iff the hook file exists and carries the ownership marker."""
        path = self.hook_path(hook_type)
        return path.is_file() and self._has_marker(path)

    def install(self, hook_type: str = "pre-commit", force: bool = False) -> bool:
        """Install the runner hook.

        Args:
            hook_type: Git hook name.
            force: Overwrite a foreign hook.

        Returns:
            True if the hook was written, False if ours was already in place.

        Raises:
            HookExistsError: A foreign hook exists and ``force`` is False.
        """
        path = self.hook_path(hook_type)

        if path.exists():
            if self._has_marker(path):
                logger.debug(f"Hook already installed at {path}")
                return False
            if not force:
                raise HookExistsError(path)
            logger.warning(f"Overwriting foreign hook at {path}")

        self.hooks_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(hook_script(hook_type))
        os.chmod(
            path,
            stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH,
        )
        logger.info(f"Installed {hook_type} hook at {path}")
        return True

    def uninstall(self, hook_type: str = "pre-commit") -> bool:
        """Remove the runner hook.

        Returns:
            True if a hook was removed; False when the slot is empty or holds
            a foreign hook.
        """
        path = self.hook_path(hook_type)

        if not path.exists():
            logger.debug(f"No {hook_type} hook at {path}")
            return False

        if not self._has_marker(path):
            logger.info(f"{hook_type} hook at {path} is not managed by {RUNNER_BINARY}")
            return False

        path.unlink()
        logger.info(f"Removed {hook_type} hook at {path}")
        return True

    def get_status(self, hook_type: str = "pre-commit") -> HookStatus:
        """Get the detailed status of a hook slot."""
        path = self.hook_path(hook_type)
        status = HookStatus(hook_type=hook_type, path=path)

        if path.is_file():
            status.exists = True
            status.executable = bool(path.stat().st_mode & stat.S_IXUSR)
            status.installed = self._has_marker(path)

        return status
