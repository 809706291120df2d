"""Execution context shared by all checks of one run.

Repository-root resolution and make-target lookups are the two facts every
check needs. The context memoizes both for its lifetime so a run with N
checks pays for each subprocess call once. Cache population is locked per
key: concurrent first-time callers wait for a single lookup and all observe
its result.
"""

import shutil
import threading
from pathlib import Path

from ..git.repository import Repository, find_repository_root
from ..runner_logging import LogCategory, get_category_logger
from .process import Deadline, run_command

logger = get_category_logger(LogCategory.CHECKS)

LOOKUP_TIMEOUT_SECONDS = 10


class SharedContext:
    """Per-run cache of repository root and make-target existence."""

    def __init__(
        self,
        working_dir: Path | str | None = None,
        make_command: str = "make",
        lookup_timeout: float = LOOKUP_TIMEOUT_SECONDS,
    ):
        """Initialize the context.

        Args:
            working_dir: Directory used to discover the repository root.
            make_command: Build tool binary used for target lookups.
            lookup_timeout: Seconds allowed for one ``make -n`` lookup.
        """
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.make_command = make_command
        self.lookup_timeout = lookup_timeout

        self._root_lock = threading.Lock()
        self._repo_root: Path | None = None
        self._repository: Repository | None = None

        self._targets_lock = threading.Lock()
        self._target_locks: dict[str, threading.Lock] = {}
        self._make_targets: dict[str, bool] = {}

        self._make_available: bool | None = None

    def get_repo_root(self) -> Path:
        """Resolve the repository root, once per context.

        Raises:
            RepositoryRootNotFoundError: Not inside a git working tree.
        """
        if self._repo_root is not None:
            return self._repo_root

        with self._root_lock:
            if self._repo_root is None:
                self._repo_root = find_repository_root(self.working_dir)
                logger.debug(f"Resolved repository root: {self._repo_root}")
        return self._repo_root

    def get_repository(self) -> Repository:
        """Repository accessor bound to the cached root."""
        root = self.get_repo_root()
        with self._root_lock:
            if self._repository is None:
                self._repository = Repository(root)
        return self._repository

    def make_available(self) -> bool:
        """Whether the build tool binary exists at all."""
        if self._make_available is None:
            self._make_available = shutil.which(self.make_command) is not None
        return self._make_available

    def has_make_target(self, target: str, deadline: Deadline | None = None) -> bool:
        """Check whether ``make -n <target>`` succeeds in the repository root.

        Never raises: any lookup failure, including a missing repository or
        build tool, is cached as "target absent". A lookup cut short by
        ``deadline`` (expiry or cancellation) also answers "absent" but is
        not cached, so a later caller looks it up again.
        """
        cached = self._make_targets.get(target)
        if cached is not None:
            return cached

        deadline = deadline or Deadline()
        with self._targets_lock:
            target_lock = self._target_locks.setdefault(target, threading.Lock())

        remaining = deadline.remaining()
        if not target_lock.acquire(timeout=-1 if remaining is None else remaining):
            logger.debug(f"Gave up waiting for the '{target}' lookup")
            return False
        try:
            if target in self._make_targets:
                return self._make_targets[target]
            exists = self._lookup_make_target(target, deadline)
            if exists is None:
                return False
            self._make_targets[target] = exists
            return exists
        finally:
            target_lock.release()

    def _lookup_make_target(self, target: str, deadline: Deadline) -> bool | None:
        """Run the lookup; None when ``deadline`` ended it before an answer."""
        if deadline.done:
            logger.debug(f"Skipping lookup of make target '{target}': deadline done")
            return None

        if not self.make_available():
            logger.warning(
                f"'{self.make_command}' is not installed; "
                f"falling back to direct tool invocation for '{target}'"
            )
            return False

        try:
            root = self.get_repo_root()
            result = run_command(
                [self.make_command, "-n", target],
                cwd=root,
                deadline=deadline.child(self.lookup_timeout),
            )
        except Exception as e:
            logger.debug(f"Lookup of make target '{target}' failed: {e}")
            return False

        if result.cancelled or (result.timed_out and deadline.done):
            logger.debug(f"Lookup of make target '{target}' interrupted")
            return None
        if result.timed_out:
            logger.warning(f"Lookup of make target '{target}' timed out")
            return False

        exists = result.returncode == 0
        logger.debug(f"Make target '{target}' {'found' if exists else 'not found'}")
        return exists
