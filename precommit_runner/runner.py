"""
Check orchestrator.

The runner owns the registry of checks for one invocation, filters the file
set per check, executes checks through a fresh ``SharedContext`` and
aggregates the outcome into ``RunResults``.

Checks whose category rewrites the working tree run one after another in a
single lane; the remaining checks run concurrently beside that lane when
more than one worker is available. Results are always reported in registry
order.
"""

import fnmatch
import os
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .checks.base import Check
from .checks.process import Deadline
from .checks.registry import CheckRegistry
from .checks.shared import SharedContext
from .config.models import RunnerConfig
from .errors import (
    ChecksFailedError,
    ConfigurationError,
    MakeTargetNotFoundError,
    NoChecksToRunError,
    PreCommitError,
    ToolExecutionError,
    ToolNotFoundError,
)
from .runner_logging import LogCategory, get_category_logger

logger = get_category_logger(LogCategory.RUNNER)

# Called with (check_name, status) where status is one of
# "running", "passed", "failed" or "skipped". May be called from worker threads.
ProgressCallback = Callable[[str, str], None]

DEGRADABLE_ERRORS = (ToolNotFoundError, MakeTargetNotFoundError)


class CheckStatus(Enum):
    """Outcome of a single check."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class RunOptions:
    """Per-invocation options for ``Runner.run``.

    ``None`` for ``fail_fast``, ``parallel`` and ``timeout`` means "use the
    configured value".
    """

    files: list[str] = field(default_factory=list)
    only_checks: list[str] = field(default_factory=list)
    skip_checks: list[str] = field(default_factory=list)
    parallel: int | None = None
    fail_fast: bool | None = None
    graceful_degradation: bool = False
    timeout: float | None = None
    progress_callback: ProgressCallback | None = None


@dataclass
class CheckResult:
    """Result of one check within a run."""

    name: str
    status: CheckStatus
    error: PreCommitError | None = None
    duration: float = 0.0
    files: list[str] = field(default_factory=list)
    reason: str = ""  # why a check was skipped

    @property
    def success(self) -> bool:
        return self.status is not CheckStatus.FAILED

    @property
    def skipped(self) -> bool:
        return self.status is CheckStatus.SKIPPED

    @property
    def suggestion(self) -> str:
        if self.error and self.error.suggestion:
            return self.error.suggestion
        return ""

    @property
    def output(self) -> str:
        return self.error.output if self.error else ""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "status": self.status.value,
            "error": self.error.message if self.error else None,
            "suggestion": self.suggestion or None,
            "duration": self.duration,
            "files": list(self.files),
            "reason": self.reason or None,
        }


@dataclass
class RunResults:
    """Aggregate outcome of a run."""

    check_results: list[CheckResult] = field(default_factory=list)
    total_duration: float = 0.0
    total_files: int = 0

    @property
    def passed(self) -> int:
        return sum(1 for r in self.check_results if r.status is CheckStatus.PASSED)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.check_results if r.status is CheckStatus.FAILED)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.check_results if r.status is CheckStatus.SKIPPED)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def get(self, name: str) -> CheckResult | None:
        for result in self.check_results:
            if result.name == name:
                return result
        return None

    def raise_for_failures(self) -> None:
        """Raise ``ChecksFailedError`` naming every failed check.

        The per-check errors are carried over unchanged.
        """
        errors = {
            r.name: r.error
            for r in self.check_results
            if r.status is CheckStatus.FAILED and r.error is not None
        }
        if errors:
            raise ChecksFailedError(errors)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "checks": [r.to_dict() for r in self.check_results],
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "total_duration": self.total_duration,
            "total_files": self.total_files,
        }


def is_excluded(path: str, patterns: list[str]) -> bool:
    """Match a repository-relative path against exclude patterns.

    Patterns ending in ``/`` exclude a directory at any depth; other
    patterns match the whole path or its basename.
    """
    normalized = path.replace("\\", "/")
    parts = normalized.split("/")
    basename = parts[-1]
    for pattern in patterns:
        if pattern.endswith("/"):
            directory = pattern.rstrip("/")
            if "/" in directory:
                if normalized.startswith(directory + "/"):
                    return True
            elif directory in parts[:-1]:
                return True
        elif fnmatch.fnmatchcase(normalized, pattern) or fnmatch.fnmatchcase(
            basename, pattern
        ):
            return True
    return False


class Runner:
    """Executes the registered checks against a file set.

    Example usage:
        runner = Runner(config, repo_root)
        results = runner.run(RunOptions(files=staged_files))
        results.raise_for_failures()
    """

    def __init__(
        self,
        config: RunnerConfig,
        repo_root: Path,
        registry: CheckRegistry | None = None,
    ):
        """Initialize the runner.

        Args:
            config: Loaded runner configuration.
            repo_root: Repository root the checks operate on.
            registry: Checks to run; built from ``config`` when omitted.
        """
        self.config = config
        self.repo_root = Path(repo_root)
        self.registry = registry if registry is not None else CheckRegistry.from_config(config)

    def select_checks(self, only: list[str], skip: list[str]) -> list[Check]:
        """Apply ``--only``/``--skip`` selection in registry order.

        Skipping an unregistered check is harmless and only logged.

        Raises:
            ConfigurationError: ``only`` names a check that is not registered.
            NoChecksToRunError: The selection is empty.
        """
        for name in skip:
            if name not in self.registry:
                logger.debug(f"Ignoring --skip for unregistered check {name}")

        unknown = [name for name in only if name not in self.registry]
        if unknown:
            raise ConfigurationError(
                f"Unknown or disabled check(s): {', '.join(unknown)}",
                suggestion=(
                    f"Available checks: {', '.join(self.registry.names()) or 'none'}"
                ),
            )

        selected = [
            check
            for check in self.registry
            if (not only or check.name in only) and check.name not in skip
        ]
        if not selected:
            raise NoChecksToRunError()
        return selected

    def filter_files(self, files: list[str]) -> list[str]:
        """Drop excluded paths, keeping order and removing duplicates."""
        seen: set[str] = set()
        kept: list[str] = []
        for path in files:
            if path in seen or is_excluded(path, self.config.exclude_patterns):
                continue
            seen.add(path)
            kept.append(path)
        return kept

    def _worker_count(self, options: RunOptions) -> int:
        workers = options.parallel if options.parallel is not None else self.config.parallel_workers
        if workers <= 0:
            workers = os.cpu_count() or 1
        return workers

    def run(self, options: RunOptions, deadline: Deadline | None = None) -> RunResults:
        """Run the selected checks.

        Args:
            options: Run options.
            deadline: Optional parent deadline; cancelling it cancels the run.

        Returns:
            RunResults with one entry per selected check, in registry order.

        Raises:
            NoChecksToRunError: No check was selected.
            ConfigurationError: ``--only``/``--skip`` named an unknown check.
        """
        start = time.monotonic()
        checks = self.select_checks(options.only_checks, options.skip_checks)
        files = self.filter_files(options.files)

        timeout = options.timeout if options.timeout is not None else self.config.timeout_seconds
        run_deadline = (deadline or Deadline()).child(timeout)
        fail_fast = options.fail_fast if options.fail_fast is not None else self.config.fail_fast
        context = SharedContext(working_dir=self.repo_root, make_command=self.config.make_command)

        workers = min(self._worker_count(options), len(checks))
        logger.info(
            f"Running {len(checks)} check(s) on {len(files)} file(s)",
            extra={"file_count": len(files)},
        )

        execution = _Execution(
            context=context,
            deadline=run_deadline,
            files=files,
            fail_fast=fail_fast,
            graceful=options.graceful_degradation,
            progress=options.progress_callback,
        )

        if workers <= 1:
            for check in checks:
                execution.run_check(check)
        else:
            self._run_parallel(checks, execution, workers)

        results = RunResults(
            check_results=[execution.results[check.name] for check in checks],
            total_duration=time.monotonic() - start,
            total_files=len(files),
        )
        logger.info(
            f"Run finished: {results.passed} passed, {results.failed} failed, "
            f"{results.skipped} skipped",
            extra={"duration_ms": results.total_duration * 1000},
        )
        return results

    def _run_parallel(self, checks: list[Check], execution: "_Execution", workers: int) -> None:
        serial = [c for c in checks if c.category.mutates_tree]
        concurrent = [c for c in checks if not c.category.mutates_tree]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = []
            if serial:
                futures.append(executor.submit(execution.run_lane, serial))
            futures.extend(executor.submit(execution.run_check, check) for check in concurrent)
            for future in futures:
                future.result()


class _Execution:
    """Mutable state of one run, shared by the worker threads."""

    def __init__(
        self,
        context: SharedContext,
        deadline: Deadline,
        files: list[str],
        fail_fast: bool,
        graceful: bool,
        progress: ProgressCallback | None,
    ):
        self.context = context
        self.deadline = deadline
        self.files = files
        self.fail_fast = fail_fast
        self.graceful = graceful
        self.progress = progress
        self.results: dict[str, CheckResult] = {}

    def _notify(self, name: str, status: str) -> None:
        if self.progress is None:
            return
        try:
            self.progress(name, status)
        except Exception as e:
            logger.warning(f"Progress callback failed for {name}: {e}")

    def run_lane(self, checks: list[Check]) -> None:
        for check in checks:
            self.run_check(check)

    def run_check(self, check: Check) -> CheckResult:
        result = self._execute(check)
        self.results[check.name] = result
        self._notify(check.name, result.status.value)

        if result.status is CheckStatus.FAILED and self.fail_fast and not self.deadline.done:
            logger.info(f"Fail-fast: cancelling remaining checks after {check.name}")
            self.deadline.cancel()
        return result

    def _execute(self, check: Check) -> CheckResult:
        files = check.filter_files(self.files)

        if self.deadline.cancelled:
            return CheckResult(
                check.name,
                CheckStatus.SKIPPED,
                files=files,
                reason="not run: the run was cancelled",
            )
        if self.deadline.expired:
            error = ToolExecutionError(
                check.name,
                "",
                "The run timed out before this check started. "
                "Consider increasing PRE_COMMIT_SYSTEM_TIMEOUT_SECONDS.",
                timed_out=True,
            )
            return CheckResult(check.name, CheckStatus.FAILED, error=error, files=files)

        if not files and check.metadata.requires_files:
            logger.debug(f"{check.name}: no matching files")
            return CheckResult(
                check.name, CheckStatus.SKIPPED, files=files, reason="no matching files"
            )

        self._notify(check.name, "running")
        start = time.monotonic()
        try:
            check.run(self.context, self.deadline, files)
        except PreCommitError as e:
            duration = time.monotonic() - start
            if self.graceful and isinstance(e, DEGRADABLE_ERRORS):
                logger.warning(f"{check.name} skipped: {e.message}")
                return CheckResult(
                    check.name,
                    CheckStatus.SKIPPED,
                    error=e,
                    duration=duration,
                    files=files,
                    reason=e.message,
                )
            logger.info(
                f"{check.name} failed: {e.message}",
                extra={"check": check.name, "duration_ms": duration * 1000},
            )
            return CheckResult(
                check.name, CheckStatus.FAILED, error=e, duration=duration, files=files
            )
        except Exception as e:
            logger.exception(f"Unexpected error in check {check.name}")
            error = ToolExecutionError(
                check.name,
                f"{type(e).__name__}: {e}",
                "Unexpected internal error. Re-run with --verbose and report the output.",
            )
            return CheckResult(
                check.name,
                CheckStatus.FAILED,
                error=error,
                duration=time.monotonic() - start,
                files=files,
            )

        duration = time.monotonic() - start
        logger.info(
            f"{check.name} passed",
            extra={"check": check.name, "duration_ms": duration * 1000, "file_count": len(files)},
        )
        return CheckResult(check.name, CheckStatus.PASSED, duration=duration, files=files)
