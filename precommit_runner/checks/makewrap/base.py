"""Shared execution protocol for checks that wrap a make target.

Each concrete check prefers ``make <target>`` in the repository root and
falls back to invoking its tool directly on the filtered files. Both paths
run under the check's timeout and feed the same failure classification.
"""

import shutil
import time
from abc import abstractmethod
from pathlib import Path

from ...errors import GitCommandError, NotTidyError, ToolExecutionError, ToolNotFoundError
from ...runner_logging import LogCategory, get_category_logger
from ..base import Check, CheckCategory, CheckMetadata
from ..classify import FailureHints, Invocation, classify_failure
from ..process import CommandResult, Deadline, run_command
from ..shared import SharedContext

logger = get_category_logger(LogCategory.CHECKS)


class MakeWrapCheck(Check):
    """Base class for make-target-backed checks.

    Subclasses set the class attributes below and implement
    ``direct_args``.
    """

    check_name: str = ""
    check_description: str = ""
    make_target: str = ""
    tool_binary: str = ""
    direct_command: str = ""  # display form of the direct invocation
    file_patterns: tuple[str, ...] = ()
    check_category: CheckCategory = CheckCategory.LINTING
    estimated_duration: float = 1.0
    default_timeout: float = 30.0
    requires_files: bool = True
    tidy_paths: tuple[str, ...] = ()  # verified with git diff after success
    hints: FailureHints

    def __init__(self, timeout: float | None = None, tool_version: str = "latest"):
        """Initialize the check.

        Args:
            timeout: Per-invocation timeout in seconds. Defaults to
                ``default_timeout``.
            tool_version: Version used in install hints.
        """
        self.timeout = timeout if timeout is not None else self.default_timeout
        self.tool_version = tool_version

    @property
    def name(self) -> str:
        return self.check_name

    @property
    def description(self) -> str:
        return self.check_description

    @property
    def metadata(self) -> CheckMetadata:
        return CheckMetadata(
            name=self.check_name,
            description=self.check_description,
            file_patterns=self.file_patterns,
            estimated_duration=self.estimated_duration,
            dependencies=(self.make_target, self.tool_binary),
            default_timeout=self.timeout,
            category=self.check_category,
            requires_files=self.requires_files,
        )

    @abstractmethod
    def direct_args(self, repo_root: Path, files: list[str]) -> list[str]:
        """Command line for invoking the tool without make."""

    def run(self, context: SharedContext, deadline: Deadline, files: list[str]) -> None:
        if self.requires_files and not files:
            logger.debug(f"{self.name}: no files to check")
            return

        repo_root = context.get_repo_root()
        check_deadline = deadline.child(self.timeout)

        if context.has_make_target(self.make_target, check_deadline):
            invocation = Invocation(
                command=f"make {self.make_target}",
                tool=self.tool_binary,
                target=self.make_target,
            )
            args = [context.make_command, self.make_target]
        else:
            invocation = Invocation(command=self.direct_command, tool=self.tool_binary)
            # a finished deadline is reported by run_command, not as a missing tool
            if not check_deadline.done and shutil.which(self.tool_binary) is None:
                raise ToolNotFoundError(
                    self.tool_binary,
                    self.hints.render(self.hints.missing_tool, version=self.tool_version),
                )
            args = self.direct_args(repo_root, files)

        logger.debug(f"{self.name}: running {invocation.command}")
        start = time.monotonic()
        result = self._execute(args, repo_root, check_deadline, invocation)
        logger.info(
            f"{self.name}: {invocation.command} exited {result.returncode}",
            extra={
                "check": self.name,
                "command": invocation.command,
                "duration_ms": (time.monotonic() - start) * 1000,
                "file_count": len(files),
            },
        )

        if not result.success:
            raise classify_failure(
                result, invocation, self.hints, self.timeout, version=self.tool_version
            )

        if self.tidy_paths:
            self._verify_tidy(context, check_deadline, invocation, result)

    def _execute(
        self,
        args: list[str],
        repo_root: Path,
        deadline: Deadline,
        invocation: Invocation,
    ) -> CommandResult:
        try:
            return run_command(args, cwd=repo_root, deadline=deadline)
        except FileNotFoundError as e:
            raise ToolNotFoundError(
                args[0],
                self.hints.render(self.hints.missing_tool, version=self.tool_version),
                output=str(e),
            ) from e
        except OSError as e:
            raise ToolExecutionError(
                invocation.command,
                str(e),
                self.hints.render(self.hints.generic, command=invocation.command),
            ) from e

    def _verify_tidy(
        self,
        context: SharedContext,
        deadline: Deadline,
        invocation: Invocation,
        result: CommandResult,
    ) -> None:
        repository = context.get_repository()
        paths = list(self.tidy_paths)
        try:
            changed = repository.has_diff(paths, deadline=deadline)
        except GitCommandError as e:
            if deadline.done:
                cancelled = deadline.cancelled
                raise ToolExecutionError(
                    "git diff",
                    e.output,
                    self.hints.render(
                        self.hints.cancelled if cancelled else self.hints.timeout,
                        command="git diff",
                        timeout=f"{self.timeout:g}s",
                        target=self.make_target,
                        version=self.tool_version,
                    ),
                    timed_out=not cancelled,
                    cancelled=cancelled,
                ) from e
            raise ToolExecutionError(
                "git diff",
                e.output,
                f"Could not verify {', '.join(paths)} after {invocation.command}. "
                f"Run 'git diff --exit-code -- {' '.join(paths)}' manually.",
            ) from e

        if changed:
            raise NotTidyError(
                invocation.command,
                paths,
                self.hints.render(self.hints.not_tidy, command=invocation.command),
                output=result.output,
            )
