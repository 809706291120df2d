"""Structured error types with remediation hints.

Every externally visible failure of a check is raised as exactly one
``PreCommitError`` subclass. Raw subprocess failures never escape a check
unwrapped; the orchestrator aggregates per-check errors into
``ChecksFailedError`` without re-classifying them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class ErrorKind(Enum):
    """Closed set of error kinds reported by the runner."""

    CHECKS_FAILED = "checks_failed"
    NO_CHECKS_TO_RUN = "no_checks_to_run"
    REPOSITORY_ROOT_NOT_FOUND = "repository_root_not_found"
    TOOL_NOT_FOUND = "tool_not_found"
    MAKE_TARGET_NOT_FOUND = "make_target_not_found"
    TOOL_EXECUTION = "tool_execution"
    NOT_TIDY = "not_tidy"
    # Conditions outside check execution
    HOOK_EXISTS = "hook_exists"
    FILE_NOT_TRACKED = "file_not_tracked"
    CONFIGURATION = "configuration"
    GIT_COMMAND = "git_command"


@dataclass
class PreCommitError(Exception):
    """Base class for structured runner errors.

    Attributes:
        kind: Error kind from the closed taxonomy.
        message: Human-readable error message.
        tool: Name of the offending tool or command, if any.
        output: Captured combined stdout/stderr of the tool.
        suggestion: Actionable remediation hint.
        details: Optional additional details dict.
        exit_code: Exit code to use when this error terminates the CLI.
    """

    kind: ErrorKind
    message: str
    tool: str | None = None
    output: str = ""
    suggestion: str | None = None
    details: dict[str, Any] | None = field(default_factory=dict)
    exit_code: int = 1

    def __post_init__(self) -> None:
        """Initialize the exception with the message."""
        super().__init__(self.message)

    def format(self, use_color: bool = True, include_output: bool = False) -> str:
        """Format the error for display.

        Args:
            use_color: Whether to include ANSI color codes.
            include_output: Whether to append the captured tool output.

        Returns:
            Formatted error string with suggestion if available.
        """
        red = "\033[91m" if use_color else ""
        cyan = "\033[96m" if use_color else ""
        dim = "\033[2m" if use_color else ""
        reset = "\033[0m" if use_color else ""

        lines = [f"{red}Error:{reset} {self.message}"]

        if self.suggestion:
            lines.append(f"{cyan}Suggestion:{reset} {self.suggestion}")

        if self.details:
            for key, value in self.details.items():
                lines.append(f"{dim}  {key}: {value}{reset}")

        if include_output and self.output.strip():
            lines.append(f"{dim}Output:{reset}")
            lines.extend(f"  {line}" for line in self.output.rstrip().splitlines())

        return "\n".join(lines)

    def __str__(self) -> str:
        """Return the formatted error message."""
        return self.format(use_color=False)


class ChecksFailedError(PreCommitError):
    """One or more checks failed; carries every failing check's error."""

    def __init__(self, errors: dict[str, PreCommitError]):
        self.errors = dict(errors)
        self.failed_checks = list(self.errors)
        names = ", ".join(self.failed_checks)
        super().__init__(
            kind=ErrorKind.CHECKS_FAILED,
            message=f"{len(self.failed_checks)} check(s) failed: {names}",
            suggestion="Fix the reported issues, re-stage your changes and commit again",
            details=None,
            exit_code=1,
        )


class NoChecksToRunError(PreCommitError):
    """The selected set of checks was empty."""

    def __init__(self, message: str = "No checks selected to run"):
        super().__init__(
            kind=ErrorKind.NO_CHECKS_TO_RUN,
            message=message,
            suggestion=(
                "Enable at least one check in .github/.env.shared or adjust "
                "--only/--skip"
            ),
            details=None,
            exit_code=1,
        )


class RepositoryRootNotFoundError(PreCommitError):
    """The working directory is not inside a git working tree."""

    def __init__(self, path: Path | str | None = None, output: str = ""):
        location = str(path) if path else "the current directory"
        super().__init__(
            kind=ErrorKind.REPOSITORY_ROOT_NOT_FOUND,
            message=f"Could not find a git repository root from {location}",
            tool="git",
            output=output,
            suggestion="Run the command from inside a git working tree",
            details={"path": location},
            exit_code=1,
        )


class ToolNotFoundError(PreCommitError):
    """A required external binary is missing from the environment."""

    def __init__(self, tool: str, suggestion: str, output: str = ""):
        super().__init__(
            kind=ErrorKind.TOOL_NOT_FOUND,
            message=f"Required tool not found: {tool}",
            tool=tool,
            output=output,
            suggestion=suggestion,
            details=None,
            exit_code=1,
        )


class MakeTargetNotFoundError(PreCommitError):
    """The Makefile lacks the expected target."""

    def __init__(self, target: str, suggestion: str, output: str = ""):
        self.target = target
        super().__init__(
            kind=ErrorKind.MAKE_TARGET_NOT_FOUND,
            message=f"Make target not found: {target}",
            tool=f"make {target}",
            output=output,
            suggestion=suggestion,
            details={"target": target},
            exit_code=1,
        )


class ToolExecutionError(PreCommitError):
    """The underlying tool ran and reported failure.

    Covers timeouts (``timed_out``) and run cancellation (``cancelled``).
    """

    def __init__(
        self,
        tool: str,
        output: str,
        suggestion: str,
        timed_out: bool = False,
        cancelled: bool = False,
    ):
        self.timed_out = timed_out
        self.cancelled = cancelled
        if timed_out:
            message = f"{tool} timed out"
        elif cancelled:
            message = f"{tool} was cancelled"
        else:
            message = f"{tool} failed"
        super().__init__(
            kind=ErrorKind.TOOL_EXECUTION,
            message=message,
            tool=tool,
            output=output,
            suggestion=suggestion,
            details=None,
            exit_code=1,
        )


class NotTidyError(PreCommitError):
    """A normalization step left uncommitted differences behind."""

    def __init__(
        self,
        tool: str,
        files: list[str],
        suggestion: str,
        output: str = "",
    ):
        self.files = list(files)
        super().__init__(
            kind=ErrorKind.NOT_TIDY,
            message=f"{tool} modified files: {', '.join(self.files)}",
            tool=tool,
            output=output,
            suggestion=suggestion,
            details=None,
            exit_code=1,
        )


class HookExistsError(PreCommitError):
    """A hook not managed by this runner already occupies the hook slot."""

    def __init__(self, hook_path: Path | str):
        super().__init__(
            kind=ErrorKind.HOOK_EXISTS,
            message=f"Hook already exists and is not managed by precommit-runner: {hook_path}",
            suggestion="Remove or back up the existing hook, or re-run with --force",
            details={"path": str(hook_path)},
            exit_code=1,
        )


class FileNotTrackedError(PreCommitError):
    """The requested path is not tracked by git or missing on disk."""

    def __init__(self, path: str):
        super().__init__(
            kind=ErrorKind.FILE_NOT_TRACKED,
            message=f"File is not tracked or does not exist: {path}",
            tool="git",
            suggestion="Check the path is relative to the repository root and added to git",
            details={"path": path},
            exit_code=1,
        )


class ConfigurationError(PreCommitError):
    """Invalid configuration value or file."""

    def __init__(
        self,
        message: str,
        config_file: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(
            kind=ErrorKind.CONFIGURATION,
            message=message,
            suggestion=suggestion or "Check the values in .github/.env.shared",
            details={"config_file": config_file} if config_file else None,
            exit_code=2,
        )


class GitCommandError(PreCommitError):
    """A git command failed unexpectedly."""

    def __init__(self, args: list[str], output: str, returncode: int | None = None):
        command = " ".join(args)
        super().__init__(
            kind=ErrorKind.GIT_COMMAND,
            message=f"git command failed: {command}",
            tool="git",
            output=output,
            suggestion=f"Run '{command}' manually to inspect the error",
            details={"returncode": returncode} if returncode is not None else None,
            exit_code=1,
        )


def handle_exception(
    error: Exception,
    use_color: bool = True,
    verbose: bool = False,
) -> tuple[str, int]:
    """Convert any exception to formatted output and exit code.

    Args:
        error: The exception to handle.
        use_color: Whether to use color in output.
        verbose: Whether to include captured output and the traceback.

    Returns:
        Tuple of (formatted_message, exit_code).
    """
    import traceback

    if isinstance(error, ChecksFailedError):
        blocks = [error.format(use_color=use_color)]
        for name, check_error in error.errors.items():
            blocks.append(
                f"[{name}] " + check_error.format(use_color=use_color, include_output=verbose)
            )
        message = "\n".join(blocks)
        exit_code = error.exit_code
    elif isinstance(error, PreCommitError):
        message = error.format(use_color=use_color, include_output=verbose)
        exit_code = error.exit_code
    else:
        red = "\033[91m" if use_color else ""
        reset = "\033[0m" if use_color else ""
        message = f"{red}Error:{reset} {str(error)}"
        exit_code = 1

    if verbose and not isinstance(error, PreCommitError):
        message += "\n\nTraceback:\n" + traceback.format_exc()

    return message, exit_code
