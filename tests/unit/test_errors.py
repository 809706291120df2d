"""Tests for the structured error taxonomy."""

from __future__ import annotations

import pytest

from precommit_runner.errors import (
    ChecksFailedError,
    ConfigurationError,
    ErrorKind,
    FileNotTrackedError,
    GitCommandError,
    HookExistsError,
    MakeTargetNotFoundError,
    NoChecksToRunError,
    NotTidyError,
    PreCommitError,
    RepositoryRootNotFoundError,
    ToolExecutionError,
    ToolNotFoundError,
    handle_exception,
)


class TestPreCommitError:
    """Tests for the base error class."""

    def test_basic_error(self):
        """Test basic error creation."""
        error = PreCommitError(kind=ErrorKind.TOOL_EXECUTION, message="boom")
        assert error.kind == ErrorKind.TOOL_EXECUTION
        assert error.message == "boom"
        assert error.exit_code == 1
        assert error.suggestion is None
        assert error.output == ""

    def test_is_exception(self):
        """Test that errors can be raised and caught."""
        with pytest.raises(PreCommitError) as exc_info:
            raise PreCommitError(kind=ErrorKind.TOOL_EXECUTION, message="boom")
        assert exc_info.value.args == ("boom",)

    def test_format_without_color(self):
        """Test formatting without ANSI codes."""
        error = ToolNotFoundError("gofumpt", "Install gofumpt")
        formatted = error.format(use_color=False)

        assert "Error: Required tool not found: gofumpt" in formatted
        assert "Suggestion: Install gofumpt" in formatted
        assert "\033[" not in formatted

    def test_format_with_color(self):
        """Test formatting with ANSI codes."""
        error = ToolNotFoundError("gofumpt", "Install gofumpt")
        assert "\033[91m" in error.format(use_color=True)

    def test_format_includes_output_on_request(self):
        """Test that captured output is only shown when asked for."""
        error = ToolExecutionError("make lint", "main.go:3: unused variable\n", "Fix it")

        assert "unused variable" not in error.format(use_color=False)
        assert "  main.go:3: unused variable" in error.format(
            use_color=False, include_output=True
        )

    def test_str_is_plain_format(self):
        """Test that str() gives the uncolored format."""
        error = HookExistsError("/repo/.git/hooks/pre-commit")
        assert str(error) == error.format(use_color=False)


class TestErrorSubclasses:
    """Tests for the concrete error kinds."""

    def test_repository_root_not_found(self):
        error = RepositoryRootNotFoundError("/tmp/nowhere", output="fatal: not a git repository")
        assert error.kind == ErrorKind.REPOSITORY_ROOT_NOT_FOUND
        assert "/tmp/nowhere" in error.message
        assert error.output == "fatal: not a git repository"
        assert error.suggestion

    def test_make_target_not_found(self):
        error = MakeTargetNotFoundError("fumpt", "Add a fumpt target")
        assert error.kind == ErrorKind.MAKE_TARGET_NOT_FOUND
        assert error.target == "fumpt"
        assert error.tool == "make fumpt"

    def test_tool_execution_variants(self):
        """Test the failed, timed out and cancelled messages."""
        failed = ToolExecutionError("make lint", "", "hint")
        timed_out = ToolExecutionError("make lint", "", "hint", timed_out=True)
        cancelled = ToolExecutionError("make lint", "", "hint", cancelled=True)

        assert failed.message == "make lint failed"
        assert timed_out.message == "make lint timed out"
        assert timed_out.timed_out
        assert cancelled.message == "make lint was cancelled"
        assert cancelled.cancelled

    def test_not_tidy_names_files(self):
        error = NotTidyError("go mod tidy", ["go.mod", "go.sum"], "Stage the changes")
        assert error.kind == ErrorKind.NOT_TIDY
        assert error.files == ["go.mod", "go.sum"]
        assert "go.mod, go.sum" in error.message

    def test_no_checks_to_run(self):
        error = NoChecksToRunError()
        assert error.kind == ErrorKind.NO_CHECKS_TO_RUN
        assert error.suggestion

    def test_configuration_error_exit_code(self):
        error = ConfigurationError("bad value", config_file=".github/.env.shared")
        assert error.exit_code == 2
        assert error.details == {"config_file": ".github/.env.shared"}

    def test_file_not_tracked(self):
        error = FileNotTrackedError("missing.go")
        assert error.kind == ErrorKind.FILE_NOT_TRACKED
        assert "missing.go" in error.message

    def test_git_command_error(self):
        error = GitCommandError(["git", "diff"], "fatal: bad revision", 128)
        assert error.message == "git command failed: git diff"
        assert error.details == {"returncode": 128}


class TestChecksFailedError:
    """Tests for the aggregate error."""

    def test_carries_errors_unchanged(self):
        """Test that per-check errors are kept as-is."""
        lint_error = ToolExecutionError("make lint", "out", "hint")
        tidy_error = NotTidyError("go mod tidy", ["go.mod"], "hint")

        error = ChecksFailedError({"lint": lint_error, "mod-tidy": tidy_error})

        assert error.kind == ErrorKind.CHECKS_FAILED
        assert error.failed_checks == ["lint", "mod-tidy"]
        assert error.errors["lint"] is lint_error
        assert error.errors["mod-tidy"] is tidy_error
        assert "2 check(s) failed: lint, mod-tidy" in error.message


class TestHandleException:
    """Tests for handle_exception."""

    def test_precommit_error(self):
        message, code = handle_exception(ConfigurationError("bad"), use_color=False)
        assert "Error: bad" in message
        assert code == 2

    def test_checks_failed_lists_each_check(self):
        error = ChecksFailedError(
            {"lint": ToolExecutionError("make lint", "main.go:1: oops", "Fix lint")}
        )
        message, code = handle_exception(error, use_color=False, verbose=True)

        assert code == 1
        assert "[lint] Error: make lint failed" in message
        assert "main.go:1: oops" in message

    def test_generic_exception(self):
        message, code = handle_exception(ValueError("unexpected"), use_color=False)
        assert "Error: unexpected" in message
        assert code == 1
