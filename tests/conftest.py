"""
Shared fixtures for the pre-commit runner test suite.

Provides test fixtures for:
- Temporary Go-style repositories on disk
- Stubbed shared contexts with canned make-target answers
- Fake subprocess results
- Real git repositories (skipped when git is unavailable)
"""

import logging
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from precommit_runner.checks.process import CommandResult
from precommit_runner.checks.shared import SharedContext
from precommit_runner.git.repository import Repository
from precommit_runner.runner_logging import LOGGER_NAME

GIT_AVAILABLE = shutil.which("git") is not None


class StubContext(SharedContext):
    """SharedContext with a fixed root and canned make-target answers."""

    def __init__(self, root: Path, targets: dict[str, bool] | None = None):
        super().__init__(working_dir=root)
        self._repo_root = root
        self.targets = dict(targets or {})
        self.repository = MagicMock(spec=Repository)
        self.repository.has_diff.return_value = False
        self.looked_up: list[str] = []
        self.lookup_deadlines: list = []

    def has_make_target(self, target: str, deadline=None) -> bool:
        self.looked_up.append(target)
        self.lookup_deadlines.append(deadline)
        return self.targets.get(target, False)

    def get_repository(self) -> Repository:
        return self.repository


@pytest.fixture
def go_repo(tmp_path: Path) -> Path:
    """Create a small Go module layout on disk."""
    (tmp_path / "go.mod").write_text("module example.com/demo\n\ngo 1.22\n")
    (tmp_path / "go.sum").write_text("")
    (tmp_path / "main.go").write_text("package main\n\nfunc main() {}\n")
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "foo.go").write_text("package pkg\n")
    (tmp_path / "doc.md").write_text("# Demo\n")
    (tmp_path / "Makefile").write_text("lint:\n\tgolangci-lint run\n")
    return tmp_path


@pytest.fixture
def stub_context() -> Callable[..., StubContext]:
    """Factory for StubContext instances."""

    def factory(root: Path, targets: dict[str, bool] | None = None) -> StubContext:
        return StubContext(root, targets)

    return factory


@pytest.fixture
def command_result() -> Callable[..., CommandResult]:
    """Factory for CommandResult values returned by a patched run_command."""

    def factory(
        returncode: int | None = 0,
        output: str = "",
        timed_out: bool = False,
        cancelled: bool = False,
        args: list[str] | None = None,
    ) -> CommandResult:
        return CommandResult(
            args=args or ["make"],
            returncode=returncode,
            output=output,
            timed_out=timed_out,
            cancelled=cancelled,
        )

    return factory


def _git(repo: Path, *args: str) -> None:
    subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a real git repository with one committed file."""
    if not GIT_AVAILABLE:
        pytest.skip("git is not installed")

    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "config", "user.email", "dev@example.com")
    _git(repo, "config", "user.name", "Dev")
    _git(repo, "config", "commit.gpgsign", "false")
    (repo / "README.md").write_text("# Demo\n")
    _git(repo, "add", "README.md")
    _git(repo, "commit", "-q", "-m", "initial")
    return repo.resolve()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers and propagation changes made by setup_logging."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
