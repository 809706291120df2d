"""Unit tests for the git repository accessor."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from precommit_runner.checks.process import CommandResult, Deadline
from precommit_runner.errors import (
    FileNotTrackedError,
    GitCommandError,
    RepositoryRootNotFoundError,
)
from precommit_runner.git.repository import (
    Repository,
    find_repository_root,
    parse_file_list,
)


class TestParseFileList:
    """Tests for parse_file_list."""

    def test_strips_and_drops_blanks(self):
        output = "main.go\n  pkg/foo.go  \n\n\ndoc.md\n"
        assert parse_file_list(output) == ["main.go", "pkg/foo.go", "doc.md"]

    def test_empty_output(self):
        assert parse_file_list("") == []
        assert parse_file_list("\n\n") == []


class TestFindRepositoryRoot:
    """Tests for find_repository_root."""

    @patch("subprocess.run")
    def test_returns_toplevel(self, mock_run, tmp_path: Path):
        mock_run.return_value = MagicMock(returncode=0, stdout=f"{tmp_path}\n", stderr="")

        assert find_repository_root(tmp_path) == tmp_path.resolve()
        args = mock_run.call_args[0][0]
        assert args == ["git", "rev-parse", "--show-toplevel"]
        assert mock_run.call_args[1]["cwd"] == tmp_path

    @patch("subprocess.run")
    def test_not_a_repository(self, mock_run, tmp_path: Path):
        mock_run.return_value = MagicMock(
            returncode=128, stdout="", stderr="fatal: not a git repository"
        )

        with pytest.raises(RepositoryRootNotFoundError) as exc_info:
            find_repository_root(tmp_path)
        assert "not a git repository" in exc_info.value.output

    @patch("subprocess.run", side_effect=FileNotFoundError("git"))
    def test_git_missing(self, mock_run, tmp_path: Path):
        with pytest.raises(RepositoryRootNotFoundError):
            find_repository_root(tmp_path)


class TestRepository:
    """Tests for Repository."""

    @pytest.fixture
    def repo(self, tmp_path: Path) -> Repository:
        return Repository(tmp_path)

    def test_root_is_resolved(self, tmp_path: Path):
        repo = Repository(tmp_path / "." / "")
        assert repo.root == tmp_path.resolve()

    @patch("subprocess.run")
    def test_get_staged_files(self, mock_run, repo: Repository):
        mock_run.return_value = MagicMock(returncode=0, stdout="main.go\npkg/foo.go\n")

        assert repo.get_staged_files() == ["main.go", "pkg/foo.go"]
        assert mock_run.call_args[0][0] == [
            "git",
            "diff",
            "--cached",
            "--name-only",
            "--diff-filter=ACMR",
        ]
        assert mock_run.call_args[1]["cwd"] == repo.root

    @patch("subprocess.run")
    def test_no_staged_files_is_empty_list(self, mock_run, repo: Repository):
        """Test that an empty index yields an empty list, not None."""
        mock_run.return_value = MagicMock(returncode=0, stdout="")

        files = repo.get_staged_files()
        assert files == []
        assert isinstance(files, list)

    @patch("subprocess.run")
    def test_get_modified_files(self, mock_run, repo: Repository):
        mock_run.return_value = MagicMock(returncode=0, stdout="a.go\n")

        assert repo.get_modified_files() == ["a.go"]
        assert mock_run.call_args[0][0] == ["git", "diff", "--name-only"]

    @patch("subprocess.run")
    def test_get_all_files(self, mock_run, repo: Repository):
        mock_run.return_value = MagicMock(returncode=0, stdout="a.go\nb.go\nREADME.md\n")

        assert repo.get_all_files() == ["a.go", "b.go", "README.md"]
        assert mock_run.call_args[0][0] == ["git", "ls-files"]

    @patch("subprocess.run")
    def test_list_failure_raises(self, mock_run, repo: Repository):
        mock_run.return_value = MagicMock(returncode=128, stdout="", stderr="fatal: bad")

        with pytest.raises(GitCommandError):
            repo.get_all_files()

    @patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["git"], 30))
    def test_git_timeout_raises(self, mock_run, repo: Repository):
        with pytest.raises(GitCommandError):
            repo.get_staged_files()

    @patch("subprocess.run")
    def test_is_file_tracked(self, mock_run, repo: Repository):
        mock_run.return_value = MagicMock(returncode=0, stdout="main.go\n")
        assert repo.is_file_tracked("main.go") is True
        assert mock_run.call_args[0][0] == [
            "git",
            "ls-files",
            "--error-unmatch",
            "--",
            "main.go",
        ]

        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="error")
        assert repo.is_file_tracked("other.go") is False

    @patch("subprocess.run", side_effect=OSError("no git"))
    def test_is_file_tracked_swallows_git_failure(self, mock_run, repo: Repository):
        """Test that any git failure means not tracked."""
        assert repo.is_file_tracked("main.go") is False

    @patch("subprocess.run")
    def test_get_file_content(self, mock_run, repo: Repository):
        (repo.root / "main.go").write_bytes(b"package main\n")
        mock_run.return_value = MagicMock(returncode=0, stdout="main.go\n")

        assert repo.get_file_content("main.go") == b"package main\n"

    @patch("subprocess.run")
    def test_get_file_content_untracked(self, mock_run, repo: Repository):
        (repo.root / "scratch.go").write_bytes(b"package main\n")
        mock_run.return_value = MagicMock(returncode=1, stdout="")

        with pytest.raises(FileNotTrackedError):
            repo.get_file_content("scratch.go")

    @patch("subprocess.run")
    def test_get_file_content_missing_on_disk(self, mock_run, repo: Repository):
        mock_run.return_value = MagicMock(returncode=0, stdout="gone.go\n")

        with pytest.raises(FileNotTrackedError):
            repo.get_file_content("gone.go")

    @pytest.mark.parametrize(
        "returncode,expected",
        [(0, False), (1, True)],
    )
    @patch("subprocess.run")
    def test_has_diff(self, mock_run, returncode, expected, repo: Repository):
        mock_run.return_value = MagicMock(returncode=returncode, stdout="", stderr="")

        assert repo.has_diff(["go.mod", "go.sum"]) is expected
        assert mock_run.call_args[0][0] == [
            "git",
            "diff",
            "--exit-code",
            "--quiet",
            "--",
            "go.mod",
            "go.sum",
        ]

    @patch("subprocess.run")
    def test_has_diff_other_exit_raises(self, mock_run, repo: Repository):
        mock_run.return_value = MagicMock(returncode=128, stdout="", stderr="fatal")

        with pytest.raises(GitCommandError) as exc_info:
            repo.has_diff(["go.mod"])
        assert exc_info.value.details == {"returncode": 128}

    @pytest.mark.parametrize("returncode, expected", [(0, False), (1, True)])
    @patch("precommit_runner.checks.process.run_command")
    def test_has_diff_with_deadline(self, mock_run_command, returncode, expected, repo: Repository):
        mock_run_command.return_value = CommandResult(args=["git"], returncode=returncode)
        deadline = Deadline(timeout=5)

        assert repo.has_diff(["go.mod"], deadline=deadline) is expected
        args, kwargs = mock_run_command.call_args
        assert args[0] == ["git", "diff", "--exit-code", "--quiet", "--", "go.mod"]
        assert kwargs["deadline"].expires_at <= deadline.expires_at

    @patch("subprocess.Popen")
    def test_has_diff_cancelled_deadline_spawns_nothing(self, mock_popen, repo: Repository):
        deadline = Deadline()
        deadline.cancel()

        with pytest.raises(GitCommandError) as exc_info:
            repo.has_diff(["go.mod"], deadline=deadline)
        assert exc_info.value.output == "cancelled"
        mock_popen.assert_not_called()

    @patch("precommit_runner.checks.process.run_command")
    def test_has_diff_deadline_expiry_raises(self, mock_run_command, repo: Repository):
        mock_run_command.return_value = CommandResult(
            args=["git"], returncode=-9, output="", timed_out=True
        )

        with pytest.raises(GitCommandError) as exc_info:
            repo.has_diff(["go.mod"], deadline=Deadline(timeout=5))
        assert exc_info.value.output == "timed out"

    @patch("subprocess.run")
    def test_get_hooks_dir_relative(self, mock_run, repo: Repository):
        mock_run.return_value = MagicMock(returncode=0, stdout=".git/hooks\n")
        assert repo.get_hooks_dir() == repo.root / ".git" / "hooks"

    @patch("subprocess.run")
    def test_get_hooks_dir_absolute(self, mock_run, repo: Repository, tmp_path: Path):
        custom = tmp_path / "custom-hooks"
        mock_run.return_value = MagicMock(returncode=0, stdout=f"{custom}\n")
        assert repo.get_hooks_dir() == custom

    @patch("subprocess.run")
    def test_get_hooks_dir_fallback(self, mock_run, repo: Repository):
        mock_run.return_value = MagicMock(returncode=128, stdout="", stderr="fatal")
        assert repo.get_hooks_dir() == repo.root / ".git" / "hooks"
