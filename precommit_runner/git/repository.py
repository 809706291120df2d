"""Git repository accessor.

Resolves the working-tree root once and answers file-state questions
(staged, modified, tracked, content) by shelling out to git and parsing its
line-oriented output.
"""

import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import FileNotTrackedError, GitCommandError, RepositoryRootNotFoundError
from ..runner_logging import LogCategory, get_category_logger

if TYPE_CHECKING:
    from ..checks.process import Deadline

logger = get_category_logger(LogCategory.GIT)

GIT_TIMEOUT_SECONDS = 30


def find_repository_root(path: Path | str | None = None) -> Path:
    """Find the top-level directory of the git working tree containing ``path``.

    Args:
        path: Directory to start from. Defaults to the current directory.

    Returns:
        Absolute, resolved path of the working-tree root.

    Raises:
        RepositoryRootNotFoundError: If ``path`` is not inside a git work tree.
    """
    cwd = Path(path) if path else Path.cwd()
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (FileNotFoundError, NotADirectoryError, OSError, subprocess.TimeoutExpired) as e:
        raise RepositoryRootNotFoundError(cwd, output=str(e)) from e

    root = result.stdout.strip()
    if result.returncode != 0 or not root:
        raise RepositoryRootNotFoundError(cwd, output=result.stderr.strip())

    return Path(root).resolve()


def parse_file_list(output: str) -> list[str]:
    """Split git's newline-separated path output into a clean list.

    Lines are stripped and blank lines dropped; relative order is kept.
    """
    files = []
    for line in output.split("\n"):
        line = line.strip()
        if line:
            files.append(line)
    return files


class Repository:
    """Read-only view of a git working tree.

    Example:
        repo = Repository(find_repository_root())
        for path in repo.get_staged_files():
            print(repo.root / path)
    """

    def __init__(self, root: Path | str):
        """Initialize the accessor.

        Args:
            root: Working-tree root, as returned by ``find_repository_root``.
        """
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        """The working-tree root this accessor is bound to."""
        return self._root

    def _run_git(self, *args: str) -> subprocess.CompletedProcess:
        command = ["git", *args]
        try:
            return subprocess.run(
                command,
                cwd=self._root,
                capture_output=True,
                text=True,
                check=False,
                timeout=GIT_TIMEOUT_SECONDS,
            )
        except (FileNotFoundError, OSError, subprocess.TimeoutExpired) as e:
            raise GitCommandError(command, str(e)) from e

    def _list_files(self, *args: str) -> list[str]:
        result = self._run_git(*args)
        if result.returncode != 0:
            raise GitCommandError(["git", *args], result.stderr.strip(), result.returncode)
        return parse_file_list(result.stdout)

    def get_staged_files(self) -> list[str]:
        """Files staged for commit (added, copied, modified or renamed)."""
        return self._list_files("diff", "--cached", "--name-only", "--diff-filter=ACMR")

    def get_modified_files(self) -> list[str]:
        """Files with unstaged working-tree modifications."""
        return self._list_files("diff", "--name-only")

    def get_all_files(self) -> list[str]:
        """All files tracked by git."""
        return self._list_files("ls-files")

    def is_file_tracked(self, path: str) -> bool:
        """Check whether git tracks ``path``.

        Any git failure is treated as "not tracked".
        """
        try:
            result = self._run_git("ls-files", "--error-unmatch", "--", path)
        except GitCommandError as e:
            logger.debug(f"is_file_tracked({path}) failed: {e.message}")
            return False
        return result.returncode == 0

    def get_file_content(self, path: str) -> bytes:
        """Read the working-tree content of a tracked file.

        Raises:
            FileNotTrackedError: If the path is untracked or absent.
        """
        full_path = self._root / path
        if not self.is_file_tracked(path) or not full_path.is_file():
            raise FileNotTrackedError(path)
        return full_path.read_bytes()

    def _run_git_bounded(self, args: list[str], deadline: "Deadline") -> tuple[int, str]:
        """Run git under ``deadline``; returns (exit code, combined output)."""
        # checks imports this module, so bind the process helpers late
        from ..checks.process import run_command

        command = ["git", *args]
        try:
            result = run_command(
                command, cwd=self._root, deadline=deadline.child(GIT_TIMEOUT_SECONDS)
            )
        except OSError as e:
            raise GitCommandError(command, str(e)) from e

        if result.timed_out or result.cancelled:
            state = "cancelled" if result.cancelled else "timed out"
            raise GitCommandError(command, result.output.strip() or state)
        return result.returncode, result.output.strip()

    def has_diff(self, paths: list[str], deadline: "Deadline | None" = None) -> bool:
        """Check whether ``paths`` differ from the index.

        Args:
            paths: Repository-relative paths to compare.
            deadline: Bounds the git call; it is killed once this is done.

        Returns:
            True when git reports differences (exit code 1).

        Raises:
            GitCommandError: On any other non-zero exit, or when ``deadline``
                ends before git does.
        """
        args = ["diff", "--exit-code", "--quiet", "--", *paths]
        if deadline is None:
            result = self._run_git(*args)
            returncode, output = result.returncode, result.stderr.strip()
        else:
            returncode, output = self._run_git_bounded(args, deadline)

        if returncode == 0:
            return False
        if returncode == 1:
            return True
        raise GitCommandError(["git", *args], output, returncode)

    def get_hooks_dir(self) -> Path:
        """Directory git reads hooks from (honours ``core.hooksPath``)."""
        default = self._root / ".git" / "hooks"
        try:
            result = self._run_git("rev-parse", "--git-path", "hooks")
        except GitCommandError:
            return default

        hooks_path = result.stdout.strip()
        if result.returncode != 0 or not hooks_path:
            return default

        hooks_dir = Path(hooks_path)
        if not hooks_dir.is_absolute():
            hooks_dir = self._root / hooks_dir
        return hooks_dir
