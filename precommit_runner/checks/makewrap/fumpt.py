"""Go formatting check backed by gofumpt."""

from pathlib import Path

from ..base import CheckCategory
from ..classify import FailureHints
from .base import MakeWrapCheck


class FumptCheck(MakeWrapCheck):
    """Format Go code with gofumpt, via ``make fumpt`` when available."""

    check_name = "fumpt"
    check_description = "Format Go code with gofumpt (stricter gofmt)"
    make_target = "fumpt"
    tool_binary = "gofumpt"
    direct_command = "gofumpt -w <files>"
    file_patterns = ("*.go",)
    check_category = CheckCategory.FORMATTING
    estimated_duration = 3.0
    default_timeout = 30.0

    hints = FailureHints(
        timeout=(
            "Fumpt check timed out after {timeout}. Consider increasing "
            "PRE_COMMIT_SYSTEM_FUMPT_TIMEOUT or run '{command}' manually."
        ),
        missing_target=(
            "Create a 'fumpt' target in your Makefile or disable fumpt with "
            "PRE_COMMIT_SYSTEM_ENABLE_FUMPT=false"
        ),
        missing_tool="Install gofumpt: 'go install mvdan.cc/gofumpt@{version}'",
        permission=(
            "Permission denied. Check file permissions and ensure you have "
            "write access to all Go files."
        ),
        syntax=(
            "Go syntax errors prevent formatting. Fix syntax errors in your Go "
            "files before running fumpt."
        ),
        generic=(
            "Run '{command}' manually to see detailed error output. Check your "
            "Makefile and gofumpt installation."
        ),
    )

    def direct_args(self, repo_root: Path, files: list[str]) -> list[str]:
        return [self.tool_binary, "-w", *(str(repo_root / f) for f in files)]
