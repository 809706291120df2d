"""Go lint check backed by golangci-lint."""

import posixpath
from pathlib import Path

from ..base import CheckCategory
from ..classify import FailureHints
from .base import MakeWrapCheck


class LintCheck(MakeWrapCheck):
    """Run golangci-lint, via ``make lint`` when available."""

    check_name = "lint"
    check_description = "Run golangci-lint on Go packages"
    make_target = "lint"
    tool_binary = "golangci-lint"
    direct_command = "golangci-lint run <packages>"
    file_patterns = ("*.go",)
    check_category = CheckCategory.LINTING
    estimated_duration = 10.0
    default_timeout = 60.0

    hints = FailureHints(
        timeout=(
            "Lint check timed out after {timeout}. Consider increasing "
            "PRE_COMMIT_SYSTEM_LINT_TIMEOUT or run '{command}' manually."
        ),
        missing_target=(
            "Create a 'lint' target in your Makefile or disable lint with "
            "PRE_COMMIT_SYSTEM_ENABLE_LINT=false"
        ),
        missing_tool=(
            "Install golangci-lint: 'go install "
            "github.com/golangci/golangci-lint/cmd/golangci-lint@{version}'"
        ),
        syntax=(
            "Go syntax errors prevent linting. Fix syntax errors in your Go "
            "files before running lint."
        ),
        generic=(
            "Fix the reported lint issues. Run '{command}' manually to see the "
            "full report."
        ),
    )

    def direct_args(self, repo_root: Path, files: list[str]) -> list[str]:
        # golangci-lint works on packages, so lint each touched directory once
        packages: list[str] = []
        for file in files:
            package = posixpath.dirname(file.replace("\\", "/"))
            if package not in packages:
                packages.append(package)
        return [self.tool_binary, "run", *(str(repo_root / p) for p in packages)]
