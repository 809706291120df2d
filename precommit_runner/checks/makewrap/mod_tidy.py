"""Go module tidiness check."""

from pathlib import Path

from ..base import CheckCategory
from ..classify import FailureHints
from .base import MakeWrapCheck

MANIFEST_FILES = ("go.mod", "go.sum")


class ModTidyCheck(MakeWrapCheck):
    """Ensure go.mod and go.sum are tidy.

    Runs whenever a Go source file or a module manifest is part of the change
    set, since source edits can add or drop dependencies without touching the
    manifests themselves. After a successful run, any diff left in
    go.mod/go.sum fails the check.
    """

    check_name = "mod-tidy"
    check_description = "Ensure go.mod and go.sum are tidy"
    make_target = "mod-tidy"
    tool_binary = "go"
    direct_command = "go mod tidy"
    file_patterns = ("*.go", *MANIFEST_FILES)
    check_category = CheckCategory.DEPENDENCY_HYGIENE
    estimated_duration = 5.0
    default_timeout = 30.0
    tidy_paths = MANIFEST_FILES

    hints = FailureHints(
        timeout=(
            "Mod tidy timed out after {timeout}. Consider increasing "
            "PRE_COMMIT_SYSTEM_MOD_TIDY_TIMEOUT or run '{command}' manually."
        ),
        missing_target=(
            "Create a 'mod-tidy' target in your Makefile or disable this check "
            "with PRE_COMMIT_SYSTEM_ENABLE_MOD_TIDY=false"
        ),
        missing_tool="Install Go from https://go.dev/dl/ and make sure 'go' is on PATH",
        syntax=(
            "Go syntax errors prevent dependency resolution. Fix syntax errors "
            "in your Go files first."
        ),
        generic=(
            "Run '{command}' manually to see detailed error output. Check your "
            "network access and module proxy settings."
        ),
        not_tidy=(
            "'{command}' updated go.mod/go.sum. Review and stage the changes, "
            "then commit again."
        ),
    )

    def direct_args(self, repo_root: Path, files: list[str]) -> list[str]:
        return [self.tool_binary, "mod", "tidy"]
