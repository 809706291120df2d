"""Pre-commit checks and the machinery they share."""

from .base import Check, CheckCategory, CheckMetadata, matches_patterns
from .builtin import EOFCheck, WhitespaceCheck
from .classify import FailureHints, FailureKind, classify_failure
from .makewrap import FumptCheck, LintCheck, MakeWrapCheck, ModTidyCheck
from .process import CommandResult, Deadline, run_command
from .registry import CheckRegistry, build_checks
from .shared import SharedContext

__all__ = [
    "Check",
    "CheckCategory",
    "CheckMetadata",
    "CheckRegistry",
    "CommandResult",
    "Deadline",
    "EOFCheck",
    "FailureHints",
    "FailureKind",
    "FumptCheck",
    "LintCheck",
    "MakeWrapCheck",
    "ModTidyCheck",
    "SharedContext",
    "WhitespaceCheck",
    "build_checks",
    "classify_failure",
    "matches_patterns",
    "run_command",
]
