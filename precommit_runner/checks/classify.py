"""Failure classification for tool-wrapping checks.

A failed invocation is classified in a fixed priority order so that output
matching several signatures is attributed to the most specific cause:

    timeout -> cancelled -> missing make target -> missing tool
            -> permission denied -> syntax error -> generic

Matching is pattern-based on the captured output and therefore tied to
the wording of upstream tools.
"""

import re
from dataclasses import dataclass
from enum import Enum

from ..errors import (
    MakeTargetNotFoundError,
    PreCommitError,
    ToolExecutionError,
    ToolNotFoundError,
)
from .process import CommandResult


class FailureKind(Enum):
    """Classified cause of a failed tool invocation."""

    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    MISSING_TARGET = "missing_target"
    MISSING_TOOL = "missing_tool"
    PERMISSION = "permission"
    SYNTAX = "syntax"
    GENERIC = "generic"


@dataclass(frozen=True)
class FailureSignature:
    """Case-insensitive regexes identifying one failure kind in tool output.

    A ``{tool}`` placeholder in a pattern is replaced by the escaped tool
    binary name, so the pattern only matches messages about that binary.
    """

    kind: FailureKind
    patterns: tuple[str, ...]
    make_only: bool = False  # only meaningful when the tool ran through make

    def matches(self, output: str, invocation: "Invocation") -> bool:
        if self.make_only and not invocation.via_make:
            return False
        tool = re.escape(invocation.tool)
        return any(
            re.search(pattern.replace("{tool}", tool), output, re.IGNORECASE)
            for pattern in self.patterns
        )


# Evaluated top to bottom; first match wins.
FAILURE_SIGNATURES: tuple[FailureSignature, ...] = (
    FailureSignature(
        FailureKind.MISSING_TARGET,
        ("No rule to make target",),
        make_only=True,
    ),
    FailureSignature(
        FailureKind.MISSING_TOOL,
        (
            # sh, bash and make reporting a binary they could not exec
            r"(?<![\w.-]){tool}: (command )?not found",
            r"(?<![\w.-]){tool}: no such file or directory",
            r'exec: "{tool}": executable file not found',
        ),
    ),
    FailureSignature(FailureKind.PERMISSION, ("permission denied",)),
    FailureSignature(
        FailureKind.SYNTAX,
        ("syntax error", "invalid Go syntax", "expected declaration"),
    ),
)


@dataclass(frozen=True)
class Invocation:
    """How a check invoked its tool."""

    command: str
    tool: str
    target: str | None = None

    @property
    def via_make(self) -> bool:
        return self.target is not None


@dataclass
class FailureHints:
    """Remediation hints for each failure kind of a check.

    ``{timeout}``, ``{command}``, ``{target}`` and ``{version}`` placeholders
    are filled in when the hint is rendered.
    """

    timeout: str
    missing_target: str
    missing_tool: str
    permission: str = (
        "Permission denied. Check file permissions and ensure you have write "
        "access to all files."
    )
    syntax: str = "Syntax errors prevent this check. Fix syntax errors first."
    generic: str = "Run '{command}' manually to see detailed error output."
    cancelled: str = "The run was cancelled before '{command}' finished."
    not_tidy: str = "Review the changes, stage them and commit again."

    def render(self, template: str, **values: object) -> str:
        try:
            return template.format(**values)
        except (KeyError, IndexError):
            return template


def detect_failure_kind(result: CommandResult, invocation: Invocation) -> FailureKind:
    """Determine why ``result`` failed."""
    if result.timed_out:
        return FailureKind.TIMEOUT
    if result.cancelled:
        return FailureKind.CANCELLED
    for signature in FAILURE_SIGNATURES:
        if signature.matches(result.output, invocation):
            return signature.kind
    return FailureKind.GENERIC


def classify_failure(
    result: CommandResult,
    invocation: Invocation,
    hints: FailureHints,
    timeout: float,
    version: str = "latest",
) -> PreCommitError:
    """Translate a failed command into exactly one structured error."""
    kind = detect_failure_kind(result, invocation)
    values = {
        "timeout": f"{timeout:g}s",
        "command": invocation.command,
        "target": invocation.target or "",
        "version": version,
    }
    output = result.output

    if kind is FailureKind.TIMEOUT:
        return ToolExecutionError(
            invocation.command,
            output,
            hints.render(hints.timeout, **values),
            timed_out=True,
        )
    if kind is FailureKind.CANCELLED:
        return ToolExecutionError(
            invocation.command,
            output,
            hints.render(hints.cancelled, **values),
            cancelled=True,
        )
    if kind is FailureKind.MISSING_TARGET:
        return MakeTargetNotFoundError(
            invocation.target or invocation.command,
            hints.render(hints.missing_target, **values),
            output=output,
        )
    if kind is FailureKind.MISSING_TOOL:
        return ToolNotFoundError(
            invocation.tool,
            hints.render(hints.missing_tool, **values),
            output=output,
        )
    if kind is FailureKind.PERMISSION:
        return ToolExecutionError(invocation.command, output, hints.render(hints.permission, **values))
    if kind is FailureKind.SYNTAX:
        return ToolExecutionError(invocation.command, output, hints.render(hints.syntax, **values))
    return ToolExecutionError(invocation.command, output, hints.render(hints.generic, **values))
