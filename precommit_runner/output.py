"""Console output for the command line, with color and quiet mode support.

Respects the NO_COLOR environment variable (https://no-color.org/) and the
--no-color flag, and falls back to plain bracketed symbols when colors are
off.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TextIO

import click

if TYPE_CHECKING:
    from .runner import CheckResult, RunResults


def should_use_color(
    explicit_flag: bool | None = None,
    stream: TextIO | None = None,
) -> bool:
    """Determine if color output should be used.

    Priority order:
    1. Explicit flag (if passed)
    2. NO_COLOR environment variable
    3. FORCE_COLOR environment variable
    4. TTY detection

    Args:
        explicit_flag: True = force colors, False = force no colors,
            None = auto-detect.
        stream: Output stream to check for TTY. Defaults to stdout.
    """
    if explicit_flag is not None:
        return explicit_flag

    # Any value, including empty, means "no color"
    if "NO_COLOR" in os.environ:
        return False

    if "FORCE_COLOR" in os.environ:
        return True

    if stream is None:
        stream = sys.stdout
    if hasattr(stream, "isatty") and not stream.isatty():
        return False

    return True


def format_file_list(files: list[str], max_shown: int = 3) -> str:
    """Render a file list, truncated after ``max_shown`` entries.

    Example:
        >>> format_file_list(["a.go", "b.go", "c.go", "d.go"], 2)
        'a.go, b.go and 2 more'
    """
    if not files:
        return "no files"
    if len(files) <= max_shown:
        return ", ".join(files)
    shown = ", ".join(files[:max_shown])
    return f"{shown} and {len(files) - max_shown} more"


def format_duration(seconds: float) -> str:
    """Render a duration as ms below one second, else seconds."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, rest = divmod(seconds, 60)
    return f"{int(minutes)}m{rest:.0f}s"


@dataclass
class OutputConfig:
    """Configuration for CLI output behavior.

    Attributes:
        use_color: Whether to use ANSI color codes in output.
        quiet: Suppress all output except errors and the summary.
        verbose: Show durations, file lists and captured tool output.
        stream: Output stream (default: stdout).
        err_stream: Error stream (default: stderr).
    """

    use_color: bool = True
    quiet: bool = False
    verbose: bool = False
    stream: TextIO = field(default_factory=lambda: sys.stdout)
    err_stream: TextIO = field(default_factory=lambda: sys.stderr)

    @classmethod
    def from_flags(
        cls,
        verbose: bool = False,
        quiet: bool = False,
        no_color: bool = False,
        color_output: bool = True,
    ) -> OutputConfig:
        """Create OutputConfig from CLI flags.

        Args:
            verbose: Enable verbose output.
            quiet: Suppress non-error output.
            no_color: Disable color output.
            color_output: Configured color preference.
        """
        if no_color or not color_output:
            use_color = False
        else:
            use_color = should_use_color()
        return cls(use_color=use_color, quiet=quiet, verbose=verbose)


class OutputManager:
    """Centralized output handler for the command line.

    Example:
        >>> output = OutputManager(OutputConfig(use_color=False))
        >>> output.success("fumpt completed successfully")
        [OK] fumpt completed successfully
    """

    COLORS = {
        "green": "\033[92m",
        "red": "\033[91m",
        "yellow": "\033[93m",
        "blue": "\033[94m",
        "cyan": "\033[96m",
        "bold": "\033[1m",
        "dim": "\033[2m",
        "reset": "\033[0m",
    }

    SYMBOLS = {
        "success": {"color": "\033[92m✓\033[0m", "plain": "[OK]"},
        "error": {"color": "\033[91m✗\033[0m", "plain": "[FAIL]"},
        "warning": {"color": "\033[93m⚠\033[0m", "plain": "[WARN]"},
        "info": {"color": "\033[94mℹ\033[0m", "plain": "[INFO]"},
        "skip": {"color": "\033[2m○\033[0m", "plain": "[SKIP]"},
        "progress": {"color": "\033[96m→\033[0m", "plain": "[..]"},
        "hint": {"color": "\033[96m→\033[0m", "plain": "  ->"},
    }

    def __init__(self, config: OutputConfig | None = None):
        self.config = config or OutputConfig()

    def _get_symbol(self, symbol_type: str) -> str:
        symbol_data = self.SYMBOLS.get(symbol_type, self.SYMBOLS["info"])
        return symbol_data["color"] if self.config.use_color else symbol_data["plain"]

    def _colorize(self, text: str, color: str) -> str:
        if not self.config.use_color:
            return text
        color_code = self.COLORS.get(color, "")
        reset = self.COLORS["reset"]
        return f"{color_code}{text}{reset}"

    def _output(
        self,
        message: str,
        symbol_type: str | None = None,
        err: bool = False,
        force: bool = False,
    ) -> None:
        """Output a message with optional symbol prefix.

        Args:
            message: Message to output.
            symbol_type: Type of symbol to prefix (or None for no symbol).
            err: Output to stderr instead of stdout.
            force: Output even in quiet mode.
        """
        if self.config.quiet and not err and not force:
            return

        stream = self.config.err_stream if err else self.config.stream

        if symbol_type:
            line = f"{self._get_symbol(symbol_type)} {message}"
        else:
            line = message

        click.echo(line, file=stream)

    def success(self, message: str, force: bool = False) -> None:
        self._output(message, symbol_type="success", force=force)

    def error(self, message: str) -> None:
        """Output an error message (always shown, even in quiet mode)."""
        self._output(message, symbol_type="error", err=True, force=True)

    def warning(self, message: str, force: bool = False) -> None:
        self._output(message, symbol_type="warning", force=force)

    def info(self, message: str) -> None:
        self._output(message, symbol_type="info")

    def progress(self, message: str) -> None:
        self._output(message, symbol_type="progress")

    def debug(self, message: str) -> None:
        """Output a debug message (only in verbose mode)."""
        if not self.config.verbose:
            return
        self._output(f"DEBUG: {self._colorize(message, 'dim')}")

    def detail(self, message: str, force: bool = False) -> None:
        """Output an indented, dimmed detail line."""
        self._output(f"  {self._colorize(message, 'dim')}", force=force)

    def suggest(self, message: str, force: bool = False) -> None:
        """Output a remediation hint."""
        self._output(self._colorize(message, "cyan"), symbol_type="hint", force=force)

    def code_block(self, text: str) -> None:
        for line in text.rstrip().splitlines():
            self._output(f"    {line}")

    def header(self, title: str) -> None:
        """Output a header line (bold if colors enabled)."""
        if self.config.quiet:
            return
        self._output(self._colorize(title, "bold"))
        self._output("=" * len(title))

    def subheader(self, title: str) -> None:
        if self.config.quiet:
            return
        self._output(self._colorize(title, "bold"))
        self._output("-" * len(title))

    def newline(self) -> None:
        """Output a blank line (suppressed in quiet mode)."""
        if not self.config.quiet:
            click.echo("", file=self.config.stream)

    def plain(self, message: str, force: bool = False) -> None:
        self._output(message, force=force)

    def status_line(self, label: str, status: str, symbol_type: str = "info") -> None:
        """Output a status line with aligned label and status."""
        symbol = self._get_symbol(symbol_type)
        formatted_label = f"{label}:".ljust(12)
        self._output(f"{formatted_label} {symbol} {status}")

    def check_result(self, result: CheckResult) -> None:
        """Display one check's outcome.

        Failed checks are always shown with their error and hint; captured
        tool output is shown in verbose mode.
        """
        verbose = self.config.verbose

        if result.skipped:
            if result.error is not None:
                # Degraded: the check could not run
                self.warning(f"{result.name} - {result.reason}")
                if result.suggestion:
                    self.suggest(result.suggestion)
            else:
                self._output(f"{result.name} skipped ({result.reason})", symbol_type="skip")
            return

        if result.success:
            self.success(f"{result.name} completed successfully")
            if verbose:
                self.detail(f"Duration: {format_duration(result.duration)}")
                if result.files:
                    self.detail(f"Files: {format_file_list(result.files)}")
            return

        self._output(f"{result.name} failed", symbol_type="error", force=True)
        if verbose:
            self.detail(f"Duration: {format_duration(result.duration)}", force=True)
            if result.files:
                self.detail(f"Files: {format_file_list(result.files)}", force=True)
        if result.error is not None:
            self.detail(f"Error: {result.error.message}", force=True)
        if result.suggestion:
            self.suggest(result.suggestion, force=True)
        if verbose and result.output.strip():
            self.subheader("Command Output")
            self.code_block(result.output)

    def run_results(self, results: RunResults) -> None:
        """Display every check result followed by the summary line."""
        self.header("Check Results")
        for result in results.check_results:
            self.check_result(result)
        self.newline()
        self.summary(
            passed=results.passed,
            failed=results.failed,
            skipped=results.skipped,
            duration=results.total_duration,
            files=results.total_files,
        )

    def summary(
        self,
        passed: int = 0,
        failed: int = 0,
        skipped: int = 0,
        duration: float | None = None,
        files: int | None = None,
    ) -> None:
        """Output a summary line with counts (shown even in quiet mode)."""
        parts = [f"{passed} passed"]
        if failed > 0:
            parts.append(f"{failed} failed")
        if skipped > 0:
            parts.append(f"{skipped} skipped")
        if files is not None:
            parts.append(f"{files} file{'s' if files != 1 else ''}")
        if duration is not None:
            parts.append(format_duration(duration))

        summary_text = " | ".join(parts)

        if failed > 0:
            self._output(summary_text, symbol_type="error", force=True)
        elif skipped > 0:
            self._output(summary_text, symbol_type="warning", force=True)
        else:
            self._output(summary_text, symbol_type="success", force=True)
