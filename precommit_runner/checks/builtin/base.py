"""In-process checks that normalize text files in place."""

import time
from abc import abstractmethod

from ...errors import NotTidyError, ToolExecutionError
from ...runner_logging import LogCategory, get_category_logger
from ..base import Check, CheckCategory, CheckMetadata
from ..process import Deadline
from ..shared import SharedContext

logger = get_category_logger(LogCategory.CHECKS)

TEXT_FILE_PATTERNS = (
    "*.go",
    "*.md",
    "*.txt",
    "*.yml",
    "*.yaml",
    "*.json",
    "*.toml",
    "*.mod",
    "*.sh",
    "*.py",
    "*.js",
    "*.ts",
    "*.html",
    "*.css",
    "*.xml",
    "*.sql",
    "*.cfg",
    "*.ini",
    "*.mk",
    "Makefile",
    "Dockerfile",
)

BINARY_SNIFF_BYTES = 8192


class TextFixCheck(Check):
    """Base class for checks that rewrite text files.

    Files that needed fixing are rewritten and reported through
    ``NotTidyError`` so the fixes get reviewed and re-staged.
    """

    check_name: str = ""
    check_description: str = ""
    default_timeout: float = 30.0
    fix_hint: str = "Files were fixed in place. Review, stage and commit again."

    def __init__(self, timeout: float | None = None, max_file_size: int = 10 * 1024 * 1024):
        self.timeout = timeout if timeout is not None else self.default_timeout
        self.max_file_size = max_file_size

    @property
    def name(self) -> str:
        return self.check_name

    @property
    def description(self) -> str:
        return self.check_description

    @property
    def metadata(self) -> CheckMetadata:
        return CheckMetadata(
            name=self.check_name,
            description=self.check_description,
            file_patterns=TEXT_FILE_PATTERNS,
            estimated_duration=0.5,
            dependencies=(),
            default_timeout=self.timeout,
            category=CheckCategory.FORMATTING,
            requires_files=True,
        )

    @abstractmethod
    def fix(self, data: bytes) -> bytes:
        """Return the normalized content of a file."""

    def run(self, context: SharedContext, deadline: Deadline, files: list[str]) -> None:
        if not files:
            return

        repo_root = context.get_repo_root()
        check_deadline = deadline.child(self.timeout)
        start = time.monotonic()
        fixed: list[str] = []

        for file in files:
            if check_deadline.done:
                timed_out = not check_deadline.cancelled
                raise ToolExecutionError(
                    self.name,
                    f"Stopped after {len(fixed)} fixed file(s)",
                    (
                        f"The {self.name} check timed out after {self.timeout:g}s. "
                        f"Consider increasing PRE_COMMIT_SYSTEM_{self.name.upper()}_TIMEOUT."
                        if timed_out
                        else f"The run was cancelled before {self.name} finished."
                    ),
                    timed_out=timed_out,
                    cancelled=not timed_out,
                )

            path = repo_root / file
            try:
                if not path.is_file() or path.stat().st_size > self.max_file_size:
                    continue
                data = path.read_bytes()
                if b"\0" in data[:BINARY_SNIFF_BYTES]:
                    continue
                normalized = self.fix(data)
                if normalized != data:
                    path.write_bytes(normalized)
                    fixed.append(file)
            except PermissionError as e:
                raise ToolExecutionError(
                    self.name,
                    str(e),
                    f"Permission denied. Ensure you have write access to {file}.",
                ) from e
            except OSError as e:
                raise ToolExecutionError(
                    self.name,
                    str(e),
                    f"Could not process {file}. Check that it is readable and writable.",
                ) from e

        logger.debug(
            f"{self.name}: checked {len(files)} file(s), fixed {len(fixed)}",
            extra={"check": self.name, "duration_ms": (time.monotonic() - start) * 1000},
        )

        if fixed:
            raise NotTidyError(self.name, fixed, self.fix_hint)
