"""
Base classes and types for pre-commit checks.

Every check implements the same small contract: identity (``name``,
``description``, ``metadata``), a pure file filter, and ``run``, which
either returns (success) or raises a ``PreCommitError``.
"""

import fnmatch
import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .process import Deadline
    from .shared import SharedContext


class CheckCategory(Enum):
    """Check categories.

    Categories that rewrite files in the working tree must not run
    concurrently with each other.
    """

    FORMATTING = "formatting"
    LINTING = "linting"
    DEPENDENCY_HYGIENE = "dependency-hygiene"

    @property
    def mutates_tree(self) -> bool:
        return self in (CheckCategory.FORMATTING, CheckCategory.DEPENDENCY_HYGIENE)


@dataclass(frozen=True)
class CheckMetadata:
    """Static description of a check."""

    name: str
    description: str
    file_patterns: tuple[str, ...]
    estimated_duration: float
    dependencies: tuple[str, ...]
    default_timeout: float
    category: CheckCategory
    requires_files: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "file_patterns": list(self.file_patterns),
            "estimated_duration": self.estimated_duration,
            "dependencies": list(self.dependencies),
            "default_timeout": self.default_timeout,
            "category": self.category.value,
            "requires_files": self.requires_files,
        }


def matches_patterns(path: str, patterns: tuple[str, ...] | list[str]) -> bool:
    """Match a repository-relative path against basename glob patterns.

    ``*.go`` matches by suffix, ``go.mod`` by exact basename.
    """
    basename = posixpath.basename(path.replace("\\", "/"))
    return any(fnmatch.fnmatchcase(basename, pattern) for pattern in patterns)


class Check(ABC):
    """Abstract base class for all pre-commit checks."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable identifier, unique within one run (e.g. 'fumpt')."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Short human summary."""

    @property
    @abstractmethod
    def metadata(self) -> CheckMetadata:
        """Static metadata about the check."""

    @property
    def category(self) -> CheckCategory:
        return self.metadata.category

    def filter_files(self, files: list[str]) -> list[str]:
        """Select the files this check cares about.

        The result is a subset of ``files`` in input order. Must not touch
        the filesystem or spawn subprocesses.
        """
        patterns = self.metadata.file_patterns
        return [f for f in files if matches_patterns(f, patterns)]

    @abstractmethod
    def run(
        self,
        context: "SharedContext",
        deadline: "Deadline",
        files: list[str],
    ) -> None:
        """Execute the check.

        Args:
            context: Shared per-run execution context.
            deadline: Cancellable deadline bounding the whole check.
            files: Output of ``filter_files`` (repository-relative paths).

        Raises:
            PreCommitError: On any failure, already classified.
        """

