"""Text normalization checks that run in process."""

from .base import TEXT_FILE_PATTERNS, TextFixCheck
from .eof import EOFCheck
from .whitespace import WhitespaceCheck

__all__ = ["TextFixCheck", "TEXT_FILE_PATTERNS", "WhitespaceCheck", "EOFCheck"]
