"""Trailing whitespace fixer."""

import re

from .base import TextFixCheck

_TRAILING_WHITESPACE = re.compile(rb"[ \t]+(?=\r?\n)")


class WhitespaceCheck(TextFixCheck):
    """Strip trailing spaces and tabs from every line."""

    check_name = "whitespace"
    check_description = "Fix trailing whitespace"
    fix_hint = "Trailing whitespace was removed. Review, stage and commit again."

    def fix(self, data: bytes) -> bytes:
        fixed = _TRAILING_WHITESPACE.sub(b"", data)
        if not fixed.endswith(b"\n"):
            fixed = fixed.rstrip(b" \t")
        return fixed
