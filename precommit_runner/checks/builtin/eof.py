"""End-of-file newline fixer."""

from .base import TextFixCheck


class EOFCheck(TextFixCheck):
    """Ensure non-empty files end with exactly one newline."""

    check_name = "eof"
    check_description = "Ensure files end with newline"
    fix_hint = "End-of-file newlines were fixed. Review, stage and commit again."

    def fix(self, data: bytes) -> bytes:
        if not data:
            return data
        newline = b"\r\n" if b"\r\n" in data else b"\n"
        content = data.rstrip(b"\r\n")
        if not content:
            return b""
        return content + newline
