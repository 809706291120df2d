"""Unit tests for the in-process whitespace and eof checks."""

from pathlib import Path

import pytest

from precommit_runner.checks.base import CheckCategory
from precommit_runner.checks.builtin import EOFCheck, WhitespaceCheck
from precommit_runner.checks.process import Deadline
from precommit_runner.errors import NotTidyError, ToolExecutionError


class TestWhitespaceFix:
    """Tests for trailing whitespace normalization."""

    @pytest.mark.parametrize(
        "before,after",
        [
            (b"a  \nb\t\n", b"a\nb\n"),
            (b"a \r\nb\r\n", b"a\r\nb\r\n"),
            (b"no newline   ", b"no newline"),
            (b"  leading kept\n", b"  leading kept\n"),
            (b"", b""),
        ],
    )
    def test_fix(self, before, after):
        assert WhitespaceCheck().fix(before) == after

    def test_fix_is_idempotent(self):
        check = WhitespaceCheck()
        once = check.fix(b"x \ny\t \n")
        assert check.fix(once) == once


class TestEOFFix:
    """Tests for end-of-file newline normalization."""

    @pytest.mark.parametrize(
        "before,after",
        [
            (b"content", b"content\n"),
            (b"content\n", b"content\n"),
            (b"content\n\n\n", b"content\n"),
            (b"a\r\nb", b"a\r\nb\r\n"),
            (b"", b""),
            (b"\n\n", b""),
        ],
    )
    def test_fix(self, before, after):
        assert EOFCheck().fix(before) == after


class TestTextFixRun:
    """Tests for running the text checks against files on disk."""

    def test_metadata(self):
        for check in (WhitespaceCheck(), EOFCheck()):
            assert check.category is CheckCategory.FORMATTING
            assert check.metadata.dependencies == ()

    def test_filter_selects_text_files(self):
        files = ["main.go", "README.md", "logo.png", "Makefile", "go.sum"]
        assert WhitespaceCheck().filter_files(files) == ["main.go", "README.md", "Makefile"]

    def test_clean_files_pass(self, stub_context, go_repo: Path):
        context = stub_context(go_repo)
        WhitespaceCheck().run(context, Deadline(), ["main.go", "doc.md"])
        EOFCheck().run(context, Deadline(), ["main.go", "doc.md"])

    def test_fixes_and_reports_files(self, stub_context, go_repo: Path):
        (go_repo / "main.go").write_text("package main   \n")
        context = stub_context(go_repo)

        with pytest.raises(NotTidyError) as exc_info:
            WhitespaceCheck().run(context, Deadline(), ["main.go", "doc.md"])

        assert exc_info.value.files == ["main.go"]
        assert (go_repo / "main.go").read_text() == "package main\n"

    def test_second_run_passes(self, stub_context, go_repo: Path):
        (go_repo / "doc.md").write_text("# Demo")
        context = stub_context(go_repo)

        with pytest.raises(NotTidyError):
            EOFCheck().run(context, Deadline(), ["doc.md"])
        EOFCheck().run(context, Deadline(), ["doc.md"])

        assert (go_repo / "doc.md").read_text() == "# Demo\n"

    def test_skips_binary_files(self, stub_context, tmp_path: Path):
        data = b"\x00\x01binary  \n"
        (tmp_path / "blob.txt").write_bytes(data)
        context = stub_context(tmp_path)

        WhitespaceCheck().run(context, Deadline(), ["blob.txt"])
        assert (tmp_path / "blob.txt").read_bytes() == data

    def test_skips_large_files(self, stub_context, tmp_path: Path):
        (tmp_path / "big.txt").write_bytes(b"x  \n" * 100)
        context = stub_context(tmp_path)

        WhitespaceCheck(max_file_size=10).run(context, Deadline(), ["big.txt"])
        assert (tmp_path / "big.txt").read_bytes().startswith(b"x  \n")

    def test_skips_deleted_files(self, stub_context, tmp_path: Path):
        context = stub_context(tmp_path)
        EOFCheck().run(context, Deadline(), ["gone.md"])

    def test_cancelled_deadline(self, stub_context, go_repo: Path):
        context = stub_context(go_repo)
        deadline = Deadline()
        deadline.cancel()

        with pytest.raises(ToolExecutionError) as exc_info:
            WhitespaceCheck().run(context, deadline, ["main.go"])
        assert exc_info.value.cancelled

    def test_expired_deadline(self, stub_context, go_repo: Path):
        context = stub_context(go_repo)
        deadline = Deadline(timeout=0)

        with pytest.raises(ToolExecutionError) as exc_info:
            EOFCheck().run(context, deadline, ["main.go"])
        assert exc_info.value.timed_out

    def test_empty_files_is_noop(self, stub_context, tmp_path: Path):
        WhitespaceCheck().run(stub_context(tmp_path), Deadline(), [])
