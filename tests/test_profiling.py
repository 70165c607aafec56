"""Tests for rellano.profiling: scan profiling API."""

from rellano import tokenize
from rellano.cursor import StringCursor
from rellano.profiling import (
    ScanAccumulator,
    get_scan_accumulator,
    profiled_scan,
)
from rellano.scanner import Scanner
from rellano.tokens import TokenKind


class TestGetScanAccumulator:
    def test_returns_none_when_disabled(self) -> None:
        assert get_scan_accumulator() is None

    def test_returns_none_outside_context(self) -> None:
        with profiled_scan():
            pass
        assert get_scan_accumulator() is None


class TestProfiledScan:
    def test_yields_accumulator(self) -> None:
        with profiled_scan() as acc:
            assert isinstance(acc, ScanAccumulator)
            assert get_scan_accumulator() is acc

    def test_records_emitted_and_declined(self) -> None:
        scanner = Scanner()
        with profiled_scan() as acc:
            scanner.scan(StringCursor("    x\n"), {TokenKind.INDENT})
            scanner.scan(StringCursor("x\n"), {TokenKind.INDENT})
        assert acc.scan_calls == 2
        assert acc.declined == 1
        assert acc.emitted[TokenKind.INDENT] == 1

    def test_counts_whole_document(self) -> None:
        with profiled_scan() as acc:
            list(tokenize("a\n    b\nc\n"))
        assert acc.emitted[TokenKind.INDENT] == 1
        assert acc.emitted[TokenKind.DEDENT] == 1
        assert acc.emitted[TokenKind.NEWLINE] == 3

    def test_no_recording_outside_context(self) -> None:
        with profiled_scan() as acc:
            pass
        list(tokenize("a\n"))
        assert acc.scan_calls == 0


class TestSummary:
    def test_summary_keys(self) -> None:
        with profiled_scan() as acc:
            list(tokenize("a\n    b\n"))
        summary = acc.summary()
        assert set(summary) == {"total_ms", "scan_calls", "declined", "tokens"}
        assert summary["tokens"] == {"INDENT": 1, "DEDENT": 1, "NEWLINE": 2}
        assert summary["total_ms"] >= 0
