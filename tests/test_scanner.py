"""Tests for rellano.scanner: one structural decision per call."""

import logging

import pytest

from rellano.config import OverflowPolicy, ScanConfig
from rellano.cursor import StringCursor
from rellano.errors import ScannerClosedError
from rellano.scanner import ScanDecision, Scanner, create_scanner
from rellano.tokens import ALL_KINDS, TokenKind

INDENT = TokenKind.INDENT
DEDENT = TokenKind.DEDENT
NEWLINE = TokenKind.NEWLINE


def _scanner_at(*widths: int, pending: int = 0, config: ScanConfig | None = None) -> Scanner:
    """Scanner whose stack holds 0 plus the given widths."""
    scanner = Scanner(config or ScanConfig())
    data = bytes([pending, len(widths) + 1, 0, 0])
    for width in widths:
        data += width.to_bytes(2, "little")
    scanner.deserialize(data)
    return scanner


class TestLifecycle:
    def test_fresh_state(self) -> None:
        scanner = create_scanner()
        state = scanner.state
        assert state.stack.widths == (0,)
        assert state.pending_dedents == 0

    def test_state_property_is_a_copy(self) -> None:
        scanner = Scanner()
        scanner.state.stack.push(4)
        assert scanner.state.stack.widths == (0,)

    def test_reset_restores_fresh_state(self) -> None:
        scanner = _scanner_at(4, 8, pending=1)
        scanner.reset()
        assert scanner.state.is_fresh

    def test_closed_scanner_rejects_calls(self) -> None:
        scanner = Scanner()
        scanner.close()
        assert scanner.closed
        with pytest.raises(ScannerClosedError):
            scanner.scan(StringCursor("x"), ALL_KINDS)
        with pytest.raises(ScannerClosedError):
            scanner.serialize()
        with pytest.raises(ScannerClosedError):
            scanner.deserialize(b"")

    def test_context_manager_closes(self) -> None:
        with Scanner() as scanner:
            assert not scanner.closed
        assert scanner.closed

    def test_uses_explicit_config(self) -> None:
        config = ScanConfig(tab_width=2)
        assert Scanner(config).config is config


class TestOwedDedents:
    """Pending dedents are paid before any character inspection."""

    def test_pending_dedent_emitted_first(self) -> None:
        scanner = _scanner_at(4, pending=1)
        cursor = StringCursor("        deep")
        assert scanner.scan(cursor, {DEDENT}) is DEDENT
        assert cursor.offset == 0
        assert scanner.state.pending_dedents == 0

    def test_pending_dedent_not_emitted_when_not_requested(self) -> None:
        scanner = _scanner_at(4, pending=1)
        before = scanner.serialize()
        assert scanner.scan(StringCursor("\n"), {NEWLINE}) is NEWLINE
        assert scanner.serialize() == before

    def test_multi_level_decrease_spreads_over_calls(self) -> None:
        scanner = _scanner_at(4, 8, 12)
        cursor = StringCursor("x\n")

        assert scanner.scan(cursor, {INDENT, DEDENT}) is DEDENT
        assert scanner.state.stack.widths == (0,)
        assert scanner.state.pending_dedents == 2

        assert scanner.scan(cursor, {DEDENT}) is DEDENT
        assert scanner.scan(cursor, {DEDENT}) is DEDENT
        assert scanner.state.pending_dedents == 0


class TestLineStart:
    def test_indent_pushes_width(self) -> None:
        scanner = Scanner()
        cursor = StringCursor("    body\n")
        assert scanner.scan(cursor, {INDENT, DEDENT}) is INDENT
        assert scanner.state.stack.widths == (0, 4)

    def test_indent_marks_end_before_content(self) -> None:
        scanner = Scanner()
        cursor = StringCursor("  \n    body\n")
        scanner.scan(cursor, {INDENT})
        assert cursor.token_end.offset == 7
        assert cursor.token_start.offset == 7

    def test_tab_counts_as_configured_width(self) -> None:
        scanner = Scanner(ScanConfig(tab_width=8))
        scanner.scan(StringCursor("\t x\n"), {INDENT})
        assert scanner.state.stack.widths == (0, 9)

    def test_default_tab_width_is_four(self) -> None:
        scanner = Scanner(ScanConfig())
        scanner.scan(StringCursor("\tx\n"), {INDENT})
        assert scanner.state.stack.widths == (0, 4)

    def test_mixed_tabs_and_spaces_are_summed(self) -> None:
        scanner = Scanner(ScanConfig())
        scanner.scan(StringCursor("  \t x\n"), {INDENT})
        assert scanner.state.stack.widths == (0, 7)

    def test_only_one_level_per_call(self) -> None:
        scanner = Scanner()
        cursor = StringCursor("            x\n")
        assert scanner.scan(cursor, {INDENT, DEDENT}) is INDENT
        assert scanner.state.stack.widths == (0, 12)
        # Cursor now sits mid-line; no further structural token here.
        assert scanner.scan(cursor, {INDENT, DEDENT}) is None

    def test_dedent_to_intermediate_level(self) -> None:
        scanner = _scanner_at(4, 8)
        assert scanner.scan(StringCursor("    x\n"), {DEDENT}) is DEDENT
        assert scanner.state.stack.widths == (0, 4)
        assert scanner.state.pending_dedents == 0

    def test_dedent_to_unaligned_width_pops_wider_levels(self) -> None:
        scanner = _scanner_at(4, 8)
        assert scanner.scan(StringCursor("  x\n"), {DEDENT}) is DEDENT
        assert scanner.state.stack.widths == (0,)
        assert scanner.state.pending_dedents == 1

    def test_same_width_falls_through_to_newline(self) -> None:
        scanner = _scanner_at(4)
        cursor = StringCursor("    x\n")
        assert scanner.scan(cursor, ALL_KINDS) is None
        assert scanner.state.stack.widths == (0, 4)

    def test_same_width_empty_line_content_is_not_consumed(self) -> None:
        scanner = Scanner()
        cursor = StringCursor("x\n")
        assert scanner.scan(cursor, {INDENT, DEDENT}) is None
        assert cursor.token_end.offset == 0

    def test_blank_and_comment_lines_are_skipped(self) -> None:
        scanner = Scanner()
        cursor = StringCursor("\n   \n# note\n  # indented note\r\n\r    x\n")
        assert scanner.scan(cursor, {INDENT}) is INDENT
        assert scanner.state.stack.widths == (0, 4)

    def test_custom_comment_prefix(self) -> None:
        scanner = Scanner(ScanConfig(comment_prefix=";"))
        cursor = StringCursor("; note\n    x\n")
        assert scanner.scan(cursor, {INDENT}) is INDENT

    def test_not_attempted_mid_line(self) -> None:
        scanner = Scanner()
        cursor = StringCursor("a    b")
        cursor.advance()
        assert scanner.scan(cursor, {INDENT, DEDENT}) is None
        assert scanner.state.is_fresh

    def test_dedent_not_requested_leaves_state(self) -> None:
        scanner = _scanner_at(4)
        before = scanner.serialize()
        assert scanner.scan(StringCursor("x\n"), {INDENT}) is None
        assert scanner.serialize() == before

    def test_indent_not_requested_leaves_state(self) -> None:
        scanner = Scanner()
        before = scanner.serialize()
        assert scanner.scan(StringCursor("    x\n"), {DEDENT}) is None
        assert scanner.serialize() == before


class TestEndOfInput:
    def test_dedents_drain_to_depth_one(self) -> None:
        scanner = _scanner_at(2, 4, 6)
        cursor = StringCursor("")
        results = [scanner.scan(cursor, {DEDENT}) for _ in range(5)]
        assert results == [DEDENT, DEDENT, DEDENT, None, None]
        assert scanner.state.stack.widths == (0,)

    def test_corrupt_pending_count_is_bounded_by_depth(self) -> None:
        """One owed dedent at most, then the single open level closes."""
        scanner = Scanner()
        scanner.deserialize(bytes([3, 2, 0, 0, 4, 0]))
        assert scanner.state.pending_dedents == 1
        cursor = StringCursor("")
        results = [scanner.scan(cursor, {DEDENT}) for _ in range(4)]
        assert results == [DEDENT, DEDENT, None, None]

    def test_trailing_trivia_then_dedent(self) -> None:
        scanner = _scanner_at(4)
        cursor = StringCursor("\n  # trailing\n   ")
        assert scanner.scan(cursor, {INDENT, DEDENT}) is DEDENT
        assert cursor.at_end_of_input()

    def test_declines_at_depth_one_even_with_newline_requested(self) -> None:
        scanner = Scanner()
        assert scanner.scan(StringCursor("\n\n"), ALL_KINDS) is None

    def test_dedent_at_end_of_unterminated_line(self) -> None:
        scanner = _scanner_at(4)
        cursor = StringCursor("    x")
        for _ in range(5):
            cursor.advance()
        assert scanner.scan(cursor, {DEDENT}) is DEDENT
        assert scanner.scan(cursor, {DEDENT}) is None

    def test_newline_before_dedent_at_end_of_unterminated_line(self) -> None:
        scanner = _scanner_at(4)
        cursor = StringCursor("    x")
        for _ in range(5):
            cursor.advance()
        assert scanner.scan(cursor, {DEDENT, NEWLINE}) is NEWLINE
        assert scanner.state.stack.widths == (0, 4)
        assert scanner.scan(cursor, {DEDENT}) is DEDENT

    def test_unterminated_line_still_gets_newline(self) -> None:
        scanner = Scanner()
        cursor = StringCursor("x")
        cursor.advance()
        assert scanner.scan(cursor, ALL_KINDS) is NEWLINE

    def test_indent_alone_is_declined(self) -> None:
        scanner = _scanner_at(4)
        assert scanner.scan(StringCursor(""), {INDENT}) is None
        assert scanner.state.stack.widths == (0, 4)


class TestNewline:
    @pytest.mark.parametrize(
        ("text", "end"),
        [
            ("\nnext", 1),
            ("\r\nnext", 2),
            ("\rnext", 1),
            ("   \t\nnext", 5),
            ("", 0),
        ],
    )
    def test_terminators(self, text: str, end: int) -> None:
        scanner = Scanner()
        cursor = StringCursor(text)
        assert scanner.scan(cursor, {NEWLINE}) is NEWLINE
        assert cursor.token_end.offset == end

    def test_trailing_blanks_are_not_in_token(self) -> None:
        scanner = Scanner()
        cursor = StringCursor("x  \n")
        cursor.advance()
        cursor.begin_token()
        scanner.scan(cursor, {NEWLINE})
        assert cursor.token_start.offset == 3
        assert cursor.token_end.offset == 4

    def test_lf_cr_folded_by_default(self) -> None:
        scanner = Scanner(ScanConfig())
        cursor = StringCursor("\n\rnext")
        scanner.scan(cursor, {NEWLINE})
        assert cursor.offset == 2

    def test_lf_cr_not_folded_when_disabled(self) -> None:
        scanner = Scanner(ScanConfig(fold_lf_cr=False))
        cursor = StringCursor("\n\rnext")
        scanner.scan(cursor, {NEWLINE})
        assert cursor.offset == 1

    def test_content_is_not_a_newline(self) -> None:
        scanner = Scanner()
        cursor = StringCursor("x = 1\n")
        cursor.advance()
        assert scanner.scan(cursor, {NEWLINE}) is None

    def test_newline_never_changes_state(self) -> None:
        scanner = _scanner_at(4)
        before = scanner.serialize()
        cursor = StringCursor("    x\n")
        for _ in range(5):
            cursor.advance()
        assert scanner.scan(cursor, {NEWLINE}) is NEWLINE
        assert scanner.serialize() == before

    def test_nothing_requested_declines(self) -> None:
        assert Scanner().scan(StringCursor("    x\n"), set()) is None


class TestOverflow:
    def test_cap_emits_indent_without_push(self, caplog: pytest.LogCaptureFixture) -> None:
        config = ScanConfig(max_depth=2)
        scanner = _scanner_at(4, config=config)
        with caplog.at_level(logging.WARNING, logger="rellano"):
            assert scanner.scan(StringCursor("        x\n"), {INDENT}) is INDENT
        assert scanner.state.stack.widths == (0, 4)
        assert "depth limit" in caplog.text

    def test_decline_policy_leaves_state(self) -> None:
        config = ScanConfig(max_depth=2, overflow_policy=OverflowPolicy.DECLINE)
        scanner = _scanner_at(4, config=config)
        before = scanner.serialize()
        assert scanner.scan(StringCursor("        x\n"), {INDENT}) is None
        assert scanner.serialize() == before


class TestDecide:
    def test_decide_does_not_mutate(self) -> None:
        scanner = _scanner_at(4, 8)
        before = scanner.serialize()
        decision = scanner.decide(StringCursor("x\n"), {DEDENT})
        assert decision == ScanDecision(DEDENT, pops=2, pending_dedents=1)
        assert scanner.serialize() == before

    def test_decide_indent(self) -> None:
        decision = Scanner().decide(StringCursor("   x"), {INDENT})
        assert decision == ScanDecision(INDENT, push=3)

    def test_decide_decline(self) -> None:
        assert Scanner().decide(StringCursor("x"), {INDENT}) is None


class TestRoundTrip:
    def test_resume_from_serialized_state(self) -> None:
        first = Scanner()
        first.scan(StringCursor("    x\n"), {INDENT})
        first.scan(StringCursor("        y\n"), {INDENT})
        saved = first.serialize()

        second = Scanner()
        second.deserialize(saved)
        assert second.state == first.state
        assert second.scan(StringCursor("z\n"), {DEDENT}) is DEDENT
        assert second.scan(StringCursor("z\n"), {DEDENT}) is DEDENT
        assert second.state.stack.widths == (0,)
