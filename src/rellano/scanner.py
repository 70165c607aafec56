"""Scan decision engine for INDENT, DEDENT and NEWLINE.

The host grammar engine calls Scanner.scan() at every position where it
could accept a structural token, passing the kinds it will accept there.
The scanner either emits one token or declines, in which case the host's
ordinary tokenizer takes over.

Each call is split in two steps:

1. decide(): inspect the cursor and the current state, produce a
   ScanDecision describing the token and the stack edits it implies.
   State is only read.
2. commit: apply the decision's stack edits.

A declined call therefore never touches the state, which is what makes
speculative calls from a backtracking host safe.

Priority per call:

- owed dedents from an earlier multi-level decrease
- line-start analysis (column 0, or end of input when NEWLINE is not
  requested): blank and comment lines are skipped, the first content line's
  width is compared to the stack top
- newline recognition: trailing blanks, then ``\\n``, ``\\r``, ``\\r\\n``
  or end of input

Thread Safety:
    Scanner instances are single-owner. Create one per parse session.

"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from rellano.codec import decode_state, encode_state
from rellano.config import OverflowPolicy, ScanConfig, get_scan_config
from rellano.cursor import Cursor
from rellano.errors import ScannerClosedError
from rellano.profiling import get_scan_accumulator
from rellano.state import ScanState
from rellano.tokens import TokenKind
from rellano.utils.logger import get_logger

logger = get_logger(__name__)

INDENT = TokenKind.INDENT
DEDENT = TokenKind.DEDENT
NEWLINE = TokenKind.NEWLINE


@dataclass(frozen=True, slots=True)
class ScanDecision:
    """What a scan call would emit and how the state changes if it does.

    Attributes:
        kind: Token to emit
        push: Width to push onto the indent stack, if any
        pops: Number of levels to pop
        pending_dedents: New pending-dedent count, or None to keep it

    """

    kind: TokenKind
    push: int | None = None
    pops: int = 0
    pending_dedents: int | None = None


class Scanner:
    """Stateful structural-token scanner.

    Usage:
        >>> from rellano.cursor import StringCursor
        >>> scanner = Scanner()
        >>> cursor = StringCursor("    body\\n")
        >>> scanner.scan(cursor, {TokenKind.INDENT})
        <TokenKind.INDENT: 0>
        >>> scanner.state.stack.widths
        (0, 4)

    """

    __slots__ = ("_config", "_state", "_closed")

    def __init__(self, config: ScanConfig | None = None) -> None:
        """Create a scanner with fresh state.

        Args:
            config: Scan settings; defaults to the active ScanConfig.
        """
        self._config = config or get_scan_config()
        self._state = ScanState.fresh(self._config.max_depth)
        self._closed = False

    @property
    def config(self) -> ScanConfig:
        return self._config

    @property
    def state(self) -> ScanState:
        """A copy of the current state."""
        return self._state.copy()

    @property
    def closed(self) -> bool:
        return self._closed

    # =========================================================================
    # Entry points
    # =========================================================================

    def scan(self, cursor: Cursor, requested: Collection[TokenKind]) -> TokenKind | None:
        """Emit one structural token or decline.

        Args:
            cursor: Character cursor positioned where a token may start
            requested: Token kinds the grammar accepts at this position

        Returns:
            The emitted kind, or None when no structural token applies. On
            None the state is unchanged; the cursor may have moved over
            whitespace and trivia and the host is expected to rewind it.

        """
        self._check_open()
        decision = self.decide(cursor, requested)
        accumulator = get_scan_accumulator()
        if accumulator is not None:
            accumulator.record_scan(decision.kind if decision else None)
        if decision is None:
            return None
        self._commit(decision)
        return decision.kind

    def decide(self, cursor: Cursor, requested: Collection[TokenKind]) -> ScanDecision | None:
        """Work out what scan() would emit without changing the state."""
        state = self._state

        if state.pending_dedents > 0 and DEDENT in requested:
            return ScanDecision(DEDENT, pending_dedents=state.pending_dedents - 1)

        at_line_start = cursor.current_column() == 0
        # Input ending mid-line ends its statement before any block closes.
        draining = cursor.at_end_of_input() and NEWLINE not in requested
        if (INDENT in requested or DEDENT in requested) and (at_line_start or draining):
            width = self._skip_to_content(cursor)
            if width is None:
                if state.depth > 1 and DEDENT in requested:
                    return ScanDecision(DEDENT, pops=1)
                if at_line_start:
                    return None
            else:
                decision = self._compare_width(width, requested)
                if decision is not None:
                    return decision

        if NEWLINE in requested:
            return self._decide_newline(cursor)
        return None

    def serialize(self) -> bytes:
        """Persist the current state (see rellano.codec for the layout)."""
        self._check_open()
        return encode_state(self._state, self._config)

    def deserialize(self, data: bytes) -> None:
        """Restore state saved by serialize(). Malformed data is clamped."""
        self._check_open()
        self._state = decode_state(data, self._config)

    def reset(self) -> None:
        """Return to the state at the beginning of a document."""
        self._check_open()
        self._state = ScanState.fresh(self._config.max_depth)

    def close(self) -> None:
        """Release the scanner. Further calls raise ScannerClosedError."""
        self._closed = True

    def __enter__(self) -> Scanner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = self._state
        return (
            f"Scanner(stack={list(state.stack)!r}, "
            f"pending_dedents={state.pending_dedents}, closed={self._closed})"
        )

    # =========================================================================
    # Decision helpers (read-only with respect to state)
    # =========================================================================

    def _skip_to_content(self, cursor: Cursor) -> int | None:
        """Skip blank and comment lines; measure the first content line.

        Returns:
            Width of the content line's leading whitespace, with the token
            end marked before its first content character, or None if the
            input ends first.
        """
        tab_width = self._config.tab_width
        comment = self._config.comment_prefix

        while True:
            width = 0
            while cursor.lookahead in (" ", "\t"):
                width += 1 if cursor.lookahead == " " else tab_width
                cursor.advance(include_in_token=False)

            char = cursor.lookahead
            if char in ("\n", "\r"):
                _skip_terminator(cursor)
                continue

            if char == comment:
                while not cursor.at_end_of_input() and cursor.lookahead not in ("\n", "\r"):
                    cursor.advance(include_in_token=False)
                _skip_terminator(cursor)
                continue

            if cursor.at_end_of_input():
                return None

            cursor.mark_end()
            return width

    def _compare_width(
        self, width: int, requested: Collection[TokenKind]
    ) -> ScanDecision | None:
        stack = self._state.stack
        current = stack.top()

        if width > current and INDENT in requested:
            if not stack.is_full:
                return ScanDecision(INDENT, push=width)
            logger.warning(
                "Indentation depth limit %d reached at width %d", stack.max_depth, width
            )
            if self._config.overflow_policy is OverflowPolicy.CAP:
                return ScanDecision(INDENT)
            return None

        if width < current and DEDENT in requested:
            popped = stack.levels_above(width)
            if popped:
                return ScanDecision(DEDENT, pops=popped, pending_dedents=popped - 1)

        return None

    def _decide_newline(self, cursor: Cursor) -> ScanDecision | None:
        while cursor.lookahead in (" ", "\t"):
            cursor.advance(include_in_token=False)

        char = cursor.lookahead
        if char == "\n":
            cursor.advance()
            if self._config.fold_lf_cr and cursor.lookahead == "\r":
                cursor.advance()
            return ScanDecision(NEWLINE)

        if char == "\r":
            cursor.advance()
            if cursor.lookahead == "\n":
                cursor.advance()
            return ScanDecision(NEWLINE)

        if cursor.at_end_of_input():
            return ScanDecision(NEWLINE)

        return None

    # =========================================================================
    # Commit
    # =========================================================================

    def _commit(self, decision: ScanDecision) -> None:
        stack = self._state.stack
        if decision.push is not None:
            stack.push(decision.push)
        for _ in range(decision.pops):
            stack.pop()
        if decision.pending_dedents is not None:
            self._state.pending_dedents = decision.pending_dedents

    def _check_open(self) -> None:
        if self._closed:
            raise ScannerClosedError("Scanner has been closed")


def _skip_terminator(cursor: Cursor) -> None:
    """Skip one ``\\n``, ``\\r`` or ``\\r\\n`` as trivia, if present."""
    if cursor.lookahead == "\n":
        cursor.advance(include_in_token=False)
    elif cursor.lookahead == "\r":
        cursor.advance(include_in_token=False)
        if cursor.lookahead == "\n":
            cursor.advance(include_in_token=False)


def create_scanner(config: ScanConfig | None = None) -> Scanner:
    """Create a scanner with fresh state (the host's create hook)."""
    return Scanner(config)


__all__ = ["ScanDecision", "Scanner", "create_scanner"]
