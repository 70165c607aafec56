"""Document-order lexer driver.

Drives a Scanner over an entire string the way a host grammar engine does:
request INDENT/DEDENT before a statement, NEWLINE after it, rewind after a
declined call and let the ordinary tokenizer (here, a line skipper) consume
statement content.

Every line start where a statement begins is recorded as a Checkpoint, the
serialized scanner state at that offset. Incremental re-scans resume from
these.

Thread Safety:
Lexer instances are single-use. Create one per source string.

"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from rellano.config import ScanConfig
from rellano.cursor import StringCursor
from rellano.diagnostics import IndentViolation, check_indentation
from rellano.lexer.modes import (
    END_OF_INPUT_KINDS,
    IN_LINE_KINDS,
    LINE_START_KINDS,
    LexerMode,
)
from rellano.location import SourceLocation
from rellano.scanner import Scanner
from rellano.tokens import Token, TokenKind


@dataclass(frozen=True, slots=True)
class Checkpoint:
    """Scanner state in effect at a statement's line start.

    Attributes:
        offset: Absolute offset of the line start
        lineno: Line number at that offset (1-indexed)
        state: Serialized scanner state at that offset

    """

    offset: int
    lineno: int
    state: bytes


@dataclass(frozen=True, slots=True)
class TokenStream:
    """Result of scanning a whole document.

    Attributes:
        source: The scanned text
        tokens: Structural tokens in document order
        checkpoints: Resumable line starts in document order
        diagnostics: Indentation style violations (only with strict_indent)

    """

    source: str
    tokens: tuple[Token, ...]
    checkpoints: tuple[Checkpoint, ...]
    diagnostics: tuple[IndentViolation, ...] = ()

    def kinds(self) -> list[TokenKind]:
        return [token.kind for token in self.tokens]


class Lexer:
    """Structural tokenizer over a string.

    Usage:
        >>> lexer = Lexer("def f\\n    pass\\n")
        >>> for token in lexer.tokenize():
        ...     print(token)
        Token(NEWLINE, 5:6, 1:6)
        Token(INDENT, 10:10, 2:5)
        Token(NEWLINE, 14:15, 2:9)
        Token(DEDENT, 15:15, 3:1)

    """

    __slots__ = (
        "_source",
        "_source_file",
        "_scanner",
        "_cursor",
        "_mode",
        "_checkpoint_due",
        "_checkpoints",
        "_line_top",
        "_diagnostics",
    )

    def __init__(
        self,
        source: str,
        config: ScanConfig | None = None,
        *,
        scanner: Scanner | None = None,
        source_file: str | None = None,
        offset: int = 0,
        lineno: int = 1,
        state: bytes | None = None,
    ) -> None:
        """Initialize the driver.

        Args:
            source: Text to tokenize
            config: Scan settings for a new scanner (ignored if scanner given)
            scanner: Existing scanner to drive
            source_file: Optional source file path for token locations
            offset: Line-start offset to begin at (for resuming)
            lineno: Line number of offset
            state: Serialized scanner state to restore before starting
        """
        self._source = source
        self._source_file = source_file
        self._scanner = scanner or Scanner(config)
        if state is not None:
            self._scanner.deserialize(state)
        self._cursor = StringCursor(source, offset, lineno)
        self._mode = LexerMode.LINE_START
        self._checkpoint_due = self._cursor.current_column() == 0
        self._checkpoints: list[Checkpoint] = []
        self._line_top = self._scanner.state.stack.top()
        self._diagnostics: list[IndentViolation] = []

    @property
    def scanner(self) -> Scanner:
        return self._scanner

    @property
    def mode(self) -> LexerMode:
        return self._mode

    @property
    def checkpoints(self) -> tuple[Checkpoint, ...]:
        """Checkpoints recorded so far."""
        return tuple(self._checkpoints)

    @property
    def diagnostics(self) -> tuple[IndentViolation, ...]:
        """Indentation violations recorded so far (strict_indent only)."""
        return tuple(self._diagnostics)

    def tokenize(self) -> Iterator[Token]:
        """Tokenize the source into structural tokens.

        Yields:
            Token objects one at a time, ending once input is exhausted and
            every open block has been closed.
        """
        cursor = self._cursor
        scanner = self._scanner

        while self._mode is not LexerMode.DONE:
            if self._mode is LexerMode.LINE_START:
                if self._checkpoint_due:
                    self._checkpoints.append(
                        Checkpoint(cursor.offset, cursor.lineno, scanner.serialize())
                    )
                    self._checkpoint_due = False
                if cursor.at_end_of_input():
                    requested = END_OF_INPUT_KINDS
                else:
                    requested = LINE_START_KINDS
            else:
                requested = IN_LINE_KINDS

            start = cursor.save()
            cursor.begin_token()
            kind = scanner.scan(cursor, requested)

            if kind is not None:
                token = self._make_token(kind)
                cursor.restore(cursor.token_end)
                if kind is TokenKind.NEWLINE:
                    self._mode = LexerMode.LINE_START
                    self._checkpoint_due = cursor.current_column() == 0
                yield token
                continue

            cursor.restore(start)
            self._dispatch_decline()

    # =========================================================================
    # Ordinary tokenizer stand-in
    # =========================================================================

    def _dispatch_decline(self) -> None:
        """Move past whatever the scanner declined to claim."""
        cursor = self._cursor
        if self._mode is LexerMode.LINE_START:
            if cursor.at_end_of_input():
                self._mode = LexerMode.DONE
                return
            self._skip_trivia()
            if cursor.at_end_of_input():
                # Trailing blank or comment lines; go back to draining blocks.
                return
            if self._scanner.config.strict_indent:
                self._check_indentation()
            self._skip_content()
            self._mode = LexerMode.IN_LINE
        else:
            # Content always stops at a terminator, so this is only reached
            # for a stray character the scanner could not classify.
            cursor.advance()
            self._skip_content()

    def _skip_trivia(self) -> None:
        """Skip blanks, blank lines and comment lines."""
        cursor = self._cursor
        comment = self._scanner.config.comment_prefix
        while not cursor.at_end_of_input():
            char = cursor.lookahead
            if char in (" ", "\t", "\n", "\r"):
                cursor.advance(include_in_token=False)
            elif char == comment:
                self._skip_content()
            else:
                return

    def _check_indentation(self) -> None:
        """Record a style violation for the statement line at the cursor."""
        cursor = self._cursor
        start = cursor.offset - cursor.current_column()
        current_top = self._scanner.state.stack.top()
        violation = check_indentation(
            cursor.source[start : cursor.offset],
            self._line_top,
            current_top,
            self._scanner.config.indent_size,
            SourceLocation(cursor.lineno, 1, start, cursor.offset, self._source_file),
        )
        self._line_top = current_top
        if violation is not None:
            self._diagnostics.append(violation)

    def _skip_content(self) -> None:
        """Consume up to, not including, the line terminator."""
        cursor = self._cursor
        while not cursor.at_end_of_input() and cursor.lookahead not in ("\n", "\r"):
            cursor.advance()

    def _make_token(self, kind: TokenKind) -> Token:
        start = self._cursor.token_start
        end = self._cursor.token_end
        return Token(
            kind=kind,
            _lineno=start.lineno,
            _col=start.column + 1,
            _start_offset=start.offset,
            _end_offset=end.offset,
            _source_file=self._source_file,
        )


def tokenize(
    source: str,
    config: ScanConfig | None = None,
    *,
    source_file: str | None = None,
) -> Iterator[Token]:
    """Tokenize source into structural tokens.

    Args:
        source: Text to tokenize
        config: Scan settings; defaults to the active ScanConfig
        source_file: Optional source file path for token locations

    Yields:
        INDENT, DEDENT and NEWLINE tokens in document order.

    """
    yield from Lexer(source, config, source_file=source_file).tokenize()


def scan_document(
    source: str,
    config: ScanConfig | None = None,
    *,
    source_file: str | None = None,
) -> TokenStream:
    """Tokenize a whole document and keep its checkpoints."""
    lexer = Lexer(source, config, source_file=source_file)
    tokens = tuple(lexer.tokenize())
    return TokenStream(
        source=source,
        tokens=tokens,
        checkpoints=lexer.checkpoints,
        diagnostics=lexer.diagnostics,
    )
