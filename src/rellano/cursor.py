"""Character cursor contract consumed by the scanner.

The host grammar engine owns the cursor. The scanner may peek, consume
(either into the token span or as skipped trivia) and fix the token end, but
never rewinds: after a declined scan the host decides where to continue.

StringCursor implements the contract over an in-memory string and adds the
save/restore hooks a host needs to rewind after a decline.

"""

from __future__ import annotations

from typing import NamedTuple, Protocol


class Cursor(Protocol):
    """Protocol for the character cursor handed to Scanner.scan().

    Thread Safety:
        A cursor is owned by one caller for the duration of one scan call.

    """

    @property
    def lookahead(self) -> str:
        """Current character without consuming it; empty string at end of input."""
        ...

    def advance(self, include_in_token: bool = True) -> None:
        """Consume one character.

        Characters consumed with ``include_in_token=False`` before the first
        included character are trivia: the token span starts after them.
        """
        ...

    def mark_end(self) -> None:
        """Fix the token end at the current position."""
        ...

    def at_end_of_input(self) -> bool:
        """True once every character has been consumed."""
        ...

    def current_column(self) -> int:
        """Zero-based column of the current position."""
        ...


class CursorPosition(NamedTuple):
    """A resumable point in the source."""

    offset: int
    lineno: int
    line_start: int

    @property
    def column(self) -> int:
        return self.offset - self.line_start


class StringCursor:
    """Cursor over a string.

    A ``\\n`` starts a new line, and so does a ``\\r`` that is not followed
    by ``\\n``; in ``\\r\\n`` the line break happens after the ``\\n``.

    Usage:
        >>> cursor = StringCursor("  x")
        >>> cursor.advance(include_in_token=False)
        >>> cursor.current_column()
        1
        >>> cursor.token_start.offset
        1

    """

    __slots__ = (
        "_source",
        "_source_len",
        "_pos",
        "_lineno",
        "_line_start",
        "_token_start",
        "_marked",
        "_included",
    )

    def __init__(self, source: str, offset: int = 0, lineno: int = 1) -> None:
        """Initialize the cursor.

        Args:
            source: Complete source text
            offset: Starting offset (clamped into the source)
            lineno: Line number (1-indexed) of the starting offset
        """
        self._source = source
        self._source_len = len(source)
        self._pos = max(0, min(offset, self._source_len))
        self._lineno = lineno
        self._line_start = self._find_line_start(self._pos)
        self._token_start = self.save()
        self._marked: CursorPosition | None = None
        self._included = False

    def _find_line_start(self, pos: int) -> int:
        source = self._source
        start = pos
        while start > 0:
            prev = source[start - 1]
            if prev == "\n" or (prev == "\r" and source[start : start + 1] != "\n"):
                break
            start -= 1
        return start

    # =========================================================================
    # Cursor protocol
    # =========================================================================

    @property
    def lookahead(self) -> str:
        if self._pos >= self._source_len:
            return ""
        return self._source[self._pos]

    def advance(self, include_in_token: bool = True) -> None:
        if self._pos >= self._source_len:
            return
        char = self._source[self._pos]
        self._pos += 1
        if char == "\n" or (char == "\r" and self.lookahead != "\n"):
            self._lineno += 1
            self._line_start = self._pos
        if include_in_token:
            self._included = True
        elif not self._included:
            self._token_start = self.save()

    def mark_end(self) -> None:
        self._marked = self.save()

    def at_end_of_input(self) -> bool:
        return self._pos >= self._source_len

    def current_column(self) -> int:
        return self._pos - self._line_start

    # =========================================================================
    # Host-side helpers
    # =========================================================================

    @property
    def source(self) -> str:
        return self._source

    @property
    def offset(self) -> int:
        return self._pos

    @property
    def lineno(self) -> int:
        return self._lineno

    @property
    def token_start(self) -> CursorPosition:
        """Where the current token begins (after any skipped trivia)."""
        return self._token_start

    @property
    def token_end(self) -> CursorPosition:
        """The marked end, or the current position if mark_end() was not called."""
        return self._marked if self._marked is not None else self.save()

    def begin_token(self) -> None:
        """Start a fresh token span at the current position."""
        self._token_start = self.save()
        self._marked = None
        self._included = False

    def save(self) -> CursorPosition:
        return CursorPosition(self._pos, self._lineno, self._line_start)

    def restore(self, position: CursorPosition) -> None:
        """Rewind or fast-forward to a saved position."""
        self._pos = position.offset
        self._lineno = position.lineno
        self._line_start = position.line_start

    def __repr__(self) -> str:
        return f"StringCursor(offset={self._pos}, line={self._lineno}, col={self.current_column()})"
