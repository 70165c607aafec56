"""Token kinds and located tokens for rellano.

The scanner only ever decides a TokenKind. The lexer driver wraps each
decision in a Token carrying the span the cursor reported.

Thread Safety:
Token is frozen (immutable) and safe to share across threads.
TokenKind is an enum (inherently immutable).

Performance Note:
Token stores raw coordinates and lazily creates SourceLocation on demand.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rellano.location import SourceLocation


class TokenKind(Enum):
    """Structural token kinds.

    The values are the symbol indices the host grammar uses for its
    external tokens, in declaration order.

    """

    INDENT = 0  # A line opens a deeper block
    DEDENT = 1  # A line closes a block (one token per closed level)
    NEWLINE = 2  # End of a logical line


ALL_KINDS: frozenset[TokenKind] = frozenset(TokenKind)


@dataclass(frozen=True, slots=True)
class Token:
    """A structural token emitted by the lexer driver.

    INDENT and DEDENT tokens are zero-width: they sit just before the first
    content character of the line that caused them (or at end of input).
    NEWLINE spans the line terminator, or is zero-width at end of input.

    Attributes:
        kind: The token kind
        _lineno: Start line number (1-indexed)
        _col: Start column offset (1-indexed)
        _start_offset: Absolute start position in source
        _end_offset: Absolute end position in source
        _source_file: Optional source file path

    """

    kind: TokenKind
    _lineno: int
    _col: int
    _start_offset: int
    _end_offset: int
    _source_file: str | None = None
    _location_cache: SourceLocation | None = field(
        default=None, repr=False, compare=False, hash=False
    )

    @property
    def location(self) -> SourceLocation:
        """Get source location (lazily created and cached)."""
        if self._location_cache is not None:
            return self._location_cache

        from rellano.location import SourceLocation

        loc = SourceLocation(
            lineno=self._lineno,
            col_offset=self._col,
            offset=self._start_offset,
            end_offset=self._end_offset,
            source_file=self._source_file,
        )
        object.__setattr__(self, "_location_cache", loc)
        return loc

    def __repr__(self) -> str:
        return (
            f"Token({self.kind.name}, {self._start_offset}:{self._end_offset}, "
            f"{self._lineno}:{self._col})"
        )

    @property
    def lineno(self) -> int:
        return self._lineno

    @property
    def col(self) -> int:
        return self._col

    @property
    def start(self) -> int:
        return self._start_offset

    @property
    def end(self) -> int:
        return self._end_offset

    @property
    def width(self) -> int:
        return self._end_offset - self._start_offset
