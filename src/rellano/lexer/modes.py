"""Lexer driver modes and the token kinds requested in each.

This module defines the finite state machine modes for the driver and the
kind sets it hands to the scanner, mirroring what a line-oriented grammar
accepts at each point.
"""

from __future__ import annotations

from enum import Enum, auto

from rellano.tokens import TokenKind


class LexerMode(Enum):
    """Driver operating modes.

    - LINE_START: Before a statement; a block may open or close here
    - IN_LINE: After statement content; only the line end is acceptable
    - DONE: Input exhausted and every open block closed

    """

    LINE_START = auto()
    IN_LINE = auto()
    DONE = auto()


LINE_START_KINDS = frozenset({TokenKind.INDENT, TokenKind.DEDENT})
END_OF_INPUT_KINDS = frozenset({TokenKind.DEDENT})
IN_LINE_KINDS = frozenset({TokenKind.NEWLINE})
