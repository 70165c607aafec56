"""Document-order driver for the structural scanner.

The scanner only answers one question per call. This package plays the
role of the host grammar engine: it walks a whole string, asks the scanner
for the kinds a line-oriented grammar would accept, rewinds after declines
and skips ordinary statement content itself.

Architecture:
lexer/
├── __init__.py          # Re-exports Lexer, LexerMode, tokenize
├── core.py              # Lexer class, Checkpoint, TokenStream
└── modes.py             # LexerMode enum, requested kind sets

Usage:
    >>> from rellano.lexer import tokenize
    >>> [t.kind.name for t in tokenize("if x\\n    y\\n")]
    ['NEWLINE', 'INDENT', 'NEWLINE', 'DEDENT']

"""

from rellano.lexer.core import Checkpoint, Lexer, TokenStream, scan_document, tokenize
from rellano.lexer.modes import LexerMode

__all__ = ["Checkpoint", "Lexer", "LexerMode", "TokenStream", "scan_document", "tokenize"]
