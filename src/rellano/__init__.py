"""
rellano: indentation-sensitive structural tokenizer

Turns block-structured, Python-like source text into INDENT, DEDENT and
NEWLINE tokens. The scanner makes one decision per call for a host grammar
engine, and its state round-trips through a compact byte layout so edited
regions can be re-scanned from a checkpoint.

Quick Start:
    >>> from rellano import tokenize
    >>> [t.kind.name for t in tokenize("if ready\\n    go\\n")]
    ['NEWLINE', 'INDENT', 'NEWLINE', 'DEDENT']

Driving the scanner directly (what a grammar engine does):
    >>> from rellano import Scanner, StringCursor, TokenKind
    >>> scanner = Scanner()
    >>> scanner.scan(StringCursor("    x\\n"), {TokenKind.INDENT})
    <TokenKind.INDENT: 0>
    >>> scanner.serialize()
    b'\\x00\\x02\\x00\\x00\\x04\\x00'

Installation:
    pip install rellano              # Core (zero runtime deps)
    pip install rellano[test]        # + pytest and Hypothesis for the test suite
"""

from rellano.codec import decode_state, encode_state
from rellano.config import (
    OverflowPolicy,
    ScanConfig,
    get_scan_config,
    reset_scan_config,
    scan_config_context,
    set_scan_config,
)
from rellano.cursor import Cursor, CursorPosition, StringCursor
from rellano.diagnostics import IndentViolation
from rellano.errors import ConfigError, RellanoError, ScannerClosedError, StackUnderflowError
from rellano.incremental import rescan
from rellano.lexer import Checkpoint, Lexer, TokenStream, scan_document, tokenize
from rellano.location import SourceLocation
from rellano.profiling import ScanAccumulator, get_scan_accumulator, profiled_scan
from rellano.scanner import ScanDecision, Scanner, create_scanner
from rellano.stack import IndentStack
from rellano.state import ScanState
from rellano.tokens import ALL_KINDS, Token, TokenKind

__version__ = "0.1.0"

__all__ = [  # noqa: RUF022: grouped by category for maintainability
    # Version
    "__version__",
    # Core API
    "tokenize",
    "scan_document",
    "rescan",
    # Scanner
    "Scanner",
    "ScanDecision",
    "create_scanner",
    # State
    "IndentStack",
    "ScanState",
    "encode_state",
    "decode_state",
    # Cursor
    "Cursor",
    "CursorPosition",
    "StringCursor",
    # Driver
    "Lexer",
    "Checkpoint",
    "TokenStream",
    # Tokens
    "ALL_KINDS",
    "Token",
    "TokenKind",
    # Location
    "SourceLocation",
    # Diagnostics
    "IndentViolation",
    # Configuration (ContextVar-based)
    "OverflowPolicy",
    "ScanConfig",
    "get_scan_config",
    "set_scan_config",
    "reset_scan_config",
    "scan_config_context",
    # Profiling
    "ScanAccumulator",
    "profiled_scan",
    "get_scan_accumulator",
    # Errors
    "RellanoError",
    "ConfigError",
    "StackUnderflowError",
    "ScannerClosedError",
]
