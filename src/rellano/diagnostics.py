"""Indentation style diagnostics.

With ``ScanConfig.strict_indent`` the lexer driver checks every statement
line against a fixed indentation style and records what it finds. Violations
are reported, never raised, and never change the token stream.

Checks:
- tab_indent: a tab in the line's leading whitespace
- indent_step: an increase other than exactly ``ScanConfig.indent_size``
- mismatch: a dedent that lands between two open levels

"""

from __future__ import annotations

from dataclasses import dataclass

from rellano.location import SourceLocation

TAB_INDENT = "tab_indent"
INDENT_STEP = "indent_step"
MISMATCH = "mismatch"


@dataclass(frozen=True, slots=True)
class IndentViolation:
    """Record of an indentation style violation."""

    violation_type: str
    """One of tab_indent, indent_step, mismatch."""

    message: str
    """Human-readable message."""

    location: SourceLocation
    """Span of the line's leading whitespace."""

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"


def check_indentation(
    prefix: str,
    previous_top: int,
    current_top: int,
    indent_size: int,
    location: SourceLocation,
) -> IndentViolation | None:
    """Check one statement line's indentation.

    Args:
        prefix: The line's leading whitespace
        previous_top: Innermost open width before the line
        current_top: Innermost open width after the line's INDENT/DEDENTs
        indent_size: Required width of one level
        location: Where the leading whitespace sits

    Returns:
        The first violation found, or None.
    """
    if "\t" in prefix:
        return IndentViolation(TAB_INDENT, "Use spaces for indentation, not tabs", location)

    width = len(prefix)
    if width > previous_top and width - previous_top != indent_size:
        return IndentViolation(
            INDENT_STEP,
            f"Indentation can only increase by {indent_size} spaces, "
            f"got increase of {width - previous_top}",
            location,
        )

    if width != current_top:
        return IndentViolation(MISMATCH, "Indentation mismatch", location)

    return None


__all__ = ["INDENT_STEP", "MISMATCH", "TAB_INDENT", "IndentViolation", "check_indentation"]
