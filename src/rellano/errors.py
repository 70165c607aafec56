"""Exception classes for rellano.

The scan path itself never raises: every rejection is a declined scan.
These exceptions only surface at the API edges (configuration, direct
stack manipulation, use of a closed scanner).
"""

from __future__ import annotations


class RellanoError(Exception):
    """Base exception for all rellano errors.

    Subclass this for specific error categories.
    """

    pass


class ConfigError(RellanoError, ValueError):
    """Invalid scan configuration.

    Raised by ScanConfig when a field is outside its supported range.
    """

    def __init__(self, field_name: str, message: str) -> None:
        """Initialize config error.

        Args:
            field_name: Name of the offending ScanConfig field
            message: Description of the problem
        """
        self.field_name = field_name
        super().__init__(f"Invalid '{field_name}': {message}")


class StackUnderflowError(RellanoError):
    """Pop attempted on an indent stack holding only the base level."""

    def __init__(self, depth: int = 1) -> None:
        self.depth = depth
        super().__init__(f"Cannot pop indent stack below depth 1 (depth is {depth})")


class ScannerClosedError(RellanoError):
    """Scanner used after close()."""

    pass
