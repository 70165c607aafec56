"""Indent stack: the widths of the currently open indentation levels.

The bottom entry is always 0 (the top-level block) and every entry above it
is strictly wider than the one below. Capacity is bounded by
``ScanConfig.max_depth``; pushing past it is refused without raising.

"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from rellano.errors import StackUnderflowError


class IndentStack:
    """Growable stack of indentation widths with a fixed maximum depth.

    Usage:
        >>> stack = IndentStack()
        >>> stack.push(4)
        True
        >>> stack.top()
        4
        >>> stack.widths
        (0, 4)

    """

    __slots__ = ("_widths", "_max_depth")

    def __init__(self, max_depth: int = 100, widths: Iterable[int] | None = None) -> None:
        """Initialize with the base level, or from existing widths.

        Args:
            max_depth: Maximum depth, base level included
            widths: Optional widths bottom to top; must start with 0 and be
                strictly increasing (callers restoring untrusted data should
                go through the codec, which normalizes first)
        """
        self._max_depth = max_depth
        self._widths: list[int] = [0]
        if widths is not None:
            self._widths = list(widths)[:max_depth] or [0]

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def depth(self) -> int:
        """Number of open levels, base level included (always >= 1)."""
        return len(self._widths)

    @property
    def widths(self) -> tuple[int, ...]:
        """Snapshot of the widths, bottom to top."""
        return tuple(self._widths)

    @property
    def is_full(self) -> bool:
        return len(self._widths) >= self._max_depth

    def top(self) -> int:
        """Width of the innermost open level."""
        return self._widths[-1]

    def push(self, width: int) -> bool:
        """Open a new level.

        Returns:
            True if the level was recorded, False if the stack is at capacity
            (the width is dropped).
        """
        if len(self._widths) >= self._max_depth:
            return False
        self._widths.append(width)
        return True

    def pop(self) -> int:
        """Close the innermost level and return its width.

        Raises:
            StackUnderflowError: If only the base level is left.
        """
        if len(self._widths) <= 1:
            raise StackUnderflowError(len(self._widths))
        return self._widths.pop()

    def levels_above(self, width: int) -> int:
        """Count the open levels wider than width, never counting the base."""
        count = 0
        for level in reversed(self._widths[1:]):
            if level <= width:
                break
            count += 1
        return count

    def copy(self) -> IndentStack:
        return IndentStack(self._max_depth, self._widths)

    def __len__(self) -> int:
        return len(self._widths)

    def __iter__(self) -> Iterator[int]:
        return iter(self._widths)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndentStack):
            return NotImplemented
        return self._widths == other._widths

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"IndentStack({self._widths!r})"
