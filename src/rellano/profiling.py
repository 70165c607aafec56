"""ScanAccumulator: opt-in profiling for scanner calls.

This module provides accumulated metrics while scanning:
- Number of scan calls and how many were declined
- Tokens emitted per kind
- Wall time of the profiled block

Zero overhead when disabled (get_scan_accumulator() returns None).

Example:
    from rellano import tokenize
    from rellano.profiling import profiled_scan

    with profiled_scan() as metrics:
        tokens = list(tokenize(source))

    print(metrics.summary())
    # {"total_ms": 0.4, "scan_calls": 12, "declined": 5, "tokens": {...}}

"""

from collections import Counter
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any

from rellano.tokens import TokenKind


@dataclass
class ScanAccumulator:
    """Accumulated metrics for scanner calls.

    Attributes:
        start_time: Profiling start timestamp.
        scan_calls: Number of Scanner.scan() calls.
        declined: Calls that returned no token.
        emitted: Tokens emitted, by kind.

    """

    start_time: float = field(default_factory=perf_counter)
    scan_calls: int = 0
    declined: int = 0
    emitted: Counter[TokenKind] = field(default_factory=Counter)

    def record_scan(self, kind: TokenKind | None) -> None:
        """Record the outcome of one scan call."""
        self.scan_calls += 1
        if kind is None:
            self.declined += 1
        else:
            self.emitted[kind] += 1

    @property
    def total_duration_ms(self) -> float:
        """Total profiling duration in milliseconds."""
        return (perf_counter() - self.start_time) * 1000

    def summary(self) -> dict[str, Any]:
        """Get summary of scan metrics.

        Returns:
            Dict with total_ms, scan_calls, declined and per-kind token counts.

        """
        return {
            "total_ms": round(self.total_duration_ms, 2),
            "scan_calls": self.scan_calls,
            "declined": self.declined,
            "tokens": {kind.name: self.emitted[kind] for kind in TokenKind},
        }


_accumulator: ContextVar[ScanAccumulator | None] = ContextVar(
    "scan_accumulator",
    default=None,
)


def get_scan_accumulator() -> ScanAccumulator | None:
    """Get current accumulator (None if profiling disabled)."""
    return _accumulator.get()


@contextmanager
def profiled_scan() -> Iterator[ScanAccumulator]:
    """Context manager for profiled scanning.

    Creates a ScanAccumulator and makes it available via
    get_scan_accumulator() for the duration of the with block.

    Yields:
        ScanAccumulator populated by every scan call in the block.

    """
    acc = ScanAccumulator()
    token: Token[ScanAccumulator | None] = _accumulator.set(acc)
    try:
        yield acc
    finally:
        _accumulator.reset(token)
