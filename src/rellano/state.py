"""Scan state: the unit of persisted scanner memory.

The state is the indent stack plus the number of DEDENT tokens still owed
after one line closed several levels at once. Only the scanner's commit step
mutates it; the codec persists and restores it wholesale.

"""

from __future__ import annotations

from dataclasses import dataclass, field

from rellano.stack import IndentStack


@dataclass(slots=True)
class ScanState:
    """Indent stack plus pending dedents.

    Invariant: ``pending_dedents < stack.depth``.

    Attributes:
        stack: Widths of the open levels
        pending_dedents: DEDENT tokens owed, surfaced one per scan call

    """

    stack: IndentStack = field(default_factory=IndentStack)
    pending_dedents: int = 0

    @classmethod
    def fresh(cls, max_depth: int = 100) -> ScanState:
        """State at the beginning of a document: stack ``[0]``, nothing owed."""
        return cls(stack=IndentStack(max_depth))

    @property
    def depth(self) -> int:
        return self.stack.depth

    @property
    def is_fresh(self) -> bool:
        return self.pending_dedents == 0 and self.stack.depth == 1

    def copy(self) -> ScanState:
        return ScanState(stack=self.stack.copy(), pending_dedents=self.pending_dedents)
