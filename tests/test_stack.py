"""Tests for rellano.stack and rellano.state."""

import pytest

from rellano.errors import RellanoError, StackUnderflowError
from rellano.stack import IndentStack
from rellano.state import ScanState


class TestIndentStack:
    def test_starts_with_base_level(self) -> None:
        stack = IndentStack()
        assert stack.depth == 1
        assert stack.top() == 0
        assert list(stack) == [0]

    def test_push_and_pop(self) -> None:
        stack = IndentStack()
        assert stack.push(4) is True
        assert stack.push(8) is True
        assert stack.top() == 8
        assert stack.pop() == 8
        assert stack.pop() == 4
        assert stack.widths == (0,)

    def test_pop_base_level_raises(self) -> None:
        stack = IndentStack()
        with pytest.raises(StackUnderflowError):
            stack.pop()
        assert stack.depth == 1

    def test_underflow_is_a_rellano_error(self) -> None:
        with pytest.raises(RellanoError, match="below depth 1"):
            IndentStack().pop()

    def test_push_at_capacity_is_refused(self) -> None:
        stack = IndentStack(max_depth=3)
        assert stack.push(2)
        assert stack.push(4)
        assert stack.is_full
        assert stack.push(6) is False
        assert stack.widths == (0, 2, 4)

    def test_levels_above(self) -> None:
        stack = IndentStack(widths=[0, 4, 8, 12])
        assert stack.levels_above(12) == 0
        assert stack.levels_above(8) == 1
        assert stack.levels_above(6) == 2
        assert stack.levels_above(0) == 3

    def test_levels_above_never_counts_base(self) -> None:
        assert IndentStack().levels_above(0) == 0

    def test_widths_truncated_to_max_depth(self) -> None:
        stack = IndentStack(max_depth=2, widths=[0, 4, 8])
        assert stack.widths == (0, 4)

    def test_empty_widths_fall_back_to_base(self) -> None:
        assert IndentStack(widths=[]).widths == (0,)

    def test_copy_is_independent(self) -> None:
        stack = IndentStack(widths=[0, 4])
        clone = stack.copy()
        clone.push(8)
        assert stack.widths == (0, 4)
        assert clone.max_depth == stack.max_depth

    def test_equality(self) -> None:
        assert IndentStack(widths=[0, 4]) == IndentStack(widths=[0, 4])
        assert IndentStack(widths=[0, 4]) != IndentStack(widths=[0, 2])
        assert IndentStack() != [0]

    def test_len_matches_depth(self) -> None:
        assert len(IndentStack(widths=[0, 1, 2])) == 3


class TestScanState:
    def test_fresh(self) -> None:
        state = ScanState.fresh()
        assert state.is_fresh
        assert state.depth == 1
        assert state.pending_dedents == 0

    def test_fresh_respects_max_depth(self) -> None:
        assert ScanState.fresh(max_depth=5).stack.max_depth == 5

    def test_not_fresh_with_open_level(self) -> None:
        state = ScanState.fresh()
        state.stack.push(4)
        assert not state.is_fresh

    def test_copy_is_deep(self) -> None:
        state = ScanState(stack=IndentStack(widths=[0, 4]), pending_dedents=1)
        clone = state.copy()
        clone.stack.pop()
        clone.pending_dedents = 0
        assert state.stack.widths == (0, 4)
        assert state.pending_dedents == 1

    def test_equality(self) -> None:
        a = ScanState(stack=IndentStack(widths=[0, 4]), pending_dedents=0)
        b = ScanState(stack=IndentStack(widths=[0, 4]), pending_dedents=0)
        assert a == b
        b.pending_dedents = 1
        assert a != b
