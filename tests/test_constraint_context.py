"""Tests for ConstraintContext ABC and implementations."""

import numpy as np

from primitives.field import FF
from protocol.constraint_system import ConstraintSystem


def _assignment_with(values):
    from protocol.data import Assignment

    cs = ConstraintSystem()
    column = cs.advice_column()
    selector = cs.selector()
    assignment = Assignment.empty(cs, len(values))
    for row, value in enumerate(values):
        assignment.assign(column, row, value)
    return assignment, column, selector


def test_trace_context_col_returns_array() -> None:
    """TraceConstraintContext.col returns the full column."""
    from constraints.base import TraceConstraintContext

    assignment, a, _ = _assignment_with([1, 2, 3, 4, 5, 6, 7, 8])
    ctx = TraceConstraintContext(assignment)

    result = ctx.col(a)
    assert len(result) == 8
    assert np.array_equal(result, FF([1, 2, 3, 4, 5, 6, 7, 8]))


def test_trace_context_next_col_shifts() -> None:
    """TraceConstraintContext.next_col shifts values by -1 (circular)."""
    from constraints.base import TraceConstraintContext

    assignment, a, _ = _assignment_with([1, 2, 3, 4, 5, 6, 7, 8])
    ctx = TraceConstraintContext(assignment)

    # [1,2,3,4,5,6,7,8] -> [2,3,4,5,6,7,8,1]
    assert np.array_equal(ctx.next_col(a), FF([2, 3, 4, 5, 6, 7, 8, 1]))


def test_trace_context_prev_col_shifts() -> None:
    """TraceConstraintContext.prev_col shifts values by +1 (circular)."""
    from constraints.base import TraceConstraintContext

    assignment, a, _ = _assignment_with([1, 2, 3, 4, 5, 6, 7, 8])
    ctx = TraceConstraintContext(assignment)

    # [1,2,3,4,5,6,7,8] -> [8,1,2,3,4,5,6,7]
    assert np.array_equal(ctx.prev_col(a), FF([8, 1, 2, 3, 4, 5, 6, 7]))


def test_trace_context_selector_returns_array() -> None:
    """TraceConstraintContext.selector returns the full activation column."""
    from constraints.base import TraceConstraintContext

    assignment, _, q = _assignment_with([0, 0, 0, 0])
    assignment.enable_selector(q, 2)
    ctx = TraceConstraintContext(assignment)

    assert np.array_equal(ctx.selector(q), FF([0, 0, 1, 0]))


def test_row_context_col_returns_scalar() -> None:
    """RowConstraintContext.col returns the value at its row."""
    from constraints.base import RowConstraintContext

    assignment, a, _ = _assignment_with([1, 2, 3, 4])
    ctx = RowConstraintContext(assignment, row=2)

    assert ctx.col(a) == FF(3)
    assert ctx.next_col(a) == FF(4)
    assert ctx.prev_col(a) == FF(2)


def test_row_context_wraps_around() -> None:
    """RowConstraintContext rotations wrap modulo the row count."""
    from constraints.base import RowConstraintContext

    assignment, a, _ = _assignment_with([1, 2, 3, 4])
    ctx = RowConstraintContext(assignment, row=3)

    assert ctx.next_col(a) == FF(1)


def test_row_context_records_queried_cells() -> None:
    """Each distinct (column, rotation) is recorded once with its value."""
    from constraints.base import RowConstraintContext

    assignment, a, _ = _assignment_with([1, 2, 3, 4])
    ctx = RowConstraintContext(assignment, row=1)

    ctx.col(a)
    ctx.next_col(a)
    ctx.col(a)
    assert ctx.queried == [(a, 0, 2), (a, 1, 3)]


def test_same_gate_both_contexts_agree() -> None:
    """Trace evaluation at row i equals row evaluation at i."""
    from constraints.base import RowConstraintContext, TraceConstraintContext

    assignment, a, q = _assignment_with([1, 2, 4, 9])
    for row in range(4):
        assignment.enable_selector(q, row)

    def gate(ctx):
        return [ctx.selector(q) * (ctx.next_col(a) - ctx.col(a) * FF(2))]

    trace_result = gate(TraceConstraintContext(assignment))[0]
    for row in range(4):
        row_result = gate(RowConstraintContext(assignment, row))[0]
        assert trace_result[row] == row_result
