"""Base classes for gate evaluation.

ConstraintContext provides a uniform interface for gate evaluation that works
over the whole trace (returns arrays) and at a single row (returns scalars).
The same gate code is used in both contexts thanks to galois broadcasting.

Example:
    def eval_gate(ctx: ConstraintContext):
        a = ctx.col(col_a)
        b = ctx.next_col(col_a)
        return [ctx.selector(q) * (b - a * a)]

    # Whole trace: one array per constraint, zero wherever the gate holds
    trace_result = eval_gate(TraceConstraintContext(assignment))

    # Single row: scalars, plus the cells the gate touched
    row_ctx = RowConstraintContext(assignment, row=5)
    row_result = eval_gate(row_ctx)
    row_ctx.queried  # [(Column, rotation, value), ...]
"""

from abc import ABC, abstractmethod
from typing import List, Tuple

import numpy as np

from primitives.field import FF
from protocol.constraint_system import Column, Selector
from protocol.data import Assignment


class ConstraintContext(ABC):
    """Uniform interface for gate evaluation - whole trace or single row."""

    @abstractmethod
    def query(self, column: Column, rotation: int = 0) -> FF:
        """Get column values at row offset `rotation` from the current row.

        Returns:
            Trace: array of values at all rows (circular shift)
            Row: scalar value at (row + rotation) mod n
        """
        pass

    @abstractmethod
    def selector(self, selector: Selector) -> FF:
        """Get selector activation (0 or 1) at the current row."""
        pass

    def col(self, column: Column) -> FF:
        """Get column at current row."""
        return self.query(column, 0)

    def next_col(self, column: Column) -> FF:
        """Get column at next row (offset +1)."""
        return self.query(column, 1)

    def prev_col(self, column: Column) -> FF:
        """Get column at previous row (offset -1)."""
        return self.query(column, -1)


class TraceConstraintContext(ConstraintContext):
    """Evaluates gates at every row simultaneously, producing arrays."""

    def __init__(self, data: Assignment):
        self._data = data

    def query(self, column: Column, rotation: int = 0) -> FF:
        values = self._data.values(column)
        if rotation == 0:
            return values
        return np.roll(values, -rotation)

    def selector(self, selector: Selector) -> FF:
        return self._data.selector_values(selector)


class RowConstraintContext(ConstraintContext):
    """Evaluates gates at a single row, recording every queried cell.

    Used to explain a failure found by the trace evaluation.
    """

    def __init__(self, data: Assignment, row: int):
        self._data = data
        self.row = row
        self.queried: List[Tuple[Column, int, int]] = []

    def query(self, column: Column, rotation: int = 0) -> FF:
        value = self._data.value(column, (self.row + rotation) % self._data.n)
        entry = (column, rotation, int(value))
        if entry not in self.queried:
            self.queried.append(entry)
        return value

    def selector(self, selector: Selector) -> FF:
        return self._data.selector_values(selector)[self.row]
