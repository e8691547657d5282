"""Trace storage for one witness synthesis run.

Architecture Overview:
    1. ConstraintSystem (protocol/constraint_system.py)
       - Shape: column counts, gates, lookups, equality-enabled columns
       - Shared by every instance of a circuit, never written during synthesis

    2. Assignment (this module)
       - Values of every advice/fixed/instance column and selector, as FF arrays
       - Copy constraints grouped into permutation cycles
       - Created fresh for each CircuitInstance, discarded after checking

Usage:
    assignment = Assignment.empty(cs, n=1 << k)
    assignment.assign(column, row, value)
    ctx = TraceConstraintContext(assignment)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from primitives.field import FF, FieldLike, to_field
from protocol.constraint_system import Column, ColumnKind, ConstraintSystem, Selector


@dataclass(frozen=True)
class Cell:
    """Absolute position of one value in the trace."""
    column: Column
    row: int


@dataclass
class Assignment:
    """Column values and copy constraints of one synthesis run.

    Attributes:
        n: Number of rows (2^k)
        columns: Values keyed by Column, one FF array of length n each
        selectors: Selector activations, FF arrays of 0/1
        annotations: Human-readable names of assigned cells
        cycles: Permutation cycles; every cell in a cycle must hold the same value
    """
    n: int
    columns: Dict[Column, FF] = field(default_factory=dict)
    selectors: Dict[Selector, FF] = field(default_factory=dict)
    annotations: Dict[Cell, str] = field(default_factory=dict)
    cycles: List[List[Cell]] = field(default_factory=list)
    _cycle_of: Dict[Cell, int] = field(default_factory=dict, repr=False)

    @classmethod
    def empty(cls, cs: ConstraintSystem, n: int) -> "Assignment":
        assignment = cls(n=n)
        for kind in ColumnKind:
            for column in cs.columns(kind):
                assignment.columns[column] = FF.Zeros(n)
        for i in range(cs.num_selectors):
            assignment.selectors[Selector(i)] = FF.Zeros(n)
        return assignment

    # --- Values ---

    def _check_row(self, row: int) -> None:
        if row < 0 or row >= self.n:
            raise IndexError(f"Row {row} out of range [0, {self.n})")

    def values(self, column: Column) -> FF:
        return self.columns[column]

    def value(self, column: Column, row: int) -> FF:
        self._check_row(row)
        return self.columns[column][row]

    def assign(self, column: Column, row: int, value: FieldLike, annotation: str = "") -> FF:
        self._check_row(row)
        self.columns[column][row] = to_field(value)
        if annotation:
            self.annotations[Cell(column, row)] = annotation
        return self.columns[column][row]

    def selector_values(self, selector: Selector) -> FF:
        return self.selectors[selector]

    def enable_selector(self, selector: Selector, row: int) -> None:
        self._check_row(row)
        self.selectors[selector][row] = 1

    def fill_instance(self, column: Column, values: List[FieldLike]) -> None:
        if len(values) > self.n:
            raise ValueError(f"{len(values)} public inputs do not fit in {self.n} rows")
        for row, value in enumerate(values):
            self.assign(column, row, value)

    # --- Copy Constraints ---

    def copy(self, left: Cell, right: Cell) -> None:
        """Record left == right, merging the permutation cycles of both cells."""
        self._check_row(left.row)
        self._check_row(right.row)
        lc: Optional[int] = self._cycle_of.get(left)
        rc: Optional[int] = self._cycle_of.get(right)

        if lc is None and rc is None:
            self._cycle_of[left] = self._cycle_of[right] = len(self.cycles)
            self.cycles.append([left] if left == right else [left, right])
        elif rc is None:
            self.cycles[lc].append(right)
            self._cycle_of[right] = lc
        elif lc is None:
            self.cycles[rc].append(left)
            self._cycle_of[left] = rc
        elif lc != rc:
            for cell in self.cycles[rc]:
                self._cycle_of[cell] = lc
            self.cycles[lc].extend(self.cycles[rc])
            self.cycles[rc] = []

    def copy_pairs(self) -> List[Tuple[Cell, Cell]]:
        """(cell, successor) pairs of every non-trivial cycle."""
        pairs = []
        for cycle in self.cycles:
            if len(cycle) < 2:
                continue
            for i, cell in enumerate(cycle):
                pairs.append((cell, cycle[(i + 1) % len(cycle)]))
        return pairs
