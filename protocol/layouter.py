"""Regions and layouter: how chips place witness values into the trace.

Regions are laid out one after another (each starts on the row after the
previous region's last row). Lookup tables fill their own fixed columns from
row 0 and do not take part in region placement.
"""

from dataclasses import dataclass
from typing import Callable, List, TypeVar

from primitives.field import FF, FieldLike
from protocol.constraint_system import Column, ColumnKind, ConstraintSystem, Selector
from protocol.data import Assignment, Cell

T = TypeVar("T")


class NotEnoughRowsError(ValueError):
    """The circuit layout does not fit into 2^k rows."""


@dataclass(frozen=True)
class AssignedCell:
    """A cell together with the value assigned to it."""
    cell: Cell
    value: FF

    def copy_advice(self, annotation: str, region: "Region", column: Column, offset: int) -> "AssignedCell":
        """Assign this value into region at (column, offset) and constrain both cells equal."""
        assigned = region.assign_advice(annotation, column, offset, self.value)
        region.constrain_equal(self, assigned)
        return assigned


@dataclass(frozen=True)
class RegionInfo:
    index: int
    name: str
    start: int
    height: int

    def contains(self, row: int) -> bool:
        return self.start <= row < self.start + self.height


def _require_equality(cs: ConstraintSystem, column: Column) -> None:
    if column not in cs.equality_columns:
        raise ValueError(f"{column} is not enabled for equality constraints")


class Region:
    """Assignment API for one named region; offsets are relative to its first row."""

    def __init__(self, cs: ConstraintSystem, assignment: Assignment, index: int, name: str, start: int):
        self._cs = cs
        self._assignment = assignment
        self.index = index
        self.name = name
        self.start = start
        self.height = 0

    def _row(self, offset: int) -> int:
        if offset < 0:
            raise ValueError(f"Negative offset {offset} in region '{self.name}'")
        row = self.start + offset
        if row >= self._assignment.n:
            raise NotEnoughRowsError(
                f"Region '{self.name}' needs row {row} but only {self._assignment.n} rows are available"
            )
        self.height = max(self.height, offset + 1)
        return row

    def assign_advice(self, annotation: str, column: Column, offset: int, value: FieldLike) -> AssignedCell:
        if column.kind is not ColumnKind.ADVICE:
            raise ValueError(f"{column} is not an advice column")
        row = self._row(offset)
        assigned = self._assignment.assign(column, row, value, annotation)
        return AssignedCell(Cell(column, row), assigned)

    def assign_fixed(self, annotation: str, column: Column, offset: int, value: FieldLike) -> AssignedCell:
        if column.kind is not ColumnKind.FIXED:
            raise ValueError(f"{column} is not a fixed column")
        row = self._row(offset)
        assigned = self._assignment.assign(column, row, value, annotation)
        return AssignedCell(Cell(column, row), assigned)

    def assign_advice_from_instance(
        self, annotation: str, instance: Column, instance_row: int, column: Column, offset: int
    ) -> AssignedCell:
        """Copy a public input into an advice cell, constraining both equal."""
        _require_equality(self._cs, instance)
        value = self._assignment.value(instance, instance_row)
        assigned = self.assign_advice(annotation, column, offset, value)
        _require_equality(self._cs, column)
        self._assignment.copy(Cell(instance, instance_row), assigned.cell)
        return assigned

    def enable_selector(self, selector: Selector, offset: int) -> None:
        self._assignment.enable_selector(selector, self._row(offset))

    def constrain_equal(self, left: AssignedCell, right: AssignedCell) -> None:
        _require_equality(self._cs, left.cell.column)
        _require_equality(self._cs, right.cell.column)
        self._assignment.copy(left.cell, right.cell)


class Table:
    """Assignment API for a lookup table; rows are absolute."""

    def __init__(self, assignment: Assignment, name: str):
        self._assignment = assignment
        self.name = name

    def assign_cell(self, annotation: str, column: Column, row: int, value: FieldLike) -> None:
        if column.kind is not ColumnKind.FIXED:
            raise ValueError(f"Table column {column} must be fixed")
        if row >= self._assignment.n:
            raise NotEnoughRowsError(
                f"Table '{self.name}' needs row {row} but only {self._assignment.n} rows are available"
            )
        self._assignment.assign(column, row, value, annotation)


class Layouter:
    """Sequential floor planner."""

    def __init__(self, cs: ConstraintSystem, assignment: Assignment):
        self._cs = cs
        self._assignment = assignment
        self._next_row = 0
        self.regions: List[RegionInfo] = []

    def assign_region(self, name: str, assignment_fn: Callable[[Region], T]) -> T:
        region = Region(self._cs, self._assignment, len(self.regions), name, self._next_row)
        result = assignment_fn(region)
        self.regions.append(RegionInfo(region.index, name, region.start, region.height))
        self._next_row += region.height
        return result

    def assign_table(self, name: str, assignment_fn: Callable[[Table], None]) -> None:
        assignment_fn(Table(self._assignment, name))

    def constrain_instance(self, cell: AssignedCell, instance: Column, row: int) -> None:
        """Bind an assigned cell to a row of the public-input column."""
        if instance.kind is not ColumnKind.INSTANCE:
            raise ValueError(f"{instance} is not an instance column")
        _require_equality(self._cs, cell.cell.column)
        _require_equality(self._cs, instance)
        self._assignment.copy(cell.cell, Cell(instance, row))

    @property
    def rows_used(self) -> int:
        return self._next_row
