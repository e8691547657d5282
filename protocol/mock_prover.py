"""Development prover: checks every constraint directly and explains failures.

MockProver evaluates each gate over the whole trace, each lookup row by row,
and each copy constraint cycle by cycle. verify() returns the list of
failures (empty when the witness satisfies the circuit). The detailed
failure list is a development facility; verify_circuit() is the accept/reject
view a verifier gets.

Example:
    prover = MockProver.run(9, circuit, [circuit.instance()])
    prover.assert_satisfied()
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from constraints.base import RowConstraintContext, TraceConstraintContext
from primitives.field import FieldLike, field_to_int
from protocol.circuit import Circuit
from protocol.constraint_system import Column, ColumnKind, ConstraintSystem
from protocol.data import Assignment, Cell
from protocol.layouter import Layouter, NotEnoughRowsError, RegionInfo


# --- Failure Locations ---

@dataclass(frozen=True)
class InRegion:
    region_index: int
    region_name: str
    offset: int

    def __str__(self) -> str:
        return f"in Region {self.region_index} ('{self.region_name}') at offset {self.offset}"


@dataclass(frozen=True)
class OutsideRegion:
    row: int

    def __str__(self) -> str:
        return f"outside any region, on row {self.row}"


Location = Union[InRegion, OutsideRegion]


# --- Failures ---

@dataclass(frozen=True)
class ConstraintNotSatisfied:
    """A gate identity evaluated to a nonzero value on some row.

    cell_values lists (column, rotation, value) for every cell the gate queried.
    """
    gate_index: int
    gate_name: str
    constraint_index: int
    constraint_name: str
    location: Location
    cell_values: Tuple[Tuple[Column, int, int], ...] = ()

    def __str__(self) -> str:
        cells = ", ".join(f"{c}@{rot}={hex(v)}" for c, rot, v in self.cell_values)
        return (
            f"Constraint {self.constraint_index} ('{self.constraint_name}') in gate "
            f"{self.gate_index} ('{self.gate_name}') is not satisfied {self.location} [{cells}]"
        )


@dataclass(frozen=True)
class Permutation:
    """A cell's value differs from the next cell in its copy-constraint cycle."""
    column: Column
    location: Location

    def __str__(self) -> str:
        return f"Equality constraint not satisfied by cell ({self.column}, {self.location})"


@dataclass(frozen=True)
class Lookup:
    """A lookup input tuple is absent from its table."""
    lookup_index: int
    lookup_name: str
    location: Location

    def __str__(self) -> str:
        return f"Lookup {self.lookup_index} ('{self.lookup_name}') is not satisfied {self.location}"


VerifyFailure = Union[ConstraintNotSatisfied, Permutation, Lookup]


# --- Mock Prover ---

def _nonzero_rows(values) -> np.ndarray:
    return np.flatnonzero(np.asarray(values).view(np.ndarray) != 0)


class MockProver:
    """Holds one synthesized assignment and checks it against the constraint system."""

    def __init__(
        self,
        k: int,
        cs: ConstraintSystem,
        assignment: Assignment,
        regions: List[RegionInfo],
        rows_used: int = 0,
    ):
        self.k = k
        self.n = 1 << k
        self.cs = cs
        self.assignment = assignment
        self.regions = regions
        self.rows_used = rows_used

    @classmethod
    def run(cls, k: int, circuit: Circuit, instances: Sequence[Sequence[FieldLike]]) -> "MockProver":
        """Configure, synthesize and return a prover ready for verify().

        Raises:
            ValueError: If the witness is structurally malformed or the public
                inputs do not match the instance columns
            NotEnoughRowsError: If the layout does not fit in 2^k rows
        """
        circuit.validate()

        cs = ConstraintSystem()
        config = circuit.configure(cs)
        cs.freeze()

        if len(instances) != cs.num_instance_columns:
            raise ValueError(
                f"Expected {cs.num_instance_columns} instance columns, got {len(instances)}"
            )

        n = 1 << k
        assignment = Assignment.empty(cs, n)
        for column, values in zip(cs.columns(ColumnKind.INSTANCE), instances):
            if len(values) > n:
                raise NotEnoughRowsError(f"{len(values)} public inputs do not fit in {n} rows")
            assignment.fill_instance(column, list(values))

        layouter = Layouter(cs, assignment)
        circuit.synthesize(config, layouter)
        return cls(k, cs, assignment, layouter.regions, layouter.rows_used)

    # --- Locations ---

    def _region_at(self, row: int) -> Optional[RegionInfo]:
        for region in self.regions:
            if region.contains(row):
                return region
        return None

    def _row_location(self, row: int) -> Location:
        region = self._region_at(row)
        if region is None:
            return OutsideRegion(row)
        return InRegion(region.index, region.name, row - region.start)

    def _cell_location(self, cell: Cell) -> Location:
        if cell.column.kind is ColumnKind.INSTANCE:
            return OutsideRegion(cell.row)
        return self._row_location(cell.row)

    # --- Checks ---

    def _check_gates(self) -> List[VerifyFailure]:
        failures: List[VerifyFailure] = []
        trace_ctx = TraceConstraintContext(self.assignment)
        for gate_index, gate in enumerate(self.cs.gates):
            results = gate.poly(trace_ctx)
            for constraint_index, values in enumerate(results):
                for row in _nonzero_rows(values):
                    row_ctx = RowConstraintContext(self.assignment, int(row))
                    gate.poly(row_ctx)
                    failures.append(ConstraintNotSatisfied(
                        gate_index=gate_index,
                        gate_name=gate.name,
                        constraint_index=constraint_index,
                        constraint_name=gate.constraint_name(constraint_index),
                        location=self._row_location(int(row)),
                        cell_values=tuple(row_ctx.queried),
                    ))
        return failures

    def _check_lookups(self) -> List[VerifyFailure]:
        failures: List[VerifyFailure] = []
        trace_ctx = TraceConstraintContext(self.assignment)
        for lookup_index, lookup in enumerate(self.cs.lookups):
            table_cols = [
                [field_to_int(v) for v in self.assignment.values(c)] for c in lookup.table
            ]
            table = set(zip(*table_cols))
            input_cols = [[field_to_int(v) for v in values] for values in lookup.inputs(trace_ctx)]
            for row, inputs in enumerate(zip(*input_cols)):
                if inputs not in table:
                    failures.append(Lookup(lookup_index, lookup.name, self._row_location(row)))
        return failures

    def _check_permutation(self) -> List[VerifyFailure]:
        failures: List[VerifyFailure] = []
        seen = set()
        for cell, successor in self.assignment.copy_pairs():
            lhs = field_to_int(self.assignment.value(cell.column, cell.row))
            rhs = field_to_int(self.assignment.value(successor.column, successor.row))
            if lhs != rhs:
                failure = Permutation(cell.column, self._cell_location(cell))
                if failure not in seen:
                    seen.add(failure)
                    failures.append(failure)
        return failures

    def verify(self) -> List[VerifyFailure]:
        """Return every failure; an empty list means the witness is accepted."""
        return self._check_gates() + self._check_lookups() + self._check_permutation()

    def assert_satisfied(self) -> None:
        failures = self.verify()
        if failures:
            rendered = "\n".join(f"  {f}" for f in failures)
            raise AssertionError(f"Circuit was not satisfied:\n{rendered}")


def verify_circuit(k: int, circuit: Circuit, instance: Sequence[FieldLike]) -> bool:
    """Accept/reject only: no information about which constraint failed."""
    return not MockProver.run(k, circuit, [instance]).verify()
