"""Protocol - Plonkish constraint system, witness layout and the mock prover."""

from protocol.circuit import Circuit
from protocol.constraint_system import (
    Column,
    ColumnKind,
    ConstraintSystem,
    Gate,
    Lookup,
    Selector,
)
from protocol.data import Assignment, Cell
from protocol.layouter import (
    AssignedCell,
    Layouter,
    NotEnoughRowsError,
    Region,
    RegionInfo,
    Table,
)
from protocol.mock_prover import (
    ConstraintNotSatisfied,
    InRegion,
    MockProver,
    OutsideRegion,
    Permutation,
    VerifyFailure,
    verify_circuit,
)

__all__ = [
    # Shape
    "Column",
    "ColumnKind",
    "Selector",
    "Gate",
    "Lookup",
    "ConstraintSystem",
    "Circuit",
    # Witness
    "Assignment",
    "Cell",
    "AssignedCell",
    "Region",
    "RegionInfo",
    "Table",
    "Layouter",
    "NotEnoughRowsError",
    # Checking
    "MockProver",
    "VerifyFailure",
    "ConstraintNotSatisfied",
    "Permutation",
    "InRegion",
    "OutsideRegion",
    "verify_circuit",
]
