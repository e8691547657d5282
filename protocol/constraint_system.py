"""Constraint system declaration: columns, selectors, gates, lookups, equality.

The ConstraintSystem is the circuit *shape*. A circuit's configure() declares
everything on it once; MockProver then freezes it, so witness synthesis can
read the shape but never extend it.

Gates are plain Python callables evaluated against a ConstraintContext. The
same gate code runs over the whole trace (arrays) or at a single row (scalars)
thanks to galois broadcasting:

    def bool_gate(ctx):
        q = ctx.selector(q_layer)
        bit = ctx.col(e)
        return [q * bit * (FF(1) - bit)]

    cs.create_gate("bool constraint", bool_gate)
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Sequence, Set, Tuple

if TYPE_CHECKING:
    from constraints.base import ConstraintContext


class ColumnKind(Enum):
    ADVICE = "Advice"
    FIXED = "Fixed"
    INSTANCE = "Instance"


@dataclass(frozen=True)
class Column:
    """A column of the trace, identified by kind and per-kind index."""
    kind: ColumnKind
    index: int

    def __str__(self) -> str:
        return f"Column('{self.kind.value}', {self.index})"


@dataclass(frozen=True)
class Selector:
    """Boolean fixed column that switches a gate on for a row."""
    index: int

    def __str__(self) -> str:
        return f"Selector({self.index})"


GateFn = Callable[["ConstraintContext"], list]


@dataclass(frozen=True)
class Gate:
    """Named set of polynomial identities; every returned value must be zero."""
    name: str
    poly: GateFn
    constraint_names: Tuple[str, ...] = ()

    def constraint_name(self, index: int) -> str:
        if index < len(self.constraint_names):
            return self.constraint_names[index]
        return ""


@dataclass(frozen=True)
class Lookup:
    """Every row's input tuple must appear as a row of the table columns."""
    name: str
    inputs: GateFn
    table: Tuple[Column, ...]


class ConstraintSystem:
    """Mutable during configure(), sealed with freeze() afterwards."""

    def __init__(self):
        self.num_advice_columns = 0
        self.num_fixed_columns = 0
        self.num_instance_columns = 0
        self.num_selectors = 0
        self.gates: List[Gate] = []
        self.lookups: List[Lookup] = []
        self.equality_columns: Set[Column] = set()
        self._frozen = False

    # --- Sealing ---

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("ConstraintSystem is frozen; declare columns and gates in configure()")

    # --- Columns ---

    def advice_column(self) -> Column:
        self._check_mutable()
        column = Column(ColumnKind.ADVICE, self.num_advice_columns)
        self.num_advice_columns += 1
        return column

    def fixed_column(self) -> Column:
        self._check_mutable()
        column = Column(ColumnKind.FIXED, self.num_fixed_columns)
        self.num_fixed_columns += 1
        return column

    def instance_column(self) -> Column:
        self._check_mutable()
        column = Column(ColumnKind.INSTANCE, self.num_instance_columns)
        self.num_instance_columns += 1
        return column

    def lookup_table_column(self) -> Column:
        """Fixed column reserved for a lookup table."""
        return self.fixed_column()

    def selector(self) -> Selector:
        self._check_mutable()
        selector = Selector(self.num_selectors)
        self.num_selectors += 1
        return selector

    def enable_equality(self, column: Column) -> None:
        """Allow copy constraints to and from this column."""
        self._check_mutable()
        self.equality_columns.add(column)

    def columns(self, kind: ColumnKind) -> List[Column]:
        count = {
            ColumnKind.ADVICE: self.num_advice_columns,
            ColumnKind.FIXED: self.num_fixed_columns,
            ColumnKind.INSTANCE: self.num_instance_columns,
        }[kind]
        return [Column(kind, i) for i in range(count)]

    # --- Constraints ---

    def create_gate(self, name: str, poly: GateFn, constraint_names: Sequence[str] = ()) -> Gate:
        self._check_mutable()
        gate = Gate(name, poly, tuple(constraint_names))
        self.gates.append(gate)
        return gate

    def lookup(self, name: str, inputs: GateFn, table: Sequence[Column]) -> Lookup:
        self._check_mutable()
        for column in table:
            if column.kind is not ColumnKind.FIXED:
                raise ValueError(f"Lookup table column {column} must be fixed")
        lookup = Lookup(name, inputs, tuple(table))
        self.lookups.append(lookup)
        return lookup
