"""Capability interfaces for the sub-circuits the Merkle sum tree chip consumes.

A hash chip compresses two assigned cells into one; a comparator chip proves
lhs < rhs for operands known to fit its byte width. Any concrete chip that
implements the interface can be injected at configuration time without
touching the Merkle gate logic.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence

from primitives.field import FF
from protocol.constraint_system import Column, ConstraintSystem, Selector
from protocol.layouter import AssignedCell, Layouter, Region


class HashInstructions(ABC):
    """Two-to-one compression sub-circuit: out = Compress(left, right)."""

    @classmethod
    @abstractmethod
    def configure(cls, cs: ConstraintSystem, advice: Sequence[Column]) -> Any:
        """Declare the sub-circuit's gates, reusing the given advice columns.

        Args:
            cs: Constraint system under configuration
            advice: Equality-enabled advice columns the chip may lay its state in

        Returns:
            Immutable chip config
        """
        pass

    @abstractmethod
    def hash_two(self, layouter: Layouter, left: AssignedCell, right: AssignedCell) -> AssignedCell:
        """Copy left/right into a new region and return the compressed output cell."""
        pass

    @staticmethod
    @abstractmethod
    def compress(left: int, right: int) -> int:
        """Native (off-circuit) counterpart of hash_two."""
        pass


class LessThanInstructions(ABC):
    """Bounded comparator sub-circuit producing is_lt = [lhs < rhs]."""

    @classmethod
    @abstractmethod
    def configure(
        cls,
        cs: ConstraintSystem,
        q_enable: Selector,
        lhs: Callable[[Any], FF],
        rhs: Callable[[Any], FF],
        n_bytes: int,
    ) -> Any:
        """Declare the comparison gates on rows where q_enable is set.

        Args:
            cs: Constraint system under configuration
            q_enable: Selector of the caller's region row holding the operands
            lhs: Gate expression producing the left operand from a ConstraintContext
            rhs: Gate expression producing the right operand
            n_bytes: Operand width; operands must be below 256^n_bytes

        Returns:
            Immutable chip config exposing the `lt` column
        """
        pass

    @abstractmethod
    def load(self, layouter: Layouter) -> None:
        """Fill any lookup tables the chip relies on."""
        pass

    @abstractmethod
    def assign(self, region: Region, offset: int, lhs: FF, rhs: FF) -> AssignedCell:
        """Assign the comparison witness at offset and return the is_lt cell."""
        pass
