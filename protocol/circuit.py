"""Circuit interface consumed by the mock prover."""

from abc import ABC, abstractmethod
from typing import Any

from protocol.constraint_system import ConstraintSystem
from protocol.layouter import Layouter


class Circuit(ABC):
    """A circuit declares its shape once and synthesizes one witness per instance.

    configure() must only declare columns, gates and lookups; synthesize() must
    only assign values through the layouter. validate() is the host-level
    structural check that runs before either.
    """

    def validate(self) -> None:
        """Reject structurally malformed witnesses before synthesis."""
        pass

    @abstractmethod
    def configure(self, cs: ConstraintSystem) -> Any:
        """Declare the circuit shape on cs and return an immutable config."""
        pass

    @abstractmethod
    def synthesize(self, config: Any, layouter: Layouter) -> None:
        """Assign the witness for this instance."""
        pass
