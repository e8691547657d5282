"""Circuit parameters: the fixed shape shared by every proof instance.

Example:
    params = CircuitParams.from_json("params.json")
    circuit = MerkleSumTreeCircuit.from_proof(proof, assets_sum, params=params)
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Union

from chips import COMPARATOR_CHIPS, HASH_CHIPS
from primitives.merkle_sum_tree import DEFAULT_N_BYTES

DEFAULT_K = 9


@dataclass(frozen=True)
class CircuitParams:
    """Shape of a Merkle sum tree circuit.

    Attributes:
        depth: Number of tree levels (= number of proof steps)
        n_bytes: Comparator width; balances and sums must be below 256^n_bytes
        k: log2 of the number of trace rows
        hasher: Name of the hash chip (see chips.HASH_CHIPS)
        comparator: Name of the comparator chip (see chips.COMPARATOR_CHIPS)
    """
    depth: int
    n_bytes: int = DEFAULT_N_BYTES
    k: int = DEFAULT_K
    hasher: str = "poseidon"
    comparator: str = "lt"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raises ValueError on an unusable parameter set."""
        if self.depth < 1:
            raise ValueError(f"depth must be at least 1, got {self.depth}")
        if not 1 <= self.n_bytes <= 31:
            raise ValueError(f"n_bytes must be in [1, 31], got {self.n_bytes}")
        # The u8 lookup table alone needs 256 rows.
        if self.k < 8:
            raise ValueError(f"k must be at least 8, got {self.k}")
        if self.hasher not in HASH_CHIPS:
            raise ValueError(f"Unknown hasher '{self.hasher}'. Available: {list(HASH_CHIPS.keys())}")
        if self.comparator not in COMPARATOR_CHIPS:
            raise ValueError(
                f"Unknown comparator '{self.comparator}'. Available: {list(COMPARATOR_CHIPS.keys())}"
            )

    @property
    def max_balance(self) -> int:
        """Exclusive upper bound for balances and sums."""
        return 1 << (8 * self.n_bytes)

    @classmethod
    def from_dict(cls, data: dict) -> "CircuitParams":
        unknown = set(data) - {"depth", "n_bytes", "k", "hasher", "comparator"}
        if unknown:
            raise ValueError(f"Unknown circuit parameters: {sorted(unknown)}")
        if "depth" not in data:
            raise ValueError("Circuit parameters must include 'depth'")
        return cls(**data)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "CircuitParams":
        with open(path) as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> dict:
        return asdict(self)
