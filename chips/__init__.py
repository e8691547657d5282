"""Chips: reusable sub-circuits and their capability interfaces.

The Merkle sum tree chip consumes a hash chip and a comparator chip through
the HashInstructions / LessThanInstructions interfaces. The registries below
map the names used in CircuitParams to concrete implementations.
"""

from .base import HashInstructions, LessThanInstructions
from .less_than import LtChip, LtConfig
from .merkle_sum_tree import MerkleSumTreeChip, MerkleSumTreeChipConfig
from .poseidon import PoseidonChip, PoseidonConfig

# Registry mapping hash names to chip classes
HASH_CHIPS: dict[str, type[HashInstructions]] = {
    "poseidon": PoseidonChip,
}

# Registry mapping comparator names to chip classes
COMPARATOR_CHIPS: dict[str, type[LessThanInstructions]] = {
    "lt": LtChip,
}


def get_hash_chip(name: str) -> type[HashInstructions]:
    """Get hash chip class by name.

    Raises:
        KeyError: If no hash chip is registered under name
    """
    if name in HASH_CHIPS:
        return HASH_CHIPS[name]
    raise KeyError(f"No hash chip '{name}'. Available: {list(HASH_CHIPS.keys())}")


def get_comparator_chip(name: str) -> type[LessThanInstructions]:
    """Get comparator chip class by name.

    Raises:
        KeyError: If no comparator chip is registered under name
    """
    if name in COMPARATOR_CHIPS:
        return COMPARATOR_CHIPS[name]
    raise KeyError(f"No comparator chip '{name}'. Available: {list(COMPARATOR_CHIPS.keys())}")


__all__ = [
    "HashInstructions",
    "LessThanInstructions",
    "PoseidonChip",
    "PoseidonConfig",
    "LtChip",
    "LtConfig",
    "MerkleSumTreeChip",
    "MerkleSumTreeChipConfig",
    "HASH_CHIPS",
    "COMPARATOR_CHIPS",
    "get_hash_chip",
    "get_comparator_chip",
]
