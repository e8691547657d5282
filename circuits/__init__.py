"""Circuits - the Merkle sum tree solvency circuit and its parameters."""

from .merkle_sum_tree import (
    ASSETS_SUM_ROW,
    LEAF_BALANCE_ROW,
    LEAF_HASH_ROW,
    ROOT_HASH_ROW,
    MerkleSumTreeCircuit,
    MerkleSumTreeConfig,
    StructuralWitnessError,
)
from .params import CircuitParams

__all__ = [
    "CircuitParams",
    "MerkleSumTreeCircuit",
    "MerkleSumTreeConfig",
    "StructuralWitnessError",
    "LEAF_HASH_ROW",
    "LEAF_BALANCE_ROW",
    "ROOT_HASH_ROW",
    "ASSETS_SUM_ROW",
]
