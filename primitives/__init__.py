"""Primitives - Field arithmetic, Poseidon hashing and the off-circuit Merkle sum tree."""

from primitives.field import (
    BN254_PRIME,
    FF,
    compose_bytes,
    decompose_bytes,
    field_to_int,
    fits_in_bytes,
    is_canonical,
    to_field,
)
from primitives.merkle_sum_tree import (
    Entry,
    MerkleProof,
    MerkleSumTree,
    Node,
    ProofStep,
    parse_csv,
    verify_proof,
)
from primitives.poseidon import (
    CAPACITY_TAG,
    N_ROUNDS,
    WIDTH,
    permute,
    poseidon_compress,
)

__all__ = [
    # Field
    "FF",
    "BN254_PRIME",
    "is_canonical",
    "to_field",
    "field_to_int",
    "fits_in_bytes",
    "decompose_bytes",
    "compose_bytes",
    # Poseidon
    "WIDTH",
    "N_ROUNDS",
    "CAPACITY_TAG",
    "permute",
    "poseidon_compress",
    # Merkle Sum Tree
    "Entry",
    "Node",
    "ProofStep",
    "MerkleProof",
    "MerkleSumTree",
    "parse_csv",
    "verify_proof",
]
