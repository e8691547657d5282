"""Merkle sum tree solvency circuit.

Proves, for one user, that (leaf_hash, leaf_balance) is a leaf of the Merkle
sum tree with root root_hash, and that the tree's total balance is strictly
below assets_sum. Public inputs, in order:

    [leaf_hash, leaf_balance, root_hash, assets_sum]

Synthesis:
    1. assign the leaf and bind it to instance rows 0 and 1
    2. fold the per-level gate over the proof steps, leaf to root; each level's
       output cells are copied into the next level's input cells
    3. enforce final_sum < assets_sum (instance row 3)
    4. bind the final hash to instance row 2

An invalid witness is not an exception: it produces an assignment that fails
verification. Only structural problems (wrong depth, values outside the field
or the comparator width) raise, from validate().
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from chips import MerkleSumTreeChip, MerkleSumTreeChipConfig, get_comparator_chip, get_hash_chip
from chips.merkle_sum_tree import (
    ASSETS_SUM_ROW,
    LEAF_BALANCE_ROW,
    LEAF_HASH_ROW,
    N_ADVICE,
    ROOT_HASH_ROW,
)
from primitives.field import is_canonical
from primitives.merkle_sum_tree import MerkleProof, MerkleSumTree, Node, ProofStep
from protocol.circuit import Circuit
from protocol.constraint_system import ConstraintSystem
from protocol.layouter import Layouter
from protocol.mock_prover import MockProver
from .params import DEFAULT_N_BYTES, CircuitParams

__all__ = [
    "StructuralWitnessError",
    "MerkleSumTreeConfig",
    "MerkleSumTreeCircuit",
    "ASSETS_SUM_ROW",
    "LEAF_BALANCE_ROW",
    "LEAF_HASH_ROW",
    "ROOT_HASH_ROW",
]


class StructuralWitnessError(ValueError):
    """Witness rejected before synthesis: wrong shape or out-of-range values."""


@dataclass(frozen=True)
class MerkleSumTreeConfig:
    params: CircuitParams
    chip: MerkleSumTreeChipConfig


@dataclass
class MerkleSumTreeCircuit(Circuit):
    """One proof instance: leaf witness, path, assets sum and claimed root.

    Attributes:
        leaf_hash: Hash of the user's leaf
        leaf_balance: The user's balance
        path_element_hashes: Sibling hashes, leaf level first
        path_element_balances: Sibling sums, leaf level first
        path_indices: 0 (node is left child) / 1 (right child) per level
        assets_sum: Publicly disclosed total assets
        root_hash: Root the prover claims (public input)
        params: Circuit shape. When omitted, depth is taken from the path
            length, so the depth check in validate() only compares the
            three path lists with each other. Callers that fix the circuit
            shape up front (verifiers, the CLI with --params) pass it explicitly.
    """
    leaf_hash: int
    leaf_balance: int
    path_element_hashes: List[int]
    path_element_balances: List[int]
    path_indices: List[int]
    assets_sum: int
    root_hash: int
    params: Optional[CircuitParams] = None

    def __post_init__(self):
        if self.params is None:
            self.params = CircuitParams(depth=max(len(self.path_element_hashes), 1))

    # --- Construction ---

    @classmethod
    def from_proof(
        cls, proof: MerkleProof, assets_sum: int, params: Optional[CircuitParams] = None
    ) -> "MerkleSumTreeCircuit":
        """Instantiate the circuit from an off-circuit proof.

        Pass params to pin the depth; otherwise it follows the proof length.
        """
        leaf = proof.entry.compute_leaf()
        return cls(
            leaf_hash=leaf.hash,
            leaf_balance=leaf.balance,
            path_element_hashes=list(proof.sibling_hashes),
            path_element_balances=list(proof.sibling_sums),
            path_indices=list(proof.path_indices),
            assets_sum=assets_sum,
            root_hash=proof.root_hash,
            params=params,
        )

    @classmethod
    def init_from_assets_and_path(
        cls,
        assets_sum: int,
        path: Union[str, Path],
        user_index: int = 0,
        params: Optional[CircuitParams] = None,
    ) -> "MerkleSumTreeCircuit":
        """Build the tree from a ledger CSV and instantiate the circuit for one user."""
        n_bytes = params.n_bytes if params is not None else DEFAULT_N_BYTES
        tree = MerkleSumTree.from_csv(path, n_bytes=n_bytes)
        return cls.from_proof(tree.generate_proof(user_index), assets_sum, params=params)

    # --- Views ---

    @property
    def leaf(self) -> Node:
        return Node(self.leaf_hash, self.leaf_balance)

    @property
    def steps(self) -> List[ProofStep]:
        return [
            ProofStep(h, s, b)
            for h, s, b in zip(self.path_element_hashes, self.path_element_balances, self.path_indices)
        ]

    def instance(self) -> List[int]:
        """Public input vector [leaf_hash, leaf_balance, root_hash, assets_sum]."""
        return [self.leaf_hash, self.leaf_balance, self.root_hash, self.assets_sum]

    # --- Circuit ---

    def validate(self) -> None:
        """Structural precondition check.

        Raises:
            StructuralWitnessError: If the number of proof steps differs from
                params.depth, or any value is not a canonical field element, or
                a balance/sum does not fit the comparator width
        """
        depth = self.params.depth
        lengths = {
            "path_element_hashes": len(self.path_element_hashes),
            "path_element_balances": len(self.path_element_balances),
            "path_indices": len(self.path_indices),
        }
        for name, length in lengths.items():
            if length != depth:
                raise StructuralWitnessError(f"{name} has {length} entries, circuit depth is {depth}")

        values = [("leaf_hash", self.leaf_hash), ("leaf_balance", self.leaf_balance),
                  ("assets_sum", self.assets_sum), ("root_hash", self.root_hash)]
        for i, step in enumerate(self.steps):
            values += [(f"path_element_hashes[{i}]", step.sibling_hash),
                       (f"path_element_balances[{i}]", step.sibling_sum),
                       (f"path_indices[{i}]", step.path_bit)]
        for name, value in values:
            if not isinstance(value, int) or not is_canonical(value):
                raise StructuralWitnessError(f"{name} = {value!r} is not a canonical field element")

        bounded = [("leaf_balance", self.leaf_balance), ("assets_sum", self.assets_sum)]
        bounded += [(f"path_element_balances[{i}]", s) for i, s in enumerate(self.path_element_balances)]
        for name, value in bounded:
            if value >= self.params.max_balance:
                raise StructuralWitnessError(
                    f"{name} = {value} exceeds the {8 * self.params.n_bytes}-bit comparator width"
                )

    def configure(self, cs: ConstraintSystem) -> MerkleSumTreeConfig:
        advice = tuple(cs.advice_column() for _ in range(N_ADVICE))
        instance = cs.instance_column()
        for column in advice:
            cs.enable_equality(column)
        cs.enable_equality(instance)

        chip_config = MerkleSumTreeChip.configure(
            cs,
            advice,
            instance,
            get_hash_chip(self.params.hasher),
            get_comparator_chip(self.params.comparator),
            self.params.n_bytes,
        )
        return MerkleSumTreeConfig(self.params, chip_config)

    def synthesize(self, config: MerkleSumTreeConfig, layouter: Layouter) -> None:
        chip = MerkleSumTreeChip(config.chip)

        leaf_hash, leaf_balance = chip.assign_leaf_hash_and_balance(
            layouter, self.leaf_hash, self.leaf_balance
        )
        chip.expose_public(layouter, leaf_hash, LEAF_HASH_ROW)
        chip.expose_public(layouter, leaf_balance, LEAF_BALANCE_ROW)

        node_hash, node_sum = leaf_hash, leaf_balance
        for step in self.steps:
            node_hash, node_sum = chip.merkle_prove_layer(layouter, node_hash, node_sum, step)

        chip.enforce_less_than(layouter, node_sum)
        chip.expose_public(layouter, node_hash, ROOT_HASH_ROW)

    # --- Checking ---

    def mock_prove(self, instance: Optional[List[int]] = None) -> MockProver:
        """Run the mock prover with params.k rows against instance (default: self.instance())."""
        if instance is None:
            instance = self.instance()
        return MockProver.run(self.params.k, self, [instance])
