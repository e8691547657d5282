"""Merkle sum tree over a ledger of (username, balance) entries using Poseidon.

Every node carries a hash and the sum of the balances below it:

    parent.hash    = poseidon_compress(left.hash, right.hash)
    parent.balance = left.balance + right.balance

The tree is built off-circuit; generate_proof() emits the witness bundle that
the solvency circuit consumes (leaf entry, sibling hashes/sums, path bits).
"""

import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Union

from .field import BN254_PRIME, fits_in_bytes
from .poseidon import poseidon_compress

# --- Constants ---

DEFAULT_N_BYTES = 16


# --- Data Classes ---

@dataclass(frozen=True)
class Node:
    """Tree node: hash commitment and aggregated balance."""
    hash: int
    balance: int


@dataclass(frozen=True)
class Entry:
    """One ledger row."""
    username: str
    balance: int

    def username_as_int(self) -> int:
        """Big-endian integer of the UTF-8 username bytes."""
        value = int.from_bytes(self.username.encode("utf-8"), "big")
        if value >= BN254_PRIME:
            raise ValueError(f"Username {self.username!r} does not fit in a field element")
        return value

    def compute_leaf(self) -> Node:
        return Node(poseidon_compress(self.username_as_int(), self.balance), self.balance)


EMPTY_ENTRY = Entry("", 0)


@dataclass(frozen=True)
class ProofStep:
    """One level of an inclusion proof, ordered leaf -> root.

    path_bit is 0 when the current node is the left child, 1 when it is the right child.
    """
    sibling_hash: int
    sibling_sum: int
    path_bit: int


@dataclass
class MerkleProof:
    """Witness bundle for one user.

    Attributes:
        entry: The ledger entry being proven
        root_hash: Root commitment of the tree
        sibling_hashes: Co-path hashes, leaf level first
        sibling_sums: Co-path balances, leaf level first
        path_indices: 0 (left child) / 1 (right child) per level
    """
    entry: Entry
    root_hash: int
    sibling_hashes: List[int] = field(default_factory=list)
    sibling_sums: List[int] = field(default_factory=list)
    path_indices: List[int] = field(default_factory=list)

    @property
    def steps(self) -> List[ProofStep]:
        return [
            ProofStep(h, s, b)
            for h, s, b in zip(self.sibling_hashes, self.sibling_sums, self.path_indices)
        ]


# --- Ledger Loading ---

def parse_csv(path: Union[str, Path]) -> List[Entry]:
    """Read a `username;balance` ledger with a header row.

    Raises:
        ValueError: On malformed rows or negative balances
    """
    entries = []
    with open(path, newline="") as f:
        reader = csv.reader(f, delimiter=";")
        header = next(reader, None)
        if header is None or [h.strip() for h in header] != ["username", "balance"]:
            raise ValueError(f"{path}: expected header 'username;balance', got {header}")
        for line_no, row in enumerate(reader, start=2):
            if not row:
                continue
            if len(row) != 2:
                raise ValueError(f"{path}:{line_no}: expected 2 fields, got {len(row)}")
            username, balance_str = row[0].strip(), row[1].strip()
            try:
                balance = int(balance_str)
            except ValueError:
                raise ValueError(f"{path}:{line_no}: invalid balance {balance_str!r}") from None
            if balance < 0:
                raise ValueError(f"{path}:{line_no}: negative balance {balance}")
            entries.append(Entry(username, balance))
    return entries


# --- Merkle Sum Tree ---

class MerkleSumTree:
    """Binary Merkle sum tree, padded with empty entries to a power of two."""

    def __init__(self, entries: Sequence[Entry], n_bytes: int = DEFAULT_N_BYTES):
        if len(entries) == 0:
            raise ValueError("Cannot build a Merkle sum tree from an empty ledger")

        total = 0
        for entry in entries:
            if not fits_in_bytes(entry.balance, n_bytes):
                raise ValueError(
                    f"Balance {entry.balance} of {entry.username!r} exceeds {8 * n_bytes} bits"
                )
            total += entry.balance
        if not fits_in_bytes(total, n_bytes):
            raise ValueError(f"Total liabilities {total} exceed {8 * n_bytes} bits")

        self.n_bytes = n_bytes
        self.entries: List[Entry] = list(entries)

        size = 1
        while size < len(self.entries):
            size <<= 1
        padded = self.entries + [EMPTY_ENTRY] * (size - len(self.entries))

        # levels[0] are the leaves, levels[-1] == [root]
        self.levels: List[List[Node]] = [[e.compute_leaf() for e in padded]]
        while len(self.levels[-1]) > 1:
            below = self.levels[-1]
            self.levels.append([
                combine_nodes(below[i], below[i + 1]) for i in range(0, len(below), 2)
            ])

    @classmethod
    def from_csv(cls, path: Union[str, Path], n_bytes: int = DEFAULT_N_BYTES) -> "MerkleSumTree":
        return cls(parse_csv(path), n_bytes=n_bytes)

    # --- Accessors ---

    @property
    def root(self) -> Node:
        return self.levels[-1][0]

    @property
    def depth(self) -> int:
        return len(self.levels) - 1

    @property
    def total_liabilities(self) -> int:
        return self.root.balance

    def index_of(self, username: str) -> int:
        for i, entry in enumerate(self.entries):
            if entry.username == username:
                return i
        raise KeyError(f"No entry for username {username!r}")

    # --- Proofs ---

    def generate_proof(self, index: int) -> MerkleProof:
        """Build the inclusion proof for the entry at index.

        Raises:
            ValueError: If index is out of range
        """
        if index < 0 or index >= len(self.entries):
            raise ValueError(f"Leaf index {index} out of range [0, {len(self.entries)})")

        proof = MerkleProof(entry=self.entries[index], root_hash=self.root.hash)
        position = index
        for level in self.levels[:-1]:
            sibling = level[position ^ 1]
            proof.sibling_hashes.append(sibling.hash)
            proof.sibling_sums.append(sibling.balance)
            proof.path_indices.append(position & 1)
            position >>= 1
        return proof

    def verify_proof(self, proof: MerkleProof) -> bool:
        """Recompute the root from a proof and compare against this tree."""
        return verify_proof(proof) and proof.root_hash == self.root.hash


def combine_nodes(left: Node, right: Node) -> Node:
    return Node(poseidon_compress(left.hash, right.hash), left.balance + right.balance)


def verify_proof(proof: MerkleProof) -> bool:
    """Walk a proof to the root off-circuit and check it against proof.root_hash."""
    node = proof.entry.compute_leaf()
    for step in proof.steps:
        sibling = Node(step.sibling_hash, step.sibling_sum)
        if step.path_bit == 0:
            node = combine_nodes(node, sibling)
        elif step.path_bit == 1:
            node = combine_nodes(sibling, node)
        else:
            return False
    return node.hash == proof.root_hash
