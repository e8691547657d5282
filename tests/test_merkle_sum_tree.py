"""Tests for the off-circuit Merkle sum tree and ledger loading."""

import dataclasses

import pytest

from primitives.field import BN254_PRIME
from primitives.merkle_sum_tree import (
    EMPTY_ENTRY,
    Entry,
    MerkleSumTree,
    Node,
    combine_nodes,
    parse_csv,
    verify_proof,
)
from primitives.poseidon import poseidon_compress

from tests.conftest import ENTRY_16_BIGINTS_TOTAL, ENTRY_16_TOTAL


class TestEntry:

    def test_username_as_int_big_endian(self):
        """Usernames encode as big-endian UTF-8 integers."""
        assert Entry("ab", 0).username_as_int() == 0x6162

    def test_empty_username(self):
        """The padding entry encodes as zero."""
        assert EMPTY_ENTRY.username_as_int() == 0

    def test_leaf_is_hash_of_username_and_balance(self):
        """Leaf hash is Compress(username, balance) and carries the balance."""
        entry = Entry("dxGaEAii", 11888)
        leaf = entry.compute_leaf()
        assert leaf == Node(poseidon_compress(entry.username_as_int(), 11888), 11888)

    def test_username_too_long(self):
        """A username wider than the field is refused."""
        with pytest.raises(ValueError, match="field element"):
            Entry("x" * 40, 1).username_as_int()


class TestParseCsv:

    def test_entry_16(self, entry_16_csv):
        """The 16-entry ledger loads in file order with total 556862."""
        entries = parse_csv(entry_16_csv)
        assert len(entries) == 16
        assert entries[0] == Entry("dxGaEAii", 11888)
        assert sum(e.balance for e in entries) == ENTRY_16_TOTAL

    def test_bigints(self, entry_16_bigints_csv):
        """Balances above 2^64 parse exactly."""
        entries = parse_csv(entry_16_bigints_csv)
        assert entries[0].balance == 1 << 64

    def test_bad_header(self, tmp_path):
        """A missing username;balance header is refused."""
        path = tmp_path / "ledger.csv"
        path.write_text("name,amount\nalice,1\n")
        with pytest.raises(ValueError, match="header"):
            parse_csv(path)

    def test_wrong_field_count(self, tmp_path):
        """Rows must have exactly two fields."""
        path = tmp_path / "ledger.csv"
        path.write_text("username;balance\nalice;1;2\n")
        with pytest.raises(ValueError, match="2 fields"):
            parse_csv(path)

    def test_invalid_balance(self, tmp_path):
        """Non-integer balances are refused."""
        path = tmp_path / "ledger.csv"
        path.write_text("username;balance\nalice;lots\n")
        with pytest.raises(ValueError, match="invalid balance"):
            parse_csv(path)

    def test_negative_balance(self, tmp_path):
        """Negative balances are refused."""
        path = tmp_path / "ledger.csv"
        path.write_text("username;balance\nalice;-5\n")
        with pytest.raises(ValueError, match="negative"):
            parse_csv(path)

    def test_blank_lines_skipped(self, tmp_path):
        """Empty lines between rows are ignored."""
        path = tmp_path / "ledger.csv"
        path.write_text("username;balance\nalice;1\n\nbob;2\n")
        assert [e.username for e in parse_csv(path)] == ["alice", "bob"]


class TestMerkleSumTree:

    def test_root_sum(self, tree_16):
        """The root carries the total liabilities."""
        assert tree_16.depth == 4
        assert tree_16.total_liabilities == ENTRY_16_TOTAL
        assert tree_16.root.balance == ENTRY_16_TOTAL

    def test_root_sum_bigints(self, tree_16_bigints):
        """Sums stay exact beyond 64 bits."""
        assert tree_16_bigints.total_liabilities == ENTRY_16_BIGINTS_TOTAL

    def test_parent_is_combination_of_children(self, tree_16):
        """Every parent hashes its children and adds their sums."""
        for below, above in zip(tree_16.levels, tree_16.levels[1:]):
            for i, parent in enumerate(above):
                assert parent == combine_nodes(below[2 * i], below[2 * i + 1])

    def test_root_below_prime(self, tree_16):
        """The root hash is a canonical field element."""
        assert 0 <= tree_16.root.hash < BN254_PRIME

    def test_padding_to_power_of_two(self):
        """Three entries are padded with one empty leaf."""
        tree = MerkleSumTree([Entry("alice", 3), Entry("bob", 4), Entry("carol", 5)])
        assert len(tree.levels[0]) == 4
        assert tree.levels[0][3] == EMPTY_ENTRY.compute_leaf()
        assert tree.depth == 2
        assert tree.total_liabilities == 12

    def test_single_entry(self):
        """A single entry is its own root."""
        tree = MerkleSumTree([Entry("alice", 3)])
        assert tree.depth == 0
        assert tree.root == Entry("alice", 3).compute_leaf()

    def test_empty_ledger(self):
        """An empty ledger cannot form a tree."""
        with pytest.raises(ValueError, match="empty"):
            MerkleSumTree([])

    def test_balance_too_wide(self):
        """A balance wider than n_bytes is refused."""
        with pytest.raises(ValueError, match="exceeds 8 bits"):
            MerkleSumTree([Entry("alice", 256)], n_bytes=1)

    def test_total_too_wide(self):
        """Total liabilities wider than n_bytes are refused."""
        with pytest.raises(ValueError, match="Total liabilities"):
            MerkleSumTree([Entry("alice", 200), Entry("bob", 100)], n_bytes=1)

    def test_index_of(self, tree_16):
        """Usernames resolve to their ledger row."""
        assert tree_16.index_of("RkLzkDun") == 7
        with pytest.raises(KeyError):
            tree_16.index_of("nobody")


class TestProofs:

    @pytest.mark.parametrize("index", [0, 1, 6, 15])
    def test_generated_proofs_verify(self, tree_16, index):
        """Generated proofs verify off-circuit."""
        proof = tree_16.generate_proof(index)
        assert len(proof.steps) == tree_16.depth
        assert verify_proof(proof)
        assert tree_16.verify_proof(proof)

    def test_path_indices_are_index_bits(self, tree_16):
        """Path bits are the leaf index bits, least significant first."""
        proof = tree_16.generate_proof(6)
        assert proof.path_indices == [0, 1, 1, 0]

    def test_first_sibling_is_neighbour_leaf(self, tree_16):
        """The first sibling is the adjacent leaf."""
        proof = tree_16.generate_proof(0)
        assert proof.sibling_hashes[0] == tree_16.levels[0][1].hash
        assert proof.sibling_sums[0] == tree_16.levels[0][1].balance

    def test_out_of_range(self, tree_16):
        """Proofs exist only for ledger rows."""
        with pytest.raises(ValueError, match="out of range"):
            tree_16.generate_proof(16)

    def test_tampered_balance_rejected(self, tree_16):
        """A changed balance changes the leaf hash."""
        proof = tree_16.generate_proof(0)
        proof.entry = dataclasses.replace(proof.entry, balance=proof.entry.balance + 1)
        assert not verify_proof(proof)

    def test_flipped_bit_rejected(self, tree_16):
        """A flipped path bit changes the root."""
        proof = tree_16.generate_proof(0)
        proof.path_indices[0] = 1
        assert not verify_proof(proof)

    def test_non_boolean_bit_rejected(self, tree_16):
        """Path bits other than 0 and 1 are rejected."""
        proof = tree_16.generate_proof(0)
        proof.path_indices[0] = 2
        assert not verify_proof(proof)

    def test_proof_against_other_tree(self, tree_16, tree_16_bigints):
        """A proof does not verify against a different tree."""
        proof = tree_16.generate_proof(3)
        assert not tree_16_bigints.verify_proof(proof)
