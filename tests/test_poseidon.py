"""Tests for the native Poseidon permutation and its parameters."""

import pytest

from primitives.field import BN254_PRIME
from primitives.poseidon import (
    CAPACITY_TAG,
    MDS,
    N_ROUNDS,
    ROUND_CONSTANTS,
    ROUNDS_F,
    ROUNDS_P,
    WIDTH,
    is_full_round,
    permutation_trace,
    permute,
    poseidon_compress,
    round_function,
)


class TestParameters:
    """Round constants and MDS matrix shape."""

    def test_round_count(self):
        """65 rounds of three constants each."""
        assert N_ROUNDS == 65
        assert len(ROUND_CONSTANTS) == N_ROUNDS
        assert all(len(rc) == WIDTH for rc in ROUND_CONSTANTS)

    def test_round_constants_canonical(self):
        """Every round constant is below p."""
        assert all(0 <= c < BN254_PRIME for rc in ROUND_CONSTANTS for c in rc)

    def test_round_constants_distinct(self):
        """The Grain stream yields no repeated constants."""
        flat = [c for rc in ROUND_CONSTANTS for c in rc]
        assert len(set(flat)) == len(flat)

    def test_mds_is_cauchy(self):
        """M[i][j] is the inverse of i + j + 3."""
        for i in range(WIDTH):
            for j in range(WIDTH):
                # M[i][j] * (i + j + WIDTH) == 1
                assert (MDS[i][j] * (i + j + WIDTH)) % BN254_PRIME == 1

    def test_capacity_tag(self):
        """The capacity lane holds 2 * 2^64 for two inputs."""
        assert CAPACITY_TAG == 2 * (1 << 64)


class TestRoundSchedule:

    def test_full_rounds_at_both_ends(self):
        """Four full rounds open and four close the permutation."""
        full = [r for r in range(N_ROUNDS) if is_full_round(r)]
        assert len(full) == ROUNDS_F
        assert full == [0, 1, 2, 3, 61, 62, 63, 64]

    def test_partial_rounds_in_the_middle(self):
        """57 partial rounds sit between the full ones."""
        partial = [r for r in range(N_ROUNDS) if not is_full_round(r)]
        assert len(partial) == ROUNDS_P
        assert partial[0] == ROUNDS_F // 2


class TestPermutation:

    def test_trace_length(self):
        """The trace holds the input and one state per round."""
        trace = permutation_trace([1, 2, 3])
        assert len(trace) == N_ROUNDS + 1
        assert trace[0] == [1, 2, 3]

    def test_trace_consecutive_rounds(self):
        """Each trace state is the round function of the previous one."""
        trace = permutation_trace([0, 0, CAPACITY_TAG])
        for r in range(N_ROUNDS):
            assert round_function(trace[r], r) == trace[r + 1]

    def test_permute_matches_trace(self):
        """permute returns the last trace state."""
        assert permute([7, 8, 9]) == permutation_trace([7, 8, 9])[-1]

    def test_wrong_width_rejected(self):
        """The state must have exactly three elements."""
        with pytest.raises(ValueError, match="3 elements"):
            permutation_trace([1, 2])

    def test_output_canonical(self):
        """Outputs are reduced mod p."""
        assert all(0 <= x < BN254_PRIME for x in permute([BN254_PRIME - 1] * WIDTH))


class TestCompress:

    def test_deterministic(self):
        """Same inputs give the same digest."""
        assert poseidon_compress(1, 2) == poseidon_compress(1, 2)

    def test_order_sensitive(self):
        """Compress(a, b) differs from Compress(b, a)."""
        assert poseidon_compress(1, 2) != poseidon_compress(2, 1)

    def test_equals_first_lane_of_permutation(self):
        """The digest is lane 0 of the permuted state."""
        assert poseidon_compress(3, 4) == permute([3, 4, CAPACITY_TAG])[0]

    def test_distinct_inputs_distinct_outputs(self):
        """Small distinct input pairs do not collide."""
        outputs = {poseidon_compress(a, b) for a in range(4) for b in range(4)}
        assert len(outputs) == 16
