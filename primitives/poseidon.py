"""
Poseidon hash implementation for the BN254 scalar field.

Width-3 permutation with the x^5 S-box, 8 full rounds and 57 partial rounds.
Round constants come from the Grain LFSR seeded as in the Poseidon reference
parameter script; the linear layer is a Cauchy MDS matrix.

The permutation is also exposed round by round (permutation_trace) so the
in-circuit chip can assign exactly the states the native hash computes.
"""

from collections import deque
from typing import Iterator, List

from .field import BN254_PRIME

WIDTH = 3
ALPHA = 5
ROUNDS_F = 8
ROUNDS_P = 57
N_ROUNDS = ROUNDS_F + ROUNDS_P
FIELD_BITS = 254

# Capacity element for a constant-length input of 2 elements: 2 << 64
CAPACITY_TAG = 2 << 64


# --- Parameter Generation ---

def _to_bits(value: int, width: int) -> List[int]:
    return [(value >> (width - 1 - i)) & 1 for i in range(width)]


def _grain_stream() -> Iterator[int]:
    """
    Self-shrinking Grain LFSR bit stream.

    Seed layout (80 bits): field type (2), S-box type (4), field size (12),
    width (12), full rounds (10), partial rounds (10), thirty 1s.
    """
    seed = (
        _to_bits(1, 2)
        + _to_bits(0, 4)
        + _to_bits(FIELD_BITS, 12)
        + _to_bits(WIDTH, 12)
        + _to_bits(ROUNDS_F, 10)
        + _to_bits(ROUNDS_P, 10)
        + [1] * 30
    )
    bits = deque(seed, maxlen=80)

    def step() -> int:
        new_bit = bits[62] ^ bits[51] ^ bits[38] ^ bits[23] ^ bits[13] ^ bits[0]
        bits.append(new_bit)
        return new_bit

    for _ in range(160):
        step()

    while True:
        bit = step()
        while bit == 0:
            step()
            bit = step()
        yield step()


def _round_constants() -> List[List[int]]:
    stream = _grain_stream()
    flat: List[int] = []
    while len(flat) < N_ROUNDS * WIDTH:
        value = 0
        for _ in range(FIELD_BITS):
            value = (value << 1) | next(stream)
        if value < BN254_PRIME:
            flat.append(value)
    return [flat[r * WIDTH:(r + 1) * WIDTH] for r in range(N_ROUNDS)]


def _mds_matrix() -> List[List[int]]:
    """Cauchy matrix M[i][j] = 1 / (x_i + y_j) with x_i = i, y_j = WIDTH + j."""
    return [
        [pow(i + WIDTH + j, -1, BN254_PRIME) for j in range(WIDTH)]
        for i in range(WIDTH)
    ]


ROUND_CONSTANTS = _round_constants()
MDS = _mds_matrix()


# --- Permutation ---

def is_full_round(r: int) -> bool:
    """Full rounds are the first and last ROUNDS_F / 2 rounds."""
    half = ROUNDS_F // 2
    return r < half or r >= half + ROUNDS_P


def _pow5(x: int) -> int:
    x2 = (x * x) % BN254_PRIME
    x4 = (x2 * x2) % BN254_PRIME
    return (x4 * x) % BN254_PRIME


def round_function(state: List[int], r: int) -> List[int]:
    """
    Apply round r: add constants, S-box (all lanes or lane 0), MDS mix.
    """
    state = [(s + c) % BN254_PRIME for s, c in zip(state, ROUND_CONSTANTS[r])]
    if is_full_round(r):
        state = [_pow5(s) for s in state]
    else:
        state[0] = _pow5(state[0])
    return [
        sum(MDS[i][j] * state[j] for j in range(WIDTH)) % BN254_PRIME
        for i in range(WIDTH)
    ]


def permutation_trace(state: List[int]) -> List[List[int]]:
    """
    Return every intermediate state: trace[0] is the input, trace[N_ROUNDS]
    the output of the permutation.
    """
    if len(state) != WIDTH:
        raise ValueError(f"state must have {WIDTH} elements, got {len(state)}")
    current = [int(x) % BN254_PRIME for x in state]
    trace = [current]
    for r in range(N_ROUNDS):
        current = round_function(current, r)
        trace.append(current)
    return trace


def permute(state: List[int]) -> List[int]:
    """Compute the full Poseidon permutation."""
    return permutation_trace(state)[-1]


def poseidon_compress(left: int, right: int) -> int:
    """
    Two-to-one compression: Permutation([left, right, CAPACITY_TAG])[0].

    Order-sensitive: poseidon_compress(a, b) != poseidon_compress(b, a) in general.
    """
    return permute([left, right, CAPACITY_TAG])[0]
