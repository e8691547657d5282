"""BN254 scalar field GF(p) and the integer-to-field mapping for balances.

Uses galois library for all field arithmetic. FF is the field type.

Balances and sums are plain Python integers at the ingestion boundary (CSV,
proof bundles). They are only meaningful as integers while they stay below
2^(8 * n_bytes), the width of the bounded comparator; the field itself is much
wider, so a balance above 2^64 still maps to a single element exactly.
"""

import galois
from typing import List, Union

# --- Field Construction ---

BN254_PRIME = 0x30644E72E131A029B85045B68181585D2833E84879B9709143E1F593F0000001

# 5 generates the multiplicative group; passing it skips the factorization of p - 1.
FF = galois.GF(BN254_PRIME, primitive_element=5, verify=False)
"""Base field GF(p) - BN254 scalar field."""

FieldLike = Union[int, FF]


# --- Integer <-> Field Mapping ---

def is_canonical(value: int) -> bool:
    """Return True if value is an integer representative in [0, p)."""
    return 0 <= value < BN254_PRIME


def to_field(value: FieldLike) -> FF:
    """Map a canonical integer (or an existing element) to FF.

    Raises:
        ValueError: If value is outside [0, p)
    """
    if isinstance(value, FF):
        return value
    value = int(value)
    if not is_canonical(value):
        raise ValueError(f"{value} is not a canonical BN254 scalar (must be in [0, p))")
    return FF(value)


def field_to_int(value: FieldLike) -> int:
    """Return the canonical integer representative of a field element."""
    return int(value)


# --- Bounded Integers ---

def fits_in_bytes(value: int, n_bytes: int) -> bool:
    """Return True if 0 <= value < 256^n_bytes."""
    return 0 <= value < (1 << (8 * n_bytes))


def decompose_bytes(value: int, n_bytes: int) -> List[int]:
    """Little-endian byte decomposition of value, truncated to n_bytes."""
    return [(value >> (8 * i)) & 0xFF for i in range(n_bytes)]


def compose_bytes(digits: List[int]) -> int:
    """Inverse of decompose_bytes for in-range values."""
    result = 0
    for i, byte in enumerate(digits):
        result += byte << (8 * i)
    return result
