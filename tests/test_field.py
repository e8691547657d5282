"""Tests for the BN254 field and the bounded-integer helpers."""

import pytest

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


class TestToField:
    """Integer -> field mapping at the ingestion boundary."""

    def test_small_values(self):
        """Small integers map to the same field element."""
        assert to_field(0) == FF(0)
        assert to_field(11888) == FF(11888)

    def test_largest_canonical(self):
        """p - 1 is the largest accepted integer."""
        assert field_to_int(to_field(BN254_PRIME - 1)) == BN254_PRIME - 1

    @pytest.mark.parametrize("value", [-1, BN254_PRIME, BN254_PRIME + 5])
    def test_non_canonical_rejected(self, value):
        """Negative values and values >= p are refused."""
        with pytest.raises(ValueError, match="canonical"):
            to_field(value)

    def test_field_element_passthrough(self):
        """Existing field elements are returned unchanged."""
        x = FF(42)
        assert to_field(x) is x

    def test_above_64_bits_maps_exactly(self):
        """Balances above 2^64 are represented exactly."""
        value = 1 << 64
        assert field_to_int(to_field(value)) == value

    def test_wraparound(self):
        """Field addition wraps at p."""
        assert FF(BN254_PRIME - 1) + FF(1) == FF(0)


class TestIsCanonical:

    def test_bounds(self):
        """is_canonical accepts exactly [0, p)."""
        assert is_canonical(0)
        assert is_canonical(BN254_PRIME - 1)
        assert not is_canonical(BN254_PRIME)
        assert not is_canonical(-1)


class TestBytes:
    """Little-endian byte decomposition used by the comparator chip."""

    def test_fits_in_bytes(self):
        """fits_in_bytes accepts exactly [0, 256^n)."""
        assert fits_in_bytes(0, 1)
        assert fits_in_bytes(255, 1)
        assert not fits_in_bytes(256, 1)
        assert not fits_in_bytes(-1, 16)
        assert fits_in_bytes((1 << 128) - 1, 16)
        assert not fits_in_bytes(1 << 128, 16)

    def test_decompose_little_endian(self):
        """Least significant byte comes first."""
        assert decompose_bytes(0x0102, 3) == [0x02, 0x01, 0x00]

    def test_decompose_truncates(self):
        """Bytes above n_bytes are dropped."""
        assert decompose_bytes(0x1FF, 1) == [0xFF]

    def test_compose_inverts_decompose(self):
        """An in-range value survives decompose then compose."""
        value = 18446744073710096590
        assert compose_bytes(decompose_bytes(value, 16)) == value
