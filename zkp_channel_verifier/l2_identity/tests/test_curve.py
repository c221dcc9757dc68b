"""
Unit tests for Jubjub point operations.

Tests cover:
1. Base point multiplication and compression
2. Decompression round trips
3. Rejection of non-canonical, off-curve, and small-order encodings
"""

import pytest

from zkp_channel_verifier.l2_identity.config import JUBJUB_ORDER, POINT_SIZE_BYTES
from zkp_channel_verifier.l2_identity.curve import (
    BASE_POINT,
    compress_point,
    decompress_point,
    scalar_mult_base,
)
from zkp_channel_verifier.l2_identity.exceptions import (
    InvalidKeyFormatError,
    PrimitiveFailureError,
)

BASE_ENCODING = bytes.fromhex(
    "aa92d2590e873fccd7fe20c25cba263ec3c066c8782e1393171aabddf13c529d"
)
NEG_BASE_ENCODING = bytes.fromhex(
    "aa92d2590e873fccd7fe20c25cba263ec3c066c8782e1393171aabddf13c521d"
)
FIVE_ENCODING = bytes.fromhex(
    "9e568545bad72cbfce69789ffe4329532fef005f3ce70e3970c123dc9692e852"
)
# G plus the order-2 point (0, -1)
BASE_PLUS_TORSION_ENCODING = bytes.fromhex(
    "576d2da6f078c033275ddd3da6e9961542173b418fa926a03063f24b616a9b56"
)
# y = p - 1, x = 0: the order-2 point itself
ORDER_TWO_ENCODING = bytes.fromhex(
    "00000000fffffffffe5bfeff02a4bd5305d8a10908d83933487d9d2953a7ed73"
)
# y = p: not a canonical field element
NON_CANONICAL_ENCODING = bytes.fromhex(
    "01000000fffffffffe5bfeff02a4bd5305d8a10908d83933487d9d2953a7ed73"
)
# y = 2 has no matching x on Jubjub
OFF_CURVE_ENCODING = bytes.fromhex("02" + "00" * 31)
IDENTITY_ENCODING = bytes.fromhex("01" + "00" * 31)


class TestScalarMultiplication:
    """Test scalar * G and compression."""

    def test_base_point_encoding(self):
        assert compress_point(BASE_POINT) == BASE_ENCODING

    def test_scalar_one_is_base_point(self):
        assert compress_point(scalar_mult_base(1)) == BASE_ENCODING

    def test_scalar_five(self):
        assert compress_point(scalar_mult_base(5)) == FIVE_ENCODING

    def test_order_minus_one_is_negated_base(self):
        # Negation flips only the x sign bit
        assert compress_point(scalar_mult_base(JUBJUB_ORDER - 1)) == NEG_BASE_ENCODING

    def test_compressed_width(self):
        assert len(compress_point(scalar_mult_base(123456789))) == POINT_SIZE_BYTES

    @pytest.mark.parametrize("scalar", [0, JUBJUB_ORDER, -1])
    def test_out_of_range_scalar_is_primitive_failure(self, scalar):
        with pytest.raises(PrimitiveFailureError):
            scalar_mult_base(scalar)


class TestDecompression:
    """Test decoding and validation of compressed points."""

    @pytest.mark.parametrize("scalar", [1, 2, 5, 0xDEADBEEF, JUBJUB_ORDER - 1])
    def test_roundtrip(self, scalar):
        encoded = compress_point(scalar_mult_base(scalar))
        point = decompress_point(encoded)
        assert compress_point(point) == encoded

    def test_wrong_length_rejected(self):
        with pytest.raises(InvalidKeyFormatError, match="32 bytes"):
            decompress_point(BASE_ENCODING[:31])

    def test_non_canonical_y_rejected(self):
        with pytest.raises(InvalidKeyFormatError, match="not canonical"):
            decompress_point(NON_CANONICAL_ENCODING)

    def test_off_curve_rejected(self):
        with pytest.raises(InvalidKeyFormatError, match="not a Jubjub point"):
            decompress_point(OFF_CURVE_ENCODING)

    @pytest.mark.parametrize("encoding", [IDENTITY_ENCODING, ORDER_TWO_ENCODING])
    def test_x_zero_points_rejected(self, encoding):
        with pytest.raises(InvalidKeyFormatError):
            decompress_point(encoding)

    def test_torsion_component_rejected(self):
        with pytest.raises(InvalidKeyFormatError, match="prime-order subgroup"):
            decompress_point(BASE_PLUS_TORSION_ENCODING)
