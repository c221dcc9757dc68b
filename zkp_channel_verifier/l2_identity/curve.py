"""
Jubjub curve operations backed by python-ecdsa.

Only three operations are needed: multiply the base point by a scalar,
compress a point to 32 bytes, and decompress/validate a 32-byte encoding.
The point arithmetic itself is python-ecdsa's PointEdwards.

Encoding (same as noble-curves `Point.toBytes()` and RFC 8032):
    bytes = little_endian(y, 32)
    bytes[31] |= 0x80 if x is odd
"""

from __future__ import annotations

try:
    from ecdsa.ellipticcurve import INFINITY, CurveEdTw, PointEdwards
    from ecdsa.errors import MalformedPointError
except ImportError:
    raise ImportError(
        "ecdsa is required for Jubjub point arithmetic. "
        "Install with: pip install ecdsa"
    )

from .config import (
    JUBJUB_A,
    JUBJUB_BASE_X,
    JUBJUB_BASE_Y,
    JUBJUB_COFACTOR,
    JUBJUB_D,
    JUBJUB_FIELD_MODULUS,
    JUBJUB_ORDER,
    POINT_SIZE_BYTES,
)
from .exceptions import InvalidKeyFormatError, PrimitiveFailureError

CURVE_JUBJUB = CurveEdTw(JUBJUB_FIELD_MODULUS, JUBJUB_A, JUBJUB_D, h=JUBJUB_COFACTOR)

# generator=True makes python-ecdsa precompute doubling tables on first use
BASE_POINT = PointEdwards(
    CURVE_JUBJUB,
    JUBJUB_BASE_X,
    JUBJUB_BASE_Y,
    1,
    JUBJUB_BASE_X * JUBJUB_BASE_Y % JUBJUB_FIELD_MODULUS,
    JUBJUB_ORDER,
    generator=True,
)


def scalar_mult_base(scalar: int) -> PointEdwards:
    """
    Compute scalar * BASE_POINT.

    Args:
        scalar: Integer in [1, JUBJUB_ORDER - 1]

    Returns:
        Point in the prime-order subgroup

    Raises:
        PrimitiveFailureError: If the scalar is out of range or the result is
            the identity
    """
    if not 0 < scalar < JUBJUB_ORDER:
        raise PrimitiveFailureError("Scalar outside [1, JUBJUB_ORDER - 1]")

    point = BASE_POINT * scalar
    if point == INFINITY:
        raise PrimitiveFailureError("Scalar multiplication produced the identity")
    return point


def compress_point(point: PointEdwards) -> bytes:
    """
    Serialize a point to its 32-byte compressed encoding.

    Raises:
        PrimitiveFailureError: If the library returns an encoding of the
            wrong width
    """
    encoded = bytes(point.to_bytes())
    if len(encoded) != POINT_SIZE_BYTES:
        raise PrimitiveFailureError(
            f"Compressed point is {len(encoded)} bytes, expected {POINT_SIZE_BYTES}"
        )
    return encoded


def decompress_point(data: bytes) -> PointEdwards:
    """
    Decode a 32-byte compressed encoding back into a curve point.

    Raises:
        InvalidKeyFormatError: If the bytes do not encode a Jubjub point
    """
    if len(data) != POINT_SIZE_BYTES:
        raise InvalidKeyFormatError(f"Public key must be {POINT_SIZE_BYTES} bytes")
    # y is stored in the low 255 bits and must be a canonical field element
    y = int.from_bytes(data, "little") & ((1 << 255) - 1)
    if y >= JUBJUB_FIELD_MODULUS:
        raise InvalidKeyFormatError("Public key y coordinate is not canonical")
    try:
        point = PointEdwards.from_bytes(CURVE_JUBJUB, data)
    except MalformedPointError as exc:
        raise InvalidKeyFormatError("Public key is not a Jubjub point") from exc

    x, y = point.x(), point.y()
    if x == 0 or not CURVE_JUBJUB.contains_point(x, y):
        raise InvalidKeyFormatError("Public key is not a Jubjub point")
    # python-ecdsa reports any X == 0 point as INFINITY, which hides the
    # order-2 torsion point, so test (ORDER - 1) * P == -P instead of ORDER * P
    multiple = point * (JUBJUB_ORDER - 1)
    if (
        multiple == INFINITY
        or multiple.x() != (-x) % JUBJUB_FIELD_MODULUS
        or multiple.y() != y
    ):
        raise InvalidKeyFormatError("Public key is outside the prime-order subgroup")
    return point
