"""Reduction of user secrets into the Jubjub scalar field."""

from __future__ import annotations

from .config import JUBJUB_ORDER
from .types import NormalizedScalar, SecretScalar


def normalize_scalar(secret: SecretScalar) -> NormalizedScalar:
    """
    Reduce a secret modulo the Jubjub subgroup order.

    A secret that reduces to zero (zero itself, or any multiple of the
    order) maps to the scalar 1. The paired verifier applies the same
    substitution, so it must not be turned into a rejection.
    """
    reduced = secret.to_int() % JUBJUB_ORDER
    if reduced == 0:
        reduced = 1
    return NormalizedScalar(reduced)


def normalize(secret_hex: str) -> NormalizedScalar:
    """
    Parse and normalize a hex secret.

    Args:
        secret_hex: 64 hex digits, optionally "0x"-prefixed

    Returns:
        NormalizedScalar in [1, JUBJUB_ORDER - 1]

    Raises:
        InvalidKeyFormatError: If secret_hex is not a 32-byte hex string
    """
    return normalize_scalar(SecretScalar.from_hex(secret_hex))
