"""
Poseidon field hash over BN254, circomlibjs-compatible.

The permutation and round constants come from circomlibpy, a port of
circomlibjs `poseidon_opt`. Inputs are reduced modulo the BN254 scalar field
before hashing, matching circomlibjs `F.e(x)`; a 32-byte public key can
exceed the field modulus, so the reduction is part of the contract.
"""

from __future__ import annotations

from typing import Sequence

try:
    from circomlibpy.poseidon import PoseidonHash
except ImportError:
    raise ImportError(
        "circomlibpy is required for Poseidon hashing. "
        "Install with: pip install circomlibpy"
    )

from .config import BN254_FIELD_MODULUS, POSEIDON_ARITIES
from .exceptions import PrimitiveFailureError

_POSEIDON = PoseidonHash()


def to_field_element(value: int) -> int:
    """Reduce a non-negative integer into the BN254 scalar field."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError("Field hash inputs must be int")
    if value < 0:
        raise ValueError("Field hash inputs must be non-negative")
    return value % BN254_FIELD_MODULUS


def field_hash(inputs: Sequence[int]) -> int:
    """
    Hash 1 or 2 integers to a single BN254 field element.

    Args:
        inputs: Non-negative integers, in order. Order matters:
            field_hash([a, b]) and field_hash([b, a]) are unrelated.

    Returns:
        Canonical integer in [0, BN254_FIELD_MODULUS)

    Raises:
        ValueError: If the arity is unsupported or an input is negative
        TypeError: If an input is not an int
        PrimitiveFailureError: If the hash library fails or returns a value
            outside the field
    """
    elements = [to_field_element(value) for value in inputs]
    if len(elements) not in POSEIDON_ARITIES:
        raise ValueError(
            f"Unsupported Poseidon arity {len(elements)}; "
            f"supported: {', '.join(str(a) for a in POSEIDON_ARITIES)}"
        )

    try:
        digest = _POSEIDON.hash(len(elements), elements)
    except (ArithmeticError, IndexError, TypeError, ValueError) as exc:
        raise PrimitiveFailureError("Poseidon hash failed") from exc

    digest = int(digest)
    if not 0 <= digest < BN254_FIELD_MODULUS:
        raise PrimitiveFailureError("Poseidon returned a value outside the field")
    return digest
