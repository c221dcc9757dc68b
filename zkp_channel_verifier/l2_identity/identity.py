"""
L2 identity derivation.

Pipeline (must match the on-chain verifier bit for bit):

    scalar --(* G, compress)--> PublicKeyBytes            (32 bytes)
    PublicKeyBytes --(Poseidon-1, low 20 bytes)--> L2Address
    (L2Address, slot) --(Poseidon-2, full 32 bytes)--> MptKey

Poseidon-1 takes the public key as a big-endian integer. Poseidon-2 takes
[address, slot] in that order.
"""

from __future__ import annotations

from .config import MAX_STORAGE_SLOT
from .curve import compress_point, scalar_mult_base
from .exceptions import InvalidSlotError
from .poseidon import field_hash
from .types import L2Address, MptKey, NormalizedScalar, PublicKeyBytes


def public_key(scalar: NormalizedScalar) -> PublicKeyBytes:
    """Compute the compressed public key for a normalized scalar."""
    point = scalar_mult_base(scalar.value)
    return PublicKeyBytes(compress_point(point))


def address_from_public_key(pk: PublicKeyBytes) -> L2Address:
    """Hash a public key to its 20-byte L2 address."""
    return L2Address.from_field_element(field_hash([pk.to_int()]))


def validate_slot(slot: int) -> int:
    """
    Check that slot is an unsigned 32-bit integer.

    Raises:
        InvalidSlotError: If slot is not an int in [0, MAX_STORAGE_SLOT]
    """
    if not isinstance(slot, int) or isinstance(slot, bool):
        raise InvalidSlotError(f"Storage slot must be int, got {type(slot).__name__}")
    if not 0 <= slot <= MAX_STORAGE_SLOT:
        raise InvalidSlotError(f"Storage slot out of range: {slot}")
    return slot


def storage_key(address: L2Address, slot: int) -> MptKey:
    """
    Derive the MPT storage key for an address and slot.

    Raises:
        InvalidSlotError: If slot is not an unsigned 32-bit integer
    """
    slot = validate_slot(slot)
    return MptKey.from_field_element(field_hash([address.to_int(), slot]))
