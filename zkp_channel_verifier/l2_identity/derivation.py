"""
Upstream API: hex secret in, hex address / public key / MPT key out.

All results are lowercase, zero-padded, "0x"-prefixed hex:
    address      42 chars
    public key   66 chars
    MPT key      66 chars

Errors are raised, never logged:
    InvalidKeyFormatError - malformed secret, address, or public key
    InvalidSlotError      - slot not an unsigned 32-bit integer
    PrimitiveFailureError - curve/hash library failure (fatal)
"""

from __future__ import annotations

from dataclasses import dataclass

from .cache import DerivationCache
from .config import DEFAULT_STORAGE_SLOT
from .curve import decompress_point
from .feature_flags import cache_enabled
from .identity import address_from_public_key, public_key, storage_key, validate_slot
from .scalar import normalize_scalar
from .types import L2Address, MptKey, PublicKeyBytes, SecretScalar

_public_key_cache: DerivationCache[PublicKeyBytes] = DerivationCache()
_address_cache: DerivationCache[L2Address] = DerivationCache()
_storage_key_cache: DerivationCache[MptKey] = DerivationCache()


def clear_caches() -> None:
    """Drop memoized results (testing only)."""
    _public_key_cache.clear()
    _address_cache.clear()
    _storage_key_cache.clear()


# ============================================================================
# TYPED PIPELINE
# ============================================================================


def public_key_for_secret(secret: SecretScalar) -> PublicKeyBytes:
    def compute() -> PublicKeyBytes:
        return public_key(normalize_scalar(secret))

    if not cache_enabled():
        return compute()
    return _public_key_cache.get_or_compute(secret.raw, compute)


def address_for_public_key(pk: PublicKeyBytes) -> L2Address:
    def compute() -> L2Address:
        return address_from_public_key(pk)

    if not cache_enabled():
        return compute()
    return _address_cache.get_or_compute(pk.raw, compute)


def storage_key_for_address(address: L2Address, slot: int) -> MptKey:
    slot = validate_slot(slot)

    def compute() -> MptKey:
        return storage_key(address, slot)

    if not cache_enabled():
        return compute()
    return _storage_key_cache.get_or_compute((address.raw, slot), compute)


@dataclass(frozen=True)
class L2Identity:
    """
    Public half of an L2 key: compressed public key and address.

    Example:
        >>> identity = derive_identity("0x" + "00" * 31 + "01")
        >>> identity.address.hex()
        '0x5e959f1938cf2062eed2b3d3fc4887d996e9c36a'
    """

    public_key: PublicKeyBytes
    address: L2Address

    def storage_key(self, slot: int = DEFAULT_STORAGE_SLOT) -> MptKey:
        return storage_key_for_address(self.address, slot)

    def to_dict(self, slots: tuple[int, ...] = (DEFAULT_STORAGE_SLOT,)) -> dict:
        return {
            "public_key": self.public_key.hex(),
            "address": self.address.hex(),
            "mpt_keys": {str(slot): self.storage_key(slot).hex() for slot in slots},
        }


def derive_identity(secret_hex: str) -> L2Identity:
    secret = SecretScalar.from_hex(secret_hex)
    pk = public_key_for_secret(secret)
    return L2Identity(public_key=pk, address=address_for_public_key(pk))


# ============================================================================
# HEX API
# ============================================================================


def derive_public_key(secret_hex: str) -> str:
    """
    Derive the compressed L2 public key.

    Args:
        secret_hex: 64 hex digits, optionally "0x"-prefixed

    Returns:
        "0x" + 64 lowercase hex digits
    """
    return public_key_for_secret(SecretScalar.from_hex(secret_hex)).hex()


def derive_address(secret_hex: str) -> str:
    """
    Derive the L2 address.

    Args:
        secret_hex: 64 hex digits, optionally "0x"-prefixed

    Returns:
        "0x" + 40 lowercase hex digits
    """
    return derive_identity(secret_hex).address.hex()


def derive_storage_key(secret_hex: str, slot: int = DEFAULT_STORAGE_SLOT) -> str:
    """
    Derive the MPT storage key for the user's (address, slot) pair.

    Args:
        secret_hex: 64 hex digits, optionally "0x"-prefixed
        slot: Unsigned 32-bit storage slot (default 0)

    Returns:
        "0x" + 64 lowercase hex digits
    """
    return derive_identity(secret_hex).storage_key(slot).hex()


def derive_storage_key_for_address(
    address_hex: str, slot: int = DEFAULT_STORAGE_SLOT
) -> str:
    """Derive the MPT storage key from an already-known L2 address."""
    return storage_key_for_address(L2Address.from_hex(address_hex), slot).hex()


def derive_address_from_public_key(public_key_hex: str) -> str:
    """
    Derive the L2 address for a compressed public key.

    The key must decode to a point in the Jubjub prime-order subgroup.

    Raises:
        InvalidKeyFormatError: If the key is malformed or not a curve point
    """
    pk = PublicKeyBytes.from_hex(public_key_hex)
    decompress_point(pk.raw)
    return address_for_public_key(pk).hex()
