"""
Value types for L2 key derivation.

Each stage of the derivation has its own immutable type so that the two
truncation rules cannot be mixed up:

1. SecretScalar - raw 32-byte user secret (never shown in repr)
2. NormalizedScalar - nonzero scalar below the Jubjub subgroup order
3. PublicKeyBytes - 32-byte compressed Jubjub point
4. L2Address - low 20 bytes of a Poseidon output
5. MptKey - all 32 bytes of a Poseidon output

Conversions from field elements happen only through
L2Address.from_field_element and MptKey.from_field_element.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import (
    ADDRESS_SIZE_BYTES,
    FIELD_ELEMENT_BYTES,
    JUBJUB_ORDER,
    MPT_KEY_SIZE_BYTES,
    POINT_SIZE_BYTES,
    SECRET_SIZE_BYTES,
)
from .encoding import bytes_to_int, int_to_fixed_bytes, require_hex, to_hex

# ============================================================================
# SECRETS AND SCALARS
# ============================================================================


@dataclass(frozen=True)
class SecretScalar:
    """
    A 256-bit secret as supplied by the user, not yet reduced.

    Example:
        >>> secret = SecretScalar.from_hex("0x" + "11" * 32)
        >>> secret.to_int() > 0
        True
    """

    raw: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.raw, bytes) or len(self.raw) != SECRET_SIZE_BYTES:
            raise ValueError(f"SecretScalar must be {SECRET_SIZE_BYTES} bytes")

    @classmethod
    def from_hex(cls, value: str) -> "SecretScalar":
        """
        Parse a secret from hex.

        Raises:
            InvalidKeyFormatError: If value is not exactly 64 hex digits
                (after an optional "0x" prefix)
        """
        return cls(require_hex(value, SECRET_SIZE_BYTES, "secret"))

    def to_int(self) -> int:
        return bytes_to_int(self.raw)


@dataclass(frozen=True)
class NormalizedScalar:
    """Private scalar in [1, JUBJUB_ORDER - 1]."""

    value: int = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or not 0 < self.value < JUBJUB_ORDER:
            raise ValueError("NormalizedScalar must be in [1, JUBJUB_ORDER - 1]")


# ============================================================================
# PUBLIC VALUES
# ============================================================================


@dataclass(frozen=True)
class PublicKeyBytes:
    """Compressed Jubjub public key (32 bytes)."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, bytes) or len(self.raw) != POINT_SIZE_BYTES:
            raise ValueError(f"PublicKeyBytes must be {POINT_SIZE_BYTES} bytes")

    @classmethod
    def from_hex(cls, value: str) -> "PublicKeyBytes":
        return cls(require_hex(value, POINT_SIZE_BYTES, "public_key"))

    def to_int(self) -> int:
        """Big-endian integer value, as fed to the address hash."""
        return bytes_to_int(self.raw)

    def hex(self) -> str:
        return to_hex(self.raw)

    def __str__(self) -> str:
        return self.hex()


@dataclass(frozen=True)
class L2Address:
    """20-byte L2 address."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, bytes) or len(self.raw) != ADDRESS_SIZE_BYTES:
            raise ValueError(f"L2Address must be {ADDRESS_SIZE_BYTES} bytes")

    @classmethod
    def from_hex(cls, value: str) -> "L2Address":
        return cls(require_hex(value, ADDRESS_SIZE_BYTES, "address"))

    @classmethod
    def from_field_element(cls, element: int) -> "L2Address":
        """
        Keep the least-significant 20 bytes of a hash output.

        Equivalent to taking the last 40 characters of the zero-padded
        64-digit big-endian hex rendering of the element.
        """
        full = int_to_fixed_bytes(element, FIELD_ELEMENT_BYTES, "field element")
        return cls(full[-ADDRESS_SIZE_BYTES:])

    def to_int(self) -> int:
        return bytes_to_int(self.raw)

    def hex(self) -> str:
        return to_hex(self.raw)

    def __str__(self) -> str:
        return self.hex()


@dataclass(frozen=True)
class MptKey:
    """32-byte storage key for a (address, slot) pair."""

    raw: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.raw, bytes) or len(self.raw) != MPT_KEY_SIZE_BYTES:
            raise ValueError(f"MptKey must be {MPT_KEY_SIZE_BYTES} bytes")

    @classmethod
    def from_hex(cls, value: str) -> "MptKey":
        return cls(require_hex(value, MPT_KEY_SIZE_BYTES, "mpt_key"))

    @classmethod
    def from_field_element(cls, element: int) -> "MptKey":
        """Use the full 32-byte big-endian encoding of a hash output."""
        return cls(int_to_fixed_bytes(element, MPT_KEY_SIZE_BYTES, "field element"))

    def to_int(self) -> int:
        return bytes_to_int(self.raw)

    def hex(self) -> str:
        return to_hex(self.raw)

    def __str__(self) -> str:
        return self.hex()
