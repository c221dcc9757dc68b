"""Fixed-width hex and integer encoding helpers."""

from __future__ import annotations

import re
from typing import Any

from .config import HEX_PREFIX
from .exceptions import InvalidKeyFormatError

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")


def strip_hex_prefix(value: str) -> str:
    if value.startswith(HEX_PREFIX):
        return value[len(HEX_PREFIX):]
    return value


def require_hex(value: Any, size_bytes: int, field_name: str) -> bytes:
    """
    Decode a fixed-width hex string.

    Args:
        value: Hex string, optionally "0x"-prefixed (lowercase prefix only)
        size_bytes: Exact number of bytes expected
        field_name: Name used in error messages

    Returns:
        Decoded bytes, exactly size_bytes long

    Raises:
        InvalidKeyFormatError: On wrong type, length, or non-hex characters
    """
    if not isinstance(value, str):
        raise InvalidKeyFormatError(f"{field_name} must be a hex string")
    digits = strip_hex_prefix(value)
    if len(digits) != size_bytes * 2:
        raise InvalidKeyFormatError(
            f"{field_name} must be {size_bytes * 2} hex chars, got {len(digits)}"
        )
    # bytes.fromhex() tolerates whitespace, so check the alphabet first
    if not _HEX_DIGITS.fullmatch(digits):
        raise InvalidKeyFormatError(f"{field_name} must be valid hex")
    return bytes.fromhex(digits)


def to_hex(data: bytes) -> str:
    return HEX_PREFIX + data.hex()


def int_to_fixed_bytes(value: int, size_bytes: int, field_name: str) -> bytes:
    if value < 0:
        raise ValueError(f"{field_name} must be non-negative")
    if value.bit_length() > size_bytes * 8:
        raise ValueError(f"{field_name} must fit in {size_bytes} bytes")
    return value.to_bytes(size_bytes, byteorder="big")


def bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, byteorder="big")
