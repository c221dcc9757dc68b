"""Public API for l2_identity: Jubjub/Poseidon L2 address and MPT key derivation."""
from __future__ import annotations

from importlib import import_module

from .derivation import (
    L2Identity,
    derive_address,
    derive_address_from_public_key,
    derive_identity,
    derive_public_key,
    derive_storage_key,
    derive_storage_key_for_address,
)
from .exceptions import (
    ConfigurationError,
    InvalidKeyFormatError,
    InvalidSlotError,
    L2KeyError,
    PrimitiveFailureError,
    SnapshotFormatError,
)
from .feature_flags import get_cache_mode, set_cache_mode
from .scalar import normalize
from .types import L2Address, MptKey, NormalizedScalar, PublicKeyBytes, SecretScalar

__all__ = [
    "derive_address",
    "derive_address_from_public_key",
    "derive_identity",
    "derive_public_key",
    "derive_storage_key",
    "derive_storage_key_for_address",
    "normalize",
    "get_cache_mode",
    "set_cache_mode",
    "L2Identity",
    "SecretScalar",
    "NormalizedScalar",
    "PublicKeyBytes",
    "L2Address",
    "MptKey",
    "L2KeyError",
    "InvalidKeyFormatError",
    "InvalidSlotError",
    "PrimitiveFailureError",
    "ConfigurationError",
    "SnapshotFormatError",
    "StateSnapshot",
    "load_snapshot",
    "find_user_entry",
]

_LAZY_EXPORTS = {
    "StateSnapshot": "snapshot",
    "load_snapshot": "snapshot",
    "find_user_entry": "snapshot",
}


def __getattr__(name: str):
    if name in _LAZY_EXPORTS:
        module = import_module(f"{__name__}.{_LAZY_EXPORTS[name]}")
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
