"""
zkp-channel-verifier: L2 identity and storage-key derivation for state channels.

Derives the L2 public key, L2 address, and MPT storage keys that the channel
circuit and on-chain verifier expect for a given L2 secret.
"""

from .l2_identity import (
    derive_address,
    derive_address_from_public_key,
    derive_public_key,
    derive_storage_key,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "derive_address",
    "derive_address_from_public_key",
    "derive_public_key",
    "derive_storage_key",
    "print_disclaimer",
]


def print_disclaimer() -> None:
    """Print the key-handling disclaimer."""
    print(
        "⚠️  L2 secrets passed to this tool are held in process memory and may be\n"
        "   memoized for the lifetime of the process. Do not run it on shared\n"
        "   machines. Set ZKP_CHANNEL_KEY_CACHE=off to disable memoization.\n"
    )
