"""
Custom exceptions for L2 key derivation.

User input errors (InvalidKeyFormatError, InvalidSlotError) are recoverable
by the caller. PrimitiveFailureError means the curve or hash library rejected
an input that already passed validation and is never retried.
"""


class L2KeyError(Exception):
    """Base exception for L2 key derivation errors."""

    pass


class InvalidKeyFormatError(L2KeyError):
    """Secret, address, or public key is not well-formed hex of the right width."""

    pass


class InvalidSlotError(L2KeyError):
    """Storage slot is not an unsigned 32-bit integer."""

    pass


class PrimitiveFailureError(L2KeyError):
    """Curve or hash primitive failed on a validated input."""

    pass


class ConfigurationError(L2KeyError):
    """Configuration error."""

    pass


class SnapshotFormatError(L2KeyError):
    """State snapshot document is malformed."""

    pass
