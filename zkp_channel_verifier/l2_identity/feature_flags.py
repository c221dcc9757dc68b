"""
Feature flags for derivation memoization.

Cache mode "memory" keeps derived public keys, addresses, and MPT keys in a
process-local cache. "off" recomputes every call.

Resolution order: explicit ``prefer`` argument, in-memory override set with
set_cache_mode(), the ZKP_CHANNEL_KEY_CACHE environment variable, then the
default. A bad argument is a caller bug and raises ValueError; a bad
environment value is a deployment problem and raises ConfigurationError, so
derivation calls only ever fail with L2KeyError subclasses.
"""

from __future__ import annotations

import os
from typing import Final

from .exceptions import ConfigurationError

CACHE_MODE_MEMORY: Final[str] = "memory"
CACHE_MODE_OFF: Final[str] = "off"

_VALID_CACHE_MODES: Final[tuple[str, ...]] = (CACHE_MODE_MEMORY, CACHE_MODE_OFF)
_DEFAULT_CACHE_MODE: Final[str] = CACHE_MODE_MEMORY
_ENV_VAR_NAME: Final[str] = "ZKP_CHANNEL_KEY_CACHE"

_cache_mode_override: str | None = None


def _parse_cache_mode(value: object) -> str | None:
    """Return the cache mode, None for unset/empty, or raise ValueError."""
    if value is None or value == "":
        return None
    if value in _VALID_CACHE_MODES:
        return value
    raise ValueError(
        f"Invalid cache mode: {value!r}. "
        f"Valid options: {', '.join(_VALID_CACHE_MODES)}"
    )


def _env_cache_mode() -> str | None:
    raw = os.getenv(_ENV_VAR_NAME)
    try:
        return _parse_cache_mode(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{_ENV_VAR_NAME}: {exc}") from exc


def get_cache_mode(prefer: str | None = None) -> str:
    """
    Resolve the active cache mode.

    Args:
        prefer: Optional cache mode that wins over every other source.

    Returns:
        "memory" or "off".

    Raises:
        ValueError: If prefer is not a valid cache mode.
        ConfigurationError: If ZKP_CHANNEL_KEY_CACHE holds an invalid value.
    """
    preferred = _parse_cache_mode(prefer)
    if preferred is not None:
        return preferred
    if _cache_mode_override is not None:
        return _cache_mode_override
    return _env_cache_mode() or _DEFAULT_CACHE_MODE


def set_cache_mode(value: str | None) -> None:
    """
    Force a cache mode for this process, or clear the override with None.

    Raises:
        ValueError: If the value is invalid.
    """
    global _cache_mode_override
    _cache_mode_override = _parse_cache_mode(value)


def cache_enabled() -> bool:
    """
    Raises:
        ConfigurationError: If ZKP_CHANNEL_KEY_CACHE holds an invalid value.
    """
    return get_cache_mode() == CACHE_MODE_MEMORY
