"""
Channel state snapshot parsing and lookup by MPT key.

A snapshot is the JSON document emitted by the synthesizer after each
channel transaction:

    {
      "stateRoot": "0x...",
      "storageEntries": [{"index": 0, "key": "0x...", "value": "0x..."}],
      "registeredKeys": ["0x..."],
      "contractAddress": "0x...",
      "userL2Addresses": ["0x..."],
      "userStorageSlots": [0],
      "timestamp": 1700000000,
      "userNonces": [0]
    }

The full synthesizer result nests the snapshot under "state"; both shapes
are accepted. Keys and addresses are canonicalized to lowercase zero-padded
hex so that lookups by derived MPT key are exact.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import ADDRESS_SIZE_BYTES, HEX_PREFIX, MPT_KEY_SIZE_BYTES
from .derivation import derive_identity
from .exceptions import SnapshotFormatError
from .identity import validate_slot
from .types import L2Address, MptKey

KeyLike = Union[str, MptKey]
AddressLike = Union[str, L2Address]

_DECIMAL_DIGITS = re.compile(r"[0-9]+")
_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


# ============================================================================
# FIELD PARSING
# ============================================================================


def _parse_uint(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise SnapshotFormatError(f"{field_name} must be an integer")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        # ASCII digits only: int() also takes "1_000", " 1f" and non-ASCII digits
        if value.startswith(HEX_PREFIX):
            digits, base, pattern = value[len(HEX_PREFIX):], 16, _HEX_DIGITS
        else:
            digits, base, pattern = value, 10, _DECIMAL_DIGITS
        if not pattern.fullmatch(digits):
            raise SnapshotFormatError(f"{field_name} must be an integer")
        parsed = int(digits, base)
    else:
        raise SnapshotFormatError(f"{field_name} must be an integer")

    if parsed < 0:
        raise SnapshotFormatError(f"{field_name} must be non-negative")
    return parsed


def _canonical_hex(value: Any, size_bytes: int, field_name: str) -> str:
    if not isinstance(value, str) or not value.startswith(HEX_PREFIX):
        raise SnapshotFormatError(f"{field_name} must be a 0x-prefixed hex string")
    parsed = _parse_uint(value, field_name)
    if parsed.bit_length() > size_bytes * 8:
        raise SnapshotFormatError(f"{field_name} must fit in {size_bytes} bytes")
    return HEX_PREFIX + format(parsed, f"0{size_bytes * 2}x")


def _require_list(data: Dict[str, Any], name: str, required: bool = False) -> List[Any]:
    if name not in data:
        if required:
            raise SnapshotFormatError(f"{name} is required")
        return []
    value = data[name]
    if not isinstance(value, list):
        raise SnapshotFormatError(f"{name} must be a list")
    return value


def _key_text(mpt_key: KeyLike) -> str:
    if isinstance(mpt_key, MptKey):
        return mpt_key.hex()
    return MptKey.from_hex(mpt_key).hex()


def _address_text(address: AddressLike) -> str:
    if isinstance(address, L2Address):
        return address.hex()
    return L2Address.from_hex(address).hex()


# ============================================================================
# SNAPSHOT TYPES
# ============================================================================


@dataclass(frozen=True)
class StorageEntry:
    index: int
    key: str
    value: int

    @classmethod
    def from_dict(cls, data: Any, position: int) -> "StorageEntry":
        label = f"storageEntries[{position}]"
        if not isinstance(data, dict):
            raise SnapshotFormatError(f"{label} must be an object")
        for name in ("index", "key", "value"):
            if name not in data:
                raise SnapshotFormatError(f"{label} must include {name!r}")
        return cls(
            index=_parse_uint(data["index"], f"{label}.index"),
            key=_canonical_hex(data["key"], MPT_KEY_SIZE_BYTES, f"{label}.key"),
            value=_parse_uint(data["value"], f"{label}.value"),
        )


@dataclass(frozen=True)
class StateSnapshot:
    """
    Parsed channel state snapshot.

    Example:
        >>> snapshot = StateSnapshot.from_dict(json.loads(text))
        >>> entry = snapshot.find_entry(derive_storage_key(secret, 0))
    """

    state_root: str
    storage_entries: Tuple[StorageEntry, ...]
    registered_keys: Tuple[str, ...] = ()
    contract_address: Optional[str] = None
    user_l2_addresses: Tuple[str, ...] = ()
    user_storage_slots: Tuple[int, ...] = ()
    timestamp: Optional[int] = None
    user_nonces: Tuple[int, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "StateSnapshot":
        """
        Build a snapshot from its JSON object form.

        Raises:
            SnapshotFormatError: If a required field is missing or malformed
        """
        if not isinstance(data, dict):
            raise SnapshotFormatError("snapshot must be a JSON object")
        if "storageEntries" not in data and isinstance(data.get("state"), dict):
            data = data["state"]

        if "stateRoot" not in data:
            raise SnapshotFormatError("stateRoot is required")

        entries = tuple(
            StorageEntry.from_dict(item, position)
            for position, item in enumerate(
                _require_list(data, "storageEntries", required=True)
            )
        )
        seen: set[str] = set()
        for entry in entries:
            if entry.key in seen:
                raise SnapshotFormatError(f"duplicate storage key {entry.key}")
            seen.add(entry.key)

        contract_address = data.get("contractAddress")
        if contract_address is not None:
            contract_address = _canonical_hex(
                contract_address, ADDRESS_SIZE_BYTES, "contractAddress"
            )

        timestamp = data.get("timestamp")
        if timestamp is not None:
            timestamp = _parse_uint(timestamp, "timestamp")

        return cls(
            state_root=_canonical_hex(
                data["stateRoot"], MPT_KEY_SIZE_BYTES, "stateRoot"
            ),
            storage_entries=entries,
            registered_keys=tuple(
                _canonical_hex(key, MPT_KEY_SIZE_BYTES, f"registeredKeys[{i}]")
                for i, key in enumerate(_require_list(data, "registeredKeys"))
            ),
            contract_address=contract_address,
            user_l2_addresses=tuple(
                _canonical_hex(address, ADDRESS_SIZE_BYTES, f"userL2Addresses[{i}]")
                for i, address in enumerate(_require_list(data, "userL2Addresses"))
            ),
            user_storage_slots=tuple(
                _parse_uint(slot, f"userStorageSlots[{i}]")
                for i, slot in enumerate(_require_list(data, "userStorageSlots"))
            ),
            timestamp=timestamp,
            user_nonces=tuple(
                _parse_uint(nonce, f"userNonces[{i}]")
                for i, nonce in enumerate(_require_list(data, "userNonces"))
            ),
        )

    @cached_property
    def _entries_by_key(self) -> Dict[str, StorageEntry]:
        return {entry.key: entry for entry in self.storage_entries}

    def find_entry(self, mpt_key: KeyLike) -> Optional[StorageEntry]:
        return self._entries_by_key.get(_key_text(mpt_key))

    def is_registered(self, mpt_key: KeyLike) -> bool:
        return _key_text(mpt_key) in self.registered_keys

    def user_index(self, address: AddressLike) -> Optional[int]:
        try:
            return self.user_l2_addresses.index(_address_text(address))
        except ValueError:
            return None

    def user_nonce(self, address: AddressLike) -> Optional[int]:
        index = self.user_index(address)
        if index is None or index >= len(self.user_nonces):
            return None
        return self.user_nonces[index]


def load_snapshot(path: Union[str, Path]) -> StateSnapshot:
    """
    Read and parse a snapshot file.

    Raises:
        SnapshotFormatError: If the file is not valid JSON or not a snapshot
        OSError: If the file cannot be read
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise SnapshotFormatError(f"{path} is not valid JSON") from exc
    return StateSnapshot.from_dict(data)


# ============================================================================
# LOOKUP BY SECRET
# ============================================================================


@dataclass(frozen=True)
class UserEntry:
    address: str
    slot: int
    mpt_key: str
    entry: Optional[StorageEntry]
    registered: bool


def find_user_entry(
    snapshot: StateSnapshot, secret_hex: str, slot: int = 0
) -> UserEntry:
    """
    Locate the storage entry owned by a secret at a given slot.

    Raises:
        InvalidKeyFormatError: If secret_hex is malformed
        InvalidSlotError: If slot is not an unsigned 32-bit integer
    """
    identity = derive_identity(secret_hex)
    mpt_key = identity.storage_key(validate_slot(slot))
    return UserEntry(
        address=identity.address.hex(),
        slot=slot,
        mpt_key=mpt_key.hex(),
        entry=snapshot.find_entry(mpt_key),
        registered=snapshot.is_registered(mpt_key),
    )


def find_user_entries(snapshot: StateSnapshot, secret_hex: str) -> List[UserEntry]:
    """Look up the user's entries for every snapshot slot (slot 0 if none)."""
    slots = snapshot.user_storage_slots or (0,)
    return [find_user_entry(snapshot, secret_hex, slot) for slot in slots]
