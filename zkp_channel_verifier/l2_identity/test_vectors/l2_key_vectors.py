# -*- coding: utf-8 -*-
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from ..derivation import (
    derive_address,
    derive_public_key,
    derive_storage_key,
    derive_storage_key_for_address,
)
from ..exceptions import L2KeyError
from ..scalar import normalize

VECTOR_FILE = Path(__file__).with_name("l2_key_vectors.json")


def load_vectors(path: Path = VECTOR_FILE) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def compute_identity(secret: str, slots: List[int]) -> Dict[str, Any]:
    scalar = normalize(secret)
    return {
        "expected_scalar_hex": "0x" + format(scalar.value, "064x"),
        "expected_public_key": derive_public_key(secret),
        "expected_address": derive_address(secret),
        "expected_mpt_keys": {
            str(slot): derive_storage_key(secret, slot) for slot in slots
        },
    }


def compute_expected(vectors: Dict[str, Any]) -> Dict[str, List[Dict[str, Any]]]:
    identities = []
    for idx, item in enumerate(_require_list(vectors.get("identities"), "identities")):
        secret = _require_string(item.get("secret"), f"identities[{idx}].secret")
        slots = [
            _require_slot(slot, f"identities[{idx}].expected_mpt_keys")
            for slot in item.get("expected_mpt_keys", {})
        ]
        identities.append(compute_identity(secret, slots))

    storage_keys = []
    for idx, item in enumerate(
        _require_list(vectors.get("storage_keys"), "storage_keys")
    ):
        address = _require_string(item.get("address"), f"storage_keys[{idx}].address")
        slot = _require_slot(item.get("slot"), f"storage_keys[{idx}].slot")
        storage_keys.append(
            {"expected_mpt_key": derive_storage_key_for_address(address, slot)}
        )

    return {"identities": identities, "storage_keys": storage_keys}


def validate_vectors(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    if data.get("version") != "1":
        errors.append("version must be 1")
    if data.get("curve") != "jubjub":
        errors.append("curve must be jubjub")
    if data.get("hash") != "poseidon-bn254":
        errors.append("hash must be poseidon-bn254")

    vectors = data.get("vectors")
    if not isinstance(vectors, dict):
        errors.append("vectors must be a dict")
        return errors

    try:
        expected = compute_expected(vectors)
    except (KeyError, TypeError, ValueError, L2KeyError) as exc:
        errors.append(str(exc))
        return errors

    for idx, (item, computed) in enumerate(
        zip(vectors["identities"], expected["identities"])
    ):
        label = item.get("name") or f"identities[{idx}]"
        for field_name in (
            "expected_scalar_hex",
            "expected_public_key",
            "expected_address",
            "expected_mpt_keys",
        ):
            if item.get(field_name) != computed[field_name]:
                errors.append(f"{label}.{field_name} mismatch")

    for idx, (item, computed) in enumerate(
        zip(vectors["storage_keys"], expected["storage_keys"])
    ):
        if item.get("expected_mpt_key") != computed["expected_mpt_key"]:
            errors.append(f"storage_keys[{idx}].expected_mpt_key mismatch")

    return errors


def _require_list(value: Any, field_name: str) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        raise TypeError(f"{field_name} must be a list")
    for idx, item in enumerate(value):
        if not isinstance(item, dict):
            raise TypeError(f"{field_name}[{idx}] must be an object")
    return value


def _require_slot(value: Any, field_name: str) -> int:
    if isinstance(value, str) and value.isdigit():
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise ValueError(f"{field_name} slot must be a non-negative integer")


def _require_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{field_name} must be a non-empty string")
    return value
