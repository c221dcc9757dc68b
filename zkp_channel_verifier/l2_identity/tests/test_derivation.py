"""
Unit tests for the hex derivation API.

Tests cover:
1. Output format and determinism
2. Slot and input-order sensitivity of MPT keys
3. Address collisions over random secrets
4. Golden vectors from an independent reference implementation
5. Public-key inputs and error propagation
"""

import json
import re
import secrets

import pytest

from zkp_channel_verifier import (
    derive_address as root_derive_address,
    derive_storage_key as root_derive_storage_key,
)
from zkp_channel_verifier.l2_identity import derivation, feature_flags
from zkp_channel_verifier.l2_identity.config import JUBJUB_ORDER, MAX_STORAGE_SLOT
from zkp_channel_verifier.l2_identity.derivation import (
    L2Identity,
    derive_address,
    derive_address_from_public_key,
    derive_identity,
    derive_public_key,
    derive_storage_key,
    derive_storage_key_for_address,
)
from zkp_channel_verifier.l2_identity.exceptions import (
    InvalidKeyFormatError,
    InvalidSlotError,
    L2KeyError,
    PrimitiveFailureError,
)
from zkp_channel_verifier.l2_identity.test_vectors.l2_key_vectors import VECTOR_FILE

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-f]{40}$")
KEY_PATTERN = re.compile(r"^0x[0-9a-f]{64}$")

SECRET_ONE = "0x" + "00" * 31 + "01"
ONE_PUBLIC_KEY = "0xaa92d2590e873fccd7fe20c25cba263ec3c066c8782e1393171aabddf13c529d"
ONE_ADDRESS = "0x5e959f1938cf2062eed2b3d3fc4887d996e9c36a"
ONE_SLOT0_KEY = "0x2563f89e87d5b16d5df24ec9d5e2bb3cb81cf5ea5701e4a04d1d2e5048a395c2"
ONE_SLOT1_KEY = "0x1874088549fada77548cd36580cad006c0bf96ac7274b1e4896d2e3a0aa54d1e"

with VECTOR_FILE.open("r", encoding="utf-8") as _handle:
    GOLDEN = json.load(_handle)["vectors"]


def _hex(value: int) -> str:
    return "0x" + format(value, "064x")


@pytest.fixture(autouse=True)
def fresh_caches():
    derivation.clear_caches()
    feature_flags.set_cache_mode(None)
    yield
    derivation.clear_caches()
    feature_flags.set_cache_mode(None)


# ============================================================================
# FORMAT AND DETERMINISM
# ============================================================================


class TestOutputFormat:
    """Test rendered hex widths and case."""

    def test_address_pattern(self):
        for _ in range(20):
            assert ADDRESS_PATTERN.match(derive_address("0x" + secrets.token_hex(32)))

    def test_public_key_and_mpt_key_pattern(self):
        secret = "0x" + secrets.token_hex(32)
        assert KEY_PATTERN.match(derive_public_key(secret))
        assert KEY_PATTERN.match(derive_storage_key(secret))

    def test_known_values(self):
        assert derive_public_key(SECRET_ONE) == ONE_PUBLIC_KEY
        assert derive_address(SECRET_ONE) == ONE_ADDRESS
        assert derive_storage_key(SECRET_ONE) == ONE_SLOT0_KEY
        assert derive_storage_key(SECRET_ONE, 1) == ONE_SLOT1_KEY

    def test_root_package_exports(self):
        assert root_derive_address(SECRET_ONE) == ONE_ADDRESS
        assert root_derive_storage_key(SECRET_ONE, 1) == ONE_SLOT1_KEY


class TestDeterminism:
    """Test repeated derivation gives identical results."""

    def test_address_deterministic(self):
        secret = "0x" + secrets.token_hex(32)
        assert derive_address(secret) == derive_address(secret)

    def test_deterministic_without_cache(self):
        secret = "0x" + secrets.token_hex(32)
        cached = (derive_address(secret), derive_storage_key(secret, 3))
        feature_flags.set_cache_mode("off")
        assert (derive_address(secret), derive_storage_key(secret, 3)) == cached

    def test_zero_secret_matches_scalar_one(self):
        assert derive_address(_hex(0)) == ONE_ADDRESS
        assert derive_storage_key(_hex(0)) == ONE_SLOT0_KEY

    def test_order_multiple_matches_scalar_one(self):
        assert derive_public_key(_hex(JUBJUB_ORDER)) == ONE_PUBLIC_KEY
        assert derive_address(_hex(2 * JUBJUB_ORDER)) == ONE_ADDRESS


# ============================================================================
# SLOT AND ORDER SENSITIVITY
# ============================================================================


class TestStorageKeys:
    """Test MPT key derivation."""

    def test_slot_changes_key(self):
        secret = "0x" + secrets.token_hex(32)
        assert derive_storage_key(secret, 0) != derive_storage_key(secret, 1)

    def test_default_slot_is_zero(self):
        secret = "0x" + secrets.token_hex(32)
        assert derive_storage_key(secret) == derive_storage_key(secret, 0)

    def test_slot_range(self):
        assert KEY_PATTERN.match(derive_storage_key(SECRET_ONE, MAX_STORAGE_SLOT))

    @pytest.mark.parametrize("slot", [-1, MAX_STORAGE_SLOT + 1, "0", 0.0])
    def test_invalid_slot(self, slot):
        with pytest.raises(InvalidSlotError):
            derive_storage_key(SECRET_ONE, slot)

    def test_secret_checked_before_slot(self):
        with pytest.raises(InvalidKeyFormatError):
            derive_storage_key("0x1234", -1)

    def test_key_for_address_matches_key_for_secret(self):
        address = derive_address(SECRET_ONE)
        assert derive_storage_key_for_address(address, 1) == ONE_SLOT1_KEY


# ============================================================================
# COLLISIONS
# ============================================================================


def _assert_no_address_collisions(count: int) -> None:
    seen = {}
    for _ in range(count):
        secret_int = secrets.randbelow(JUBJUB_ORDER - 1) + 1
        address = derive_address(_hex(secret_int))
        assert address not in seen or seen[address] == secret_int
        seen[address] = secret_int


def test_no_address_collisions_small_sample():
    _assert_no_address_collisions(200)


@pytest.mark.slow
def test_no_address_collisions_10k():
    feature_flags.set_cache_mode("off")
    _assert_no_address_collisions(10_000)


def test_congruent_scalars_do_not_collide():
    # s and s + 3 are congruent mod 3 but must still give distinct addresses
    base = secrets.randbelow(JUBJUB_ORDER - 10) + 1
    addresses = {derive_address(_hex(base + offset)) for offset in (0, 3, 6, 9)}
    assert len(addresses) == 4


# ============================================================================
# GOLDEN VECTORS
# ============================================================================


@pytest.mark.parametrize(
    "vector", GOLDEN["identities"], ids=[v["name"] for v in GOLDEN["identities"]]
)
def test_golden_identity(vector):
    secret = vector["secret"]
    assert derive_public_key(secret) == vector["expected_public_key"]
    assert derive_address(secret) == vector["expected_address"]
    for slot, expected in vector["expected_mpt_keys"].items():
        assert derive_storage_key(secret, int(slot)) == expected


@pytest.mark.parametrize("vector", GOLDEN["storage_keys"])
def test_golden_storage_key(vector):
    assert (
        derive_storage_key_for_address(vector["address"], vector["slot"])
        == vector["expected_mpt_key"]
    )


# ============================================================================
# IDENTITY BUNDLE
# ============================================================================


class TestL2Identity:
    """Test derive_identity and L2Identity."""

    def test_bundle(self):
        identity = derive_identity(SECRET_ONE)
        assert isinstance(identity, L2Identity)
        assert identity.public_key.hex() == ONE_PUBLIC_KEY
        assert identity.address.hex() == ONE_ADDRESS
        assert identity.storage_key().hex() == ONE_SLOT0_KEY

    def test_to_dict(self):
        data = derive_identity(SECRET_ONE).to_dict((0, 1))
        assert data == {
            "public_key": ONE_PUBLIC_KEY,
            "address": ONE_ADDRESS,
            "mpt_keys": {"0": ONE_SLOT0_KEY, "1": ONE_SLOT1_KEY},
        }

    def test_repr_has_no_secret(self):
        secret = "ab" * 32
        assert "ab" * 8 not in repr(derive_identity(secret))


# ============================================================================
# PUBLIC-KEY INPUTS
# ============================================================================


class TestAddressFromPublicKey:
    """Test derive_address_from_public_key."""

    def test_matches_secret_path(self):
        secret = "0x" + secrets.token_hex(32)
        pk = derive_public_key(secret)
        assert derive_address_from_public_key(pk) == derive_address(secret)

    def test_known_value(self):
        assert derive_address_from_public_key(ONE_PUBLIC_KEY) == ONE_ADDRESS

    @pytest.mark.parametrize(
        "value",
        [
            "0x1234",
            "0x" + "zz" * 32,
            "0x02" + "00" * 31,
            "0x01" + "00" * 31,
        ],
    )
    def test_invalid_public_key(self, value):
        with pytest.raises(InvalidKeyFormatError):
            derive_address_from_public_key(value)


# ============================================================================
# ERRORS
# ============================================================================


class TestErrors:
    """Test error types surfaced by the hex API."""

    @pytest.mark.parametrize(
        "secret",
        [
            "",
            "0x",
            "0x" + "00" * 31,
            "0x" + "00" * 33,
            "0X" + "00" * 32,
            "0x" + "0g" + "00" * 31,
        ],
    )
    def test_malformed_secret(self, secret):
        with pytest.raises(InvalidKeyFormatError):
            derive_address(secret)
        with pytest.raises(InvalidKeyFormatError):
            derive_public_key(secret)
        with pytest.raises(InvalidKeyFormatError):
            derive_storage_key(secret, 0)

    def test_errors_share_base_class(self):
        for error in (InvalidKeyFormatError, InvalidSlotError, PrimitiveFailureError):
            assert issubclass(error, L2KeyError)

    def test_primitive_failure_propagates(self, monkeypatch):
        from zkp_channel_verifier.l2_identity import identity

        def broken(scalar):
            raise PrimitiveFailureError("Scalar multiplication produced the identity")

        monkeypatch.setattr(identity, "scalar_mult_base", broken)
        with pytest.raises(PrimitiveFailureError):
            derive_public_key("0x" + secrets.token_hex(32))
