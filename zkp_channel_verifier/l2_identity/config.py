"""
Domain parameters for L2 identity and storage-key derivation.

These values must match the paired circuit and on-chain verifier exactly.
Changing any of them silently produces addresses and MPT keys that the
verifier will not recognise.

Curve: Jubjub (Zcash), twisted Edwards over the BLS12-381 scalar field.
Hash: Poseidon over the BN254 scalar field, circomlibjs constants.
"""

from .exceptions import ConfigurationError

# ============================================================================
# CURVE SELECTION
# ============================================================================

# IMPLEMENTATION: Jubjub via python-ecdsa (CurveEdTw / PointEdwards)
# - a*x^2 + y^2 = 1 + d*x^2*y^2 with a = -1
# - cofactor 8, base point generates the prime-order subgroup
# - compressed encoding: little-endian y, parity of x in the top bit

CURVE_NAME = "jubjub"
CURVE_LIBRARY = "ecdsa"

# ============================================================================
# GROUP PARAMETERS
# ============================================================================

JUBJUB_FIELD_MODULUS = (
    0x73EDA753299D7D483339D80809A1D80553BDA402FFFE5BFEFFFFFFFF00000001
)
JUBJUB_A = JUBJUB_FIELD_MODULUS - 1
JUBJUB_D = 0x2A9318E74BFA2B48F5FD9207E6BD7FD4292D7F6D37579D2601065FD6D6343EB1
JUBJUB_ORDER = 0x0E7DB4EA6533AFA906673B0101343B00A6682093CCC81082D0970E5ED6F72CB7
JUBJUB_ORDER_BITS = 252
JUBJUB_COFACTOR = 8

# Base point used by noble-curves `jubjub.Point.BASE`
JUBJUB_BASE_X = 0x11DAFE5D23E1218086A365B99FBF3D3BE72F6AFD7D1F72623E6B071492D1122B
JUBJUB_BASE_Y = 0x1D523CF1DDAB1A1793132E78C866C0C33E26BA5CC220FED7CC3F870E59D292AA

POINT_SIZE_BYTES = 32  # Compressed point format

# ============================================================================
# HASH FUNCTIONS
# ============================================================================

HASH_FUNCTION = "poseidon"
HASH_LIBRARY = "circomlibpy"

# BN254 scalar field (circomlibjs `poseidon.F`)
BN254_FIELD_MODULUS = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)
FIELD_ELEMENT_BYTES = 32

# Arity 1: public key -> address. Arity 2: [address, slot] -> MPT key.
POSEIDON_ARITIES = (1, 2)

# ============================================================================
# ENCODING WIDTHS
# ============================================================================

SECRET_SIZE_BYTES = 32
ADDRESS_SIZE_BYTES = 20
MPT_KEY_SIZE_BYTES = 32

HEX_PREFIX = "0x"

# ============================================================================
# STORAGE SLOTS
# ============================================================================

DEFAULT_STORAGE_SLOT = 0
MAX_STORAGE_SLOT = 2**32 - 1

# ============================================================================
# MEMOIZATION LIMITS
# ============================================================================

MAX_CACHE_ENTRIES = 10_000

# ============================================================================
# VALIDATION
# ============================================================================


def validate_config() -> bool:
    """
    Validate domain parameters.

    Returns:
        True if configuration is valid

    Raises:
        ConfigurationError: If a parameter is inconsistent
    """
    if CURVE_NAME != "jubjub":
        raise ConfigurationError(f"Unsupported curve: {CURVE_NAME!r}")
    if CURVE_LIBRARY != "ecdsa":
        raise ConfigurationError(f"Unsupported curve library: {CURVE_LIBRARY!r}")
    if HASH_FUNCTION != "poseidon" or HASH_LIBRARY != "circomlibpy":
        raise ConfigurationError(
            f"Unsupported hash: {HASH_FUNCTION!r} via {HASH_LIBRARY!r}"
        )

    if JUBJUB_ORDER.bit_length() != JUBJUB_ORDER_BITS:
        raise ConfigurationError("JUBJUB_ORDER has unexpected bit length")
    if JUBJUB_ORDER * JUBJUB_COFACTOR >= 2 * JUBJUB_FIELD_MODULUS:
        raise ConfigurationError("JUBJUB_ORDER is inconsistent with the field")

    p = JUBJUB_FIELD_MODULUS
    x, y = JUBJUB_BASE_X, JUBJUB_BASE_Y
    if (JUBJUB_A * x * x + y * y - 1 - JUBJUB_D * x * x * y * y) % p != 0:
        raise ConfigurationError("Jubjub base point is not on the curve")

    # Compressed encoding needs one spare bit above the field for the x sign
    if (p.bit_length() + 1 + 7) // 8 != POINT_SIZE_BYTES:
        raise ConfigurationError("POINT_SIZE_BYTES does not match the field")

    if BN254_FIELD_MODULUS.bit_length() > FIELD_ELEMENT_BYTES * 8:
        raise ConfigurationError("BN254 modulus does not fit a field element")
    if 8 * ADDRESS_SIZE_BYTES >= BN254_FIELD_MODULUS.bit_length():
        raise ConfigurationError("Addresses must be strictly narrower than the field")
    if MAX_STORAGE_SLOT >= BN254_FIELD_MODULUS:
        raise ConfigurationError("MAX_STORAGE_SLOT exceeds the hash field")

    if MAX_CACHE_ENTRIES < 0:
        raise ConfigurationError("MAX_CACHE_ENTRIES must be non-negative")

    return True


# Auto-validate on import
validate_config()
