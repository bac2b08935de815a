"""
Themis Protocol Constants

All protocol constants defined here for single source of truth.
"""

from typing import Final

# ==============================================================================
# PROTOCOL
# ==============================================================================

PROTOCOL_NAME: Final[str] = "themis"
ACCOUNT_LAYOUT_VERSION: Final[int] = 1     # 0 is reserved for never-written buffers

# ==============================================================================
# RISTRETTO255 GROUP
# ==============================================================================

# Prime order of the ristretto255 group (L)
GROUP_ORDER: Final[int] = 2**252 + 27742317777372353535851937790883648493

POINT_SIZE: Final[int] = 32                 # Canonical compressed encoding
SCALAR_SIZE: Final[int] = 32                # Little-endian, reduced mod L
WIDE_SCALAR_SIZE: Final[int] = 64           # Input size for wide reduction
CIPHERTEXT_SIZE: Final[int] = 2 * POINT_SIZE
PROOF_SIZE: Final[int] = 2 * POINT_SIZE + SCALAR_SIZE

IDENTITY_ENCODING: Final[bytes] = bytes(POINT_SIZE)

# ==============================================================================
# POLICIES
# ==============================================================================

# Interactions reference policies with a u8 index
MAX_POLICIES: Final[int] = 256
POLICIES_HEADER_SIZE: Final[int] = 1 + 1 + 2  # version, is_initialized, count (u16)

# ==============================================================================
# USER ACCOUNT
# ==============================================================================

USER_ACCOUNT_SIZE: Final[int] = (
    1                   # layout version
    + 1                 # is_initialized
    + CIPHERTEXT_SIZE   # encrypted_aggregate
    + POINT_SIZE        # registered public key
    + 4                 # interaction_count (u32)
    + 1                 # has decrypted_aggregate
    + POINT_SIZE        # decrypted_aggregate
    + 1                 # proof_verified
    + PROOF_SIZE        # accepted proof
    + 1                 # payment_requested
)

MAX_INTERACTION_COUNT: Final[int] = 0xFFFFFFFF

# ==============================================================================
# DEFAULTS
# ==============================================================================

DEFAULT_MAX_INTERACTIONS_PER_CALL: Final[int] = 64
DEFAULT_PLAINTEXT_BITS: Final[int] = 16     # Search bound for scalar recovery
DEFAULT_DB_NAME: Final[str] = "themis_accounts.db"

ACCOUNT_KIND_USER: Final[str] = "user"
ACCOUNT_KIND_POLICIES: Final[str] = "policies"
ADDRESS_SIZE: Final[int] = 32

BIG_ENDIAN: Final[str] = "big"
LITTLE_ENDIAN: Final[str] = "little"


def policies_account_size(count: int) -> int:
    """Size in bytes of a policies account holding count scalars."""
    return POLICIES_HEADER_SIZE + count * SCALAR_SIZE
