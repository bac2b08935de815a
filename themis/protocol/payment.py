"""
Themis Payment Request

Final transition: accepted only when the caller presents exactly the state
that was verified.
"""

from __future__ import annotations
import hmac
import logging
from typing import Optional

from themis.config import ProtocolConfig
from themis.core.types import Ciphertext, GroupElement
from themis.crypto.proofs import DecryptionProof, verify_correct_decryption
from themis.errors import InvalidProofError, StateMismatchError
from themis.state.machine import UserStatus, require_status
from themis.state.user import User

logger = logging.getLogger(__name__)


def request_payment(
    user: User,
    encrypted_aggregate: Ciphertext,
    decrypted_aggregate: GroupElement,
    proof: DecryptionProof,
    config: Optional[ProtocolConfig] = None,
) -> User:
    """
    Request payment against the verified aggregate.

    Returns:
        New user state in PAYMENT_REQUESTED status

    Raises:
        NotInitializedError: If the user is uninitialized
        InvalidStateError: If no proof was accepted or payment was already requested
        StateMismatchError: If any supplied value differs from stored state
        InvalidProofError: If re-verification is enabled and fails
    """
    config = config or ProtocolConfig()

    require_status(user, UserStatus.DECRYPTED, "request payment")

    if not hmac.compare_digest(bytes(encrypted_aggregate), bytes(user.encrypted_aggregate)):
        raise StateMismatchError("encrypted_aggregate")
    if not hmac.compare_digest(bytes(decrypted_aggregate), bytes(user.decrypted_aggregate)):
        raise StateMismatchError("decrypted_aggregate")
    if not hmac.compare_digest(bytes(proof), bytes(user.proof)):
        raise StateMismatchError("proof")

    if config.reverify_payment_proof and not verify_correct_decryption(
        user.public_key, user.encrypted_aggregate, decrypted_aggregate, proof
    ):
        logger.info("Stored decryption proof failed re-verification")
        raise InvalidProofError("Stored decryption proof failed re-verification")

    new_user = user.copy()
    new_user.payment_requested = True

    logger.debug(f"Payment requested for aggregate of {user.interaction_count} interactions")

    return new_user
