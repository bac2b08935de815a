"""
Themis Decryption Submission

Checks a claimed decryption of the user's aggregate against its proof and,
on success, records the plaintext and the accepted proof.
"""

from __future__ import annotations
import logging
from typing import Optional

from themis.config import ProtocolConfig
from themis.core.types import GroupElement
from themis.crypto.proofs import DecryptionProof, verify_correct_decryption
from themis.errors import AggregateNotReadyError, InvalidProofError
from themis.state.machine import UserStatus, require_status
from themis.state.user import User

logger = logging.getLogger(__name__)


def submit_proof_decryption(
    user: User,
    plaintext: GroupElement,
    proof: DecryptionProof,
    config: Optional[ProtocolConfig] = None,
) -> User:
    """
    Verify and record a decryption of the encrypted aggregate.

    The proof is checked against the registered public key and the stored
    aggregate; nothing supplied by the caller other than the plaintext and
    the proof enters the check.

    Readiness is judged by the interaction count, so a user whose only
    calculate_aggregate calls carried empty batches is still not ready.

    Returns:
        New user state in DECRYPTED status

    Raises:
        NotInitializedError: If the user is uninitialized
        InvalidStateError: If a proof was already accepted
        AggregateNotReadyError: If no interaction was aggregated yet
        InvalidProofError: If the proof does not verify
    """
    config = config or ProtocolConfig()

    require_status(user, UserStatus.INITIALIZED, "submit proof")

    if config.require_aggregate_before_proof and user.interaction_count == 0:
        raise AggregateNotReadyError()

    if not verify_correct_decryption(
        user.public_key, user.encrypted_aggregate, plaintext, proof
    ):
        logger.info(f"Rejected decryption proof for aggregate of {user.interaction_count} interactions")
        raise InvalidProofError()

    new_user = user.copy()
    new_user.decrypted_aggregate = plaintext
    new_user.proof_verified = True
    new_user.proof = proof

    logger.debug("Accepted decryption proof")

    return new_user
