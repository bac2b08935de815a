"""
Themis Client

User and key-holder side of the protocol: creates accounts, submits
encrypted interactions, decrypts the aggregate with a proof and requests
payment. Secret keys stay on this side; only public values reach the bank.
"""

from __future__ import annotations
import logging
from typing import List, Sequence, Tuple, Union

from themis.constants import ACCOUNT_KIND_POLICIES, ACCOUNT_KIND_USER
from themis.core.types import GroupElement, KeyPair, Scalar
from themis.crypto.elgamal import encrypt_scalar
from themis.crypto.proofs import DecryptionProof, prove_correct_decryption
from themis.errors import InvalidParameterError
from themis.program.instruction import (
    CalculateAggregate,
    InitializePoliciesAccount,
    InitializeUserAccount,
    RequestPayment,
    SubmitProofDecryption,
)
from themis.protocol.aggregation import Interaction
from themis.state.policies import Policies
from themis.state.user import User
from themis.client.bank import LocalBank

logger = logging.getLogger(__name__)


def encrypt_interactions(public_key: GroupElement, signals: Sequence[int]) -> List[Interaction]:
    """
    Encrypt one signal per policy.

    signals[i] is weighted by policy i; each gets fresh randomness.
    """
    return [
        Interaction(policy_index=index, ciphertext=encrypt_scalar(public_key, signal))
        for index, signal in enumerate(signals)
    ]


class ThemisClient:
    """Drives the protocol workflow against a LocalBank."""

    def __init__(self, bank: LocalBank):
        self.bank = bank

    # =========================================================================
    # Accounts
    # =========================================================================

    def create_policies_account(self, weights: Sequence[Union[int, Scalar]]) -> bytes:
        """Allocate and initialize a policies account; returns its address."""
        scalars = [w if isinstance(w, Scalar) else Scalar.from_int(w) for w in weights]
        address = self.bank.allocate_policies_account(len(scalars))
        self.bank.execute(
            InitializePoliciesAccount(scalars=scalars),
            {ACCOUNT_KIND_POLICIES: address},
        )
        logger.debug(f"Created policies account {address.hex()[:16]} with {len(scalars)} weights")
        return address

    def create_user_account(self) -> bytes:
        """Allocate and initialize a user account; returns its address."""
        address = self.bank.allocate_user_account()
        self.bank.execute(InitializeUserAccount(), {ACCOUNT_KIND_USER: address})
        return address

    def fetch_user(self, address: bytes) -> User:
        return User.deserialize(self.bank.get_account(address))

    def fetch_policies(self, address: bytes) -> Policies:
        return Policies.deserialize(self.bank.get_account(address))

    # =========================================================================
    # Workflow
    # =========================================================================

    def submit_interactions(
        self,
        user: bytes,
        policies: bytes,
        public_key: GroupElement,
        interactions: Sequence[Interaction],
        batch_size: int = 1,
    ) -> int:
        """
        Submit interactions in batches of batch_size.

        Returns:
            Number of instructions executed
        """
        if batch_size < 1:
            raise InvalidParameterError("batch_size", "must be at least 1")

        count = 0
        for start in range(0, len(interactions), batch_size):
            batch = tuple(interactions[start:start + batch_size])
            self.bank.execute(
                CalculateAggregate(interactions=batch, public_key=public_key),
                {ACCOUNT_KIND_USER: user, ACCOUNT_KIND_POLICIES: policies},
            )
            count += 1
        return count

    def submit_proof_decryption(
        self,
        user: bytes,
        keypair: KeyPair,
    ) -> Tuple[GroupElement, DecryptionProof]:
        """
        Decrypt the stored aggregate, prove it and submit the proof.

        Returns:
            (plaintext, proof) as accepted
        """
        state = self.fetch_user(user)
        plaintext, proof = prove_correct_decryption(keypair, state.fetch_encrypted_aggregate())
        self.bank.execute(
            SubmitProofDecryption.from_proof(plaintext, proof),
            {ACCOUNT_KIND_USER: user},
        )
        return plaintext, proof

    def request_payment(self, user: bytes) -> User:
        """Request payment against the verified aggregate; returns the final state."""
        state = self.fetch_user(user)
        self.bank.execute(
            RequestPayment(
                encrypted_aggregate=state.fetch_encrypted_aggregate(),
                decrypted_aggregate=state.fetch_decrypted_aggregate(),
                proof=state.proof,
            ),
            {ACCOUNT_KIND_USER: user},
        )
        return self.fetch_user(user)
