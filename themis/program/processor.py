"""
Themis Processor

Bytes-in, bytes-out entry points. Each operation decodes the account
buffers it is given, applies one transition and returns the new buffer,
zero-padded to the input length. On any error nothing is returned and the
caller's buffers stay as they were.
"""

from __future__ import annotations
import logging
from typing import Dict, Optional, Sequence

from themis.config import ProtocolConfig
from themis.constants import ACCOUNT_KIND_POLICIES, ACCOUNT_KIND_USER
from themis.core.serialization import fit_to_buffer
from themis.core.types import Ciphertext, GroupElement, Scalar
from themis.crypto.proofs import DecryptionProof
from themis.errors import InvalidParameterError, UnknownInstructionError
from themis.program.instruction import (
    CalculateAggregate,
    InitializePoliciesAccount,
    InitializeUserAccount,
    Instruction,
    RequestPayment,
    SubmitProofDecryption,
)
from themis.protocol import aggregation, decryption, payment
from themis.protocol.aggregation import Interaction
from themis.state.machine import apply_initialize_policies, apply_initialize_user
from themis.state.policies import Policies
from themis.state.user import User

logger = logging.getLogger(__name__)


def initialize_user_account(user_data: bytes) -> bytes:
    """
    Initialize a user account buffer.

    Raises:
        DecodeError: If the buffer holds malformed data
        AccountInUseError: If already initialized
        AccountDataTooSmallError: If the buffer cannot hold the layout
    """
    user = apply_initialize_user(User.deserialize(user_data))
    return fit_to_buffer(user.serialize(), len(user_data))


def initialize_policies_account(scalars: Sequence[Scalar], policies_data: bytes) -> bytes:
    """
    Store policy weights in a policies account buffer.

    Raises:
        DecodeError: If the buffer holds malformed data
        AccountInUseError: If already initialized
        TooManyPoliciesError: If more than 256 weights
        AccountDataTooSmallError: If the buffer cannot hold the weights
    """
    policies = apply_initialize_policies(Policies.deserialize(policies_data), scalars)
    return fit_to_buffer(policies.serialize(), len(policies_data))


def calculate_aggregate(
    interactions: Sequence[Interaction],
    public_key: GroupElement,
    user_data: bytes,
    policies_data: bytes,
    config: Optional[ProtocolConfig] = None,
) -> bytes:
    """Fold interactions into the user's aggregate; returns the new user buffer."""
    user = User.deserialize(user_data)
    policies = Policies.deserialize(policies_data)
    new_user = aggregation.calculate_aggregate(user, policies, interactions, public_key, config)
    return fit_to_buffer(new_user.serialize(), len(user_data))


def submit_proof_decryption(
    plaintext: GroupElement,
    announcement_g: GroupElement,
    announcement_ctx: GroupElement,
    response: Scalar,
    user_data: bytes,
    config: Optional[ProtocolConfig] = None,
) -> bytes:
    """Verify a decryption proof; returns the new user buffer."""
    proof = DecryptionProof(
        announcement_g=announcement_g,
        announcement_ctx=announcement_ctx,
        response=response,
    )
    user = User.deserialize(user_data)
    new_user = decryption.submit_proof_decryption(user, plaintext, proof, config)
    return fit_to_buffer(new_user.serialize(), len(user_data))


def request_payment(
    encrypted_aggregate: Ciphertext,
    decrypted_aggregate: GroupElement,
    proof: DecryptionProof,
    user_data: bytes,
    config: Optional[ProtocolConfig] = None,
) -> bytes:
    """Request payment against the verified state; returns the new user buffer."""
    user = User.deserialize(user_data)
    new_user = payment.request_payment(
        user, encrypted_aggregate, decrypted_aggregate, proof, config
    )
    return fit_to_buffer(new_user.serialize(), len(user_data))


def _account(accounts: Dict[str, bytes], role: str) -> bytes:
    if role not in accounts:
        raise InvalidParameterError("accounts", f"missing {role} account")
    return accounts[role]


class Processor:
    """
    Dispatches instructions against account buffers.

    Accounts are passed as a mapping of role ("user", "policies") to bytes;
    the result maps each written role to its new bytes.
    """

    def __init__(self, config: Optional[ProtocolConfig] = None):
        self.config = config or ProtocolConfig()

    def process_instruction(
        self,
        instruction: Instruction,
        accounts: Dict[str, bytes],
    ) -> Dict[str, bytes]:
        """
        Apply one instruction.

        Raises:
            UnknownInstructionError: If the object is not a known instruction
            InvalidParameterError: If a required account role is missing
            ThemisError: Whatever the operation raises
        """
        name = type(instruction).__name__
        logger.debug(f"Processing {name}")

        if isinstance(instruction, InitializeUserAccount):
            user_data = _account(accounts, ACCOUNT_KIND_USER)
            return {ACCOUNT_KIND_USER: initialize_user_account(user_data)}

        if isinstance(instruction, InitializePoliciesAccount):
            policies_data = _account(accounts, ACCOUNT_KIND_POLICIES)
            return {
                ACCOUNT_KIND_POLICIES: initialize_policies_account(
                    instruction.scalars, policies_data
                )
            }

        if isinstance(instruction, CalculateAggregate):
            user_data = _account(accounts, ACCOUNT_KIND_USER)
            policies_data = _account(accounts, ACCOUNT_KIND_POLICIES)
            return {
                ACCOUNT_KIND_USER: calculate_aggregate(
                    instruction.interactions,
                    instruction.public_key,
                    user_data,
                    policies_data,
                    self.config,
                )
            }

        if isinstance(instruction, SubmitProofDecryption):
            user_data = _account(accounts, ACCOUNT_KIND_USER)
            return {
                ACCOUNT_KIND_USER: submit_proof_decryption(
                    instruction.plaintext,
                    instruction.announcement_g,
                    instruction.announcement_ctx,
                    instruction.response,
                    user_data,
                    self.config,
                )
            }

        if isinstance(instruction, RequestPayment):
            user_data = _account(accounts, ACCOUNT_KIND_USER)
            return {
                ACCOUNT_KIND_USER: request_payment(
                    instruction.encrypted_aggregate,
                    instruction.decrypted_aggregate,
                    instruction.proof,
                    user_data,
                    self.config,
                )
            }

        raise UnknownInstructionError(instruction)


def process_instruction(
    instruction: Instruction,
    accounts: Dict[str, bytes],
    config: Optional[ProtocolConfig] = None,
) -> Dict[str, bytes]:
    """Apply one instruction with a one-off Processor."""
    return Processor(config).process_instruction(instruction, accounts)
