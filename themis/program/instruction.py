"""
Themis Instructions

The closed set of operations the processor accepts. Each instruction names
the account roles it touches.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple, Union

from themis.constants import ACCOUNT_KIND_POLICIES, ACCOUNT_KIND_USER
from themis.core.types import Ciphertext, GroupElement, Scalar
from themis.crypto.proofs import DecryptionProof
from themis.protocol.aggregation import Interaction


@dataclass(frozen=True)
class InitializeUserAccount:
    ACCOUNTS = (ACCOUNT_KIND_USER,)


@dataclass(frozen=True)
class InitializePoliciesAccount:
    scalars: Tuple[Scalar, ...] = field(default_factory=tuple)

    ACCOUNTS = (ACCOUNT_KIND_POLICIES,)

    def __post_init__(self):
        object.__setattr__(self, "scalars", tuple(self.scalars))


@dataclass(frozen=True)
class CalculateAggregate:
    interactions: Tuple[Interaction, ...]
    public_key: GroupElement

    ACCOUNTS = (ACCOUNT_KIND_USER, ACCOUNT_KIND_POLICIES)

    def __post_init__(self):
        object.__setattr__(self, "interactions", tuple(self.interactions))


@dataclass(frozen=True)
class SubmitProofDecryption:
    plaintext: GroupElement
    announcement_g: GroupElement
    announcement_ctx: GroupElement
    response: Scalar

    ACCOUNTS = (ACCOUNT_KIND_USER,)

    @property
    def proof(self) -> DecryptionProof:
        return DecryptionProof(
            announcement_g=self.announcement_g,
            announcement_ctx=self.announcement_ctx,
            response=self.response,
        )

    @classmethod
    def from_proof(cls, plaintext: GroupElement, proof: DecryptionProof) -> "SubmitProofDecryption":
        return cls(
            plaintext=plaintext,
            announcement_g=proof.announcement_g,
            announcement_ctx=proof.announcement_ctx,
            response=proof.response,
        )


@dataclass(frozen=True)
class RequestPayment:
    encrypted_aggregate: Ciphertext
    decrypted_aggregate: GroupElement
    proof: DecryptionProof

    ACCOUNTS = (ACCOUNT_KIND_USER,)


Instruction = Union[
    InitializeUserAccount,
    InitializePoliciesAccount,
    CalculateAggregate,
    SubmitProofDecryption,
    RequestPayment,
]
