"""
Themis User Account

Per-user encrypted aggregate and settlement flags.

Layout (233 bytes, big-endian integers):
    version (u8)
    is_initialized (u8)
    encrypted_aggregate (c1 || c2, 64)
    public_key (32, identity until registered)
    interaction_count (u32)
    has_decrypted_aggregate (u8)
    decrypted_aggregate (32, identity when absent)
    proof_verified (u8)
    proof (announcement_g || announcement_ctx || response, 96, zeros when absent)
    payment_requested (u8)

An empty or all-zero buffer decodes to the default, uninitialized account.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from themis.constants import (
    ACCOUNT_LAYOUT_VERSION,
    CIPHERTEXT_SIZE,
    POINT_SIZE,
    PROOF_SIZE,
    USER_ACCOUNT_SIZE,
)
from themis.core.serialization import ByteReader, ByteWriter, is_zeroed
from themis.core.types import Ciphertext, GroupElement
from themis.crypto.proofs import DecryptionProof
from themis.errors import DecodeError


@dataclass
class User:
    """
    State for a single user account.

    Invariants:
    - decrypted_aggregate and proof are set exactly when proof_verified
    - payment_requested implies proof_verified
    """
    is_initialized: bool = False

    # Running homomorphic sum of weighted interactions
    encrypted_aggregate: Ciphertext = field(default_factory=Ciphertext.identity)
    public_key: GroupElement = field(default_factory=GroupElement.identity)
    interaction_count: int = 0

    # Settlement
    decrypted_aggregate: Optional[GroupElement] = None
    proof_verified: bool = False
    proof: Optional[DecryptionProof] = None
    payment_requested: bool = False

    @property
    def has_public_key(self) -> bool:
        return not self.public_key.is_identity()

    def fetch_encrypted_aggregate(self) -> Ciphertext:
        return self.encrypted_aggregate

    def fetch_decrypted_aggregate(self) -> Optional[GroupElement]:
        return self.decrypted_aggregate

    def fetch_proof_verification(self) -> bool:
        return self.proof_verified

    def copy(self) -> "User":
        """Copy of this account state; the value types are immutable."""
        return User(
            is_initialized=self.is_initialized,
            encrypted_aggregate=self.encrypted_aggregate,
            public_key=self.public_key,
            interaction_count=self.interaction_count,
            decrypted_aggregate=self.decrypted_aggregate,
            proof_verified=self.proof_verified,
            proof=self.proof,
            payment_requested=self.payment_requested,
        )

    def serialize(self) -> bytes:
        """Serialize user account."""
        writer = ByteWriter()

        writer.write_u8(ACCOUNT_LAYOUT_VERSION)
        writer.write_bool(self.is_initialized)
        writer.write_raw(self.encrypted_aggregate.serialize())
        writer.write_raw(self.public_key.serialize())
        writer.write_u32(self.interaction_count)

        writer.write_bool(self.decrypted_aggregate is not None)
        decrypted = self.decrypted_aggregate or GroupElement.identity()
        writer.write_raw(decrypted.serialize())

        writer.write_bool(self.proof_verified)
        proof = self.proof or DecryptionProof()
        writer.write_raw(proof.serialize())

        writer.write_bool(self.payment_requested)

        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes) -> "User":
        """
        Deserialize user account.

        Raises:
            DecodeError: On truncation, unknown version, bad flags,
                invalid points or violated invariants
        """
        if is_zeroed(data):
            return cls()

        if len(data) < USER_ACCOUNT_SIZE:
            raise DecodeError(
                f"User account data too short: {len(data)} < {USER_ACCOUNT_SIZE}"
            )

        reader = ByteReader(data)

        version = reader.read_u8()
        if version != ACCOUNT_LAYOUT_VERSION:
            raise DecodeError(f"Unknown user layout version {version}")

        is_initialized = reader.read_bool()
        encrypted_aggregate = Ciphertext.from_bytes(reader.read_fixed_bytes(CIPHERTEXT_SIZE))
        public_key = GroupElement.from_bytes(reader.read_fixed_bytes(POINT_SIZE))
        interaction_count = reader.read_u32()

        has_decrypted = reader.read_bool()
        decrypted = GroupElement.from_bytes(reader.read_fixed_bytes(POINT_SIZE))

        proof_verified = reader.read_bool()
        proof = DecryptionProof.from_bytes(reader.read_fixed_bytes(PROOF_SIZE))

        payment_requested = reader.read_bool()

        if any(reader.read_fixed_bytes(reader.remaining())):
            raise DecodeError("Trailing data after user layout")

        # Invariants
        if has_decrypted != proof_verified:
            raise DecodeError("Decrypted aggregate present without verified proof")
        if not has_decrypted and not decrypted.is_identity():
            raise DecodeError("Absent decrypted aggregate must be zeroed")
        if not proof_verified and not proof.is_empty():
            raise DecodeError("Absent proof must be zeroed")
        if payment_requested and not proof_verified:
            raise DecodeError("Payment requested without verified proof")
        if not is_initialized and (
            interaction_count or proof_verified or payment_requested
            or not encrypted_aggregate.is_identity() or not public_key.is_identity()
        ):
            raise DecodeError("Uninitialized user account holds state")

        return cls(
            is_initialized=is_initialized,
            encrypted_aggregate=encrypted_aggregate,
            public_key=public_key,
            interaction_count=interaction_count,
            decrypted_aggregate=decrypted if has_decrypted else None,
            proof_verified=proof_verified,
            proof=proof if proof_verified else None,
            payment_requested=payment_requested,
        )

    def __repr__(self) -> str:
        return (
            f"User(initialized={self.is_initialized}, "
            f"interactions={self.interaction_count}, "
            f"proof_verified={self.proof_verified}, "
            f"payment_requested={self.payment_requested})"
        )
