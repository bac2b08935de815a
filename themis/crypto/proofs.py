"""
Themis Correct-Decryption Proof

Chaum-Pedersen sigma protocol, made non-interactive with a Fiat-Shamir
challenge, proving knowledge of sk such that

    pk        = sk * G
    plaintext = c2 - sk * c1

Prover (key holder):
    w                 random scalar
    announcement_g    = w * G
    announcement_ctx  = w * c1
    e                 = H(G, pk, c1, c2, plaintext, announcement_g, announcement_ctx)
    response          = w + e * sk

Verifier:
    response * G  == announcement_g   + e * pk
    response * c1 == announcement_ctx + e * (c2 - plaintext)

All verifier inputs are public; comparisons still go through
hmac.compare_digest.
"""

from __future__ import annotations
import hmac
import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

from themis.constants import POINT_SIZE, PROOF_SIZE, SCALAR_SIZE
from themis.core.types import Ciphertext, GroupElement, KeyPair, Scalar
from themis.crypto.elgamal import decrypt
from themis.crypto.hash import decryption_challenge
from themis.errors import DecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DecryptionProof:
    """
    Non-interactive proof of correct decryption.

    SIZE: 96 bytes
    SERIALIZATION: announcement_g || announcement_ctx || response
    """
    announcement_g: GroupElement = field(default_factory=GroupElement.identity)
    announcement_ctx: GroupElement = field(default_factory=GroupElement.identity)
    response: Scalar = field(default_factory=Scalar.zero)

    def __bytes__(self) -> bytes:
        return self.announcement_g.data + self.announcement_ctx.data + bytes(self.response)

    def is_empty(self) -> bool:
        return (
            self.announcement_g.is_identity()
            and self.announcement_ctx.is_identity()
            and self.response.is_zero()
        )

    def serialize(self) -> bytes:
        return bytes(self)

    @classmethod
    def from_bytes(cls, data: bytes) -> DecryptionProof:
        data = bytes(data)
        if len(data) != PROOF_SIZE:
            raise DecodeError(f"DecryptionProof must be {PROOF_SIZE} bytes, got {len(data)}")
        return cls(
            announcement_g=GroupElement.from_bytes(data[:POINT_SIZE]),
            announcement_ctx=GroupElement.from_bytes(data[POINT_SIZE:2 * POINT_SIZE]),
            response=Scalar.from_bytes(data[2 * POINT_SIZE:2 * POINT_SIZE + SCALAR_SIZE]),
        )

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[DecryptionProof, int]:
        """Deserialize from bytes, return (DecryptionProof, bytes_consumed)."""
        return cls.from_bytes(data[offset:offset + PROOF_SIZE]), PROOF_SIZE


def prove_decryption(
    keypair: KeyPair,
    ciphertext: Ciphertext,
    plaintext: GroupElement,
    nonce: Optional[Scalar] = None,
) -> DecryptionProof:
    """
    Build a decryption proof for a claimed plaintext.

    The math is the honest prover's regardless of the claim; a proof for a
    plaintext other than the true decryption does not verify.

    Args:
        keypair: Key holder's key pair
        ciphertext: Ciphertext being opened
        plaintext: Claimed decryption
        nonce: Commitment randomness w; fresh random if not provided.
            Reusing w across two proofs reveals the secret key.

    Returns:
        DecryptionProof
    """
    w = nonce if nonce is not None else Scalar.random()

    announcement_g = GroupElement.base_mul(w)
    announcement_ctx = w * ciphertext.c1

    challenge = decryption_challenge(
        keypair.public, ciphertext, plaintext, announcement_g, announcement_ctx
    )
    response = w + challenge * keypair.secret

    return DecryptionProof(
        announcement_g=announcement_g,
        announcement_ctx=announcement_ctx,
        response=response,
    )


def prove_correct_decryption(
    keypair: KeyPair,
    ciphertext: Ciphertext,
    nonce: Optional[Scalar] = None,
) -> Tuple[GroupElement, DecryptionProof]:
    """Decrypt and prove it: returns (plaintext, proof)."""
    plaintext = decrypt(keypair.secret, ciphertext)
    return plaintext, prove_decryption(keypair, ciphertext, plaintext, nonce)


def verify_correct_decryption(
    public_key: GroupElement,
    ciphertext: Ciphertext,
    plaintext: GroupElement,
    proof: DecryptionProof,
) -> bool:
    """
    Verify a correct-decryption proof.

    Args:
        public_key: Registered public key
        ciphertext: Ciphertext that was opened
        plaintext: Claimed decryption
        proof: Proof to check

    Returns:
        True if both verification equations hold
    """
    challenge = decryption_challenge(
        public_key,
        ciphertext,
        plaintext,
        proof.announcement_g,
        proof.announcement_ctx,
    )

    # z*G == A_g + e*pk
    lhs_g = GroupElement.base_mul(proof.response)
    rhs_g = proof.announcement_g + challenge * public_key
    if not hmac.compare_digest(lhs_g.data, rhs_g.data):
        logger.debug("Decryption proof failed: key relation")
        return False

    # z*c1 == A_ctx + e*(c2 - plaintext)
    lhs_ctx = proof.response * ciphertext.c1
    rhs_ctx = proof.announcement_ctx + challenge * (ciphertext.c2 - plaintext)
    if not hmac.compare_digest(lhs_ctx.data, rhs_ctx.data):
        logger.debug("Decryption proof failed: ciphertext relation")
        return False

    return True
