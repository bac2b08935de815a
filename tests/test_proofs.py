"""
Themis Decryption Proof Tests
"""

import hashlib
from dataclasses import replace

import pytest

from themis.constants import PROOF_SIZE
from themis.core.types import Ciphertext, Scalar
from themis.crypto.elgamal import decrypt, encrypt
from themis.crypto.hash import decryption_challenge, hash_to_scalar
from themis.crypto.proofs import (
    DecryptionProof,
    prove_correct_decryption,
    prove_decryption,
    verify_correct_decryption,
)
from themis.errors import DecodeError


@pytest.fixture
def ciphertext(keypair, point_x):
    return encrypt(keypair.public, point_x, Scalar.from_int(424242))


class TestChallenge:
    """Tests for the Fiat-Shamir challenge."""

    def test_challenge_deterministic(self, keypair, ciphertext, point_x, point_y):
        """Test the challenge depends only on its inputs."""
        a = decryption_challenge(keypair.public, ciphertext, point_x, point_y, point_x)
        b = decryption_challenge(keypair.public, ciphertext, point_x, point_y, point_x)
        assert a == b

    def test_challenge_transcript_order(self, keypair, ciphertext, point_x, point_y, generator):
        """Test the transcript is G || pk || c1 || c2 || plaintext || A_g || A_ctx."""
        transcript = (
            generator.data
            + keypair.public.data
            + ciphertext.c1.data
            + ciphertext.c2.data
            + point_x.data
            + point_y.data
            + generator.data
        )
        expected = Scalar.from_hash(hashlib.sha512(transcript).digest())
        assert decryption_challenge(
            keypair.public, ciphertext, point_x, point_y, generator
        ) == expected

    def test_challenge_sensitive_to_each_input(self, keypair, ciphertext, point_x, point_y):
        """Test swapping the announcements changes the challenge."""
        a = decryption_challenge(keypair.public, ciphertext, point_x, point_x, point_y)
        b = decryption_challenge(keypair.public, ciphertext, point_x, point_y, point_x)
        assert a != b

    def test_hash_to_scalar_concatenation(self):
        """Test parts are absorbed without separators."""
        assert hash_to_scalar([b"ab", b"c"]) == hash_to_scalar([b"abc"])


class TestProofSoundness:
    """Tests for prover and verifier."""

    def test_honest_proof_verifies(self, keypair, ciphertext, point_x):
        """Test an honest proof for the true plaintext verifies."""
        plaintext, proof = prove_correct_decryption(keypair, ciphertext)
        assert plaintext == point_x
        assert verify_correct_decryption(keypair.public, ciphertext, plaintext, proof)

    def test_fixed_nonce_is_deterministic(self, keypair, ciphertext):
        """Test a fixed nonce yields a fixed proof."""
        _, a = prove_correct_decryption(keypair, ciphertext, nonce=Scalar.from_int(9))
        _, b = prove_correct_decryption(keypair, ciphertext, nonce=Scalar.from_int(9))
        assert a == b

    def test_wrong_plaintext_rejected(self, keypair, ciphertext, point_x, generator):
        """Test a proof for plaintext + G fails."""
        wrong = point_x + generator
        proof = prove_decryption(keypair, ciphertext, wrong)
        assert not verify_correct_decryption(keypair.public, ciphertext, wrong, proof)

    def test_plaintext_swapped_after_proving(self, keypair, ciphertext, point_x, generator):
        """Test an honest proof does not transfer to another plaintext."""
        plaintext, proof = prove_correct_decryption(keypair, ciphertext)
        assert not verify_correct_decryption(
            keypair.public, ciphertext, plaintext + generator, proof
        )

    def test_tampered_response_rejected(self, keypair, ciphertext):
        """Test response + 1 fails."""
        plaintext, proof = prove_correct_decryption(keypair, ciphertext)
        tampered = replace(proof, response=proof.response + Scalar.one())
        assert not verify_correct_decryption(keypair.public, ciphertext, plaintext, tampered)

    def test_tampered_announcement_g_rejected(self, keypair, ciphertext, generator):
        """Test A_g + G fails."""
        plaintext, proof = prove_correct_decryption(keypair, ciphertext)
        tampered = replace(proof, announcement_g=proof.announcement_g + generator)
        assert not verify_correct_decryption(keypair.public, ciphertext, plaintext, tampered)

    def test_tampered_announcement_ctx_rejected(self, keypair, ciphertext, generator):
        """Test A_ctx + G fails."""
        plaintext, proof = prove_correct_decryption(keypair, ciphertext)
        tampered = replace(proof, announcement_ctx=proof.announcement_ctx + generator)
        assert not verify_correct_decryption(keypair.public, ciphertext, plaintext, tampered)

    def test_wrong_public_key_rejected(self, keypair, other_keypair, ciphertext):
        """Test verification under another key fails."""
        plaintext, proof = prove_correct_decryption(keypair, ciphertext)
        assert not verify_correct_decryption(other_keypair.public, ciphertext, plaintext, proof)

    def test_empty_proof_rejected(self, keypair, ciphertext):
        """Test the all-zero proof does not verify a real ciphertext."""
        plaintext = decrypt(keypair.secret, ciphertext)
        assert not verify_correct_decryption(
            keypair.public, ciphertext, plaintext, DecryptionProof()
        )

    def test_identity_ciphertext_proof(self, keypair):
        """Test proving the identity aggregate."""
        ct = Ciphertext.identity()
        plaintext, proof = prove_correct_decryption(keypair, ct)
        assert plaintext.is_identity()
        assert verify_correct_decryption(keypair.public, ct, plaintext, proof)


class TestConcreteScenario:
    """Weights [3, 5] applied to encryptions of X and Y."""

    def test_weighted_aggregate_proof(self, keypair, point_x, point_y, generator):
        """Test 3X + 5Y verifies and 3X + 5Y + G does not."""
        ct_x = encrypt(keypair.public, point_x, Scalar.from_int(31))
        ct_y = encrypt(keypair.public, point_y, Scalar.from_int(37))
        aggregate = ct_x.scale(Scalar.from_int(3)) + ct_y.scale(Scalar.from_int(5))

        expected = Scalar.from_int(3) * point_x + Scalar.from_int(5) * point_y
        plaintext, proof = prove_correct_decryption(keypair, aggregate)
        assert plaintext == expected
        assert verify_correct_decryption(keypair.public, aggregate, expected, proof)

        wrong = expected + generator
        bad_proof = prove_decryption(keypair, aggregate, wrong)
        assert not verify_correct_decryption(keypair.public, aggregate, wrong, bad_proof)


class TestProofEncoding:
    """Tests for DecryptionProof serialization."""

    def test_proof_layout(self, keypair, ciphertext):
        """Test A_g || A_ctx || z layout."""
        _, proof = prove_correct_decryption(keypair, ciphertext)
        data = proof.serialize()
        assert len(data) == PROOF_SIZE
        assert data[:32] == proof.announcement_g.data
        assert data[32:64] == proof.announcement_ctx.data
        assert data[64:] == proof.response.serialize()
        assert DecryptionProof.from_bytes(data) == proof

    def test_empty_proof(self):
        """Test the default proof is empty and zero-encoded."""
        proof = DecryptionProof()
        assert proof.is_empty()
        assert proof.serialize() == bytes(PROOF_SIZE)

    def test_invalid_proof_bytes(self):
        """Test malformed proofs fail to decode."""
        with pytest.raises(DecodeError):
            DecryptionProof.from_bytes(bytes(95))
        with pytest.raises(DecodeError):
            DecryptionProof.from_bytes(b"\xff" * 32 + bytes(64))
