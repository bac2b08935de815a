"""
Themis Cryptographic Primitives

Homomorphic ElGamal over ristretto255 and the correct-decryption proof.
"""

from themis.crypto.hash import hash_to_scalar, decryption_challenge
from themis.crypto.elgamal import (
    generate_keys,
    encrypt,
    encrypt_scalar,
    decrypt,
    scale,
    combine,
    identity_ciphertext,
    inner_product,
    recover_scalar,
)
from themis.crypto.proofs import (
    DecryptionProof,
    prove_decryption,
    prove_correct_decryption,
    verify_correct_decryption,
)

__all__ = [
    # Hash functions
    "hash_to_scalar",
    "decryption_challenge",
    # ElGamal
    "generate_keys",
    "encrypt",
    "encrypt_scalar",
    "decrypt",
    "scale",
    "combine",
    "identity_ciphertext",
    "inner_product",
    "recover_scalar",
    # Proofs
    "DecryptionProof",
    "prove_decryption",
    "prove_correct_decryption",
    "verify_correct_decryption",
]
