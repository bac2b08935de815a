"""
Themis Fiat-Shamir Challenge

SHA-512 over the public transcript, wide-reduced into the scalar field.

The transcript order is fixed and must match the prover byte for byte:

    G || pk || c1 || c2 || plaintext || announcement_g || announcement_ctx

Every element is its 32-byte canonical encoding; there is no length prefix
or domain tag.
"""

from __future__ import annotations
import hashlib
from typing import Iterable

from themis.core.types import Ciphertext, GroupElement, Scalar


def hash_to_scalar(parts: Iterable[bytes]) -> Scalar:
    """
    Hash a sequence of byte strings to a scalar.

    Args:
        parts: Byte strings, absorbed in order

    Returns:
        Scalar: SHA-512 digest reduced modulo L
    """
    hasher = hashlib.sha512()
    for part in parts:
        hasher.update(part)
    return Scalar.from_hash(hasher.digest())


def decryption_challenge(
    public_key: GroupElement,
    ciphertext: Ciphertext,
    plaintext: GroupElement,
    announcement_g: GroupElement,
    announcement_ctx: GroupElement,
) -> Scalar:
    """Challenge e for the correct-decryption proof."""
    return hash_to_scalar((
        GroupElement.generator().data,
        public_key.data,
        ciphertext.c1.data,
        ciphertext.c2.data,
        plaintext.data,
        announcement_g.data,
        announcement_ctx.data,
    ))
