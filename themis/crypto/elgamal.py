"""
Themis Homomorphic ElGamal

Additively homomorphic ElGamal over ristretto255:

    encrypt(pk, m, r)  = (r*G, m + r*pk)
    decrypt(sk, c)     = c2 - sk*c1
    combine(a, b)      = (a.c1 + b.c1, a.c2 + b.c2)   -> m_a + m_b
    scale(c, s)        = (s*c1, s*c2)                 -> s*m

Randomness is always an explicit argument on the protocol side. Reusing r
under the same key leaks the difference of the plaintexts; nothing here
prevents it.
"""

from __future__ import annotations
from typing import Iterable, Optional, Tuple

from themis.constants import DEFAULT_PLAINTEXT_BITS
from themis.core.types import Ciphertext, GroupElement, KeyPair, Scalar
from themis.errors import ScalarNotFoundError


def generate_keys() -> Tuple[Scalar, GroupElement]:
    """Generate a fresh (secret, public) key pair."""
    keypair = KeyPair.generate()
    return keypair.secret, keypair.public


def encrypt(public_key: GroupElement, message: GroupElement, randomness: Scalar) -> Ciphertext:
    """Encrypt a group element under public_key with caller-supplied randomness."""
    return Ciphertext(
        c1=GroupElement.base_mul(randomness),
        c2=message + randomness * public_key,
    )


def encrypt_scalar(
    public_key: GroupElement,
    value: int,
    randomness: Optional[Scalar] = None
) -> Ciphertext:
    """
    Encrypt a small integer by encoding it as value*G.

    Args:
        public_key: Recipient public key
        value: Plaintext integer
        randomness: Ephemeral scalar; fresh random if not provided

    Returns:
        Ciphertext of value*G
    """
    if randomness is None:
        randomness = Scalar.random()
    message = GroupElement.base_mul(Scalar.from_int(value))
    return encrypt(public_key, message, randomness)


def decrypt(secret_key: Scalar, ciphertext: Ciphertext) -> GroupElement:
    """Recover the plaintext group element: c2 - sk*c1."""
    return ciphertext.c2 - secret_key * ciphertext.c1


def scale(ciphertext: Ciphertext, scalar: Scalar) -> Ciphertext:
    """Homomorphic scalar multiplication."""
    return ciphertext.scale(scalar)


def combine(a: Ciphertext, b: Ciphertext) -> Ciphertext:
    """Homomorphic addition."""
    return a + b


def identity_ciphertext() -> Ciphertext:
    """Encryption of the identity with zero randomness."""
    return Ciphertext.identity()


def inner_product(ciphertexts: Iterable[Ciphertext], scalars: Iterable[Scalar]) -> Ciphertext:
    """
    Weighted homomorphic sum: sum(s_i * c_i).

    Lengths must match; a mismatch raises ValueError.
    """
    total = identity_ciphertext()
    ciphertexts = list(ciphertexts)
    scalars = list(scalars)
    if len(ciphertexts) != len(scalars):
        raise ValueError(
            f"Length mismatch: {len(ciphertexts)} ciphertexts, {len(scalars)} scalars"
        )
    for ciphertext, scalar in zip(ciphertexts, scalars):
        total = combine(total, scale(ciphertext, scalar))
    return total


def recover_scalar(point: GroupElement, bits: int = DEFAULT_PLAINTEXT_BITS) -> int:
    """
    Find v < 2^bits with v*G == point.

    Baby-step giant-step; only practical for small plaintexts such as
    aggregated interaction counts.

    Raises:
        ScalarNotFoundError: If no such v exists in range
    """
    if point.is_identity():
        return 0

    bound = 1 << bits
    step = 1 << ((bits + 1) // 2)
    generator = GroupElement.generator()

    # Baby steps: j*G for j in [0, step)
    table = {}
    current = GroupElement.identity()
    for j in range(step):
        table.setdefault(current.data, j)
        current = current + generator

    # Giant steps: point - i*step*G
    giant = -GroupElement.base_mul(Scalar(step))
    target = point
    for i in range((bound + step - 1) // step):
        j = table.get(target.data)
        if j is not None:
            value = i * step + j
            if value < bound:
                return value
        target = target + giant

    raise ScalarNotFoundError(bits)
