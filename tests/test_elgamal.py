"""
Themis ElGamal Tests
"""

import pytest

from themis.core.types import Ciphertext, GroupElement, Scalar
from themis.crypto.elgamal import (
    combine,
    decrypt,
    encrypt,
    encrypt_scalar,
    generate_keys,
    identity_ciphertext,
    inner_product,
    recover_scalar,
    scale,
)
from themis.errors import ScalarNotFoundError


class TestEncryption:
    """Tests for encrypt / decrypt."""

    def test_encrypt_structure(self, keypair, point_x):
        """Test (c1, c2) == (r*G, m + r*pk)."""
        r = Scalar.from_int(12345)
        ct = encrypt(keypair.public, point_x, r)
        assert ct.c1 == GroupElement.base_mul(r)
        assert ct.c2 == point_x + r * keypair.public

    def test_decrypt(self, keypair, point_x):
        """Test decryption recovers the message."""
        ct = encrypt(keypair.public, point_x, Scalar.random())
        assert decrypt(keypair.secret, ct) == point_x

    def test_generate_keys(self):
        """Test generated keys satisfy pk == sk*G."""
        sk, pk = generate_keys()
        assert pk == GroupElement.base_mul(sk)

    def test_encrypt_scalar(self, keypair):
        """Test small integers are encoded as value*G."""
        ct = encrypt_scalar(keypair.public, 9)
        assert decrypt(keypair.secret, ct) == GroupElement.base_mul(Scalar.from_int(9))

    def test_fresh_randomness(self, keypair):
        """Test two encryptions of one message differ."""
        a = encrypt_scalar(keypair.public, 1)
        b = encrypt_scalar(keypair.public, 1)
        assert a != b


class TestHomomorphism:
    """Tests for combine / scale / identity."""

    def test_combine(self, keypair, point_x, point_y):
        """Test combining ciphertexts adds plaintexts."""
        a = encrypt(keypair.public, point_x, Scalar.from_int(3))
        b = encrypt(keypair.public, point_y, Scalar.from_int(4))
        assert decrypt(keypair.secret, combine(a, b)) == point_x + point_y

    def test_scale(self, keypair, point_x):
        """Test scaling a ciphertext scales the plaintext."""
        s = Scalar.from_int(17)
        ct = encrypt(keypair.public, point_x, Scalar.from_int(5))
        assert decrypt(keypair.secret, scale(ct, s)) == s * point_x

    def test_scale_by_zero(self, keypair, point_x):
        """Test scaling by zero gives the identity ciphertext."""
        ct = encrypt(keypair.public, point_x, Scalar.from_int(5))
        assert scale(ct, Scalar.zero()).is_identity()

    def test_identity_is_neutral(self, keypair, point_x):
        """Test combine with the identity ciphertext is a no-op."""
        ct = encrypt(keypair.public, point_x, Scalar.from_int(8))
        assert combine(ct, identity_ciphertext()) == ct
        assert combine(identity_ciphertext(), ct) == ct

    def test_identity_decrypts_to_identity(self, keypair):
        """Test the identity ciphertext decrypts to the identity."""
        assert decrypt(keypair.secret, identity_ciphertext()).is_identity()

    def test_combine_commutative(self, make_ciphertext):
        """Test combine does not depend on operand order."""
        a = make_ciphertext(2, 10)
        b = make_ciphertext(3, 20)
        assert combine(a, b) == combine(b, a)

    def test_inner_product(self, keypair, make_ciphertext):
        """Test weighted sum of encryptions."""
        cts = [make_ciphertext(1, 10), make_ciphertext(2, 20), make_ciphertext(3, 30)]
        weights = [Scalar.from_int(4), Scalar.from_int(5), Scalar.from_int(6)]
        total = inner_product(cts, weights)
        expected = GroupElement.base_mul(Scalar.from_int(4 * 1 + 5 * 2 + 6 * 3))
        assert decrypt(keypair.secret, total) == expected

    def test_inner_product_length_mismatch(self, make_ciphertext):
        """Test mismatched lengths are rejected."""
        with pytest.raises(ValueError):
            inner_product([make_ciphertext(1, 1)], [])

    def test_inner_product_empty(self):
        """Test the empty sum is the identity ciphertext."""
        assert inner_product([], []) == Ciphertext.identity()


class TestRecoverScalar:
    """Tests for small discrete-log recovery."""

    @pytest.mark.parametrize("value", [0, 1, 2, 255, 256, 1000, 65535])
    def test_recover(self, value):
        """Test values inside the bound are recovered."""
        point = GroupElement.base_mul(Scalar.from_int(value))
        assert recover_scalar(point, 16) == value

    def test_recover_out_of_range(self):
        """Test values outside the bound raise ScalarNotFoundError."""
        point = GroupElement.base_mul(Scalar.from_int(1 << 16))
        with pytest.raises(ScalarNotFoundError):
            recover_scalar(point, 16)

    def test_recover_small_bound(self):
        """Test an odd bit bound."""
        point = GroupElement.base_mul(Scalar.from_int(100))
        assert recover_scalar(point, 7) == 100
        with pytest.raises(ScalarNotFoundError):
            recover_scalar(GroupElement.base_mul(Scalar.from_int(128)), 7)
