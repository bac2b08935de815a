"""
Themis Ristretto255 Backend Tests

Known-answer vectors from RFC 9496 (ristretto255 multiples of the generator
and invalid encodings).
"""

import pytest

from themis.constants import (
    GROUP_ORDER,
    IDENTITY_ENCODING,
    USER_ACCOUNT_SIZE,
    policies_account_size,
)
from themis.core.ristretto import Ristretto255, load_libsodium
from themis.core.types import GroupElement, Scalar
from themis.crypto.elgamal import decrypt, encrypt
from themis.errors import DecodeError, ErrorCode
from themis.program import processor
from themis.state.user import User
from themis.protocol.aggregation import Interaction


GENERATOR_HEX = "e2f2ae0a6abc4e71a884a961c500515f58e30b6aa582dd8db6a65945e08d2d76"
DOUBLE_GENERATOR_HEX = "6a493210f7499cd17fecb510ae0cea23a110e8d5b901f8acadd3095c73a3b919"

INVALID_ENCODINGS = [
    # Non-canonical field element
    "00ffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffff",
    # Negative field element
    "0100000000000000000000000000000000000000000000000000000000000000",
    "ffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffff",
]


class TestBackend:
    """Tests for the libsodium binding."""

    def test_library_loaded(self):
        """Test the loaded library exposes the ristretto255 API."""
        lib = load_libsodium()
        assert hasattr(lib, "crypto_scalarmult_ristretto255_base")
        assert load_libsodium() is lib

    def test_backend_error_code(self):
        """Test the backend error has its own category."""
        assert ErrorCode.BACKEND_UNAVAILABLE.value // 1000 == 7


class TestKnownAnswers:
    """Tests against published ristretto255 vectors."""

    def test_generator_encoding(self):
        """Test the basepoint encoding."""
        assert GroupElement.generator().hex() == GENERATOR_HEX

    def test_double_generator(self, generator):
        """Test 2*G by addition and by both multiplications."""
        assert (generator + generator).hex() == DOUBLE_GENERATOR_HEX
        assert GroupElement.base_mul(Scalar.from_int(2)).hex() == DOUBLE_GENERATOR_HEX
        assert (Scalar.from_int(2) * generator).hex() == DOUBLE_GENERATOR_HEX

    @pytest.mark.parametrize("encoding", INVALID_ENCODINGS)
    def test_invalid_encodings(self, encoding):
        """Test bad encodings are rejected with DecodeError."""
        assert not Ristretto255.is_valid_point(bytes.fromhex(encoding))
        with pytest.raises(DecodeError):
            GroupElement.from_hex(encoding)

    def test_identity_valid(self):
        """Test the identity is accepted without calling into libsodium."""
        assert Ristretto255.is_valid_point(IDENTITY_ENCODING)

    def test_order_annihilates(self, generator):
        """Test (L - 1)*G + G is the identity."""
        assert (Scalar.from_int(GROUP_ORDER - 1) * generator + generator).is_identity()

    def test_scalar_reduce(self):
        """Test wide reduction of 2^512 - 1."""
        expected = (2 ** 512 - 1) % GROUP_ORDER
        assert Ristretto255.scalar_reduce(b"\xff" * 64) == expected


class TestWeightedScenario:
    """Weights [3, 5] over encryptions of X and Y through the raw operations."""

    def test_calculate_aggregate_on_buffers(self, keypair, point_x, point_y):
        """Test the stored aggregate decrypts to 3X + 5Y."""
        weights = [Scalar.from_int(3), Scalar.from_int(5)]
        policies_data = processor.initialize_policies_account(
            weights, bytes(policies_account_size(2))
        )
        user_data = processor.initialize_user_account(bytes(USER_ACCOUNT_SIZE))

        interactions = [
            Interaction(0, encrypt(keypair.public, point_x, Scalar.from_int(13))),
            Interaction(1, encrypt(keypair.public, point_y, Scalar.from_int(17))),
        ]
        user_data = processor.calculate_aggregate(
            interactions, keypair.public, user_data, policies_data
        )

        aggregate = User.deserialize(user_data).encrypted_aggregate
        expected = Scalar.from_int(3) * point_x + Scalar.from_int(5) * point_y
        assert decrypt(keypair.secret, aggregate) == expected
