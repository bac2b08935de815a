"""
Themis Test Fixtures
"""

import pytest

from themis.config import ProtocolConfig
from themis.core.types import Ciphertext, GroupElement, KeyPair, Scalar
from themis.crypto.elgamal import encrypt
from themis.protocol.aggregation import Interaction
from themis.state.policies import Policies
from themis.state.storage import AccountStorage
from themis.state.user import User
from themis.client.bank import LocalBank
from themis.client.client import ThemisClient


@pytest.fixture
def keypair() -> KeyPair:
    """Deterministic key pair for testing."""
    return KeyPair.from_secret(Scalar.from_int(0x5EC12E7))


@pytest.fixture
def other_keypair() -> KeyPair:
    """Second deterministic key pair for testing."""
    return KeyPair.from_secret(Scalar.from_int(0xC0FFEE))


@pytest.fixture
def generator() -> GroupElement:
    return GroupElement.generator()


@pytest.fixture
def point_x() -> GroupElement:
    """Arbitrary group element X = 7*G."""
    return GroupElement.base_mul(Scalar.from_int(7))


@pytest.fixture
def point_y() -> GroupElement:
    """Arbitrary group element Y = 11*G."""
    return GroupElement.base_mul(Scalar.from_int(11))


@pytest.fixture
def policies() -> Policies:
    """Initialized policies with weights [3, 5]."""
    policies = Policies()
    policies.initialize([Scalar.from_int(3), Scalar.from_int(5)])
    return policies


@pytest.fixture
def user() -> User:
    """Freshly initialized user."""
    return User(is_initialized=True)


@pytest.fixture
def interactions(keypair, point_x, point_y):
    """Encryptions of X (policy 0) and Y (policy 1) under keypair."""
    return [
        Interaction(0, encrypt(keypair.public, point_x, Scalar.from_int(101))),
        Interaction(1, encrypt(keypair.public, point_y, Scalar.from_int(202))),
    ]


@pytest.fixture
def protocol_config() -> ProtocolConfig:
    return ProtocolConfig()


@pytest.fixture
def storage():
    """In-memory account storage."""
    storage = AccountStorage()
    storage.connect()
    yield storage
    storage.close()


@pytest.fixture
def bank(storage) -> LocalBank:
    return LocalBank(storage)


@pytest.fixture
def client(bank) -> ThemisClient:
    return ThemisClient(bank)


@pytest.fixture
def make_ciphertext(keypair):
    """Factory: encryption of value*G under keypair with fixed randomness."""
    def _make(value: int, randomness: int) -> Ciphertext:
        return encrypt(
            keypair.public,
            GroupElement.base_mul(Scalar.from_int(value)),
            Scalar.from_int(randomness),
        )
    return _make
