"""
Themis Core Types

Group elements, scalars and ciphertexts over ristretto255.

Scalars serialize as 32 bytes LITTLE-ENDIAN (reduced mod L); points as their
32-byte canonical encoding. Decoding from untrusted bytes goes through
from_bytes/deserialize, which raise DecodeError on anything non-canonical.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple

from themis.constants import (
    CIPHERTEXT_SIZE,
    GROUP_ORDER,
    IDENTITY_ENCODING,
    LITTLE_ENDIAN,
    POINT_SIZE,
    SCALAR_SIZE,
)
from themis.core.ristretto import Ristretto255
from themis.errors import DecodeError


@dataclass(frozen=True, slots=True)
class Scalar:
    """
    Element of the scalar field (integers mod L).

    Used as secret keys, ephemeral randomness, challenges, responses and
    policy weights.

    SIZE: 32 bytes
    SERIALIZATION: little-endian, value < L
    """
    value: int = 0

    def __post_init__(self):
        if not 0 <= self.value < GROUP_ORDER:
            raise ValueError("Scalar must be reduced modulo the group order")

    def __add__(self, other: Scalar) -> Scalar:
        if not isinstance(other, Scalar):
            return NotImplemented
        return Scalar((self.value + other.value) % GROUP_ORDER)

    def __sub__(self, other: Scalar) -> Scalar:
        if not isinstance(other, Scalar):
            return NotImplemented
        return Scalar((self.value - other.value) % GROUP_ORDER)

    def __mul__(self, other):
        if isinstance(other, Scalar):
            return Scalar((self.value * other.value) % GROUP_ORDER)
        return NotImplemented

    def __neg__(self) -> Scalar:
        return Scalar((-self.value) % GROUP_ORDER)

    def __bytes__(self) -> bytes:
        return self.value.to_bytes(SCALAR_SIZE, LITTLE_ENDIAN)

    def __repr__(self) -> str:
        return f"Scalar({self.value.to_bytes(SCALAR_SIZE, LITTLE_ENDIAN).hex()[:16]}...)"

    def is_zero(self) -> bool:
        return self.value == 0

    def hex(self) -> str:
        return bytes(self).hex()

    @classmethod
    def zero(cls) -> Scalar:
        return cls(0)

    @classmethod
    def one(cls) -> Scalar:
        return cls(1)

    @classmethod
    def from_int(cls, value: int) -> Scalar:
        """Map any integer (negative included) into the field."""
        return cls(value % GROUP_ORDER)

    @classmethod
    def from_hash(cls, digest: bytes) -> Scalar:
        """Wide reduction of a 64-byte digest (e.g. SHA-512 output)."""
        return cls(Ristretto255.scalar_reduce(digest))

    @classmethod
    def random(cls) -> Scalar:
        """Random non-zero scalar from a CSPRNG."""
        return cls(Ristretto255.scalar_random())

    @classmethod
    def from_bytes(cls, data: bytes) -> Scalar:
        """Decode a canonical scalar encoding."""
        if len(data) != SCALAR_SIZE:
            raise DecodeError(f"Scalar must be {SCALAR_SIZE} bytes, got {len(data)}")
        value = int.from_bytes(data, LITTLE_ENDIAN)
        if value >= GROUP_ORDER:
            raise DecodeError("Non-canonical scalar encoding")
        return cls(value)

    @classmethod
    def from_hex(cls, hex_string: str) -> Scalar:
        return cls.from_bytes(bytes.fromhex(hex_string))

    def serialize(self) -> bytes:
        """Serialize to 32 bytes little-endian."""
        return bytes(self)

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[Scalar, int]:
        """Deserialize from bytes, return (Scalar, bytes_consumed)."""
        return cls.from_bytes(bytes(data[offset:offset + SCALAR_SIZE])), SCALAR_SIZE


@dataclass(frozen=True, slots=True)
class GroupElement:
    """
    ristretto255 group element.

    The identity is the all-zero encoding; the generator is the ristretto255
    basepoint.

    SIZE: 32 bytes
    SERIALIZATION: canonical compressed encoding
    """
    data: bytes = field(default_factory=lambda: IDENTITY_ENCODING)

    def __post_init__(self):
        if len(self.data) != POINT_SIZE:
            raise ValueError(f"GroupElement must be {POINT_SIZE} bytes, got {len(self.data)}")

    def __add__(self, other: GroupElement) -> GroupElement:
        if not isinstance(other, GroupElement):
            return NotImplemented
        return GroupElement(Ristretto255.point_add(self.data, other.data))

    def __sub__(self, other: GroupElement) -> GroupElement:
        if not isinstance(other, GroupElement):
            return NotImplemented
        return GroupElement(Ristretto255.point_sub(self.data, other.data))

    def __neg__(self) -> GroupElement:
        return GroupElement(Ristretto255.point_negate(self.data))

    def __rmul__(self, scalar: Scalar) -> GroupElement:
        if not isinstance(scalar, Scalar):
            return NotImplemented
        return GroupElement(Ristretto255.scalarmult(scalar.value, self.data))

    def __mul__(self, scalar: Scalar) -> GroupElement:
        return self.__rmul__(scalar)

    def __bytes__(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        if self.is_identity():
            return "GroupElement(identity)"
        return f"GroupElement({self.data.hex()[:16]}...)"

    def is_identity(self) -> bool:
        return self.data == IDENTITY_ENCODING

    def hex(self) -> str:
        return self.data.hex()

    @classmethod
    def identity(cls) -> GroupElement:
        return cls(IDENTITY_ENCODING)

    @classmethod
    def generator(cls) -> GroupElement:
        """Basepoint G = 1 * G."""
        return cls(Ristretto255.scalarmult_base(1))

    @classmethod
    def base_mul(cls, scalar: Scalar) -> GroupElement:
        """Fixed-base multiplication s * G."""
        return cls(Ristretto255.scalarmult_base(scalar.value))

    @classmethod
    def from_bytes(cls, data: bytes) -> GroupElement:
        """Decode and validate a point encoding."""
        data = bytes(data)
        if len(data) != POINT_SIZE:
            raise DecodeError(f"GroupElement must be {POINT_SIZE} bytes, got {len(data)}")
        if not Ristretto255.is_valid_point(data):
            raise DecodeError("Invalid ristretto255 point encoding")
        return cls(data)

    @classmethod
    def from_hex(cls, hex_string: str) -> GroupElement:
        return cls.from_bytes(bytes.fromhex(hex_string))

    def serialize(self) -> bytes:
        """Serialize to raw bytes."""
        return self.data

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[GroupElement, int]:
        """Deserialize from bytes, return (GroupElement, bytes_consumed)."""
        return cls.from_bytes(data[offset:offset + POINT_SIZE]), POINT_SIZE


@dataclass(frozen=True, slots=True)
class Ciphertext:
    """
    ElGamal ciphertext (c1, c2) = (r*G, m + r*pk).

    SIZE: 64 bytes
    SERIALIZATION: c1 || c2
    """
    c1: GroupElement = field(default_factory=GroupElement.identity)
    c2: GroupElement = field(default_factory=GroupElement.identity)

    def __add__(self, other: Ciphertext) -> Ciphertext:
        if not isinstance(other, Ciphertext):
            return NotImplemented
        return Ciphertext(self.c1 + other.c1, self.c2 + other.c2)

    def __bytes__(self) -> bytes:
        return self.c1.data + self.c2.data

    def __repr__(self) -> str:
        return f"Ciphertext(c1={self.c1!r}, c2={self.c2!r})"

    def scale(self, scalar: Scalar) -> Ciphertext:
        return Ciphertext(scalar * self.c1, scalar * self.c2)

    def is_identity(self) -> bool:
        return self.c1.is_identity() and self.c2.is_identity()

    @classmethod
    def identity(cls) -> Ciphertext:
        return cls(GroupElement.identity(), GroupElement.identity())

    @classmethod
    def from_bytes(cls, data: bytes) -> Ciphertext:
        data = bytes(data)
        if len(data) != CIPHERTEXT_SIZE:
            raise DecodeError(f"Ciphertext must be {CIPHERTEXT_SIZE} bytes, got {len(data)}")
        return cls(
            GroupElement.from_bytes(data[:POINT_SIZE]),
            GroupElement.from_bytes(data[POINT_SIZE:]),
        )

    def serialize(self) -> bytes:
        """Serialize to bytes: c1 || c2."""
        return bytes(self)

    @classmethod
    def deserialize(cls, data: bytes, offset: int = 0) -> Tuple[Ciphertext, int]:
        """Deserialize from bytes, return (Ciphertext, bytes_consumed)."""
        return cls.from_bytes(data[offset:offset + CIPHERTEXT_SIZE]), CIPHERTEXT_SIZE


@dataclass(frozen=True, slots=True)
class KeyPair:
    """
    ElGamal key pair with public = secret * G.

    NOTE: Secret keys never enter account state.
    """
    secret: Scalar
    public: GroupElement

    def __post_init__(self):
        if GroupElement.base_mul(self.secret) != self.public:
            raise ValueError("Public key does not match secret key")

    def __repr__(self) -> str:
        # Never expose secret key data
        return f"KeyPair(public={self.public!r}, secret=<redacted>)"

    @classmethod
    def from_secret(cls, secret: Scalar) -> KeyPair:
        return cls(secret=secret, public=GroupElement.base_mul(secret))

    @classmethod
    def generate(cls) -> KeyPair:
        return cls.from_secret(Scalar.random())
