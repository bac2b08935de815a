"""
Themis Policies Account

Ordered list of scalar weights, set once and immutable afterwards.

Layout (big-endian integers):
    version (u8) || is_initialized (u8) || count (u16) || scalars (32 * count)

An empty or all-zero buffer decodes to the default, uninitialized account.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from themis.constants import (
    ACCOUNT_LAYOUT_VERSION,
    MAX_POLICIES,
    SCALAR_SIZE,
    policies_account_size,
)
from themis.core.serialization import ByteReader, ByteWriter, is_zeroed
from themis.core.types import Scalar
from themis.errors import (
    AccountInUseError,
    DecodeError,
    IndexOutOfRangeError,
    TooManyPoliciesError,
)

logger = logging.getLogger(__name__)


@dataclass
class Policies:
    """Policy weights indexed by the u8 carried in each interaction."""
    is_initialized: bool = False
    scalars: List[Scalar] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.scalars)

    def initialize(self, weights: Sequence[Scalar]) -> None:
        """
        Store weights verbatim, in order. Allowed exactly once.

        Raises:
            AccountInUseError: If already initialized
            TooManyPoliciesError: If more weights than a u8 index can address
        """
        if self.is_initialized:
            raise AccountInUseError("policies")
        if len(weights) > MAX_POLICIES:
            raise TooManyPoliciesError(len(weights), MAX_POLICIES)

        self.scalars = list(weights)
        self.is_initialized = True

        logger.debug(f"Initialized policies account with {len(self.scalars)} weights")

    def weight_at(self, index: int) -> Scalar:
        """Weight for a policy index."""
        if not 0 <= index < len(self.scalars):
            raise IndexOutOfRangeError(index, len(self.scalars))
        return self.scalars[index]

    @property
    def size(self) -> int:
        """Serialized size in bytes."""
        return policies_account_size(len(self.scalars))

    def copy(self) -> "Policies":
        return Policies(is_initialized=self.is_initialized, scalars=list(self.scalars))

    def serialize(self) -> bytes:
        """Serialize policies account."""
        writer = ByteWriter()

        writer.write_u8(ACCOUNT_LAYOUT_VERSION)
        writer.write_bool(self.is_initialized)
        writer.write_u16(len(self.scalars))
        for scalar in self.scalars:
            writer.write_raw(scalar.serialize())

        return writer.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes) -> "Policies":
        """
        Deserialize policies account.

        Raises:
            DecodeError: On truncation, unknown version, bad flags or
                non-canonical scalars
        """
        if is_zeroed(data):
            return cls()

        reader = ByteReader(data)

        version = reader.read_u8()
        if version != ACCOUNT_LAYOUT_VERSION:
            raise DecodeError(f"Unknown policies layout version {version}")

        is_initialized = reader.read_bool()
        count = reader.read_u16()
        if count > MAX_POLICIES:
            raise DecodeError(f"Policy count {count} exceeds {MAX_POLICIES}")
        if not is_initialized and count:
            raise DecodeError("Uninitialized policies account holds scalars")

        scalars = [
            Scalar.from_bytes(reader.read_fixed_bytes(SCALAR_SIZE))
            for _ in range(count)
        ]

        if any(reader.read_fixed_bytes(reader.remaining())):
            raise DecodeError("Trailing data after policies layout")

        return cls(is_initialized=is_initialized, scalars=scalars)

    def __repr__(self) -> str:
        return f"Policies(initialized={self.is_initialized}, count={len(self.scalars)})"
