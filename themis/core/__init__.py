"""
Themis Core Data Structures

Group elements, scalars, ciphertexts and the fixed-width codecs used by the
account layouts.
"""

from themis.core.types import Scalar, GroupElement, Ciphertext, KeyPair
from themis.core.ristretto import Ristretto255
from themis.core.serialization import (
    ByteReader,
    ByteWriter,
    fit_to_buffer,
    is_zeroed,
)

__all__ = [
    # Types
    "Scalar",
    "GroupElement",
    "Ciphertext",
    "KeyPair",
    # Primitives
    "Ristretto255",
    # Serialization
    "ByteReader",
    "ByteWriter",
    "fit_to_buffer",
    "is_zeroed",
]
