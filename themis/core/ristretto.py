"""
Themis Ristretto255 Primitives

Points and scalars are handled as canonical 32-byte encodings here; the typed
wrappers live in themis.core.types.

PyNaCl binds the ed25519 scalar field, which ristretto255 shares, but not the
ristretto255 point API. Point operations are therefore called on libsodium
(>= 1.0.18) directly through ctypes, searching the system library path and
the installed nacl package.

libsodium refuses to produce the identity from a scalar multiplication, so
the identity cases (zero scalar, identity operand) are resolved here before
calling into the library. In a prime-order group these are the only inputs
that yield the identity.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import glob
import logging
import os
from functools import lru_cache
from typing import List

import nacl
import nacl.bindings

from themis.constants import (
    GROUP_ORDER,
    IDENTITY_ENCODING,
    LITTLE_ENDIAN,
    POINT_SIZE,
    SCALAR_SIZE,
    WIDE_SCALAR_SIZE,
)
from themis.errors import BackendUnavailableError, DecodeError

logger = logging.getLogger(__name__)

LIBSODIUM_NAMES = (
    "libsodium.so",
    "libsodium.so.26",
    "libsodium.so.23",
    "libsodium.dylib",
    "libsodium.dll",
    "libsodium-26.dll",
    "libsodium-23.dll",
)

_BYTES = ctypes.c_char_p


def _library_candidates() -> List[str]:
    candidates = []
    found = ctypes.util.find_library("sodium")
    if found:
        candidates.append(found)
    candidates.extend(LIBSODIUM_NAMES)

    base = os.path.dirname(nacl.__file__)
    for pattern in ("**/libsodium*.so*", "**/libsodium*.dylib", "**/libsodium*.dll"):
        candidates.extend(glob.glob(os.path.join(base, pattern), recursive=True))
    return candidates


def _bind(lib: ctypes.CDLL) -> None:
    lib.sodium_init.restype = ctypes.c_int
    lib.sodium_init.argtypes = []

    lib.crypto_core_ristretto255_is_valid_point.restype = ctypes.c_int
    lib.crypto_core_ristretto255_is_valid_point.argtypes = [_BYTES]

    for name in ("crypto_core_ristretto255_add", "crypto_core_ristretto255_sub",
                 "crypto_scalarmult_ristretto255"):
        getattr(lib, name).restype = ctypes.c_int
        getattr(lib, name).argtypes = [_BYTES, _BYTES, _BYTES]

    lib.crypto_scalarmult_ristretto255_base.restype = ctypes.c_int
    lib.crypto_scalarmult_ristretto255_base.argtypes = [_BYTES, _BYTES]


@lru_cache(maxsize=None)
def load_libsodium() -> ctypes.CDLL:
    """
    Load and initialize a libsodium build with ristretto255 support.

    Raises:
        BackendUnavailableError: No candidate loads or exposes ristretto255
    """
    tried = []
    for name in _library_candidates():
        try:
            lib = ctypes.CDLL(name)
        except OSError as e:
            tried.append(f"{name}: {e}")
            continue
        if not hasattr(lib, "crypto_core_ristretto255_add"):
            tried.append(f"{name}: no ristretto255 symbols")
            continue

        _bind(lib)
        if lib.sodium_init() < 0:
            tried.append(f"{name}: sodium_init failed")
            continue

        logger.debug(f"Loaded libsodium from {name}")
        return lib

    raise BackendUnavailableError(
        "libsodium >= 1.0.18 with ristretto255 support is required",
        {"tried": tried}
    )


def _call(function: str, *args: bytes) -> bytes:
    out = ctypes.create_string_buffer(POINT_SIZE)
    if getattr(load_libsodium(), function)(out, *args) != 0:
        raise DecodeError(f"{function} rejected its input")
    return out.raw


class Ristretto255:
    """
    ristretto255 group operations using libsodium.

    Provides safe wrappers for:
    - Point validation
    - Point addition/subtraction/negation
    - Scalar multiplication (variable base and fixed base)
    - Wide scalar reduction and random scalars
    """

    POINT_SIZE = POINT_SIZE
    SCALAR_SIZE = SCALAR_SIZE

    @staticmethod
    def is_valid_point(point: bytes) -> bool:
        """Check if bytes are a canonical ristretto255 encoding."""
        if len(point) != POINT_SIZE:
            return False
        if point == IDENTITY_ENCODING:
            return True
        return load_libsodium().crypto_core_ristretto255_is_valid_point(point) == 1

    @staticmethod
    def scalar_to_bytes(scalar: int) -> bytes:
        return (scalar % GROUP_ORDER).to_bytes(SCALAR_SIZE, LITTLE_ENDIAN)

    @staticmethod
    def scalar_reduce(wide: bytes) -> int:
        """Reduce a 64-byte little-endian value modulo the group order."""
        if len(wide) != WIDE_SCALAR_SIZE:
            raise ValueError(f"Wide scalar must be {WIDE_SCALAR_SIZE} bytes, got {len(wide)}")
        reduced = nacl.bindings.crypto_core_ed25519_scalar_reduce(wide)
        return int.from_bytes(reduced, LITTLE_ENDIAN)

    @staticmethod
    def scalar_random() -> int:
        """Uniformly random non-zero scalar from libsodium's CSPRNG."""
        return int.from_bytes(
            nacl.bindings.crypto_core_ed25519_scalar_random(),
            LITTLE_ENDIAN
        )

    @staticmethod
    def point_add(p: bytes, q: bytes) -> bytes:
        """Add two points."""
        if p == IDENTITY_ENCODING:
            return q
        if q == IDENTITY_ENCODING:
            return p
        return _call("crypto_core_ristretto255_add", p, q)

    @staticmethod
    def point_negate(p: bytes) -> bytes:
        """Negate point: -P = (L - 1) * P."""
        return Ristretto255.scalarmult(GROUP_ORDER - 1, p)

    @staticmethod
    def point_sub(p: bytes, q: bytes) -> bytes:
        """Subtract points: p - q."""
        if q == IDENTITY_ENCODING:
            return p
        if p == IDENTITY_ENCODING:
            return Ristretto255.point_negate(q)
        return _call("crypto_core_ristretto255_sub", p, q)

    @staticmethod
    def scalarmult(scalar: int, point: bytes) -> bytes:
        """Scalar multiplication: s * P."""
        scalar %= GROUP_ORDER
        if scalar == 0 or point == IDENTITY_ENCODING:
            return IDENTITY_ENCODING
        return _call(
            "crypto_scalarmult_ristretto255",
            Ristretto255.scalar_to_bytes(scalar),
            point
        )

    @staticmethod
    def scalarmult_base(scalar: int) -> bytes:
        """Scalar multiplication with the basepoint: s * G."""
        scalar %= GROUP_ORDER
        if scalar == 0:
            return IDENTITY_ENCODING
        return _call(
            "crypto_scalarmult_ristretto255_base",
            Ristretto255.scalar_to_bytes(scalar)
        )
