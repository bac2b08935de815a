"""
Themis
Privacy-preserving policy-weighted aggregation

Homomorphic ElGamal over ristretto255, a Chaum-Pedersen proof of correct
decryption, and a per-user account state machine.
"""

__version__ = "0.1.0"
__author__ = "Themis Protocol"

from themis.constants import PROTOCOL_NAME, ACCOUNT_LAYOUT_VERSION
from themis.errors import ErrorCode, ThemisError

__all__ = [
    "PROTOCOL_NAME",
    "ACCOUNT_LAYOUT_VERSION",
    "ErrorCode",
    "ThemisError",
    "__version__",
]
