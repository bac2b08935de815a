"""
Themis Protocol Operations

Aggregation, decryption submission and payment request on decoded state.
"""

from themis.protocol.aggregation import (
    Interaction,
    weighted_sum,
    calculate_aggregate,
)
from themis.protocol.decryption import (
    submit_proof_decryption,
)
from themis.protocol.payment import (
    request_payment,
)

__all__ = [
    "Interaction",
    "weighted_sum",
    "calculate_aggregate",
    "submit_proof_decryption",
    "request_payment",
]
