"""
Themis Program

Instruction set and the bytes-level processor.
"""

from themis.program.instruction import (
    InitializeUserAccount,
    InitializePoliciesAccount,
    CalculateAggregate,
    SubmitProofDecryption,
    RequestPayment,
    Instruction,
)
from themis.program.processor import (
    Processor,
    process_instruction,
    initialize_user_account,
    initialize_policies_account,
    calculate_aggregate,
    submit_proof_decryption,
    request_payment,
)

__all__ = [
    # Instructions
    "InitializeUserAccount",
    "InitializePoliciesAccount",
    "CalculateAggregate",
    "SubmitProofDecryption",
    "RequestPayment",
    "Instruction",
    # Processor
    "Processor",
    "process_instruction",
    "initialize_user_account",
    "initialize_policies_account",
    "calculate_aggregate",
    "submit_proof_decryption",
    "request_payment",
]
