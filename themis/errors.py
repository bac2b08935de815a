"""
Themis Protocol Error Handling

All error codes and exception classes.

Every operation either succeeds completely or raises one of these; the
caller's account bytes are never partially mutated.
"""

from enum import IntEnum
from typing import Optional, Any


class ErrorCode(IntEnum):
    """Protocol error codes."""

    # 1xxx - General errors
    UNKNOWN_ERROR = 1000
    INVALID_PARAMETER = 1001
    UNKNOWN_INSTRUCTION = 1002

    # 2xxx - Encoding errors
    DECODE_ERROR = 2001
    ACCOUNT_DATA_TOO_SMALL = 2002

    # 3xxx - Account state errors
    ALREADY_INITIALIZED = 3001
    ACCOUNT_IN_USE = 3002
    NOT_INITIALIZED = 3003
    INVALID_STATE = 3004
    STATE_MISMATCH = 3005

    # 4xxx - Policy errors
    INDEX_OUT_OF_RANGE = 4001
    TOO_MANY_POLICIES = 4002

    # 5xxx - Aggregation errors
    AGGREGATE_NOT_READY = 5001
    TOO_MANY_INTERACTIONS = 5002

    # 6xxx - Proof errors
    INVALID_PROOF = 6001
    SCALAR_NOT_FOUND = 6002

    # 7xxx - Crypto backend errors
    BACKEND_UNAVAILABLE = 7001

    # 8xxx - Storage errors
    STORAGE_ERROR = 8001


class ThemisError(Exception):
    """Base exception for all Themis protocol errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code.value}] {message}")

    @property
    def category(self) -> int:
        """Error category: the thousands digit of the code."""
        return self.code.value // 1000

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


# ==============================================================================
# General Errors (1xxx)
# ==============================================================================

class InvalidParameterError(ThemisError):
    def __init__(self, param: str, message: str = ""):
        msg = f"Invalid parameter: {param}"
        if message:
            msg += f" - {message}"
        super().__init__(ErrorCode.INVALID_PARAMETER, msg, {"parameter": param})


class UnknownInstructionError(ThemisError):
    def __init__(self, instruction: Any):
        name = type(instruction).__name__
        super().__init__(
            ErrorCode.UNKNOWN_INSTRUCTION,
            f"Unknown instruction: {name}",
            {"instruction": name}
        )


# ==============================================================================
# Encoding Errors (2xxx)
# ==============================================================================

class EncodingError(ThemisError):
    """Malformed bytes: account layouts, points or scalars."""
    pass


class DecodeError(EncodingError):
    def __init__(self, message: str, details: Any = None):
        super().__init__(ErrorCode.DECODE_ERROR, message, details)


class AccountDataTooSmallError(EncodingError):
    def __init__(self, required: int, available: int):
        super().__init__(
            ErrorCode.ACCOUNT_DATA_TOO_SMALL,
            f"Account data too small: need {required} bytes, have {available}",
            {"required": required, "available": available}
        )


# ==============================================================================
# Account State Errors (3xxx)
# ==============================================================================

class AccountStateError(ThemisError):
    """Operation not permitted in the account's current state."""
    pass


class AlreadyInitializedError(AccountStateError):
    def __init__(self, account: str = "account", code: ErrorCode = ErrorCode.ALREADY_INITIALIZED):
        super().__init__(
            code,
            f"{account.capitalize()} already initialized",
            {"account": account}
        )


class AccountInUseError(AlreadyInitializedError):
    def __init__(self, account: str = "account"):
        super().__init__(account, ErrorCode.ACCOUNT_IN_USE)


class NotInitializedError(AccountStateError):
    def __init__(self, account: str = "account"):
        super().__init__(
            ErrorCode.NOT_INITIALIZED,
            f"{account.capitalize()} not initialized",
            {"account": account}
        )


class InvalidStateError(AccountStateError):
    def __init__(self, operation: str, status: str):
        super().__init__(
            ErrorCode.INVALID_STATE,
            f"Cannot {operation} in state {status}",
            {"operation": operation, "status": status}
        )


class StateMismatchError(AccountStateError):
    def __init__(self, field_name: str):
        super().__init__(
            ErrorCode.STATE_MISMATCH,
            f"Supplied {field_name} does not match stored state",
            {"field": field_name}
        )


# ==============================================================================
# Policy Errors (4xxx)
# ==============================================================================

class PolicyError(ThemisError):
    pass


class IndexOutOfRangeError(PolicyError):
    def __init__(self, index: int, length: int):
        super().__init__(
            ErrorCode.INDEX_OUT_OF_RANGE,
            f"Policy index {index} out of range for {length} policies",
            {"index": index, "length": length}
        )


class TooManyPoliciesError(PolicyError):
    def __init__(self, count: int, maximum: int):
        super().__init__(
            ErrorCode.TOO_MANY_POLICIES,
            f"Too many policies: {count} > {maximum}",
            {"count": count, "maximum": maximum}
        )


# ==============================================================================
# Aggregation Errors (5xxx)
# ==============================================================================

class AggregationError(ThemisError):
    pass


class AggregateNotReadyError(AggregationError):
    def __init__(self, message: str = "No interactions have been aggregated"):
        super().__init__(ErrorCode.AGGREGATE_NOT_READY, message)


class TooManyInteractionsError(AggregationError):
    def __init__(self, count: int, maximum: int):
        super().__init__(
            ErrorCode.TOO_MANY_INTERACTIONS,
            f"Too many interactions in one call: {count} > {maximum}",
            {"count": count, "maximum": maximum}
        )


# ==============================================================================
# Proof Errors (6xxx)
# ==============================================================================

class ProofError(ThemisError):
    pass


class InvalidProofError(ProofError):
    def __init__(self, reason: str = "Decryption proof rejected"):
        super().__init__(ErrorCode.INVALID_PROOF, reason)


class ScalarNotFoundError(ProofError):
    def __init__(self, bits: int):
        super().__init__(
            ErrorCode.SCALAR_NOT_FOUND,
            f"No scalar below 2^{bits} maps to the given point",
            {"bits": bits}
        )


# ==============================================================================
# Crypto Backend Errors (7xxx)
# ==============================================================================

class BackendUnavailableError(ThemisError):
    def __init__(self, message: str, details: Any = None):
        super().__init__(ErrorCode.BACKEND_UNAVAILABLE, message, details)


# ==============================================================================
# Storage Errors (8xxx)
# ==============================================================================

class StorageError(ThemisError):
    def __init__(self, message: str, details: Any = None):
        super().__init__(ErrorCode.STORAGE_ERROR, message, details)
