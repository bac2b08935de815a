"""
Themis Account State Machine

User accounts move through

    UNINITIALIZED -> INITIALIZED -> DECRYPTED -> PAYMENT_REQUESTED

Transitions never mutate their input; each apply_* returns a new account.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Sequence

from themis.core.types import Scalar
from themis.errors import (
    AccountInUseError,
    InvalidStateError,
    NotInitializedError,
)
from themis.state.policies import Policies
from themis.state.user import User

logger = logging.getLogger(__name__)


class UserStatus(Enum):
    """Lifecycle position of a user account."""
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    DECRYPTED = "decrypted"
    PAYMENT_REQUESTED = "payment_requested"

    def __str__(self) -> str:
        return self.value


def user_status(user: User) -> UserStatus:
    """Derive the lifecycle status from the account flags."""
    if not user.is_initialized:
        return UserStatus.UNINITIALIZED
    if user.payment_requested:
        return UserStatus.PAYMENT_REQUESTED
    if user.proof_verified:
        return UserStatus.DECRYPTED
    return UserStatus.INITIALIZED


def require_status(user: User, expected: UserStatus, operation: str) -> None:
    """
    Check that an operation is allowed in the user's current status.

    Raises:
        NotInitializedError: If the account was never initialized
        InvalidStateError: If initialized but in another status
    """
    status = user_status(user)
    if status == expected:
        return
    if status == UserStatus.UNINITIALIZED:
        raise NotInitializedError("user")
    raise InvalidStateError(operation, str(status))


def apply_initialize_user(user: User) -> User:
    """
    Initialize a fresh user account.

    Returns:
        New user with an identity aggregate and no registered key

    Raises:
        AccountInUseError: If already initialized
    """
    if user.is_initialized:
        raise AccountInUseError("user")

    new_user = User(is_initialized=True)

    logger.debug("Initialized user account")

    return new_user


def apply_initialize_policies(policies: Policies, weights: Sequence[Scalar]) -> Policies:
    """
    Initialize a policies account with its weights.

    Raises:
        AccountInUseError: If already initialized
        TooManyPoliciesError: If more than 256 weights
    """
    new_policies = policies.copy()
    new_policies.initialize(weights)
    return new_policies
