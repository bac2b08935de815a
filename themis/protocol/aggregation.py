"""
Themis Aggregation Engine

Folds a batch of encrypted interactions into a user's running aggregate:

    aggregate' = aggregate + sum(weight[index_i] * ciphertext_i)

Homomorphic throughout; no plaintext is ever seen. The result does not
depend on the order of interactions within a batch or on how they are
split across batches.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from themis.config import ProtocolConfig
from themis.constants import MAX_INTERACTION_COUNT, MAX_POLICIES
from themis.core.types import Ciphertext, GroupElement
from themis.crypto.elgamal import combine, identity_ciphertext, scale
from themis.errors import (
    IndexOutOfRangeError,
    InvalidParameterError,
    NotInitializedError,
    StateMismatchError,
    TooManyInteractionsError,
)
from themis.state.machine import UserStatus, require_status
from themis.state.policies import Policies
from themis.state.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Interaction:
    """An encrypted signal tagged with the policy that weights it."""
    policy_index: int
    ciphertext: Ciphertext

    def __post_init__(self):
        if not 0 <= self.policy_index < MAX_POLICIES:
            raise InvalidParameterError("policy_index", f"must fit in a u8, got {self.policy_index}")


def weighted_sum(policies: Policies, interactions: Sequence[Interaction]) -> Ciphertext:
    """
    Homomorphic weighted sum of a batch.

    Raises:
        IndexOutOfRangeError: If an interaction references a missing policy
    """
    total = identity_ciphertext()
    for interaction in interactions:
        weight = policies.weight_at(interaction.policy_index)
        total = combine(total, scale(interaction.ciphertext, weight))
    return total


def calculate_aggregate(
    user: User,
    policies: Policies,
    interactions: Sequence[Interaction],
    public_key: GroupElement,
    config: Optional[ProtocolConfig] = None,
) -> User:
    """
    Fold interactions into the user's encrypted aggregate.

    Args:
        user: Current user state
        policies: Initialized policies
        interactions: Batch to fold in
        public_key: Key the interactions were encrypted under
        config: Protocol rules (defaults if not provided)

    Returns:
        New user state; the inputs are not modified

    Raises:
        NotInitializedError: If user or policies are uninitialized
        InvalidStateError: If a proof was already accepted
        TooManyInteractionsError: If the batch exceeds the per-call limit
        StateMismatchError: If public_key differs from the registered key
        IndexOutOfRangeError: If an interaction references a missing policy
    """
    config = config or ProtocolConfig()

    require_status(user, UserStatus.INITIALIZED, "calculate aggregate")
    if not policies.is_initialized:
        raise NotInitializedError("policies")

    if len(interactions) > config.max_interactions_per_call:
        raise TooManyInteractionsError(len(interactions), config.max_interactions_per_call)
    if user.interaction_count + len(interactions) > MAX_INTERACTION_COUNT:
        raise TooManyInteractionsError(
            user.interaction_count + len(interactions), MAX_INTERACTION_COUNT
        )

    if (
        config.enforce_registered_key
        and user.has_public_key
        and user.public_key != public_key
    ):
        raise StateMismatchError("public_key")

    batch = weighted_sum(policies, interactions)

    new_user = user.copy()
    new_user.public_key = public_key
    new_user.encrypted_aggregate = combine(user.encrypted_aggregate, batch)
    new_user.interaction_count = user.interaction_count + len(interactions)

    logger.debug(
        f"Aggregated {len(interactions)} interactions, "
        f"total={new_user.interaction_count}"
    )

    return new_user
