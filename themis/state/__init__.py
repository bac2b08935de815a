"""
Themis Account State

Account entities, lifecycle transitions and persistence.
"""

from themis.state.policies import (
    Policies,
)
from themis.state.user import (
    User,
)
from themis.state.machine import (
    UserStatus,
    user_status,
    require_status,
    apply_initialize_user,
    apply_initialize_policies,
)
from themis.state.storage import (
    AccountStorage,
)

__all__ = [
    # Accounts
    "Policies",
    "User",
    # Machine
    "UserStatus",
    "user_status",
    "require_status",
    "apply_initialize_user",
    "apply_initialize_policies",
    # Storage
    "AccountStorage",
]
