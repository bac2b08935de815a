"""
Themis Local Bank

In-process stand-in for the ledger: owns account storage, runs one
instruction per call against stored buffers and commits only on success.
"""

from __future__ import annotations
import logging
import secrets
import threading
from dataclasses import dataclass
from typing import Dict, Optional

from themis.config import ProtocolConfig
from themis.constants import (
    ACCOUNT_KIND_POLICIES,
    ACCOUNT_KIND_USER,
    ADDRESS_SIZE,
    USER_ACCOUNT_SIZE,
    policies_account_size,
)
from themis.errors import InvalidParameterError, StorageError
from themis.program.instruction import Instruction
from themis.program.processor import Processor
from themis.state.storage import AccountStorage

logger = logging.getLogger(__name__)


@dataclass
class BankStats:
    """Instruction statistics."""
    processed: int = 0
    failed: int = 0
    accounts_created: int = 0


class LocalBank:
    """
    Executes instructions against SQLite-backed account buffers.

    Calls are serialized with a lock; each call runs inside one storage
    transaction, so a failing instruction leaves every buffer untouched.
    """

    def __init__(
        self,
        storage: Optional[AccountStorage] = None,
        config: Optional[ProtocolConfig] = None,
    ):
        self.storage = storage or AccountStorage()
        self.processor = Processor(config)
        self.stats = BankStats()
        self._lock = threading.Lock()

    @property
    def transaction_count(self) -> int:
        return self.stats.processed

    def allocate_account(self, kind: str, size: int) -> bytes:
        """
        Create a zeroed account buffer at a fresh random address.

        Returns:
            The new 32-byte address
        """
        if size < 0:
            raise InvalidParameterError("size", "must be non-negative")

        with self._lock:
            address = secrets.token_bytes(ADDRESS_SIZE)
            while self.storage.exists(address):
                address = secrets.token_bytes(ADDRESS_SIZE)
            self.storage.create(address, kind, bytes(size))
            self.stats.accounts_created += 1

        return address

    def allocate_user_account(self) -> bytes:
        return self.allocate_account(ACCOUNT_KIND_USER, USER_ACCOUNT_SIZE)

    def allocate_policies_account(self, count: int) -> bytes:
        return self.allocate_account(ACCOUNT_KIND_POLICIES, policies_account_size(count))

    def get_account(self, address: bytes) -> bytes:
        """
        Raw account buffer.

        Raises:
            StorageError: If the address is unknown
        """
        data = self.storage.get(address)
        if data is None:
            raise StorageError(f"Account {bytes(address).hex()[:16]} does not exist")
        return data

    def _load_accounts(
        self,
        instruction: Instruction,
        accounts: Dict[str, bytes],
    ) -> Dict[str, bytes]:
        """Fetch the buffers the instruction declares, checking each account's kind."""
        buffers = {}
        for role in getattr(instruction, "ACCOUNTS", ()):
            if role not in accounts:
                raise InvalidParameterError("accounts", f"missing {role} account")

            address = accounts[role]
            buffers[role] = self.get_account(address)
            kind = self.storage.get_kind(address)
            if kind != role:
                raise InvalidParameterError(
                    "accounts", f"{role} role given a {kind} account"
                )
        return buffers

    def execute(self, instruction: Instruction, accounts: Dict[str, bytes]) -> Dict[str, bytes]:
        """
        Run one instruction atomically.

        Args:
            instruction: Instruction to run
            accounts: Role ("user", "policies") to account address

        Returns:
            Role to new account bytes for every written account

        Raises:
            InvalidParameterError: If a role is missing or names an account of another kind
            StorageError: If an address is unknown
            ThemisError: Whatever the instruction raises; nothing is stored
        """
        with self._lock:
            try:
                with self.storage.transaction():
                    buffers = self._load_accounts(instruction, accounts)
                    written = self.processor.process_instruction(instruction, buffers)
                    for role, data in written.items():
                        self.storage.put(accounts[role], data)
            except Exception:
                self.stats.failed += 1
                raise

            self.stats.processed += 1

        logger.debug(
            f"Committed {type(instruction).__name__} "
            f"({', '.join(sorted(written))})"
        )
        return written

    def close(self) -> None:
        self.storage.close()
