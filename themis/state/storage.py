"""
Themis Account Storage

SQLite persistence for raw account buffers, keyed by 32-byte address.
Operations work on bytes only; decoding is the processor's job.
"""

from __future__ import annotations
import logging
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from themis.constants import ACCOUNT_KIND_POLICIES, ACCOUNT_KIND_USER, ADDRESS_SIZE
from themis.errors import InvalidParameterError, StorageError

logger = logging.getLogger(__name__)


# Schema version for migrations
SCHEMA_VERSION = 1

MEMORY_DB = ":memory:"

ACCOUNT_KINDS = (ACCOUNT_KIND_USER, ACCOUNT_KIND_POLICIES)


CREATE_TABLES_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_info (
    key TEXT PRIMARY KEY,
    value TEXT
);

-- Account buffers
CREATE TABLE IF NOT EXISTS accounts (
    address BLOB PRIMARY KEY,
    kind TEXT NOT NULL,
    data BLOB NOT NULL,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_accounts_kind ON accounts(kind);
"""


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class AccountStorage:
    """
    SQLite-based account storage.

    Autocommit by default; transaction() groups writes so a failed
    operation leaves every stored buffer untouched.
    """
    db_path: str = MEMORY_DB
    _conn: Optional[sqlite3.Connection] = None

    def __post_init__(self):
        self._conn = None
        self._in_transaction = False

    def connect(self) -> None:
        """Open database connection and initialize schema."""
        if self._conn is not None:
            return

        try:
            if self.db_path != MEMORY_DB:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            self._conn = sqlite3.connect(
                self.db_path,
                isolation_level=None,  # Autocommit by default
                check_same_thread=False
            )

            if self.db_path != MEMORY_DB:
                self._conn.execute("PRAGMA journal_mode=WAL")
                self._conn.execute("PRAGMA synchronous=NORMAL")

            self._init_schema()
        except (sqlite3.Error, OSError) as e:
            self._conn = None
            raise StorageError(f"Cannot open account storage {self.db_path}: {e}") from e

        logger.info(f"Connected to account storage: {self.db_path}")

    def _init_schema(self) -> None:
        """Initialize database schema."""
        self._conn.executescript(CREATE_TABLES_SQL)

        cursor = self._conn.execute(
            "SELECT value FROM schema_info WHERE key = 'version'"
        )
        row = cursor.fetchone()

        if row is None:
            self._conn.execute(
                "INSERT INTO schema_info (key, value) VALUES ('version', ?)",
                (str(SCHEMA_VERSION),)
            )
        elif int(row[0]) != SCHEMA_VERSION:
            raise StorageError(
                f"Unsupported schema version {row[0]}",
                {"expected": SCHEMA_VERSION, "found": row[0]}
            )

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Closed account storage")

    def __enter__(self) -> "AccountStorage":
        self.connect()
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _ensure_connected(self) -> None:
        if self._conn is None:
            self.connect()

    @staticmethod
    def _check_address(address: bytes) -> bytes:
        address = bytes(address)
        if len(address) != ADDRESS_SIZE:
            raise InvalidParameterError("address", f"must be {ADDRESS_SIZE} bytes")
        return address

    # =========================================================================
    # Account Operations
    # =========================================================================

    def create(self, address: bytes, kind: str, data: bytes) -> None:
        """
        Store a new account buffer.

        Raises:
            InvalidParameterError: On a bad address or unknown kind
            StorageError: If the address is taken or the write fails
        """
        address = self._check_address(address)
        if kind not in ACCOUNT_KINDS:
            raise InvalidParameterError("kind", f"unknown account kind {kind!r}")
        self._ensure_connected()

        now = _now_ms()
        try:
            self._conn.execute(
                """INSERT INTO accounts (address, kind, data, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (address, kind, bytes(data), now, now)
            )
        except sqlite3.IntegrityError as e:
            raise StorageError(f"Account {address.hex()[:16]} already exists") from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create account: {e}") from e

        logger.debug(f"Created {kind} account {address.hex()[:16]} ({len(data)} bytes)")

    def get(self, address: bytes) -> Optional[bytes]:
        """Load an account buffer, or None if the address is unknown."""
        address = self._check_address(address)
        self._ensure_connected()

        try:
            cursor = self._conn.execute(
                "SELECT data FROM accounts WHERE address = ?",
                (address,)
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to load account: {e}") from e

        if row is None:
            return None
        return bytes(row[0])

    def get_kind(self, address: bytes) -> Optional[str]:
        """Account kind, or None if the address is unknown."""
        address = self._check_address(address)
        self._ensure_connected()

        try:
            cursor = self._conn.execute(
                "SELECT kind FROM accounts WHERE address = ?",
                (address,)
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to load account kind: {e}") from e

        return row[0] if row else None

    def put(self, address: bytes, data: bytes) -> None:
        """
        Overwrite an existing account buffer.

        Raises:
            StorageError: If the account does not exist or the write fails
        """
        address = self._check_address(address)
        self._ensure_connected()

        try:
            cursor = self._conn.execute(
                "UPDATE accounts SET data = ?, updated_at = ? WHERE address = ?",
                (bytes(data), _now_ms(), address)
            )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to store account: {e}") from e

        if cursor.rowcount == 0:
            raise StorageError(f"Account {address.hex()[:16]} does not exist")

    def exists(self, address: bytes) -> bool:
        return self.get(address) is not None

    def list_addresses(self, kind: Optional[str] = None) -> List[bytes]:
        """All stored addresses, optionally filtered by kind."""
        self._ensure_connected()

        try:
            if kind is None:
                cursor = self._conn.execute(
                    "SELECT address FROM accounts ORDER BY created_at"
                )
            else:
                cursor = self._conn.execute(
                    "SELECT address FROM accounts WHERE kind = ? ORDER BY created_at",
                    (kind,)
                )
            return [bytes(row[0]) for row in cursor]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list accounts: {e}") from e

    def get_account_count(self) -> int:
        """Get total number of accounts."""
        self._ensure_connected()

        cursor = self._conn.execute("SELECT COUNT(*) FROM accounts")
        return cursor.fetchone()[0]

    # =========================================================================
    # Transactions
    # =========================================================================

    @contextmanager
    def transaction(self) -> Iterator["AccountStorage"]:
        """
        Group writes; commit on normal exit, roll back on any exception.

        Not reentrant.
        """
        self._ensure_connected()
        if self._in_transaction:
            raise StorageError("Nested transactions are not supported")

        self._conn.execute("BEGIN TRANSACTION")
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        else:
            self._conn.execute("COMMIT")
        finally:
            self._in_transaction = False
