"""
Themis End-to-End Benchmark

Creates a policies account and N users; every user submits one encryption
of G per policy, proves the decryption of its aggregate and requests
payment. Each user's recovered aggregate must equal the sum of the policy
weights.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from themis.config import BenchmarkConfig, ProtocolConfig
from themis.core.types import KeyPair
from themis.crypto.elgamal import recover_scalar
from themis.errors import InvalidProofError
from themis.state.storage import AccountStorage
from themis.client.bank import LocalBank
from themis.client.client import ThemisClient, encrypt_interactions

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    """Outcome of a benchmark run."""
    num_users: int
    num_transactions: int
    elapsed: float

    @property
    def tps(self) -> float:
        if self.elapsed <= 0:
            return 0.0
        return self.num_transactions / self.elapsed

    def __str__(self) -> str:
        return (
            f"{self.num_transactions} transactions in {self.elapsed:.3f}s "
            f"({self.tps:.1f} TPS)"
        )


def run_user_workflow(
    client: ThemisClient,
    keypair: KeyPair,
    policies: bytes,
    signals: List[int],
    expected_aggregate: int,
    batch_size: int = 1,
    plaintext_bits: int = 16,
) -> int:
    """
    Full workflow for one user.

    Returns:
        Number of instructions executed

    Raises:
        InvalidProofError: If the recovered aggregate is not the expected one
    """
    user = client.create_user_account()
    num_transactions = 1

    interactions = encrypt_interactions(keypair.public, signals)
    num_transactions += client.submit_interactions(
        user, policies, keypair.public, interactions, batch_size
    )

    plaintext, _ = client.submit_proof_decryption(user, keypair)
    num_transactions += 1

    recovered = recover_scalar(plaintext, plaintext_bits)
    if recovered != expected_aggregate:
        raise InvalidProofError(
            f"Recovered aggregate {recovered} != expected {expected_aggregate}"
        )

    state = client.request_payment(user)
    num_transactions += 1

    logger.debug(f"User {user.hex()[:16]} settled: {state}")

    return num_transactions


def run_benchmark(
    config: Optional[BenchmarkConfig] = None,
    protocol: Optional[ProtocolConfig] = None,
    storage: Optional[AccountStorage] = None,
) -> BenchmarkResult:
    """
    Run the end-to-end benchmark.

    Args:
        config: Benchmark shape (defaults if not provided)
        protocol: Protocol rules for the bank
        storage: Account storage; in-memory if not provided

    Returns:
        BenchmarkResult
    """
    config = config or BenchmarkConfig()
    bank = LocalBank(storage, protocol)
    client = ThemisClient(bank)

    policies = client.create_policies_account(config.policies)
    num_transactions = 1

    # One encryption of G per policy, so the aggregate is the weight sum
    signals = [1] * len(config.policies)
    expected = sum(config.policies)

    keypair = KeyPair.generate()

    logger.info(f"Starting benchmark: {config.num_users} users, {len(signals)} policies")
    start = time.perf_counter()

    for _ in range(config.num_users):
        num_transactions += run_user_workflow(
            client,
            keypair,
            policies,
            signals,
            expected,
            config.batch_size,
            config.plaintext_bits,
        )

    elapsed = time.perf_counter() - start

    result = BenchmarkResult(
        num_users=config.num_users,
        num_transactions=num_transactions,
        elapsed=elapsed,
    )
    logger.info(f"Benchmark complete: {result}")

    return result
