"""
Themis Client

Local execution harness, protocol client and benchmark.
"""

from themis.client.bank import LocalBank, BankStats
from themis.client.client import ThemisClient, encrypt_interactions
from themis.client.benchmark import BenchmarkResult, run_benchmark, run_user_workflow

__all__ = [
    "LocalBank",
    "BankStats",
    "ThemisClient",
    "encrypt_interactions",
    "BenchmarkResult",
    "run_benchmark",
    "run_user_workflow",
]
