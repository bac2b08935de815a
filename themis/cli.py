"""
Themis Benchmark CLI

Runs the end-to-end workflow against a local bank and reports throughput.
"""

from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from themis.config import ThemisConfig, setup_logging
from themis.errors import ThemisError
from themis.state.storage import MEMORY_DB, AccountStorage
from themis.client.benchmark import run_benchmark

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="themis-bench",
        description="Themis encrypted aggregation benchmark",
    )
    parser.add_argument("--config", metavar="PATH", help="JSON configuration file")
    parser.add_argument("--users", type=int, metavar="N", help="Number of users")
    parser.add_argument(
        "--batch-size", type=int, metavar="N",
        help="Interactions per aggregation call",
    )
    parser.add_argument(
        "--policies", type=int, nargs="+", metavar="W",
        help="Policy weights, one per policy",
    )
    parser.add_argument(
        "--db", metavar="PATH",
        help=f"SQLite database for accounts (default: {MEMORY_DB})",
    )
    parser.add_argument("--log-level", metavar="LEVEL", help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = ThemisConfig.load(args.config) if args.config else ThemisConfig()

    if args.users is not None:
        config.benchmark.num_users = args.users
    if args.batch_size is not None:
        config.benchmark.batch_size = args.batch_size
    if args.policies:
        config.benchmark.policies = args.policies
    if args.log_level:
        config.log.level = args.log_level

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"config: {error}", file=sys.stderr)
        return 2

    setup_logging(config.log)

    storage = AccountStorage(args.db or MEMORY_DB)
    try:
        result = run_benchmark(config.benchmark, config.protocol, storage)
    except ThemisError as e:
        logger.error(f"Benchmark failed: {e}")
        return 1
    finally:
        storage.close()

    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
