"""
Themis Configuration
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Optional

from themis.constants import (
    DEFAULT_DB_NAME,
    DEFAULT_MAX_INTERACTIONS_PER_CALL,
    DEFAULT_PLAINTEXT_BITS,
    MAX_POLICIES,
)

logger = logging.getLogger(__name__)


@dataclass
class ProtocolConfig:
    """Protocol rule switches."""
    max_interactions_per_call: int = DEFAULT_MAX_INTERACTIONS_PER_CALL
    require_aggregate_before_proof: bool = True
    reverify_payment_proof: bool = False
    enforce_registered_key: bool = True


@dataclass
class StorageConfig:
    """Storage configuration."""
    data_dir: str = "./data"
    db_name: str = DEFAULT_DB_NAME


@dataclass
class BenchmarkConfig:
    """End-to-end benchmark configuration."""
    num_users: int = 4
    batch_size: int = 1
    policies: List[int] = field(default_factory=lambda: [1, 2])
    plaintext_bits: int = DEFAULT_PLAINTEXT_BITS


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size_mb: int = 100
    backup_count: int = 5


@dataclass
class ThemisConfig:
    """
    Complete configuration.

    Protocol rules, harness storage, benchmark shape and logging.
    """
    name: str = "themis"

    # Sub-configurations
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    benchmark: BenchmarkConfig = field(default_factory=BenchmarkConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @property
    def data_path(self) -> Path:
        """Get data directory path."""
        return Path(self.storage.data_dir)

    @property
    def db_path(self) -> Path:
        """Get database file path."""
        return self.data_path / self.storage.db_name

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        # Protocol validation
        if self.protocol.max_interactions_per_call < 1:
            errors.append("max_interactions_per_call must be at least 1")

        # Storage validation
        if not self.storage.data_dir:
            errors.append("data_dir cannot be empty")
        if not self.storage.db_name:
            errors.append("db_name cannot be empty")

        # Benchmark validation
        if self.benchmark.num_users < 1:
            errors.append("num_users must be at least 1")

        if self.benchmark.batch_size < 1:
            errors.append("batch_size must be at least 1")
        elif self.benchmark.batch_size > self.protocol.max_interactions_per_call:
            errors.append(
                f"batch_size {self.benchmark.batch_size} exceeds "
                f"max_interactions_per_call {self.protocol.max_interactions_per_call}"
            )

        if not self.benchmark.policies:
            errors.append("policies cannot be empty")
        elif len(self.benchmark.policies) > MAX_POLICIES:
            errors.append(f"At most {MAX_POLICIES} policies allowed")
        elif any(weight < 0 for weight in self.benchmark.policies):
            errors.append("policy weights must be non-negative")

        if not 1 <= self.benchmark.plaintext_bits <= 32:
            errors.append(f"Invalid plaintext_bits: {self.benchmark.plaintext_bits}")
        elif sum(self.benchmark.policies) >= 1 << self.benchmark.plaintext_bits:
            errors.append(
                f"Sum of policy weights does not fit in {self.benchmark.plaintext_bits} bits"
            )

        # Log validation
        if not isinstance(getattr(logging, self.log.level.upper(), None), int):
            errors.append(f"Invalid log level: {self.log.level}")

        return errors

    def save(self, path: str) -> None:
        """Save configuration to file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Configuration saved to {path}")

    @classmethod
    def load(cls, path: str) -> "ThemisConfig":
        """Load configuration from file."""
        with open(path, 'r') as f:
            data = json.load(f)

        config = cls(name=data.get("name", "themis"))

        if "protocol" in data:
            config.protocol = ProtocolConfig(**data["protocol"])

        if "storage" in data:
            config.storage = StorageConfig(**data["storage"])

        if "benchmark" in data:
            config.benchmark = BenchmarkConfig(**data["benchmark"])

        if "log" in data:
            config.log = LogConfig(**data["log"])

        logger.info(f"Configuration loaded from {path}")
        return config

    def to_dict(self) -> dict:
        """Export configuration as dictionary."""
        return {
            "name": self.name,
            "protocol": asdict(self.protocol),
            "storage": asdict(self.storage),
            "benchmark": asdict(self.benchmark),
            "log": asdict(self.log),
        }


def setup_logging(config: LogConfig) -> None:
    """Configure logging based on config."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.file:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            config.file,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
    )
