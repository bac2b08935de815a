"""
Themis Configuration and Error Tests
"""

import json
import logging

import pytest

from themis.config import (
    BenchmarkConfig,
    LogConfig,
    ThemisConfig,
    setup_logging,
)
from themis.errors import (
    AccountInUseError,
    DecodeError,
    ErrorCode,
    InvalidProofError,
    StateMismatchError,
    ThemisError,
)


class TestThemisConfig:
    """Tests for configuration."""

    def test_defaults_valid(self):
        """Test the default configuration validates."""
        config = ThemisConfig()
        assert config.validate() == []
        assert config.protocol.require_aggregate_before_proof
        assert not config.protocol.reverify_payment_proof
        assert config.protocol.enforce_registered_key

    def test_db_path(self):
        """Test the database path joins data_dir and db_name."""
        config = ThemisConfig()
        config.storage.data_dir = "/tmp/themis"
        assert str(config.db_path) == "/tmp/themis/themis_accounts.db"

    def test_save_load_roundtrip(self, tmp_path):
        """Test JSON save and load preserve every section."""
        config = ThemisConfig(name="bench")
        config.protocol.max_interactions_per_call = 8
        config.benchmark.policies = [2, 4, 6]
        config.log.level = "DEBUG"

        path = str(tmp_path / "config.json")
        config.save(path)
        loaded = ThemisConfig.load(path)

        assert loaded == config
        with open(path) as f:
            assert json.load(f)["benchmark"]["policies"] == [2, 4, 6]

    def test_load_partial(self, tmp_path):
        """Test missing sections fall back to defaults."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"protocol": {"reverify_payment_proof": True}}))
        loaded = ThemisConfig.load(str(path))
        assert loaded.protocol.reverify_payment_proof
        assert loaded.benchmark == BenchmarkConfig()

    @pytest.mark.parametrize("mutate, fragment", [
        (lambda c: setattr(c.protocol, "max_interactions_per_call", 0), "max_interactions_per_call"),
        (lambda c: setattr(c.benchmark, "num_users", 0), "num_users"),
        (lambda c: setattr(c.benchmark, "batch_size", 100), "batch_size"),
        (lambda c: setattr(c.benchmark, "policies", []), "policies"),
        (lambda c: setattr(c.benchmark, "policies", [1] * 300), "256"),
        (lambda c: setattr(c.benchmark, "policies", [-1]), "non-negative"),
        (lambda c: setattr(c.benchmark, "policies", [40000, 40000]), "bits"),
        (lambda c: setattr(c.log, "level", "LOUD"), "log level"),
    ])
    def test_validation_errors(self, mutate, fragment):
        """Test each invalid setting is reported."""
        config = ThemisConfig()
        mutate(config)
        errors = config.validate()
        assert any(fragment in error for error in errors), errors

    def test_to_dict(self):
        """Test dictionary export."""
        data = ThemisConfig().to_dict()
        assert set(data) == {"name", "protocol", "storage", "benchmark", "log"}
        assert data["protocol"] == {
            "max_interactions_per_call": 64,
            "require_aggregate_before_proof": True,
            "reverify_payment_proof": False,
            "enforce_registered_key": True,
        }

    def test_setup_logging_file(self, tmp_path):
        """Test a rotating file handler is attached when a file is set."""
        root = logging.getLogger()
        saved = list(root.handlers)
        saved_level = root.level
        for handler in saved:
            root.removeHandler(handler)
        try:
            log_file = tmp_path / "themis.log"
            setup_logging(LogConfig(level="DEBUG", file=str(log_file)))
            logging.getLogger("themis.test").debug("hello")
            for handler in root.handlers:
                handler.flush()
            assert "hello" in log_file.read_text()
        finally:
            for handler in list(root.handlers):
                handler.close()
                root.removeHandler(handler)
            for handler in saved:
                root.addHandler(handler)
            root.setLevel(saved_level)


class TestErrors:
    """Tests for the error hierarchy."""

    def test_error_codes(self):
        """Test codes and categories."""
        assert DecodeError("bad").code == ErrorCode.DECODE_ERROR
        assert DecodeError("bad").category == 2
        assert InvalidProofError().category == 6
        assert AccountInUseError("user").code == ErrorCode.ACCOUNT_IN_USE

    def test_to_dict(self):
        """Test JSON-ready export."""
        data = StateMismatchError("proof").to_dict()
        assert data["code"] == 3005
        assert data["name"] == "STATE_MISMATCH"
        assert data["details"] == {"field": "proof"}

    def test_all_errors_are_themis_errors(self):
        """Test every raised error shares one base."""
        assert isinstance(InvalidProofError(), ThemisError)
        assert isinstance(DecodeError("x"), ThemisError)
