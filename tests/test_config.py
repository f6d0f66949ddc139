"""Tests for runtime configuration."""

from pathlib import Path

import pytest

from lib_shield.config import DetectorConfig, EmptyRangePolicy


class TestDetectorConfig:
    """Test DetectorConfig defaults and validation."""

    def test_defaults(self):
        config = DetectorConfig()
        assert config.database_path is None
        assert config.empty_range_policy is EmptyRangePolicy.VULNERABLE
        assert config.verbose is False

    def test_coerces_values(self):
        config = DetectorConfig(database_path="advisories.db", empty_range_policy="safe")
        assert config.database_path == Path("advisories.db")
        assert config.empty_range_policy is EmptyRangePolicy.SAFE

    def test_invalid_policy(self):
        with pytest.raises(ValueError, match="expected one of"):
            DetectorConfig(empty_range_policy="sometimes")


class TestFromEnv:
    """Test configuration from LIBSHIELD_* variables."""

    def test_empty_environment(self):
        assert DetectorConfig.from_env({}) == DetectorConfig()

    def test_all_variables(self):
        config = DetectorConfig.from_env({
            "LIBSHIELD_DB_PATH": "/var/lib/lib-shield/advisories.db",
            "LIBSHIELD_EMPTY_RANGE_POLICY": "SAFE",
            "LIBSHIELD_VERBOSE": "yes",
        })
        assert config.database_path == Path("/var/lib/lib-shield/advisories.db")
        assert config.empty_range_policy is EmptyRangePolicy.SAFE
        assert config.verbose is True

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("LIBSHIELD_VERBOSE", "0")
        monkeypatch.setenv("LIBSHIELD_EMPTY_RANGE_POLICY", "vulnerable")
        config = DetectorConfig.from_env()
        assert config.verbose is False
        assert config.empty_range_policy is EmptyRangePolicy.VULNERABLE
