"""Tests for environment-driven settings."""

import pytest
from pathlib import Path
from pydantic import ValidationError

from iffidb.config import (
    ConsoleSettings,
    LatencySettings,
    Settings,
    StoreSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for the settings classes."""

    def test_defaults(self, monkeypatch):
        """Test built-in defaults."""
        for name in ("IFFIDB_STORE_BACKEND", "IFFIDB_LATENCY_LOGIN", "IFFIDB_LATENCY_MUTATION"):
            monkeypatch.delenv(name, raising=False)

        store = StoreSettings()
        assert store.backend == "file"
        assert store.path == Path("iffidb_data.json")
        assert store.log_capacity == 100

        latency = LatencySettings()
        assert latency.login == 0.8
        assert latency.mutation == 0.3

    def test_environment_override(self, monkeypatch):
        """Test prefixed environment variables."""
        monkeypatch.setenv("IFFIDB_STORE_BACKEND", "memory")
        monkeypatch.setenv("IFFIDB_CONSOLE_LIST_PREVIEW", "3")

        settings = Settings()
        assert settings.store.backend == "memory"
        assert settings.console.list_preview == 3

    def test_negative_latency_rejected(self, monkeypatch):
        """Test the lower bound on latencies."""
        monkeypatch.setenv("IFFIDB_LATENCY_READ", "-1")
        with pytest.raises(ValidationError):
            LatencySettings()

    def test_unknown_backend_rejected(self):
        """Test the backend choices."""
        with pytest.raises(ValidationError):
            StoreSettings(backend="redis")

    def test_missing_export_dir_warns(self, tmp_path):
        """Test the warning for a directory that does not exist yet."""
        with pytest.warns(UserWarning):
            settings = ConsoleSettings(export_dir=tmp_path / "later")
        assert settings.export_dir == tmp_path / "later"


class TestValidateAllSettings:
    """Tests for validate_all_settings."""

    def test_all_valid(self, fresh_settings):
        """Test a clean environment."""
        results = validate_all_settings()
        assert all(results[name] for name in ("store", "latency", "auth", "console"))

    def test_reports_failures(self, fresh_settings, monkeypatch):
        """Test that a bad value is reported, not raised."""
        monkeypatch.setenv("IFFIDB_LATENCY_LOGIN", "-5")

        results = validate_all_settings()

        assert results["latency"] is False
        assert "latency_error" in results
        assert results["store"] is True
