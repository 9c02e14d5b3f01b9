"""Tests for settings loading."""

from decimal import Decimal

import pytest

from practice_ledger.config import Settings


class TestSettings:
    """Environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        for name in (
            "DATABASE_URL",
            "COMPLIANCE_WINDOW_DAYS",
            "RECENT_CRITICAL_LIMIT",
            "RECONCILIATION_EPSILON",
            "ADVISORY_ENABLED",
        ):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setattr("practice_ledger.config.load_dotenv", lambda: None)

        settings = Settings.from_env()

        assert settings.database_url.startswith("postgresql+asyncpg://")
        assert settings.compliance_window_days == 30
        assert settings.recent_critical_limit == 5
        assert settings.reconciliation_epsilon == Decimal("0.01")
        assert settings.advisory_enabled is False

    def test_overrides(self, monkeypatch):
        monkeypatch.setattr("practice_ledger.config.load_dotenv", lambda: None)
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///ledger.db")
        monkeypatch.setenv("COMPLIANCE_WINDOW_DAYS", "90")
        monkeypatch.setenv("ADVISORY_ENABLED", "true")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.database_url == "sqlite+aiosqlite:///ledger.db"
        assert settings.compliance_window_days == 90
        assert settings.advisory_enabled is True
        assert settings.log_level == "DEBUG"

    def test_invalid_values_rejected(self, monkeypatch):
        monkeypatch.setattr("practice_ledger.config.load_dotenv", lambda: None)
        monkeypatch.setenv("RECONCILIATION_EPSILON", "a cent")
        with pytest.raises(ValueError):
            Settings.from_env()

        monkeypatch.setenv("RECONCILIATION_EPSILON", "0.01")
        monkeypatch.setenv("COMPLIANCE_WINDOW_DAYS", "0")
        with pytest.raises(ValueError):
            Settings.from_env()
