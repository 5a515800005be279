"""Unit tests for configuration and settings."""
from pathlib import Path

import pytest

from hotel_common.config import Settings, get_settings, reset_settings_cache


class TestSettings:
    """Test configuration management."""

    def test_get_settings_returns_same_instance(self):
        """Test that settings are cached."""
        assert get_settings() is get_settings()

    def test_reset_settings_cache(self):
        """Test that the cache can be reset."""
        settings1 = get_settings()
        reset_settings_cache()
        settings2 = get_settings()

        assert settings1 is not settings2

    def test_test_environment_overrides(self):
        """Test the overrides applied by the test environment."""
        settings = get_settings()

        assert settings.database_url.startswith("sqlite")
        assert settings.rate_limiting_enabled is False
        assert settings.event_publishing_enabled is False

    def test_environment_variables_are_read(self, monkeypatch):
        """Test reading settings from environment variables."""
        monkeypatch.setenv("ROOM_CACHE_TTL", "5")
        monkeypatch.setenv("RECEIPT_BASE_URL", "https://example.com/receipts")

        settings = Settings()

        assert settings.room_cache_ttl == 5
        assert settings.receipt_base_url == "https://example.com/receipts"

    def test_defaults(self, monkeypatch):
        """Test default setting values."""
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.jwt_algorithm == "HS256"
        assert settings.access_token_expire_minutes > 0
        assert settings.seed_catalog_on_startup is False
        assert settings.rabbitmq_queue == "bookings"
        assert settings.payments_service_port == 8004
        assert isinstance(settings.cors_origins, list)


class TestPackaging:
    """Test the setuptools package discovery table."""

    def test_namespace_packages_are_discovered(self):
        """Test that discovery is enabled for the packages without __init__.py."""
        tomllib = pytest.importorskip("tomllib")
        pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
        find = tomllib.loads(pyproject.read_text())["tool"]["setuptools"]["packages"]["find"]

        assert find["namespaces"] is True
        assert "namespace" not in find
        assert find["include"] == ["hotel_common*", "hotel_services*"]
