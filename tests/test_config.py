"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from src.config import Environment, Settings, get_settings


class TestSettings:
    """Test Settings model and validation."""

    def test_default_settings_load_correctly(self):
        """Test that default settings are loaded with correct values."""
        settings = Settings()

        assert settings.environment == Environment.DEV
        assert settings.debug is True  # Auto-set from DEV environment
        assert settings.log_level == "INFO"
        assert settings.routing_default_cost_ceiling == 100.0
        assert settings.routing_relaxation_prefix_size == 10
        assert settings.routing_max_fallbacks == 3
        assert settings.routing_catalog_path is None
        assert settings.routing_tables_path is None

    def test_is_dev_property_returns_true_for_test(self):
        """Test that is_dev property includes test environment."""
        settings = Settings(environment=Environment.TEST)
        assert settings.is_dev is True
        assert settings.is_prod is False

    def test_is_prod_property_returns_true_for_prod(self):
        settings = Settings(environment=Environment.PROD)
        assert settings.is_prod is True
        assert settings.is_dev is False

    def test_environment_enum_values(self):
        assert Environment.DEV == "dev"
        assert Environment.PROD == "prod"
        assert Environment.TEST == "test"

    def test_debug_auto_enabled_in_dev(self):
        """Test that debug is automatically enabled in dev environment."""
        settings = Settings(environment=Environment.DEV, debug=False)
        assert settings.debug is True

    def test_debug_not_auto_enabled_in_prod(self):
        settings = Settings(environment=Environment.PROD, debug=False)
        assert settings.debug is False

    def test_json_logs_default_follows_environment(self):
        assert Settings(environment=Environment.PROD).json_logs is True
        assert Settings(environment=Environment.DEV).json_logs is False

    def test_json_logs_explicit_value_wins(self):
        assert Settings(environment=Environment.PROD, json_logs=False).json_logs is False

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")


class TestRoutingSettings:
    """Test model routing settings validation."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"routing_default_cost_ceiling": 0},
            {"routing_default_cost_ceiling": -5},
            {"routing_relaxation_prefix_size": 0},
            {"routing_max_fallbacks": 4},
            {"routing_max_fallbacks": -1},
        ],
    )
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValidationError):
            Settings(**overrides)

    def test_missing_catalog_file_rejected(self, tmp_path):
        with pytest.raises(ValidationError, match="File not found"):
            Settings(routing_catalog_path=str(tmp_path / "missing.json"))

    def test_existing_files_accepted(self, tmp_path):
        catalog = tmp_path / "catalog.json"
        catalog.write_text("[]")
        tables = tmp_path / "tables.json"
        tables.write_text("{}")

        settings = Settings(routing_catalog_path=str(catalog), routing_tables_path=str(tables))

        assert settings.routing_catalog_path == str(catalog)
        assert settings.routing_tables_path == str(tables)

    def test_loaded_from_environment(self, monkeypatch):
        monkeypatch.setenv("ROUTING_MAX_FALLBACKS", "1")
        monkeypatch.setenv("ROUTING_DEFAULT_COST_CEILING", "25.5")

        settings = Settings()

        assert settings.routing_max_fallbacks == 1
        assert settings.routing_default_cost_ceiling == 25.5


class TestGetSettings:
    """Test get_settings caching."""

    def test_get_settings_returns_same_instance(self):
        assert get_settings() is get_settings()

    def test_cache_clear_returns_new_instance(self):
        first = get_settings()
        get_settings.cache_clear()
        assert get_settings() is not first
