# ============================================================================
# STARTUP VALIDATION TESTS
# ============================================================================
# STATUS: Tests - Startup checks and readiness state
# PURPOSE: Verify which checks gate which blueprints
# CREATED: 19 OCT 2026
# ============================================================================
"""
Startup Validation Tests

Run with:
    pytest tests/test_startup.py -v
"""

from unittest.mock import MagicMock, patch

import pytest

from function import startup
from function.config import FunctionConfig, reset_config


@pytest.fixture(autouse=True)
def fresh_state(monkeypatch):
    monkeypatch.setattr(startup, "STARTUP_STATE", startup.StartupState())
    for key in ("DB_HOST", "DB_NAME", "DB_PORT", "DB_CONNECT_TIMEOUT", "DB_SECRET_NAME",
                "KEY_VAULT_URL", "IMAGE_STORAGE_ACCOUNT", "CLAIMS_SOURCE"):
        monkeypatch.delenv(key, raising=False)
    reset_config()


def _healthy_manager(ok=True):
    manager = MagicMock()
    manager.health_check.return_value = ok
    return manager


class TestValidateStartup:

    def test_all_checks_pass(self, monkeypatch):
        monkeypatch.setenv("DB_HOST", "db")
        monkeypatch.setenv("DB_NAME", "shoes")
        monkeypatch.setenv("IMAGE_STORAGE_ACCOUNT", "sneakers")

        with patch("infrastructure.connection.get_connection_manager", return_value=_healthy_manager()):
            assert startup.validate_startup() is True

        assert startup.STARTUP_STATE.catalog_ready
        assert startup.STARTUP_STATE.images_ready

    def test_missing_db_settings_skips_database(self):
        with patch("infrastructure.connection.get_connection_manager") as get_manager:
            assert startup.validate_startup() is False
            get_manager.assert_not_called()

        state = startup.STARTUP_STATE
        assert state.failed_check_names() == ["env_vars", "database", "storage"]
        assert state.database.error_type == "Skipped"

    def test_database_down_still_registers_catalog(self, monkeypatch):
        monkeypatch.setenv("DB_HOST", "db")
        monkeypatch.setenv("DB_NAME", "shoes")
        monkeypatch.setenv("IMAGE_STORAGE_ACCOUNT", "sneakers")

        with patch("infrastructure.connection.get_connection_manager", return_value=_healthy_manager(False)):
            assert startup.validate_startup() is False

        state = startup.STARTUP_STATE
        assert state.catalog_ready
        assert state.images_ready
        assert state.failed_check_names() == ["database"]
        assert state.to_dict()["checks"]["database"]["passed"] is False

    def test_invalid_port_fails_env_vars(self, monkeypatch):
        monkeypatch.setenv("DB_HOST", "db")
        monkeypatch.setenv("DB_NAME", "shoes")
        monkeypatch.setenv("DB_PORT", "five-four-three-two")

        with patch("infrastructure.connection.get_connection_manager") as get_manager:
            startup.validate_startup()
            get_manager.assert_not_called()

        state = startup.STARTUP_STATE
        assert not state.catalog_ready
        assert state.env_vars.error_message == "DB_PORT must be an integer"


class TestFunctionConfig:

    def test_managed_secret_needs_name_and_vault(self):
        config = FunctionConfig(db_config_source="managed-secret", db_secret_name="catalog-db")
        assert not config.has_database_config

        config.key_vault_url = "https://vault.example.net"
        assert config.has_database_config

    def test_safe_dict_hides_password(self):
        config = FunctionConfig(db_host="db", db_name="shoes", db_password="hunter2")

        assert "hunter2" not in str(config.to_safe_dict())
        assert "hunter2" not in repr(config)

    def test_bad_numbers_do_not_raise(self, monkeypatch):
        monkeypatch.setenv("DB_PORT", "abc")
        monkeypatch.setenv("DB_CONNECT_TIMEOUT", "soon")

        config = FunctionConfig.from_env()

        assert config.db_port is None
        assert config.db_connect_timeout == 4

    def test_claims_source_defaults_to_app_service(self, monkeypatch):
        assert FunctionConfig.from_env().claims_source == "app-service"

        monkeypatch.setenv("CLAIMS_SOURCE", " Gateway ")
        assert FunctionConfig.from_env().claims_source == "gateway"
