# ============================================================================
# STARTUP VALIDATION
# ============================================================================
# STATUS: Gateway - Startup validation
# PURPOSE: Validate environment before registering blueprints
# CREATED: 19 OCT 2026
# ============================================================================
"""
Startup Validation

Validates environment and dependencies before registering blueprints.
Fail fast, log clearly, degrade gracefully.

    env_vars  - database credential settings present
    database  - SELECT 1 through the connection manager
    storage   - image storage account configured

Catalog routes need env_vars only; a database outage at cold start
shows in /readyz while each request reconnects on its own. The images
route needs storage. /livez and /readyz are always available.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from function.config import get_config

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a startup validation check."""

    name: str
    passed: bool
    error_type: Optional[str] = None
    error_message: Optional[str] = None


def _not_run(name: str) -> ValidationResult:
    return ValidationResult(name, False, "NotRun", "Validation not yet run")


@dataclass
class StartupState:
    """Track all startup validation checks."""

    env_vars: ValidationResult = field(default_factory=lambda: _not_run("env_vars"))
    database: ValidationResult = field(default_factory=lambda: _not_run("database"))
    storage: ValidationResult = field(default_factory=lambda: _not_run("storage"))

    def checks(self) -> List[ValidationResult]:
        return [self.env_vars, self.database, self.storage]

    @property
    def all_passed(self) -> bool:
        """Check if all validations passed."""
        return all(c.passed for c in self.checks())

    @property
    def catalog_ready(self) -> bool:
        """Product routes can be registered (database reachability is per request)."""
        return self.env_vars.passed

    @property
    def images_ready(self) -> bool:
        return self.storage.passed

    def failed_checks(self) -> List[ValidationResult]:
        """Get list of failed validation checks."""
        return [c for c in self.checks() if not c.passed]

    def failed_check_names(self) -> List[str]:
        """Get names of failed checks."""
        return [c.name for c in self.failed_checks()]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "all_passed": self.all_passed,
            "catalog_ready": self.catalog_ready,
            "images_ready": self.images_ready,
            "checks": {
                c.name: {
                    "passed": c.passed,
                    "error": c.error_message if not c.passed else None,
                }
                for c in self.checks()
            },
        }


# Global singleton
STARTUP_STATE = StartupState()


def validate_startup() -> bool:
    """
    Run all startup validation checks.

    Returns True if all checks pass.
    Updates global STARTUP_STATE with results.
    """
    logger.info("Starting validation checks...")

    # 1. Environment Variables
    STARTUP_STATE.env_vars = _validate_env_vars()
    if STARTUP_STATE.env_vars.passed:
        logger.info("  [PASS] Environment variables")
    else:
        logger.error(f"  [FAIL] Environment variables: {STARTUP_STATE.env_vars.error_message}")

    # 2. Database Connectivity (only if env vars passed)
    if STARTUP_STATE.env_vars.passed:
        STARTUP_STATE.database = _validate_database()
        if STARTUP_STATE.database.passed:
            logger.info("  [PASS] Database connectivity")
        else:
            logger.error(f"  [FAIL] Database connectivity: {STARTUP_STATE.database.error_message}")
    else:
        STARTUP_STATE.database = ValidationResult(
            name="database",
            passed=False,
            error_type="Skipped",
            error_message="Skipped due to env_vars failure",
        )

    # 3. Image storage configuration
    STARTUP_STATE.storage = _validate_storage()
    if STARTUP_STATE.storage.passed:
        logger.info("  [PASS] Image storage configuration")
    else:
        logger.warning(f"  [FAIL] Image storage configuration: {STARTUP_STATE.storage.error_message}")

    # Summary
    if STARTUP_STATE.all_passed:
        logger.info("All validation checks PASSED")
    else:
        logger.error(f"Validation FAILED: {STARTUP_STATE.failed_check_names()}")

    return STARTUP_STATE.all_passed


def _validate_env_vars() -> ValidationResult:
    """Validate database credential settings."""
    config = get_config()

    if config.has_database_config:
        return ValidationResult(name="env_vars", passed=True)

    if config.uses_managed_secret:
        message = "DB_SECRET_NAME and KEY_VAULT_URL required when DB_CONFIG_SOURCE is managed-secret"
    elif config.db_port is None:
        message = "DB_PORT must be an integer"
    else:
        message = "DB_HOST and DB_NAME required"
    return ValidationResult(
        name="env_vars",
        passed=False,
        error_type="MissingEnvVar",
        error_message=message,
    )


def _validate_database() -> ValidationResult:
    """
    Validate database connectivity.

    Warms the worker's cached connection as a side effect.
    """
    try:
        from infrastructure.connection import get_connection_manager

        if get_connection_manager().health_check():
            return ValidationResult(name="database", passed=True)
        return ValidationResult(
            name="database",
            passed=False,
            error_type="HealthCheckFailed",
            error_message="SELECT 1 did not succeed",
        )
    except Exception as e:
        return ValidationResult(
            name="database",
            passed=False,
            error_type=type(e).__name__,
            error_message=getattr(e, "message", None) or type(e).__name__,
        )


def _validate_storage() -> ValidationResult:
    """
    Validate image storage configuration.

    Note: We only validate config is present, not connectivity.
    Connectivity check would be too slow for cold start.
    """
    if get_config().has_storage_config:
        return ValidationResult(name="storage", passed=True)

    return ValidationResult(
        name="storage",
        passed=False,
        error_type="MissingConfig",
        error_message="IMAGE_STORAGE_ACCOUNT not set",
    )


__all__ = ["STARTUP_STATE", "validate_startup", "ValidationResult", "StartupState"]
