# ============================================================================
# FUNCTION APP CONFIGURATION
# ============================================================================
# STATUS: Gateway - Configuration management
# PURPOSE: Environment-based configuration for the catalog function app
# CREATED: 19 OCT 2026
# ============================================================================
"""
Function App Configuration

Loads configuration from environment variables (App Settings in Azure,
local.settings.json under `func start`) with sensible defaults.

Database credentials come from one of two sources, selected by
DB_CONFIG_SOURCE:
- direct          → DB_HOST / DB_PORT / DB_USER / DB_PASSWORD / DB_NAME
- managed-secret  → JSON secret DB_SECRET_NAME in Key Vault KEY_VAULT_URL

Resolution itself lives in infrastructure/credentials.py; this module
only records what was configured.

CLAIMS_SOURCE names the layer trusted to forward caller claims:
- app-service  → X-MS-CLIENT-PRINCIPAL from App Service authentication
- gateway      → X-Claims set by a fronting gateway that strips client copies
- none         → no claims; every write is refused
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def _port_from_env() -> Optional[int]:
    """DB_PORT as an int, or None when it is set but not a number."""
    from core.errors import ConfigError
    from infrastructure.credentials import parse_port

    try:
        return parse_port(os.environ.get("DB_PORT"))
    except ConfigError as e:
        logger.error(e.message)
        return None


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}; using {default}")
        return default


@dataclass
class FunctionConfig:
    """Configuration for the function app."""

    # Credential source
    db_config_source: str = "direct"
    db_secret_name: Optional[str] = None
    key_vault_url: Optional[str] = None

    # Direct database settings
    db_host: Optional[str] = None
    db_port: Optional[int] = 5432
    db_user: Optional[str] = None
    db_password: Optional[str] = field(default=None, repr=False)
    db_name: Optional[str] = None
    db_connect_timeout: int = 4

    # Request handling
    cors_origin: str = "*"
    admin_group: str = "admin"
    claims_source: str = "app-service"

    # Product images (Blob Storage)
    image_storage_account: Optional[str] = None
    image_container: str = "public"
    image_prefix: str = "images/"
    image_public_base_url: Optional[str] = None

    # App Info
    version: str = "1.0.0"
    service_name: str = "shoe-catalog-api"

    # Logging
    log_level: str = "INFO"
    log_format: Optional[str] = None

    @classmethod
    def from_env(cls) -> "FunctionConfig":
        """Load configuration from environment variables."""
        return cls(
            db_config_source=os.environ.get("DB_CONFIG_SOURCE", "direct"),
            db_secret_name=os.environ.get("DB_SECRET_NAME") or None,
            key_vault_url=os.environ.get("KEY_VAULT_URL") or None,
            db_host=os.environ.get("DB_HOST") or None,
            db_port=_port_from_env(),
            db_user=os.environ.get("DB_USER") or None,
            db_password=os.environ.get("DB_PASSWORD") or None,
            db_name=os.environ.get("DB_NAME") or None,
            db_connect_timeout=_int_from_env("DB_CONNECT_TIMEOUT", 4),
            cors_origin=os.environ.get("CORS_ORIGIN", "*"),
            admin_group=os.environ.get("ADMIN_GROUP", "admin"),
            claims_source=os.environ.get("CLAIMS_SOURCE", "app-service").strip().lower(),
            image_storage_account=os.environ.get("IMAGE_STORAGE_ACCOUNT") or None,
            image_container=os.environ.get("IMAGE_CONTAINER", "public"),
            image_prefix=os.environ.get("IMAGE_PREFIX", "images/"),
            image_public_base_url=os.environ.get("IMAGE_PUBLIC_BASE_URL") or None,
            version=os.environ.get("APP_VERSION", "1.0.0"),
            service_name=os.environ.get("SERVICE_NAME", "shoe-catalog-api"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_format=os.environ.get("LOG_FORMAT") or None,
        )

    @property
    def uses_managed_secret(self) -> bool:
        """True when credentials come from Key Vault rather than settings."""
        return self.db_config_source.strip().lower() in ("managed-secret", "secretsmanager", "keyvault")

    @property
    def has_database_config(self) -> bool:
        """Check if enough is configured to attempt credential resolution."""
        if self.uses_managed_secret:
            return bool(self.db_secret_name and self.key_vault_url)
        return bool(self.db_host and self.db_name and self.db_port is not None)

    @property
    def has_storage_config(self) -> bool:
        """Check if the image listing endpoint can be served."""
        return bool(self.image_storage_account and self.image_container)

    def to_safe_dict(self) -> Dict[str, Any]:
        """Non-sensitive view for readiness output and diagnostics."""
        return {
            "db_config_source": self.db_config_source,
            "db_secret_name": self.db_secret_name,
            "key_vault_url": self.key_vault_url,
            "db_host": self.db_host,
            "db_port": self.db_port,
            "db_name": self.db_name,
            "db_connect_timeout": self.db_connect_timeout,
            "admin_group": self.admin_group,
            "claims_source": self.claims_source,
            "image_storage_account": self.image_storage_account,
            "image_container": self.image_container,
            "image_prefix": self.image_prefix,
            "version": self.version,
            "service_name": self.service_name,
        }


# Global config singleton
_config: Optional[FunctionConfig] = None


def get_config() -> FunctionConfig:
    """Get the global configuration singleton."""
    global _config
    if _config is None:
        _config = FunctionConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached config (tests, settings reload)."""
    global _config
    _config = None


__all__ = ["FunctionConfig", "get_config", "reset_config"]
