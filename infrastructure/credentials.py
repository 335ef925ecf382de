# ============================================================================
# DATABASE CREDENTIAL RESOLUTION
# ============================================================================
# STATUS: Infrastructure - PostgreSQL credential sources
# PURPOSE: Resolve connection parameters from settings or Key Vault
# CREATED: 19 OCT 2026
# ============================================================================
"""
Database credential resolution.

Two modes, selected by DB_CONFIG_SOURCE:

direct (default)
    DB_HOST, DB_USER, DB_PASSWORD, DB_NAME, DB_PORT (default 5432).
    No network calls.

managed-secret
    Fetches the JSON secret named DB_SECRET_NAME from the Key Vault at
    KEY_VAULT_URL using Managed Identity, e.g.

        {"host": "...", "username": "...", "password": "...",
         "dbname": "...", "port": 5432}

    Alternative key spellings are accepted (hostname, user, database).
    The parsed result is cached for the lifetime of the worker process.

Credential selection for Key Vault follows the same rule as the rest of
the app: AZURE_CLIENT_ID → user-assigned ManagedIdentityCredential,
otherwise DefaultAzureCredential (system MI or az login).

Usage:
    from infrastructure.credentials import get_credential_resolver

    config = get_credential_resolver().resolve()
"""

import json
import os
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

from core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5432

DIRECT_MODES = ("direct", "env")
MANAGED_SECRET_MODES = ("managed-secret", "secretsmanager", "keyvault")

# (normalized key, accepted spellings in priority order)
_SECRET_KEY_VARIANTS = (
    ("host", ("host", "hostname")),
    ("user", ("username", "user")),
    ("password", ("password",)),
    ("database", ("dbname", "database")),
    ("port", ("port",)),
)


@dataclass(frozen=True)
class ConnectionConfig:
    """Resolved PostgreSQL connection parameters."""

    host: str
    user: Optional[str]
    password: Optional[str] = field(repr=False)
    database: Optional[str]
    port: int = DEFAULT_PORT

    def connect_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for psycopg.connect."""
        kwargs: Dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "user": self.user,
        }
        if self.password:
            kwargs["password"] = self.password
        return kwargs


def parse_port(value: Any) -> int:
    if value in (None, ""):
        return DEFAULT_PORT
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid database port: {value!r}")


def _fetch_key_vault_secret(vault_url: str, secret_name: str) -> str:
    """Read a secret value from Azure Key Vault."""
    from azure.keyvault.secrets import SecretClient

    client_id = os.environ.get("AZURE_CLIENT_ID")
    if client_id:
        from azure.identity import ManagedIdentityCredential
        logger.info(f"Using user-assigned Managed Identity: {client_id[:8]}...")
        credential = ManagedIdentityCredential(client_id=client_id)
    else:
        from azure.identity import DefaultAzureCredential
        logger.info("Using DefaultAzureCredential (system MI or az login)")
        credential = DefaultAzureCredential()

    client = SecretClient(vault_url=vault_url, credential=credential)
    return client.get_secret(secret_name).value


class CredentialResolver:
    """
    Resolves ConnectionConfig and caches managed secrets.

    The Key Vault fetcher is injectable so tests never reach Azure.
    """

    def __init__(self, secret_fetcher: Optional[Callable[[str, str], str]] = None):
        self._fetch_secret = secret_fetcher or _fetch_key_vault_secret
        self._cached: Optional[ConnectionConfig] = None
        self._lock = threading.Lock()

    @property
    def has_cached_secret(self) -> bool:
        return self._cached is not None

    @property
    def cached_config(self) -> Optional[ConnectionConfig]:
        """Config parsed from the managed secret, if fetched."""
        return self._cached

    def resolve(
        self,
        mode: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ConnectionConfig:
        """
        Resolve connection parameters.

        Args:
            mode: Credential mode; defaults to env DB_CONFIG_SOURCE
            env: Settings mapping; defaults to os.environ

        Raises:
            ConfigError: Missing settings, unknown mode, or unusable secret
        """
        env = os.environ if env is None else env
        mode = (mode or env.get("DB_CONFIG_SOURCE") or "direct").strip().lower()

        if mode in DIRECT_MODES:
            return self._resolve_direct(env)
        if mode in MANAGED_SECRET_MODES:
            return self._resolve_managed_secret(env)

        raise ConfigError(
            f"Unknown DB_CONFIG_SOURCE '{mode}'. "
            f"Use one of: {', '.join(DIRECT_MODES + MANAGED_SECRET_MODES)}"
        )

    def invalidate(self) -> None:
        """Forget the cached secret; next resolve fetches again."""
        with self._lock:
            self._cached = None

    def _resolve_direct(self, env: Mapping[str, str]) -> ConnectionConfig:
        host = env.get("DB_HOST")
        database = env.get("DB_NAME")
        if not host or not database:
            raise ConfigError(
                "Database connection not configured. "
                "Set DB_HOST and DB_NAME (or DB_CONFIG_SOURCE=managed-secret)."
            )

        return ConnectionConfig(
            host=host,
            user=env.get("DB_USER"),
            password=env.get("DB_PASSWORD"),
            database=database,
            port=parse_port(env.get("DB_PORT")),
        )

    def _resolve_managed_secret(self, env: Mapping[str, str]) -> ConnectionConfig:
        if self._cached is not None:
            logger.debug("Using cached database secret")
            return self._cached

        secret_name = env.get("DB_SECRET_NAME")
        if not secret_name:
            raise ConfigError("DB_SECRET_NAME is required when DB_CONFIG_SOURCE=managed-secret")

        vault_url = env.get("KEY_VAULT_URL")
        if not vault_url:
            raise ConfigError("KEY_VAULT_URL is required when DB_CONFIG_SOURCE=managed-secret")

        with self._lock:
            if self._cached is not None:
                return self._cached

            logger.info(f"Retrieving database credentials from Key Vault secret '{secret_name}'...")
            try:
                raw = self._fetch_secret(vault_url, secret_name)
            except ConfigError:
                raise
            except Exception as e:
                # Type only: SDK messages can echo request details
                raise ConfigError(
                    f"Failed to retrieve secret '{secret_name}': {type(e).__name__}"
                ) from e

            self._cached = self._parse_secret(secret_name, raw)
            logger.info("Database credentials retrieved and cached")
            return self._cached

    @staticmethod
    def _parse_secret(secret_name: str, raw: Optional[str]) -> ConnectionConfig:
        if not raw:
            raise ConfigError(f"Secret '{secret_name}' is empty")

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            raise ConfigError(f"Secret '{secret_name}' is not valid JSON") from None

        if not isinstance(data, dict):
            raise ConfigError(f"Secret '{secret_name}' must be a JSON object")

        normalized: Dict[str, Any] = {}
        for key, variants in _SECRET_KEY_VARIANTS:
            normalized[key] = next(
                (data[v] for v in variants if data.get(v) not in (None, "")),
                None,
            )

        if not normalized["host"]:
            raise ConfigError(f"Secret '{secret_name}' has no host/hostname")

        return ConnectionConfig(
            host=str(normalized["host"]),
            user=normalized["user"],
            password=normalized["password"],
            database=normalized["database"],
            port=parse_port(normalized["port"]),
        )


# ============================================================================
# PROCESS-WIDE INSTANCE
# ============================================================================

_default_resolver: Optional[CredentialResolver] = None
_resolver_lock = threading.Lock()


def get_credential_resolver() -> CredentialResolver:
    """Get shared resolver instance (one secret cache per worker process)."""
    global _default_resolver
    if _default_resolver is None:
        with _resolver_lock:
            if _default_resolver is None:
                _default_resolver = CredentialResolver()
    return _default_resolver


__all__ = [
    "ConnectionConfig",
    "CredentialResolver",
    "get_credential_resolver",
    "parse_port",
]
