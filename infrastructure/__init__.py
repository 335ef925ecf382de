# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Database and storage access
# PURPOSE: Credentials, cached connections and Blob Storage listing
# CREATED: 19 OCT 2026
# ============================================================================
"""
Infrastructure module for the Shoe Catalog API.

Provides:
- CredentialResolver: Database credentials from settings or Key Vault
- ConnectionManager: Cached psycopg connection with one transient retry
- BlobRepository: Azure Blob Storage listing

Usage:
    from infrastructure import get_connection_manager

    manager = get_connection_manager()
    ok = manager.health_check()
"""

from infrastructure.credentials import (
    ConnectionConfig,
    CredentialResolver,
    get_credential_resolver,
)
from infrastructure.connection import (
    ConnectionManager,
    get_connection_manager,
    is_transient_error,
)
from infrastructure.storage import BlobRepository

__all__ = [
    # Credentials
    'ConnectionConfig',
    'CredentialResolver',
    'get_credential_resolver',
    # Connections
    'ConnectionManager',
    'get_connection_manager',
    'is_transient_error',
    # Blob Storage
    'BlobRepository',
]
