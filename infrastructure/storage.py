# ============================================================================
# BLOB STORAGE INFRASTRUCTURE
# ============================================================================
# STATUS: Infrastructure - Azure Blob Storage listing
# PURPOSE: Enumerate product image blobs for the images endpoint
# CREATED: 19 OCT 2026
# ============================================================================
"""
Blob Storage Infrastructure

Provides BlobRepository for read-only Azure Blob Storage access:
- list_blob_names: Names under a prefix (lazy paging by the SDK)
- account_url: Public endpoint for building blob URLs

Uses DefaultAzureCredential for authentication (works with Managed Identity),
or a connection string when IMAGE_STORAGE_CONNECTION_STRING is set (Azurite).
Container clients are cached per repository with double-checked locking.
"""

import os
import logging
import threading
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class BlobRepository:
    """
    Azure Blob Storage repository.

    Multi-instance singleton pattern: one instance per storage account.

    Usage:
        repo = BlobRepository(account_name="sneakerspublic")
        names = repo.list_blob_names("public", prefix="images/")
    """

    _instances: Dict[str, "BlobRepository"] = {}
    _instances_lock = threading.Lock()

    def __new__(cls, account_name: Optional[str] = None, **kwargs):
        """Multi-instance singleton: one instance per storage account."""
        if not account_name:
            raise ValueError(
                "BlobRepository requires an explicit account_name. "
                "Set IMAGE_STORAGE_ACCOUNT."
            )

        with cls._instances_lock:
            if account_name not in cls._instances:
                instance = super().__new__(cls)
                instance._initialized = False
                cls._instances[account_name] = instance
            return cls._instances[account_name]

    def __init__(self, account_name: Optional[str] = None):
        if getattr(self, "_initialized", False):
            return

        self.account_name = account_name

        self._container_clients: Dict[str, Any] = {}
        self._container_clients_lock = threading.Lock()

        self._blob_service = None
        self._credential = None

        self._initialized = True
        logger.info(f"BlobRepository initialized for account: {self.account_name}")

    @property
    def account_url(self) -> str:
        return f"https://{self.account_name}.blob.core.windows.net"

    # ========================================================================
    # AZURE CLIENT INITIALIZATION
    # ========================================================================

    def _get_credential(self):
        """Get Azure credential (lazy initialization)."""
        if self._credential is None:
            client_id = os.environ.get("AZURE_CLIENT_ID")

            if client_id:
                from azure.identity import ManagedIdentityCredential
                self._credential = ManagedIdentityCredential(client_id=client_id)
                logger.debug("ManagedIdentityCredential initialized with client_id")
            else:
                from azure.identity import DefaultAzureCredential
                self._credential = DefaultAzureCredential()
                logger.debug("DefaultAzureCredential initialized")
        return self._credential

    def _get_blob_service(self):
        """Get BlobServiceClient (lazy initialization)."""
        if self._blob_service is None:
            from azure.storage.blob import BlobServiceClient

            connection_string = os.environ.get("IMAGE_STORAGE_CONNECTION_STRING")
            if connection_string:
                self._blob_service = BlobServiceClient.from_connection_string(connection_string)
                logger.debug("BlobServiceClient initialized from connection string")
            else:
                self._blob_service = BlobServiceClient(
                    account_url=self.account_url,
                    credential=self._get_credential(),
                )
                logger.debug(f"BlobServiceClient initialized for {self.account_url}")
        return self._blob_service

    def _get_container_client(self, container: str):
        """
        Get or create cached container client.

        Thread-safe with double-checked locking pattern.
        """
        if container in self._container_clients:
            return self._container_clients[container]

        with self._container_clients_lock:
            if container in self._container_clients:
                return self._container_clients[container]

            container_client = self._get_blob_service().get_container_client(container)
            self._container_clients[container] = container_client
            logger.debug(f"Created container client for: {container}")
            return container_client

    # ========================================================================
    # QUERIES
    # ========================================================================

    def list_blob_names(self, container: str, prefix: Optional[str] = None) -> List[str]:
        """
        List blob names in a container under an optional prefix.

        Raises:
            azure.core.exceptions.AzureError: On any storage failure
        """
        container_client = self._get_container_client(container)
        names = [blob.name for blob in container_client.list_blobs(name_starts_with=prefix)]
        logger.debug(f"Listed {len(names)} blobs in {container}/{prefix or ''}")
        return names


__all__ = [
    "BlobRepository",
]
