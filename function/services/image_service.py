# ============================================================================
# IMAGE SERVICE
# ============================================================================
# STATUS: Gateway - Product image listing
# PURPOSE: Map blobs under the image prefix to public URLs
# CREATED: 19 OCT 2026
# ============================================================================
"""
Image Service

Lists product images stored as blobs under IMAGE_PREFIX and returns
their public URLs. Directory marker blobs (names ending in "/") are
skipped.
"""

import logging
from typing import List, Optional

from azure.core.exceptions import AzureError

from core.errors import ConfigError, NotFound, StoreError
from function.config import get_config
from infrastructure.storage import BlobRepository

logger = logging.getLogger(__name__)

NO_IMAGES = "No images found."


class ImageService:
    """
    Public image URL listing.

    Args:
        repository: Blob access for the image account
        container: Container holding the images
        prefix: Blob name prefix (virtual folder)
        base_url: Public URL the blob name is appended to
    """

    def __init__(
        self,
        repository: BlobRepository,
        container: str,
        prefix: str = "images/",
        base_url: Optional[str] = None,
    ):
        self.repository = repository
        self.container = container
        self.prefix = prefix
        self.base_url = (base_url or f"{repository.account_url}/{container}").rstrip("/")

    @classmethod
    def from_config(cls) -> "ImageService":
        config = get_config()
        if not config.has_storage_config:
            raise ConfigError("Image storage is not configured (IMAGE_STORAGE_ACCOUNT).")
        return cls(
            repository=BlobRepository(account_name=config.image_storage_account),
            container=config.image_container,
            prefix=config.image_prefix,
            base_url=config.image_public_base_url,
        )

    def list_images(self) -> List[str]:
        """
        Public URLs of every image under the prefix.

        Raises:
            NotFound: Nothing but directory markers (or nothing at all)
            StoreError: Blob listing failed
        """
        try:
            names = self.repository.list_blob_names(self.container, prefix=self.prefix)
        except AzureError as e:
            logger.error(f"Listing {self.container}/{self.prefix} failed: {type(e).__name__}")
            raise StoreError("Error listing images", detail=str(e)) from e

        urls = [f"{self.base_url}/{name}" for name in names if not name.endswith("/")]
        if not urls:
            raise NotFound(NO_IMAGES)
        return urls


__all__ = ["ImageService"]
