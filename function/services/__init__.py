# ============================================================================
# FUNCTION APP SERVICES
# ============================================================================
# STATUS: Gateway - Service layer
# PURPOSE: Catalog operations and image listing behind the HTTP routes
# CREATED: 19 OCT 2026
# ============================================================================

from function.services.catalog_service import CatalogService
from function.services.image_service import ImageService

__all__ = ["CatalogService", "ImageService"]
