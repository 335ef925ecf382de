# ============================================================================
# IMAGES BLUEPRINT
# ============================================================================
# STATUS: Gateway - Product image listing endpoint
# PURPOSE: HTTP trigger listing public image URLs
# CREATED: 19 OCT 2026
# ============================================================================
"""
Images Blueprint

- GET /api/images - Public URLs of blobs under IMAGE_PREFIX
"""

import azure.functions as func

from function.blueprints.catalog_bp import handle

images_bp = func.Blueprint()


@images_bp.route(route="images", methods=["GET", "OPTIONS"])
def images_list(req: func.HttpRequest, context: func.Context) -> func.HttpResponse:
    return handle(req, context)


__all__ = ["images_bp"]
