# ============================================================================
# FUNCTION APP BLUEPRINTS
# ============================================================================
# STATUS: Gateway - HTTP endpoint blueprints
# PURPOSE: Azure Functions V2 blueprints for HTTP routes
# CREATED: 19 OCT 2026
# ============================================================================
"""
Function App Blueprints

Azure Functions V2 blueprints organizing HTTP endpoints.
Each blueprint is conditionally registered based on startup validation.
"""

from function.blueprints.catalog_bp import catalog_bp
from function.blueprints.images_bp import images_bp

__all__ = [
    "catalog_bp",
    "images_bp",
]
