# ============================================================================
# FUNCTION APP MODULE
# ============================================================================
# STATUS: Gateway - Azure Function App components
# PURPOSE: Catalog request handling for the function app
# CREATED: 19 OCT 2026
# ============================================================================
"""
Function App Module

Contains all components specific to the Azure Function App deployment:
- Blueprints (HTTP endpoints)
- Router and guard (dispatch, admin check)
- Models (request/response schemas)
- Repositories (catalog SQL)
- Services (catalog operations, image listing)
- Startup validation
"""

__all__ = []
