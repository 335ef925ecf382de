# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export the error taxonomy shared by every layer
# CREATED: 19 OCT 2026
# ============================================================================

from core.errors import (
    CatalogError,
    ValidationError,
    Forbidden,
    NotFound,
    MethodNotAllowed,
    ConfigError,
    StoreError,
    TransientStoreError,
)

__all__ = [
    "CatalogError",
    "ValidationError",
    "Forbidden",
    "NotFound",
    "MethodNotAllowed",
    "ConfigError",
    "StoreError",
    "TransientStoreError",
]
