# ============================================================================
# CATALOG ERROR TAXONOMY
# ============================================================================
# STATUS: Core - Typed failures shared by every layer
# PURPOSE: Map domain failures to HTTP status codes in one place
# CREATED: 19 OCT 2026
# ============================================================================
"""
Catalog Errors

Every expected failure in the request path is one of these types.
The response formatter turns them into JSON bodies; anything else
becomes a 500.

    ValidationError      400  malformed or missing input
    Forbidden            403  admin group missing from claims
    NotFound             404  no matching product / route
    MethodNotAllowed     405  known route, unsupported verb
    ConfigError          500  credentials cannot be resolved
    StoreError           500  any other database failure
    TransientStoreError  500  connectivity fault, retried once first
"""

from typing import Optional


class CatalogError(Exception):
    """Base exception for catalog request failures."""

    status_code: int = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class ValidationError(CatalogError):
    """Raised when request input is malformed or incomplete."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class Forbidden(CatalogError):
    """Raised when a mutating request lacks the admin group."""

    status_code = 403


class NotFound(CatalogError):
    """Raised when the addressed product (or route) does not exist."""

    status_code = 404


class MethodNotAllowed(CatalogError):
    status_code = 405


class ConfigError(CatalogError):
    """
    Raised when database credentials cannot be resolved.

    Messages name the missing setting, never the value.
    """

    status_code = 500


class StoreError(CatalogError):
    status_code = 500


class TransientStoreError(StoreError):
    """
    Connectivity fault classified at the store-client boundary.

    ConnectionManager.with_connection retries these once on a fresh
    connection; a second one propagates and surfaces as a 500.
    """


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
