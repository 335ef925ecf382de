# ============================================================================
# RESPONSE FORMATTER
# ============================================================================
# STATUS: Gateway - HTTP response construction
# PURPOSE: JSON bodies with fixed cross-origin headers for every route
# CREATED: 19 OCT 2026
# ============================================================================
"""
Response Formatter

Every catalog response (success, error, preflight) is built here so the
CORS headers and content type are identical across routes.

Error bodies are {"message": ..., "error": ...}; "error" is only set for
500s and has any configured database password scrubbed from it.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

import azure.functions as func
from pydantic import BaseModel

from core.errors import CatalogError
from function.config import get_config
from function.models.responses import ErrorResponse
from infrastructure.credentials import get_credential_resolver

logger = logging.getLogger(__name__)

ALLOW_HEADERS = "Content-Type,Authorization"
ALLOW_METHODS = "GET,POST,PUT,DELETE,PATCH,OPTIONS"

INTERNAL_ERROR = "Internal Server Error"


def cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": get_config().cors_origin,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Content-Type": "application/json",
    }


def _to_jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    if isinstance(data, (list, tuple)):
        return [_to_jsonable(item) for item in data]
    return data


def json_response(data: Any, status_code: int = 200) -> func.HttpResponse:
    """Serialize a model, list of models, or plain data."""
    return func.HttpResponse(
        json.dumps(_to_jsonable(data), default=str),
        status_code=status_code,
        headers=cors_headers(),
    )


def empty_response(status_code: int = 200) -> func.HttpResponse:
    """Void success (preflight)."""
    return func.HttpResponse("", status_code=status_code, headers=cors_headers())


def _scrub(text: str) -> str:
    cached = get_credential_resolver().cached_config
    secrets = (
        get_config().db_password,
        os.environ.get("DB_PASSWORD"),
        cached.password if cached else None,
    )
    for secret in secrets:
        if secret:
            text = text.replace(secret, "***")
    return text


def error_response(
    message: str,
    status_code: int,
    error: Optional[str] = None,
) -> func.HttpResponse:
    body = ErrorResponse(
        message=message,
        error=_scrub(error) if error and status_code >= 500 else None,
    )
    return json_response(body.model_dump(exclude_none=True), status_code=status_code)


def response_for_exception(
    exc: Exception,
    server_message: str = INTERNAL_ERROR,
) -> func.HttpResponse:
    """
    Map an exception to an error response.

    CatalogError subclasses keep their status and message. Anything else
    is a 500 with `server_message`.

    Args:
        server_message: Operation-specific text for unexpected failures
    """
    if isinstance(exc, CatalogError) and exc.status_code < 500:
        return error_response(exc.message, exc.status_code)

    if isinstance(exc, CatalogError):
        detail = exc.detail or exc.message
        return error_response(server_message, exc.status_code, f"{type(exc).__name__}: {detail}")

    return error_response(server_message, 500, f"{type(exc).__name__}: {exc}")


__all__ = [
    "cors_headers",
    "json_response",
    "empty_response",
    "error_response",
    "response_for_exception",
]
