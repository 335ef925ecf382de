# ============================================================================
# REQUEST GUARD
# ============================================================================
# STATUS: Gateway - Role check for mutating routes
# PURPOSE: Read already-validated claims and gate writes on the admin group
# CREATED: 19 OCT 2026
# ============================================================================
"""
Request Guard

Token validation happens upstream (App Service authentication or an API
gateway authorizer). This module only reads the claims that layer
forwards and decides whether an operation may proceed.

Which header is trusted depends on the configured claims source:
    app-service  X-MS-CLIENT-PRINCIPAL (base64 JSON {"claims": [{"typ", "val"}]}),
                 only alongside X-MS-CLIENT-PRINCIPAL-IDP, which App Service
                 authentication always sets with it
    gateway      X-Claims (plain JSON object) from a gateway that strips
                 client-supplied copies
    none         nothing; every mutating request is refused

Headers from an untrusted source are ignored, never merged.

Group membership is read from "groups", "cognito:groups" or "roles".
The value may be a list, a set, or a comma-separated string.
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Set

logger = logging.getLogger(__name__)

PRINCIPAL_HEADER = "X-MS-CLIENT-PRINCIPAL"
PRINCIPAL_IDP_HEADER = "X-MS-CLIENT-PRINCIPAL-IDP"
CLAIMS_HEADER = "X-Claims"

APP_SERVICE_SOURCE = "app-service"
GATEWAY_SOURCE = "gateway"
CLAIMS_SOURCES = frozenset({APP_SERVICE_SOURCE, GATEWAY_SOURCE, "none"})

GROUP_CLAIM_KEYS = ("groups", "cognito:groups", "roles")

MUTATING_OPERATIONS = frozenset({"create", "update", "delete", "patch_inventory"})

FORBIDDEN_MESSAGE = "Forbidden: admin role required"


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value


def _decode_principal(raw: str) -> Dict[str, Any]:
    """
    Flatten an App Service client principal into a claims dict.

    Repeated claim types (one entry per group) collect into a list.
    """
    try:
        principal = json.loads(base64.b64decode(raw))
    except (binascii.Error, ValueError) as e:
        logger.warning(f"Ignoring undecodable {PRINCIPAL_HEADER} header: {type(e).__name__}")
        return {}

    claims: Dict[str, Any] = {}
    if not isinstance(principal, dict):
        return claims

    for entry in principal.get("claims") or []:
        if not isinstance(entry, dict) or "typ" not in entry:
            continue
        key, value = entry["typ"], entry.get("val")
        if key in claims:
            existing = claims[key]
            claims[key] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            claims[key] = value

    role_type = principal.get("role_typ")
    if role_type and role_type in claims and "roles" not in claims:
        claims["roles"] = claims[role_type]
    return claims


def _decode_gateway_claims(raw: str) -> Dict[str, Any]:
    try:
        claims = json.loads(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed {CLAIMS_HEADER} header")
        return {}
    return claims if isinstance(claims, dict) else {}


def extract_claims(headers: Mapping[str, str], source: str = APP_SERVICE_SOURCE) -> Dict[str, Any]:
    """
    Claims forwarded by the trusted upstream layer (empty if none).

    Args:
        headers: Request headers
        source: "app-service", "gateway" or "none" (CLAIMS_SOURCE)
    """
    if source not in CLAIMS_SOURCES:
        logger.warning(f"Unknown claims source {source!r}; treating request as anonymous")
        return {}

    if source == APP_SERVICE_SOURCE:
        principal = _header(headers, PRINCIPAL_HEADER)
        if not principal:
            return {}
        if not _header(headers, PRINCIPAL_IDP_HEADER):
            logger.warning(f"Ignoring {PRINCIPAL_HEADER} without {PRINCIPAL_IDP_HEADER}")
            return {}
        return _decode_principal(principal)

    if source == GATEWAY_SOURCE:
        raw = _header(headers, CLAIMS_HEADER)
        return _decode_gateway_claims(raw) if raw else {}

    return {}


def _split_groups(value: Any) -> Iterable[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",")]
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(part).strip() for part in value if part is not None]
    return [str(value).strip()]


def claim_groups(claims: Optional[Mapping[str, Any]]) -> Set[str]:
    """All group names found under any recognised group claim."""
    groups: Set[str] = set()
    if not claims:
        return groups
    for key in GROUP_CLAIM_KEYS:
        groups.update(g for g in _split_groups(claims.get(key)) if g)
    return groups


def authorize(
    claims: Optional[Mapping[str, Any]],
    operation: str,
    admin_group: str = "admin",
) -> bool:
    """
    Decide whether `operation` may run with these claims.

    Reads are open. Mutating operations need `admin_group`.
    """
    if operation not in MUTATING_OPERATIONS:
        return True

    allowed = admin_group in claim_groups(claims)
    if not allowed:
        logger.warning(f"Rejected {operation}: caller lacks group {admin_group!r}")
    return allowed


__all__ = [
    "CLAIMS_SOURCES",
    "MUTATING_OPERATIONS",
    "FORBIDDEN_MESSAGE",
    "extract_claims",
    "claim_groups",
    "authorize",
]
