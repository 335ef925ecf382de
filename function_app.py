# ============================================================================
# SHOE CATALOG API - Azure Function App
# ============================================================================
# STATUS: Gateway - Product catalog with per-size inventory
# PURPOSE: HTTP entry point for catalog reads, admin writes and image listing
# CREATED: 19 OCT 2026
# ============================================================================
"""
Shoe Catalog Function App

Azure Functions V2 entry point providing:
- Product listing and lookup with nested per-size inventory
- Admin-only create, update, delete and inventory adjustment
- Public product image listing from Blob Storage

Endpoints:
- /api/livez - Liveness probe (always available)
- /api/readyz - Readiness probe (checks startup validation)
- /api/products[/{id}[/inventory]] - Catalog (needs env_vars)
- /api/images - Image URLs (needs storage)
"""

import azure.functions as func
import json
import logging

from __version__ import __version__
from function.config import get_config

# ============================================================================
# CREATE APP FIRST (before any imports that might fail)
# ============================================================================

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

_config = get_config()

# The Functions host installs its own handlers; only replace them on request
if _config.log_format:
    from core.logging import configure_logging
    configure_logging(_config.log_level, json_output=_config.log_format.lower() == "json")

logger = logging.getLogger(__name__)
logger.info("=" * 60)
logger.info(f"{_config.service_name} {__version__} Function App Starting")
logger.info("=" * 60)

# ============================================================================
# EARLY PROBES (Before validation - always available)
# ============================================================================
# These endpoints must be available even if startup validation fails.


@app.route(route="livez", methods=["GET"])
def liveness_probe(req: func.HttpRequest) -> func.HttpResponse:
    """
    Liveness probe - always returns 200 if function is running.

    GET /api/livez
    """
    return func.HttpResponse(
        json.dumps({"alive": True, "service": _config.service_name}),
        status_code=200,
        headers={"Content-Type": "application/json"},
    )


@app.route(route="readyz", methods=["GET"])
def readiness_probe(req: func.HttpRequest) -> func.HttpResponse:
    """
    Readiness probe - returns 200 if startup validation passed.

    GET /api/readyz

    Returns 503 with the failed checks otherwise.
    """
    from function.startup import STARTUP_STATE

    if STARTUP_STATE.all_passed:
        return func.HttpResponse(
            json.dumps({"ready": True, "service": _config.service_name, "version": __version__}),
            status_code=200,
            headers={"Content-Type": "application/json"},
        )

    return func.HttpResponse(
        json.dumps({
            "ready": False,
            "service": _config.service_name,
            "failed_checks": STARTUP_STATE.failed_check_names(),
            "details": STARTUP_STATE.to_dict(),
        }),
        status_code=503,
        headers={"Content-Type": "application/json"},
    )


# ============================================================================
# STARTUP VALIDATION
# ============================================================================
# Validate environment and dependencies before registering blueprints.

logger.info("Running startup validation...")

from function.startup import validate_startup, STARTUP_STATE

validate_startup()

if not STARTUP_STATE.all_passed:
    logger.error("=" * 60)
    logger.error("STARTUP VALIDATION INCOMPLETE")
    logger.error("=" * 60)
    for check in STARTUP_STATE.failed_checks():
        logger.error(f"  FAILED: {check.name} - {check.error_message}")
    logger.error("=" * 60)
else:
    logger.info("Startup validation PASSED")


# ============================================================================
# BLUEPRINT REGISTRATION (Conditional on startup checks)
# ============================================================================

if STARTUP_STATE.catalog_ready:
    from function.blueprints.catalog_bp import catalog_bp
    app.register_functions(catalog_bp)
    logger.info("  Registered: catalog_bp (products, inventory)")
else:
    logger.warning("SKIPPING catalog_bp - env_vars check failed")

if STARTUP_STATE.images_ready:
    from function.blueprints.images_bp import images_bp
    app.register_functions(images_bp)
    logger.info("  Registered: images_bp (image listing)")
else:
    logger.warning("SKIPPING images_bp - storage check failed")

logger.info("=" * 60)
logger.info(f"{_config.service_name} Function App Ready")
logger.info("=" * 60)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = ["app"]
