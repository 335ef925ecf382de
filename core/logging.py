# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with request context
# PURPOSE: Consistent, queryable logging across handlers and infrastructure
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

JSON or human-readable log output for the catalog function app.
Application Insights picks up stdout from the Functions worker, so
JSON lines are the production format.

Features:
- Per-invocation context (invocation_id, operation, product_id)
- JSON output for log aggregation
- Human formatter for local `func start`

Usage:
    from core.logging import configure_logging, log_context

    configure_logging("INFO")
    logger = logging.getLogger(__name__)

    with log_context(invocation_id=ctx.invocation_id, operation="get"):
        logger.info("Fetching product")
"""

import json
import logging
import os
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union


@dataclass
class LogContext:
    """Contextual fields attached to every record emitted in a request."""

    invocation_id: Optional[str] = None
    operation: Optional[str] = None
    method: Optional[str] = None
    route: Optional[str] = None
    product_id: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        result = {}
        for key, value in asdict(self).items():
            if value is not None and key != "extra":
                result[key] = value
        if self.extra:
            result.update(self.extra)
        return result


# Python workers may run invocations on a thread pool
_context_stack = threading.local()


def _get_context_stack() -> list:
    if not hasattr(_context_stack, "stack"):
        _context_stack.stack = []
    return _context_stack.stack


def get_current_context() -> LogContext:
    """Get current logging context."""
    stack = _get_context_stack()
    if stack:
        return stack[-1]
    return LogContext()


@contextmanager
def log_context(**kwargs):
    """
    Push logging context for the duration of a block.

    Unspecified fields inherit from the enclosing context.

    Example:
        with log_context(operation="delete", product_id=42):
            logger.info("Deleting product")
    """
    parent = get_current_context()
    new_context = LogContext(
        invocation_id=kwargs.get("invocation_id", parent.invocation_id),
        operation=kwargs.get("operation", parent.operation),
        method=kwargs.get("method", parent.method),
        route=kwargs.get("route", parent.route),
        product_id=kwargs.get("product_id", parent.product_id),
        extra={**parent.extra, **kwargs.get("extra", {})},
    )

    stack = _get_context_stack()
    stack.append(new_context)
    try:
        yield new_context
    finally:
        stack.pop()


class StructuredFormatter(logging.Formatter):
    """JSON formatter, one object per line."""

    def __init__(self, include_context: bool = True, include_source: bool = True):
        super().__init__()
        self.include_context = include_context
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            context_dict = get_current_context().to_dict()
            if context_dict:
                log_data["context"] = context_dict

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.include_source:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)

        context = get_current_context()
        context_parts = []
        if context.invocation_id:
            context_parts.append(f"inv={context.invocation_id[:8]}")
        if context.operation:
            context_parts.append(f"op={context.operation}")
        if context.product_id is not None:
            context_parts.append(f"product={context.product_id}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        result = f"{timestamp} {level} {record.name}{context_str}: {record.getMessage()}"

        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"

        return result


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON format (also enabled by LOG_FORMAT=json)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter = StructuredFormatter(include_context=True)
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # Azure SDK HTTP pipeline logging is extremely chatty at INFO
    logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(logging.WARNING)


__all__ = [
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "configure_logging",
    "log_context",
    "get_current_context",
]
