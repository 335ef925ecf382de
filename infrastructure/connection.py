# ============================================================================
# POSTGRESQL CONNECTION MANAGER
# ============================================================================
# STATUS: Infrastructure - Cached connection with stale-connection recovery
# PURPOSE: One reusable psycopg connection per Functions worker process
# CREATED: 19 OCT 2026
# ============================================================================
"""
PostgreSQL Connection Manager

Function invocations on a warm worker share one connection, one
operation at a time:

- Created lazily on first use, cached at module level
- Reused while psycopg reports it neither closed nor broken
- Never closed at the end of a request (connection setup dominates
  latency on cold paths)
- Replaced when a transient connectivity error is observed, with the
  failed operation retried exactly once on the fresh connection

Connect attempts use a short timeout (DB_CONNECT_TIMEOUT, default 4s) so
an unreachable server fails the request well before the host timeout.

The connection runs in autocommit mode. Multi-statement writes open an
explicit `conn.transaction()` block, which commits on success and rolls
back on any exception.

Usage:
    from infrastructure.connection import get_connection_manager

    manager = get_connection_manager()
    rows = manager.with_connection(lambda conn: conn.execute("SELECT 1").fetchall())
"""

import logging
import threading
from typing import Callable, Optional, TypeVar

import psycopg
from psycopg.rows import dict_row

from core.errors import TransientStoreError
from infrastructure.credentials import CredentialResolver, get_credential_resolver

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CONNECT_TIMEOUT_SECS = 4

# SQLSTATEs outside class 08 that mean "server went away, try again"
_TRANSIENT_SQLSTATES = frozenset({
    "57P01",  # admin_shutdown
    "57P02",  # crash_shutdown
    "57P03",  # cannot_connect_now
})


def is_transient_error(exc: BaseException) -> bool:
    """
    Classify an exception as a transient connectivity fault.

    Transient:
    - TransientStoreError (already classified by a repository)
    - psycopg.InterfaceError (operation on a closed connection)
    - psycopg.OperationalError with no SQLSTATE (socket-level failure:
      connection lost, reset, timed out) or SQLSTATE class 08
    - SQLSTATE 57P01/57P02/57P03
    - ConnectionError (reset, aborted, broken pipe) and TimeoutError

    Everything else (constraint violations, syntax errors, etc.) is not.
    """
    if isinstance(exc, TransientStoreError):
        return True
    if isinstance(exc, psycopg.InterfaceError):
        return True
    if isinstance(exc, psycopg.Error):
        sqlstate = getattr(exc, "sqlstate", None)
        if sqlstate in _TRANSIENT_SQLSTATES:
            return True
        if isinstance(exc, psycopg.OperationalError):
            return sqlstate is None or sqlstate.startswith("08")
        return False
    return isinstance(exc, (ConnectionError, TimeoutError))


class ConnectionManager:
    """
    Owns the cached connection for one worker process.

    Args:
        resolver: Credential source (defaults to the process-wide resolver)
        connect_timeout: Seconds allowed for establishing a connection
        connect: Connection factory, psycopg.connect signature
    """

    def __init__(
        self,
        resolver: Optional[CredentialResolver] = None,
        connect_timeout: int = DEFAULT_CONNECT_TIMEOUT_SECS,
        connect: Optional[Callable[..., psycopg.Connection]] = None,
    ):
        self._resolver = resolver or get_credential_resolver()
        self.connect_timeout = connect_timeout
        self._connect = connect or psycopg.connect
        self._conn: Optional[psycopg.Connection] = None
        self._lock = threading.RLock()

    @staticmethod
    def _is_usable(conn) -> bool:
        return not (getattr(conn, "closed", True) or getattr(conn, "broken", False))

    def get_connection(self) -> psycopg.Connection:
        """
        Return the cached connection, opening a new one if needed.

        Raises:
            ConfigError: Credentials cannot be resolved
            psycopg.OperationalError: Server unreachable within the timeout
        """
        with self._lock:
            if self._conn is not None and self._is_usable(self._conn):
                logger.debug("Reusing existing database connection")
                return self._conn

            if self._conn is not None:
                logger.info("Cached database connection is closed or broken; reconnecting")

            config = self._resolver.resolve()

            logger.info(f"Creating new database connection to {config.host}:{config.port}/{config.database}")
            conn = self._connect(
                **config.connect_kwargs(),
                connect_timeout=self.connect_timeout,
                autocommit=True,
                row_factory=dict_row,
            )
            self._conn = conn
            return conn

    def invalidate(self) -> None:
        """Discard the cached connection (closing it best-effort)."""
        with self._lock:
            conn, self._conn = self._conn, None

        if conn is not None:
            try:
                conn.close()
            except Exception as e:
                logger.debug(f"Ignoring error while closing stale connection: {e}")

    def health_check(self) -> bool:
        """Run SELECT 1 through the retrying path; True when it answers 1."""
        def _ping(conn) -> bool:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 AS ok")
                row = cur.fetchone()
            return bool(row) and row["ok"] == 1

        try:
            return self.with_connection(_ping)
        except Exception as e:
            logger.warning(f"Database health check failed: {type(e).__name__}: {e}")
            return False

    def with_connection(self, operation: Callable[[psycopg.Connection], T]) -> T:
        """
        Run operation(conn), retrying once on a transient fault.

        The manager lock is held for the whole call: one operation at a
        time uses the connection. The retry uses a freshly created
        connection. A non-transient error, or a second transient error,
        propagates unchanged.
        """
        with self._lock:
            conn = self.get_connection()
            try:
                return operation(conn)
            except Exception as e:
                if not is_transient_error(e):
                    raise
                logger.warning(
                    f"Database connection appears stale ({type(e).__name__}); "
                    f"recreating and retrying once"
                )

            self.invalidate()
            conn = self.get_connection()
            return operation(conn)


# ============================================================================
# PROCESS-WIDE INSTANCE
# ============================================================================

_default_manager: Optional[ConnectionManager] = None
_manager_lock = threading.Lock()


def get_connection_manager() -> ConnectionManager:
    """Get shared connection manager (lazy, thread-safe)."""
    global _default_manager
    if _default_manager is None:
        with _manager_lock:
            if _default_manager is None:
                from function.config import get_config

                _default_manager = ConnectionManager(
                    connect_timeout=get_config().db_connect_timeout,
                )
    return _default_manager


__all__ = [
    "ConnectionManager",
    "get_connection_manager",
    "is_transient_error",
]
