# ============================================================================
# BASE REPOSITORY FOR FUNCTION APP
# ============================================================================
# STATUS: Gateway - Database access base class
# PURPOSE: Thin psycopg3 wrapper bound to one (cached) connection
# CREATED: 19 OCT 2026
# ============================================================================
"""
Base Repository for Function App

Lightweight PostgreSQL repository bound to a connection handed out by
ConnectionManager.with_connection. Uses psycopg3 with dict_row factory
(NEVER tuple indexing).

Design Principles:
- dict_row factory ALWAYS (never tuple indexing)
- Repository does not own the connection (it is cached across invocations)
- Autocommit outside `transaction()` blocks; one statement, one commit
- Connectivity faults are re-raised as TransientStoreError so the
  connection manager can retry on a fresh connection
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import psycopg

from core.errors import TransientStoreError
from infrastructure.connection import is_transient_error

logger = logging.getLogger(__name__)


class FunctionRepository:
    """
    Base repository for function app database access.

    Pattern:
    - Connection injected (cached per worker, never closed here)
    - dict_row factory always (access columns by name, never index)
    - Simple error handling (classify, then let exceptions propagate)
    """

    def __init__(self, conn: psycopg.Connection):
        """
        Initialize repository.

        Args:
            conn: Open connection (autocommit, dict_row)
        """
        self.conn = conn

    @contextmanager
    def _store_errors(self) -> Iterator[None]:
        """Re-raise connectivity faults as TransientStoreError."""
        try:
            yield
        except psycopg.Error as e:
            if is_transient_error(e):
                raise TransientStoreError(
                    f"Database connection lost: {type(e).__name__}"
                ) from e
            raise

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Scoped transaction.

        Commits when the block exits normally, rolls back when it raises.
        """
        with self._store_errors():
            with self.conn.transaction():
                yield

    def execute_one(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Execute query and return single row as dict (or None)."""
        with self._store_errors():
            with self.conn.cursor() as cur:
                cur.execute(query, params)
                return cur.fetchone()

    def execute_many(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """Execute query and return all rows as list of dicts."""
        with self._store_errors():
            with self.conn.cursor() as cur:
                cur.execute(query, params)
                return cur.fetchall()

    def execute_write(self, query: str, params: tuple = ()) -> int:
        """
        Execute INSERT/UPDATE/DELETE.

        Returns:
            Number of rows affected
        """
        with self._store_errors():
            with self.conn.cursor() as cur:
                cur.execute(query, params)
                return cur.rowcount

    def execute_write_returning(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Execute INSERT/UPDATE with RETURNING clause; returns the row or None."""
        with self._store_errors():
            with self.conn.cursor() as cur:
                cur.execute(query, params)
                return cur.fetchone()

    def execute_batch_returning(self, query: str, params_seq: List[tuple]) -> List[Dict[str, Any]]:
        """
        Run one RETURNING statement per parameter tuple (pipelined).

        Returns:
            One returned row per input tuple, in input order
        """
        if not params_seq:
            return []

        with self._store_errors():
            with self.conn.cursor() as cur:
                cur.executemany(query, params_seq, returning=True)
                rows = []
                while True:
                    rows.append(cur.fetchone())
                    if not cur.nextset():
                        break
                return rows


__all__ = ["FunctionRepository"]
