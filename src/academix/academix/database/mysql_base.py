from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

import mysql.connector

from ..core.exceptions import RemoteStoreError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, operation: str, dictionary: bool = True):
    """Connection + cursor for one remote operation.

    Commits on success, rolls back on failure. Driver errors are logged with
    the operation name and re-raised as :class:`RemoteStoreError`.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("Remote store error in %s: %s", operation, exc)
        raise RemoteStoreError(str(exc), operation=operation) from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        logger.error("Remote store error in %s: %s", operation, exc)
        raise RemoteStoreError(str(exc), operation=operation) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def build_patch(patch: dict, allowed: Iterable[str]) -> tuple[str, list]:
    """SET clause for a partial update restricted to whitelisted columns."""

    allowed = set(allowed)
    columns = [c for c in patch if c in allowed]
    if not columns:
        return "", []
    assignments = ", ".join(f"`{c}`=%s" for c in columns)
    return assignments, [patch[c] for c in columns]
