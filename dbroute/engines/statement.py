"""
Run a single parameterized statement over a pooled or a direct connection.

Both variants return plain row dicts (list[dict]); statements without a
result set return []. Driver errors propagate unchanged.
"""

import logging
from typing import Any

from dbroute.core.pool import PoolManager, connect, cursor_to_dicts, execute, get_pool_manager
from dbroute.models import ConnectionConfig

_log = logging.getLogger(__name__)


def fetch_rows(conn: Any, sql: str, params: list | tuple | None = None) -> list[dict[str, Any]]:
    """Execute one statement on *conn* and return its normalized rows."""
    _log.debug("Executing SQL: %s", sql)
    cur = execute(conn, sql, params)
    try:
        return cursor_to_dicts(cur)
    finally:
        cur.close()


def run_pooled(
    config: ConnectionConfig,
    sql: str,
    params: list | tuple | None = None,
    *,
    pool_manager: PoolManager | None = None,
) -> list[dict[str, Any]]:
    """
    Acquire a pooled connection for *config*, run the statement, release.

    Acquisition failure propagates with nothing to release; once acquired,
    the connection goes back to the pool on success and on failure.
    """
    pm = pool_manager or get_pool_manager()
    conn = pm.get_connection(config)
    try:
        return fetch_rows(conn, sql, params)
    finally:
        pm.release(conn, config)


def run_direct(
    config: ConnectionConfig,
    sql: str,
    params: list | tuple | None = None,
) -> list[dict[str, Any]]:
    """Open a fresh connection, run the statement, close once it has settled."""
    conn = connect(config)
    try:
        return fetch_rows(conn, sql, params)
    finally:
        close_quiet(conn)


def close_quiet(conn: Any) -> None:
    try:
        conn.close()
    except Exception:
        _log.warning("Closing connection failed", exc_info=True)
