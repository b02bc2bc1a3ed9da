"""
Run an ordered plan of statements as one transaction on one direct connection.

OPEN -> BEGIN -> RUNNING_0..n-1 -> COMMITTING -> COMMITTED, or on any
statement/commit failure -> ROLLING_BACK -> FAILED (the original error is
re-raised after the rollback completes).
"""

import logging
import re
from collections.abc import Iterable
from typing import Any

from dbroute.core.pool import connect
from dbroute.engines.statement import close_quiet, fetch_rows
from dbroute.models import ConnectionConfig, StatementRequest

_log = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s{2,}")


def format_sql(sql: str) -> str:
    """Collapse runs of two or more whitespace characters into one space."""
    return _WHITESPACE_RUN.sub(" ", sql)


def build_plan(
    statements: Iterable[StatementRequest | dict[str, Any]],
) -> tuple[StatementRequest, ...]:
    """Validate [{"sql": ..., "data": [...]}, ...] into an immutable plan."""
    return tuple(
        s if isinstance(s, StatementRequest) else StatementRequest.model_validate(s)
        for s in statements
    )


def _rollback(conn: Any) -> None:
    """Roll back; a failure here is logged and never replaces the root cause."""
    try:
        conn.rollback()
    except Exception:
        _log.warning("Transaction rollback failed", exc_info=True)


def run_transaction(
    config: ConnectionConfig,
    statements: Iterable[StatementRequest | dict[str, Any]],
) -> list[dict[str, Any]]:
    """
    Execute *statements* in order inside BEGIN/COMMIT.

    Returns the rows of the last statement. An empty plan returns [] without
    opening a connection.
    """
    plan = build_plan(statements)
    if not plan:
        return []

    conn = connect(config)
    try:
        conn.begin()

        rows: list[dict[str, Any]] = []
        for i, stmt in enumerate(plan, start=1):
            try:
                rows = fetch_rows(conn, format_sql(stmt.sql), stmt.data)
            except Exception:
                _log.debug("Statement %d of %d failed, rolling back", i, len(plan))
                _rollback(conn)
                raise

        try:
            conn.commit()
        except Exception:
            _log.debug("Commit failed, rolling back")
            _rollback(conn)
            raise
        return rows
    finally:
        close_quiet(conn)
