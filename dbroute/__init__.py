"""
dbroute: run SQL against MySQL over a pooled connection, a one-shot
connection, an ordered transaction, or a tenant route looked up in a routing table.
"""

from dbroute.client import MySQLClient, resolve_mode
from dbroute.engines import format_sql
from dbroute.models import (
    ConnectionConfig,
    ExecutionMode,
    RouteRecord,
    RouterRequest,
    StatementRequest,
)

__all__ = [
    "MySQLClient",
    "resolve_mode",
    "format_sql",
    "ConnectionConfig",
    "ExecutionMode",
    "RouteRecord",
    "RouterRequest",
    "StatementRequest",
]
