"""
Execution paths: single statement (pooled or direct), transaction, routed.
"""

from dbroute.engines.router import resolve_route, run_routed
from dbroute.engines.statement import fetch_rows, run_direct, run_pooled
from dbroute.engines.transaction import build_plan, format_sql, run_transaction

__all__ = [
    "fetch_rows",
    "run_pooled",
    "run_direct",
    "run_transaction",
    "build_plan",
    "format_sql",
    "resolve_route",
    "run_routed",
]
