"""
Tenant routing: look up connection parameters in the routing table, then run
the real statement against the tenant's own database.
"""

import logging
from typing import Any

from dbroute.engines.statement import run_direct
from dbroute.models import ConnectionConfig, RouteRecord

_log = logging.getLogger(__name__)


def resolve_route(
    config: ConnectionConfig,
    router_sql: str,
    router_data: list | tuple | None = None,
) -> ConnectionConfig | None:
    """
    Run the lookup against the routing-table connection (*config*).

    Returns the derived tenant config from the first row, or None when the
    tenant has no route yet.
    """
    rows = run_direct(config, router_sql, router_data)
    if not rows:
        return None
    target = RouteRecord.model_validate(rows[0]).to_config()
    _log.debug("Routed to %s (%s:%s/%s)", target.comments, target.host, target.port, target.database)
    return target


def run_routed(
    config: ConnectionConfig,
    router_sql: str,
    router_data: list | tuple | None,
    sql: str,
    data: list | tuple | None = None,
) -> list[dict[str, Any]]:
    """Resolve the route, then run *sql* directly against it; no route -> []."""
    target = resolve_route(config, router_sql, router_data)
    if target is None:
        _log.debug("No route found; returning empty result")
        return []
    return run_direct(target, sql, data)
