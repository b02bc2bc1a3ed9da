"""
MySQLClient: one default connection config plus four ways to run SQL.

    client = MySQLClient(host="db", username="app", password="...", database="main", is_pool=True)
    rows = client.query("SELECT * FROM t WHERE id = %s", {"data": [1]})

query() dispatches on the ExecutionMode fixed at construction; query_pool,
query_client, query_transaction and query_router can also be called directly.
"""

import logging
from collections.abc import Iterable
from typing import Any

from dbroute.core.config import settings
from dbroute.core.pool import get_pool_manager
from dbroute.engines import run_direct, run_pooled, run_routed, run_transaction
from dbroute.models import (
    DEFAULT_DATE_STRINGS,
    DEFAULT_PORT,
    ConnectionConfig,
    ExecutionMode,
    RouterRequest,
    StatementRequest,
)

_log = logging.getLogger(__name__)


def resolve_mode(
    mode: ExecutionMode | str | None = None,
    *,
    transaction: bool = False,
    is_pool: bool = False,
    router: bool = False,
) -> ExecutionMode:
    """
    Explicit mode wins; otherwise the first true flag in the order
    transaction, is_pool, router; otherwise DIRECT.
    """
    if mode is not None:
        return ExecutionMode(mode)
    if transaction:
        return ExecutionMode.TRANSACTIONAL
    if is_pool:
        return ExecutionMode.POOLED
    if router:
        return ExecutionMode.ROUTED
    return ExecutionMode.DIRECT


def _data(config: dict[str, Any] | None) -> list[Any]:
    """Positional params from a {"data": [...]} call config."""
    if not config:
        return []
    return list(config.get("data") or [])


class MySQLClient:
    """
    query(*args, **kwargs) -> list[dict]

    - POOLED: query(sql, config=None)
    - DIRECT: query(sql, config=None, conn_config=None)
    - TRANSACTIONAL: query([{"sql": ..., "data": [...]}, ...])
    - ROUTED: query({"routerSql": ..., "routerData": [...], "sql": ..., "data": [...]})
    """

    def __init__(
        self,
        *,
        host: str,
        username: str,
        password: str = "",
        database: str = "",
        port: int = DEFAULT_PORT,
        date_strings: bool | str | list[str] | None = DEFAULT_DATE_STRINGS,
        comments: str | None = None,
        is_pool: bool = False,
        transaction: bool = False,
        router: bool = False,
        mode: ExecutionMode | str | None = None,
    ) -> None:
        self.connect_config = ConnectionConfig(
            host=host,
            user=username,
            password=password,
            database=database,
            port=port,
            date_strings=date_strings,
            comments=comments,
        )
        self.mode = resolve_mode(
            mode, transaction=transaction, is_pool=is_pool, router=router
        )
        _log.debug("MySQLClient %s in %s mode", self.connect_config.comments, self.mode.value)

    @classmethod
    def from_settings(cls, **overrides: Any) -> "MySQLClient":
        """Build a client from MYSQL_* settings; keyword arguments override them."""
        options: dict[str, Any] = {
            "host": settings.MYSQL_HOST,
            "port": settings.MYSQL_PORT,
            "username": settings.MYSQL_USER,
            "password": settings.MYSQL_PASSWORD,
            "database": settings.MYSQL_DATABASE,
        }
        options.update(overrides)
        return cls(**options)

    @property
    def is_pool(self) -> bool:
        return self.mode == ExecutionMode.POOLED

    # ------------------------------------------------------------------
    # Dispatcher
    # ------------------------------------------------------------------

    def query(self, *args: Any, **kwargs: Any) -> list[dict[str, Any]]:
        """Run the request on the path selected by self.mode."""
        if self.mode == ExecutionMode.TRANSACTIONAL:
            return self.query_transaction(*args, **kwargs)
        if self.mode == ExecutionMode.POOLED:
            return self.query_pool(*args, **kwargs)
        if self.mode == ExecutionMode.ROUTED:
            return self.query_router(*args, **kwargs)
        return self.query_client(*args, **kwargs)

    # ------------------------------------------------------------------
    # Execution paths
    # ------------------------------------------------------------------

    def query_pool(
        self, sql: str, config: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Run *sql* on a pooled connection; config = {"data": [...]}."""
        if not self.is_pool:
            raise RuntimeError("query_pool requires a client created with is_pool=True")
        return run_pooled(self.connect_config, sql, _data(config))

    def query_client(
        self,
        sql: str,
        config: dict[str, Any] | None = None,
        conn_config: ConnectionConfig | dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Run *sql* on a fresh connection, closed afterwards.

        conn_config: optional override of the default connection (ConnectionConfig
        or dict with host, user, password, database, port, ...).
        """
        target = self.connect_config
        if conn_config is not None:
            target = (
                conn_config
                if isinstance(conn_config, ConnectionConfig)
                else ConnectionConfig.model_validate(conn_config)
            )
        return run_direct(target, sql, _data(config))

    def query_transaction(
        self, config: Iterable[StatementRequest | dict[str, Any]] | None = None
    ) -> list[dict[str, Any]]:
        """
        Run [{"sql": ..., "data": [...]}, ...] in order as one transaction.

        Returns the rows of the last statement; any failure rolls back and
        re-raises that failure.
        """
        return run_transaction(self.connect_config, config or [])

    def query_router(
        self, options: RouterRequest | dict[str, Any]
    ) -> list[dict[str, Any]]:
        """
        Look up the tenant's connection in the routing table (default connection),
        then run options.sql there. Routing table columns must be
        host, user, password, port, database, comments. No route -> [].
        """
        req = (
            options
            if isinstance(options, RouterRequest)
            else RouterRequest.model_validate(options)
        )
        return run_routed(
            self.connect_config, req.router_sql, req.router_data, req.sql, req.data
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close idle pooled connections held for this client's config."""
        if self.is_pool:
            get_pool_manager().dispose(self.connect_config)

    def __enter__(self) -> "MySQLClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
