"""
Connection pool for MySQL connections.

Keeps idle connections per ConnectionConfig to avoid open/close on every
request. Includes health-check on checkout, max-age eviction, and thread-safe
singleton initialisation.
"""

import logging
import threading
import time
from typing import Any, NamedTuple

from dbroute.core.config import settings
from dbroute.models import ConnectionConfig

from .connect import connect

_log = logging.getLogger(__name__)

_PING_IDLE_THRESHOLD = 30.0  # only ping connections idle longer than this (seconds)


class _PoolEntry(NamedTuple):
    conn: Any
    created_at: float  # time.monotonic() when the connection was opened
    last_used: float   # time.monotonic() when last returned to pool


class PoolManager:
    """Per-ConnectionConfig connection pool with health-check and max-age."""

    def __init__(
        self,
        *,
        pool_size: int | None = None,
        max_age: float | None = None,
    ) -> None:
        self._pools: dict[ConnectionConfig, list[_PoolEntry]] = {}
        # Creation time of every connection handed out, keyed by id(conn)
        self._born: dict[int, float] = {}
        self._lock = threading.Lock()
        self._pool_size: int = (
            pool_size if pool_size is not None else settings.MYSQL_POOL_SIZE
        )
        self._max_age: float = float(
            max_age if max_age is not None else settings.MYSQL_POOL_MAX_AGE_SEC
        )

    def get_connection(self, config: ConnectionConfig) -> Any:
        """Get a healthy connection for *config* (from pool or freshly opened)."""
        now = time.monotonic()
        while True:
            entry = self._pop(config)
            if entry is None:
                break
            if self._is_expired(entry):
                self._discard(entry.conn, "expired")
                continue
            idle_sec = now - entry.last_used
            if idle_sec > _PING_IDLE_THRESHOLD and not self._is_alive(entry.conn):
                self._discard(entry.conn, "failed ping")
                continue
            try:
                entry.conn.rollback()
            except Exception:
                self._discard(entry.conn, "rollback on checkout failed")
                continue
            self._remember(entry.conn, entry.created_at)
            return entry.conn

        conn = connect(config)
        self._remember(conn, time.monotonic())
        return conn

    def release(self, conn: Any, config: ConnectionConfig) -> None:
        """Return a connection to the pool (or close it if pool is full)."""
        with self._lock:
            created_at = self._born.pop(id(conn), None)
        try:
            conn.rollback()
        except Exception:
            self._discard(conn, "rollback on release failed")
            return

        now = time.monotonic()
        with self._lock:
            pool = self._pools.setdefault(config, [])
            if len(pool) < self._pool_size:
                pool.append(
                    _PoolEntry(
                        conn=conn,
                        created_at=created_at if created_at is not None else now,
                        last_used=now,
                    )
                )
                return

        self._close_quiet(conn)

    def dispose(self, config: ConnectionConfig | None = None) -> None:
        """Close pooled connections. ``None`` = dispose all pools."""
        with self._lock:
            if config is not None:
                entries = self._pools.pop(config, [])
            else:
                entries = [e for pool in self._pools.values() for e in pool]
                self._pools.clear()
        for e in entries:
            self._close_quiet(e.conn)

    def stats(self) -> dict[str, int]:
        """Return pool statistics for monitoring."""
        with self._lock:
            total = sum(len(p) for p in self._pools.values())
            return {
                "configs": len(self._pools),
                "idle_connections": total,
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _pop(self, config: ConnectionConfig) -> _PoolEntry | None:
        with self._lock:
            pool = self._pools.get(config)
            if pool:
                return pool.pop()
        return None

    def _remember(self, conn: Any, created_at: float) -> None:
        with self._lock:
            self._born[id(conn)] = created_at

    def _is_expired(self, entry: _PoolEntry) -> bool:
        return (time.monotonic() - entry.created_at) > self._max_age

    def _discard(self, conn: Any, reason: str) -> None:
        _log.warning("Discarding pooled connection: %s", reason)
        self._close_quiet(conn)

    @staticmethod
    def _is_alive(conn: Any) -> bool:
        """Lightweight ping: attempt a no-op query to detect broken connections."""
        try:
            cur = conn.cursor()
            cur.execute("SELECT 1")
            cur.close()
            return True
        except Exception:
            return False

    @staticmethod
    def _close_quiet(conn: Any) -> None:
        try:
            conn.close()
        except Exception:
            _log.warning("Closing connection failed", exc_info=True)


_pool_manager: PoolManager | None = None
_pool_lock = threading.Lock()


def get_pool_manager() -> PoolManager:
    """Return the singleton PoolManager (thread-safe double-checked locking)."""
    global _pool_manager
    if _pool_manager is None:
        with _pool_lock:
            if _pool_manager is None:
                _pool_manager = PoolManager()
    return _pool_manager
