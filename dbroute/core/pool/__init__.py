"""
MySQL connections and connection pool.

connect/execute/cursor_to_dicts wrap pymysql; PoolManager reuses connections
per ConnectionConfig.
"""

from .connect import connect, cursor_to_dicts, date_string_conversions, execute
from .manager import PoolManager, get_pool_manager

__all__ = [
    "connect",
    "execute",
    "cursor_to_dicts",
    "date_string_conversions",
    "PoolManager",
    "get_pool_manager",
]
