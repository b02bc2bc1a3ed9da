"""
MySQL connection helpers: open a connection from a ConnectionConfig, run a
statement, turn the cursor into plain row dicts.

Uses pymysql; this is the only module that talks to the driver directly.
"""

import logging
from typing import Any

import pymysql
from pymysql.constants import FIELD_TYPE
from pymysql.converters import conversions

from dbroute.core.config import settings
from dbroute.models import ConnectionConfig

_log = logging.getLogger(__name__)

_TEMPORAL_FIELD_TYPES = {
    "DATE": (FIELD_TYPE.DATE, FIELD_TYPE.NEWDATE),
    "DATETIME": (FIELD_TYPE.DATETIME,),
    "TIMESTAMP": (FIELD_TYPE.TIMESTAMP,),
}


def _as_config(config: ConnectionConfig | dict[str, Any]) -> ConnectionConfig:
    if isinstance(config, ConnectionConfig):
        return config
    return ConnectionConfig.model_validate(config)


def date_string_conversions(config: ConnectionConfig) -> dict[Any, Any]:
    """
    Converter map for pymysql with decoders removed for the temporal types
    that config.date_strings keeps as strings (pymysql then returns the raw text).
    """
    conv = conversions.copy()
    for name in config.string_date_types():
        for field_type in _TEMPORAL_FIELD_TYPES[name]:
            conv.pop(field_type, None)
    return conv


def connect(config: ConnectionConfig | dict[str, Any]) -> Any:
    """
    Open a fresh connection to MySQL.

    - config: ConnectionConfig or dict with host, user, password, database,
      port, date_strings, comments.
    """
    cfg = _as_config(config)
    _log.debug("Opening connection to %s (%s:%s/%s)", cfg.comments, cfg.host, cfg.port, cfg.database)
    return pymysql.connect(
        host=cfg.host,
        port=int(cfg.port),
        user=cfg.user,
        password=cfg.password,
        database=cfg.database or None,
        connect_timeout=settings.MYSQL_CONNECT_TIMEOUT,
        conv=date_string_conversions(cfg),
        # Single statements commit on their own; transactions use BEGIN explicitly
        autocommit=True,
    )


def execute(
    conn: Any,
    sql: str,
    params: list | tuple | None = None,
) -> Any:
    """Execute SQL and return the cursor. Caller uses cursor_to_dicts(cursor) and closes it."""
    cur = conn.cursor()
    try:
        if params:
            cur.execute(sql, params)
        else:
            cur.execute(sql)
    except Exception:
        cur.close()
        raise
    return cur


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Copy the cursor result into fresh dicts keyed by column name; no result set -> []."""
    desc = cursor.description
    if not desc:
        return []
    names = [d[0] for d in desc]
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]
