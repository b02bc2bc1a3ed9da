"""
Data model for dbroute.

Entities: ConnectionConfig, StatementRequest, RouteRecord, RouterRequest,
plus the ExecutionMode enum the client dispatches on.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_PORT = 3306
DEFAULT_DATE_STRINGS = "DATE"

# Temporal column types that date_strings may keep as raw strings
DATE_STRING_TYPES = ("DATE", "DATETIME", "TIMESTAMP")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ExecutionMode(str, Enum):
    """How MySQLClient.query() runs a request."""

    POOLED = "pooled"
    DIRECT = "direct"
    TRANSACTIONAL = "transactional"
    ROUTED = "routed"


# ---------------------------------------------------------------------------
# Connection parameters
# ---------------------------------------------------------------------------


class ConnectionConfig(BaseModel):
    """Immutable connection parameters; hashable, so it also keys the pool."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(..., min_length=1)
    user: str = Field(..., min_length=1)
    password: str = ""
    database: str = ""
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    date_strings: bool | str | tuple[str, ...] | None = DEFAULT_DATE_STRINGS
    comments: str | None = None

    @model_validator(mode="before")
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Route rows and legacy options may carry explicit NULLs
        if data.get("port") in (None, "", 0):
            data["port"] = DEFAULT_PORT
        if data.get("password") is None:
            data["password"] = ""
        if data.get("database") is None:
            data["database"] = ""
        if not data.get("comments"):
            data["comments"] = data.get("host")
        return data

    @field_validator("date_strings", mode="before")
    @classmethod
    def normalize_date_strings(cls, v: Any) -> Any:
        if v is None or isinstance(v, bool):
            return v
        names = (v,) if isinstance(v, str) else tuple(v)
        out: list[str] = []
        for name in names:
            upper = str(name).strip().upper()
            if upper not in DATE_STRING_TYPES:
                raise ValueError(
                    f"date_strings must name one of {', '.join(DATE_STRING_TYPES)}; got {name!r}"
                )
            if upper not in out:
                out.append(upper)
        if len(out) == 1:
            return out[0]
        return tuple(out)

    def string_date_types(self) -> frozenset[str]:
        """Temporal column types to hand back as strings instead of datetime objects."""
        ds = self.date_strings
        if ds is True:
            return frozenset(DATE_STRING_TYPES)
        if not ds:
            return frozenset()
        if isinstance(ds, str):
            return frozenset((ds,))
        return frozenset(ds)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class StatementRequest(BaseModel):
    """One SQL statement with positional (%s) parameters."""

    sql: str = Field(..., min_length=1)
    data: list[Any] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, tuple):
            return list(v)
        return v


class RouterRequest(BaseModel):
    """Lookup statement against the routing table, then the real statement."""

    model_config = ConfigDict(populate_by_name=True)

    router_sql: str = Field(..., min_length=1, alias="routerSql")
    router_data: list[Any] = Field(default_factory=list, alias="routerData")
    sql: str = Field(..., min_length=1)
    data: list[Any] = Field(default_factory=list)

    @field_validator("router_data", "data", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, tuple):
            return list(v)
        return v


# ---------------------------------------------------------------------------
# Routing table row
# ---------------------------------------------------------------------------


class RouteRecord(BaseModel):
    """
    First row of a routing lookup. Columns must be named
    host, user, password, port, database, comments; extra columns are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    host: str
    user: str
    password: str | None = None
    port: int | None = None
    database: str | None = None
    comments: str | None = None

    def to_config(self) -> ConnectionConfig:
        """Derived connection for the tenant; date strings fixed to DATE."""
        return ConnectionConfig(
            host=self.host,
            user=self.user,
            password=self.password,
            port=self.port or DEFAULT_PORT,
            database=self.database,
            comments=self.comments,
            date_strings=DEFAULT_DATE_STRINGS,
        )
