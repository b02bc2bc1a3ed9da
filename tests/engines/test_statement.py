"""Unit tests for engines.statement: run_pooled, run_direct."""

from unittest.mock import MagicMock, patch

import pymysql
import pytest

from dbroute.engines import run_direct, run_pooled
from dbroute.models import ConnectionConfig


def _make_config() -> ConnectionConfig:
    return ConnectionConfig(host="localhost", user="u", password="p", database="db")


def _cursor(
    rows: list[tuple] | None = None,
    columns: list[str] | None = None,
    error: Exception | None = None,
) -> MagicMock:
    cur = MagicMock()
    cur.description = [(c,) for c in columns] if columns else None
    cur.fetchall.return_value = rows or []
    if error is not None:
        cur.execute.side_effect = error
    return cur


def _pool_with(conn: MagicMock) -> MagicMock:
    pm = MagicMock()
    pm.get_connection.return_value = conn
    return pm


# --- pooled ---


def test_run_pooled_returns_rows_and_releases() -> None:
    cfg = _make_config()
    conn = MagicMock()
    conn.cursor.return_value = _cursor([(1, "a")], ["id", "name"])
    pm = _pool_with(conn)

    out = run_pooled(cfg, "SELECT * FROM t WHERE id=%s", [1], pool_manager=pm)

    assert out == [{"id": 1, "name": "a"}]
    pm.get_connection.assert_called_once_with(cfg)
    conn.cursor.return_value.execute.assert_called_once_with("SELECT * FROM t WHERE id=%s", [1])
    conn.cursor.return_value.close.assert_called_once()
    pm.release.assert_called_once_with(conn, cfg)


@patch("dbroute.engines.statement.get_pool_manager")
def test_run_pooled_uses_shared_pool_manager(mock_get_pm: MagicMock) -> None:
    cfg = _make_config()
    conn = MagicMock()
    conn.cursor.return_value = _cursor([(1,)], ["n"])
    mock_get_pm.return_value = _pool_with(conn)

    assert run_pooled(cfg, "SELECT 1 AS n") == [{"n": 1}]
    mock_get_pm.return_value.release.assert_called_once_with(conn, cfg)


def test_run_pooled_releases_on_statement_failure() -> None:
    """Repeated failing calls must not leak connections."""
    cfg = _make_config()
    err = pymysql.err.ProgrammingError(1146, "Table 'db.missing' doesn't exist")
    conn = MagicMock()
    conn.cursor.return_value = _cursor(error=err)
    pm = _pool_with(conn)

    for _ in range(3):
        with pytest.raises(pymysql.err.ProgrammingError) as excinfo:
            run_pooled(cfg, "SELECT * FROM missing", pool_manager=pm)
        assert excinfo.value is err

    assert pm.get_connection.call_count == 3
    assert pm.release.call_count == 3


def test_run_pooled_acquire_failure_does_nothing_else() -> None:
    cfg = _make_config()
    err = pymysql.err.OperationalError(2003, "Can't connect")
    pm = MagicMock()
    pm.get_connection.side_effect = err

    with pytest.raises(pymysql.err.OperationalError) as excinfo:
        run_pooled(cfg, "SELECT 1", pool_manager=pm)

    assert excinfo.value is err
    pm.release.assert_not_called()


def test_run_pooled_dml_returns_empty_list() -> None:
    conn = MagicMock()
    conn.cursor.return_value = _cursor()
    pm = _pool_with(conn)

    assert run_pooled(_make_config(), "UPDATE t SET a = %s", [1], pool_manager=pm) == []


# --- direct ---


@patch("dbroute.engines.statement.connect")
def test_run_direct_returns_rows_and_closes(mock_connect: MagicMock) -> None:
    cfg = _make_config()
    conn = MagicMock()
    conn.cursor.return_value = _cursor([(1, "a")], ["id", "name"])
    mock_connect.return_value = conn

    out = run_direct(cfg, "SELECT * FROM t WHERE id=%s", [1])

    assert out == [{"id": 1, "name": "a"}]
    mock_connect.assert_called_once_with(cfg)
    conn.close.assert_called_once()


@patch("dbroute.engines.statement.connect")
def test_run_direct_closes_after_statement_settles(mock_connect: MagicMock) -> None:
    order: list[str] = []
    conn = MagicMock()
    cur = _cursor([(1,)], ["n"])
    cur.execute.side_effect = lambda *a: order.append("execute")
    cur.fetchall.side_effect = lambda: order.append("fetch") or [(1,)]
    conn.cursor.return_value = cur
    conn.close.side_effect = lambda: order.append("close")
    mock_connect.return_value = conn

    run_direct(_make_config(), "SELECT 1 AS n")

    assert order == ["execute", "fetch", "close"]


@patch("dbroute.engines.statement.connect")
def test_run_direct_closes_on_failure(mock_connect: MagicMock) -> None:
    err = pymysql.err.IntegrityError(1062, "Duplicate entry")
    conn = MagicMock()
    conn.cursor.return_value = _cursor(error=err)
    mock_connect.return_value = conn

    with pytest.raises(pymysql.err.IntegrityError) as excinfo:
        run_direct(_make_config(), "INSERT INTO t (id) VALUES (%s)", [1])

    assert excinfo.value is err
    conn.close.assert_called_once()


@patch("dbroute.engines.statement.connect")
def test_run_direct_close_error_does_not_replace_result(mock_connect: MagicMock) -> None:
    conn = MagicMock()
    conn.cursor.return_value = _cursor([(1,)], ["n"])
    conn.close.side_effect = pymysql.err.Error("already closed")
    mock_connect.return_value = conn

    assert run_direct(_make_config(), "SELECT 1 AS n") == [{"n": 1}]


@patch("dbroute.engines.statement.connect")
def test_run_direct_connect_failure_propagates(mock_connect: MagicMock) -> None:
    err = pymysql.err.OperationalError(1045, "Access denied")
    mock_connect.side_effect = err

    with pytest.raises(pymysql.err.OperationalError) as excinfo:
        run_direct(_make_config(), "SELECT 1")
    assert excinfo.value is err
