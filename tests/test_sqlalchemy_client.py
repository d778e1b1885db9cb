from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Any

import pytest
import sqlalchemy as sa
from sqlalchemy import event, text
from sqlalchemy.pool import StaticPool

from sqlrest_mcp.exceptions import DatabaseConnectionError, ExecutionError, MetadataLookupError
from sqlrest_mcp.execute.client import SqlAlchemyClient, procedure_call
from sqlrest_mcp.execute.facade import SqlRest
from sqlrest_mcp.models import ConnectionConfig
from sqlrest_mcp.params.models import ParameterSpec
from sqlrest_mcp.params.types import CanonicalParamType
from sqlrest_mcp.services.state import ConnectionPhase


def _mk_engine() -> sa.Engine:
    # One shared connection so worker threads see the same in-memory database
    return sa.create_engine(
        "sqlite+pysqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


def _setup_sqlite(engine: sa.Engine) -> None:
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE users("
                "id INTEGER PRIMARY KEY, name TEXT, active INTEGER, balance NUMERIC)"
            )
        )
        conn.execute(
            text(
                "INSERT INTO users(name, active, balance) VALUES "
                "('Alice', 1, 10.5), ('Bob', 0, 0), ('Charlie', 1, 3)"
            )
        )


def test_execute_query_with_typed_parameters() -> None:
    engine = _mk_engine()
    _setup_sqlite(engine)
    client = SqlAlchemyClient(engine)

    recordsets = client.execute_query(
        "SELECT id, name FROM users WHERE active = :active AND name <> :skip ORDER BY id",
        [
            ParameterSpec(name="active", param_type=CanonicalParamType.BIT, value=1),
            ParameterSpec(name="skip", param_type=CanonicalParamType.TEXT, value="Charlie"),
        ],
    )

    assert recordsets == [[{"id": 1, "name": "Alice"}]]


def test_execute_query_decimal_and_write_statements() -> None:
    engine = _mk_engine()
    _setup_sqlite(engine)
    client = SqlAlchemyClient(engine)

    inserted = client.execute_query(
        "INSERT INTO users(name, active, balance) VALUES (:name, 1, :balance)",
        [
            ParameterSpec(name="name", param_type=CanonicalParamType.TEXT, value="Dana"),
            ParameterSpec(
                name="balance", param_type=CanonicalParamType.DECIMAL, value=Decimal("7.25")
            ),
        ],
    )
    rows = client.execute_query("SELECT balance FROM users WHERE name = 'Dana'", [])

    assert inserted == []
    assert rows == [[{"balance": 7.25}]]


def test_execute_query_failure_is_wrapped() -> None:
    client = SqlAlchemyClient(_mk_engine())

    with pytest.raises(ExecutionError, match="no such table"):
        client.execute_query("SELECT * FROM missing", [])


def test_undeclared_bind_name_is_wrapped() -> None:
    client = SqlAlchemyClient(_mk_engine())

    with pytest.raises(ExecutionError):
        client.execute_query(
            "SELECT 1",
            [ParameterSpec(name="ghost", param_type=CanonicalParamType.INT, value=1)],
        )


def test_connect_failure_is_wrapped() -> None:
    engine = sa.create_engine("sqlite+pysqlite:////nonexistent-dir/sub/db.sqlite")
    client = SqlAlchemyClient(engine)

    with pytest.raises(DatabaseConnectionError) as excinfo:
        client.connect()

    assert excinfo.value.detail is not None


def test_procedure_name_parts_are_quoted_when_needed() -> None:
    client = SqlAlchemyClient(_mk_engine())

    assert client._quote_qualified("dbo.getusers") == "dbo.getusers"
    assert client._quote_qualified("my schema.Get Users") == '"my schema"."Get Users"'


def test_facade_runs_queries_against_engine() -> None:
    engine = _mk_engine()
    _setup_sqlite(engine)
    facade = SqlRest(
        ConnectionConfig(database="memory"),
        client=SqlAlchemyClient(engine),
        page_size_field="NUMREGISTROS",
    )

    result = asyncio.run(
        facade.execute_query(
            "SELECT name, (SELECT COUNT(*) FROM users) AS NUMREGISTROS FROM users "
            "WHERE id <= :max_id ORDER BY id",
            [{"name": "max_id", "type": "bigint", "value": 2}],
        )
    )

    assert result.success is True
    assert result.page_size == 3
    assert result.data == [
        [{"name": "Alice", "NUMREGISTROS": 3}, {"name": "Bob", "NUMREGISTROS": 3}]
    ]


def test_facade_builds_engine_from_url() -> None:
    facade = SqlRest(ConnectionConfig(url="sqlite+pysqlite://"), page_size_field="NUMREGISTROS")

    result = asyncio.run(facade.execute_query("SELECT 1 AS one"))

    assert facade.state.phase is ConnectionPhase.CONNECTED
    assert result.data == [[{"one": 1}]]


def test_facade_with_unusable_url_fails_once() -> None:
    facade = SqlRest(ConnectionConfig(url="nosuchdialect://x"), page_size_field="NUMREGISTROS")

    result = asyncio.run(facade.execute_stored_procedure("GetUsers"))

    assert facade.state.phase is ConnectionPhase.FAILED
    assert result.error is True
    assert result.message is not None
    assert result.message.startswith("Not connected to the database")


def _capture_exec_statements(engine: sa.Engine) -> list[tuple[str, tuple[Any, ...]]]:
    """Record every EXEC statement sent to the DBAPI cursor."""
    captured: list[tuple[str, tuple[Any, ...]]] = []

    @event.listens_for(engine, "before_cursor_execute")
    def _record(
        conn: Any, cursor: Any, statement: str, parameters: Any, context: Any, executemany: bool
    ) -> None:
        if "EXEC" in statement:
            captured.append((statement, tuple(parameters or ())))

    return captured


def test_describe_procedure_matches_name_exactly() -> None:
    engine = _mk_engine()
    captured = _capture_exec_statements(engine)
    client = SqlAlchemyClient(engine)

    # SQLite has no EXEC; the statement is still sent before failing
    with pytest.raises(MetadataLookupError):
        client.describe_procedure("usp_GetUser", "dbo")

    assert captured == [
        (
            "EXEC sp_sproc_columns @procedure_name = ?, @procedure_owner = ?, @fUsePattern = 0",
            ("usp_GetUser", "dbo"),
        )
    ]


@pytest.mark.parametrize(
    "qualified,params,expected_sql,expected_args",
    [
        ("dbo.ping", [], "EXEC dbo.ping", ()),
        (
            "dbo.getusers",
            [ParameterSpec(name="start", param_type=CanonicalParamType.INT, value=0)],
            "EXEC dbo.getusers @start = ?",
            (0,),
        ),
        (
            "sales.FindOrders",
            [
                ParameterSpec(name="start", param_type=CanonicalParamType.INT, value=0),
                ParameterSpec(name="limit", param_type=CanonicalParamType.INT, value=100),
                ParameterSpec(name="customer", param_type=CanonicalParamType.TEXT, value="ACME"),
            ],
            'EXEC sales."FindOrders" @start = ?, @limit = ?, @customer = ?',
            (0, 100, "ACME"),
        ),
    ],
)
def test_execute_procedure_sends_named_assignments(
    qualified: str,
    params: list[ParameterSpec],
    expected_sql: str,
    expected_args: tuple[Any, ...],
) -> None:
    engine = _mk_engine()
    captured = _capture_exec_statements(engine)
    client = SqlAlchemyClient(engine)

    with pytest.raises(ExecutionError):
        client.execute_procedure(qualified, params)

    assert captured == [(expected_sql, expected_args)]


def test_procedure_call_nocount_prefix() -> None:
    assert procedure_call("[dbo].[GetUsers]", ["start", "limit"], nocount=True) == (
        "SET NOCOUNT ON; EXEC [dbo].[GetUsers] @start = :start, @limit = :limit"
    )
    assert procedure_call("[dbo].[Ping]", [], nocount=True) == "SET NOCOUNT ON; EXEC [dbo].[Ping]"
    assert procedure_call("dbo.ping", []) == "EXEC dbo.ping"


def test_facade_translates_at_sign_parameters_for_engine() -> None:
    engine = _mk_engine()
    _setup_sqlite(engine)
    facade = SqlRest(
        ConnectionConfig(database="memory"),
        client=SqlAlchemyClient(engine),
        page_size_field="NUMREGISTROS",
    )

    result = asyncio.run(
        facade.execute_query(
            "SELECT name FROM users WHERE id = @id",
            [{"name": "id", "type": "int", "value": 2}],
        )
    )

    assert result.success is True
    assert result.data == [[{"name": "Bob"}]]
