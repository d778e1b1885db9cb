"""Database client used by the execution facade.

``DatabaseClient`` is the narrow seam between the parameter engine and the
driver: connect once, describe a stored procedure, and run a statement with
typed bind parameters. ``SqlAlchemyClient`` implements it on top of a
SQLAlchemy engine; tests substitute an in-memory client.

All methods are synchronous; the facade runs them in worker threads.
"""

from __future__ import annotations

from collections.abc import Sequence
import traceback
from typing import Any, Protocol

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa
from sqlalchemy.engine import CursorResult, Engine
from sqlalchemy.exc import SQLAlchemyError

from sqlrest_mcp.exceptions import DatabaseConnectionError, ExecutionError, MetadataLookupError
from sqlrest_mcp.params.models import ParameterSpec
from sqlrest_mcp.params.types import sqlalchemy_type_for

_logger = get_logger(__name__)

Row = dict[str, Any]
Recordset = list[Row]

CATALOG_PROCEDURE = "sp_sproc_columns"


class DatabaseClient(Protocol):
    """Minimal driver interface required by the facade."""

    def connect(self) -> None:
        """Open and verify the connection; raise DatabaseConnectionError on failure."""
        ...

    def describe_procedure(self, procedure_name: str, schema: str) -> list[Row]:
        """Return one catalog row per procedure parameter (COLUMN_NAME, TYPE_NAME)."""
        ...

    def execute_query(self, sql: str, parameters: Sequence[ParameterSpec]) -> list[Recordset]:
        """Run an ad-hoc statement and return every recordset it produced."""
        ...

    def execute_procedure(
        self, qualified_name: str, parameters: Sequence[ParameterSpec]
    ) -> list[Recordset]:
        """Run a stored procedure and return every recordset it produced."""
        ...

    def dispose(self) -> None:
        """Release driver resources."""
        ...


def format_detail(exc: BaseException) -> str:
    """Return the full traceback text for *exc*."""
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def _bind_clauses(parameters: Sequence[ParameterSpec]) -> list[sa.BindParameter[Any]]:
    return [
        sa.bindparam(spec.name, spec.value, type_=sqlalchemy_type_for(spec.param_type))
        for spec in parameters
    ]


def procedure_call(quoted_name: str, names: Sequence[str], *, nocount: bool = False) -> str:
    """Build the ``EXEC`` statement passing each parameter by name as a bind."""
    assignments = ", ".join(f"@{name} = :{name}" for name in names)
    call = f"EXEC {quoted_name} {assignments}".rstrip()
    # Row counts from inner statements would otherwise hide the first recordset
    if nocount:
        call = f"SET NOCOUNT ON; {call}"
    return call


def _collect_recordsets(result: CursorResult[Any]) -> list[Recordset]:
    """Drain every result set from the DBAPI cursor behind *result*."""
    cursor = result.cursor
    if cursor is None or not result.returns_rows:
        result.close()
        return []

    recordsets: list[Recordset] = []
    while True:
        if cursor.description:
            columns = [col[0] for col in cursor.description]
            recordsets.append([dict(zip(columns, row, strict=False)) for row in cursor.fetchall()])
        # sqlite3 cursors expose a single result set and no nextset()
        nextset = getattr(cursor, "nextset", None)
        if nextset is None or not nextset():
            break
    result.close()
    return recordsets


class SqlAlchemyClient:
    """``DatabaseClient`` backed by a SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def connect(self) -> None:
        _logger.debug("Testing database connectivity (dialect=%s)…", self.dialect_name)
        try:
            with self.engine.connect() as conn:
                conn.execute(sa.text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            raise DatabaseConnectionError(str(exc), detail=format_detail(exc)) from exc

    def describe_procedure(self, procedure_name: str, schema: str) -> list[Row]:
        # @fUsePattern = 0: "_" and "%" in names match literally
        stmt = sa.text(
            f"EXEC {CATALOG_PROCEDURE} "
            "@procedure_name = :procedure_name, @procedure_owner = :procedure_owner, "
            "@fUsePattern = 0"
        ).bindparams(
            sa.bindparam("procedure_name", procedure_name, type_=sa.Unicode),
            sa.bindparam("procedure_owner", schema, type_=sa.Unicode),
        )
        try:
            with self.engine.connect() as conn:
                return [dict(row) for row in conn.execute(stmt).mappings()]
        except SQLAlchemyError as exc:
            raise MetadataLookupError(str(exc), detail=format_detail(exc)) from exc

    def execute_query(self, sql: str, parameters: Sequence[ParameterSpec]) -> list[Recordset]:
        return self._run(sql, parameters)

    def execute_procedure(
        self, qualified_name: str, parameters: Sequence[ParameterSpec]
    ) -> list[Recordset]:
        call = procedure_call(
            self._quote_qualified(qualified_name),
            [spec.name for spec in parameters],
            nocount=self.dialect_name == "mssql",
        )
        return self._run(call, parameters)

    def dispose(self) -> None:
        self.engine.dispose()

    # ---- internal ------------------------------------------------------------

    def _quote_qualified(self, qualified_name: str) -> str:
        preparer = self.engine.dialect.identifier_preparer
        return ".".join(preparer.quote(part) for part in qualified_name.split("."))

    def _run(self, sql: str, parameters: Sequence[ParameterSpec]) -> list[Recordset]:
        try:
            stmt = sa.text(sql).bindparams(*_bind_clauses(parameters))
            with self.engine.begin() as conn:
                return _collect_recordsets(conn.execute(stmt))
        except SQLAlchemyError as exc:
            raise ExecutionError(str(exc), detail=format_detail(exc)) from exc
