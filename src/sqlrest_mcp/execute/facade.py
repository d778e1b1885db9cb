"""Execution facade: the public entry point of sqlrest-mcp.

``SqlRest`` starts a one-time connection attempt when it is created and gates
every operation on its outcome. Queries bind caller-declared parameters
directly; stored procedures are introspected, bound by name and executed
against ``schema.name``. Every path returns an ``ExecutionResult``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
import contextlib
import time

from fastmcp.utilities.logging import get_logger
from sqlalchemy.exc import SQLAlchemyError

from sqlrest_mcp.exceptions import DatabaseConnectionError, SqlRestError
from sqlrest_mcp.execute.client import DatabaseClient, Recordset, SqlAlchemyClient, format_detail
from sqlrest_mcp.execute.normalizer import normalize
from sqlrest_mcp.models import ConnectionConfig, ExecutionResult
from sqlrest_mcp.params.binder import (
    bind_procedure_arguments,
    bind_query_parameters,
    executable_parameters,
    translate_placeholders,
)
from sqlrest_mcp.params.introspection import ProcedureIntrospector, qualified_name
from sqlrest_mcp.params.models import ParamValue, QueryParameter
from sqlrest_mcp.services.config_service import ConfigService
from sqlrest_mcp.services.state import ConnectionPhase, ConnectionState

_logger = get_logger(__name__)

MAX_SQL_DISPLAY = 200


def _preview(sql: str) -> str:
    return sql[:MAX_SQL_DISPLAY] + ("..." if len(sql) > MAX_SQL_DISPLAY else "")


class SqlRest:
    """Execute parameterized SQL and stored procedures with discovered signatures.

    The connection attempt starts on construction when an event loop is
    running, otherwise on the first awaited call. Operations always wait for
    it to resolve before touching the database.

    Attributes:
        config: Connection settings
        client: Database client; built from ``config`` when not injected
        page_size_field: Result column surfaced as ``pageSize``
        default_schema: Schema used when a procedure call names none
    """

    def __init__(
        self,
        config: ConnectionConfig | None = None,
        *,
        client: DatabaseClient | None = None,
        page_size_field: str | None = None,
        default_schema: str | None = None,
    ) -> None:
        self.config = config or ConnectionConfig()
        self.client: DatabaseClient | None = client
        self.page_size_field = page_size_field or ConfigService.page_size_field()
        self.default_schema = default_schema or ConfigService.default_schema()
        self._state = ConnectionState(phase=ConnectionPhase.CONNECTING, started_at=time.time())
        self._connect_task: asyncio.Task[ConnectionState] | None = None
        with contextlib.suppress(RuntimeError):
            self._connect_task = asyncio.get_running_loop().create_task(self._connect())

    # ---- connection ----------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        """Current connection state snapshot."""
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state.phase is ConnectionPhase.CONNECTED

    async def wait_until_connected(self) -> ConnectionState:
        """Await the connection attempt and return the resolved state."""
        if self._state.phase is not ConnectionPhase.CONNECTING:
            return self._state
        if self._connect_task is None:
            self._connect_task = asyncio.get_running_loop().create_task(self._connect())
        return await self._connect_task

    async def _connect(self) -> ConnectionState:
        try:
            await asyncio.to_thread(self._connect_sync)
        except Exception as exc:  # noqa: BLE001
            if isinstance(exc, DatabaseConnectionError):
                reason, detail = exc.message, exc.detail
            else:
                reason, detail = str(exc) or type(exc).__name__, format_detail(exc)
            self._state = ConnectionState(
                phase=ConnectionPhase.FAILED,
                started_at=self._state.started_at,
                completed_at=time.time(),
                error_type=DatabaseConnectionError.error_type,
                error_message=(
                    "Something went wrong when connecting to the database "
                    f"{self.config.display_name}: {reason}"
                ),
                error_detail=detail,
            )
            _logger.exception("Database connection failed (%s)", self._state.error_type)
        else:
            self._state = ConnectionState(
                phase=ConnectionPhase.CONNECTED,
                started_at=self._state.started_at,
                completed_at=time.time(),
            )
            _logger.info("Connected successfully to the server %s", self.config.server)
        return self._state

    def _connect_sync(self) -> None:
        if self.client is None:
            try:
                engine = ConfigService.create_database_engine(self.config.to_url())
            except (SQLAlchemyError, ImportError, ValueError) as exc:
                raise DatabaseConnectionError(str(exc), detail=format_detail(exc)) from exc
            self.client = SqlAlchemyClient(engine)
        self.client.connect()

    async def _require_client(self) -> DatabaseClient:
        """Return the connected client or raise the recorded connection failure."""
        state = await self.wait_until_connected()
        if state.phase is ConnectionPhase.FAILED or self.client is None:
            _logger.warning("Operation rejected: %s", state.error_type or "not connected")
            msg = f"Not connected to the database {self.config.display_name}"
            if state.reason:
                msg = f"{msg}. {state.reason}"
            raise DatabaseConnectionError(msg, detail=state.error_detail)
        return self.client

    async def close(self) -> None:
        """Dispose the database client resources."""
        if self.client is not None:
            await asyncio.to_thread(self.client.dispose)
            _logger.info("Database client disposed")

    # ---- operations ----------------------------------------------------------

    async def execute_query(
        self,
        sql: str,
        parameters: Iterable[QueryParameter | Mapping[str, ParamValue]] = (),
    ) -> ExecutionResult:
        """Execute an ad-hoc statement with caller-declared parameters."""
        _logger.info("execute_query: %s", _preview(sql))
        try:
            client = await self._require_client()
        except DatabaseConnectionError as exc:
            return self._normalize(None, exc)

        try:
            bound = bind_query_parameters(parameters)
            statement = translate_placeholders(sql, bound)
            recordsets = await asyncio.to_thread(client.execute_query, statement, bound)
        except (SqlRestError, SQLAlchemyError) as exc:
            _logger.warning("Query failed: %s", exc)
            return self._normalize(None, exc)

        _logger.info("Query finished (recordsets=%d)", len(recordsets))
        return self._normalize(recordsets)

    async def execute_stored_procedure(
        self,
        procedure_name: str,
        schema: str | None = None,
        arguments: Mapping[str, ParamValue] | None = None,
    ) -> ExecutionResult:
        """Introspect, bind and execute ``schema.procedure_name``."""
        schema = schema or self.default_schema
        target = qualified_name(procedure_name, schema)
        _logger.info("execute_stored_procedure: %s", target)
        try:
            client = await self._require_client()
        except DatabaseConnectionError as exc:
            return self._normalize(None, exc)

        introspector = ProcedureIntrospector(client)
        try:
            params = await asyncio.to_thread(introspector.introspect, procedure_name, schema)
            bound = bind_procedure_arguments(params, arguments, schema, procedure_name)
            recordsets = await asyncio.to_thread(
                client.execute_procedure, target, executable_parameters(bound)
            )
        except (SqlRestError, SQLAlchemyError) as exc:
            _logger.warning("Stored procedure %s failed: %s", target, exc)
            return self._normalize(None, exc)

        _logger.info("Stored procedure %s finished (recordsets=%d)", target, len(recordsets))
        return self._normalize(recordsets)

    def _normalize(
        self, recordsets: list[Recordset] | None, error: BaseException | None = None
    ) -> ExecutionResult:
        return normalize(recordsets, error, page_size_field=self.page_size_field)
