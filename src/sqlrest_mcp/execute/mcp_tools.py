"""MCP tool registration for query and stored procedure execution.

Provides ``execute_query(sql, parameters)`` for ad-hoc parameterized SQL and
``execute_stored_procedure(procedure_name, schema, arguments)`` for stored
procedures whose parameters are discovered from the catalog. Both return the
fixed ``ExecutionResult`` wire shape.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastmcp import Context, FastMCP
from fastmcp.utilities.logging import get_logger
from pydantic import Field

from sqlrest_mcp.params.models import ParamValue, QueryParameter
from sqlrest_mcp.services.facade_manager import SqlRestManager

_logger = get_logger(__name__)


def register_execution_tools(mcp: FastMCP, *, manager: SqlRestManager | None = None) -> None:
    """Register the query and stored procedure execution tools."""

    mgr = manager or SqlRestManager.get_instance()

    @mcp.tool
    async def execute_query(
        ctx: Context,
        sql: Annotated[
            str,
            Field(description="SQL text; reference parameters as :name or @name"),
        ],
        parameters: Annotated[
            list[QueryParameter] | None,
            Field(
                description=(
                    "Parameters to bind, each {name, type, value}. type is a SQL type name "
                    "such as int, bigint, decimal, money, bit, nvarchar or datetime."
                )
            ),
        ] = None,
    ) -> dict[str, Any]:  # pyright: ignore[reportUnusedFunction]
        """Execute a parameterized SQL statement and return {success, error, data, pageSize}.

        On failure, message and errorDetail describe the problem.
        """
        try:
            facade = mgr.get_facade()
        except RuntimeError as exc:
            await ctx.error(f"Database facade not ready: {exc}")
            raise

        result = await facade.execute_query(sql, parameters or [])
        return result.to_wire()

    @mcp.tool
    async def execute_stored_procedure(
        ctx: Context,
        procedure_name: Annotated[
            str,
            Field(description="Stored procedure name without schema, e.g. GetUsers"),
        ],
        schema: Annotated[
            str | None,
            Field(description="Schema owning the procedure; defaults to dbo"),
        ] = None,
        arguments: Annotated[
            dict[str, ParamValue] | None,
            Field(
                description=(
                    "Argument values by parameter name (without @). Omitted parameters use "
                    "their defaults: start=0, limit=100, page=1, numbers 0, strings ''."
                )
            ),
        ] = None,
    ) -> dict[str, Any]:  # pyright: ignore[reportUnusedFunction]
        """Execute a stored procedure with parameters discovered from the catalog.

        Unknown argument names fail the call without executing anything.
        """
        try:
            facade = mgr.get_facade()
        except RuntimeError as exc:
            await ctx.error(f"Database facade not ready: {exc}")
            raise

        _logger.info("execute_stored_procedure tool: %s.%s", schema or "dbo", procedure_name)
        result = await facade.execute_stored_procedure(procedure_name, schema, arguments)
        return result.to_wire()

    _ = (execute_query, execute_stored_procedure)
