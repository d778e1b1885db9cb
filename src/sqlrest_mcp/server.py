"""FastMCP server implementation for sqlrest-mcp."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import dotenv
from fastmcp import FastMCP
from fastmcp.utilities.logging import get_logger
from starlette.requests import Request
from starlette.responses import JSONResponse

from sqlrest_mcp.execute.mcp_tools import register_execution_tools
from sqlrest_mcp.services.facade_manager import SqlRestManager

# Load environment variables
dotenv.load_dotenv()

_logger = get_logger(__name__)


# -- Context Manager for SqlRest facade --------------------------------------
@asynccontextmanager
async def lifespan(_mcp_instance: FastMCP) -> AsyncGenerator[None]:
    """FastMCP lifespan context manager that starts the database facade."""
    manager = SqlRestManager.get_instance()
    _logger.info("Starting SqlRest facade during lifespan startup")
    try:
        manager.start()
    except ValueError:
        _logger.exception("SqlRest facade could not be configured")
    try:
        yield
    finally:
        _logger.info("Shutting down SqlRest facade during lifespan shutdown")
        await manager.shutdown()


mcp = FastMCP(
    instructions=(
        "Executes parameterized SQL statements and stored procedures. Stored procedure "
        "parameters are discovered from the database catalog, so only the values you "
        "want to override need to be supplied."
    ),
    lifespan=lifespan,
)

# -- Tool Registration -------------------------------------------------------
register_execution_tools(mcp)


# -- Health Check ----------------------------------------------------------
@mcp.custom_route("/health", methods=["GET"])
async def health_check(_request: Request) -> JSONResponse:
    manager = SqlRestManager.get_instance()
    try:
        state = manager.get_facade().state
    except RuntimeError:
        return JSONResponse({"status": "unconfigured", "service": "sqlrest-mcp"}, status_code=503)
    return JSONResponse(
        {"status": "healthy", "service": "sqlrest-mcp", "database": state.phase.name.lower()}
    )
