"""sqlrest-mcp package for parameterized SQL and stored procedure execution.

Discovers stored procedure parameter signatures from the database catalog,
binds caller values onto them and returns one uniform result envelope. A
FastMCP server exposes the operations as tools.
"""

from sqlrest_mcp.exceptions import (
    DatabaseConnectionError,
    ExecutionError,
    MetadataLookupError,
    SqlRestError,
    UnknownParameterError,
)
from sqlrest_mcp.execute import SqlRest
from sqlrest_mcp.models import ConnectionConfig, ExecutionResult
from sqlrest_mcp.params import CanonicalParamType, QueryParameter, map_type, resolve_default

__all__ = [  # noqa: RUF022
    # Facade and models
    "SqlRest",
    "ConnectionConfig",
    "ExecutionResult",
    "QueryParameter",
    # Parameter engine
    "CanonicalParamType",
    "map_type",
    "resolve_default",
    # Errors
    "SqlRestError",
    "DatabaseConnectionError",
    "MetadataLookupError",
    "UnknownParameterError",
    "ExecutionError",
]
