"""Execution package: database client, result normalization and the SqlRest facade.

The FastMCP tool registration lives in ``sqlrest_mcp.execute.mcp_tools``.
"""

from __future__ import annotations

from .client import DatabaseClient, Recordset, SqlAlchemyClient
from .facade import SqlRest
from .normalizer import normalize

__all__ = [
    "DatabaseClient",
    "Recordset",
    "SqlAlchemyClient",
    "SqlRest",
    "normalize",
]
