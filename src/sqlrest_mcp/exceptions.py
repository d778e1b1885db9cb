"""Custom exception hierarchy for sqlrest-mcp.

This module defines the errors raised while introspecting, binding and
executing statements. The facade converts every one of them into an
``ExecutionResult`` so callers never see a raw exception.

Exception Categories:
- Connection errors for the one-time connection attempt
- Metadata lookup errors for stored procedure introspection failures
- Unknown parameter errors for binding validation failures
- Execution errors for statements that failed at the database
"""

from __future__ import annotations


class SqlRestError(Exception):
    """Base exception for sqlrest-mcp operations.

    Carries a human-readable message plus an optional ``detail`` string with
    the full failure trace of the underlying cause.
    """

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class DatabaseConnectionError(SqlRestError):
    """Raised when the initial database connection attempt fails.

    This error is fatal for the facade instance that recorded it: every
    subsequent operation short-circuits with a "not connected" result.
    """

    error_type = "db_connection_error"


class MetadataLookupError(SqlRestError):
    """Raised when stored procedure introspection fails.

    This exception is raised when:
    - The catalog call itself fails (network, permission or catalog errors)
    - The catalog returns no rows for the requested procedure
    """


class UnknownParameterError(SqlRestError):
    """Raised when a caller supplies a parameter that cannot be bound.

    Covers argument names that the procedure does not declare and parameter
    types that do not map to a known canonical type.
    """


class ExecutionError(SqlRestError):
    """Raised when a query or stored procedure fails at the database."""
