"""Configuration service for sqlrest-mcp.

This module provides configuration management and database engine creation
for the sqlrest-mcp application. It centralizes environment variable handling
so the facade and the server read settings the same way.
"""

from __future__ import annotations

import os

import sqlalchemy as sa

from sqlrest_mcp.models import ConnectionConfig
from sqlrest_mcp.params.introspection import DEFAULT_SCHEMA

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class ConfigService:
    """Service for managing configuration and database connections."""

    @staticmethod
    def get_connection_config() -> ConnectionConfig:
        """Build the connection configuration from environment variables.

        ``SQLREST_DATABASE_URL`` takes precedence; otherwise the individual
        ``SQLREST_DB_*`` variables describe a SQL Server connection.

        Raises:
            ValueError: If neither a URL nor a server/database pair is set
        """
        url = os.getenv("SQLREST_DATABASE_URL")
        server = os.getenv("SQLREST_DB_SERVER")
        database = os.getenv("SQLREST_DB_NAME")
        if not url and not (server and database):
            error_msg = (
                "Set SQLREST_DATABASE_URL, or SQLREST_DB_SERVER and SQLREST_DB_NAME, "
                "to configure the database connection"
            )
            raise ValueError(error_msg)

        port_raw = os.getenv("SQLREST_DB_PORT", "1433")
        try:
            port = int(port_raw)
        except ValueError:
            port = 1433

        return ConnectionConfig(
            user=os.getenv("SQLREST_DB_USER"),
            password=os.getenv("SQLREST_DB_PASSWORD"),
            server=server or "localhost",
            database=database or "",
            port=port,
            encrypt=os.getenv("SQLREST_DB_ENCRYPT", "false").strip().lower() in _TRUE_VALUES,
            driver=os.getenv("SQLREST_DB_DRIVER", "ODBC Driver 18 for SQL Server"),
            url=url or None,
        )

    @staticmethod
    def create_database_engine(url: sa.URL | str) -> sa.Engine:
        """Create SQLAlchemy database engine.

        Args:
            url: Database connection URL

        Returns:
            SQLAlchemy Engine instance
        """
        return sa.create_engine(url, pool_pre_ping=True)

    @staticmethod
    def page_size_field() -> str:
        """Column name carrying in-band pagination metadata in result rows."""
        return os.getenv("SQLREST_PAGE_SIZE_FIELD", "NUMREGISTROS").strip() or "NUMREGISTROS"

    @staticmethod
    def default_schema() -> str:
        """Schema used when a stored procedure call does not name one."""
        return os.getenv("SQLREST_DEFAULT_SCHEMA", DEFAULT_SCHEMA).strip() or DEFAULT_SCHEMA
