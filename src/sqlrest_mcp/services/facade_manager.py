"""Process-wide SqlRest facade manager.

Provides a singleton ``SqlRest`` created during the FastMCP lifespan. The
facade begins connecting immediately; tools await its connection state on
first use instead of blocking server startup.
"""

from __future__ import annotations

import threading
from typing import ClassVar

from fastmcp.utilities.logging import get_logger

from sqlrest_mcp.execute.facade import SqlRest
from sqlrest_mcp.models import ConnectionConfig
from sqlrest_mcp.services.config_service import ConfigService


class SqlRestManager:
    """Singleton manager for the SqlRest facade.

    This manager ensures the facade is created once per process and exposes
    it to the MCP tools for the whole server lifetime.
    """

    _instance: ClassVar[SqlRestManager | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        """Initialize the facade manager."""
        self._facade: SqlRest | None = None
        self._logger = get_logger(__name__)

    @classmethod
    def get_instance(cls) -> SqlRestManager:
        """Get the singleton instance of SqlRestManager."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (primarily for testing)."""
        with cls._lock:
            cls._instance = None

    def start(self, config: ConnectionConfig | None = None) -> SqlRest:
        """Create the facade exactly once and start its connection attempt.

        Raises:
            ValueError: If no configuration is passed and the environment
                does not describe a database
        """
        if self._facade is not None:
            self._logger.debug("SqlRest facade already started; reusing it")
            return self._facade
        resolved = config or ConfigService.get_connection_config()
        self._logger.info("Starting SqlRest facade for database %s", resolved.display_name)
        self._facade = SqlRest(resolved)
        return self._facade

    def get_facade(self) -> SqlRest:
        """Return the started facade.

        Raises:
            RuntimeError: If ``start`` has not been called
        """
        if self._facade is None:
            msg = "SqlRest facade has not been started"
            raise RuntimeError(msg)
        return self._facade

    async def shutdown(self) -> None:
        """Dispose the facade's database resources."""
        if self._facade is None:
            return
        try:
            await self._facade.close()
        except (OSError, RuntimeError) as exc:
            self._logger.warning("Error during SqlRest shutdown: %s", exc)
        finally:
            self._facade = None
