"""Services package for sqlrest-mcp.

Main Components:
- ConfigService: Configuration and database engine creation
- ConnectionState: Typed, write-once connection state for the facade
- SqlRestManager: Process singleton (``services.facade_manager``) used by the server
"""

from .config_service import ConfigService
from .state import ConnectionPhase, ConnectionState

__all__ = [
    "ConfigService",
    "ConnectionPhase",
    "ConnectionState",
]
