"""Typed connection state for the execution facade.

The state is written exactly once, when the connection attempt resolves, and
only read afterwards. ``FAILED`` is terminal: there is no reconnect.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class ConnectionPhase(Enum):
    """Lifecycle phase of the facade's database connection."""

    CONNECTING = auto()
    CONNECTED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class ConnectionState:
    """Snapshot of connection state with timestamps and failure details."""

    phase: ConnectionPhase
    started_at: float | None = None
    completed_at: float | None = None
    error_type: str | None = None
    error_message: str | None = None
    error_detail: str | None = None

    @property
    def reason(self) -> str | None:
        """Failure reason when FAILED, otherwise None."""
        return self.error_message if self.phase is ConnectionPhase.FAILED else None
