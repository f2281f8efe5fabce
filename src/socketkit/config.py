"""
=============================================================================
ENDPOINT CONFIGURATION
=============================================================================

Centralized configuration for endpoints and the command-line tool.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m socketkit serve 50007 --backlog 64               │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── SOCKETKIT_BACKLOG=64 python -m socketkit serve 50007       │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There are deliberately no timeout settings: every call in socketkit
blocks until the OS answers.
=============================================================================
"""

import os
from dataclasses import dataclass

from .address.types import SocketType


_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class EndpointConfig:
    """
    Configuration shared by listening and connecting endpoints.

    Example:
        EndpointConfig(backlog=128, socket_type=SocketType.DATAGRAM)
    """

    backlog: int = 10
    """
    Maximum number of queued connections passed to listen().
    When the queue is full, new connections are refused.
    """

    socket_type: SocketType = SocketType.STREAM
    """Default socket type for setup() when the caller gives none."""

    canonical_name: bool = False
    """Ask the resolver to return canonical hostnames."""

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "EndpointConfig":
        """
        Create configuration from environment variables.

        SOCKETKIT_BACKLOG         listen() backlog (default: 10)
        SOCKETKIT_SOCKET_TYPE     "stream" or "datagram" (default: stream)
        SOCKETKIT_CANONICAL_NAME  request canonical names (default: off)
        SOCKETKIT_LOG_LEVEL       logging level (default: INFO)
        """
        return cls(
            backlog=int(os.getenv("SOCKETKIT_BACKLOG", "10")),
            socket_type=SocketType(os.getenv("SOCKETKIT_SOCKET_TYPE", "stream").lower()),
            canonical_name=os.getenv("SOCKETKIT_CANONICAL_NAME", "").lower() in _TRUE_VALUES,
            log_level=os.getenv("SOCKETKIT_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """Fail fast on values the OS would reject later."""
        if self.backlog < 0:
            raise ValueError(f"backlog must be >= 0, got {self.backlog}")

        if not isinstance(self.socket_type, SocketType):
            raise ValueError(f"socket_type must be a SocketType, got {self.socket_type!r}")

        if self.log_level.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {self.log_level}")


__all__ = ["EndpointConfig"]
