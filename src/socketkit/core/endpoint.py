"""
=============================================================================
SHARED ENDPOINT PLUMBING
=============================================================================

ListeningEndpoint (server) and ConnectingEndpoint (client) are separate
classes with no common base. What they share lives here as plain
functions and small enums:

    ┌────────────────────────┐          ┌────────────────────────┐
    │   ListeningEndpoint    │          │   ConnectingEndpoint   │
    │   role = LISTENING     │          │   role = CONNECTING    │
    │                        │          │                        │
    │   candidates ──────────┼──┐    ┌──┼────────── candidates   │
    │   _sock                │  │    │  │                _sock   │
    └───────────┬────────────┘  │    │  └────────────┬───────────┘
                │               ▼    ▼               │
                │       AddressCandidateList         │
                │                                    │
                └──────► open_socket()  ◄────────────┘
                         close_socket()

Each endpoint owns at most one socket. fileno == -1 means "no socket".
=============================================================================
"""

import logging
import socket
from enum import Enum
from typing import Callable, Optional

from ..address.codec import encode_sockaddr, socket_arguments
from ..address.record import AddressRecord
from ..errors import BindError, OptionSetError, SocketCreateError


logger = logging.getLogger(__name__)

SocketFactory = Callable[..., socket.socket]


class EndpointRole(Enum):
    LISTENING = "listening"
    CONNECTING = "connecting"


class EndpointState(Enum):
    """
    Lifecycle states.

        Server:  UNRESOLVED -> RESOLVED -> LISTENING -> close() -> RESOLVED
        Client:  UNRESOLVED -> RESOLVED -> CONNECTED | FAILED
    """
    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"
    LISTENING = "listening"
    CONNECTED = "connected"
    FAILED = "failed"


def open_socket(record: AddressRecord, socket_factory: SocketFactory, role: EndpointRole) -> socket.socket:
    """
    Create a socket matching a candidate's family, type and protocol.

    Raises:
        SocketCreateError: The OS refused.
    """
    family, kind, protocol = socket_arguments(record)
    try:
        return socket_factory(family, kind, protocol)
    except OSError as e:
        logger.error(f"{role.value} endpoint: file descriptor creation failed: {e}")
        raise SocketCreateError(f"file descriptor creation failed: {e}") from e


def bind_socket(sock: socket.socket, record: AddressRecord) -> None:
    """
    Set SO_REUSEADDR and bind sock to a candidate.

    The socket is left open on failure; the caller closes it.

    Raises:
        OptionSetError, BindError
    """
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    except OSError as e:
        logger.error(f"setsockopt(SO_REUSEADDR) failed: {e}")
        raise OptionSetError(f"setsockopt() failed: {e}") from e

    try:
        sock.bind(encode_sockaddr(record))
    except OSError as e:
        logger.error(f"Failed to bind {record}: {e}")
        raise BindError(f"error while binding {record} to the socket: {e}") from e


def close_socket(sock: Optional[socket.socket]) -> None:
    """Close sock if there is one. None is a no-op."""
    if sock is not None:
        sock.close()


def fileno_of(sock: Optional[socket.socket]) -> int:
    if sock is None:
        return -1
    return sock.fileno()


__all__ = ["EndpointRole", "EndpointState", "open_socket", "bind_socket", "close_socket", "fileno_of"]
