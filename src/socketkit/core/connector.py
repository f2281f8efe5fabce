"""
=============================================================================
CONNECTING ENDPOINT (CLIENT ROLE)
=============================================================================

SOCKET LIFECYCLE (Client Side):
────────────────────────────────

    1. setup()       getaddrinfo(host, port)
                     └─ No AI_PASSIVE: the OS picks our local address

    2. connect(i)    socket() + connect() to candidate i
                     └─ BLOCKS until the handshake completes or fails

    ┌────────────┐ setup() ┌──────────┐ connect(i) ┌───────────┐
    │ UNRESOLVED │────────►│ RESOLVED │───────────►│ CONNECTED │
    └────────────┘         └────┬─────┘            └───────────┘
                                │ connect(i) fails
                                ▼
                           ┌──────────┐
                           │  FAILED  │ ── connect(j) may try another
                           └──────────┘    candidate

The returned Connection reports the peer exactly as it was resolved. We
already know who we dialed, so the OS is not asked again.

=============================================================================
OWNERSHIP
=============================================================================

On success the socket is handed to the Connection. From then on only the
Connection closes it, so the endpoint's fileno goes back to -1 and
close() on the endpoint never touches the connected socket.
=============================================================================
"""

import logging
import socket
from typing import Optional, Union

from ..address.codec import encode_sockaddr
from ..address.record import AddressCandidateList
from ..address.resolver import GetAddrInfo, resolve
from ..address.types import SocketType
from ..config import EndpointConfig
from ..errors import ConnectError, InvalidIndexError, SocketCreateError
from .connection import Connection
from .endpoint import EndpointRole, EndpointState, SocketFactory, close_socket, fileno_of, open_socket


logger = logging.getLogger(__name__)


class ConnectingEndpoint:
    """
    Client-role endpoint: resolve a remote host, connect to one candidate.

    Usage:
        client = ConnectingEndpoint()
        client.setup("127.0.0.1", "50007")

        with client.connect(0) as conn:
            conn.send(b"hello")
            reply = conn.receive(4096)
    """

    role = EndpointRole.CONNECTING

    def __init__(
        self,
        config: Optional[EndpointConfig] = None,
        socket_factory: SocketFactory = socket.socket,
        getaddrinfo: GetAddrInfo = socket.getaddrinfo,
    ):
        self.config = config or EndpointConfig()
        self._socket_factory = socket_factory
        self._getaddrinfo = getaddrinfo

        self._candidates = AddressCandidateList()
        self._sock: Optional[socket.socket] = None
        self._state = EndpointState.UNRESOLVED

    @property
    def candidates(self) -> AddressCandidateList:
        return self._candidates

    @property
    def fileno(self) -> int:
        return fileno_of(self._sock)

    @property
    def state(self) -> EndpointState:
        return self._state

    def setup(
        self,
        host: str,
        service: Union[str, int],
        socket_type: Optional[SocketType] = None,
    ) -> AddressCandidateList:
        """
        Resolve candidate addresses for host/service.

        Raises:
            ResolutionError: The previous candidates are kept.
        """
        self._candidates = resolve(
            host,
            service,
            socket_type=socket_type or self.config.socket_type,
            passive=False,
            canonical_name=self.config.canonical_name,
            getaddrinfo=self._getaddrinfo,
        )
        self._state = EndpointState.RESOLVED
        return self._candidates

    def connect(self, index: int) -> Connection:
        """
        Connect to candidate index.

        Returns:
            A Connection owning the connected socket.

        Raises:
            InvalidIndexError: index is out of range (no OS call is made).
            SocketCreateError: The socket could not be created (state FAILED).
            ConnectError: connect() failed; the socket is closed and the
                          endpoint can try again.
        """
        record = self._candidates.get(index)
        if record is None:
            logger.error(f"Client error: invalid socket address index {index}")
            raise InvalidIndexError(index, len(self._candidates))

        try:
            self._sock = open_socket(record, self._socket_factory, self.role)
        except SocketCreateError:
            self._state = EndpointState.FAILED
            raise

        try:
            self._sock.connect(encode_sockaddr(record))
        except OSError as e:
            self._abandon()
            logger.error(f"Client error: cannot connect to {record}: {e}")
            raise ConnectError(f"cannot connect to {record}: {e}") from e
        except BaseException:
            self._abandon()
            raise

        sock, self._sock = self._sock, None
        self._state = EndpointState.CONNECTED

        conn = Connection(sock=sock, peer=record)
        logger.debug(f"[{conn.id}] Connected to {record}")
        return conn

    def _abandon(self) -> None:
        """Drop the half-made socket after a failed connect."""
        self.close()
        self._state = EndpointState.FAILED

    def close(self) -> None:
        """Close any socket still owned by the endpoint. Idempotent."""
        sock, self._sock = self._sock, None
        close_socket(sock)
        self._state = EndpointState.RESOLVED if len(self._candidates) else EndpointState.UNRESOLVED

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


__all__ = ["ConnectingEndpoint"]
