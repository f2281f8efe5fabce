"""
=============================================================================
LISTENING ENDPOINT (SERVER ROLE)
=============================================================================

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. setup()     getaddrinfo(None, port, AI_PASSIVE)
                   └─ Candidate addresses for "all local interfaces"

    2. start(i)    socket() + setsockopt() + bind() + listen()
                   └─ Uses candidate i, chosen by the caller

    3. accept()    Wait for and accept an incoming connection
                   └─ BLOCKS until a client connects
                   └─ Returns a NEW Connection just for that client
                   └─ This endpoint keeps listening

    4. close()     Release the listening socket

    ┌────────────┐ setup() ┌──────────┐ start(i) ┌───────────┐
    │ UNRESOLVED │────────►│ RESOLVED │─────────►│ LISTENING │◄──┐
    └────────────┘         └──────────┘          └─────┬─────┘   │
                                ▲                      │ accept()│
                                │      close()         └─────────┘
                                └────────────────────────┘

=============================================================================
SO_REUSEADDR
=============================================================================

Set unconditionally before bind(). Without it a restarted server sees
"Address already in use" while the old connections sit in TIME_WAIT:

    server.close()
    server.start(0)  # Error: Address already in use!

If the option cannot be set, start() fails.
=============================================================================
"""

import logging
import socket
from typing import Optional, Union

from ..address.codec import decode_sockaddr
from ..address.record import AddressCandidateList, AddressRecord
from ..address.resolver import GetAddrInfo, resolve
from ..address.types import SocketType
from ..config import EndpointConfig
from ..errors import (
    AcceptError,
    AlreadyBoundError,
    InvalidIndexError,
    ListenError,
    NotBoundError,
)
from .connection import Connection
from .endpoint import (
    EndpointRole,
    EndpointState,
    SocketFactory,
    bind_socket,
    close_socket,
    fileno_of,
    open_socket,
)


logger = logging.getLogger(__name__)


class ListeningEndpoint:
    """
    Server-role endpoint: bind, listen, accept.

    Usage:
        server = ListeningEndpoint()
        server.setup("50007")

        index = server.candidates.find(AddressFamily.IPV4)
        server.start(index)

        with server.accept() as conn:
            conn.send(conn.receive(4096))

        server.close()
    """

    role = EndpointRole.LISTENING

    def __init__(
        self,
        config: Optional[EndpointConfig] = None,
        socket_factory: SocketFactory = socket.socket,
        getaddrinfo: GetAddrInfo = socket.getaddrinfo,
    ):
        """
        Args:
            config: Backlog and setup defaults. EndpointConfig() if None.
            socket_factory: Creates sockets. Replaced in tests.
            getaddrinfo: The system resolver. Replaced in tests.
        """
        self.config = config or EndpointConfig()
        self._socket_factory = socket_factory
        self._getaddrinfo = getaddrinfo

        self._backlog = self.config.backlog
        self._candidates = AddressCandidateList()
        self._sock: Optional[socket.socket] = None
        self._bound: Optional[AddressRecord] = None

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def candidates(self) -> AddressCandidateList:
        return self._candidates

    @property
    def backlog(self) -> int:
        return self._backlog

    @backlog.setter
    def backlog(self, value: int):
        self._backlog = value

    @property
    def fileno(self) -> int:
        """Listening descriptor, or -1 when unbound."""
        return fileno_of(self._sock)

    @property
    def is_bound(self) -> bool:
        return self._sock is not None

    @property
    def bound_address(self) -> Optional[AddressRecord]:
        """The candidate the endpoint is bound to, None when unbound."""
        return self._bound

    @property
    def state(self) -> EndpointState:
        if self._sock is not None:
            return EndpointState.LISTENING
        if len(self._candidates):
            return EndpointState.RESOLVED
        return EndpointState.UNRESOLVED

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def setup(self, service: Union[str, int], socket_type: Optional[SocketType] = None) -> AddressCandidateList:
        """
        Resolve local candidate addresses for service.

        Closes the endpoint first if it is bound. On failure the previous
        candidates are kept.

        Returns:
            The new candidate list (also available as .candidates).

        Raises:
            ResolutionError
        """
        if self._sock is not None:
            self.close()

        self._candidates = resolve(
            None,
            service,
            socket_type=socket_type or self.config.socket_type,
            passive=True,
            canonical_name=self.config.canonical_name,
            getaddrinfo=self._getaddrinfo,
        )
        return self._candidates

    def start(self, index: int) -> None:
        """
        Bind candidate index and start listening.

        Raises:
            AlreadyBoundError: Already bound; the existing binding is kept.
            InvalidIndexError: index is out of range.
            SocketCreateError, OptionSetError, BindError, ListenError:
                The named step failed. The socket is closed and the
                endpoint is left unbound.
        """
        if self._sock is not None:
            logger.error("Server error: socket already bound")
            raise AlreadyBoundError(f"socket already bound to {self._bound}")

        record = self._candidates.get(index)
        if record is None:
            logger.error(f"Server error: invalid socket address index {index}")
            raise InvalidIndexError(index, len(self._candidates))

        sock = open_socket(record, self._socket_factory, self.role)

        # Closed on any failure, not only OSError
        try:
            bind_socket(sock, record)
            try:
                sock.listen(self._backlog)
            except OSError as e:
                logger.error(f"Server error: cannot start listening on {record}: {e}")
                raise ListenError(f"cannot start listening on {record}: {e}") from e
        except BaseException:
            sock.close()
            raise

        self._sock = sock
        self._bound = record
        logger.info(f"Listening on {record} (backlog {self._backlog})")

    def accept(self) -> Connection:
        """
        Wait for a client and return its Connection.

        BLOCKS until a client connects or the OS call fails.

        Raises:
            NotBoundError: start() has not succeeded.
            AcceptError: accept() failed. The endpoint keeps listening and
                         accept() can be called again.
        """
        if self._sock is None:
            logger.error("Server error: server not set")
            raise NotBoundError("server not set: call start() first")

        try:
            client_sock, client_address = self._sock.accept()
        except OSError as e:
            logger.error(f"Server error: accept() failed: {e}")
            raise AcceptError(f"accept() failed: {e}") from e

        peer = decode_sockaddr(
            client_sock.family,
            client_address,
            socket_type=self._bound.socket_type,
        )
        conn = Connection(sock=client_sock, peer=peer)
        logger.debug(f"[{conn.id}] Accepted connection from {peer}")
        return conn

    def local_address(self) -> Optional[AddressRecord]:
        """Decode the address the OS actually bound (resolves port 0)."""
        if self._sock is None:
            return None
        return decode_sockaddr(
            self._sock.family,
            self._sock.getsockname(),
            socket_type=self._bound.socket_type,
        )

    def close(self) -> None:
        """Close the listening socket. Safe to call more than once."""
        sock, self._sock = self._sock, None
        self._bound = None
        if sock is not None:
            close_socket(sock)
            logger.debug("Listening socket closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


__all__ = ["ListeningEndpoint"]
