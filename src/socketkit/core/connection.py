"""
=============================================================================
CONNECTION: RELIABLE SEND, SINGLE-CALL RECEIVE
=============================================================================

A Connection is an established socket, produced by a successful accept()
or connect() (or created connectionless for datagrams). It owns its
socket exclusively and closes it exactly once.

=============================================================================
WHY send() LOOPS
=============================================================================

The OS send() call is allowed to accept FEWER bytes than you gave it.
When the kernel's send buffer is almost full, a 1 MB send might return
65536. The rest of your data is simply not sent.

    data = 1,000,000 bytes

    send(data[0:])        -> 65,536       sent so far:    65,536
    send(data[65536:])    -> 131,072      sent so far:   196,608
    send(data[196608:])   -> ...
    ...
    send(data[...:])      -> 12,345       sent so far: 1,000,000  done

Connection.send() keeps calling the OS with the remaining tail until all
of it is gone, so it returns either the full size or raises SendError.
No attempt limit, no backoff: each partial send is retried immediately.

=============================================================================
WHY receive() DOES NOT LOOP
=============================================================================

TCP is a byte stream. There is no way for this layer to know how many
bytes "a message" is, so receive() makes ONE recv() call and hands back
whatever arrived:

    receive(4096) -> b"Hello"         5 bytes arrived so far
    receive(4096) -> b" World"        the rest
    receive(4096) -> b""              peer closed the connection

Callers that need N bytes loop themselves until they have N.
=============================================================================
"""

import logging
import socket
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

from ..address.codec import decode_sockaddr, encode_sockaddr, socket_arguments, type_from_platform
from ..address.record import AddressRecord
from ..address.types import AddressFamily, SocketType
from ..errors import ReceiveError, SendError, SocketCreateError
from .endpoint import SocketFactory, bind_socket


logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Connection:
    """
    An established socket with reliable whole-buffer send.

    Attributes:
        sock: The owned socket. None once closed.
        peer: The remote endpoint. For a connecting client this is the
              candidate that was chosen, as resolved. None for a
              connectionless socket.
        id: Short identifier used in log messages.

    Usage:
        with endpoint.accept() as conn:
            data = conn.receive(4096)
            conn.send(data)
        # Socket closed here
    """

    sock: Optional[socket.socket]
    peer: Optional[AddressRecord] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def fileno(self) -> int:
        """OS descriptor, or -1 once closed."""
        if self.sock is None:
            return -1
        return self.sock.fileno()

    @property
    def is_closed(self) -> bool:
        return self.sock is None

    @property
    def family(self) -> AddressFamily:
        if self.peer is None:
            return AddressFamily.UNSPECIFIED
        return self.peer.family

    @property
    def port(self) -> int:
        if self.peer is None:
            return 0
        return self.peer.port

    @property
    def socket_type(self) -> SocketType:
        if self.peer is not None:
            return self.peer.socket_type
        if self.sock is None:
            return SocketType.STREAM
        return type_from_platform(self.sock.type)

    def local_address(self) -> Optional[AddressRecord]:
        """Decode the socket's own address (getsockname), None once closed."""
        if self.sock is None:
            return None
        return decode_sockaddr(
            self.sock.family,
            self.sock.getsockname(),
            socket_type=self.socket_type,
        )

    # =========================================================================
    # CONNECTIONLESS SOCKETS
    # =========================================================================

    @classmethod
    def connectionless(
        cls,
        record: AddressRecord,
        bind: bool = False,
        socket_factory: SocketFactory = socket.socket,
    ) -> "Connection":
        """
        Create a datagram socket of the record's family.

        Without bind, the socket is ready for send_to() and the OS picks
        the local port on first send. With bind, SO_REUSEADDR is set and
        the socket is bound to the record, which is how a datagram server
        receives with receive_from().

        Raises:
            SocketCreateError, OptionSetError, BindError
        """
        family, _, protocol = socket_arguments(record)

        try:
            sock = socket_factory(family, socket.SOCK_DGRAM, protocol)
        except OSError as e:
            logger.error(f"Datagram socket creation failed: {e}")
            raise SocketCreateError(f"file descriptor creation failed: {e}") from e

        if bind:
            try:
                bind_socket(sock, record)
            except BaseException:
                sock.close()
                raise

            logger.debug(f"Datagram socket bound to {record}")

        return cls(sock=sock)

    # =========================================================================
    # SENDING
    # =========================================================================

    def send(self, data: bytes) -> int:
        """
        Send ALL of data to the connected peer.

        Returns:
            len(data).

        Raises:
            SendError: The connection is closed (no OS call is made), or an
                       underlying send() failed. ``sent`` says how much
                       made it out before the failure.
        """
        return self._send_all(data, lambda chunk: self.sock.send(chunk), "send")

    def send_to(self, address: AddressRecord, data: bytes) -> int:
        """Send ALL of data to address. Same contract as send()."""
        sockaddr = encode_sockaddr(address)
        return self._send_all(data, lambda chunk: self.sock.sendto(chunk, sockaddr), "sendto")

    def _send_all(self, data: bytes, send_chunk: Callable[[memoryview], int], call: str) -> int:
        if self.sock is None:
            raise SendError("connection is closed")

        view = memoryview(data).cast("B")
        size = len(view)
        total = 0

        while total < size:
            try:
                total += send_chunk(view[total:])
            except OSError as e:
                logger.warning(f"[{self.id}] {call}() failed after {total} of {size} bytes: {e}")
                raise SendError(f"{call}() failed after {total} of {size} bytes: {e}", sent=total) from e

        return total

    # =========================================================================
    # RECEIVING
    # =========================================================================

    def receive(self, size: int) -> bytes:
        """
        One recv() call of at most size bytes.

        Returns:
            The bytes received. b"" means the peer closed the connection,
            or this connection is already closed (no OS call is made).

        Raises:
            ReceiveError: recv() failed.
        """
        if self.sock is None:
            return b""

        try:
            return self.sock.recv(size)
        except OSError as e:
            logger.warning(f"[{self.id}] recv() failed: {e}")
            raise ReceiveError(f"recv() failed: {e}") from e

    def receive_into(self, buffer, size: int = 0) -> int:
        """One recv_into() call. Returns the byte count, 0 when closed."""
        if self.sock is None:
            return 0

        try:
            return self.sock.recv_into(buffer, size)
        except OSError as e:
            logger.warning(f"[{self.id}] recv_into() failed: {e}")
            raise ReceiveError(f"recv_into() failed: {e}") from e

    def receive_from(self, size: int) -> Tuple[bytes, Optional[AddressRecord]]:
        """
        One recvfrom() call.

        Returns:
            (data, sender). sender is decoded into an AddressRecord.
            (b"", None) when this connection is closed.

        Raises:
            ReceiveError: recvfrom() failed.
        """
        if self.sock is None:
            return b"", None

        try:
            data, sockaddr = self.sock.recvfrom(size)
        except OSError as e:
            logger.warning(f"[{self.id}] recvfrom() failed: {e}")
            raise ReceiveError(f"recvfrom() failed: {e}") from e

        sender = decode_sockaddr(self.sock.family, sockaddr, socket_type=self.socket_type)
        return data, sender

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """Close the socket. Safe to call more than once."""
        if self.sock is None:
            return

        sock, self.sock = self.sock, None
        sock.close()
        logger.debug(f"[{self.id}] Connection closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions


__all__ = ["Connection"]
