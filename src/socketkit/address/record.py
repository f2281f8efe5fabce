"""
=============================================================================
ADDRESS RECORDS AND CANDIDATE LISTS
=============================================================================

Name resolution usually returns SEVERAL ways to reach a service:

    getaddrinfo(None, "50007", AF_UNSPEC, SOCK_STREAM, 0, AI_PASSIVE)

    ┌───────┬──────────┬──────────┬────────┬────────────────────────────┐
    │ index │ family   │ type     │ port   │ address                    │
    ├───────┼──────────┼──────────┼────────┼────────────────────────────┤
    │   0   │ IPv4     │ stream   │ 50007  │ 0.0.0.0                    │
    │   1   │ IPv6     │ stream   │ 50007  │ ::                         │
    └───────┴──────────┴──────────┴────────┴────────────────────────────┘

Each row becomes one AddressRecord. The rows, in the exact order the
resolver produced them, form an AddressCandidateList. The caller inspects
the rows and picks one by index; we never pick a "best" one for them.

=============================================================================
BYTE ORDER
=============================================================================

Multi-byte integers have two possible layouts in memory:

    0x7F000001 (127.0.0.1)

    Network order (big-endian):    7F 00 00 01
    Host order on x86 (little):    01 00 00 7F

On the wire everything is network order. In an AddressRecord:

    port              host order integer
    ipv4_address      host order integer (127.0.0.1 == 0x7F000001)
    ipv6_address      16 raw bytes, network order (RFC 4291)
    ipv6_flow_info    integer, passed through untouched
    ipv6_scope_id     integer, passed through untouched

Only the address matching `family` is meaningful. The other one is
zero-filled.
=============================================================================
"""

import socket
import struct
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from ..errors import InvalidIndexError
from .types import AddressFamily, SocketFlags, SocketProtocol, SocketType


IPV6_ADDRESS_SIZE = 16
EMPTY_IPV6_ADDRESS = bytes(IPV6_ADDRESS_SIZE)


@dataclass(frozen=True)
class AddressRecord:
    """
    One resolvable network endpoint.

    Records are immutable. Build them from resolver output (see
    resolver.resolve) or from presentation strings:

        AddressRecord.ipv4("127.0.0.1", 50007)
        AddressRecord.ipv6("::1", 50007)

    Attributes:
        flags: Resolver flags the record was produced with.
        family: IPv4, IPv6 or unspecified.
        socket_type: Stream or datagram.
        protocol: Protocol number (always ANY).
        port: Port number in host byte order.
        ipv4_address: IPv4 address as a host-order 32-bit integer.
        ipv6_address: IPv6 address as 16 bytes in network order.
        ipv6_flow_info: IPv6 flow label (IPv6 only).
        ipv6_scope_id: IPv6 scope/interface id (IPv6 only).
        canonical_name: Canonical hostname, when requested and returned.
    """

    flags: SocketFlags = SocketFlags.PASSIVE
    family: AddressFamily = AddressFamily.UNSPECIFIED
    socket_type: SocketType = SocketType.STREAM
    protocol: SocketProtocol = SocketProtocol.ANY
    port: int = 0
    ipv4_address: int = 0
    ipv6_address: bytes = EMPTY_IPV6_ADDRESS
    ipv6_flow_info: int = 0
    ipv6_scope_id: int = 0
    canonical_name: Optional[str] = None

    def __post_init__(self):
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")
        if not 0 <= self.ipv4_address <= 0xFFFFFFFF:
            raise ValueError(f"Invalid IPv4 address: {self.ipv4_address:#x}")
        if len(self.ipv6_address) != IPV6_ADDRESS_SIZE:
            raise ValueError(
                f"IPv6 address must be {IPV6_ADDRESS_SIZE} bytes, got {len(self.ipv6_address)}"
            )
        # The flow label is 20 bits on the wire
        if not 0 <= self.ipv6_flow_info <= 0xFFFFF:
            raise ValueError(f"Invalid IPv6 flow info: {self.ipv6_flow_info}. Must be 0-1048575.")
        if not 0 <= self.ipv6_scope_id <= 0xFFFFFFFF:
            raise ValueError(f"Invalid IPv6 scope id: {self.ipv6_scope_id}")
        # Accept bytearray/memoryview but store an immutable copy
        if not isinstance(self.ipv6_address, bytes):
            object.__setattr__(self, "ipv6_address", bytes(self.ipv6_address))

    # =========================================================================
    # CONSTRUCTORS FROM PRESENTATION STRINGS
    # =========================================================================

    @classmethod
    def ipv4(
        cls,
        address: str,
        port: int,
        socket_type: SocketType = SocketType.STREAM,
    ) -> "AddressRecord":
        """Build an IPv4 record from dotted-quad text, e.g. "127.0.0.1"."""
        packed = socket.inet_pton(socket.AF_INET, address)
        return cls(
            family=AddressFamily.IPV4,
            socket_type=socket_type,
            port=port,
            ipv4_address=struct.unpack("!I", packed)[0],  # network -> host
        )

    @classmethod
    def ipv6(
        cls,
        address: str,
        port: int,
        socket_type: SocketType = SocketType.STREAM,
        flow_info: int = 0,
        scope_id: int = 0,
    ) -> "AddressRecord":
        """Build an IPv6 record from text, e.g. "::1"."""
        return cls(
            family=AddressFamily.IPV6,
            socket_type=socket_type,
            port=port,
            ipv6_address=socket.inet_pton(socket.AF_INET6, address),
            ipv6_flow_info=flow_info,
            ipv6_scope_id=scope_id,
        )

    # =========================================================================
    # PRESENTATION
    # =========================================================================

    @property
    def ipv4_text(self) -> str:
        """IPv4 address in dotted-quad form."""
        return socket.inet_ntop(socket.AF_INET, struct.pack("!I", self.ipv4_address))

    @property
    def ipv6_text(self) -> str:
        """IPv6 address in RFC 5952 text form."""
        return socket.inet_ntop(socket.AF_INET6, self.ipv6_address)

    @property
    def host(self) -> str:
        """Text form of whichever address the family selects."""
        if self.family is AddressFamily.IPV4:
            return self.ipv4_text
        return self.ipv6_text

    def __str__(self) -> str:
        if self.family is AddressFamily.IPV6:
            return f"[{self.ipv6_text}]:{self.port}"
        return f"{self.host}:{self.port}"


class AddressCandidateList:
    """
    Ordered, immutable list of AddressRecord.

    Order is exactly the resolver's order. No sorting, no deduplication.

        candidates = resolve("localhost", "50007")
        len(candidates)                      # how many
        candidates.get(5)                    # None if out of range
        candidates.select(0)                 # InvalidIndexError if out of range
        candidates.find(AddressFamily.IPV4)  # first IPv4 index, or None
    """

    def __init__(self, records: Iterable[AddressRecord] = ()):
        self._records: Tuple[AddressRecord, ...] = tuple(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[AddressRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> AddressRecord:
        return self._records[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, AddressCandidateList):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"AddressCandidateList({list(self._records)!r})"

    def get(self, index: int) -> Optional[AddressRecord]:
        """Return the record at index, or None when index is out of range."""
        if 0 <= index < len(self._records):
            return self._records[index]
        return None

    def select(self, index: int) -> AddressRecord:
        """
        Return the record at index.

        Raises:
            InvalidIndexError: index is negative or past the end.
        """
        record = self.get(index)
        if record is None:
            raise InvalidIndexError(index, len(self._records))
        return record

    def find(self, family: AddressFamily) -> Optional[int]:
        """Index of the first record with the given family, or None."""
        for index, record in enumerate(self._records):
            if record.family is family:
                return index
        return None


__all__ = ["AddressRecord", "AddressCandidateList", "IPV6_ADDRESS_SIZE", "EMPTY_IPV6_ADDRESS"]
