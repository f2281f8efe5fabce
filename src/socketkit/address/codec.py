"""
=============================================================================
FAMILY CODEC: PORTABLE ENUMS <-> PLATFORM CONSTANTS
=============================================================================

Two jobs live here:

1. LOOKUP TABLES between our enums (types.py) and the integers the OS uses
   (socket.AF_INET, socket.SOCK_DGRAM, socket.AI_PASSIVE, ...).

2. SOCKADDR ENCODING between an AddressRecord and the address form the
   socket module passes to bind()/connect()/sendto():

       IPv4   ("127.0.0.1", 50007)
       IPv6   ("::1", 50007, flow_info, scope_id)

=============================================================================
LENIENT DEFAULTS
=============================================================================

Every function here is TOTAL. Nothing raises on an unknown value:

    family_from_platform(12345)        -> AddressFamily.UNSPECIFIED
    type_from_platform(socket.SOCK_RAW) -> SocketType.STREAM
    flags_from_platform(0)             -> SocketFlags.PASSIVE

Unknown platform values map to the first enumerator; unknown enumerators
map to the default platform constant. Callers rely on this, so do not turn
these into validation.

=============================================================================
BYTE ORDER DURING ENCODING
=============================================================================

    AddressRecord                          sockaddr tuple
    ─────────────                          ──────────────
    ipv4_address (host order int) ──htonl──► packed 4 bytes ──► "a.b.c.d"
    ipv6_address (16 bytes)       ─────────► verbatim       ──► "x:y::z"
    ipv6_flow_info                ─────────► verbatim
    ipv6_scope_id                 ─────────► verbatim
    port (host order int)         ─────────► port (the socket module
                                             applies htons itself)

Decoding is the exact inverse, so encode followed by decode returns the
original fields.
=============================================================================
"""

import socket
import struct
from typing import Any, Dict, Optional, Tuple

from .record import AddressRecord, EMPTY_IPV6_ADDRESS
from .types import AddressFamily, SocketFlags, SocketProtocol, SocketType


# ─────────────────────────────────────────────────────────────────────────────
# LOOKUP TABLES
# ─────────────────────────────────────────────────────────────────────────────

_FLAGS_TO_PLATFORM: Dict[SocketFlags, int] = {
    SocketFlags.PASSIVE: socket.AI_PASSIVE,
    SocketFlags.CANONICAL_NAME: socket.AI_CANONNAME,
}

_FAMILY_TO_PLATFORM: Dict[AddressFamily, int] = {
    AddressFamily.UNSPECIFIED: socket.AF_UNSPEC,
    AddressFamily.IPV4: socket.AF_INET,
    AddressFamily.IPV6: socket.AF_INET6,
}

_TYPE_TO_PLATFORM: Dict[SocketType, int] = {
    SocketType.STREAM: socket.SOCK_STREAM,
    SocketType.DATAGRAM: socket.SOCK_DGRAM,
}

_PROTOCOL_TO_PLATFORM: Dict[SocketProtocol, int] = {
    SocketProtocol.ANY: 0,
}

# Reverse tables. int() strips the socket module's IntEnum wrappers.
_FLAGS_FROM_PLATFORM = {int(v): k for k, v in _FLAGS_TO_PLATFORM.items()}
_FAMILY_FROM_PLATFORM = {int(v): k for k, v in _FAMILY_TO_PLATFORM.items()}
_TYPE_FROM_PLATFORM = {int(v): k for k, v in _TYPE_TO_PLATFORM.items()}
_PROTOCOL_FROM_PLATFORM = {int(v): k for k, v in _PROTOCOL_TO_PLATFORM.items()}


def _platform_key(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def flags_to_platform(flags: SocketFlags) -> int:
    return int(_FLAGS_TO_PLATFORM.get(flags, socket.AI_PASSIVE))


def flags_from_platform(value: int) -> SocketFlags:
    return _FLAGS_FROM_PLATFORM.get(_platform_key(value), SocketFlags.PASSIVE)


def family_to_platform(family: AddressFamily) -> int:
    return int(_FAMILY_TO_PLATFORM.get(family, socket.AF_UNSPEC))


def family_from_platform(value: int) -> AddressFamily:
    return _FAMILY_FROM_PLATFORM.get(_platform_key(value), AddressFamily.UNSPECIFIED)


def type_to_platform(socket_type: SocketType) -> int:
    return int(_TYPE_TO_PLATFORM.get(socket_type, socket.SOCK_STREAM))


def type_from_platform(value: int) -> SocketType:
    return _TYPE_FROM_PLATFORM.get(_platform_key(value), SocketType.STREAM)


def protocol_to_platform(protocol: SocketProtocol) -> int:
    return _PROTOCOL_TO_PLATFORM.get(protocol, 0)


def protocol_from_platform(value: int) -> SocketProtocol:
    return _PROTOCOL_FROM_PLATFORM.get(_platform_key(value), SocketProtocol.ANY)


def socket_arguments(record: AddressRecord) -> Tuple[int, int, int]:
    """The (family, type, proto) triple to create a socket for a record."""
    return (
        family_to_platform(record.family),
        type_to_platform(record.socket_type),
        protocol_to_platform(record.protocol),
    )


# ─────────────────────────────────────────────────────────────────────────────
# SOCKADDR ENCODING
# ─────────────────────────────────────────────────────────────────────────────

def encode_sockaddr(record: AddressRecord) -> tuple:
    """
    Encode a record into the address tuple bind()/connect()/sendto() take.

    IPv4 records produce (host, port). Every other family is encoded in
    the IPv6 form (host, port, flow_info, scope_id).
    """
    if record.family is AddressFamily.IPV4:
        packed = struct.pack("!I", record.ipv4_address)  # host -> network
        return (socket.inet_ntop(socket.AF_INET, packed), record.port)

    host = socket.inet_ntop(socket.AF_INET6, record.ipv6_address)
    return (host, record.port, record.ipv6_flow_info, record.ipv6_scope_id)


def decode_sockaddr(
    family: int,
    sockaddr: tuple,
    flags: SocketFlags = SocketFlags.PASSIVE,
    socket_type: SocketType = SocketType.STREAM,
    protocol: SocketProtocol = SocketProtocol.ANY,
    canonical_name: Optional[str] = None,
) -> AddressRecord:
    """
    Decode an address tuple returned by the OS into an AddressRecord.

    Args:
        family: Platform address family (socket.AF_*) of the tuple.
        sockaddr: Tuple from getaddrinfo(), accept(), recvfrom(),
                  getsockname() or getpeername().
        flags, socket_type, protocol, canonical_name: Copied onto the record.

    Families other than IPv4/IPv6 decode to a record with zero-filled
    address fields.
    """
    portable_family = family_from_platform(family)

    if portable_family is AddressFamily.IPV4:
        host, port = sockaddr[0], sockaddr[1]
        packed = socket.inet_pton(socket.AF_INET, host)
        return AddressRecord(
            flags=flags,
            family=portable_family,
            socket_type=socket_type,
            protocol=protocol,
            port=port,
            ipv4_address=struct.unpack("!I", packed)[0],  # network -> host
            canonical_name=canonical_name,
        )

    if portable_family is AddressFamily.IPV6:
        host, port, flow_info, scope_id = sockaddr[:4]
        # Link-local hosts may come back as "fe80::1%eth0"; the scope is
        # already carried by scope_id.
        host = host.split("%", 1)[0]
        return AddressRecord(
            flags=flags,
            family=portable_family,
            socket_type=socket_type,
            protocol=protocol,
            port=port,
            ipv6_address=socket.inet_pton(socket.AF_INET6, host),
            ipv6_flow_info=flow_info,
            ipv6_scope_id=scope_id,
            canonical_name=canonical_name,
        )

    return AddressRecord(
        flags=flags,
        family=portable_family,
        socket_type=socket_type,
        protocol=protocol,
        ipv6_address=EMPTY_IPV6_ADDRESS,
        canonical_name=canonical_name,
    )


__all__ = [
    "flags_to_platform",
    "flags_from_platform",
    "family_to_platform",
    "family_from_platform",
    "type_to_platform",
    "type_from_platform",
    "protocol_to_platform",
    "protocol_from_platform",
    "socket_arguments",
    "encode_sockaddr",
    "decode_sockaddr",
]
