"""
=============================================================================
PORTABLE SOCKET ENUMERATIONS
=============================================================================

The OS identifies address families, socket types and resolver flags with
small integers (AF_INET = 2, SOCK_STREAM = 1, ...). Those numbers differ
between platforms, so the rest of socketkit never looks at them directly.

Instead we use these portable enumerations, and translate at the edges
with the tables in codec.py:

    ┌──────────────────┐   codec.*_to_platform()   ┌──────────────────┐
    │  AddressFamily   │ ────────────────────────► │   socket.AF_*    │
    │  SocketType      │                           │   socket.SOCK_*  │
    │  SocketFlags     │ ◄──────────────────────── │   socket.AI_*    │
    │  SocketProtocol  │   codec.*_from_platform() │   0              │
    └──────────────────┘                           └──────────────────┘

The FIRST member of every enumeration is its default: unknown platform
values decode to it.
=============================================================================
"""

from enum import Enum


class SocketFlags(Enum):
    """Resolver flags recorded on each candidate."""
    PASSIVE = "passive"                  # Resolve for bind() on local interfaces
    CANONICAL_NAME = "canonical_name"    # Ask the resolver for the canonical hostname


class AddressFamily(Enum):
    """Address family of a candidate."""
    UNSPECIFIED = "unspecified"
    IPV4 = "ipv4"
    IPV6 = "ipv6"


class SocketType(Enum):
    """Transport semantics of a candidate."""
    STREAM = "stream"        # TCP: reliable, ordered, connection-based
    DATAGRAM = "datagram"    # UDP: message-based, connectionless


class SocketProtocol(Enum):
    """Protocol number. Only 'let the OS pick' is supported."""
    ANY = "any"


__all__ = ["SocketFlags", "AddressFamily", "SocketType", "SocketProtocol"]
