"""
=============================================================================
ADDRESS RESOLVER
=============================================================================

Turns (host, service) into an AddressCandidateList by asking the system
resolver (getaddrinfo).

    resolve(None, "50007", passive=True)        server: "all my interfaces"
    resolve("example.com", "http")              client: "where is this?"

=============================================================================
WHAT WE ASK GETADDRINFO FOR
=============================================================================

    getaddrinfo(host, service, family, type, proto, flags)
                               │       │     │      │
                               │       │     │      └─ AI_PASSIVE only for a
                               │       │     │         server with no host,
                               │       │     │         AI_CANONNAME on request
                               │       │     └──────── 0 = any
                               │       └────────────── stream or datagram
                               └────────────────────── AF_UNSPEC: give me
                                                       IPv4 AND IPv6

Each returned tuple (family, type, proto, canonname, sockaddr) is decoded
with codec.decode_sockaddr(), in order. Nothing from getaddrinfo escapes
this module.
=============================================================================
"""

import logging
import socket
from typing import Callable, Optional, Union

from ..errors import ResolutionError
from .codec import (
    decode_sockaddr,
    flags_from_platform,
    protocol_from_platform,
    type_from_platform,
    type_to_platform,
)
from .record import AddressCandidateList
from .types import SocketType


logger = logging.getLogger(__name__)

GetAddrInfo = Callable[..., list]


def resolve(
    host: Optional[str],
    service: Union[str, int],
    socket_type: SocketType = SocketType.STREAM,
    passive: bool = False,
    canonical_name: bool = False,
    getaddrinfo: GetAddrInfo = socket.getaddrinfo,
) -> AddressCandidateList:
    """
    Resolve every candidate address for a service.

    Args:
        host: Hostname or address text. None means "local interfaces".
        service: Service name ("http") or port, as text or int.
        socket_type: Stream or datagram candidates.
        passive: Resolve for binding. Only honored when host is None.
        canonical_name: Request the canonical hostname.
        getaddrinfo: The system resolver. Replaced in tests.

    Returns:
        Candidates in the order the resolver returned them.

    Raises:
        ResolutionError: The resolver failed; carries its diagnostic.
    """
    flags = 0
    if passive and host is None:
        flags |= socket.AI_PASSIVE
    if canonical_name:
        flags |= socket.AI_CANONNAME

    service = str(service)

    try:
        results = getaddrinfo(
            host,
            service,
            socket.AF_UNSPEC,
            type_to_platform(socket_type),
            0,
            flags,
        )
    except socket.gaierror as e:
        logger.error(f"Cannot resolve {host or '*'}:{service}: {e.strerror or e}")
        raise ResolutionError(e.strerror or str(e), code=e.errno) from e
    except ValueError as e:
        # IDNA encoding failures (UnicodeError) and embedded NULs are
        # rejected before the system resolver is reached
        logger.error(f"Cannot resolve {host!r}:{service}: {e}")
        raise ResolutionError(str(e)) from e

    record_flags = flags_from_platform(flags)
    records = []
    for family, kind, proto, canonname, sockaddr in results:
        records.append(
            decode_sockaddr(
                family,
                sockaddr,
                flags=record_flags,
                socket_type=type_from_platform(kind),
                protocol=protocol_from_platform(proto),
                canonical_name=canonname or None,
            )
        )

    candidates = AddressCandidateList(records)
    logger.debug(f"Resolved {host or '*'}:{service} to {len(candidates)} candidates")
    return candidates


__all__ = ["resolve"]
