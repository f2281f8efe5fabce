"""
=============================================================================
SOCKETKIT - Address Resolution and Socket Lifecycle
=============================================================================

Resolve every candidate address for a service, pick one, and run the
bind/listen/accept or connect sequence against it.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    socketkit/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m socketkit)
    ├── config.py            # EndpointConfig dataclass
    ├── errors.py            # Error taxonomy
    ├── address/             # Naming endpoints
    │   ├── types.py         # Portable enums
    │   ├── codec.py         # Enum <-> platform tables, sockaddr codec
    │   ├── record.py        # AddressRecord, AddressCandidateList
    │   └── resolver.py      # resolve()
    └── core/                # Sockets
        ├── endpoint.py      # Shared endpoint plumbing
        ├── listener.py      # ListeningEndpoint (server)
        ├── connector.py     # ConnectingEndpoint (client)
        └── connection.py    # Connection (I/O)

=============================================================================
QUICK START
=============================================================================

    from socketkit import ListeningEndpoint, ConnectingEndpoint, AddressFamily

    server = ListeningEndpoint()
    server.setup("50007")
    server.start(server.candidates.find(AddressFamily.IPV4))

    client = ConnectingEndpoint()
    client.setup("127.0.0.1", "50007")
    outgoing = client.connect(0)

    incoming = server.accept()
    outgoing.send(b"hello")
    incoming.receive(4096)          # b"hello"

=============================================================================
"""

__version__ = "1.0.0"

from .address import (
    AddressCandidateList,
    AddressFamily,
    AddressRecord,
    SocketFlags,
    SocketProtocol,
    SocketType,
    resolve,
)
from .config import EndpointConfig
from .core import ConnectingEndpoint, Connection, ListeningEndpoint
from .errors import SocketKitError

__all__ = [
    "AddressCandidateList",
    "AddressFamily",
    "AddressRecord",
    "SocketFlags",
    "SocketProtocol",
    "SocketType",
    "resolve",
    "EndpointConfig",
    "ConnectingEndpoint",
    "Connection",
    "ListeningEndpoint",
    "SocketKitError",
    "__version__",
]
