"""
=============================================================================
CORE SOCKET COMPONENTS
=============================================================================

The socket lifecycle, once addresses are resolved:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       LISTENING ENDPOINT                             │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Passive resolve, bind one candidate, listen                      │
    │  • accept() blocks and returns one Connection per client            │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       CONNECTING ENDPOINT                            │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Resolve a remote host, connect to one candidate                  │
    │  • connect() returns the Connection                                 │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                           CONNECTION                                 │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • send(): every byte or SendError                                  │
    │  • receive(): one recv() call                                       │
    │  • send_to() / receive_from() for datagrams                         │
    └─────────────────────────────────────────────────────────────────────┘
=============================================================================
"""

from .connection import Connection
from .connector import ConnectingEndpoint
from .endpoint import EndpointRole, EndpointState
from .listener import ListeningEndpoint

__all__ = [
    "Connection",
    "ConnectingEndpoint",
    "ListeningEndpoint",
    "EndpointRole",
    "EndpointState",
]
