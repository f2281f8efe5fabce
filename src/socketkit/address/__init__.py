"""
=============================================================================
ADDRESS LAYER
=============================================================================

Everything about naming endpoints, before any socket exists:

    types.py      Portable enums (family, type, flags, protocol)
    codec.py      Enum <-> platform constant tables, sockaddr encode/decode
    record.py     AddressRecord, AddressCandidateList
    resolver.py   resolve(): getaddrinfo -> AddressCandidateList
=============================================================================
"""

from .types import AddressFamily, SocketFlags, SocketProtocol, SocketType
from .record import AddressCandidateList, AddressRecord
from .codec import decode_sockaddr, encode_sockaddr
from .resolver import resolve

__all__ = [
    "AddressFamily",
    "SocketFlags",
    "SocketProtocol",
    "SocketType",
    "AddressRecord",
    "AddressCandidateList",
    "encode_sockaddr",
    "decode_sockaddr",
    "resolve",
]
