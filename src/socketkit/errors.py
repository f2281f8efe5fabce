"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure this library detects is raised synchronously, at the call
that detected it, as a subclass of SocketKitError.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      WHERE EACH ERROR COMES FROM                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   resolve() / setup()     ResolutionError                            │
    │                                                                      │
    │   start() / connect()     InvalidIndexError   (bad candidate index)  │
    │                           AlreadyBoundError   (start twice)          │
    │                           SocketCreateError   socket()               │
    │                           OptionSetError      setsockopt()           │
    │                           BindError           bind()                 │
    │                           ListenError         listen()               │
    │                           ConnectError        connect()              │
    │                                                                      │
    │   accept()                NotBoundError       (not listening)        │
    │                           AcceptError         accept()               │
    │                                                                      │
    │   send() / send_to()      SendError           send() / sendto()      │
    │   receive*()              ReceiveError        recv() / recvfrom()    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

None of these are fatal. The caller decides whether to pick another
candidate, run setup again, or give up. There is no automatic retry
anywhere except the full-buffer loop inside send().

When an OS error caused the failure it is chained, so the original errno
is available as ``error.__cause__.errno``.
=============================================================================
"""

from typing import Optional


class SocketKitError(Exception):
    """Base class for every error raised by socketkit."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ResolutionError(SocketKitError):
    """
    Name resolution failed.

    Carries the resolver's diagnostic string as the message and the
    getaddrinfo error code (EAI_*) when one was reported.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class InvalidIndexError(SocketKitError):
    """The caller selected a candidate index outside the candidate list."""

    def __init__(self, index: int, count: int):
        super().__init__(f"invalid socket address index {index} (have {count} candidates)")
        self.index = index
        self.count = count


class AlreadyBoundError(SocketKitError):
    """start() was called on an endpoint that is already bound."""


class NotBoundError(SocketKitError):
    """accept() was called on an endpoint that is not listening."""


class SocketCreateError(SocketKitError):
    """The OS refused to create a socket for the chosen candidate."""


class OptionSetError(SocketKitError):
    """Setting a required socket option failed."""


class BindError(SocketKitError):
    """Binding the chosen address to the socket failed."""


class ListenError(SocketKitError):
    """The bound socket could not start listening."""


class AcceptError(SocketKitError):
    """accept() failed. The listening socket is still usable."""


class ConnectError(SocketKitError):
    """Connecting to the chosen candidate failed."""


class SendError(SocketKitError):
    """
    The send loop hit an unrecoverable failure.

    ``sent`` is how many bytes were delivered before the failure. It is
    always less than the requested size.
    """

    def __init__(self, message: str, sent: int = 0):
        super().__init__(message)
        self.sent = sent


class ReceiveError(SocketKitError):
    """An underlying recv()/recvfrom() call failed."""


__all__ = [
    "SocketKitError",
    "ResolutionError",
    "InvalidIndexError",
    "AlreadyBoundError",
    "NotBoundError",
    "SocketCreateError",
    "OptionSetError",
    "BindError",
    "ListenError",
    "AcceptError",
    "ConnectError",
    "SendError",
    "ReceiveError",
]
