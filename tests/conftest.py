"""
pytest configuration and fixtures.
"""

import errno
import socket
from typing import List, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class FakeSocket:
    """
    Stand-in for socket.socket that records every call.

    Args:
        fail: Names of methods that raise OSError when called.
        max_chunk: Largest number of bytes one send()/sendto() accepts,
                   to force partial writes.
        fail_after: send()/sendto() raise once this many bytes went out.
        fail_with: Exception type the failing methods raise (OSError with
                   EIO by default).
    """

    def __init__(self, family=socket.AF_INET, type=socket.SOCK_STREAM, proto=0,
                 fail=(), max_chunk: Optional[int] = None, fail_after: Optional[int] = None,
                 fail_with: type = OSError):
        self.family = family
        self.type = type
        self.proto = proto
        self.fail = set(fail)
        self.max_chunk = max_chunk
        self.fail_after = fail_after
        self.fail_with = fail_with

        self.calls: List[str] = []
        self.options = []
        self.bound_to = None
        self.connected_to = None
        self.backlog = None
        self.sent = bytearray()
        self.send_sizes: List[int] = []
        self.destinations = []
        self.incoming: list = []
        self.accept_queue: list = []
        self.sockname = ("0.0.0.0", 0)
        self.closed = False

    def _call(self, name: str):
        self.calls.append(name)
        if name in self.fail:
            if self.fail_with is OSError:
                raise OSError(errno.EIO, f"{name} failed")
            raise self.fail_with(f"{name} failed")

    def fileno(self) -> int:
        return -1 if self.closed else 42

    def setsockopt(self, level, option, value):
        self._call("setsockopt")
        self.options.append((level, option, value))

    def bind(self, address):
        self._call("bind")
        self.bound_to = address

    def listen(self, backlog):
        self._call("listen")
        self.backlog = backlog

    def connect(self, address):
        self._call("connect")
        self.connected_to = address

    def accept(self):
        self._call("accept")
        return self.accept_queue.pop(0)

    def _take(self, data) -> int:
        if self.fail_after is not None and len(self.sent) >= self.fail_after:
            raise OSError(errno.EPIPE, "Broken pipe")
        if self.max_chunk is not None:
            data = data[:self.max_chunk]
        chunk = bytes(data)
        if self.fail_after is not None:
            chunk = chunk[:self.fail_after - len(self.sent)]
        self.sent += chunk
        return len(chunk)

    def send(self, data) -> int:
        self._call("send")
        self.send_sizes.append(len(data))
        return self._take(data)

    def sendto(self, data, address) -> int:
        self._call("sendto")
        self.send_sizes.append(len(data))
        self.destinations.append(address)
        return self._take(data)

    def recv(self, size) -> bytes:
        self._call("recv")
        if not self.incoming:
            return b""
        return self.incoming.pop(0)[:size]

    def recv_into(self, buffer, size=0) -> int:
        self._call("recv_into")
        if not self.incoming:
            return 0
        data = self.incoming.pop(0)[:size or len(buffer)]
        buffer[:len(data)] = data
        return len(data)

    def recvfrom(self, size):
        self._call("recvfrom")
        data, address = self.incoming.pop(0)
        return data[:size], address

    def getsockname(self):
        return self.sockname

    def close(self):
        self.calls.append("close")
        self.closed = True


class FakeSocketFactory:
    """Callable replacing socket.socket; keeps every socket it created."""

    def __init__(self, **options):
        self.options = options
        self.created: List[FakeSocket] = []
        self.fail = False

    def __call__(self, family=socket.AF_INET, type=socket.SOCK_STREAM, proto=0):
        if self.fail:
            raise OSError(errno.EMFILE, "Too many open files")
        sock = FakeSocket(family, type, proto, **self.options)
        self.created.append(sock)
        return sock

    @property
    def last(self) -> FakeSocket:
        return self.created[-1]


class FakeGetAddrInfo:
    """Callable replacing socket.getaddrinfo with canned results."""

    def __init__(self, results=None, error: Optional[Exception] = None):
        self.results = results or []
        self.error = error
        self.calls = []

    def __call__(self, host, port, family=0, type=0, proto=0, flags=0):
        self.calls.append((host, port, family, type, proto, flags))
        if self.error is not None:
            raise self.error
        return list(self.results)


PASSIVE_RESULTS = [
    (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("0.0.0.0", 50007)),
    (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("::", 50007, 0, 0)),
]

LOCALHOST_RESULTS = [
    (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("::1", 50007, 0, 0)),
    (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("127.0.0.1", 50007)),
]


@pytest.fixture
def socket_factory() -> FakeSocketFactory:
    """Socket factory producing FakeSocket objects."""
    return FakeSocketFactory()


@pytest.fixture
def passive_getaddrinfo() -> FakeGetAddrInfo:
    """Resolver returning an IPv4 and an IPv6 wildcard candidate."""
    return FakeGetAddrInfo(PASSIVE_RESULTS)


@pytest.fixture
def localhost_getaddrinfo() -> FakeGetAddrInfo:
    """Resolver returning ::1 then 127.0.0.1."""
    return FakeGetAddrInfo(LOCALHOST_RESULTS)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]
