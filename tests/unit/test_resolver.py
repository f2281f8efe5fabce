"""
Unit tests for address resolution.
"""

import socket

import pytest

from conftest import FakeGetAddrInfo

from socketkit.address.resolver import resolve
from socketkit.address.types import AddressFamily, SocketFlags, SocketType
from socketkit.errors import ResolutionError


class TestResolveHints:
    """Tests for what resolve() asks getaddrinfo for."""

    def test_passive_without_host(self, passive_getaddrinfo):
        resolve(None, "50007", passive=True, getaddrinfo=passive_getaddrinfo)

        host, port, family, kind, proto, flags = passive_getaddrinfo.calls[0]
        assert host is None
        assert port == "50007"
        assert family == socket.AF_UNSPEC
        assert kind == socket.SOCK_STREAM
        assert proto == 0
        assert flags == socket.AI_PASSIVE

    def test_passive_ignored_with_host(self, localhost_getaddrinfo):
        """Test AI_PASSIVE is only set when there is no host."""
        resolve("localhost", "50007", passive=True, getaddrinfo=localhost_getaddrinfo)

        assert localhost_getaddrinfo.calls[0][5] == 0

    def test_client_has_no_flags(self, localhost_getaddrinfo):
        resolve("localhost", "50007", getaddrinfo=localhost_getaddrinfo)

        assert localhost_getaddrinfo.calls[0][5] == 0

    def test_datagram_and_canonical_name(self, localhost_getaddrinfo):
        resolve(
            "localhost",
            "53",
            socket_type=SocketType.DATAGRAM,
            canonical_name=True,
            getaddrinfo=localhost_getaddrinfo,
        )

        _, _, _, kind, _, flags = localhost_getaddrinfo.calls[0]
        assert kind == socket.SOCK_DGRAM
        assert flags == socket.AI_CANONNAME

    def test_integer_port_converted(self, localhost_getaddrinfo):
        resolve("localhost", 50007, getaddrinfo=localhost_getaddrinfo)

        assert localhost_getaddrinfo.calls[0][1] == "50007"


class TestResolveResults:
    """Tests for translating getaddrinfo output."""

    def test_order_preserved(self, localhost_getaddrinfo):
        candidates = resolve("localhost", "50007", getaddrinfo=localhost_getaddrinfo)

        assert len(candidates) == 2
        assert candidates[0].family is AddressFamily.IPV6
        assert candidates[0].ipv6_text == "::1"
        assert candidates[1].family is AddressFamily.IPV4
        assert candidates[1].ipv4_address == 0x7F000001

    def test_fields_translated(self, passive_getaddrinfo):
        candidates = resolve(None, "50007", passive=True, getaddrinfo=passive_getaddrinfo)

        for record in candidates:
            assert record.port == 50007
            assert record.socket_type is SocketType.STREAM
            assert record.flags is SocketFlags.PASSIVE
            assert record.canonical_name is None

    def test_ipv6_flow_and_scope_kept(self):
        getaddrinfo = FakeGetAddrInfo([
            (socket.AF_INET6, socket.SOCK_DGRAM, 17, "", ("fe80::1", 5353, 7, 2)),
        ])

        record = resolve("fe80::1%2", "5353", getaddrinfo=getaddrinfo)[0]

        assert record.socket_type is SocketType.DATAGRAM
        assert record.ipv6_flow_info == 7
        assert record.ipv6_scope_id == 2

    def test_canonical_name_only_where_returned(self):
        getaddrinfo = FakeGetAddrInfo([
            (socket.AF_INET, socket.SOCK_STREAM, 6, "host.example.com", ("192.0.2.1", 80)),
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("192.0.2.2", 80)),
        ])

        candidates = resolve("host", "80", canonical_name=True, getaddrinfo=getaddrinfo)

        assert candidates[0].canonical_name == "host.example.com"
        assert candidates[0].flags is SocketFlags.CANONICAL_NAME
        assert candidates[1].canonical_name is None

    def test_empty_result(self):
        candidates = resolve("host", "80", getaddrinfo=FakeGetAddrInfo([]))
        assert len(candidates) == 0


class TestResolveErrors:
    """Tests for resolver failures."""

    def test_gaierror_becomes_resolution_error(self):
        error = socket.gaierror(socket.EAI_NONAME, "Name or service not known")
        getaddrinfo = FakeGetAddrInfo(error=error)

        with pytest.raises(ResolutionError) as exc_info:
            resolve("no.such.host.invalid", "80", getaddrinfo=getaddrinfo)

        assert exc_info.value.message == "Name or service not known"
        assert exc_info.value.code == socket.EAI_NONAME
        assert exc_info.value.__cause__ is error

    @pytest.mark.parametrize("error", [
        UnicodeError("encoding with 'idna' codec failed (UnicodeError: label empty or too long)"),
        ValueError("embedded null character"),
    ])
    def test_host_encoding_error_becomes_resolution_error(self, error):
        getaddrinfo = FakeGetAddrInfo(error=error)

        with pytest.raises(ResolutionError) as exc_info:
            resolve("bad\x00host", "80", getaddrinfo=getaddrinfo)

        assert exc_info.value.message == str(error)
        assert exc_info.value.code is None
        assert exc_info.value.__cause__ is error

    def test_label_too_long_with_system_resolver(self):
        """Test an over-long IDNA label never escapes as a UnicodeError."""
        with pytest.raises(ResolutionError):
            resolve("a" * 64 + ".example", "80")


class TestResolveSystem:
    """Tests against the real system resolver (numeric hosts only)."""

    def test_numeric_ipv4(self):
        candidates = resolve("127.0.0.1", "50007")

        assert len(candidates) >= 1
        record = candidates[0]
        assert record.family is AddressFamily.IPV4
        assert record.ipv4_text == "127.0.0.1"
        assert record.port == 50007
        assert record.socket_type is SocketType.STREAM

    def test_passive_has_wildcard(self):
        candidates = resolve(None, "50007", passive=True)

        index = candidates.find(AddressFamily.IPV4)
        assert index is not None
        assert candidates[index].ipv4_address == 0
