"""
Integration tests over real loopback sockets.
"""

import threading

import pytest

from socketkit.address.record import AddressRecord
from socketkit.address.types import AddressFamily, SocketType
from socketkit.core.connection import Connection
from socketkit.core.connector import ConnectingEndpoint
from socketkit.core.listener import ListeningEndpoint
from socketkit.errors import AlreadyBoundError, ConnectError


def pattern(size: int) -> bytes:
    return (b"0123456789abcdef" * (size // 16 + 1))[:size]


def receive_exactly(conn: Connection, size: int) -> bytes:
    received = bytearray()
    while len(received) < size:
        data = conn.receive(65536)
        if not data:
            break
        received += data
    return bytes(received)


def start_server(port) -> ListeningEndpoint:
    server = ListeningEndpoint()
    server.setup(str(port))
    server.start(server.candidates.find(AddressFamily.IPV4))
    return server


def connect_client(port) -> Connection:
    client = ConnectingEndpoint()
    client.setup("127.0.0.1", str(port))
    return client.connect(0)


class TestStreamLoopback:
    """Server and client in one process over 127.0.0.1."""

    def test_scenario_50007(self):
        """Resolve, bind, connect, accept, then move 10000 bytes."""
        with start_server(50007) as server:
            client = ConnectingEndpoint()
            client.setup("127.0.0.1", "50007")

            with client.connect(0) as outgoing, server.accept() as incoming:
                payload = pattern(10000)

                assert outgoing.send(payload) == 10000
                assert receive_exactly(incoming, 10000) == payload

    def test_accept_peer_matches_client_local_address(self, free_port):
        with start_server(free_port) as server:
            with connect_client(free_port) as outgoing, server.accept() as incoming:
                local = outgoing.local_address()

                assert incoming.peer.family is AddressFamily.IPV4
                assert incoming.peer.port == local.port
                assert incoming.peer.ipv4_address == local.ipv4_address
                assert incoming.peer == local

    def test_client_peer_is_resolved_candidate(self, free_port):
        with start_server(free_port):
            with connect_client(free_port) as outgoing:
                assert outgoing.peer == AddressRecord.ipv4("127.0.0.1", free_port)

    @pytest.mark.parametrize("size", [0, 1, 65536, 4 * 1024 * 1024])
    def test_large_payload_round_trip(self, free_port, size):
        payload = pattern(size)
        result = {}

        with start_server(free_port) as server:
            outgoing = connect_client(free_port)
            incoming = server.accept()

            def reader():
                result["data"] = receive_exactly(incoming, size)

            thread = threading.Thread(target=reader, daemon=True)
            thread.start()

            with outgoing:
                assert outgoing.send(payload) == size
            thread.join(timeout=30)
            incoming.close()

        assert result["data"] == payload

    def test_peer_close_reads_empty(self, free_port):
        with start_server(free_port) as server:
            outgoing = connect_client(free_port)
            with server.accept() as incoming:
                outgoing.close()
                assert incoming.receive(10) == b""

    def test_start_twice_keeps_first_binding(self, free_port):
        with start_server(free_port) as server:
            fileno = server.fileno

            with pytest.raises(AlreadyBoundError):
                server.start(0)

            assert server.fileno == fileno
            with connect_client(free_port), server.accept() as incoming:
                assert not incoming.is_closed

    def test_close_twice_and_rebind(self, free_port):
        server = start_server(free_port)

        server.close()
        server.close()
        assert not server.is_bound
        assert server.fileno == -1

        server.start(server.candidates.find(AddressFamily.IPV4))
        assert server.is_bound
        server.close()

    def test_connect_refused(self, free_port):
        client = ConnectingEndpoint()
        client.setup("127.0.0.1", free_port)

        with pytest.raises(ConnectError):
            client.connect(0)

        assert client.fileno == -1


class TestDatagramLoopback:
    """Connectionless send_to / receive_from over 127.0.0.1."""

    def test_round_trip(self):
        local = AddressRecord.ipv4("127.0.0.1", 0, socket_type=SocketType.DATAGRAM)

        with Connection.connectionless(local, bind=True) as server:
            address = server.local_address()

            with Connection.connectionless(address) as client:
                assert client.send_to(address, b"ping") == 4

                data, sender = server.receive_from(1500)
                assert data == b"ping"
                assert sender.ipv4_text == "127.0.0.1"

                server.send_to(sender, b"pong")
                reply, origin = client.receive_from(1500)

        assert reply == b"pong"
        assert origin.port == address.port
