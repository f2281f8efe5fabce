"""
=============================================================================
SOCKETKIT CLI ENTRY POINT
=============================================================================

Small command-line front end, mostly useful for poking at what the
resolver returns and for checking that two hosts can talk.

=============================================================================
USAGE
=============================================================================

    # List candidate addresses
    python -m socketkit resolve 50007
    python -m socketkit resolve http --host example.com --canonical

    # Echo server on the first IPv4 candidate
    python -m socketkit serve 50007 --family ipv4

    # Send a message and print the echo
    python -m socketkit send 127.0.0.1 50007 "hello"

    # Same over UDP
    python -m socketkit serve 50007 --datagram
    python -m socketkit send 127.0.0.1 50007 "hello" --datagram

=============================================================================
"""

import argparse
import logging
import sys
from typing import Optional

from .address.record import AddressCandidateList
from .address.resolver import resolve
from .address.types import AddressFamily, SocketType
from .config import EndpointConfig
from .core.connection import Connection
from .core.connector import ConnectingEndpoint
from .core.listener import ListeningEndpoint
from .errors import SocketKitError


logger = logging.getLogger("socketkit")

BUFFER_SIZE = 4096


def _setup_logging(level_name: str):
    """Configure logging based on config."""
    level = getattr(logging, level_name.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("socketkit").setLevel(level)


def _choose(candidates: AddressCandidateList, index: Optional[int], family: Optional[str]) -> int:
    """Pick a candidate index from --index or --family (default: 0)."""
    if index is not None:
        return index
    if family is not None:
        found = candidates.find(AddressFamily(family))
        if found is None:
            raise SocketKitError(f"no {family} candidate among {len(candidates)} resolved addresses")
        return found
    return 0


def _print_candidates(candidates: AddressCandidateList):
    for i, record in enumerate(candidates):
        line = f"{i:>3}  {record.family.value:<11} {record.socket_type.value:<8} {record}"
        if record.family is AddressFamily.IPV6:
            line += f"  flow={record.ipv6_flow_info} scope={record.ipv6_scope_id}"
        if record.canonical_name:
            line += f"  ({record.canonical_name})"
        print(line)


# ─────────────────────────────────────────────────────────────────────────────
# COMMANDS
# ─────────────────────────────────────────────────────────────────────────────

def cmd_resolve(args, config: EndpointConfig) -> int:
    candidates = resolve(
        args.host,
        args.service,
        socket_type=config.socket_type,
        passive=args.host is None,
        canonical_name=config.canonical_name,
    )
    _print_candidates(candidates)
    return 0


def _echo_client(conn: Connection):
    """Echo one client until it disconnects. Errors end this client only."""
    logger.info(f"[{conn.id}] Client {conn.peer} connected")
    try:
        while True:
            data = conn.receive(BUFFER_SIZE)
            if not data:
                break
            conn.send(data)
    except SocketKitError as e:
        logger.warning(f"[{conn.id}] Client {conn.peer} dropped: {e.message}")
        return
    logger.info(f"[{conn.id}] Client {conn.peer} disconnected")


def cmd_serve(args, config: EndpointConfig) -> int:
    server = ListeningEndpoint(config)
    candidates = server.setup(args.port)
    index = _choose(candidates, args.index, args.family)
    record = candidates.select(index)

    if config.socket_type is SocketType.DATAGRAM:
        with Connection.connectionless(record, bind=True) as conn:
            print(f"Echoing datagrams on {record} (Ctrl+C to stop)")
            while True:
                try:
                    data, sender = conn.receive_from(BUFFER_SIZE)
                    logger.info(f"{len(data)} bytes from {sender}")
                    conn.send_to(sender, data)
                except SocketKitError as e:
                    logger.warning(f"Datagram echo failed: {e.message}")

    with server:
        server.start(index)
        print(f"Echo server listening on {server.local_address()} (Ctrl+C to stop)")

        while True:
            with server.accept() as conn:
                _echo_client(conn)


def cmd_send(args, config: EndpointConfig) -> int:
    client = ConnectingEndpoint(config)
    candidates = client.setup(args.host, args.port)
    index = _choose(candidates, args.index, args.family)
    payload = args.message.encode("utf-8")

    if config.socket_type is SocketType.DATAGRAM:
        record = candidates.select(index)
        with Connection.connectionless(record) as conn:
            conn.send_to(record, payload)
            data, _ = conn.receive_from(BUFFER_SIZE)
        print(data.decode("utf-8", errors="replace"))
        return 0

    with client, client.connect(index) as conn:
        conn.send(payload)
        received = b""
        while len(received) < len(payload):
            data = conn.receive(BUFFER_SIZE)
            if not data:
                break
            received += data

    print(received.decode("utf-8", errors="replace"))
    return 0 if received == payload else 1


# ─────────────────────────────────────────────────────────────────────────────
# ARGUMENT PARSING
# ─────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="socketkit",
        description="Resolve candidate socket addresses, serve and connect.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: SOCKETKIT_LOG_LEVEL or INFO)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--datagram",
        action="store_true",
        help="Use datagram (UDP) candidates instead of stream (TCP)",
    )

    choice = argparse.ArgumentParser(add_help=False)
    group = choice.add_mutually_exclusive_group()
    group.add_argument("--index", type=int, help="Candidate index to use")
    group.add_argument(
        "--family",
        choices=[AddressFamily.IPV4.value, AddressFamily.IPV6.value],
        help="Use the first candidate of this family",
    )

    p = commands.add_parser("resolve", parents=[common], help="List candidate addresses")
    p.add_argument("service", help="Service name or port")
    p.add_argument("--host", default=None, help="Remote host (default: local, passive)")
    p.add_argument("--canonical", action="store_true", help="Request canonical names")
    p.set_defaults(handler=cmd_resolve)

    p = commands.add_parser("serve", parents=[common, choice], help="Run an echo server")
    p.add_argument("port", help="Service name or port to listen on")
    p.add_argument("--backlog", type=int, default=None, help="listen() backlog")
    p.set_defaults(handler=cmd_serve)

    p = commands.add_parser("send", parents=[common, choice], help="Send a message, print the echo")
    p.add_argument("host", help="Remote host")
    p.add_argument("port", help="Service name or port")
    p.add_argument("message", help="Text to send")
    p.set_defaults(handler=cmd_send)

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = EndpointConfig.from_env()
        if args.log_level:
            config.log_level = args.log_level
        if args.datagram:
            config.socket_type = SocketType.DATAGRAM
        if getattr(args, "canonical", False):
            config.canonical_name = True
        if getattr(args, "backlog", None) is not None:
            config.backlog = args.backlog
        config.validate()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    _setup_logging(config.log_level)

    try:
        return args.handler(args, config)
    except SocketKitError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nStopped.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
