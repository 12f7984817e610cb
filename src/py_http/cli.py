"""Command-line front end — a tiny ``curl``.

    py-http [-X METHOD] [-H "Key: Value"]... [-d DATA] [-i] [-v]
            [--resolve HOST:ADDR]... URL

This module keeps argument handling and output formatting separate from
the client.  The helpers (``parse_header_arg``, ``parse_resolve_arg``,
``format_output``) are pure and testable; ``main()`` is the thin I/O
entrypoint that returns a process exit code.
"""

import argparse
import ipaddress
import sys
from collections.abc import Sequence
from typing import TextIO

from py_http.client import HttpClient
from py_http.config import ClientConfig, ConfigError
from py_http.io.dns import DnsError, DnsResolver
from py_http.io.http import Header, HttpMethod, HttpResponse, ResponseError
from py_http.io.transport import TcpTransport, TransportError
from py_http.io.url import UrlError
from py_http.logging import Logger

EXIT_OK = 0
EXIT_FAILURE = 1


def parse_header_arg(text: str) -> Header:
    """Split a ``"Key: Value"`` argument into a header pair.

    Raises:
        argparse.ArgumentTypeError: If there is no colon or no key.

    """
    name, colon, value = text.partition(":")
    name = name.strip()
    if not colon or not name:
        msg = f"header must look like 'Key: Value', got {text!r}"
        raise argparse.ArgumentTypeError(msg)
    return name, value.strip()


def parse_resolve_arg(text: str) -> tuple[str, str]:
    """Split a ``"HOST:ADDR"`` argument into a hostname and an IP address.

    The split is at the first colon, so IPv6 addresses such as
    ``api.test:::1`` work.

    Raises:
        argparse.ArgumentTypeError: If there is no colon, no host, or the
            address is not a literal IPv4 or IPv6 address.

    """
    host, colon, address = text.partition(":")
    if not colon or not host:
        msg = f"resolve entry must look like 'HOST:ADDR', got {text!r}"
        raise argparse.ArgumentTypeError(msg)
    try:
        ipaddress.ip_address(address)
    except ValueError as e:
        msg = f"resolve address must be an IP address, got {address!r}"
        raise argparse.ArgumentTypeError(msg) from e
    return host, address


def build_resolver(entries: Sequence[tuple[str, str]]) -> DnsResolver:
    """Return a resolver with one static record per ``--resolve`` entry.

    Raises:
        DnsError: If the same host is given twice.

    """
    resolver = DnsResolver()
    for host, address in entries:
        resolver.register(host, address)
    return resolver


def format_output(response: HttpResponse, *, include_headers: bool = False) -> str:
    """Render a response for the terminal.

    The body is decoded as UTF-8, replacing undecodable bytes.  With
    *include_headers* the status line and headers come first, followed
    by a blank line.
    """
    body = response.body.decode(errors="replace")
    if not include_headers:
        return body
    lines = [f"{response.version} {response.status} {response.reason}"]
    lines.extend(f"{name}: {value}" for name, value in response.headers)
    return "\n".join(lines) + "\n\n" + body


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``py-http``."""
    parser = argparse.ArgumentParser(prog="py-http", description="Send one HTTP/1.1 request.")
    parser.add_argument("url", help="http:// or https:// URL")
    parser.add_argument(
        "-X",
        "--request",
        dest="method",
        type=HttpMethod,
        choices=list(HttpMethod),
        default=HttpMethod.GET,
        help="request method (default: GET)",
    )
    parser.add_argument(
        "-H",
        "--header",
        dest="headers",
        type=parse_header_arg,
        action="append",
        default=[],
        help="extra header, repeatable",
    )
    parser.add_argument("-d", "--data", default="", help="request body")
    parser.add_argument(
        "-i", "--include", action="store_true", help="print status line and headers"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="print the event log")
    parser.add_argument(
        "--resolve",
        dest="resolve",
        metavar="HOST:ADDR",
        type=parse_resolve_arg,
        action="append",
        default=[],
        help="connect to ADDR whenever HOST is requested, repeatable",
    )
    return parser


def _print_log(logger: Logger, stream: TextIO) -> None:
    for entry in logger.entries:
        print(entry, file=stream)


def main(argv: Sequence[str] | None = None) -> int:
    """Run one request from command-line arguments.

    Configuration comes from ``PY_HTTP_*`` environment variables.  A
    ``Connection: close`` header is added unless the caller sent their
    own ``Connection`` header, so bodies without a length still end.

    Returns:
        0 on success, 1 if the URL, transport, or response failed.

    """
    args = build_parser().parse_args(argv)

    try:
        config = ClientConfig.from_env()
        resolver = build_resolver(args.resolve)
    except (ConfigError, DnsError) as e:
        print(f"py-http: {e}", file=sys.stderr)
        return EXIT_FAILURE

    headers: list[Header] = list(args.headers)
    if not any(name.lower() == "connection" for name, _ in headers):
        headers.append(("Connection", "close"))

    transport = TcpTransport(resolver=resolver, timeout=config.timeout)
    client = HttpClient(transport=transport, config=config)
    try:
        response = client.request(args.method, args.url, headers, args.data.encode())
    except (UrlError, TransportError, ResponseError) as e:
        if args.verbose:
            _print_log(client.logger, sys.stderr)
        print(f"py-http: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if args.verbose:
        _print_log(client.logger, sys.stderr)
    sys.stdout.write(format_output(response, include_headers=args.include))
    return EXIT_OK
