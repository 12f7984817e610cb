"""I/O subsystem — URL parsing, HTTP codec, resolution, and transport.

Re-exports public symbols so callers can write::

    from py_http.io import parse_url, build_request, parse_response

The parser and codec are pure; ``dns`` and ``transport`` are the only
modules that touch the network.
"""

from py_http.io.dns import DnsError, DnsRecord, DnsResolver, ResolvedAddress
from py_http.io.http import (
    Header,
    HttpMethod,
    HttpRequest,
    HttpResponse,
    ResponseError,
    ResponseErrorKind,
    build_request,
    format_request,
    parse_response,
)
from py_http.io.transport import (
    SocketStream,
    Stream,
    StreamState,
    TcpTransport,
    TlsStream,
    Transport,
    TransportError,
    TransportErrorKind,
    create_tls_context,
    write_all,
)
from py_http.io.url import Url, UrlError, UrlErrorKind, parse_url, percent_encode

__all__ = [
    "DnsError",
    "DnsRecord",
    "DnsResolver",
    "Header",
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "ResolvedAddress",
    "ResponseError",
    "ResponseErrorKind",
    "SocketStream",
    "Stream",
    "StreamState",
    "TcpTransport",
    "TlsStream",
    "Transport",
    "TransportError",
    "TransportErrorKind",
    "Url",
    "UrlError",
    "UrlErrorKind",
    "build_request",
    "create_tls_context",
    "format_request",
    "parse_response",
    "parse_url",
    "percent_encode",
    "write_all",
]
