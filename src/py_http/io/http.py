r"""HTTP/1.1 message codec — request serialization and response parsing.

HTTP is a **request/response** protocol carried over a byte stream:

    Client sends:   GET /index.html HTTP/1.1\r\nHost: foo.com\r\n\r\n
    Server replies:  HTTP/1.1 200 OK\r\nContent-Length: 42\r\n\r\n<body>

Key concepts:
    - **Method** — what the client wants (GET = "give me this", POST = "here's data").
    - **Status line** — the server's answer (``HTTP/1.1 404 Not Found``).
    - **Headers** — ordered ``Key: Value`` pairs.  Order matters and a
      key may appear more than once, so headers are kept as a tuple of
      pairs rather than a dict.
    - **Body** — optional payload, framed either by ``Content-Length``
      or by the end of the stream.

Both directions are pure functions: no sockets, no logging, no state.
The client orchestrator owns the I/O and calls into this module.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from py_http.io.url import Url

Header = tuple[str, str]


class ResponseErrorKind(StrEnum):
    """Why a response buffer could not be parsed."""

    STATUS_LINE_NOT_FOUND = "status line not found"
    INVALID_STATUS_LINE = "invalid status line"
    INVALID_STATUS = "invalid status"
    INVALID_HEADER = "invalid header"


class ResponseError(Exception):
    """Raise when raw bytes are not a well-formed HTTP response."""

    def __init__(self, kind: ResponseErrorKind, detail: str = "") -> None:
        """Create an error of *kind*, optionally naming the offending text."""
        message = f"{kind}: {detail!r}" if detail else str(kind)
        super().__init__(message)
        self.kind = kind
        self.detail = detail


class HttpMethod(StrEnum):
    """HTTP request methods."""

    GET = "GET"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    PUT = "PUT"
    DELETE = "DELETE"
    POST = "POST"
    PATCH = "PATCH"


@dataclass(frozen=True)
class HttpRequest:
    """An outgoing HTTP request.

    Attributes:
        method: One of the seven supported methods.
        url: The parsed target URL.
        headers: Caller-ordered header pairs, duplicates allowed.
        body: Optional payload bytes (default empty).

    """

    method: HttpMethod
    url: Url
    headers: tuple[Header, ...] = ()
    body: bytes = b""


@dataclass(frozen=True)
class HttpResponse:
    """A parsed HTTP response.

    Attributes:
        version: Protocol version from the status line (``"HTTP/1.1"``).
        status: Three-digit status code.
        reason: Reason phrase, possibly empty or containing spaces.
        headers: Header pairs in the order they were received.
        body: Payload bytes (empty if no header/body delimiter was seen).

    """

    version: str
    status: int
    reason: str
    headers: tuple[Header, ...] = ()
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Return the first value for *name* (case-insensitive), or None."""
        values = self.header_values(name)
        return values[0] if values else None

    def header_values(self, name: str) -> list[str]:
        """Return every value for *name* (case-insensitive) in order."""
        wanted = name.lower()
        return [value for key, value in self.headers if key.lower() == wanted]

    @property
    def content_length(self) -> int | None:
        """Return the declared body length, or None if absent or unusable."""
        return _content_length(self.headers)


# ---------------------------------------------------------------------------
# Serialization — request values → wire-format bytes
# ---------------------------------------------------------------------------

_CRLF = b"\r\n"
_HEADER_END = b"\r\n\r\n"
_HTTP_VERSION = "HTTP/1.1"
_STATUS_LINE_MARKER = "HTTP"
_STATUS_LINE_PARTS = 3
_STATUS_DIGITS = 3
_HEAD_ENCODING = "iso-8859-1"
_WHITESPACE = " \t"


def build_request(
    method: HttpMethod,
    url: Url,
    headers: Iterable[Header] = (),
    body: bytes = b"",
) -> bytes:
    r"""Serialize a request to wire-format bytes.

    Wire format::

        METHOD <path><query><fragment> HTTP/1.1\r\n
        Host: <host>\r\n
        Header-Name: value\r\n
        ...\r\n
        \r\n
        [body]

    Only the request line and ``Host`` are generated; every other header
    is written exactly as given, in the given order.
    """
    parts: list[bytes] = []

    # Request line
    parts.append(f"{method} {url.target} {_HTTP_VERSION}".encode())
    parts.append(_CRLF)

    # Headers
    parts.append(f"Host: {url.host}".encode())
    parts.append(_CRLF)
    for name, value in headers:
        parts.append(f"{name}: {value}".encode())
        parts.append(_CRLF)

    # Blank line separates headers from body
    parts.append(_CRLF)

    # Body
    if body:
        parts.append(body)

    return b"".join(parts)


def format_request(request: HttpRequest) -> bytes:
    """Serialize an ``HttpRequest`` value to wire-format bytes."""
    return build_request(request.method, request.url, request.headers, request.body)


# ---------------------------------------------------------------------------
# Parsing — wire-format bytes → response values
# ---------------------------------------------------------------------------


def _parse_status_line(line: str) -> tuple[str, int, str]:
    if _STATUS_LINE_MARKER not in line:
        raise ResponseError(ResponseErrorKind.STATUS_LINE_NOT_FOUND, line)

    parts = line.split(" ", maxsplit=_STATUS_LINE_PARTS - 1)
    if len(parts) < _STATUS_LINE_PARTS:
        raise ResponseError(ResponseErrorKind.INVALID_STATUS_LINE, line)

    version, code, reason = parts
    if len(code) != _STATUS_DIGITS or not (code.isascii() and code.isdigit()):
        raise ResponseError(ResponseErrorKind.INVALID_STATUS, code)
    status = int(code)
    if status == 0:
        raise ResponseError(ResponseErrorKind.INVALID_STATUS, code)
    return version, status, reason


def _parse_header(line: str) -> Header:
    name, colon, value = line.partition(":")
    name = name.strip(_WHITESPACE)
    if not colon or not name:
        raise ResponseError(ResponseErrorKind.INVALID_HEADER, line)
    return name, value.strip(_WHITESPACE)


def _content_length(headers: Iterable[Header]) -> int | None:
    """Return the first ``Content-Length`` as an int, or None.

    Only plain ASCII digits are accepted; anything else (signs,
    underscores, non-ASCII digits) counts as absent.
    """
    for name, value in headers:
        if name.lower() == "content-length":
            if not (value.isascii() and value.isdigit()):
                return None
            return int(value)
    return None


def parse_response(data: bytes) -> HttpResponse:
    """Parse raw bytes into an HttpResponse.

    The buffer may hold more than one message or be cut short: bytes past
    ``Content-Length`` are ignored, and a body shorter than declared is
    returned as-is.  Without ``Content-Length`` the body runs to the end
    of the buffer.

    Raises:
        ResponseError: If the status line or a header is malformed.

    """
    header_end = data.find(_HEADER_END)
    if header_end == -1:
        head, rest = data, b""
    else:
        head, rest = data[:header_end], data[header_end + len(_HEADER_END) :]

    lines = head.decode(_HEAD_ENCODING).split("\r\n")
    version, status, reason = _parse_status_line(lines[0])

    headers: list[Header] = []
    for line in lines[1:]:
        if not line:
            break
        headers.append(_parse_header(line))

    length = _content_length(headers)
    body = rest[:length] if length else rest

    return HttpResponse(
        version=version,
        status=status,
        reason=reason,
        headers=tuple(headers),
        body=body,
    )
