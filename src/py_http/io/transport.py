"""Byte-stream transport — TCP connections with optional TLS on top.

The HTTP codec only turns values into bytes and back.  Moving those
bytes is the transport's job:

    Transport.connect(host, port) → Stream
    Stream.write(data) → bytes written
    Stream.read(size)  → bytes read (b"" means the peer closed)
    Stream.close()

``TcpTransport`` opens plain sockets, trying each address the resolver
returns until one accepts.  ``TlsStream`` is a decorator: it wraps *any*
stream and runs the TLS handshake through in-memory BIOs before the
first read or write, so the layer below never needs to know about TLS.

Every failure surfaces as ``TransportError`` whose ``kind`` says which
step failed.  The original exception is chained as ``__cause__`` and
otherwise left opaque.
"""

from __future__ import annotations

import socket
import ssl
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, TypeVar

from py_http.io.dns import DnsError, DnsResolver

if TYPE_CHECKING:
    from collections.abc import Callable

DEFAULT_CHUNK_SIZE = 4096

T = TypeVar("T")


class TransportErrorKind(StrEnum):
    """Which transport step failed."""

    CONNECT = "connect"
    WRITE = "write"
    READ = "read"


class TransportError(Exception):
    """Raise when connecting, writing, or reading fails."""

    def __init__(self, kind: TransportErrorKind, message: str) -> None:
        """Create an error for the failed *kind* of operation."""
        super().__init__(f"{kind} failed: {message}")
        self.kind = kind


class StreamState(StrEnum):
    """Lifecycle of a stream: OPEN until closed, then CLOSED for good."""

    OPEN = "open"
    CLOSED = "closed"


class Stream(Protocol):
    """A connected, bidirectional byte stream."""

    def write(self, data: bytes) -> int:
        """Write some of *data* and return how many bytes were taken."""
        ...

    def read(self, size: int) -> bytes:
        """Read up to *size* bytes; empty bytes mean end of stream."""
        ...

    def close(self) -> None:
        """Release the stream.  Safe to call more than once."""
        ...


class Transport(Protocol):
    """Something that can open a stream to a host and port."""

    def connect(self, host: str, port: int) -> Stream:
        """Open a stream to *host*:*port*."""
        ...


def write_all(stream: Stream, data: bytes) -> int:
    """Write every byte of *data*, looping over partial writes.

    Returns:
        The total number of bytes written (``len(data)``).

    Raises:
        TransportError: If the stream stops accepting bytes.

    """
    view = memoryview(data)
    total = 0
    while total < len(data):
        written = stream.write(bytes(view[total:]))
        if written <= 0:
            msg = f"stream accepted no bytes after {total} of {len(data)}"
            raise TransportError(TransportErrorKind.WRITE, msg)
        total += written
    return total


# ---------------------------------------------------------------------------
# Plain TCP
# ---------------------------------------------------------------------------


class SocketStream:
    """A Stream over a connected ``socket.socket``."""

    def __init__(self, sock: socket.socket) -> None:
        """Wrap an already-connected socket."""
        self._sock = sock
        self._state = StreamState.OPEN

    @property
    def state(self) -> StreamState:
        """Return whether the stream is open or closed."""
        return self._state

    def _require_open(self, kind: TransportErrorKind) -> None:
        if self._state is StreamState.CLOSED:
            msg = "stream is closed"
            raise TransportError(kind, msg)

    def write(self, data: bytes) -> int:
        """Send bytes on the socket.

        Raises:
            TransportError: If the stream is closed or the send fails.

        """
        self._require_open(TransportErrorKind.WRITE)
        try:
            return self._sock.send(data)
        except OSError as e:
            raise TransportError(TransportErrorKind.WRITE, str(e)) from e

    def read(self, size: int) -> bytes:
        """Receive up to *size* bytes; blocks until data, EOF, or timeout.

        Raises:
            TransportError: If the stream is closed, the receive fails,
                or the socket timeout expires.

        """
        self._require_open(TransportErrorKind.READ)
        try:
            return self._sock.recv(size)
        except OSError as e:
            raise TransportError(TransportErrorKind.READ, str(e)) from e

    def close(self) -> None:
        """Close the socket.  Closing twice is a no-op."""
        if self._state is StreamState.CLOSED:
            return
        self._state = StreamState.CLOSED
        self._sock.close()

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return f"SocketStream(state={self._state})"


class TcpTransport:
    """Open TCP connections, trying every resolved address in order."""

    def __init__(
        self,
        *,
        resolver: DnsResolver | None = None,
        timeout: float | None = None,
    ) -> None:
        """Create a transport.

        Args:
            resolver: Where host names are looked up; a fresh
                DnsResolver (system lookup only) by default.
            timeout: Seconds before a connect, send, or receive gives up.
                None blocks forever.

        """
        self._resolver = resolver if resolver is not None else DnsResolver()
        self._timeout = timeout

    @property
    def resolver(self) -> DnsResolver:
        """Return the resolver used for host lookups."""
        return self._resolver

    def connect(self, host: str, port: int) -> SocketStream:
        """Connect to the first reachable address for *host*:*port*.

        Raises:
            TransportError: If resolution fails or no address accepts
                the connection.  The last underlying error is chained.

        """
        try:
            addresses = self._resolver.resolve(host, port)
        except DnsError as e:
            raise TransportError(TransportErrorKind.CONNECT, str(e)) from e

        last_error: OSError | None = None
        for address in addresses:
            sock = socket.socket(address.family, socket.SOCK_STREAM)
            sock.settimeout(self._timeout)
            try:
                sock.connect(address.sockaddr)
            except OSError as e:
                sock.close()
                last_error = e
                continue
            return SocketStream(sock)

        msg = f"no address for {host}:{port} accepted the connection"
        raise TransportError(TransportErrorKind.CONNECT, msg) from last_error


# ---------------------------------------------------------------------------
# TLS decorator
# ---------------------------------------------------------------------------


def create_tls_context(*, verify: bool = True) -> ssl.SSLContext:
    """Return a client TLS context.

    Certificate checking is entirely the ``ssl`` module's; *verify*
    only chooses between its default policy and no checks at all.
    """
    context = ssl.create_default_context()
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


class TlsStream:
    """A Stream that encrypts another Stream.

    The handshake runs lazily on the first read or write.  Ciphertext
    moves between the inner stream and two ``ssl.MemoryBIO`` buffers.
    """

    def __init__(
        self,
        inner: Stream,
        *,
        server_hostname: str,
        context: ssl.SSLContext | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """Wrap *inner*; nothing is sent until first use."""
        self._inner = inner
        self._chunk_size = chunk_size
        self._incoming = ssl.MemoryBIO()
        self._outgoing = ssl.MemoryBIO()
        context = context if context is not None else create_tls_context()
        self._tls = context.wrap_bio(
            self._incoming, self._outgoing, server_hostname=server_hostname
        )
        self._handshake_done = False

    @property
    def handshake_done(self) -> bool:
        """Return True once the TLS handshake has completed."""
        return self._handshake_done

    def _flush(self) -> None:
        pending = self._outgoing.read()
        if pending:
            write_all(self._inner, pending)

    def _pump(self, operation: Callable[[], T]) -> T:
        """Run a TLS operation, feeding it ciphertext until it completes."""
        while True:
            try:
                result = operation()
            except ssl.SSLWantReadError:
                self._flush()
                chunk = self._inner.read(self._chunk_size)
                if chunk:
                    self._incoming.write(chunk)
                else:
                    self._incoming.write_eof()
                continue
            self._flush()
            return result

    def handshake(self) -> None:
        """Run the TLS handshake if it has not happened yet.

        Raises:
            TransportError: If the peer closes early or the ssl module
                rejects the handshake (bad certificate, protocol error).

        """
        if self._handshake_done:
            return
        try:
            self._pump(self._tls.do_handshake)
        except ssl.SSLError as e:
            raise TransportError(TransportErrorKind.CONNECT, f"TLS handshake: {e}") from e
        self._handshake_done = True

    def write(self, data: bytes) -> int:
        """Encrypt and send *data*.

        Raises:
            TransportError: If the handshake or the encrypted write fails.

        """
        self.handshake()
        try:
            return self._pump(lambda: self._tls.write(data))
        except ssl.SSLError as e:
            raise TransportError(TransportErrorKind.WRITE, str(e)) from e

    def read(self, size: int) -> bytes:
        """Receive and decrypt up to *size* bytes.

        A clean TLS shutdown and a bare TCP close both read as EOF.

        Raises:
            TransportError: If the handshake or decryption fails.

        """
        self.handshake()
        try:
            return self._pump(lambda: self._tls.read(size))
        except (ssl.SSLZeroReturnError, ssl.SSLEOFError):
            return b""
        except ssl.SSLError as e:
            raise TransportError(TransportErrorKind.READ, str(e)) from e

    def close(self) -> None:
        """Close the inner stream."""
        self._inner.close()
