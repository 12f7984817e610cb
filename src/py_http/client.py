"""HTTP client — wire the URL parser, codec, and transport together.

One request is a strict sequence:

    1. Parse the URL (no connection is opened if this fails).
    2. Serialize the request.
    3. Connect, wrapping the stream in TLS for ``https``.
    4. Write every request byte.
    5. Read until the response is complete or the peer closes,
       re-parsing the growing buffer as bytes arrive.
    6. Close the stream and return the parsed response.

A response is complete once its headers have arrived and either the
``Content-Length`` body is fully buffered, the length is explicitly
zero, the request was ``HEAD``, or the status forbids a body (204, 304).
Without a length the body runs until the server closes the connection,
so callers usually send ``Connection: close``.

Errors are never retried: the first URL, response, or transport error
ends the request and is raised to the caller.
"""

from collections.abc import Iterable

from py_http.config import ClientConfig
from py_http.io.http import (
    Header,
    HttpMethod,
    HttpResponse,
    ResponseError,
    build_request,
    parse_response,
)
from py_http.io.transport import (
    Stream,
    TcpTransport,
    TlsStream,
    Transport,
    TransportError,
    create_tls_context,
    write_all,
)
from py_http.io.url import Url, UrlError, parse_url
from py_http.logging import Logger, LogLevel

_SOURCE = "client"
_HEADER_END = b"\r\n\r\n"
_BODYLESS_STATUSES = frozenset({204, 304})


class HttpClient:
    """A sequential, one-connection-per-request HTTP/1.1 client."""

    def __init__(
        self,
        *,
        transport: Transport | None = None,
        config: ClientConfig | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a client.

        Args:
            transport: Opens the byte streams; a TcpTransport using the
                config's timeout by default.
            config: Timeout, read size, and TLS settings.
            logger: Where request events are recorded.

        """
        self._config = config if config is not None else ClientConfig()
        self._transport = (
            transport if transport is not None else TcpTransport(timeout=self._config.timeout)
        )
        self._logger = logger if logger is not None else Logger()

    @property
    def config(self) -> ClientConfig:
        """Return the client configuration."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the event log."""
        return self._logger

    def request(
        self,
        method: HttpMethod,
        url: str,
        headers: Iterable[Header] = (),
        body: bytes = b"",
    ) -> HttpResponse:
        """Send one request and return the parsed response.

        Args:
            method: The HTTP method.
            url: The raw URL string.
            headers: Extra headers, sent in order after ``Host``.
            body: Request payload.

        Raises:
            UrlError: If the URL is invalid (nothing is sent).
            TransportError: If connecting, writing, or reading fails.
            ResponseError: If the server's reply is malformed.

        """
        try:
            parsed = parse_url(url)
        except UrlError as e:
            self._logger.log(LogLevel.ERROR, str(e), source=_SOURCE)
            raise

        payload = build_request(method, parsed, headers, body)
        try:
            response = self._exchange(method, parsed, payload)
        except (TransportError, ResponseError) as e:
            self._logger.log(LogLevel.ERROR, str(e), source=_SOURCE, host=parsed.host)
            raise

        self._logger.log(
            LogLevel.INFO,
            f"{method} {parsed.target} -> {response.status} {response.reason}",
            source=_SOURCE,
            host=parsed.host,
        )
        return response

    def get(self, url: str, headers: Iterable[Header] = ()) -> HttpResponse:
        """Send a GET request."""
        return self.request(HttpMethod.GET, url, headers)

    def head(self, url: str, headers: Iterable[Header] = ()) -> HttpResponse:
        """Send a HEAD request."""
        return self.request(HttpMethod.HEAD, url, headers)

    def _open(self, url: Url) -> Stream:
        stream: Stream = self._transport.connect(url.host, url.port)
        self._logger.log(
            LogLevel.DEBUG, f"connected to port {url.port}", source=_SOURCE, host=url.host
        )
        if url.scheme == "https":
            tls = TlsStream(
                stream,
                server_hostname=url.host,
                context=create_tls_context(verify=self._config.verify_tls),
                chunk_size=self._config.chunk_size,
            )
            try:
                tls.handshake()
            except TransportError:
                stream.close()
                raise
            self._logger.log(
                LogLevel.DEBUG, "TLS handshake complete", source=_SOURCE, host=url.host
            )
            stream = tls
        return stream

    def _exchange(self, method: HttpMethod, url: Url, payload: bytes) -> HttpResponse:
        stream = self._open(url)
        buffer = bytearray()
        try:
            sent = write_all(stream, payload)
            self._logger.log(LogLevel.DEBUG, f"sent {sent} bytes", source=_SOURCE, host=url.host)
            while True:
                chunk = stream.read(self._config.chunk_size)
                if not chunk:
                    self._logger.log(
                        LogLevel.DEBUG, "connection closed by peer", source=_SOURCE, host=url.host
                    )
                    break
                buffer.extend(chunk)
                self._logger.log(
                    LogLevel.DEBUG, f"received {len(chunk)} bytes", source=_SOURCE, host=url.host
                )
                if _is_complete(method, bytes(buffer)):
                    break
        finally:
            stream.close()
        return parse_response(bytes(buffer))


def _is_complete(method: HttpMethod, data: bytes) -> bool:
    """Return True if *data* already holds a whole response.

    Raises:
        ResponseError: If the headers are complete but malformed.

    """
    header_end = data.find(_HEADER_END)
    if header_end == -1:
        return False

    response = parse_response(data)
    if method == HttpMethod.HEAD or response.status in _BODYLESS_STATUSES:
        return True

    length = response.content_length
    if length is None:
        return False
    return len(data) - (header_end + len(_HEADER_END)) >= length
