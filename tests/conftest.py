"""Shared fixtures.

``tls_server`` answers one TLS connection on the loopback interface with a
canned reply.  It presents the self-signed certificate in ``tests/data``,
so clients must turn verification off to talk to it.
"""

import socket
import ssl
import threading
from collections.abc import Iterator
from pathlib import Path

import pytest

DATA_DIR = Path(__file__).parent / "data"
CERT_FILE = DATA_DIR / "localhost-cert.pem"
KEY_FILE = DATA_DIR / "localhost-key.pem"
SERVER_TIMEOUT = 5.0
_CHUNK = 1024
_HEADER_END = b"\r\n\r\n"


class TlsServer:
    """Accept one TLS connection, read a request head, send a reply, hang up."""

    hostname = "secure.example.test"

    def __init__(self) -> None:
        """Listen on an ephemeral loopback port."""
        self._listener = socket.create_server(("127.0.0.1", 0))
        self._listener.settimeout(SERVER_TIMEOUT)
        self._context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        self._context.load_cert_chain(CERT_FILE, KEY_FILE)
        self._thread: threading.Thread | None = None
        self.received = bytearray()
        self.error: OSError | None = None

    @property
    def port(self) -> int:
        """Return the listening port."""
        return self._listener.getsockname()[1]

    def serve(self, reply: bytes) -> None:
        """Answer the next connection with *reply* in a background thread."""
        self._thread = threading.Thread(target=self._answer, args=(reply,), daemon=True)
        self._thread.start()

    def _answer(self, reply: bytes) -> None:
        # The connection ends with a bare TCP close, no close_notify.
        try:
            conn, _ = self._listener.accept()
            with conn:
                conn.settimeout(SERVER_TIMEOUT)
                with self._context.wrap_socket(conn, server_side=True) as tls:
                    while _HEADER_END not in self.received:
                        chunk = tls.recv(_CHUNK)
                        if not chunk:
                            break
                        self.received.extend(chunk)
                    tls.sendall(reply)
        except OSError as e:
            self.error = e

    def close(self) -> None:
        """Wait for the answering thread and stop listening."""
        if self._thread is not None:
            self._thread.join(SERVER_TIMEOUT)
        self._listener.close()


@pytest.fixture
def tls_server() -> Iterator[TlsServer]:
    """Yield a one-shot TLS server, closed afterwards."""
    server = TlsServer()
    yield server
    server.close()
