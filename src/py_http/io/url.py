"""URL grammar — turn a raw string into a validated, decomposed URL.

A URL like ``https://foo.com/bar?x=1#top`` is read left to right in
four stages:

    1. **Scheme** — everything before the first ``:`` (``https``).
    2. **Host** — after an optional ``//``, up to the first ``/``, ``?``
       or ``#`` (``foo.com``).
    3. **Remainder** — the rest, percent-encoded (``/bar?x=1#top``).
    4. **Split** — the remainder is cut into path, query and fragment.

Only ``http`` and ``https`` are accepted, and the port is always the
scheme's default (80 or 443).  Hosts must be dotted names: a single
label like ``localhost`` is rejected.

Every failure raises ``UrlError`` with exactly one ``UrlErrorKind``, so
a caller either gets a complete ``Url`` or one specific reason why not.
"""

from dataclasses import dataclass
from enum import StrEnum

HTTP_PORT = 80
HTTPS_PORT = 443

_DEFAULT_PORTS: dict[str, int] = {
    "http": HTTP_PORT,
    "https": HTTPS_PORT,
}

_DEL = 0x7F
_FIRST_PRINTABLE = 0x20
_SCHEME_TAIL_CHARS = frozenset("+-.")
_HOST_TERMINATORS = frozenset("/?#")
_HOST_EDGE_CHARS = frozenset("-.")
_AUTHORITY_PREFIX = "//"

_PERCENT_ESCAPES = str.maketrans(
    {
        " ": "%20",
        ";": "%3B",
        ":": "%3A",
        "[": "%5B",
        "]": "%5D",
        "{": "%7B",
        "}": "%7D",
        "<": "%3C",
        ">": "%3E",
        "\\": "%5C",
        "^": "%5E",
        "`": "%60",
        '"': "%22",
    }
)


class UrlErrorKind(StrEnum):
    """Why a URL string was rejected."""

    FOUND_CONTROL_CHARACTER = "found control character"
    SCHEME_NOT_FOUND = "scheme not found"
    INVALID_SCHEME = "invalid scheme"
    HOST_NOT_FOUND = "host not found"


class UrlError(ValueError):
    """Raise when a string is not a valid http(s) URL."""

    def __init__(self, kind: UrlErrorKind, raw: str) -> None:
        """Create an error for *raw* rejected with *kind*."""
        super().__init__(f"{kind}: {raw!r}")
        self.kind = kind
        self.raw = raw


@dataclass(frozen=True)
class Url:
    """A validated, decomposed URL.

    Attributes:
        scheme: ``"http"`` or ``"https"``, exactly as written.
        host: The dotted hostname (e.g. ``"foo.com"``).
        path: Encoded path, possibly empty (e.g. ``"/bar"``).
        query: Encoded query including its ``?``, or empty.
        fragment: Encoded fragment including its ``#``, or empty.
        raw: The original input string.
        port: 80 for http, 443 for https.

    """

    scheme: str
    host: str
    path: str
    query: str
    fragment: str
    raw: str
    port: int

    @property
    def target(self) -> str:
        """Return the request target: path, query and fragment joined."""
        return f"{self.path}{self.query}{self.fragment}"


def percent_encode(text: str) -> str:
    """Escape the fixed set of unsafe URL characters in *text*.

    ``%`` itself is never escaped, so encoding twice is the same as
    encoding once.
    """
    return text.translate(_PERCENT_ESCAPES)


def _is_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _is_alnum(char: str) -> bool:
    return char.isascii() and char.isalnum()


def _check_control_characters(raw: str) -> None:
    for char in raw:
        code = ord(char)
        if code < _FIRST_PRINTABLE or code == _DEL:
            raise UrlError(UrlErrorKind.FOUND_CONTROL_CHARACTER, raw)


def _split_scheme(raw: str) -> tuple[str, str]:
    """Return ``(scheme, rest)`` where *rest* starts after the colon."""
    for index, char in enumerate(raw):
        if _is_alpha(char):
            continue
        if index == 0:
            break
        if (char.isascii() and char.isdigit()) or char in _SCHEME_TAIL_CHARS:
            continue
        if char == ":":
            return raw[:index], raw[index + 1 :]
        break
    raise UrlError(UrlErrorKind.SCHEME_NOT_FOUND, raw)


def _split_host(rest: str, raw: str) -> tuple[str, str]:
    """Return ``(host, remainder)``; the remainder keeps its terminator."""
    rest = rest.removeprefix(_AUTHORITY_PREFIX)
    period_seen = False
    for index, char in enumerate(rest):
        if _is_alnum(char):
            continue
        previous = rest[index - 1] if index else ""
        if char == "-" and index > 0:
            continue
        if char == "." and index > 0 and previous != ".":
            period_seen = True
            continue
        if char in _HOST_TERMINATORS and period_seen and previous not in _HOST_EDGE_CHARS:
            return rest[:index], rest[index:]
        break
    raise UrlError(UrlErrorKind.HOST_NOT_FOUND, raw)


def _split_remainder(remainder: str) -> tuple[str, str, str]:
    """Partition an encoded remainder into ``(path, query, fragment)``."""
    fragment_start = remainder.find("#")
    if fragment_start == -1:
        fragment_start = len(remainder)
    query_start = remainder.find("?", 0, fragment_start)
    if query_start == -1:
        query_start = fragment_start
    return (
        remainder[:query_start],
        remainder[query_start:fragment_start],
        remainder[fragment_start:],
    )


def parse_url(raw: str) -> Url:
    """Parse and validate an http(s) URL.

    Args:
        raw: The URL string, e.g. ``"https://foo.com/bar?x=1"``.

    Returns:
        The decomposed ``Url``.

    Raises:
        UrlError: If any stage rejects the input.  The ``kind``
            attribute names the first stage that failed.

    """
    _check_control_characters(raw)
    scheme, rest = _split_scheme(raw)

    port = _DEFAULT_PORTS.get(scheme)
    if port is None:
        raise UrlError(UrlErrorKind.INVALID_SCHEME, raw)

    host, remainder = _split_host(rest, raw)
    path, query, fragment = _split_remainder(percent_encode(remainder))
    return Url(
        scheme=scheme,
        host=host,
        path=path,
        query=query,
        fragment=fragment,
        raw=raw,
        port=port,
    )
