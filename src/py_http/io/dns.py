"""Hostname resolution — turn a host and port into socket addresses.

DNS is the internet's phone book: the client knows ``foo.com`` but a
socket needs something like ``("93.184.216.34", 443)``.

The resolver answers in two ways:

- **Static records** — a local phone book of hostname → address
  overrides, like ``/etc/hosts``.  Tests use it to point a public-looking
  name at a local server.
- **System lookup** — anything not in the phone book goes to the
  operating system's resolver via ``socket.getaddrinfo``.
"""

import socket
from dataclasses import dataclass


class DnsError(Exception):
    """Raise when a DNS operation fails."""


@dataclass(frozen=True)
class DnsRecord:
    """An A record — one hostname-to-IP override.

    Frozen because once registered, a record should not be silently
    mutated.  Remove and re-register to change the IP.
    """

    hostname: str
    """The human-readable name (e.g. 'foo.com')."""

    address: str
    """The IP address (e.g. '127.0.0.1')."""


@dataclass(frozen=True)
class ResolvedAddress:
    """One connectable endpoint for a hostname."""

    family: socket.AddressFamily
    sockaddr: tuple[str, int] | tuple[str, int, int, int]


class DnsResolver:
    """A phone book of static records backed by the system resolver."""

    def __init__(self) -> None:
        """Create a resolver with no static records."""
        self._records: dict[str, DnsRecord] = {}

    def register(self, hostname: str, address: str) -> DnsRecord:
        """Add a static record.

        Args:
            hostname: The human-readable name to register.
            address: The IP address to map to.

        Returns:
            The newly created DnsRecord.

        Raises:
            DnsError: If the hostname is already registered.

        """
        if hostname in self._records:
            msg = f"Hostname '{hostname}' is already registered"
            raise DnsError(msg)
        record = DnsRecord(hostname=hostname, address=address)
        self._records[hostname] = record
        return record

    def resolve(self, hostname: str, port: int) -> list[ResolvedAddress]:
        """Resolve *hostname* to the stream endpoints to try, in order.

        A static record wins over the system resolver.

        Args:
            hostname: The host to resolve.
            port: The TCP port to pair with each address.

        Returns:
            At least one ResolvedAddress.

        Raises:
            DnsError: If the system resolver cannot find the host.

        """
        record = self._records.get(hostname)
        if record is not None:
            return [self._resolve_numeric(record.address, port)]

        try:
            infos = socket.getaddrinfo(hostname, port, socket.AF_UNSPEC, socket.SOCK_STREAM)
        except socket.gaierror as e:
            msg = f"Cannot resolve '{hostname}': {e}"
            raise DnsError(msg) from e
        return [
            ResolvedAddress(family=family, sockaddr=sockaddr)
            for family, _, _, _, sockaddr in infos
        ]

    @staticmethod
    def _resolve_numeric(address: str, port: int) -> ResolvedAddress:
        """Build an endpoint from a literal IPv4 or IPv6 address."""
        try:
            infos = socket.getaddrinfo(
                address, port, socket.AF_UNSPEC, socket.SOCK_STREAM, 0, socket.AI_NUMERICHOST
            )
        except socket.gaierror as e:
            msg = f"Registered address '{address}' is not a numeric IP"
            raise DnsError(msg) from e
        family, _, _, _, sockaddr = infos[0]
        return ResolvedAddress(family=family, sockaddr=sockaddr)
