"""Tests for hostname resolution.

DNS is like a phone book for the internet.  These tests verify the
local phone book (static records) and the fallback to the system
resolver for names it does not contain.
"""

import dataclasses
import socket

import pytest

from py_http.io.dns import DnsError, DnsRecord, DnsResolver, ResolvedAddress

HTTP_PORT = 80
HTTPS_PORT = 443


# ---------------------------------------------------------------------------
# Cycle 1: DnsRecord dataclass and DnsError
# ---------------------------------------------------------------------------


class TestDnsRecordAndError:
    """Verify the DnsRecord frozen dataclass and DnsError exception."""

    def test_record_fields(self) -> None:
        """DnsRecord stores hostname and address."""
        record = DnsRecord(hostname="foo.com", address="127.0.0.1")
        assert record.hostname == "foo.com"
        assert record.address == "127.0.0.1"

    def test_record_is_frozen(self) -> None:
        """DnsRecord is immutable."""
        record = DnsRecord(hostname="foo.com", address="127.0.0.1")
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.hostname = "other"  # type: ignore[misc]

    def test_dns_error_is_exception(self) -> None:
        """DnsError is a standard Exception subclass."""
        err = DnsError("not found")
        assert isinstance(err, Exception)
        assert str(err) == "not found"


# ---------------------------------------------------------------------------
# Cycle 2: Static records
# ---------------------------------------------------------------------------


class TestStaticRecords:
    """Verify static record registration."""

    def test_register_returns_record(self) -> None:
        """Register creates and returns a DnsRecord."""
        resolver = DnsResolver()
        record = resolver.register("example.com", "93.184.216.34")
        assert record == DnsRecord(hostname="example.com", address="93.184.216.34")

    def test_duplicate_register_raises(self) -> None:
        """Duplicate hostname registration raises DnsError."""
        resolver = DnsResolver()
        resolver.register("example.com", "93.184.216.34")
        with pytest.raises(DnsError, match="already registered"):
            resolver.register("example.com", "1.2.3.4")

    def test_duplicate_leaves_first_record(self) -> None:
        """A rejected duplicate does not replace the original address."""
        resolver = DnsResolver()
        resolver.register("example.com", "127.0.0.1")
        with pytest.raises(DnsError):
            resolver.register("example.com", "10.0.0.1")
        (address,) = resolver.resolve("example.com", HTTP_PORT)
        assert address.sockaddr == ("127.0.0.1", HTTP_PORT)


# ---------------------------------------------------------------------------
# Cycle 3: resolve()
# ---------------------------------------------------------------------------


class TestResolve:
    """Verify resolution to connectable socket addresses."""

    def test_static_record_wins(self) -> None:
        """A registered name resolves to its record without a system lookup."""
        resolver = DnsResolver()
        resolver.register("api.example.test", "127.0.0.1")
        assert resolver.resolve("api.example.test", HTTP_PORT) == [
            ResolvedAddress(family=socket.AF_INET, sockaddr=("127.0.0.1", HTTP_PORT))
        ]

    def test_static_ipv6_record(self) -> None:
        """An IPv6 record resolves to an AF_INET6 address."""
        resolver = DnsResolver()
        resolver.register("v6.example.test", "::1")
        (address,) = resolver.resolve("v6.example.test", HTTPS_PORT)
        assert address.family == socket.AF_INET6
        assert address.sockaddr[:2] == ("::1", HTTPS_PORT)

    def test_non_numeric_record_raises(self) -> None:
        """A record whose address is not an IP cannot be resolved."""
        resolver = DnsResolver()
        resolver.register("bad.example.test", "not-an-ip")
        with pytest.raises(DnsError, match="not a numeric IP"):
            resolver.resolve("bad.example.test", HTTP_PORT)

    def test_numeric_host_uses_system_lookup(self) -> None:
        """An unregistered literal IP is resolved by getaddrinfo."""
        addresses = DnsResolver().resolve("127.0.0.1", HTTP_PORT)
        assert ResolvedAddress(family=socket.AF_INET, sockaddr=("127.0.0.1", HTTP_PORT)) in (
            addresses
        )

    def test_system_failure_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A getaddrinfo failure surfaces as DnsError with the cause chained."""

        def _fail(*_args: object) -> list[object]:
            raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")

        monkeypatch.setattr(socket, "getaddrinfo", _fail)
        with pytest.raises(DnsError, match="Cannot resolve") as info:
            DnsResolver().resolve("nowhere.example.test", HTTP_PORT)
        assert isinstance(info.value.__cause__, socket.gaierror)
