"""Client configuration, optionally read from environment variables.

Every process inherits an environment of ``KEY=VALUE`` strings.  The
client reads three of them, all prefixed ``PY_HTTP_``:

    PY_HTTP_TIMEOUT      seconds per connect/send/receive ("none" = wait forever)
    PY_HTTP_CHUNK_SIZE   bytes requested per read
    PY_HTTP_VERIFY_TLS   "0", "false", "no" or "off" to skip certificate checks

Values are strings, so each one is converted and validated here.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_TIMEOUT = 10.0
DEFAULT_CHUNK_SIZE = 4096

ENV_TIMEOUT = "PY_HTTP_TIMEOUT"
ENV_CHUNK_SIZE = "PY_HTTP_CHUNK_SIZE"
ENV_VERIFY_TLS = "PY_HTTP_VERIFY_TLS"

_NO_TIMEOUT = frozenset({"", "none"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


class ConfigError(ValueError):
    """Raise when a configuration value is invalid."""


@dataclass(frozen=True)
class ClientConfig:
    """Settings for one HttpClient.

    Attributes:
        timeout: Seconds before a blocking socket call fails, or None.
        chunk_size: Maximum bytes asked for in one read.
        verify_tls: Whether https certificates are checked.

    """

    timeout: float | None = DEFAULT_TIMEOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    verify_tls: bool = True

    def __post_init__(self) -> None:
        """Reject values the transport cannot use."""
        if self.timeout is not None and self.timeout <= 0:
            msg = f"timeout must be positive, got {self.timeout}"
            raise ConfigError(msg)
        if self.chunk_size <= 0:
            msg = f"chunk_size must be positive, got {self.chunk_size}"
            raise ConfigError(msg)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ClientConfig":
        """Build a config from ``PY_HTTP_*`` variables.

        Args:
            env: The variables to read; ``os.environ`` by default.
                Unset variables keep their defaults.

        Raises:
            ConfigError: If a variable is set to an unusable value.

        """
        env = os.environ if env is None else env
        timeout: float | None = DEFAULT_TIMEOUT
        chunk_size = DEFAULT_CHUNK_SIZE
        verify_tls = True

        raw_timeout = env.get(ENV_TIMEOUT)
        if raw_timeout is not None:
            timeout = _parse_timeout(raw_timeout)

        raw_chunk = env.get(ENV_CHUNK_SIZE)
        if raw_chunk is not None:
            try:
                chunk_size = int(raw_chunk)
            except ValueError as e:
                msg = f"{ENV_CHUNK_SIZE} must be an integer, got {raw_chunk!r}"
                raise ConfigError(msg) from e

        raw_verify = env.get(ENV_VERIFY_TLS)
        if raw_verify is not None:
            verify_tls = raw_verify.strip().lower() not in _FALSE_WORDS

        return cls(timeout=timeout, chunk_size=chunk_size, verify_tls=verify_tls)


def _parse_timeout(raw: str) -> float | None:
    value = raw.strip().lower()
    if value in _NO_TIMEOUT:
        return None
    try:
        return float(value)
    except ValueError as e:
        msg = f"{ENV_TIMEOUT} must be a number of seconds, got {raw!r}"
        raise ConfigError(msg) from e
