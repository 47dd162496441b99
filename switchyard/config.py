"""Configuration for the switchyard SDK."""

import os
from dataclasses import dataclass
from typing import Optional

import httpx

from switchyard.version import __version__

DEFAULT_EVENTS_URI = "https://events.switchyard.io"
CLIENT_NAME = "PythonClient"


@dataclass
class Config:
    """Configuration consumed by the event pipeline."""

    sdk_key: str
    """SDK key sent as the Authorization header."""

    events_uri: str = DEFAULT_EVENTS_URI
    """Base URI of the event collector."""

    capacity: int = 10000
    """Maximum number of buffered events. Events beyond this are dropped."""

    flush_interval: float = 5.0
    """Seconds between scheduled flushes."""

    connect_timeout: float = 2.0
    """Seconds allowed to establish a connection."""

    socket_timeout: float = 10.0
    """Seconds allowed between packets once connected."""

    sampling_interval: int = 0
    """Keep 1 in N events. 0 disables sampling."""

    proxy_host: Optional[str] = None
    proxy_port: Optional[int] = None
    proxy_scheme: Optional[str] = None

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError("capacity must be at least 1")
        if self.flush_interval <= 0:
            raise ValueError("flush_interval must be positive")
        if self.connect_timeout < 0 or self.socket_timeout < 0:
            raise ValueError("timeouts must not be negative")
        if self.sampling_interval < 0:
            raise ValueError("sampling_interval must not be negative")
        self.events_uri = self.events_uri.rstrip("/")

    @property
    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.socket_timeout, connect=self.connect_timeout)

    @property
    def proxy_url(self) -> Optional[str]:
        """Proxy URL, or None when no proxy setting is given."""
        if self.proxy_host is None and self.proxy_port is None and self.proxy_scheme is None:
            return None
        host = self.proxy_host or "localhost"
        scheme = self.proxy_scheme or "https"
        if self.proxy_port is None:
            return f"{scheme}://{host}"
        return f"{scheme}://{host}:{self.proxy_port}"

    @property
    def user_agent(self) -> str:
        return f"{CLIENT_NAME}/{__version__}"

    @property
    def bulk_events_url(self) -> str:
        return f"{self.events_uri}/bulk"

    @classmethod
    def from_env(cls, prefix: str = "SWITCHYARD_") -> "Config":
        """
        Build a config from environment variables.

        Reads ``<prefix>SDK_KEY`` (required) and optionally ``EVENTS_URI``,
        ``CAPACITY``, ``FLUSH_INTERVAL``, ``CONNECT_TIMEOUT``,
        ``SOCKET_TIMEOUT``, ``SAMPLING_INTERVAL``, ``PROXY_HOST``,
        ``PROXY_PORT`` and ``PROXY_SCHEME``.
        """

        def get(name: str) -> Optional[str]:
            value = os.environ.get(prefix + name)
            return value if value else None

        sdk_key = get("SDK_KEY")
        if sdk_key is None:
            raise ValueError(f"{prefix}SDK_KEY is not set")

        kwargs = {}
        for name, convert in (
            ("events_uri", str),
            ("capacity", int),
            ("flush_interval", float),
            ("connect_timeout", float),
            ("socket_timeout", float),
            ("sampling_interval", int),
            ("proxy_host", str),
            ("proxy_port", int),
            ("proxy_scheme", str),
        ):
            raw = get(name.upper())
            if raw is not None:
                kwargs[name] = convert(raw)

        return cls(sdk_key=sdk_key, **kwargs)
