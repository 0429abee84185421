"""Server handle and request authentication."""

from __future__ import annotations

from dataclasses import dataclass
from typing import MutableMapping, Optional
from urllib.parse import urlsplit
import re

from .exceptions import ConfigurationError

DEFAULT_PORT = 8086

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


@dataclass(frozen=True)
class InfluxServer:
    """Immutable descriptor of an InfluxDB HTTP endpoint.

    ``address`` is normalized on construction: ``http://`` is prepended when
    no http/https scheme is given and the port defaults to 8086. Empty
    credentials are stored as ``None``. ``timeout`` and ``verify_ssl`` are
    handed to the HTTP transport on every request.
    """

    address: str
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: Optional[float] = 30.0
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", _normalize_address(self.address))
        object.__setattr__(self, "username", self.username or None)
        object.__setattr__(self, "password", self.password or None)

    @property
    def scheme(self) -> str:
        return urlsplit(self.address).scheme

    @property
    def host(self) -> str:
        return urlsplit(self.address).hostname or ""

    @property
    def port(self) -> int:
        return urlsplit(self.address).port or DEFAULT_PORT

    @property
    def path(self) -> str:
        return urlsplit(self.address).path

    @property
    def has_credentials(self) -> bool:
        return self.username is not None and self.password is not None

    def endpoint(self, name: str) -> str:
        return f"{self.address}/{name}"

    def __repr__(self) -> str:
        auth = "authenticated" if self.has_credentials else "anonymous"
        return f"InfluxServer({self.address}, {auth})"


def authenticate(server: InfluxServer, params: MutableMapping[str, str]) -> MutableMapping[str, str]:
    """Add ``u``/``p`` to ``params`` when the server carries both credentials."""
    if server.has_credentials:
        params["u"] = server.username
        params["p"] = server.password
    return params


def _normalize_address(address: str) -> str:
    if not isinstance(address, str):
        raise ConfigurationError(f"Server address must be a string, got {type(address).__name__}")
    address = address.strip()
    if not _SCHEME_RE.match(address):
        address = f"http://{address}"
    try:
        parts = urlsplit(address)
        port = parts.port
    except ValueError as exc:
        raise ConfigurationError(f"Invalid server address {address!r}: {exc}") from exc
    host = parts.hostname
    if not host:
        raise ConfigurationError(f"Invalid server address {address!r}: no host")
    if ":" in host:
        host = f"[{host}]"
    if port is None:
        port = DEFAULT_PORT
    path = parts.path.rstrip("/")
    return f"{parts.scheme.lower()}://{host}:{port}{path}"
