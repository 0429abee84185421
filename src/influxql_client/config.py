"""Configuration loading for influxql_client."""

from __future__ import annotations

from typing import Any, Mapping, Optional
import os

from dotenv import load_dotenv

from .client import InfluxDatabase
from .exceptions import ConfigurationError
from .server import InfluxServer


def load_env() -> None:
    """Load environment variables from a .env file if present."""
    load_dotenv()


def _get_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _as_bool(value: Any, default: bool) -> bool:
    if value is None or isinstance(value, str):
        return _get_bool(value, default)
    return bool(value)


def _get_timeout(value: Any, default: Optional[float] = 30.0) -> Optional[float]:
    if value is None or value == "":
        return default
    if isinstance(value, str) and value.strip().lower() == "none":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid timeout: {value!r}") from exc


def server_from_env() -> InfluxServer:
    load_env()
    return InfluxServer(
        address=os.getenv("INFLUXDB_URL", os.getenv("INFLUXDB_HOST", "localhost")),
        username=os.getenv("INFLUXDB_USER"),
        password=os.getenv("INFLUXDB_PWD"),
        timeout=_get_timeout(os.getenv("INFLUXDB_TIMEOUT")),
        verify_ssl=_get_bool(os.getenv("INFLUXDB_VERIFY_SSL"), True),
    )


def database_from_env(server: Optional[InfluxServer] = None) -> InfluxDatabase:
    load_env()
    name = os.getenv("INFLUXDB_DB", "")
    if not name:
        raise ConfigurationError("INFLUXDB_DB is required")
    return InfluxDatabase(server or server_from_env(), name)


def _dict_get(d: Mapping[str, Any], key: str, fallback: Any = None) -> Any:
    if key in d:
        return d[key]
    return fallback


def resolve_server(config: InfluxServer | Mapping[str, Any]) -> InfluxServer:
    if isinstance(config, InfluxServer):
        return config
    address = _dict_get(config, "address", _dict_get(config, "url"))
    if not address and _dict_get(config, "host"):
        address = str(config["host"])
        if _dict_get(config, "port") is not None:
            address = f"{address}:{int(config['port'])}"
    if not address:
        raise ConfigurationError("config needs one of address/url/host")
    return InfluxServer(
        address=address,
        username=_dict_get(config, "username", _dict_get(config, "user")),
        password=_dict_get(config, "password", _dict_get(config, "pwd")),
        timeout=_get_timeout(_dict_get(config, "timeout")),
        verify_ssl=_as_bool(_dict_get(config, "verify_ssl"), True),
    )
