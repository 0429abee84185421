"""Exceptions for influxql_client."""

from __future__ import annotations

from typing import Optional


class InfluxDBError(Exception):
    """Base exception for influxql_client."""


class ConfigurationError(InfluxDBError, ValueError):
    """Server address or configuration value could not be used."""


class ArgumentError(InfluxDBError, ValueError):
    """Caller supplied an invalid argument (e.g. an empty field map)."""


class HTTPStatusError(InfluxDBError):
    """The server answered with an unexpected status.

    The message is the raw response body, verbatim.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class QueryError(HTTPStatusError):
    """Query execution failed."""


class WriteError(HTTPStatusError):
    """Write request was rejected."""


class DatabaseError(HTTPStatusError):
    """Database administration request failed."""


class MalformedResultError(InfluxDBError):
    """Result JSON does not match the documented envelope shape."""
