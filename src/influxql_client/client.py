"""Database handle and the query/write entry points."""

from __future__ import annotations

from contextlib import closing
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional
import json
import logging

import pandas as pd

from .exceptions import ArgumentError, DatabaseError, MalformedResultError, QueryError, WriteError
from .line_protocol import encode_point
from .results import assemble_table, check_error, concat_tables
from .server import InfluxServer, authenticate
from .streaming import DEFAULT_CHUNK_SIZE, build_query_params, http_session, stream_query

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InfluxDatabase:
    """A database name bound to a server. Holds no connection."""

    server: InfluxServer
    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ArgumentError("database name must not be empty")

    def query(
        self,
        q: str,
        chunked: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        session: Optional[Any] = None,
    ) -> Optional[pd.DataFrame]:
        return query(self, q, chunked=chunked, chunk_size=chunk_size, session=session)

    def iter_query(
        self,
        q: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        session: Optional[Any] = None,
    ) -> Iterator[pd.DataFrame]:
        return iter_query(self, q, chunk_size=chunk_size, session=session)

    def write(
        self,
        measurement: str,
        fields: Mapping[str, Any],
        tags: Optional[Mapping[str, Any]] = None,
        timestamp: Optional[float] = None,
        session: Optional[Any] = None,
    ) -> None:
        write(self.server, self.name, measurement, fields, tags=tags, timestamp=timestamp, session=session)


def use_database(server: InfluxServer, name: str) -> InfluxDatabase:
    """Bind ``name`` to ``server`` without contacting it."""
    return InfluxDatabase(server, name)


def create_database(server: InfluxServer, name: str, session: Optional[Any] = None) -> InfluxDatabase:
    if not name:
        raise ArgumentError("database name must not be empty")
    params = authenticate(server, build_query_params(None, f"CREATE DATABASE {_quote_ident(name)}"))
    logger.debug("Creating database %s on %s", name, server.address)
    # POST rather than GET: InfluxDB 1.x refuses mutating statements sent via GET
    response = http_session(session).post(
        server.endpoint("query"),
        params=params,
        timeout=server.timeout,
        verify=server.verify_ssl,
    )
    if response.status_code != 200:
        logger.warning("CREATE DATABASE failed with status %s", response.status_code)
        raise DatabaseError(response.text, status_code=response.status_code)
    if response.text.strip():
        check_error(_decode_body(response), error_cls=DatabaseError)
    return InfluxDatabase(server, name)


def query(
    database: InfluxDatabase,
    q: str,
    chunked: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    session: Optional[Any] = None,
) -> Optional[pd.DataFrame]:
    """Run ``q`` and return all rows of its first series as one DataFrame.

    Returns ``None`` if no chunk carried a series. With ``chunked=True`` the
    server streams the result in pieces of at most ``chunk_size`` rows which
    are concatenated in arrival order.
    """
    tables = stream_query(
        database.server, database.name, q, chunked=chunked, chunk_size=chunk_size, session=session
    )
    with closing(tables):
        return concat_tables(tables)


def iter_query(
    database: InfluxDatabase,
    q: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    session: Optional[Any] = None,
) -> Iterator[pd.DataFrame]:
    """Yield one DataFrame per chunk of a chunked query.

    Closing the iterator closes the underlying response.
    """
    tables = stream_query(
        database.server, database.name, q, chunked=True, chunk_size=chunk_size, session=session
    )
    try:
        for table in tables:
            if table is not None:
                yield table
    finally:
        tables.close()


def query_series(
    server: InfluxServer,
    database: str,
    measurement: str,
    session: Optional[Any] = None,
    retention_policy: Optional[str] = None,
) -> Optional[pd.DataFrame]:
    """Fetch a whole measurement with one buffered request.

    ``measurement`` is quoted as a single identifier, so a dot in it is part
    of the name. Pass ``retention_policy`` to select from a non-default one.
    """
    source = _quote_ident(measurement)
    if retention_policy:
        source = f"{_quote_ident(retention_policy)}.{source}"
    q = f"SELECT * FROM {source}"
    params = authenticate(server, build_query_params(database, q))
    logger.debug("InfluxQL query: %s", q)
    response = http_session(session).get(
        server.endpoint("query"),
        params=params,
        timeout=server.timeout,
        verify=server.verify_ssl,
    )
    if response.status_code != 200:
        logger.warning("Query failed with status %s", response.status_code)
        raise QueryError(response.text, status_code=response.status_code)
    document = _decode_body(response)
    check_error(document)
    return assemble_table(document)


def write(
    server: InfluxServer,
    database: str,
    measurement: str,
    fields: Mapping[str, Any],
    tags: Optional[Mapping[str, Any]] = None,
    timestamp: Optional[float] = None,
    session: Optional[Any] = None,
) -> None:
    """Write one point with second precision."""
    line = encode_point(measurement, fields, tags=tags, timestamp=timestamp)
    params = authenticate(server, {"db": database, "precision": "s"})
    logger.debug("Writing to %s: %s", database, line)
    response = http_session(session).post(
        server.endpoint("write"),
        params=params,
        data=line.encode("utf-8"),
        timeout=server.timeout,
        verify=server.verify_ssl,
    )
    if response.status_code != 204:
        logger.warning("Write failed with status %s", response.status_code)
        raise WriteError(response.text, status_code=response.status_code)


def _quote_ident(name: str) -> str:
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _decode_body(response: Any) -> Any:
    try:
        return json.loads(response.text)
    except ValueError as exc:
        raise MalformedResultError(f"Response is not valid JSON: {exc}") from exc
