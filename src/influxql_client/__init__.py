"""influxql_client package."""

from .client import (
    InfluxDatabase,
    create_database,
    iter_query,
    query,
    query_series,
    use_database,
    write,
)
from .config import database_from_env, load_env, resolve_server, server_from_env
from .exceptions import (
    ArgumentError,
    ConfigurationError,
    DatabaseError,
    HTTPStatusError,
    InfluxDBError,
    MalformedResultError,
    QueryError,
    WriteError,
)
from .line_protocol import encode_point
from .results import assemble_table, concat_tables
from .server import DEFAULT_PORT, InfluxServer, authenticate

__all__ = [
    "InfluxServer",
    "InfluxDatabase",
    "DEFAULT_PORT",
    "authenticate",
    "create_database",
    "use_database",
    "query",
    "iter_query",
    "query_series",
    "write",
    "encode_point",
    "assemble_table",
    "concat_tables",
    "load_env",
    "server_from_env",
    "database_from_env",
    "resolve_server",
    "InfluxDBError",
    "ConfigurationError",
    "ArgumentError",
    "HTTPStatusError",
    "QueryError",
    "WriteError",
    "DatabaseError",
    "MalformedResultError",
]
