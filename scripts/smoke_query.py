"""Local read-only smoke test for influxql-client.

Usage:
    py scripts/smoke_query.py --query "SELECT * FROM cpu LIMIT 10"
    py scripts/smoke_query.py --query "SELECT * FROM cpu" --chunked --chunk-size 500
    py scripts/smoke_query.py --measurement cpu

Connection settings come from INFLUXDB_URL (or INFLUXDB_HOST), INFLUXDB_USER,
INFLUXDB_PWD and INFLUXDB_DB, optionally via a .env file.
"""

from __future__ import annotations

import argparse
import sys

from influxql_client import InfluxDBError, database_from_env, query_series


def _describe(df) -> None:
    if df is None:
        print("no series returned")
        return
    print(f"rows: {len(df)} columns: {list(df.columns)}")
    if not df.empty:
        print(df.head(3).to_string(index=False))


def run(query: str | None, measurement: str | None, chunked: bool, chunk_size: int) -> int:
    database = database_from_env()
    print(f"server={database.server.address} database={database.name}")
    if measurement:
        df = query_series(database.server, database.name, measurement)
    else:
        df = database.query(query, chunked=chunked, chunk_size=chunk_size)
    _describe(df)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Run a read-only query against InfluxDB")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--query", type=str, help="InfluxQL statement to run")
    group.add_argument("--measurement", type=str, help="Fetch a whole measurement with SELECT *")
    parser.add_argument("--chunked", action="store_true", help="Request a chunked response")
    parser.add_argument("--chunk-size", type=int, default=10000, help="Rows per chunk")
    args = parser.parse_args()
    try:
        return run(args.query, args.measurement, args.chunked, args.chunk_size)
    except InfluxDBError as exc:
        print(f"Smoke test failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
