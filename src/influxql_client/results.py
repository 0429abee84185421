"""Conversion of InfluxQL JSON results into DataFrames."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Type

import pandas as pd

from .exceptions import HTTPStatusError, MalformedResultError, QueryError


def check_error(document: Any, error_cls: Type[HTTPStatusError] = QueryError) -> None:
    """Raise ``error_cls`` if the server reported an error inside a 200 response."""
    if not isinstance(document, Mapping):
        return
    if "error" in document:
        raise error_cls(str(document["error"]), status_code=200)
    for statement in document.get("results") or []:
        if isinstance(statement, Mapping) and "error" in statement:
            raise error_cls(str(statement["error"]), status_code=200)


def assemble_table(document: Any) -> Optional[pd.DataFrame]:
    """Build a column-oriented table from ``results[0].series[0]``.

    Returns ``None`` when the envelope carries no series at all. A series
    without ``values`` gives a zero-row frame that still has its columns.
    """
    if not isinstance(document, Mapping):
        raise MalformedResultError(f"Expected a JSON object, got {type(document).__name__}")
    results = document.get("results")
    if not isinstance(results, list):
        raise MalformedResultError("Result envelope has no 'results' list")
    if not results:
        return None
    statement = results[0]
    if not isinstance(statement, Mapping):
        raise MalformedResultError("results[0] is not a JSON object")
    series_list = statement.get("series")
    if not series_list:
        return None
    series = series_list[0]
    if not isinstance(series, Mapping) or not isinstance(series.get("columns"), list):
        raise MalformedResultError("results[0].series[0] has no 'columns' list")

    columns: List[str] = series["columns"]
    rows = series.get("values") or []
    if rows and not columns:
        raise MalformedResultError(f"Series has {len(rows)} rows but no columns")
    for idx, row in enumerate(rows):
        if not isinstance(row, list) or len(row) != len(columns):
            width = len(row) if isinstance(row, list) else type(row).__name__
            raise MalformedResultError(
                f"Row {idx} has {width} values, expected {len(columns)} for columns {columns}"
            )

    # positional keys so duplicate column names survive
    df = pd.DataFrame({pos: [row[pos] for row in rows] for pos in range(len(columns))})
    df.columns = list(columns)
    return df


def concat_tables(tables: Iterable[Optional[pd.DataFrame]]) -> Optional[pd.DataFrame]:
    """Concatenate per-chunk tables in arrival order.

    ``None`` and zero-row chunks are skipped. Every chunk with rows must have
    exactly the columns (names and order) of the first one. If no chunk has
    rows, the first zero-row table is returned so its columns stay visible,
    or ``None`` when there was no series at all.
    """
    frames: List[pd.DataFrame] = []
    empty: Optional[pd.DataFrame] = None
    for table in tables:
        if table is None:
            continue
        if table.empty:
            if empty is None:
                empty = table
            continue
        if frames and list(table.columns) != list(frames[0].columns):
            raise MalformedResultError(
                f"Chunk columns {list(table.columns)} do not match {list(frames[0].columns)}"
            )
        frames.append(table)
    if not frames:
        return empty
    if len(frames) == 1:
        return frames[0]
    return pd.concat(frames, ignore_index=True)
