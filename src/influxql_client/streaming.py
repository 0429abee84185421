"""Streaming query engine for chunked InfluxQL responses.

With ``chunked=true`` the server writes a sequence of self-contained JSON
documents back to back on one response body. The body is consumed
incrementally: bytes are read from the open response, decoded as UTF-8, and
each complete JSON document is handed to the result assembler as soon as it
has been received. Running out of parseable documents is the only end
condition; HTTP framing does not separate the documents.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Optional, Union
import codecs
import json
import logging
import re

import pandas as pd
import requests

from .exceptions import ArgumentError, MalformedResultError, QueryError
from .results import assemble_table, check_error
from .server import InfluxServer, authenticate

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10000
READ_SIZE = 64 * 1024

_WHITESPACE = re.compile(r"[ \t\n\r]*")


def http_session(session: Optional[Any] = None) -> Any:
    """Return ``session`` or the ``requests`` module, which offers the same get/post."""
    return requests if session is None else session


def build_query_params(
    database: Optional[str],
    query: str,
    chunked: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Dict[str, str]:
    params = {"q": query}
    if database is not None:
        params["db"] = database
    if chunked:
        if chunk_size <= 0:
            raise ArgumentError("chunk_size must be greater than zero")
        params["chunked"] = "true"
        params["chunk_size"] = str(chunk_size)
    return params


def iter_documents(chunks: Iterable[Union[bytes, str]]) -> Iterator[Any]:
    """Yield JSON documents from a stream of byte (or text) chunks.

    A document may be split across any number of chunks. Decoding stops when
    the input is exhausted with only whitespace left, or at a JSON ``null``
    document. Input that ends in the middle of a document raises
    ``MalformedResultError``.

    An incomplete document is only decoded again once the unparsed text has
    at least doubled, so decoding a document of N characters costs O(N) in total.
    """
    decoder = json.JSONDecoder()
    text_decoder = codecs.getincrementaldecoder("utf-8")()
    source = iter(chunks)
    buffer = ""
    pos = 0
    retry_at = 0
    exhausted = False

    while True:
        pos = _WHITESPACE.match(buffer, pos).end()
        if pos < len(buffer):
            try:
                document, end = decoder.raw_decode(buffer, pos)
            except json.JSONDecodeError as exc:
                if exhausted:
                    raise MalformedResultError(f"Incomplete or invalid JSON in response: {exc}") from exc
                retry_at = 2 * (len(buffer) - pos)
            else:
                # a bare scalar at the buffer end may continue in the next chunk
                if isinstance(document, (dict, list)) or end < len(buffer) or exhausted:
                    if document is None:
                        return
                    pos = end
                    retry_at = 0
                    yield document
                    continue
                retry_at = 2 * (len(buffer) - pos)
        elif exhausted:
            return

        pieces = [buffer[pos:]]
        size = len(pieces[0])
        while True:
            try:
                chunk = next(source)
            except StopIteration:
                exhausted = True
                chunk = b""
            try:
                text = chunk if isinstance(chunk, str) else text_decoder.decode(chunk, final=exhausted)
            except UnicodeDecodeError as exc:
                raise MalformedResultError(f"Response is not valid UTF-8: {exc}") from exc
            pieces.append(text)
            size += len(text)
            if exhausted or size >= retry_at:
                break
        buffer = "".join(pieces)
        pos = 0


def iter_tables(response: Any, read_size: int = READ_SIZE) -> Iterator[Optional[pd.DataFrame]]:
    """Assemble one table per JSON document of an open response.

    Yields ``None`` for documents without a series.
    """
    count = 0
    for document in iter_documents(response.iter_content(chunk_size=read_size)):
        count += 1
        check_error(document)
        table = assemble_table(document)
        logger.debug("Chunk %d: %s rows", count, 0 if table is None else len(table))
        yield table
    logger.debug("Stream finished after %d chunks", count)


def stream_query(
    server: InfluxServer,
    database: Optional[str],
    query: str,
    chunked: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    session: Optional[Any] = None,
) -> Iterator[Optional[pd.DataFrame]]:
    """Run ``query`` and yield a table (or ``None``) per received chunk.

    The response stays open while the generator is suspended and is closed on
    every exit path, including when the caller closes the generator early.
    """
    params = authenticate(server, build_query_params(database, query, chunked, chunk_size))
    logger.debug("InfluxQL query (chunked=%s): %s", chunked, query)
    response = http_session(session).get(
        server.endpoint("query"),
        params=params,
        stream=True,
        timeout=server.timeout,
        verify=server.verify_ssl,
    )
    with response:
        if response.status_code != 200:
            logger.warning("Query failed with status %s", response.status_code)
            raise QueryError(response.text, status_code=response.status_code)
        yield from iter_tables(response)
