# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Buffered views of live HTTP requests and responses.

Message bodies arrive as single-use streams. A snapshot reads the body
exactly once when it is built, so any number of expectations can look at it
afterwards and the origin can still answer the request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler
from typing import BinaryIO
from urllib.parse import urlsplit

import httpx

from httptester.evaluation.errors import EvaluationError

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class RequestSnapshot:
    """An inbound request as seen by the mock origin.

    Attributes:
        method: The request method, e.g. ``GET``.
        path: The request path without query string.
        headers: Case-insensitive header collection.
        body: The whole request body decoded as UTF-8, empty if there was none.
    """

    method: str
    path: str = "/"
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: str = ""

    @classmethod
    def from_handler(cls, handler: BaseHTTPRequestHandler) -> RequestSnapshot:
        """Buffer the request currently being served by *handler*.

        Raises:
            EvaluationError: If the body framing is malformed, e.g. a
                non-numeric Content-Length or a bad chunk size.
        """
        headers = httpx.Headers(list(handler.headers.items()))
        if "chunked" in headers.get("Transfer-Encoding", "").lower():
            raw = _read_chunked(handler.rfile)
        else:
            raw = handler.rfile.read(_content_length(headers))
        return cls(
            method=handler.command,
            path=urlsplit(handler.path).path,
            headers=headers,
            body=raw.decode("utf-8", errors="replace"),
        )


@dataclass(frozen=True)
class ResponseSnapshot:
    """A response received by a client.

    Attributes:
        status_code: The numeric HTTP status code.
        headers: Case-insensitive header collection.
        body: The whole response body as text, empty if there was none.
    """

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: str = ""

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> ResponseSnapshot:
        """Buffer an httpx response; its body is read here if it was streamed."""
        response.read()
        return cls(status_code=response.status_code, headers=response.headers, body=response.text)

    def __str__(self) -> str:
        lines = [f"HTTP {self.status_code}"]
        lines.extend(f"{key}: {value}" for key, value in self.headers.multi_items())
        return "\n".join(lines)


HttpMessage = RequestSnapshot | ResponseSnapshot


# ################
# Implementation
# ################


def _content_length(headers: httpx.Headers) -> int:
    """Return the declared body length, 0 when the header is absent."""
    value = headers.get("Content-Length", "").strip()
    if not value:
        return 0
    if not value.isascii() or not value.isdigit():
        raise EvaluationError(f"Malformed Content-Length header: {value!r}")
    return int(value)


def _read_chunked(stream: BinaryIO) -> bytes:
    """Read a chunked transfer-encoded body, discarding extensions and trailers."""
    chunks: list[bytes] = []
    while True:
        size_line = stream.readline()
        if not size_line:
            break
        size_text = size_line.split(b";", 1)[0].strip() or b"0"
        try:
            size = int(size_text, 16)
            if size < 0:
                raise ValueError(size_text)
        except ValueError:
            raise EvaluationError(f"Malformed chunk size: {size_text!r}") from None
        if size == 0:
            # Trailer section ends with an empty line.
            while stream.readline() not in (b"\r\n", b"\n", b""):
                pass
            break
        chunks.append(stream.read(size))
        stream.readline()  # CRLF after the chunk data
    return b"".join(chunks)
