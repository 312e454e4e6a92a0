# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for buffering live requests and responses into snapshots."""

import email.message
import io
from types import SimpleNamespace

import httpx
import pytest

from httptester.evaluation import EvaluationError, RequestSnapshot, ResponseSnapshot

# ###############
# Test Helpers
# ###############


def _handler(method: str, path: str, headers: dict[str, str], raw_body: bytes) -> SimpleNamespace:
    """Build an object shaped like a BaseHTTPRequestHandler mid-request."""
    message = email.message.Message()
    for key, value in headers.items():
        message[key] = value
    return SimpleNamespace(command=method, path=path, headers=message, rfile=io.BytesIO(raw_body))


# ###############
# Requests
# ###############


class TestRequestSnapshot:
    def test_reads_content_length_body(self) -> None:
        handler = _handler("POST", "/p?x=1", {"Content-Length": "5", "X-Test": "yes"}, b"hello, and more")
        snapshot = RequestSnapshot.from_handler(handler)
        assert snapshot.method == "POST"
        assert snapshot.path == "/p"
        assert snapshot.body == "hello"
        assert snapshot.headers["x-test"] == "yes"

    def test_no_body_without_content_length(self) -> None:
        snapshot = RequestSnapshot.from_handler(_handler("GET", "/", {}, b"ignored"))
        assert snapshot.body == ""

    def test_reads_chunked_body(self) -> None:
        raw = b"5\r\nhello\r\n6;ext=1\r\n world\r\n0\r\nX-Trailer: t\r\n\r\n"
        handler = _handler("PUT", "/c", {"Transfer-Encoding": "chunked"}, raw)
        assert RequestSnapshot.from_handler(handler).body == "hello world"

    def test_body_read_only_once(self) -> None:
        handler = _handler("POST", "/p", {"Content-Length": "4"}, b"data")
        RequestSnapshot.from_handler(handler)
        assert handler.rfile.read() == b""

    @pytest.mark.parametrize("length", ["abc", "-1", "1.5"])
    def test_malformed_content_length(self, length: str) -> None:
        handler = _handler("POST", "/p", {"Content-Length": length}, b"data")
        with pytest.raises(EvaluationError, match="Malformed Content-Length"):
            RequestSnapshot.from_handler(handler)

    def test_malformed_chunk_size(self) -> None:
        handler = _handler("POST", "/p", {"Transfer-Encoding": "chunked"}, b"zz\r\nhello\r\n0\r\n\r\n")
        with pytest.raises(EvaluationError, match="Malformed chunk size"):
            RequestSnapshot.from_handler(handler)


# ###############
# Responses
# ###############


class TestResponseSnapshot:
    def test_from_httpx(self) -> None:
        response = httpx.Response(201, headers={"Server": "ATS/9.1.2"}, text="Hello world!")
        snapshot = ResponseSnapshot.from_httpx(response)
        assert snapshot.status_code == 201
        assert snapshot.headers["server"] == "ATS/9.1.2"
        assert snapshot.body == "Hello world!"

    def test_str_lists_status_and_headers(self) -> None:
        snapshot = ResponseSnapshot(status_code=200, headers=httpx.Headers({"X-Cache": "miss"}))
        assert str(snapshot) == "HTTP 200\nx-cache: miss"
