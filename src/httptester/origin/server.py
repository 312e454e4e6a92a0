# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mock origin server that plays the ``handle`` stanzas of a program.

The proxy under test forwards client requests here. Every request is
buffered, checked against the expectations of the matching stanza, and then
answered with the stanza's canned response. Failed expectations are
collected rather than raised, because they happen on server worker threads.
"""

import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from httptester.evaluation.errors import EvaluationError
from httptester.evaluation.expect import check
from httptester.evaluation.messages import RequestSnapshot
from httptester.model.stanzas import HandleStanza, TxResponse

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

HEALTH_CHECK_PATH = "/httpTesterInternalCheck"


class OriginError(Exception):
    """Raised when the mock origin cannot be started."""


class OriginServer:
    """Threaded HTTP server answering requests according to handle stanzas.

    Routing mirrors a classic pattern mux: a request path matches a stanza
    whose path is identical, or, failing that, the longest stanza path that
    ends in ``/`` and prefixes it.
    """

    def __init__(self, port: int = 0, host: str = "127.0.0.1") -> None:
        self._host = host
        self._requested_port = port
        self._handlers: dict[str, HandleStanza] = {}
        self._failures: list[str] = []
        self._lock = threading.Lock()
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def port(self) -> int:
        """The bound port; only meaningful once the server is started."""
        if self._server is None:
            return self._requested_port
        return self._server.server_address[1]

    @property
    def address(self) -> str:
        """``host:port`` of the running server."""
        return f"{self._host}:{self.port}"

    @property
    def failures(self) -> list[str]:
        """Descriptions of every failed expectation so far, in arrival order."""
        with self._lock:
            return list(self._failures)

    def add_handler(self, stanza: HandleStanza) -> None:
        """Register a handle stanza; a later stanza for the same path replaces the earlier one."""
        with self._lock:
            self._handlers[stanza.uri_path] = stanza

    def match(self, path: str) -> HandleStanza | None:
        """Return the stanza responsible for *path*, if any."""
        with self._lock:
            if path in self._handlers:
                return self._handlers[path]
            best: HandleStanza | None = None
            for pattern, stanza in self._handlers.items():
                if pattern.endswith("/") and path.startswith(pattern):
                    if best is None or len(pattern) > len(best.uri_path):
                        best = stanza
            return best

    def start(self) -> None:
        """Bind the socket and serve requests on a daemon thread.

        Raises:
            OriginError: If the socket cannot be bound, e.g. the port is in use.
        """
        try:
            self._server = ThreadingHTTPServer((self._host, self._requested_port), _make_handler_class(self))
        except OSError as exc:
            raise OriginError(f"Cannot start origin on {self._host}:{self._requested_port}: {exc}") from exc
        self._server.daemon_threads = True
        self._thread = threading.Thread(target=self._server.serve_forever, name="htc-origin", daemon=True)
        self._thread.start()
        logger.debug("Origin listening on %s", self.address)

    def stop(self) -> None:
        """Stop serving and release the socket."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join()
        logger.debug("Origin on %s stopped", self.address)
        self._server = None
        self._thread = None

    def record_failure(self, message: str) -> None:
        """Remember a failed expectation."""
        logger.debug("Origin failure: %s", message)
        with self._lock:
            self._failures.append(message)


# ################
# Implementation
# ################


_BODYLESS_STATUSES = frozenset({204, 304})


def _send(handler: BaseHTTPRequestHandler, response: TxResponse) -> None:
    """Write a canned response to the client.

    1xx, 204 and 304 responses never carry a body, whatever the stanza says.
    """
    bodyless = response.status_code < 200 or response.status_code in _BODYLESS_STATUSES
    body = b"" if bodyless else response.body.encode("utf-8")
    handler.send_response(response.status_code)
    for key, value in response.headers.items():
        handler.send_header(key, value)
    if not bodyless and not any(key.lower() == "content-length" for key in response.headers):
        handler.send_header("Content-Length", str(len(body)))
    handler.end_headers()
    if body and handler.command != "HEAD":
        handler.wfile.write(body)


def _make_handler_class(origin: OriginServer) -> type[BaseHTTPRequestHandler]:
    """Create a request handler class bound to *origin*."""

    class _Handler(BaseHTTPRequestHandler):
        protocol_version = "HTTP/1.1"

        def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
            logger.debug("%s - %s", self.address_string(), format % args)

        def _serve(self) -> None:
            try:
                request = RequestSnapshot.from_handler(self)
            except EvaluationError as exc:
                origin.record_failure(f"ERROR: {exc}")
                # The body was not consumed, so the connection cannot be reused.
                self.close_connection = True
                _send(self, TxResponse(status_code=400, headers={"Connection": "close"}, body=str(exc)))
                return

            if request.path == HEALTH_CHECK_PATH:
                _send(self, TxResponse(body="UP!"))
                return

            stanza = origin.match(request.path)
            if stanza is None:
                logger.debug("No handler for %s %s", request.method, request.path)
                _send(self, TxResponse(status_code=404, body="Not Found"))
                return

            try:
                for expect in stanza.expectations:
                    logger.debug("Expecting %s", expect)
                    verdict = check(expect, request)
                    if not verdict.passed:
                        origin.record_failure(verdict.describe())
            except EvaluationError as exc:
                origin.record_failure(f"ERROR: {exc}")
                _send(self, TxResponse(status_code=500, body=str(exc)))
                return

            _send(self, stanza.response)

        do_GET = _serve  # noqa: N815
        do_HEAD = _serve  # noqa: N815
        do_POST = _serve  # noqa: N815
        do_PUT = _serve  # noqa: N815
        do_DELETE = _serve  # noqa: N815
        do_PATCH = _serve  # noqa: N815
        do_OPTIONS = _serve  # noqa: N815

    return _Handler
