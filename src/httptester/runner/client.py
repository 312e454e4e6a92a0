# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sends the request of a client stanza and buffers the response."""

import logging

import httpx

from httptester.evaluation.messages import ResponseSnapshot
from httptester.model.stanzas import TxRequest

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class ClientError(Exception):
    """Raised when a request cannot be sent or no response is received."""


def send_request(request: TxRequest, address: str, timeout: float = 10.0) -> ResponseSnapshot:
    """Send *request* to ``host:port`` *address* and return the buffered response.

    Environment proxy settings are ignored: the request must reach the
    address under test and nothing else.

    Raises:
        ClientError: On connection failures, timeouts, or an unusable URL.
    """
    url = f"http://{address}{_target(request.uri)}"
    logger.debug("Sending %s %s", request.method, url)
    try:
        with httpx.Client(timeout=timeout, trust_env=False) as client:
            response = client.request(
                request.method,
                url,
                headers=request.headers,
                content=request.body.encode("utf-8") if request.body else None,
            )
            snapshot = ResponseSnapshot.from_httpx(response)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise ClientError(f"{request.method} {url} failed: {exc}") from exc
    logger.debug("Received HTTP %d for %s %s", snapshot.status_code, request.method, url)
    return snapshot


# ################
# Implementation
# ################


def _target(uri: str) -> str:
    """Return the request target, defaulting to '/'."""
    if not uri:
        return "/"
    if not uri.startswith("/"):
        return f"/{uri}"
    return uri
