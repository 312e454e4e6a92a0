# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for sending client requests."""

from collections.abc import Iterator

import pytest

from httptester.model import TxRequest
from httptester.origin import OriginServer
from httptester.parser import parse
from httptester.runner import ClientError, free_port, send_request

SCRIPT = """\
handle "/" {
    tx -body "root" -header "X-HTC-Origin: true" -status 200
}

handle "/echo" {
    expect req.method eq "PUT"
    expect req.headers["X-Debug"] eq "x-cache"
    expect req.body eq "payload"
    tx -status 204
}
"""


@pytest.fixture
def origin() -> Iterator[OriginServer]:
    server = OriginServer()
    for stanza in parse(SCRIPT).handlers:
        server.add_handler(stanza)
    server.start()
    yield server
    server.stop()


def test_default_request_targets_root(origin: OriginServer) -> None:
    response = send_request(TxRequest(), origin.address)
    assert response.status_code == 200
    assert response.headers["X-HTC-Origin"] == "true"
    assert response.body == "root"


def test_method_headers_and_body_are_sent(origin: OriginServer) -> None:
    request = TxRequest(method="PUT", uri="/echo", headers={"X-Debug": "x-cache"}, body="payload")
    response = send_request(request, origin.address)
    assert response.status_code == 204
    assert origin.failures == []


def test_connection_refused() -> None:
    with pytest.raises(ClientError, match="failed"):
        send_request(TxRequest(uri="/x"), f"127.0.0.1:{free_port()}", timeout=1.0)
