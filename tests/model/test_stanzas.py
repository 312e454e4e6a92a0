# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the HTC semantic model."""

import re

import pytest
from pydantic import ValidationError

from httptester.model import (
    ClientStanza,
    Expect,
    ExpectField,
    HandleStanza,
    Operator,
    Program,
    Side,
    TxRequest,
    TxResponse,
)

# ###############
# Expect
# ###############


class TestExpect:
    def test_str_quotes_verbatim(self) -> None:
        exp = Expect(
            side=Side.RESPONSE,
            field=ExpectField.STATUS,
            operator=Operator.EQUAL,
            expected="200",
            verbatim="status eq 200",
        )
        assert str(exp) == '"status eq 200"'

    def test_header_name_required_for_headers(self) -> None:
        with pytest.raises(ValidationError, match="header_name"):
            Expect(side=Side.REQUEST, field=ExpectField.HEADERS, operator=Operator.EQUAL, expected="")

    def test_header_name_rejected_for_other_fields(self) -> None:
        with pytest.raises(ValidationError, match="header_name"):
            Expect(
                side=Side.REQUEST,
                field=ExpectField.BODY,
                header_name="X-Test",
                operator=Operator.EQUAL,
                expected="",
            )

    def test_pattern_compiled_when_missing(self) -> None:
        exp = Expect(side=Side.REQUEST, field=ExpectField.BODY, operator=Operator.MATCHES, expected="^a+$")
        assert exp.pattern == re.compile("^a+$")

    def test_pattern_compiled_from_raw_operator(self) -> None:
        exp = Expect(side="req", field="body", operator="~", expected="x")
        assert exp.operator == Operator.MATCHES
        assert exp.pattern is not None

    def test_invalid_pattern_rejected(self) -> None:
        with pytest.raises(ValidationError, match="invalid regular expression"):
            Expect(side=Side.REQUEST, field=ExpectField.BODY, operator=Operator.MATCHES, expected="(oops")

    def test_pattern_rejected_for_equality(self) -> None:
        with pytest.raises(ValidationError, match="pattern"):
            Expect(
                side=Side.REQUEST,
                field=ExpectField.BODY,
                operator=Operator.EQUAL,
                expected="x",
                pattern=re.compile("x"),
            )

    def test_frozen(self) -> None:
        exp = Expect(side=Side.REQUEST, field=ExpectField.METHOD, operator=Operator.EQUAL, expected="GET")
        with pytest.raises(ValidationError):
            exp.expected = "POST"


# ###############
# Tx Commands
# ###############


class TestTxCommands:
    def test_response_defaults(self) -> None:
        resp = TxResponse()
        assert resp.status_code == 200
        assert resp.headers == {}
        assert resp.body == ""

    def test_response_str(self) -> None:
        assert str(TxResponse(status_code=404)) == 'HTTP 404: ""'

    def test_request_defaults(self) -> None:
        req = TxRequest()
        assert req.method == "GET"
        assert req.uri == ""

    def test_request_str(self) -> None:
        req = TxRequest(method="HEAD", uri="/x", headers={"X-A": "1"})
        assert str(req) == "HEAD /x\nX-A: 1"


# ###############
# Stanzas and Program
# ###############


class TestStanzas:
    def test_handle_path_must_start_with_slash(self) -> None:
        with pytest.raises(ValidationError, match="must start with '/'"):
            HandleStanza(uri_path="nope")

    def test_handle_defaults(self) -> None:
        handler = HandleStanza(uri_path="/p")
        assert handler.expectations == []
        assert handler.response == TxResponse()

    def test_client_defaults(self) -> None:
        client = ClientStanza(name="c")
        assert client.request == TxRequest()
        assert client.expectations == []

    def test_empty_program_rejected(self) -> None:
        with pytest.raises(ValidationError, match="at least one"):
            Program()

    def test_program_with_one_client(self) -> None:
        program = Program(clients=[ClientStanza(name="c")])
        assert program.handlers == []
        assert len(program.clients) == 1
