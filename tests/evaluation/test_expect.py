# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for evaluating expectations against requests and responses."""

import httpx
import pytest

from httptester.evaluation import (
    EvaluationError,
    RequestSnapshot,
    ResponseSnapshot,
    actual_value,
    check,
    evaluate,
)
from httptester.model import Expect, ExpectField, Operator, Side
from httptester.parser.commands import parse_expect
from httptester.parser.lexer import Lexer

# ###############
# Test Helpers
# ###############


def _expect(source: str) -> Expect:
    """Parse the part of an expect command after the keyword."""
    return parse_expect(Lexer(source))


def _request(method: str = "GET", headers: dict[str, str] | None = None, body: str = "") -> RequestSnapshot:
    return RequestSnapshot(method=method, headers=httpx.Headers(headers or {}), body=body)


def _response(status_code: int = 200, headers: dict[str, str] | None = None, body: str = "") -> ResponseSnapshot:
    return ResponseSnapshot(status_code=status_code, headers=httpx.Headers(headers or {}), body=body)


# ###############
# Field Selection
# ###############


class TestFieldSelection:
    @pytest.mark.parametrize(
        ("source", "matching", "other"),
        [
            ('req.method eq "GET"', _request(method="GET"), _request(method="GEX")),
            ('req.headers["X-Test"] eq "abc"', _request(headers={"X-Test": "abc"}), _request(headers={"X-Test": "abd"})),
            ('req.body eq "payload"', _request(body="payload"), _request(body="paylaod")),
            ('req.method ~ "^GET$"', _request(method="GET"), _request(method="GEX")),
            ("resp.status eq 200", _response(status_code=200), _response(status_code=201)),
            ('resp.headers["Server"] eq "ATS"', _response(headers={"Server": "ATS"}), _response(headers={"Server": "ATZ"})),
            ('resp.body eq "Hello world!"', _response(body="Hello world!"), _response(body="Hello world?")),
            ('resp.body ~ "world!$"', _response(body="Hello world!"), _response(body="Hello world?")),
        ],
    )
    def test_exact_value_passes_and_one_char_off_fails(self, source, matching, other) -> None:
        exp = _expect(source)
        assert evaluate(exp, matching) is True
        assert evaluate(exp, other) is False

    def test_status_as_decimal_text(self) -> None:
        assert actual_value(_expect("resp.status eq 404"), _response(status_code=404)) == "404"

    def test_status_of_request_is_an_error(self) -> None:
        with pytest.raises(EvaluationError, match="Requests have no status"):
            evaluate(_expect("req.status eq 200"), _request())

    def test_method_of_response_is_an_error(self) -> None:
        with pytest.raises(EvaluationError, match="Responses have no method"):
            evaluate(_expect('resp.method eq "GET"'), _response())

    def test_missing_body_is_empty(self) -> None:
        assert evaluate(_expect('req.body eq ""'), _request()) is True


# ###############
# Headers
# ###############


class TestHeaders:
    def test_absent_header_is_empty_string(self) -> None:
        assert evaluate(_expect('req.headers["X-Test"] eq ""'), _request()) is True

    def test_lookup_is_case_insensitive(self) -> None:
        request = _request(headers={"X-Test": "yes"})
        assert actual_value(_expect('req.headers["x-test"] eq "yes"'), request) == "yes"
        assert actual_value(_expect('req.headers["X-TEST"] eq "yes"'), request) == "yes"

    def test_first_value_of_repeated_header(self) -> None:
        response = ResponseSnapshot(status_code=200, headers=httpx.Headers([("Via", "a"), ("Via", "b")]))
        assert actual_value(_expect('resp.headers["Via"] eq "a"'), response) == "a"


# ###############
# Operators
# ###############


class TestOperators:
    def test_not_equal(self) -> None:
        exp = _expect("resp.status ne 404")
        assert evaluate(exp, _response(status_code=200)) is True
        assert evaluate(exp, _response(status_code=404)) is False

    def test_regex_server_version(self) -> None:
        exp = _expect('resp.headers["Server"] ~ "^ATS/[0-9]\\.[0-9]\\.[0-9]$"')
        assert evaluate(exp, _response(headers={"Server": "ATS/9.1.2"})) is True
        assert evaluate(exp, _response(headers={"Server": "nginx/1.2"})) is False

    def test_regex_is_not_anchored(self) -> None:
        exp = _expect('req.headers["User-Agent"] ~ "chrome"')
        assert evaluate(exp, _request(headers={"User-Agent": "this might look like chrome to some"})) is True

    def test_regex_without_stored_pattern_is_compiled(self) -> None:
        exp = Expect(side=Side.REQUEST, field=ExpectField.METHOD, operator=Operator.MATCHES, expected="^P")
        assert evaluate(exp, _request(method="POST")) is True


# ###############
# Verdicts
# ###############


class TestVerdict:
    def test_failed_verdict_keeps_actual(self) -> None:
        verdict = check(_expect("resp.status eq 200"), _response(status_code=503))
        assert verdict.passed is False
        assert verdict.actual == "503"
        assert verdict.describe() == "FAILED: \"resp.status eq 200\" (actual='503')"

    def test_passed_verdict(self) -> None:
        verdict = check(_expect('req.method eq "GET"'), _request())
        assert verdict.passed is True
        assert verdict.describe() == 'PASSED: "req.method eq "GET""'

    def test_same_snapshot_serves_many_expectations(self) -> None:
        request = _request(body="once")
        assert evaluate(_expect('req.body eq "once"'), request) is True
        assert evaluate(_expect('req.body ~ "^on"'), request) is True
        assert evaluate(_expect('req.body ne ""'), request) is True


# ###############
# End-to-End Scenario
# ###############


class TestScenario:
    def test_get_request_without_body(self) -> None:
        request = _request(method="GET")
        assert evaluate(_expect('req.method eq "GET"'), request) is True
        assert evaluate(_expect('req.body eq ""'), request) is True

    def test_client_side_assertions(self) -> None:
        response = _response(status_code=200, headers={"X-Cache": "miss"}, body="Hello world!")
        for source in (
            "resp.status ne 404",
            'resp.headers["X-Cache"] ~ "miss"',
            'resp.headers["Something-That-Should-Not-Be-Set"] eq ""',
        ):
            assert evaluate(_expect(source), response) is True
