# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Evaluation of expect commands against buffered HTTP messages.

Everything here is stateless; concurrent calls are safe as long as each one
gets its own snapshot.
"""

from dataclasses import dataclass

from httptester.evaluation.errors import EvaluationError
from httptester.evaluation.messages import HttpMessage, RequestSnapshot, ResponseSnapshot
from httptester.model.stanzas import Expect
from httptester.model.types import ExpectField, Operator

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class Verdict:
    """Outcome of evaluating one expectation.

    Attributes:
        expect: The evaluated expectation.
        passed: Whether the expectation held.
        actual: The value extracted from the message.
    """

    expect: Expect
    passed: bool
    actual: str

    def describe(self) -> str:
        """Render the verdict the way failures are reported to the user."""
        if self.passed:
            return f"PASSED: {self.expect}"
        return f"FAILED: {self.expect} (actual={self.actual!r})"


def actual_value(expect: Expect, message: HttpMessage) -> str:
    """Return the value of *message* that *expect* talks about.

    Raises:
        EvaluationError: If the field does not exist on this kind of message
            (status of a request, method of a response).
    """
    if expect.field == ExpectField.HEADERS:
        values = message.headers.get_list(expect.header_name or "")
        return values[0] if values else ""
    if expect.field == ExpectField.BODY:
        return message.body
    if isinstance(message, RequestSnapshot):
        if expect.field == ExpectField.METHOD:
            return message.method
        raise EvaluationError(f"Requests have no status: {expect}")
    if isinstance(message, ResponseSnapshot):
        if expect.field == ExpectField.STATUS:
            return str(message.status_code)
        raise EvaluationError(f"Responses have no method: {expect}")
    raise EvaluationError(f"Cannot evaluate {expect} against {type(message).__name__}")


def evaluate(expect: Expect, message: HttpMessage) -> bool:
    """Return True if *expect* holds for *message*."""
    return _compare(expect, actual_value(expect, message))


def check(expect: Expect, message: HttpMessage) -> Verdict:
    """Evaluate *expect* and keep the actual value around for diagnostics."""
    actual = actual_value(expect, message)
    return Verdict(expect=expect, passed=_compare(expect, actual), actual=actual)


# ################
# Implementation
# ################


def _compare(expect: Expect, actual: str) -> bool:
    """Apply the expectation's operator to the actual value."""
    if expect.operator == Operator.EQUAL:
        return actual == expect.expected
    if expect.operator == Operator.NOT_EQUAL:
        return actual != expect.expected
    if expect.operator == Operator.MATCHES and expect.pattern is not None:
        return expect.pattern.search(actual) is not None
    raise EvaluationError(f"Unknown operator in {expect}")
