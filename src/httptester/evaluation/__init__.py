# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Evaluation of expectations against live HTTP requests and responses."""

from httptester.evaluation.errors import EvaluationError
from httptester.evaluation.expect import Verdict, actual_value, check, evaluate
from httptester.evaluation.messages import HttpMessage, RequestSnapshot, ResponseSnapshot

__all__ = [
    "EvaluationError",
    "HttpMessage",
    "RequestSnapshot",
    "ResponseSnapshot",
    "Verdict",
    "actual_value",
    "check",
    "evaluate",
]
