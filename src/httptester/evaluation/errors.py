# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Errors raised while evaluating expectations."""


class EvaluationError(Exception):
    """Raised when a message is malformed or an expectation cannot be applied to it."""
