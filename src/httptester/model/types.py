# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Enumerations shared by the HTC semantic model."""

from enum import Enum

# ###############
# Public Interface
# ###############


class Side(Enum):
    """Which HTTP message an expectation talks about."""

    REQUEST = "req"
    RESPONSE = "resp"


class ExpectField(Enum):
    """The part of an HTTP message an expectation compares."""

    METHOD = "method"
    STATUS = "status"
    HEADERS = "headers"
    BODY = "body"


class Operator(Enum):
    """Comparison operators supported by the expect command."""

    EQUAL = "eq"
    NOT_EQUAL = "ne"
    MATCHES = "~"
