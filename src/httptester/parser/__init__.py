# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexer and parser for HTC scripts."""

from httptester.parser.errors import ParseError
from httptester.parser.parser import parse, parse_file

__all__ = [
    "parse",
    "parse_file",
    "ParseError",
]
