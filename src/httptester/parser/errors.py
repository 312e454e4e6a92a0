# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parse errors shared by the stanza and command parsers."""

from httptester.parser.lexer import Token, TokenType

# ###############
# Public Interface
# ###############


class ParseError(Exception):
    """Raised when the parser encounters a syntactically invalid construct.

    Attributes:
        line: 1-based line number of the error (0 when no position applies).
        column: 1-based column number of the error (0 when no position applies).
    """

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        if line > 0:
            super().__init__(f"Line {line}, column {column}: {message}")
        else:
            super().__init__(message)
        self.line = line
        self.column = column


def unexpected(expected: str, tok: Token, context: str) -> ParseError:
    """Build the error for *tok* showing up where *expected* was required."""
    return ParseError(f"Expected {expected} in {context}, got {describe(tok)}", tok.line, tok.column)


def describe(tok: Token) -> str:
    """Render a token for error messages."""
    if tok.type in _SELF_DESCRIBING:
        return str(tok)
    return repr(tok.value)


# ################
# Implementation
# ################

_SELF_DESCRIBING: frozenset[TokenType] = frozenset(
    {
        TokenType.EOF,
        TokenType.ILLEGAL,
        TokenType.NEWLINE,
        TokenType.STRING,
        TokenType.INTEGER,
    }
)
