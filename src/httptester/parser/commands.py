# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sub-grammars of the two HTC commands, ``expect`` and ``tx``.

The stanza parser consumes the command keyword and hands the lexer over to
one of the functions below. ``tx`` means "send a response" inside a
``handle`` stanza and "send a request" inside a ``client`` stanza, hence the
two tx parsers.
"""

import re
from collections.abc import Iterator

from httptester.model.stanzas import Expect, TxRequest, TxResponse
from httptester.model.types import ExpectField, Operator, Side
from httptester.parser.errors import ParseError, unexpected
from httptester.parser.lexer import Lexer, Token, TokenType

# ###############
# Public Interface
# ###############


def parse_expect(lexer: Lexer) -> Expect:
    """Parse the rest of an expect command, e.g. ``req.headers["User-Agent"] ~ "curl"``.

    Grammar::

        ("req"|"resp") "." ("method"|"status"|"body"|"headers" "[" STRING "]")
            ("eq"|"ne"|"~") (STRING|INTEGER)

    Regular expressions are compiled here so that a broken pattern is
    reported as a parse error rather than at evaluation time.
    """
    side_tok = lexer.next_significant_token()
    if side_tok.type not in _SIDES:
        raise unexpected("'req' or 'resp'", side_tok, _EXPECT_CONTEXT)
    side = _SIDES[side_tok.type]

    dot_tok = lexer.next_significant_token()
    if dot_tok.type != TokenType.DOT:
        raise unexpected(f"something like '{side_tok.value}.method'", dot_tok, _EXPECT_CONTEXT)

    field_tok = lexer.next_significant_token()
    if field_tok.type not in _FIELDS:
        raise unexpected(
            f"'{side_tok.value}.{{method,status,headers,body}}'",
            field_tok,
            _EXPECT_CONTEXT,
        )
    field = _FIELDS[field_tok.type]
    verbatim = f"{side_tok.value}.{field_tok.value}"

    header_name: str | None = None
    if field == ExpectField.HEADERS:
        header_name = _parse_header_selector(lexer, side_tok.value)
        verbatim += f'["{header_name}"]'

    op_tok = lexer.next_significant_token()
    if op_tok.type not in _OPERATORS:
        raise unexpected("operator to be one of 'eq', 'ne', '~'", op_tok, _EXPECT_CONTEXT)
    operator = _OPERATORS[op_tok.type]
    verbatim += f" {op_tok.value}"

    value_tok = lexer.next_significant_token()
    if value_tok.type == TokenType.STRING:
        verbatim += f' "{value_tok.value}"'
    elif value_tok.type == TokenType.INTEGER:
        verbatim += f" {value_tok.value}"
    else:
        raise unexpected("a string or an integer", value_tok, _EXPECT_CONTEXT)

    pattern: re.Pattern[str] | None = None
    if operator == Operator.MATCHES:
        try:
            pattern = re.compile(value_tok.value)
        except re.error as exc:
            raise ParseError(
                f"Invalid regular expression {value_tok.value!r} in {_EXPECT_CONTEXT}: {exc}",
                value_tok.line,
                value_tok.column,
            ) from exc

    return Expect(
        side=side,
        field=field,
        header_name=header_name,
        operator=operator,
        expected=value_tok.value,
        verbatim=verbatim,
        pattern=pattern,
    )


def parse_tx_response(lexer: Lexer) -> TxResponse:
    """Parse the flags of a tx command inside a handle stanza.

    Example: ``tx -body "Hello world!" -header "Cache-Control: s-maxage=120" -status 200``
    """
    status_code = 200
    headers: dict[str, str] = {}
    body = ""

    for flag_tok in _flags(lexer):
        if flag_tok.type == TokenType.BODY_ARG:
            body = _flag_value(lexer, TokenType.STRING, "a string").value
        elif flag_tok.type == TokenType.HEADER_ARG:
            _set_header(headers, *_parse_header(_flag_value(lexer, TokenType.STRING, "a header")))
        elif flag_tok.type == TokenType.STATUS_ARG:
            status_code = _parse_status(_flag_value(lexer, TokenType.INTEGER, "an integer"))
        else:
            raise unexpected("-body, -header, or -status", flag_tok, _TX_CONTEXT)

    return TxResponse(status_code=status_code, headers=headers, body=body)


def parse_tx_request(lexer: Lexer) -> TxRequest:
    """Parse the flags of a tx command inside a client stanza.

    Example: ``tx -url "/endpoint/1" -method "GET" -header "X-Debug: x-cache"``

    Neither the method nor the URL is validated beyond being a string.
    """
    method = "GET"
    uri = ""
    headers: dict[str, str] = {}
    body = ""

    for flag_tok in _flags(lexer):
        if flag_tok.type == TokenType.BODY_ARG:
            body = _flag_value(lexer, TokenType.STRING, "a string").value
        elif flag_tok.type == TokenType.HEADER_ARG:
            _set_header(headers, *_parse_header(_flag_value(lexer, TokenType.STRING, "a header")))
        elif flag_tok.type == TokenType.METHOD_ARG:
            method = _flag_value(lexer, TokenType.STRING, "a string").value
        elif flag_tok.type == TokenType.URL_ARG:
            uri = _flag_value(lexer, TokenType.STRING, "a string").value
        else:
            raise unexpected("-url, -header, -method, or -body", flag_tok, _TX_CONTEXT)

    return TxRequest(method=method, uri=uri, headers=headers, body=body)


# ################
# Implementation
# ################

_EXPECT_CONTEXT = "'expect' command"
_TX_CONTEXT = "'tx' command"

_SIDES: dict[TokenType, Side] = {
    TokenType.REQ: Side.REQUEST,
    TokenType.RESP: Side.RESPONSE,
}

_FIELDS: dict[TokenType, ExpectField] = {
    TokenType.METHOD: ExpectField.METHOD,
    TokenType.STATUS: ExpectField.STATUS,
    TokenType.HEADERS: ExpectField.HEADERS,
    TokenType.BODY: ExpectField.BODY,
}

_OPERATORS: dict[TokenType, Operator] = {
    TokenType.EQ: Operator.EQUAL,
    TokenType.NE: Operator.NOT_EQUAL,
    TokenType.TILDE: Operator.MATCHES,
}

# A tx command ends at the end of its line, at the closing brace of the
# stanza, or at the end of the script.
_TX_TERMINATORS: frozenset[TokenType] = frozenset({TokenType.EOF, TokenType.RBRACE, TokenType.NEWLINE})


def _parse_header_selector(lexer: Lexer, side: str) -> str:
    """Parse ``[ STRING ]`` after ``headers`` and return the header name."""
    shape = f"'{side}.headers[$hdr_name]'"
    tok = lexer.next_significant_token()
    if tok.type != TokenType.LBRACKET:
        raise unexpected(shape, tok, _EXPECT_CONTEXT)
    name_tok = lexer.next_significant_token()
    if name_tok.type != TokenType.STRING:
        raise unexpected(shape, name_tok, _EXPECT_CONTEXT)
    tok = lexer.next_significant_token()
    if tok.type != TokenType.RBRACKET:
        raise unexpected(shape, tok, _EXPECT_CONTEXT)
    return name_tok.value


def _flags(lexer: Lexer) -> Iterator[Token]:
    """Yield flag tokens of a tx command until its terminator, which is pushed back."""
    while True:
        tok = lexer.next_significant_token(skip_line_breaks=False)
        if tok.type in _TX_TERMINATORS:
            lexer.unread()
            return
        yield tok


def _flag_value(lexer: Lexer, token_type: TokenType, what: str) -> Token:
    """Consume the value following a flag; it must be on the same line."""
    tok = lexer.next_significant_token(skip_line_breaks=False)
    if tok.type != token_type:
        raise unexpected(what, tok, _TX_CONTEXT)
    return tok


def _parse_header(tok: Token) -> tuple[str, str]:
    """Split a ``Name: Value`` string on its first colon."""
    name, sep, value = tok.value.partition(":")
    name = name.strip()
    if not sep or not name:
        raise unexpected("a header like 'Name: Value'", tok, _TX_CONTEXT)
    return name, value.strip()


def _parse_status(tok: Token) -> int:
    """Convert an INTEGER token into an HTTP status code."""
    code = int(tok.value)
    if not 100 <= code <= 999:
        raise unexpected("a status code between 100 and 999", tok, _TX_CONTEXT)
    return code


def _set_header(headers: dict[str, str], name: str, value: str) -> None:
    """Store a header; a later name replaces an earlier one regardless of case."""
    for existing in [key for key in headers if key.lower() == name.lower()]:
        del headers[existing]
    headers[name] = value
