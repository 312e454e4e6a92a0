# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for HTC scripts.

Pulls tokens from the lexer and builds a Program out of ``handle`` and
``client`` stanzas. The first malformed construct aborts the whole parse;
there is no error recovery.
"""

from pathlib import Path

from httptester.model.stanzas import ClientStanza, Expect, HandleStanza, Program, TxRequest, TxResponse
from httptester.parser.commands import parse_expect, parse_tx_request, parse_tx_response
from httptester.parser.errors import ParseError, describe, unexpected
from httptester.parser.lexer import Lexer, Token, TokenType

# ###############
# Public Interface
# ###############


def parse(source: str) -> Program:
    """Parse HTC source text into a Program.

    Args:
        source: The full text of an .htc script.

    Returns:
        A Program whose handlers and clients appear in source order.

    Raises:
        ParseError: If the script is malformed or contains no stanza at all.
    """
    return _Parser(Lexer(source)).parse()


def parse_file(path: Path) -> Program:
    """Read and parse an HTC script from disk.

    Raises:
        ParseError: If the file cannot be read or its content is malformed.
    """
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ParseError(f"Cannot read script '{path}': {exc}") from exc
    return parse(source)


# ################
# Implementation
# ################


class _Parser:
    """Recursive-descent parser over a token stream."""

    def __init__(self, lexer: Lexer) -> None:
        self._lexer = lexer

    def parse(self) -> Program:
        """Parse the whole script and return the Program."""
        handlers: list[HandleStanza] = []
        clients: list[ClientStanza] = []

        while True:
            tok = self._next()
            if tok.type == TokenType.EOF:
                break
            if tok.type == TokenType.HANDLE:
                handlers.append(self._parse_handle())
            elif tok.type == TokenType.CLIENT:
                clients.append(self._parse_client())
            elif tok.type == TokenType.ILLEGAL:
                raise ParseError(f"Syntax error: {tok}", tok.line, tok.column)
            else:
                raise ParseError(
                    f"Unexpected token {describe(tok)} at top level, expecting 'handle' or 'client'",
                    tok.line,
                    tok.column,
                )

        if not handlers and not clients:
            raise ParseError(
                "At least one of 'handle' or 'client' stanza are needed",
                tok.line,
                tok.column,
            )
        return Program(handlers=handlers, clients=clients)

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _next(self) -> Token:
        """Return the next significant token; line breaks carry no meaning between statements."""
        return self._lexer.next_significant_token()

    def _expect(self, token_type: TokenType, expected: str, context: str) -> Token:
        """Consume the next token, raising ParseError unless it has the given type."""
        tok = self._next()
        if tok.type != token_type:
            raise unexpected(expected, tok, context)
        return tok

    # ------------------------------------------------------------------
    # Stanzas
    # ------------------------------------------------------------------

    def _parse_handle(self) -> HandleStanza:
        """Parse: handle "<path>" { expect* [tx] }

        The tx command is the last statement allowed in a handle stanza.
        """
        context = "'handle' stanza"
        path_tok = self._next()
        if path_tok.type != TokenType.STRING or not path_tok.value.startswith("/"):
            raise unexpected("a URI path starting with '/'", path_tok, context)
        self._expect(TokenType.LBRACE, "'{'", context)

        expectations: list[Expect] = []
        response = TxResponse()
        while True:
            tok = self._next()
            if tok.type == TokenType.RBRACE:
                break
            if tok.type == TokenType.EXPECT:
                expectations.append(parse_expect(self._lexer))
            elif tok.type == TokenType.TX:
                response = parse_tx_response(self._lexer)
                self._expect(TokenType.RBRACE, "'}' after 'tx' command", context)
                break
            elif tok.type == TokenType.EOF:
                raise unexpected("'}'", tok, context)
            else:
                raise unexpected("'expect', 'tx', or '}'", tok, context)

        return HandleStanza(uri_path=path_tok.value, expectations=expectations, response=response)

    def _parse_client(self) -> ClientStanza:
        """Parse: client "<name>" { (tx | expect)* }

        At most one tx command is allowed; it may appear before or after the
        expectations.
        """
        context = "'client' stanza"
        name_tok = self._expect(TokenType.STRING, "a name for the client", context)
        self._expect(TokenType.LBRACE, "'{'", context)

        expectations: list[Expect] = []
        request: TxRequest | None = None
        while True:
            tok = self._next()
            if tok.type == TokenType.RBRACE:
                break
            if tok.type == TokenType.TX:
                if request is not None:
                    raise ParseError(
                        f"Only one 'tx' command is allowed in {context} {name_tok.value!r}",
                        tok.line,
                        tok.column,
                    )
                request = parse_tx_request(self._lexer)
            elif tok.type == TokenType.EXPECT:
                expectations.append(parse_expect(self._lexer))
            elif tok.type == TokenType.EOF:
                raise unexpected("'}'", tok, context)
            else:
                raise unexpected("'tx', 'expect', or '}'", tok, context)

        return ClientStanza(
            name=name_tok.value,
            request=request if request is not None else TxRequest(),
            expectations=expectations,
        )
