# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for HTC (httptester test case) scripts.

Converts raw script text into tokens on demand. The scanner never fails:
unrecognized input surfaces as ILLEGAL tokens and it is up to the parser to
reject them where something specific was expected.
"""

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the HTC lexer."""

    # Special tokens
    EOF = "EOF"
    ILLEGAL = "ILLEGAL"
    WS = "WS"
    NEWLINE = "NEWLINE"

    # Literals
    STRING = "STRING"
    INTEGER = "INTEGER"

    # Punctuation
    DOT = "."
    LBRACKET = "["
    RBRACKET = "]"
    LBRACE = "{"
    RBRACE = "}"

    # Operators
    EQ = "eq"
    NE = "ne"
    TILDE = "~"

    # Keywords
    HANDLE = "handle"
    CLIENT = "client"
    EXPECT = "expect"
    TX = "tx"
    REQ = "req"
    RESP = "resp"
    METHOD = "method"
    STATUS = "status"
    HEADERS = "headers"
    BODY = "body"

    # Flags
    BODY_ARG = "-body"
    STATUS_ARG = "-status"
    HEADER_ARG = "-header"
    METHOD_ARG = "-method"
    URL_ARG = "-url"


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        type: The kind of token.
        value: The raw text of the token (string content without quotes for STRING tokens).
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
    """

    type: TokenType
    value: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.type == TokenType.ILLEGAL:
            return f"ILLEGAL token {self.value!r}"
        if self.type == TokenType.STRING:
            return f"STRING: {self.value}"
        if self.type == TokenType.INTEGER:
            return f"INTEGER: {self.value}"
        if self.type == TokenType.EOF:
            return "EOF"
        if self.type == TokenType.NEWLINE:
            return "end of line"
        return self.value


class Lexer:
    """On-demand scanner over the full text of a script.

    Tokens are produced one at a time by next_token(). The most recently
    returned token can be pushed back once with unread(), which lets a
    command parser stop at a terminator and leave it for its caller.
    """

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._last: Token | None = None
        self._pushed_back: Token | None = None

    def next_token(self) -> Token:
        """Return the next raw token, including whitespace and line breaks."""
        if self._pushed_back is not None:
            tok = self._pushed_back
            self._pushed_back = None
        else:
            tok = self._scan()
        self._last = tok
        return tok

    def next_significant_token(self, skip_line_breaks: bool = True) -> Token:
        """Return the next token that is not whitespace.

        Comments never reach the caller: they are folded into NEWLINE tokens.
        With skip_line_breaks=False those NEWLINE tokens are returned, so a
        statement parser can tell where its line ends.
        """
        while True:
            tok = self.next_token()
            if tok.type == TokenType.WS:
                continue
            if tok.type == TokenType.NEWLINE and skip_line_breaks:
                continue
            return tok

    def unread(self) -> None:
        """Push the last returned token back so the next call returns it again."""
        if self._last is not None:
            self._pushed_back = self._last
            self._last = None

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan(self) -> Token:
        """Scan one token starting at the current position."""
        ch = self._current()
        line = self._line
        col = self._column

        if ch == "":
            return Token(TokenType.EOF, "", line, col)
        if ch in _WHITESPACE:
            return self._scan_whitespace(line, col)
        if _is_ident_char(ch):
            return self._scan_identifier_or_keyword(line, col)
        if ch == '"':
            return self._scan_string(line, col)
        if ch == "#":
            return self._scan_comment(line, col)
        self._advance()
        if ch in _SINGLE_CHAR_TOKENS:
            return Token(_SINGLE_CHAR_TOKENS[ch], ch, line, col)
        return Token(TokenType.ILLEGAL, ch, line, col)

    # ------------------------------------------------------------------
    # Scanners
    # ------------------------------------------------------------------

    def _scan_whitespace(self, line: int, col: int) -> Token:
        """Consume a whitespace run; it is a line break if it spans lines."""
        saw_newline = False
        while self._current() != "" and self._current() in _WHITESPACE:
            if self._advance() == "\n":
                saw_newline = True
        if saw_newline:
            return Token(TokenType.NEWLINE, "\n", line, col)
        return Token(TokenType.WS, " ", line, col)

    def _scan_comment(self, line: int, col: int) -> Token:
        """Consume from '#' through the end of the line (inclusive)."""
        while self._current() != "":
            if self._advance() == "\n":
                return Token(TokenType.NEWLINE, "\n", line, col)
        return Token(TokenType.EOF, "", self._line, self._column)

    def _scan_string(self, line: int, col: int) -> Token:
        """Scan a double-quoted string verbatim; there are no escape sequences."""
        self._advance()  # opening "
        chars: list[str] = []
        while self._current() != "":
            ch = self._advance()
            if ch == '"':
                break
            chars.append(ch)
        return Token(TokenType.STRING, "".join(chars), line, col)

    def _scan_identifier_or_keyword(self, line: int, col: int) -> Token:
        """Scan an identifier run and classify it as keyword, flag, integer, or ILLEGAL."""
        start = self._pos
        while self._current() != "" and _is_ident_char(self._current()):
            self._advance()
        value = self._source[start : self._pos]
        if value in _KEYWORDS:
            return Token(_KEYWORDS[value], value, line, col)
        if _is_integer(value):
            return Token(TokenType.INTEGER, value, line, col)
        return Token(TokenType.ILLEGAL, value, line, col)


def tokenize(source: str) -> list[Token]:
    """Tokenize HTC source text into its significant tokens.

    Whitespace, line breaks and comments are dropped. The final token is
    always a single EOF token.

    Args:
        source: The full text of an .htc script.

    Returns:
        A list of Token objects ending with a single EOF token.
    """
    lexer = Lexer(source)
    tokens: list[Token] = []
    while True:
        tok = lexer.next_significant_token()
        tokens.append(tok)
        if tok.type == TokenType.EOF:
            return tokens


# ################
# Implementation
# ################

_KEYWORDS: dict[str, TokenType] = {
    "eq": TokenType.EQ,
    "ne": TokenType.NE,
    "handle": TokenType.HANDLE,
    "client": TokenType.CLIENT,
    "expect": TokenType.EXPECT,
    "tx": TokenType.TX,
    "req": TokenType.REQ,
    "resp": TokenType.RESP,
    "method": TokenType.METHOD,
    "status": TokenType.STATUS,
    "headers": TokenType.HEADERS,
    "body": TokenType.BODY,
    "-body": TokenType.BODY_ARG,
    "-status": TokenType.STATUS_ARG,
    "-header": TokenType.HEADER_ARG,
    "-method": TokenType.METHOD_ARG,
    "-url": TokenType.URL_ARG,
}

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    ".": TokenType.DOT,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "~": TokenType.TILDE,
}

_WHITESPACE = " \t\r\n"


def _is_ident_char(ch: str) -> bool:
    """Return True for the characters an identifier run is made of."""
    return ch.isascii() and (ch.isalnum() or ch in "-_")


def _is_integer(text: str) -> bool:
    """Return True if *text* is a decimal integer with an optional sign."""
    digits = text[1:] if text[:1] in ("+", "-") else text
    return digits.isascii() and digits.isdigit()
