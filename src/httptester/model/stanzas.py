# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Commands and stanzas making up a parsed HTC program.

All models are frozen: a Program is built once by the parser and only read
afterwards, so it can be shared freely between the origin worker threads and
the client loop.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import Field as _Field

from httptester.model.types import ExpectField, Operator, Side

# ###############
# Public Interface
# ###############


class Expect(BaseModel):
    """A single assertion such as ``req.method eq "GET"``.

    Attributes:
        side: Whether the assertion was written against ``req`` or ``resp``.
        field: The compared part of the message.
        header_name: The header to look up; set if and only if field is HEADERS.
        operator: How actual and expected values are compared.
        expected: The expected value, always kept as text (status codes included).
        verbatim: Human-readable reconstruction of the assertion, for diagnostics only.
        pattern: The compiled form of ``expected`` when operator is MATCHES.
    """

    model_config = ConfigDict(frozen=True)

    side: Side
    field: ExpectField
    header_name: str | None = None
    operator: Operator
    expected: str
    verbatim: str = ""
    pattern: re.Pattern[str] | None = None

    @model_validator(mode="before")
    @classmethod
    def _compile_pattern(cls, data: object) -> object:
        if not isinstance(data, dict) or data.get("pattern") is not None:
            return data
        try:
            operator = Operator(data.get("operator"))
        except ValueError:
            # Left for field validation to report.
            return data
        if operator != Operator.MATCHES:
            return data
        expected = data.get("expected", "")
        try:
            return {**data, "pattern": re.compile(expected)}
        except re.error as exc:
            raise ValueError(f"invalid regular expression {expected!r}: {exc}") from exc

    @model_validator(mode="after")
    def _check_invariants(self) -> Expect:
        if (self.field == ExpectField.HEADERS) != (self.header_name is not None):
            raise ValueError("header_name must be set if and only if field is 'headers'")
        if (self.operator == Operator.MATCHES) != (self.pattern is not None):
            raise ValueError("pattern must be set if and only if operator is '~'")
        return self

    def __str__(self) -> str:
        return f'"{self.verbatim}"'


class TxResponse(BaseModel):
    """The canned response an origin handler sends back.

    Example script line: ``tx -body "Hello world!" -header "X-HTC-Origin: true" -status 200``
    """

    model_config = ConfigDict(frozen=True)

    status_code: int = 200
    headers: dict[str, str] = _Field(default_factory=dict)
    body: str = ""

    def __str__(self) -> str:
        return f'HTTP {self.status_code}: "{self.body}"'


class TxRequest(BaseModel):
    """The request a client sends through the proxy under test.

    Example script line: ``tx -url "/hello/world" -header "X-HTC-Origin: true" -method "HEAD"``
    """

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    uri: str = ""
    headers: dict[str, str] = _Field(default_factory=dict)
    body: str = ""

    def __str__(self) -> str:
        lines = [f"{self.method} {self.uri or '/'}"]
        lines.extend(f"{key}: {value}" for key, value in self.headers.items())
        return "\n".join(lines)


class HandleStanza(BaseModel):
    """Origin-side behaviour for one URI path."""

    model_config = ConfigDict(frozen=True)

    uri_path: str
    expectations: list[Expect] = _Field(default_factory=list)
    response: TxResponse = _Field(default_factory=TxResponse)

    @field_validator("uri_path")
    @classmethod
    def _check_uri_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"URI path must start with '/', got {value!r}")
        return value


class ClientStanza(BaseModel):
    """A named client: one request to send and assertions about its response."""

    model_config = ConfigDict(frozen=True)

    name: str
    request: TxRequest = _Field(default_factory=TxRequest)
    expectations: list[Expect] = _Field(default_factory=list)


class Program(BaseModel):
    """Top-level model representing a parsed HTC script."""

    model_config = ConfigDict(frozen=True)

    handlers: list[HandleStanza] = _Field(default_factory=list)
    clients: list[ClientStanza] = _Field(default_factory=list)

    @model_validator(mode="after")
    def _check_not_empty(self) -> Program:
        if not self.handlers and not self.clients:
            raise ValueError("at least one of 'handle' or 'client' stanza are needed")
        return self
