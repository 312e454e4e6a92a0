# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Semantic model for HTC programs (stanzas, commands, expectations)."""

from httptester.model.stanzas import (
    ClientStanza,
    Expect,
    HandleStanza,
    Program,
    TxRequest,
    TxResponse,
)
from httptester.model.types import ExpectField, Operator, Side

__all__ = [
    # Enumerations
    "Side",
    "ExpectField",
    "Operator",
    # Commands
    "Expect",
    "TxRequest",
    "TxResponse",
    # Stanzas
    "HandleStanza",
    "ClientStanza",
    "Program",
]
