# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mock origin server driven by handle stanzas."""

from httptester.origin.server import HEALTH_CHECK_PATH, OriginError, OriginServer

__all__ = [
    "HEALTH_CHECK_PATH",
    "OriginError",
    "OriginServer",
]
