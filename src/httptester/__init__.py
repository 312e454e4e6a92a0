# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""httptester: black-box testing of HTTP proxies with HTC scripts."""

__version__ = "0.1.0"
