# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Command-line interface for httptester."""
