# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Orchestration of a test run against a proxy."""

from httptester.runner.client import ClientError, send_request
from httptester.runner.config import (
    DEFAULT_CONFIG_NAME,
    ProxyConfig,
    RunnerConfig,
    RunnerConfigError,
    load_runner_config,
)
from httptester.runner.proxy import ProxyError, ProxyProcess, free_port, wait_for_get
from httptester.runner.run import Failure, RunResult, run_program

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "ClientError",
    "Failure",
    "ProxyConfig",
    "ProxyError",
    "ProxyProcess",
    "RunResult",
    "RunnerConfig",
    "RunnerConfigError",
    "free_port",
    "load_runner_config",
    "run_program",
    "send_request",
    "wait_for_get",
]
