# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Runs a parsed program: origin up, proxy up, clients fire, verdicts collected."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from httptester.evaluation.expect import check
from httptester.model.stanzas import ClientStanza, Program
from httptester.origin.server import OriginServer
from httptester.runner.client import send_request
from httptester.runner.config import RunnerConfig
from httptester.runner.proxy import ProxyProcess

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class Failure:
    """A failed expectation.

    Attributes:
        source: Where the expectation was evaluated, e.g. ``client 'nemo'`` or ``origin``.
        message: The verdict, e.g. ``FAILED: "resp.status eq 200" (actual='404')``.
        context: The request and response involved, for client-side failures.
    """

    source: str
    message: str
    context: str = ""

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"


@dataclass
class RunResult:
    """Outcome of a whole run.

    Attributes:
        failures: Failed expectations, client-side first, then origin-side.
        tmpdir: The proxy run root, when one was kept for inspection.
    """

    failures: list[Failure] = field(default_factory=list)
    tmpdir: Path | None = None

    @property
    def passed(self) -> bool:
        return not self.failures


def run_program(program: Program, config: RunnerConfig | None = None) -> RunResult:
    """Execute *program* against the proxy described by *config*.

    Clients run in source order and the run stops at the first failed
    client expectation. Expectations on the origin side are collected while
    requests come in and reported after the clients are done.

    Raises:
        OriginError: If the mock origin cannot bind its port.
        ProxyError: If the proxy cannot be started.
        ClientError: If a client request cannot be sent.
        EvaluationError: If a client expectation does not apply to a response.
    """
    config = config or RunnerConfig()
    result = RunResult()

    origin = OriginServer(port=config.origin_port)
    for stanza in program.handlers:
        origin.add_handler(stanza)
    origin.start()

    proxy: ProxyProcess | None = None
    try:
        if config.proxy is not None:
            proxy = ProxyProcess(config.proxy, origin.port, ready_timeout=config.ready_timeout)
            proxy.start()
            target = proxy.address
        elif config.proxy_address is not None:
            target = config.proxy_address
        else:
            target = origin.address
        logger.debug("Clients target %s", target)

        for client in program.clients:
            failure = _run_client(client, target, config.request_timeout)
            if failure is not None:
                result.failures.append(failure)
                break
    finally:
        if proxy is not None:
            proxy.stop()
        origin.stop()

    result.failures.extend(Failure(source="origin", message=message) for message in origin.failures)

    if proxy is not None:
        if result.passed:
            proxy.cleanup()
        result.tmpdir = proxy.tmpdir
    return result


# ################
# Implementation
# ################


def _run_client(client: ClientStanza, target: str, timeout: float) -> Failure | None:
    """Send one client's request and return its first failed expectation, if any."""
    logger.info("Sending %s", client.request)
    response = send_request(client.request, target, timeout=timeout)
    for expect in client.expectations:
        verdict = check(expect, response)
        logger.debug("%s", verdict.describe())
        if not verdict.passed:
            return Failure(
                source=f"client {client.name!r}",
                message=verdict.describe(),
                context=f"{client.request}\n\n{response}",
            )
    return None
