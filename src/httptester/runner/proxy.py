# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lifecycle of the proxy process under test.

The proxy is started from a throw-away run root: the configured files are
rendered into a temporary directory, the command is spawned there, and the
proxy is considered ready once a GET through it reaches the mock origin's
health check.
"""

import logging
import shutil
import socket
import subprocess
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

import httpx

from httptester.runner.config import ProxyConfig

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class ProxyError(Exception):
    """Raised when the proxy cannot be set up, started, or does not become ready."""


def free_port(host: str = "127.0.0.1") -> int:
    """Return a TCP port that is currently free on *host*."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def wait_for_get(
    url: str,
    timeout: float = 30.0,
    interval: float = 0.2,
    is_alive: Callable[[], bool] | None = None,
) -> None:
    """Poll *url* with GET requests until it answers 200.

    Args:
        url: The URL to poll.
        timeout: Seconds to wait before giving up.
        interval: Seconds between attempts.
        is_alive: Optional check that aborts the wait early when it returns False.

    Raises:
        ProxyError: On a non-200 answer, when *is_alive* reports False, or on timeout.
    """
    deadline = time.monotonic() + timeout
    while True:
        time.sleep(interval)
        try:
            response = httpx.get(url, timeout=interval * 5, trust_env=False)
        except httpx.HTTPError:
            response = None
        if response is not None:
            if response.status_code != 200:
                raise ProxyError(f"Unexpected status code received from url {url}: {response.status_code}")
            logger.debug("Finished waiting for %s", url)
            return
        if is_alive is not None and not is_alive():
            raise ProxyError(f"Process exited while waiting for {url}")
        if time.monotonic() > deadline:
            raise ProxyError(f"Timed out after {timeout}s waiting for {url}")


class ProxyProcess:
    """A proxy spawned from a temporary run root."""

    def __init__(self, config: ProxyConfig, origin_port: int, ready_timeout: float = 30.0) -> None:
        self._config = config
        self._origin_port = origin_port
        self._ready_timeout = ready_timeout
        self._port = config.port or free_port()
        self._process: subprocess.Popen[bytes] | None = None
        self.tmpdir: Path | None = None

    @property
    def port(self) -> int:
        return self._port

    @property
    def address(self) -> str:
        return f"127.0.0.1:{self._port}"

    def start(self) -> None:
        """Render the run root, spawn the proxy, and wait until it forwards requests."""
        self.tmpdir = Path(tempfile.mkdtemp(prefix="htc-runroot-"))
        logger.debug("Proxy run root is %s", self.tmpdir)

        for relative, template in self._config.files.items():
            target = self.tmpdir / self._render(relative)
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(self._render(template), encoding="utf-8")
            except OSError as exc:
                raise ProxyError(f"Cannot write proxy file '{target}': {exc}") from exc

        command = [self._render(arg) for arg in self._config.command]
        logger.debug("Starting proxy: %s", " ".join(command))
        log_path = self.tmpdir / "proxy.log"
        try:
            with log_path.open("wb") as log_file:
                self._process = subprocess.Popen(
                    command,
                    cwd=self.tmpdir,
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                )
        except OSError as exc:
            raise ProxyError(f"Cannot start proxy '{command[0]}': {exc}") from exc

        wait_for_get(
            f"http://{self.address}{self._config.ready_path}",
            timeout=self._ready_timeout,
            is_alive=lambda: self._process is not None and self._process.poll() is None,
        )

    def stop(self) -> None:
        """Kill the proxy process."""
        if self._process is None:
            return
        if self._process.poll() is None:
            self._process.kill()
        self._process.wait()
        logger.debug("Proxy exited with code %s", self._process.returncode)
        self._process = None

    def cleanup(self) -> None:
        """Remove the run root unless the configuration asks to keep it."""
        if self.tmpdir is None or self._config.keep_tmpdir:
            return
        shutil.rmtree(self.tmpdir, ignore_errors=True)
        self.tmpdir = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _render(self, template: str) -> str:
        """Substitute run-root placeholders in *template*."""
        values = {
            "tmpdir": str(self.tmpdir),
            "proxy_port": str(self._port),
            "origin_port": str(self._origin_port),
        }
        for key, value in values.items():
            template = template.replace("{" + key + "}", value)
        return template
