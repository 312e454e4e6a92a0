# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Runner configuration: which proxy to test and how to start it.

The configuration lives in a small YAML file::

    proxy:
      command: ["{tmpdir}/bin/traffic_server", "--run-root={tmpdir}/runroot.yaml"]
      files:
        etc/remap.config: "map / http://127.0.0.1:{origin_port}\\n"
    request-timeout: 5

``{tmpdir}``, ``{proxy_port}`` and ``{origin_port}`` are substituted in the
command and in the content of every generated file.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from httptester.origin.server import HEALTH_CHECK_PATH

# ###############
# Public Interface
# ###############

DEFAULT_CONFIG_NAME = ".httptester.yaml"


class RunnerConfigError(Exception):
    """Raised when the runner configuration cannot be read or is invalid."""


class ProxyConfig(BaseModel):
    """How to launch the proxy under test."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    command: list[str] = Field(min_length=1)
    files: dict[str, str] = Field(default_factory=dict)
    port: int = 0
    ready_path: str = Field(alias="ready-path", default=HEALTH_CHECK_PATH)
    keep_tmpdir: bool = Field(alias="keep-tmpdir", default=False)


class RunnerConfig(BaseModel):
    """Top-level runner configuration.

    With neither ``proxy`` nor ``proxy-address`` set, clients talk to the
    mock origin directly, which is handy to check a script on its own.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    proxy: ProxyConfig | None = None
    proxy_address: str | None = Field(alias="proxy-address", default=None)
    origin_port: int = Field(alias="origin-port", default=0)
    request_timeout: float = Field(alias="request-timeout", default=10.0, gt=0)
    ready_timeout: float = Field(alias="ready-timeout", default=30.0, gt=0)

    @model_validator(mode="after")
    def _check_proxy_target(self) -> "RunnerConfig":
        if self.proxy is not None and self.proxy_address is not None:
            raise ValueError("'proxy' and 'proxy-address' are mutually exclusive")
        return self


def load_runner_config(path: Path) -> RunnerConfig:
    """Load and validate a runner configuration file.

    An empty file is treated as the default configuration.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A validated RunnerConfig instance.

    Raises:
        RunnerConfigError: If the file cannot be read, contains invalid YAML,
            or does not conform to the expected schema.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise RunnerConfigError(f"Runner config file not found: {path}") from None
    except OSError as exc:
        raise RunnerConfigError(f"Cannot read runner config '{path}': {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise RunnerConfigError(f"Invalid YAML in runner config '{path}': {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise RunnerConfigError(f"{path}: runner config must be a YAML mapping")

    try:
        return RunnerConfig.model_validate(data)
    except ValidationError as exc:
        raise RunnerConfigError(f"Invalid runner config '{path}': {exc}") from exc
