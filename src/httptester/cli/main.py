# Copyright 2026 httptester Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the httptester command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from yachalk import chalk

from httptester.evaluation.errors import EvaluationError
from httptester.origin.server import OriginError
from httptester.parser import ParseError, parse_file
from httptester.runner.client import ClientError
from httptester.runner.config import DEFAULT_CONFIG_NAME, RunnerConfig, RunnerConfigError, load_runner_config
from httptester.runner.proxy import ProxyError
from httptester.runner.run import run_program

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the httptester CLI."""
    parser = argparse.ArgumentParser(
        prog="httptester",
        description="httptester - black-box tests for HTTP proxies written in HTC scripts",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check the syntax of HTC scripts",
        description="Parse HTC scripts and report syntax errors without running them.",
    )
    check_parser.add_argument("files", nargs="+", type=Path, metavar="FILE", help="HTC scripts to check")

    # run subcommand
    run_parser = subparsers.add_parser(
        "run",
        help="Run an HTC script against a proxy",
        description=(
            "Start the mock origin and the proxy under test, send the client requests "
            "of the script through the proxy, and verify every expectation."
        ),
    )
    run_parser.add_argument("file", type=Path, metavar="FILE", help="HTC script to run")
    run_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Runner configuration file (default: {DEFAULT_CONFIG_NAME} if present)",
    )
    run_parser.add_argument(
        "--proxy-address",
        default=None,
        metavar="HOST:PORT",
        help="Send client requests to an already running proxy instead of starting one",
    )
    run_parser.add_argument("--verbose", action="store_true", help="Enable verbose mode")

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "run":
        return _cmd_run(args)
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    has_errors = False
    for path in args.files:
        try:
            program = parse_file(path)
        except ParseError as exc:
            print(f"Error: {path}: {exc}", file=sys.stderr)
            has_errors = True
            continue
        print(f"{path}: {len(program.handlers)} handler(s), {len(program.clients)} client(s)")

    if has_errors:
        return 1

    print("No issues found.")
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    """Handle the run subcommand."""
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        config = _load_config(args.config)
    except RunnerConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if args.proxy_address is not None:
        config = config.model_copy(update={"proxy": None, "proxy_address": args.proxy_address})

    try:
        program = parse_file(args.file)
    except ParseError as exc:
        print(f"Error: {args.file}: {exc}", file=sys.stderr)
        return 1

    try:
        result = run_program(program, config)
    except (OriginError, ProxyError, ClientError, EvaluationError) as exc:
        print(f"{chalk.red('FAIL')} {args.file}", file=sys.stderr)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if result.passed:
        print(f"{chalk.green('PASS')} {args.file}")
        return 0

    print(f"{chalk.red('FAIL')} {args.file}", file=sys.stderr)
    for failure in result.failures:
        if args.verbose and failure.context:
            print(failure.context, file=sys.stderr)
        print(f"  {failure}", file=sys.stderr)
    if result.tmpdir is not None:
        print(f"Proxy run root kept at {result.tmpdir}", file=sys.stderr)
    return 1


def _load_config(path: Path | None) -> RunnerConfig:
    """Load the runner configuration from *path*, or the default file when present."""
    if path is not None:
        return load_runner_config(path)
    default = Path.cwd() / DEFAULT_CONFIG_NAME
    if default.exists():
        return load_runner_config(default)
    return RunnerConfig()
