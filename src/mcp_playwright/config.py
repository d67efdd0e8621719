# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Server configuration: command-line flags with MCP_PLAYWRIGHT_* environment overrides."""

from __future__ import annotations

import argparse
import os
from contextlib import suppress
from dataclasses import dataclass

from .engine import DEFAULT_INSTALL_TIMEOUT, LauncherConfig

ENV_PREFIX = "MCP_PLAYWRIGHT_"

_TRUTHY = ("1", "true", "yes")


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Settings fixed for the lifetime of one serve loop."""

    log_level: str = "INFO"
    json_logs: bool = False
    auto_install: bool = True
    install_timeout: float = DEFAULT_INSTALL_TIMEOUT

    def launcher_config(self) -> LauncherConfig:
        return LauncherConfig(auto_install=self.auto_install, install_timeout=self.install_timeout)


def _env(name: str) -> str:
    return os.environ.get(ENV_PREFIX + name, "").strip()


def _env_flag(name: str) -> bool:
    return _env(name).lower() in _TRUTHY


def build_server_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-playwright serve",
        description="Serve Playwright browser automation tools over MCP (stdio).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        metavar="LEVEL",
        help="Root log level (default: INFO, env: MCP_PLAYWRIGHT_LOG_LEVEL)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines on stderr (env: MCP_PLAYWRIGHT_JSON_LOGS)",
    )
    parser.add_argument(
        "--no-auto-install",
        action="store_true",
        help="Do not run 'playwright install' when a browser is missing (env: MCP_PLAYWRIGHT_NO_AUTO_INSTALL)",
    )
    parser.add_argument(
        "--install-timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help=f"Browser auto-install timeout (default: {DEFAULT_INSTALL_TIMEOUT}, env: MCP_PLAYWRIGHT_INSTALL_TIMEOUT)",
    )
    return parser


def parse_server_args(argv: list[str] | None = None) -> ServerConfig:
    """Parse server flags, then apply environment overrides.

    Boolean switches are enabled by either the flag or the environment.
    Explicit values win over the environment; invalid numbers in the
    environment are ignored.
    """
    args, _ = build_server_parser().parse_known_args(argv if argv is not None else [])

    log_level = args.log_level or _env("LOG_LEVEL") or "INFO"

    install_timeout = args.install_timeout
    if install_timeout is None:
        install_timeout = DEFAULT_INSTALL_TIMEOUT
        env_timeout = _env("INSTALL_TIMEOUT")
        if env_timeout:
            with suppress(ValueError):
                install_timeout = float(env_timeout)

    return ServerConfig(
        log_level=log_level.upper(),
        json_logs=args.json_logs or _env_flag("JSON_LOGS"),
        auto_install=not (args.no_auto_install or _env_flag("NO_AUTO_INSTALL")),
        install_timeout=install_timeout,
    )
