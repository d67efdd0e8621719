# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""mcp-playwright MCP server.

Binds the tool catalog and dispatcher to the MCP low-level server over
stdio.  ``tools/list`` advertises the catalog; ``tools/call`` goes through
the dispatcher and always answers with one text block, so failures reach
the caller as ``Error: ...`` text rather than protocol errors.

Shutdown: when stdin closes, or on SIGINT/SIGTERM, every open browser
session is drained before the Playwright driver stops.  A signal ends the
process right after that cleanup, since the stdio reader cannot be
cancelled while stdin is open.  All logging goes to stderr.
"""

from __future__ import annotations

import logging
import os
import signal
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import anyio
import anyio.abc
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .catalog import ToolSpec
from .config import ServerConfig, parse_server_args
from .dispatcher import ToolDispatcher
from .engine import PlaywrightLauncher
from .results import ToolResult
from .session_registry import SessionRegistry

logger = logging.getLogger("mcp_playwright.server")

SERVER_NAME = "mcp-playwright"

try:
    from importlib.metadata import version as _pkg_version

    SERVER_VERSION = _pkg_version("mcp-playwright")
except Exception:
    SERVER_VERSION = "unknown"


# ── Catalog / result → MCP types ─────────────────────────────────────


def to_mcp_tool(spec: ToolSpec) -> types.Tool:
    return types.Tool(
        name=spec.name,
        description=spec.description,
        inputSchema=spec.input_schema(),
        annotations=types.ToolAnnotations(
            readOnlyHint=spec.read_only,
            destructiveHint=spec.destructive,
            openWorldHint=True,
        ),
    )


def to_envelope(result: ToolResult) -> list[types.TextContent]:
    """The uniform envelope: one text block, same shape for success and failure."""
    return [types.TextContent(type="text", text=result.envelope_text())]


def make_handlers(
    dispatcher: ToolDispatcher,
) -> tuple[
    Callable[[], Awaitable[list[types.Tool]]],
    Callable[[str, dict[str, Any] | None], Awaitable[list[types.TextContent]]],
]:
    """Return the ``tools/list`` and ``tools/call`` handlers bound to *dispatcher*."""

    async def list_tools() -> list[types.Tool]:
        return [to_mcp_tool(spec) for spec in dispatcher.list_tools()]

    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        result = await dispatcher.call_tool(name, arguments)
        return to_envelope(result)

    return list_tools, call_tool


def build_server(dispatcher: ToolDispatcher) -> Server:
    """Create an MCP server bound to *dispatcher*.

    Schema validation is left to the dispatcher so invalid arguments come
    back in the normal envelope.
    """
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION)
    list_tools, call_tool = make_handlers(dispatcher)
    server.list_tools()(list_tools)
    server.call_tool(validate_input=False)(call_tool)
    return server


# ── Serve loop ───────────────────────────────────────────────────────

# Upper bound for closing every session at shutdown
SHUTDOWN_TIMEOUT = 10.0


def _exit_process(code: int) -> None:
    logging.shutdown()
    os._exit(code)


async def _release(dispatcher: ToolDispatcher, launcher: PlaywrightLauncher) -> None:
    """Drain every session, then stop the driver. Shielded and time-bounded."""
    with anyio.move_on_after(SHUTDOWN_TIMEOUT, shield=True) as scope:
        closed = await dispatcher.shutdown()
        logger.info("Sessions drained (%d closed cleanly)", closed)
        await launcher.stop()
    if scope.cancelled_caught:
        logger.warning("Shutdown cleanup timed out after %.0fs", SHUTDOWN_TIMEOUT)


async def _shutdown_on_signal(
    dispatcher: ToolDispatcher,
    launcher: PlaywrightLauncher,
    *,
    task_status: anyio.abc.TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
) -> None:
    """Release all browsers on SIGINT/SIGTERM, then end the process.

    The stdio reader blocks in a worker-thread ``readline()`` that cannot be
    cancelled, so the serve loop would not unwind while stdin stays open.
    Cleanup therefore runs here, before the exit.
    """
    with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
        task_status.started()
        async for signum in signals:
            logger.info("Received %s, shutting down", signal.Signals(signum).name)
            await _release(dispatcher, launcher)
            logger.info("%s stopped", SERVER_NAME)
            _exit_process(0)
            return


async def serve(config: ServerConfig) -> None:
    """Run the stdio server until stdin closes or a shutdown signal arrives."""
    async with PlaywrightLauncher(config.launcher_config()) as launcher:
        dispatcher = ToolDispatcher(SessionRegistry(), launcher)
        server = build_server(dispatcher)
        try:
            async with anyio.create_task_group() as tg:
                await tg.start(_shutdown_on_signal, dispatcher, launcher)
                async with stdio_server() as (read_stream, write_stream):
                    await server.run(read_stream, write_stream, server.create_initialization_options())
                # stdin closed, stop the signal watcher
                tg.cancel_scope.cancel()
        finally:
            await _release(dispatcher, launcher)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the MCP server. Returns the process exit code."""
    config = parse_server_args(argv if argv is not None else sys.argv[1:])

    # Configure structlog BEFORE any log output
    from .logging_config import configure as configure_logging

    configure_logging(json_output=config.json_logs, level=config.log_level)

    logger.info(
        "Starting %s %s (stdio, auto_install=%s)",
        SERVER_NAME,
        SERVER_VERSION,
        config.auto_install,
    )
    try:
        anyio.run(serve, config)
    except KeyboardInterrupt:
        logger.info("Interrupted before signal handlers were installed")
    except Exception:
        logger.error("Server failed", exc_info=True)
        return 1
    logger.info("%s stopped", SERVER_NAME)
    return 0


if __name__ == "__main__":
    sys.exit(main())
