# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""structlog + stdlib bridge for the stdio server.

stdout carries the MCP protocol stream, so every record goes to one stderr
handler.  Records emitted during a tool call carry the dispatcher's bound
``request_id`` / ``tool`` / ``session_id``; fields bound as ``None`` (the
session before its arguments are validated) are dropped.

Leaf module: no mcp_playwright imports. Safe to call early in startup.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Bound by the dispatcher for the duration of one tool call
REQUEST_FIELDS = ("request_id", "tool", "session_id")

# Per-request chatter from the MCP server ("Processing request of type ...")
_CHATTY_LOGGERS = ("mcp.server.lowlevel.server",)


def _drop_unset_request_fields(logger, method_name, event_dict):
    for key in REQUEST_FIELDS:
        if key in event_dict and event_dict[key] is None:
            del event_dict[key]
    return event_dict


def resolve_level(level: str) -> int | None:
    """Numeric level for a name such as ``"debug"``; None if unknown."""
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else None


def configure(*, json_output: bool = False, level: str = "INFO") -> int:
    """Configure structlog with stdlib bridge.

    Args:
        json_output: True for JSON lines, False for human-readable output.
        level: Root logger level (default INFO). Unknown names fall back to
            INFO with a warning.

    Returns the numeric root level in effect.
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        _drop_unset_request_fields,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False, sort_keys=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)

    resolved = resolve_level(level)
    root.setLevel(resolved if resolved is not None else logging.INFO)
    if resolved is None:
        logging.getLogger(__name__).warning("Unknown log level %r, using INFO", level)

    # Only surface per-request MCP chatter when debugging
    chatty_level = logging.NOTSET if root.level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)

    return root.level
