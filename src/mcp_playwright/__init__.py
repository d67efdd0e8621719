# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""mcp-playwright: Playwright browser automation as MCP tools.

Tool calls are routed by ``sessionId`` to live browser sessions:
- SessionRegistry: at most one browser session per id
- ToolDispatcher: catalog lookup, argument validation, executor, ToolResult
- TOOL_CATALOG: tool names, descriptions and argument models
"""

from __future__ import annotations

from .catalog import TOOL_CATALOG, ToolSpec
from .dispatcher import ToolDispatcher
from .engine import BrowserSession, EngineKind, PlaywrightLauncher
from .results import ErrorKind, ToolResult
from .session_registry import SessionRegistry, SessionStore

__all__ = [
    "TOOL_CATALOG",
    "BrowserSession",
    "EngineKind",
    "ErrorKind",
    "PlaywrightLauncher",
    "SessionRegistry",
    "SessionStore",
    "ToolDispatcher",
    "ToolResult",
    "ToolSpec",
]
