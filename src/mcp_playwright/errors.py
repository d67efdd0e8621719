# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""mcp-playwright exception hierarchy.

All package errors inherit from McpPlaywrightError, so the dispatcher can
classify known failures by class and treat anything else as an unexpected
action failure.
"""

from __future__ import annotations


class McpPlaywrightError(Exception):
    """Base exception for all mcp-playwright errors."""


class SessionNotFoundError(McpPlaywrightError):
    """No browser session is registered under the requested id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"No active browser session found with ID: {session_id}. Please launch a browser first.")
        self.session_id = session_id


class UnsupportedEngineError(McpPlaywrightError):
    """launch_browser was asked for an engine kind that does not exist."""

    def __init__(self, engine_kind: str) -> None:
        super().__init__(f"Unsupported browser type: {engine_kind}")
        self.engine_kind = engine_kind


class UnknownToolError(McpPlaywrightError):
    """The dispatcher received a tool name that is not in the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class InvalidArgumentsError(McpPlaywrightError):
    """Tool arguments failed validation against the catalog model."""

    def __init__(self, tool: str, problems: list[str]) -> None:
        super().__init__(f"Invalid arguments for {tool}: {'; '.join(problems)}")
        self.tool = tool
        self.problems = problems


class ActionFailure(McpPlaywrightError):
    """The automation engine failed while performing an action."""


class ScriptError(ActionFailure):
    """A script passed to execute_script threw inside the page."""


class BrowserUnavailableError(ActionFailure):
    """The browser executable could not be launched (missing or install failed)."""
