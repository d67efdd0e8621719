# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""ToolDispatcher — routes a tool call to its executor and returns a ToolResult.

Call flow::

    call_tool(name, arguments)
      -> catalog lookup            (UnknownToolError)
      -> argument validation       (InvalidArgumentsError)
      -> per-session tool lock
      -> executor(ActionContext, args)
      -> ToolResult

No exception escapes ``call_tool`` (cancellation aside): failures are data
once they cross this boundary.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

import structlog
from playwright.async_api import Error as PlaywrightError

from .actions import EXECUTORS, Executor
from .catalog import TOOL_CATALOG, ToolSpec, get_tool
from .context import ActionContext
from .engine import BrowserLauncher, PlaywrightLauncher
from .errors import McpPlaywrightError
from .results import ToolResult, from_exception
from .session_registry import SessionRegistry, SessionStore

logger = logging.getLogger(__name__)

# Failures that are expected outcomes of a tool call; anything else is logged with a traceback
_EXPECTED_ERRORS = (McpPlaywrightError, PlaywrightError, TimeoutError, OSError)


class ToolDispatcher:
    """Stateless per call; session state lives in the injected store."""

    def __init__(self, store: SessionStore | None = None, launcher: BrowserLauncher | None = None) -> None:
        self.store: SessionStore = store if store is not None else SessionRegistry()
        self.launcher: BrowserLauncher = launcher if launcher is not None else PlaywrightLauncher()
        self._executors: dict[str, Executor] = {}
        for spec in TOOL_CATALOG:
            args_model, executor = EXECUTORS[spec.name]
            if args_model is not spec.args_model:
                raise TypeError(
                    f"Executor for {spec.name} expects {args_model.__name__}, catalog has {spec.args_model.__name__}"
                )
            self._executors[spec.name] = executor

    def list_tools(self) -> list[ToolSpec]:
        """The tool catalog, in advertisement order."""
        return list(TOOL_CATALOG)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Invoke *name* with a raw argument bag. Never raises (except on cancellation)."""
        request_id = uuid.uuid4().hex[:12]
        with structlog.contextvars.bound_contextvars(request_id=request_id, tool=name, session_id=None):
            try:
                text = await self._invoke(name, arguments, request_id)
            except Exception as exc:
                result = from_exception(exc, tool=name)
                if isinstance(exc, _EXPECTED_ERRORS):
                    logger.warning("Tool %s failed (%s): %s", name, result.kind, result.text)
                else:
                    logger.error("Tool %s raised unexpectedly", name, exc_info=True)
                return result
            logger.debug("Tool %s succeeded", name)
            return ToolResult.success(text, tool=name)

    async def envelope(self, name: str, arguments: dict[str, Any] | None = None) -> str:
        """``call_tool`` collapsed to the single text block sent over the wire."""
        result = await self.call_tool(name, arguments)
        return result.envelope_text()

    async def shutdown(self) -> int:
        """Close every open session. Safe to call more than once."""
        return await self.store.drain()

    # ── Internal ─────────────────────────────────────────────────────

    async def _invoke(self, name: str, arguments: dict[str, Any] | None, request_id: str) -> str:
        spec = get_tool(name)
        args = spec.validate(arguments)
        structlog.contextvars.bind_contextvars(session_id=args.session_id)
        ctx = ActionContext(request_id=request_id, tool=name, store=self.store, launcher=self.launcher)
        # Same-session calls run one at a time; different sessions may overlap
        async with self.store.tool_lock(args.session_id):
            return await self._executors[name](ctx, args)
