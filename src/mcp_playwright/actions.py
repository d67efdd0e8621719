# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Action executors, one per tool.

Each executor takes an :class:`ActionContext` and its validated argument
model, resolves (or, for launch, creates) the session through the store,
performs one automation call and returns the confirmation text.  Failures
propagate as exceptions; the dispatcher turns them into results.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .catalog import (
    ClickElementArgs,
    CloseBrowserArgs,
    ExecuteScriptArgs,
    FillInputArgs,
    GetPageSourceArgs,
    GetTextArgs,
    LaunchBrowserArgs,
    NavigateToArgs,
    TakeScreenshotArgs,
    ToolArgs,
    WaitForElementArgs,
)
from .context import ActionContext
from .engine import parse_engine_kind
from .errors import ScriptError
from .results import clean_message

logger = logging.getLogger(__name__)

Executor = Callable[[ActionContext, Any], Awaitable[str]]


# ── Session lifecycle ────────────────────────────────────────────────


async def launch_browser(ctx: ActionContext, args: LaunchBrowserArgs) -> str:
    """Launch a browser under ``session_id``, replacing any session already there."""
    # Resolve the kind first so a bad request leaves the existing session alone
    kind = parse_engine_kind(args.browser_type)

    if args.session_id in ctx.store:
        previous = ctx.store.remove(args.session_id)
        try:
            await previous.close()
        except Exception:
            logger.warning("Closing replaced session %s failed", args.session_id, exc_info=True)

    session = await ctx.launcher.launch(args.session_id, kind, headless=args.headless)
    ctx.store.put(args.session_id, session)
    return f"Successfully launched {kind.value} browser with session ID: {args.session_id}"


async def close_browser(ctx: ActionContext, args: CloseBrowserArgs) -> str:
    session = ctx.store.get(args.session_id)
    try:
        await session.close()
    finally:
        # close() drops the handles even when it raises, so the entry must go too
        ctx.store.remove(args.session_id)
    return f"Browser session {args.session_id} closed successfully"


# ── Page interaction ─────────────────────────────────────────────────


async def navigate_to(ctx: ActionContext, args: NavigateToArgs) -> str:
    session = ctx.store.get(args.session_id)
    await session.navigate(args.url)
    return f"Successfully navigated to: {args.url}"


async def click_element(ctx: ActionContext, args: ClickElementArgs) -> str:
    session = ctx.store.get(args.session_id)
    await session.click(args.selector)
    return f"Successfully clicked element: {args.selector}"


async def fill_input(ctx: ActionContext, args: FillInputArgs) -> str:
    session = ctx.store.get(args.session_id)
    await session.fill(args.selector, args.text)
    return f"Successfully filled input {args.selector} with: {args.text}"


async def get_text(ctx: ActionContext, args: GetTextArgs) -> str:
    session = ctx.store.get(args.session_id)
    text = await session.read_text(args.selector)
    return f"Text content: {text or 'No text found'}"


async def wait_for_element(ctx: ActionContext, args: WaitForElementArgs) -> str:
    """Wait until *selector* appears; Playwright enforces the timeout itself."""
    session = ctx.store.get(args.session_id)
    await session.wait_for_selector(args.selector, timeout_ms=args.timeout)
    return f"Element appeared: {args.selector}"


# ── Page capture ─────────────────────────────────────────────────────


async def take_screenshot(ctx: ActionContext, args: TakeScreenshotArgs) -> str:
    """Write a PNG to ``path``; the path is returned, never the image bytes."""
    session = ctx.store.get(args.session_id)
    await session.screenshot(args.path, full_page=args.full_page)
    return f"Screenshot saved to: {args.path}"


async def get_page_source(ctx: ActionContext, args: GetPageSourceArgs) -> str:
    session = ctx.store.get(args.session_id)
    return await session.content()


async def execute_script(ctx: ActionContext, args: ExecuteScriptArgs) -> str:
    """Run *script* in the page's own context and render the return value.

    No sandboxing: arbitrary page-context code is what this tool is for.
    A script that throws is a ScriptError.  A value JSON cannot encode is
    rendered with ``str()`` rather than failing.
    """
    session = ctx.store.get(args.session_id)
    try:
        value = await session.evaluate(args.script)
    except PlaywrightTimeoutError:
        raise
    except PlaywrightError as exc:
        raise ScriptError(clean_message(exc)) from exc
    return f"Script result: {format_script_result(value)}"


def format_script_result(value: Any) -> str:
    """JSON with 2-space indent; ``undefined``/``null`` become ``null``."""
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


# ── Dispatch table ───────────────────────────────────────────────────

EXECUTORS: dict[str, tuple[type[ToolArgs], Executor]] = {
    "launch_browser": (LaunchBrowserArgs, launch_browser),
    "navigate_to": (NavigateToArgs, navigate_to),
    "click_element": (ClickElementArgs, click_element),
    "fill_input": (FillInputArgs, fill_input),
    "get_text": (GetTextArgs, get_text),
    "take_screenshot": (TakeScreenshotArgs, take_screenshot),
    "wait_for_element": (WaitForElementArgs, wait_for_element),
    "execute_script": (ExecuteScriptArgs, execute_script),
    "get_page_source": (GetPageSourceArgs, get_page_source),
    "close_browser": (CloseBrowserArgs, close_browser),
}
