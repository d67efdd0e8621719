# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""In-memory stand-ins for BrowserSession and BrowserLauncher.

FakeSession keeps a tiny page model (url, html, text per selector, present
selectors) so executors and the dispatcher can be exercised without a
browser.  Any page operation can be made to fail via ``fail_on``.
"""

from __future__ import annotations

import asyncio
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from mcp_playwright.engine import EngineKind

BLANK_HTML = "<html><head></head><body></body></html>"


def page_html(url: str) -> str:
    return f"<html><head><title>{url}</title></head><body><h1>Example Domain</h1></body></html>"


class FakeSession:
    def __init__(
        self,
        session_id: str,
        engine_kind: EngineKind = EngineKind.CHROMIUM,
        *,
        headless: bool = True,
        close_error: Exception | None = None,
    ) -> None:
        self.session_id = session_id
        self.engine_kind = engine_kind
        self.headless = headless
        self.close_error = close_error
        self.close_calls = 0
        self._closed = False

        self.url = "about:blank"
        self.html = BLANK_HTML
        self.texts: dict[str, str | None] = {}
        self.present: set[str] = set()
        self.clicks: list[str] = []
        self.fills: dict[str, str] = {}
        self.screenshots: list[tuple[str, bool]] = []
        self.scripts: dict[str, Any] = {}
        self.fail_on: dict[str, Exception] = {}
        # navigate() blocks on this when set
        self.gate: asyncio.Event | None = None
        self.max_concurrency = 0
        self._in_flight = 0

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _check(self, op: str) -> None:
        if self._closed:
            raise PlaywrightError("Target page, context or browser has been closed")
        exc = self.fail_on.get(op)
        if exc is not None:
            raise exc

    async def _track(self, delay: float = 0.0) -> None:
        self._in_flight += 1
        self.max_concurrency = max(self.max_concurrency, self._in_flight)
        try:
            await asyncio.sleep(delay)
        finally:
            self._in_flight -= 1

    async def navigate(self, url: str) -> None:
        self._check("navigate")
        if self.gate is not None:
            await self.gate.wait()
        await self._track(0.01)
        self.url = url
        self.html = page_html(url)
        self.texts.setdefault("h1", "Example Domain")
        self.present.add("h1")

    async def click(self, selector: str) -> None:
        self._check("click")
        if selector not in self.present:
            raise PlaywrightTimeoutError(
                f"Page.click: Timeout 30000ms exceeded.\nCall log:\n  - waiting for locator('{selector}')"
            )
        self.clicks.append(selector)

    async def fill(self, selector: str, text: str) -> None:
        self._check("fill")
        self.fills[selector] = text

    async def read_text(self, selector: str) -> str | None:
        self._check("read_text")
        return self.texts.get(selector)

    async def screenshot(self, path: str, *, full_page: bool = False) -> None:
        self._check("screenshot")
        self.screenshots.append((path, full_page))

    async def wait_for_selector(self, selector: str, *, timeout_ms: float) -> None:
        self._check("wait_for_selector")
        if selector in self.present:
            return
        await asyncio.sleep(timeout_ms / 1000)
        raise PlaywrightTimeoutError(
            f"Page.wait_for_selector: Timeout {timeout_ms:g}ms exceeded.\n"
            f"Call log:\n  - waiting for locator('{selector}') to be visible"
        )

    async def evaluate(self, script: str) -> Any:
        self._check("evaluate")
        if script in self.scripts:
            return self.scripts[script]
        if script.strip() == "document.title":
            return self.url
        return None

    async def content(self) -> str:
        self._check("content")
        return self.html

    async def close(self) -> None:
        self.close_calls += 1
        if self._closed:
            return
        self._closed = True
        if self.close_error is not None:
            raise self.close_error


class FakeLauncher:
    """Records every launch; optionally fails the next one."""

    def __init__(self) -> None:
        self.launched: list[FakeSession] = []
        self.fail_with: Exception | None = None
        self.delay = 0.0

    async def launch(self, session_id: str, engine_kind: EngineKind, *, headless: bool = True) -> FakeSession:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        session = FakeSession(session_id, engine_kind, headless=headless)
        self.launched.append(session)
        return session

    def last(self) -> FakeSession:
        return self.launched[-1]
