# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Playwright automation engine for mcp-playwright.

A ``BrowserSession`` owns one browser process, one context and one page;
the three are created together by ``PlaywrightLauncher.launch()`` and closed
together by ``BrowserSession.close()``.  One Playwright driver is shared by
every session and started lazily on the first launch.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass
from enum import StrEnum
from types import TracebackType
from typing import Any, Protocol, runtime_checkable

from playwright.async_api import Browser, BrowserContext, BrowserType, Page, Playwright, async_playwright

from .errors import BrowserUnavailableError, UnsupportedEngineError

logger = logging.getLogger(__name__)

DEFAULT_INSTALL_TIMEOUT = 300  # seconds; a browser download is 100MB+

_MISSING_EXECUTABLE_MARKER = "executable doesn't exist"


class EngineKind(StrEnum):
    """Browser implementation family backing a session."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


def parse_engine_kind(value: str) -> EngineKind:
    """Return the EngineKind named by *value* or raise UnsupportedEngineError."""
    try:
        return EngineKind(value)
    except ValueError:
        raise UnsupportedEngineError(str(value)) from None


@dataclass(frozen=True, slots=True)
class LauncherConfig:
    """Process-wide launcher settings (from ServerConfig)."""

    auto_install: bool = True
    install_timeout: float = DEFAULT_INSTALL_TIMEOUT


# ── Session ──────────────────────────────────────────────────────────


class BrowserSession:
    """One live browser: process + context + page, owned together."""

    def __init__(
        self,
        session_id: str,
        engine_kind: EngineKind,
        browser: Browser,
        context: BrowserContext,
        page: Page,
    ) -> None:
        self.session_id = session_id
        self.engine_kind = engine_kind
        self._browser: Browser | None = browser
        self._context: BrowserContext | None = context
        self._page: Page | None = page

    def __repr__(self) -> str:
        state = "closed" if self.is_closed else "open"
        return f"BrowserSession({self.session_id!r}, {self.engine_kind.value}, {state})"

    @property
    def is_closed(self) -> bool:
        return self._browser is None

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError(f"Browser session '{self.session_id}' is closed.")
        return self._page

    @property
    def context(self) -> BrowserContext:
        if self._context is None:
            raise RuntimeError(f"Browser session '{self.session_id}' is closed.")
        return self._context

    # ── Page operations ──────────────────────────────────────────────

    async def navigate(self, url: str) -> None:
        await self.page.goto(url)

    async def click(self, selector: str) -> None:
        await self.page.click(selector)

    async def fill(self, selector: str, text: str) -> None:
        await self.page.fill(selector, text)

    async def read_text(self, selector: str) -> str | None:
        return await self.page.text_content(selector)

    async def screenshot(self, path: str, *, full_page: bool = False) -> None:
        await self.page.screenshot(path=path, full_page=full_page)

    async def wait_for_selector(self, selector: str, *, timeout_ms: float) -> None:
        await self.page.wait_for_selector(selector, timeout=timeout_ms)

    async def evaluate(self, script: str) -> Any:
        return await self.page.evaluate(script)

    async def content(self) -> str:
        return await self.page.content()

    # ── Teardown ─────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close the browser, releasing context and page with it.

        The handles are dropped even if ``Browser.close()`` raises, so a
        session is never left half torn down.  Closing twice is a no-op.
        """
        browser = self._browser
        if browser is None:
            return
        try:
            await browser.close()
        finally:
            self._browser = None
            self._context = None
            self._page = None
            logger.info("Browser session closed: %s (%s)", self.session_id, self.engine_kind.value)


# ── Launcher ─────────────────────────────────────────────────────────


@runtime_checkable
class BrowserLauncher(Protocol):
    """Factory for browser sessions: Playwright in production, fakes in tests."""

    async def launch(self, session_id: str, engine_kind: EngineKind, *, headless: bool = True) -> BrowserSession: ...


class PlaywrightLauncher:
    """Launches Playwright browsers on a shared, lazily started driver.

    Use as an async context manager so the driver is stopped on exit::

        async with PlaywrightLauncher() as launcher:
            session = await launcher.launch("default", EngineKind.CHROMIUM)
    """

    def __init__(self, config: LauncherConfig | None = None) -> None:
        self.config = config or LauncherConfig()
        self._playwright: Playwright | None = None
        self._driver_lock = asyncio.Lock()
        self._install_attempted: set[EngineKind] = set()

    async def __aenter__(self) -> PlaywrightLauncher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()

    @property
    def started(self) -> bool:
        return self._playwright is not None

    async def launch(self, session_id: str, engine_kind: EngineKind, *, headless: bool = True) -> BrowserSession:
        """Launch a browser and create its context and page.

        If context or page creation fails the browser is closed before the
        error propagates.
        """
        playwright = await self._ensure_driver()
        browser = await self._launch_browser(self._browser_type(playwright, engine_kind), engine_kind, headless)
        try:
            context = await browser.new_context()
            page = await context.new_page()
        except Exception:
            try:
                await browser.close()
            except Exception:
                logger.debug("browser.close() after failed context setup raised", exc_info=True)
            raise
        logger.info("Browser launched: %s (%s, headless=%s)", session_id, engine_kind.value, headless)
        return BrowserSession(session_id, engine_kind, browser, context, page)

    async def stop(self) -> None:
        """Stop the Playwright driver. Sessions must already be closed."""
        async with self._driver_lock:
            if self._playwright is None:
                return
            try:
                await self._playwright.stop()
            finally:
                self._playwright = None
                logger.info("Playwright driver stopped")

    # ── Internal ─────────────────────────────────────────────────────

    async def _ensure_driver(self) -> Playwright:
        async with self._driver_lock:
            if self._playwright is None:
                self._playwright = await async_playwright().start()
                logger.info("Playwright driver started")
            return self._playwright

    @staticmethod
    def _browser_type(playwright: Playwright, engine_kind: EngineKind) -> BrowserType:
        return {
            EngineKind.CHROMIUM: playwright.chromium,
            EngineKind.FIREFOX: playwright.firefox,
            EngineKind.WEBKIT: playwright.webkit,
        }[engine_kind]

    async def _launch_browser(self, browser_type: BrowserType, engine_kind: EngineKind, headless: bool) -> Browser:
        """Launch, auto-installing the browser on the first 'executable not found' error."""
        try:
            return await browser_type.launch(headless=headless)
        except Exception as exc:
            if _MISSING_EXECUTABLE_MARKER not in str(exc).lower():
                raise
            if not await self._auto_install(engine_kind):
                raise BrowserUnavailableError(
                    f"{engine_kind.value} is not installed. Please run: playwright install {engine_kind.value}"
                ) from exc
        return await browser_type.launch(headless=headless)

    async def _auto_install(self, engine_kind: EngineKind) -> bool:
        """Run ``playwright install <kind>`` once per engine kind per launcher.

        Returns True if install succeeded, False otherwise.
        stdout/stderr are captured to avoid polluting the MCP STDIO stream.
        """
        if not self.config.auto_install or engine_kind in self._install_attempted:
            return False
        self._install_attempted.add(engine_kind)

        logger.info("%s not found — running 'playwright install %s' …", engine_kind.value, engine_kind.value)
        try:
            proc = await asyncio.create_subprocess_exec(
                sys.executable,
                "-m",
                "playwright",
                "install",
                engine_kind.value,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            try:
                _stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.config.install_timeout)
            except TimeoutError:
                proc.kill()
                logger.warning("%s install timed out after %.0fs", engine_kind.value, self.config.install_timeout)
                return False
            if proc.returncode == 0:
                logger.info("%s installed successfully", engine_kind.value)
                return True
            logger.warning(
                "playwright install %s failed (rc=%d): %s",
                engine_kind.value,
                proc.returncode,
                stderr.decode(errors="replace")[:500],
            )
            return False
        except Exception:
            logger.warning("%s auto-install failed", engine_kind.value, exc_info=True)
            return False
