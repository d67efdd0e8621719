# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import mcp_playwright  # noqa: F401
except ImportError:
    raise ImportError("mcp_playwright is not installed. Run: pip install -e '.[dev]'") from None

import pytest

from mcp_playwright.dispatcher import ToolDispatcher
from mcp_playwright.session_registry import SessionRegistry
from tests._fakes import FakeLauncher


@pytest.fixture(autouse=True)
def _block_real_browser(request, monkeypatch):
    """Safety net: prevent real Playwright drivers in unit tests.

    Tests that exercise PlaywrightLauncher patch
    ``mcp_playwright.engine.async_playwright`` themselves; that patch takes
    priority over this fixture.  Opt out entirely with::

        @pytest.mark.allow_real_playwright
    """
    if "allow_real_playwright" in request.keywords:
        return

    def _no_real_playwright():
        raise RuntimeError(
            "Test tried to start a real Playwright driver. Patch 'mcp_playwright.engine.async_playwright' in your test."
        )

    monkeypatch.setattr("mcp_playwright.engine.async_playwright", _no_real_playwright)


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def dispatcher(registry, launcher) -> ToolDispatcher:
    return ToolDispatcher(registry, launcher)
