# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tool catalog: name, description and argument model for every tool.

Each tool's advertised ``inputSchema`` is generated from the same pydantic
model the dispatcher validates against, so the two cannot drift.  Wire
argument names are camelCase (``sessionId``, ``browserType``, ``fullPage``);
the models expose snake_case attributes and accept either spelling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .engine import EngineKind
from .errors import InvalidArgumentsError, UnknownToolError

DEFAULT_SESSION_ID = "default"
DEFAULT_SCREENSHOT_PATH = "screenshot.png"
DEFAULT_WAIT_TIMEOUT_MS = 30000


# ── Argument models ──────────────────────────────────────────────────


class ToolArgs(BaseModel):
    """Base for all tool argument models. Unknown keys are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class SessionArgs(ToolArgs):
    session_id: str = Field(default=DEFAULT_SESSION_ID, alias="sessionId", description="Browser session ID")


class LaunchBrowserArgs(SessionArgs):
    # Plain str: an unknown kind must surface as UnsupportedEngine, not as a validation error
    browser_type: str = Field(
        default=EngineKind.CHROMIUM.value,
        alias="browserType",
        description="Type of browser to launch",
        json_schema_extra={"enum": [kind.value for kind in EngineKind]},
    )
    headless: bool = Field(default=True, description="Run browser in headless mode")
    session_id: str = Field(
        default=DEFAULT_SESSION_ID,
        alias="sessionId",
        description="Unique identifier for this browser session",
    )


class NavigateToArgs(SessionArgs):
    url: str = Field(description="URL to navigate to")


class ClickElementArgs(SessionArgs):
    selector: str = Field(description="CSS selector or text content to click")


class FillInputArgs(SessionArgs):
    selector: str = Field(description="CSS selector for the input field")
    text: str = Field(description="Text to fill in the input")


class GetTextArgs(SessionArgs):
    selector: str = Field(description="CSS selector for the element")


class TakeScreenshotArgs(SessionArgs):
    path: str = Field(default=DEFAULT_SCREENSHOT_PATH, description="Path to save the screenshot")
    full_page: bool = Field(default=False, alias="fullPage", description="Capture full page")


class WaitForElementArgs(SessionArgs):
    selector: str = Field(description="CSS selector to wait for")
    timeout: float = Field(default=DEFAULT_WAIT_TIMEOUT_MS, ge=0, description="Timeout in milliseconds")


class ExecuteScriptArgs(SessionArgs):
    script: str = Field(description="JavaScript code to execute")


class GetPageSourceArgs(SessionArgs):
    pass


class CloseBrowserArgs(SessionArgs):
    session_id: str = Field(default=DEFAULT_SESSION_ID, alias="sessionId", description="Browser session ID to close")


# ── Catalog ──────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Declarative description of one tool."""

    name: str
    description: str
    args_model: type[ToolArgs]
    read_only: bool = False
    destructive: bool = False

    def input_schema(self) -> dict[str, Any]:
        """JSON Schema advertised to callers (wire names, defaults, required)."""
        schema = self.args_model.model_json_schema(by_alias=True)
        schema.pop("title", None)
        schema.setdefault("required", [])
        return schema

    def validate(self, arguments: dict[str, Any] | None) -> ToolArgs:
        """Validate a raw argument bag. Raises InvalidArgumentsError."""
        try:
            return self.args_model.model_validate(arguments or {})
        except PydanticValidationError as exc:
            raise InvalidArgumentsError(self.name, _format_problems(exc)) from None

    def describe(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema()}


def _format_problems(exc: PydanticValidationError) -> list[str]:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "arguments"
        problems.append(f"{loc}: {err['msg']}")
    return problems


TOOL_CATALOG: tuple[ToolSpec, ...] = (
    ToolSpec(
        "launch_browser",
        "Launch a new browser instance (chromium, firefox, or webkit)",
        LaunchBrowserArgs,
    ),
    ToolSpec("navigate_to", "Navigate to a specific URL", NavigateToArgs),
    ToolSpec("click_element", "Click on an element using CSS selector or text", ClickElementArgs, destructive=True),
    ToolSpec("fill_input", "Fill an input field with text", FillInputArgs, destructive=True),
    ToolSpec("get_text", "Get text content from an element", GetTextArgs, read_only=True),
    ToolSpec("take_screenshot", "Take a screenshot of the current page", TakeScreenshotArgs),
    ToolSpec("wait_for_element", "Wait for an element to appear on the page", WaitForElementArgs, read_only=True),
    ToolSpec("execute_script", "Execute JavaScript code in the browser context", ExecuteScriptArgs, destructive=True),
    ToolSpec("get_page_source", "Get the HTML source of the current page", GetPageSourceArgs, read_only=True),
    ToolSpec("close_browser", "Close a browser session", CloseBrowserArgs, destructive=True),
)

_BY_NAME: dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_CATALOG}

TOOL_NAMES = frozenset(_BY_NAME)


def get_tool(name: str) -> ToolSpec:
    """Return the catalog entry for *name*. Raises UnknownToolError."""
    spec = _BY_NAME.get(name)
    if spec is None:
        raise UnknownToolError(name)
    return spec


def list_tools() -> list[dict[str, Any]]:
    """Catalog as plain dicts (``name``, ``description``, ``inputSchema``)."""
    return [spec.describe() for spec in TOOL_CATALOG]
