# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for the tool catalog: advertised schemas and argument validation."""

from __future__ import annotations

import pytest

from mcp_playwright.catalog import (
    DEFAULT_SCREENSHOT_PATH,
    DEFAULT_SESSION_ID,
    DEFAULT_WAIT_TIMEOUT_MS,
    TOOL_CATALOG,
    TOOL_NAMES,
    LaunchBrowserArgs,
    TakeScreenshotArgs,
    WaitForElementArgs,
    get_tool,
    list_tools,
)
from mcp_playwright.errors import InvalidArgumentsError, UnknownToolError

EXPECTED_TOOLS = [
    "launch_browser",
    "navigate_to",
    "click_element",
    "fill_input",
    "get_text",
    "take_screenshot",
    "wait_for_element",
    "execute_script",
    "get_page_source",
    "close_browser",
]

# tool -> required wire names
REQUIRED = {
    "launch_browser": [],
    "navigate_to": ["url"],
    "click_element": ["selector"],
    "fill_input": ["selector", "text"],
    "get_text": ["selector"],
    "take_screenshot": [],
    "wait_for_element": ["selector"],
    "execute_script": ["script"],
    "get_page_source": [],
    "close_browser": [],
}


def _props(name: str) -> dict:
    return get_tool(name).input_schema()["properties"]


class TestCatalogShape:
    def test_tool_order(self):
        assert [spec.name for spec in TOOL_CATALOG] == EXPECTED_TOOLS

    def test_names_are_unique(self):
        assert len(TOOL_NAMES) == len(TOOL_CATALOG)

    def test_every_tool_has_description(self):
        for spec in TOOL_CATALOG:
            assert spec.description.strip(), spec.name

    def test_get_tool_unknown(self):
        with pytest.raises(UnknownToolError, match="Unknown tool: nope"):
            get_tool("nope")

    def test_list_tools_dicts(self):
        tools = list_tools()
        assert [t["name"] for t in tools] == EXPECTED_TOOLS
        assert all(set(t) == {"name", "description", "inputSchema"} for t in tools)

    def test_read_only_tools_are_not_destructive(self):
        for spec in TOOL_CATALOG:
            assert not (spec.read_only and spec.destructive), spec.name


class TestInputSchemas:
    """Advertised schemas use wire names and carry defaults."""

    @pytest.mark.parametrize("name", EXPECTED_TOOLS)
    def test_schema_is_object(self, name):
        schema = get_tool(name).input_schema()
        assert schema["type"] == "object"
        assert "title" not in schema

    @pytest.mark.parametrize("name", EXPECTED_TOOLS)
    def test_required_fields(self, name):
        assert sorted(get_tool(name).input_schema()["required"]) == sorted(REQUIRED[name])

    @pytest.mark.parametrize("name", EXPECTED_TOOLS)
    def test_every_tool_takes_session_id(self, name):
        props = _props(name)
        assert "sessionId" in props
        assert "session_id" not in props
        assert props["sessionId"]["default"] == DEFAULT_SESSION_ID

    def test_launch_browser_enum(self):
        props = _props("launch_browser")
        assert props["browserType"]["enum"] == ["chromium", "firefox", "webkit"]
        assert props["browserType"]["default"] == "chromium"
        assert props["headless"]["default"] is True

    def test_screenshot_defaults(self):
        props = _props("take_screenshot")
        assert props["path"]["default"] == DEFAULT_SCREENSHOT_PATH
        assert props["fullPage"]["default"] is False

    def test_wait_timeout_default(self):
        assert _props("wait_for_element")["timeout"]["default"] == DEFAULT_WAIT_TIMEOUT_MS

    @pytest.mark.parametrize("name", EXPECTED_TOOLS)
    def test_schema_properties_match_model_aliases(self, name):
        spec = get_tool(name)
        wire_names = {field.alias or attr for attr, field in spec.args_model.model_fields.items()}
        assert set(spec.input_schema()["properties"]) == wire_names


class TestValidation:
    def test_defaults_applied(self):
        args = get_tool("launch_browser").validate({})
        assert isinstance(args, LaunchBrowserArgs)
        assert args.browser_type == "chromium"
        assert args.headless is True
        assert args.session_id == "default"

    def test_none_arguments_treated_as_empty(self):
        args = get_tool("get_page_source").validate(None)
        assert args.session_id == DEFAULT_SESSION_ID

    def test_camel_case_wire_names(self):
        args = get_tool("take_screenshot").validate({"sessionId": "s", "fullPage": True, "path": "/tmp/x.png"})
        assert isinstance(args, TakeScreenshotArgs)
        assert args.session_id == "s"
        assert args.full_page is True
        assert args.path == "/tmp/x.png"

    def test_snake_case_also_accepted(self):
        args = get_tool("launch_browser").validate({"session_id": "s", "browser_type": "webkit"})
        assert args.session_id == "s"
        assert args.browser_type == "webkit"

    def test_unknown_keys_ignored(self):
        args = get_tool("navigate_to").validate({"url": "https://example.com", "extra": 1})
        assert args.url == "https://example.com"

    def test_missing_required(self):
        with pytest.raises(InvalidArgumentsError) as exc_info:
            get_tool("fill_input").validate({"selector": "#q"})
        err = exc_info.value
        assert err.tool == "fill_input"
        assert any(p.startswith("text:") for p in err.problems)
        assert str(err).startswith("Invalid arguments for fill_input: ")

    def test_wrong_type(self):
        with pytest.raises(InvalidArgumentsError, match="headless"):
            get_tool("launch_browser").validate({"headless": "maybe"})

    def test_non_object_arguments(self):
        with pytest.raises(InvalidArgumentsError) as exc_info:
            get_tool("navigate_to").validate(["https://example.com"])
        assert exc_info.value.problems[0].startswith("arguments:")

    def test_negative_timeout_rejected(self):
        with pytest.raises(InvalidArgumentsError, match="timeout"):
            get_tool("wait_for_element").validate({"selector": "h1", "timeout": -1})

    def test_zero_timeout_allowed(self):
        args = get_tool("wait_for_element").validate({"selector": "h1", "timeout": 0})
        assert isinstance(args, WaitForElementArgs)
        assert args.timeout == 0

    def test_unknown_browser_type_passes_validation(self):
        # Rejected later as an unsupported engine, not here
        args = get_tool("launch_browser").validate({"browserType": "netscape"})
        assert args.browser_type == "netscape"

    def test_args_are_frozen(self):
        args = get_tool("navigate_to").validate({"url": "https://example.com"})
        with pytest.raises(Exception):
            args.url = "https://other.example"
