# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tool results: a success payload or a classified failure.

Internal code and tests inspect ``ToolResult.ok`` / ``ToolResult.kind``
instead of matching on strings.  Only the protocol boundary collapses a
result into the single-text-block envelope via :meth:`ToolResult.envelope_text`.

Key public API:

- ``ErrorKind``   — failure taxonomy.
- ``ToolResult``  — frozen result object (``success()`` / ``failure()``).
- ``from_exception()`` — classify any exception raised below the dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import (
    ActionFailure,
    BrowserUnavailableError,
    InvalidArgumentsError,
    ScriptError,
    SessionNotFoundError,
    UnknownToolError,
    UnsupportedEngineError,
)

ERROR_PREFIX = "Error: "

# Playwright appends a multi-line "Call log:" trace to most errors
_CALL_LOG_MARKER = "Call log:"


class ErrorKind(StrEnum):
    """Failure taxonomy surfaced by the dispatcher."""

    SESSION_NOT_FOUND = "session-not-found"
    UNSUPPORTED_ENGINE = "unsupported-engine"
    UNKNOWN_TOOL = "unknown-tool"
    INVALID_ARGUMENTS = "invalid-arguments"

    # ActionFailure family
    ACTION_FAILED = "action-failed"
    ACTION_TIMEOUT = "action-timeout"
    SCRIPT_ERROR = "script-error"
    BROWSER_UNAVAILABLE = "browser-unavailable"

    @property
    def is_action_failure(self) -> bool:
        return self in _ACTION_FAILURE_KINDS


_ACTION_FAILURE_KINDS = frozenset(
    {
        ErrorKind.ACTION_FAILED,
        ErrorKind.ACTION_TIMEOUT,
        ErrorKind.SCRIPT_ERROR,
        ErrorKind.BROWSER_UNAVAILABLE,
    }
)

# Checked in order, so subclasses must precede their bases.
_EXCEPTION_KINDS: tuple[tuple[type[BaseException], ErrorKind], ...] = (
    (SessionNotFoundError, ErrorKind.SESSION_NOT_FOUND),
    (UnsupportedEngineError, ErrorKind.UNSUPPORTED_ENGINE),
    (UnknownToolError, ErrorKind.UNKNOWN_TOOL),
    (InvalidArgumentsError, ErrorKind.INVALID_ARGUMENTS),
    (ScriptError, ErrorKind.SCRIPT_ERROR),
    (BrowserUnavailableError, ErrorKind.BROWSER_UNAVAILABLE),
    (ActionFailure, ErrorKind.ACTION_FAILED),
    (PlaywrightTimeoutError, ErrorKind.ACTION_TIMEOUT),
    (TimeoutError, ErrorKind.ACTION_TIMEOUT),
)


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Outcome of one tool invocation."""

    ok: bool
    text: str
    tool: str = ""
    kind: ErrorKind | None = None

    @classmethod
    def success(cls, text: str, *, tool: str = "") -> ToolResult:
        return cls(ok=True, text=text, tool=tool)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, *, tool: str = "") -> ToolResult:
        return cls(ok=False, text=message, tool=tool, kind=kind)

    def envelope_text(self) -> str:
        """Text of the single content block sent to the caller.

        Success text flows through verbatim; failures get the ``Error: `` prefix.
        """
        if self.ok:
            return self.text
        return ERROR_PREFIX + self.text


def clean_message(exc: BaseException) -> str:
    """Return a one-purpose message for *exc*: Playwright call logs removed, never empty."""
    text = str(exc)
    marker = text.find(_CALL_LOG_MARKER)
    if marker != -1:
        text = text[:marker]
    text = text.strip()
    return text or type(exc).__name__


def classify(exc: BaseException) -> ErrorKind:
    """Map an exception to an :class:`ErrorKind`.

    Anything unrecognised, Playwright errors included, is an action failure.
    """
    for exc_type, kind in _EXCEPTION_KINDS:
        if isinstance(exc, exc_type):
            return kind
    return ErrorKind.ACTION_FAILED


def from_exception(exc: BaseException, *, tool: str = "") -> ToolResult:
    """Build a failure :class:`ToolResult` from an exception."""
    return ToolResult.failure(classify(exc), clean_message(exc), tool=tool)
