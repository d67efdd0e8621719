# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""ActionContext — leaf module with minimal dependencies.

Carries the capabilities an action executor may use for one invocation.
Executors hold nothing across invocations; session state lives only in
the store.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .engine import BrowserLauncher
    from .session_registry import SessionStore


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class ActionContext:
    """Per-invocation context passed to every action executor."""

    request_id: str
    tool: str
    store: SessionStore = dataclasses.field(repr=False)
    launcher: BrowserLauncher = dataclasses.field(repr=False)
