# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""SessionRegistry — maps session_id to its live BrowserSession.

The registry is owned by one server instance (no module-level state), so
several independent servers can coexist in a process or a test run.
Executors reach it only through the ``SessionStore`` protocol.

Dependencies: engine.py (types only), errors.py. No dispatcher import (acyclic).
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .errors import SessionNotFoundError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from .engine import BrowserSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class SessionStore(Protocol):
    """Capability injected into action executors."""

    def get(self, session_id: str) -> BrowserSession: ...

    def put(self, session_id: str, session: BrowserSession) -> BrowserSession | None: ...

    def remove(self, session_id: str) -> BrowserSession: ...

    def __contains__(self, session_id: object) -> bool: ...

    async def drain(self) -> int: ...

    def tool_lock(self, session_id: str) -> AbstractAsyncContextManager[None]: ...


# ---------------------------------------------------------------------------
# In-process implementation
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _ToolLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class SessionRegistry:
    """At most one BrowserSession per session id.

    ``put`` replaces without closing; the launch action closes the previous
    session first.  ``tool_lock`` serializes calls against the same id
    while calls for different ids proceed in parallel.  A lock lives only
    while some call holds or waits on it, so ids that are never launched
    leave nothing behind.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, BrowserSession] = {}
        self._tool_locks: dict[str, _ToolLock] = {}

    def get(self, session_id: str) -> BrowserSession:
        """Return the session registered under *session_id*.

        Raises SessionNotFoundError when nothing was launched under that id.
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def put(self, session_id: str, session: BrowserSession) -> BrowserSession | None:
        """Insert or replace; returns the replaced session, if any."""
        previous = self._sessions.get(session_id)
        if previous is not None and previous is not session and not previous.is_closed:
            logger.warning("Replacing open session without closing it: %s", session_id)
        self._sessions[session_id] = session
        logger.info("Session registered: %s (active=%d)", session_id, len(self._sessions))
        return previous

    def remove(self, session_id: str) -> BrowserSession:
        """Delete and return the entry. Raises SessionNotFoundError if absent."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        logger.info("Session removed: %s (active=%d)", session_id, len(self._sessions))
        return session

    async def drain(self) -> int:
        """Close and remove every session (shutdown path).

        A failing close is logged and skipped so one broken browser cannot
        block cleanup of the rest.  Returns the number closed cleanly.
        """
        sessions = list(self._sessions.items())
        self._sessions.clear()
        closed = 0
        for sid, session in sessions:
            try:
                await session.close()
                closed += 1
            except Exception:
                logger.error("Failed to close session during drain: %s", sid, exc_info=True)
        if sessions:
            logger.info("Session registry drained (%d/%d closed cleanly)", closed, len(sessions))
        return closed

    @asynccontextmanager
    async def tool_lock(self, session_id: str) -> AsyncIterator[None]:
        """Hold the per-session lock for the duration of the block."""
        entry = self._tool_locks.get(session_id)
        if entry is None:
            entry = self._tool_locks[session_id] = _ToolLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._tool_locks[session_id]

    def session_ids(self) -> list[str]:
        return list(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sessions))
