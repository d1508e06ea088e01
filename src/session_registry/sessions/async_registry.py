# src/session_registry/sessions/async_registry.py
"""
Async facade over :class:`SessionRegistry`.

For asyncio callers the registry behaves like an actor: every operation is
a coroutine, and all of them funnel through a single ``asyncio.Lock`` before
touching the underlying registry. The wrapped registry keeps its own RLock,
so threads using it directly and coroutines using this facade can share the
same state.

None of the operations perform I/O. Callers that want a deadline can wrap
a call in ``asyncio.wait_for``; the registry has no cancellation hook of its own.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any, Generic, Optional

from ..config.models import SessionRegistryConfig
from .registry import EntryT, SessionRegistry, SessionT

logger = logging.getLogger(__name__)


class AsyncSessionRegistry(Generic[SessionT, EntryT]):
    """Coroutine interface to a session registry.

    Example:
        registry = AsyncSessionRegistry()
        await registry.store(session, "u1")
        await registry.append_to_transcript("hello", "u1")
        transcript = await registry.get_transcript("u1")
    """

    def __init__(
        self,
        registry: SessionRegistry[SessionT, EntryT] | None = None,
        config: SessionRegistryConfig | None = None,
    ) -> None:
        """
        Args:
            registry: Existing registry to serve. A new one is created when omitted.
            config: Configuration for the new registry (ignored if ``registry`` is given).
        """
        if registry is None:
            registry = SessionRegistry(config=config)
        elif config is not None:
            logger.warning("AsyncSessionRegistry given both a registry and a config; config ignored.")
        self._registry = registry
        self._lock = asyncio.Lock()

    @property
    def registry(self) -> SessionRegistry[SessionT, EntryT]:
        """The underlying synchronous registry."""
        return self._registry

    async def store(self, session: SessionT, session_id: str) -> None:
        async with self._lock:
            self._registry.store(session, session_id)

    async def get_session(self, session_id: str) -> SessionT | None:
        async with self._lock:
            return self._registry.get_session(session_id)

    async def require_session(self, session_id: str) -> SessionT:
        async with self._lock:
            return self._registry.require_session(session_id)

    async def has_session(self, session_id: str) -> bool:
        async with self._lock:
            return self._registry.has_session(session_id)

    async def get_transcript(self, session_id: str, last_n: Optional[int] = None) -> list[EntryT]:
        async with self._lock:
            return self._registry.get_transcript(session_id, last_n=last_n)

    async def transcript_length(self, session_id: str) -> int:
        async with self._lock:
            return self._registry.transcript_length(session_id)

    async def set_transcript(self, entries: Iterable[EntryT], session_id: str) -> None:
        async with self._lock:
            self._registry.set_transcript(entries, session_id)

    async def append_to_transcript(self, entry: EntryT, session_id: str) -> None:
        async with self._lock:
            self._registry.append_to_transcript(entry, session_id)

    async def remove_session(self, session_id: str) -> None:
        async with self._lock:
            self._registry.remove_session(session_id)

    async def remove_all(self) -> None:
        async with self._lock:
            self._registry.remove_all()

    async def session_ids(self) -> list[str]:
        async with self._lock:
            return self._registry.session_ids()

    async def stats(self) -> dict[str, Any]:
        async with self._lock:
            return self._registry.stats()
