# src/session_registry/sessions/registry.py
"""
Session Registry - In-memory session handles and transcripts.

This module provides a thread-safe registry that keeps, per string id:
- a handle to a live conversational session owned by some other subsystem
- the ordered transcript of entries recorded for that conversation

Both values are opaque to the registry. Handles are stored and returned by
identity; transcript entries are only appended, replaced or read back as an
ordered sequence. Nothing is persisted: everything is lost on restart.

Key Features:
- Every operation runs under one RLock, so no caller can observe a
  half-applied update (e.g. a stored handle whose transcript is not yet reset)
- Missing ids are normal results (None / empty list), never exceptions
- Transcripts are returned as snapshots; callers cannot mutate registry state
- Optional cap on transcript length (oldest entries dropped first)

Usage:
    registry: SessionRegistry[LiveSession, dict] = SessionRegistry()

    registry.store(session, "user-42")
    registry.append_to_transcript({"role": "user", "content": "hi"}, "user-42")

    live = registry.get_session("user-42")
    if live is None:
        # Unknown id
        pass

    history = registry.get_transcript("user-42")
    registry.remove_session("user-42")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from typing import Any, Generic, Optional, TypeVar

from ..config.models import SessionRegistryConfig
from ..exceptions import SessionNotFoundError

logger = logging.getLogger(__name__)

SessionT = TypeVar("SessionT")
EntryT = TypeVar("EntryT")


class SessionRegistry(Generic[SessionT, EntryT]):
    """Keyed store of session handles and their transcripts.

    Two parallel dicts are kept: ``id -> session handle`` and
    ``id -> list of transcript entries``. They are independent apart from
    ``store`` (which always resets the transcript) and the removal
    operations (which drop both).

    Example:
        registry = SessionRegistry()
        registry.store(session, "u1")
        registry.append_to_transcript("hello", "u1")
        registry.append_to_transcript("world", "u1")

        assert registry.get_transcript("u1") == ["hello", "world"]
        assert registry.get_session("u1") is session

    Attributes:
        max_transcript_entries: Maximum entries kept per transcript (0 = unlimited).
        enable_stats: Whether operation counters are tracked.
    """

    def __init__(
        self,
        max_transcript_entries: int = 0,
        enable_stats: bool = True,
        config: SessionRegistryConfig | None = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            max_transcript_entries: Maximum entries kept per transcript. Set to 0
                for unlimited.
            enable_stats: Track operation counters for ``stats()``.
            config: Optional configuration object (overrides other params).
        """
        if config is not None:
            max_transcript_entries = config.max_transcript_entries
            enable_stats = config.enable_stats

        if max_transcript_entries < 0:
            raise ValueError("max_transcript_entries must be >= 0")

        self.max_transcript_entries = max_transcript_entries
        self.enable_stats = enable_stats

        self._sessions: dict[str, SessionT] = {}
        self._transcripts: dict[str, list[EntryT]] = {}
        self._lock = threading.RLock()

        self._stats = {
            "stores": 0,
            "hits": 0,
            "misses": 0,
            "appends": 0,
            "replacements": 0,
            "removals": 0,
            "clears": 0,
        }

        logger.debug(
            f"SessionRegistry initialized: max_transcript_entries={max_transcript_entries}, "
            f"enable_stats={enable_stats}"
        )

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _count(self, name: str) -> None:
        if self.enable_stats:
            self._stats[name] += 1

    def _enforce_cap(self, session_id: str, transcript: list[EntryT]) -> None:
        """Drop the oldest entries beyond ``max_transcript_entries``.

        Must be called with the lock held. Trims in place.
        """
        if self.max_transcript_entries <= 0:
            return
        overflow = len(transcript) - self.max_transcript_entries
        if overflow > 0:
            del transcript[:overflow]
            logger.debug(f"Trimmed {overflow} oldest transcript entries for session '{session_id}'")

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def store(self, session: SessionT, session_id: str) -> None:
        """Store a session handle and start it with an empty transcript.

        Overwrites any handle already stored under ``session_id``. The
        transcript is reset unconditionally, so re-storing an id discards
        its previous history.

        Args:
            session: The session handle to keep. Stored as-is, never copied.
            session_id: Identifier to store it under.
        """
        with self._lock:
            self._sessions[session_id] = session
            self._transcripts[session_id] = []
            self._count("stores")

    def get_session(self, session_id: str) -> SessionT | None:
        """Look up the session handle stored for an id.

        Args:
            session_id: The id to look up.

        Returns:
            The stored handle, or None if nothing is stored for the id.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session_id in self._sessions:
                self._count("hits")
            else:
                self._count("misses")
            return session

    def require_session(self, session_id: str) -> SessionT:
        """Like :meth:`get_session`, but raise when the id is unknown.

        Raises:
            SessionNotFoundError: If no handle is stored for ``session_id``.
        """
        with self._lock:
            if session_id not in self._sessions:
                self._count("misses")
                raise SessionNotFoundError(session_id)
            self._count("hits")
            return self._sessions[session_id]

    def has_session(self, session_id: str) -> bool:
        """Check whether a session handle is stored for an id."""
        with self._lock:
            return session_id in self._sessions

    def get_transcript(self, session_id: str, last_n: Optional[int] = None) -> list[EntryT]:
        """Return a snapshot of the transcript for an id.

        Args:
            session_id: The id to read.
            last_n: If set, return only the last N entries.

        Returns:
            A new list of entries in insertion order; empty if the id is unknown.
        """
        with self._lock:
            transcript = self._transcripts.get(session_id)
            if not transcript:
                return []
            if last_n is not None:
                if last_n <= 0:
                    return []
                return transcript[-last_n:]
            return list(transcript)

    def transcript_length(self, session_id: str) -> int:
        """Number of entries recorded for an id (0 if unknown)."""
        with self._lock:
            return len(self._transcripts.get(session_id, ()))

    def set_transcript(self, entries: Iterable[EntryT], session_id: str) -> None:
        """Replace the transcript for an id wholesale.

        Creates the transcript if the id has none. No session handle needs
        to be stored for the id. The registry keeps its own copy of
        ``entries``.

        Args:
            entries: The new transcript, in order.
            session_id: The id whose transcript is replaced.
        """
        transcript = list(entries)
        with self._lock:
            self._enforce_cap(session_id, transcript)
            self._transcripts[session_id] = transcript
            self._count("replacements")

    def append_to_transcript(self, entry: EntryT, session_id: str) -> None:
        """Append one entry to the end of an id's transcript.

        Starts a one-entry transcript if the id has none yet.

        Args:
            entry: The entry to append.
            session_id: The id whose transcript grows.
        """
        with self._lock:
            transcript = self._transcripts.get(session_id)
            if transcript is None:
                self._transcripts[session_id] = [entry]
            else:
                transcript.append(entry)
                self._enforce_cap(session_id, transcript)
            self._count("appends")

    def remove_session(self, session_id: str) -> None:
        """Drop the session handle and transcript for an id.

        Unknown ids are ignored.
        """
        with self._lock:
            if session_id in self._sessions or session_id in self._transcripts:
                self._count("removals")
            self._sessions.pop(session_id, None)
            self._transcripts.pop(session_id, None)

    def remove_all(self) -> None:
        """Drop every session handle and transcript."""
        with self._lock:
            session_count = len(self._sessions)
            transcript_count = len(self._transcripts)
            self._sessions.clear()
            self._transcripts.clear()
            self._count("clears")
            logger.debug(
                f"Cleared {session_count} sessions and {transcript_count} transcripts from registry"
            )

    def session_ids(self) -> list[str]:
        """Ids that have a stored session handle, in insertion order."""
        with self._lock:
            return list(self._sessions)

    def stats(self) -> dict[str, Any]:
        """Get registry statistics.

        Returns:
            Dictionary containing:
            - session_count: Stored session handles
            - transcript_count: Ids with a transcript (with or without a session)
            - entry_count: Total transcript entries across all ids
            - max_transcript_entries: Configured cap (0 = unlimited)
            - stores, hits, misses, appends, replacements, removals, clears:
              operation counters (only when stats are enabled)
        """
        with self._lock:
            result: dict[str, Any] = {
                "session_count": len(self._sessions),
                "transcript_count": len(self._transcripts),
                "entry_count": sum(len(t) for t in self._transcripts.values()),
                "max_transcript_entries": self.max_transcript_entries,
            }
            if self.enable_stats:
                result.update(self._stats)
            return result

    def __len__(self) -> int:
        """Get the number of stored session handles."""
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        """Check if a session handle is stored for an id."""
        with self._lock:
            return session_id in self._sessions

    def __iter__(self) -> Iterator[str]:
        """Iterate over a snapshot of the stored session ids."""
        return iter(self.session_ids())


# =============================================================================
# FACTORY FUNCTION
# =============================================================================


def create_session_registry(
    config: SessionRegistryConfig | None = None,
    **kwargs: Any,
) -> SessionRegistry:
    """Factory function to create a session registry.

    Args:
        config: Optional configuration object.
        **kwargs: Additional arguments passed to SessionRegistry.

    Returns:
        Configured SessionRegistry instance.
    """
    if config is not None:
        return SessionRegistry(config=config)
    return SessionRegistry(**kwargs)
