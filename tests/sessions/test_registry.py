# tests/sessions/test_registry.py
"""
Tests for SessionRegistry.

These tests verify:
- Lookups for unknown ids (None / empty transcript, never an exception)
- store / append / set / remove semantics
- Snapshot isolation of returned and supplied transcripts
- Transcript cap and statistics
- Thread safety of concurrent operations
"""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

import pytest

from session_registry.config.models import SessionRegistryConfig
from session_registry.exceptions import SessionNotFoundError
from session_registry.sessions.registry import SessionRegistry, create_session_registry


class FakeSession:
    """Stand-in for an externally owned conversational session."""

    def __init__(self, name: str):
        self.name = name


@pytest.fixture
def registry():
    return SessionRegistry()


# =============================================================================
# UNKNOWN IDS
# =============================================================================


class TestUnknownIds:
    """Ids that were never written behave as empty."""

    def test_get_session_unknown_returns_none(self, registry):
        """Test getting a session that was never stored."""
        assert registry.get_session("nobody") is None

    def test_get_transcript_unknown_returns_empty(self, registry):
        """Test getting a transcript that was never written."""
        assert registry.get_transcript("nobody") == []

    def test_remove_unknown_is_noop(self, registry):
        """Test removing an unknown id does not raise."""
        registry.remove_session("nobody")

        assert len(registry) == 0
        assert registry.stats()["removals"] == 0

    def test_require_session_unknown_raises(self, registry):
        """Test require_session raises SessionNotFoundError for unknown ids."""
        with pytest.raises(SessionNotFoundError) as exc_info:
            registry.require_session("nobody")

        assert exc_info.value.session_id == "nobody"

    def test_has_session_and_contains(self, registry):
        """Test membership checks on an empty registry."""
        assert not registry.has_session("nobody")
        assert "nobody" not in registry
        assert registry.transcript_length("nobody") == 0


# =============================================================================
# STORE
# =============================================================================


class TestStore:
    """Tests for storing session handles."""

    def test_store_then_get(self, registry):
        """Test stored handle is returned by identity with an empty transcript."""
        session = FakeSession("s")
        registry.store(session, "a")

        assert registry.get_session("a") is session
        assert registry.get_transcript("a") == []
        assert registry.has_session("a")
        assert "a" in registry

    def test_store_overwrites_handle(self, registry):
        """Test storing under an existing id replaces the handle."""
        first, second = FakeSession("first"), FakeSession("second")
        registry.store(first, "a")
        registry.store(second, "a")

        assert registry.get_session("a") is second
        assert len(registry) == 1

    def test_restore_discards_transcript(self, registry):
        """Test re-storing an id resets its transcript to empty."""
        registry.store(FakeSession("s"), "a")
        registry.append_to_transcript("old", "a")

        registry.store(FakeSession("s2"), "a")

        assert registry.get_transcript("a") == []

    def test_store_resets_transcript_set_before_session(self, registry):
        """Test a transcript written before store is discarded by store."""
        registry.set_transcript(["x", "y"], "a")
        registry.store(FakeSession("s"), "a")

        assert registry.get_transcript("a") == []

    def test_store_any_object(self, registry):
        """Test handles are opaque: any object, including None-like values, is accepted."""
        registry.store({"kind": "dict-session"}, "d")
        registry.store(42, "n")

        assert registry.get_session("d") == {"kind": "dict-session"}
        assert registry.get_session("n") == 42

    def test_require_session_returns_handle(self, registry):
        """Test require_session returns the stored handle."""
        session = FakeSession("s")
        registry.store(session, "a")

        assert registry.require_session("a") is session


# =============================================================================
# TRANSCRIPTS
# =============================================================================


class TestTranscripts:
    """Tests for appending, replacing and reading transcripts."""

    def test_append_preserves_order(self, registry):
        """Test appended entries are returned in append order."""
        registry.store(FakeSession("s"), "a")
        registry.append_to_transcript("e1", "a")
        registry.append_to_transcript("e2", "a")

        assert registry.get_transcript("a") == ["e1", "e2"]

    def test_append_without_session_creates_transcript(self, registry):
        """Test appending to an id with no transcript starts a new one."""
        registry.append_to_transcript("first", "loose")

        assert registry.get_transcript("loose") == ["first"]
        assert registry.get_session("loose") is None

    def test_append_allows_duplicates(self, registry):
        """Test identical entries are all kept."""
        for _ in range(3):
            registry.append_to_transcript("same", "a")

        assert registry.get_transcript("a") == ["same", "same", "same"]

    def test_set_transcript_replaces(self, registry):
        """Test set_transcript replaces prior content exactly."""
        registry.store(FakeSession("s"), "a")
        registry.append_to_transcript("old", "a")

        registry.set_transcript(["x", "y", "z"], "a")

        assert registry.get_transcript("a") == ["x", "y", "z"]

    def test_set_transcript_without_session(self, registry):
        """Test set_transcript does not require a stored session."""
        registry.set_transcript(["x"], "loose")

        assert registry.get_transcript("loose") == ["x"]
        assert not registry.has_session("loose")

    def test_set_transcript_accepts_iterables(self, registry):
        """Test any iterable of entries is accepted."""
        registry.set_transcript((e for e in ["a", "b"]), "gen")

        assert registry.get_transcript("gen") == ["a", "b"]

    def test_set_then_append(self, registry):
        """Test appending after a wholesale replacement."""
        registry.set_transcript(["x"], "a")
        registry.append_to_transcript("y", "a")

        assert registry.get_transcript("a") == ["x", "y"]

    def test_returned_transcript_is_snapshot(self, registry):
        """Test mutating the returned list does not affect registry state."""
        registry.set_transcript(["x", "y"], "a")

        snapshot = registry.get_transcript("a")
        snapshot.append("intruder")
        snapshot.clear()

        assert registry.get_transcript("a") == ["x", "y"]

    def test_supplied_list_is_copied(self, registry):
        """Test mutating the list passed to set_transcript does not affect registry state."""
        entries = ["x", "y"]
        registry.set_transcript(entries, "a")
        entries.append("z")

        assert registry.get_transcript("a") == ["x", "y"]

    def test_entries_are_not_copied(self, registry):
        """Test entries themselves are stored by reference."""
        entry = {"role": "user", "content": "hi"}
        registry.append_to_transcript(entry, "a")

        assert registry.get_transcript("a")[0] is entry

    def test_last_n(self, registry):
        """Test reading only the tail of a transcript."""
        registry.set_transcript(["a", "b", "c", "d"], "t")

        assert registry.get_transcript("t", last_n=2) == ["c", "d"]
        assert registry.get_transcript("t", last_n=10) == ["a", "b", "c", "d"]
        assert registry.get_transcript("t", last_n=0) == []
        assert registry.get_transcript("unknown", last_n=2) == []

    def test_transcript_length(self, registry):
        """Test transcript_length counts entries."""
        registry.set_transcript(["a", "b"], "t")
        registry.append_to_transcript("c", "t")

        assert registry.transcript_length("t") == 3


# =============================================================================
# REMOVAL
# =============================================================================


class TestRemoval:
    """Tests for remove_session and remove_all."""

    def test_remove_session(self, registry):
        """Test removing an id drops both handle and transcript."""
        registry.store(FakeSession("s"), "a")
        registry.append_to_transcript("e", "a")

        registry.remove_session("a")

        assert registry.get_session("a") is None
        assert registry.get_transcript("a") == []
        assert "a" not in registry

    def test_remove_session_leaves_others(self, registry):
        """Test removing one id keeps the rest intact."""
        keep = FakeSession("keep")
        registry.store(keep, "keep")
        registry.append_to_transcript("k", "keep")
        registry.store(FakeSession("drop"), "drop")

        registry.remove_session("drop")

        assert registry.get_session("keep") is keep
        assert registry.get_transcript("keep") == ["k"]

    def test_remove_transcript_only_id(self, registry):
        """Test removing an id that only has a transcript."""
        registry.set_transcript(["x"], "loose")

        registry.remove_session("loose")

        assert registry.get_transcript("loose") == []

    def test_remove_all(self, registry):
        """Test remove_all makes every id behave as never seen."""
        for i in range(5):
            registry.store(FakeSession(str(i)), f"id{i}")
            registry.append_to_transcript(i, f"id{i}")
        registry.set_transcript(["x"], "loose")

        registry.remove_all()

        for i in range(5):
            assert registry.get_session(f"id{i}") is None
            assert registry.get_transcript(f"id{i}") == []
        assert registry.get_transcript("loose") == []
        assert len(registry) == 0

    def test_remove_all_on_empty(self, registry):
        """Test remove_all on an empty registry."""
        registry.remove_all()

        assert len(registry) == 0


# =============================================================================
# CAP, STATS, CONSTRUCTION
# =============================================================================


class TestTranscriptCap:
    """Tests for max_transcript_entries."""

    def test_append_trims_oldest(self):
        """Test appends beyond the cap drop the oldest entries."""
        registry = SessionRegistry(max_transcript_entries=3)
        for i in range(5):
            registry.append_to_transcript(i, "a")

        assert registry.get_transcript("a") == [2, 3, 4]

    def test_set_transcript_trims_oldest(self):
        """Test set_transcript keeps only the newest entries."""
        registry = SessionRegistry(max_transcript_entries=2)
        registry.set_transcript(["a", "b", "c"], "t")

        assert registry.get_transcript("t") == ["b", "c"]

    def test_unlimited_by_default(self, registry):
        """Test default registry keeps every entry."""
        for i in range(1000):
            registry.append_to_transcript(i, "a")

        assert registry.transcript_length("a") == 1000

    def test_negative_cap_rejected(self):
        """Test a negative cap is rejected."""
        with pytest.raises(ValueError):
            SessionRegistry(max_transcript_entries=-1)


class TestStats:
    """Tests for stats() and the container protocol."""

    def test_stats_counts(self, registry):
        """Test counters and sizes after a mix of operations."""
        registry.store(FakeSession("s"), "a")
        registry.append_to_transcript("e1", "a")
        registry.append_to_transcript("e2", "a")
        registry.set_transcript(["x"], "b")
        registry.get_session("a")
        registry.get_session("missing")

        stats = registry.stats()
        assert stats["session_count"] == 1
        assert stats["transcript_count"] == 2
        assert stats["entry_count"] == 3
        assert stats["stores"] == 1
        assert stats["appends"] == 2
        assert stats["replacements"] == 1
        assert stats["hits"] == 1
        assert stats["misses"] == 1

    def test_stats_disabled(self):
        """Test counters are omitted when stats are disabled."""
        registry = SessionRegistry(enable_stats=False)
        registry.store(FakeSession("s"), "a")

        stats = registry.stats()
        assert stats["session_count"] == 1
        assert "stores" not in stats

    def test_session_ids_and_iteration(self, registry):
        """Test session_ids lists handles in insertion order, excluding transcript-only ids."""
        registry.store(FakeSession("1"), "first")
        registry.store(FakeSession("2"), "second")
        registry.set_transcript(["x"], "loose")

        assert registry.session_ids() == ["first", "second"]
        assert list(registry) == ["first", "second"]

    def test_create_from_config(self):
        """Test building a registry from a config object."""
        config = SessionRegistryConfig(max_transcript_entries=10, enable_stats=False)
        registry = create_session_registry(config=config)

        assert registry.max_transcript_entries == 10
        assert registry.enable_stats is False

    def test_create_with_kwargs(self):
        """Test building a registry from keyword arguments."""
        registry = create_session_registry(max_transcript_entries=5)

        assert registry.max_transcript_entries == 5
        assert registry.enable_stats is True


# =============================================================================
# THREAD SAFETY
# =============================================================================


class TestThreadSafety:
    """Concurrent access tests."""

    def test_concurrent_appends_same_id(self, registry):
        """Test N concurrent appends keep every entry exactly once."""
        registry.store(FakeSession("s"), "shared")
        n = 2000

        with ThreadPoolExecutor(max_workers=16) as executor:
            futures = [
                executor.submit(registry.append_to_transcript, f"entry-{i}", "shared")
                for i in range(n)
            ]
            for future in as_completed(futures):
                future.result()

        transcript = registry.get_transcript("shared")
        assert len(transcript) == n
        assert sorted(transcript) == sorted(f"entry-{i}" for i in range(n))

    def test_per_thread_order_preserved(self, registry):
        """Test each caller sees its own appends in order."""
        def writer(thread_id: int):
            for i in range(200):
                registry.append_to_transcript((thread_id, i), "shared")

        threads = [threading.Thread(target=writer, args=(t,)) for t in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        transcript = registry.get_transcript("shared")
        for thread_id in range(8):
            own = [i for tid, i in transcript if tid == thread_id]
            assert own == list(range(200))

    def test_concurrent_mixed_operations(self, registry):
        """Test a mix of operations across ids completes without errors."""
        errors = []

        def worker(worker_id: int):
            try:
                sid = f"user-{worker_id}"
                for i in range(100):
                    registry.store(FakeSession(sid), sid)
                    registry.append_to_transcript(i, sid)
                    registry.get_transcript(sid)
                    registry.get_session(sid)
                    if i % 10 == 0:
                        registry.remove_session(sid)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(w,)) for w in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        for w in range(10):
            sid = f"user-{w}"
            assert registry.get_session(sid).name == sid
            assert registry.get_transcript(sid) == [99]


# =============================================================================
# EDGE CASES AND SCENARIOS
# =============================================================================


class TestEdgeCases:
    """Edge cases and end-to-end scenarios."""

    def test_empty_string_id(self, registry):
        """Test empty string as an id."""
        session = FakeSession("empty")
        registry.store(session, "")

        assert registry.get_session("") is session

    def test_unicode_ids(self, registry):
        """Test unicode ids."""
        registry.append_to_transcript("こんにちは", "会話_🎉")

        assert registry.get_transcript("会話_🎉") == ["こんにちは"]

    def test_store_none_handle(self, registry):
        """Test a None handle is stored but reads back the same as absent."""
        registry.store(None, "a")

        assert registry.has_session("a")
        assert registry.get_session("a") is None

    def test_hello_world_scenario(self, registry):
        """Test the basic lifecycle of a conversation."""
        s1 = FakeSession("S1")
        registry.store(s1, "u1")
        registry.append_to_transcript("hello", "u1")
        registry.append_to_transcript("world", "u1")

        assert registry.get_transcript("u1") == ["hello", "world"]
        assert registry.get_session("u1") is s1

        registry.remove_session("u1")

        assert registry.get_session("u1") is None
        assert registry.get_transcript("u1") == []
