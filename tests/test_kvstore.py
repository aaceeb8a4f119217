"""Tests for KVStore.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import json
import logging

import pytest

from roadkv_core.errors import SerializationError, StorageIOError, TimeError
from roadkv_core.kv.clock import ManualClock
from roadkv_core.kvstore import KVStore, StoreConfig
from roadkv_core.protocol.serializer import JSONStringSerializer
from roadkv_core.store.memory import MemoryBackend

NOW = 1_700_000_000


@pytest.fixture
def clock():
    return ManualClock(NOW)


@pytest.fixture
def path(tmp_path):
    return tmp_path / "store.json"


class TestKVStore:
    """Tests for basic store operations."""

    def test_basic_operations(self, clock):
        """Test set/get/remove."""
        kv = KVStore.in_memory(clock=clock)

        kv.set("name", "alice")
        assert kv.get("name") == "alice"

        assert kv.remove("name")
        assert not kv.remove("name")
        assert kv.get("name") is None

    @pytest.mark.parametrize(
        "value",
        ["text", 42, 3.5, True, None, [1, "two"], {"nested": {"list": [1, 2]}}],
    )
    def test_value_round_trip(self, clock, value):
        kv = KVStore.in_memory(clock=clock)

        kv.set("k", value)
        assert kv.get("k", default="missing") == value

    def test_default_value(self, clock):
        kv = KVStore.in_memory(clock=clock)

        assert kv.get("missing", default="fallback") == "fallback"

    def test_overwrite_clears_ttl(self, clock):
        kv = KVStore.in_memory(clock=clock)

        kv.set_with_ttl("k", 1, 5)
        kv.set("k", 2)
        clock.advance(10)

        assert kv.get("k") == 2

    def test_contains_key(self, clock):
        kv = KVStore.in_memory(clock=clock)

        assert not kv.contains_key("k")
        kv.set("k", "v")
        assert kv.contains_key("k")
        assert "k" in kv

    def test_unencodable_value(self, clock):
        kv = KVStore.in_memory(clock=clock)

        with pytest.raises(SerializationError):
            kv.set("k", object())
        assert not kv.contains_key("k")

    def test_decode_failure_is_not_absence(self, clock):
        """A payload the codec cannot read raises instead of returning None."""
        kv = KVStore.from_data(
            '{"k": {"value": 42}}',
            serializer=JSONStringSerializer(),
            clock=clock,
        )

        with pytest.raises(SerializationError):
            kv.get("k")

    def test_mapping_interface(self, clock):
        kv = KVStore.in_memory(clock=clock)

        kv["a"] = 1
        kv["b"] = None
        assert kv["a"] == 1
        assert kv["b"] is None
        assert sorted(kv) == ["a", "b"]
        assert len(kv) == 2

        del kv["a"]
        with pytest.raises(KeyError):
            kv["a"]
        with pytest.raises(KeyError):
            del kv["a"]

    def test_clear_is_idempotent(self, clock):
        kv = KVStore.in_memory(clock=clock)
        kv.set("a", 1)
        kv.set("b", 2)

        assert kv.clear() == 2
        assert kv.is_empty()
        assert kv.clear() == 0
        assert kv.is_empty()

    def test_list_keys_and_clear_prefix(self, clock):
        kv = KVStore.in_memory(clock=clock)
        kv.set("user:1", "alice")
        kv.set("user:2", "bob")
        kv.set("session:1", "xyz")

        assert sorted(kv.list_keys("user:")) == ["user:1", "user:2"]

        assert kv.clear_prefix("user:") == 2
        assert kv.keys() == ["session:1"]
        assert kv.clear_prefix("user:") == 0

    def test_to_data_from_data(self, clock):
        kv = KVStore.in_memory(clock=clock)
        kv.set("a", [1, 2])
        kv.set_with_ttl("b", "x", 30)

        copy = KVStore.from_data(kv.to_data(), clock=clock)

        assert copy.get("a") == [1, 2]
        assert copy.get("b") == "x"
        assert json.loads(kv.to_data())["b"]["expires_at"] == NOW + 30

    def test_stats(self, clock):
        kv = KVStore.in_memory(clock=clock)

        kv.set("k", "v")
        kv.get("k")
        kv.get("k")
        kv.get("missing")

        stats = kv.get_stats()
        assert stats.hits == 2
        assert stats.misses == 1
        assert stats.sets == 1
        assert stats.hit_rate == pytest.approx(2 / 3, rel=0.01)

        kv.reset_stats()
        assert kv.get_stats().to_dict()["hits"] == 0


class TestTTL:
    """Tests for expiration."""

    def test_ttl_expiration(self, clock):
        kv = KVStore.in_memory(clock=clock)

        kv.set_with_ttl("temp", "value", 1)
        assert kv.get("temp") == "value"

        clock.advance(2)
        assert kv.get("temp") is None
        assert kv.get_stats().expirations == 1

    def test_zero_ttl_alive_in_same_second(self, clock):
        kv = KVStore.in_memory(clock=clock)

        kv.set_with_ttl("k", "v", 0)
        assert kv.get("k") == "v"

        clock.advance(1)
        assert kv.get("k") is None
        assert "k" not in kv.keys()

    def test_set_with_ttl_keyword(self, clock):
        kv = KVStore.in_memory(clock=clock)

        kv.set("k", "v", ttl=10)
        clock.advance(11)
        assert not kv.contains_key("k")

    def test_negative_ttl(self, clock):
        kv = KVStore.in_memory(clock=clock)

        with pytest.raises(ValueError):
            kv.set_with_ttl("k", "v", -1)

    def test_clock_before_epoch(self):
        kv = KVStore.in_memory(clock=ManualClock(-5))

        with pytest.raises(TimeError):
            kv.set_with_ttl("k", "v", 10)

    def test_expired_entries_hidden_but_present(self, clock):
        """Read predicates skip expired entries without removing them."""
        kv = KVStore.in_memory(clock=clock)
        kv.set("keep", 1)
        kv.set_with_ttl("gone", 2, 5)
        clock.advance(6)

        assert not kv.contains_key("gone")
        assert kv.keys() == ["keep"]
        assert kv.list_keys("") == ["keep"]
        assert kv.size() == 1
        assert "gone" in json.loads(kv.to_data())

    def test_lazy_eviction_on_get(self, clock):
        kv = KVStore.in_memory(clock=clock)
        kv.set_with_ttl("gone", 2, 5)
        clock.advance(6)

        assert kv.get("gone") is None
        assert json.loads(kv.to_data()) == {}

    def test_purge_expired(self, clock):
        kv = KVStore.in_memory(clock=clock)
        kv.set("keep", 1)
        kv.set_with_ttl("a", 2, 5)
        kv.set_with_ttl("b", 3, 50)
        clock.advance(10)

        assert kv.purge_expired() == 1
        assert sorted(kv.keys()) == ["b", "keep"]
        assert kv.purge_expired() == 0

    def test_purge_empty_skips_clock(self):
        """An empty table never consults the clock."""
        kv = KVStore.in_memory(clock=ManualClock(-5))

        assert kv.purge_expired() == 0

    def test_clear_prefix_drops_expired_too(self, clock):
        kv = KVStore.in_memory(clock=clock)
        kv.set_with_ttl("tmp:a", 1, 5)
        kv.set("tmp:b", 2)
        clock.advance(10)

        assert kv.clear_prefix("tmp:") == 2


class TestNamespaces:
    """Tests for namespace isolation."""

    def test_keys_are_prefixed(self, clock):
        kv = KVStore.in_memory(clock=clock, namespace="app1")

        kv.set("username", "alice")
        kv.set("count", 42)

        assert kv.namespace == "app1:"
        assert sorted(kv.keys()) == ["count", "username"]
        assert sorted(kv.list_keys("")) == ["app1:count", "app1:username"]
        assert kv.list_keys("user") == []
        assert kv.list_keys("app1:user") == ["app1:username"]

    def test_isolation_over_shared_backend(self, clock):
        backend = MemoryBackend()
        a = KVStore(backend, StoreConfig(namespace="a"), clock=clock)
        b = KVStore(backend, StoreConfig(namespace="b"), clock=clock)

        a.set("x", 1)
        a.save()
        b.reload()

        assert b.keys() == []
        assert b.get("x") is None

        b.set("x", 2)
        b.save()
        a.reload()

        assert a.get("x") == 1
        assert b.get("x") == 2
        assert sorted(a.list_keys("")) == ["a:x", "b:x"]
        assert sorted(b.list_keys("")) == ["a:x", "b:x"]

    def test_with_namespace_shares_table(self, clock):
        root = KVStore.in_memory(clock=clock)
        users = root.with_namespace("users")
        sessions = root.with_namespace("sessions")

        users.set("1", "alice")
        sessions.set("1", "xyz")

        assert users.get("1") == "alice"
        assert sessions.get("1") == "xyz"
        assert sorted(root.keys()) == ["sessions:1", "users:1"]

        assert root.clear_prefix("users:") == 1
        assert users.get("1") is None
        assert sessions.get("1") == "xyz"

    def test_remove_only_touches_own_namespace(self, clock):
        root = KVStore.in_memory(clock=clock)
        a = root.with_namespace("a")
        b = root.with_namespace("b")
        a.set("x", 1)

        assert not b.remove("x")
        assert a.remove("x")


class TestPersistence:
    """Tests for file persistence through the store."""

    def test_missing_file_is_empty(self, path, clock):
        kv = KVStore.open(path, clock=clock)

        assert kv.is_empty()
        assert not path.exists()

    def test_persistence_round_trip(self, path, clock):
        kv = KVStore.open(path, clock=clock)
        kv.set("a", 1)
        kv.set("b", {"x": 2})
        kv.set_with_ttl("c", 3, 5)
        kv.save()

        clock.advance(10)
        fresh = KVStore.open(path, clock=clock)

        assert fresh.size() == 2
        assert "c" not in fresh.keys()
        assert fresh.get("b") == {"x": 2}
        assert fresh.purge_expired() == 1

    def test_auto_save(self, path, clock):
        kv = KVStore.open(path, clock=clock, auto_save=True)
        kv.set("key", "value")

        assert KVStore.open(path, clock=clock).get("key") == "value"

        kv.remove("key")
        assert KVStore.open(path, clock=clock).get("key") is None

    def test_no_auto_save_by_default(self, path, clock):
        kv = KVStore.open(path, clock=clock)
        kv.set("key", "value")

        assert not path.exists()

    def test_purge_expired_saves_only_on_removal(self, clock):
        backend = MemoryBackend()
        kv = KVStore(backend, StoreConfig(auto_save=True), clock=clock)
        kv.set("keep", 1)
        kv.set_with_ttl("gone", 2, 5)
        writes = backend.get_stats().writes

        assert kv.purge_expired() == 0
        assert backend.get_stats().writes == writes

        clock.advance(10)
        assert kv.purge_expired() == 1
        assert backend.get_stats().writes == writes + 1
        assert KVStore(backend, clock=clock).list_keys("") == ["keep"]

    def test_clear_prefix_saves_only_on_removal(self, clock):
        backend = MemoryBackend()
        kv = KVStore(backend, StoreConfig(auto_save=True), clock=clock)
        kv.set("x:1", 1)
        kv.set("y:1", 2)
        writes = backend.get_stats().writes

        assert kv.clear_prefix("z:") == 0
        assert backend.get_stats().writes == writes

        assert kv.clear_prefix("x:") == 1
        assert backend.get_stats().writes == writes + 1
        assert KVStore(backend, clock=clock).list_keys("") == ["y:1"]

    def test_clear_always_saves(self, path, clock):
        kv = KVStore.open(path, clock=clock, auto_save=True)
        kv.set("a", 1)
        kv.set("b", 2)
        writes = kv.backend.get_stats().writes

        kv.clear()
        assert json.loads(path.read_text()) == {}
        kv.clear()
        assert json.loads(path.read_text()) == {}
        assert kv.backend.get_stats().writes == writes + 2

    def test_lazy_eviction_is_persisted(self, path, clock):
        kv = KVStore.open(path, clock=clock, auto_save=True)
        kv.set_with_ttl("k", "v", 1)
        clock.advance(5)

        assert kv.get("k") is None
        assert json.loads(path.read_text()) == {}

    def test_reload_discards_unsaved_changes(self, path, clock):
        kv = KVStore.open(path, clock=clock)
        kv.set("saved", 1)
        kv.save()
        kv.set("unsaved", 2)

        kv.reload()

        assert kv.keys() == ["saved"]

    def test_backup(self, path, clock):
        kv = KVStore.open(path, clock=clock, backup=True)
        kv.set("initial", "data")
        kv.save()
        first = path.read_text()

        kv.set("new", "data")
        kv.save()

        backup_path = path.with_suffix(".bak")
        assert backup_path.read_text() == first
        assert not path.with_suffix(".tmp").exists()

    def test_malformed_file(self, path, clock):
        path.write_text("definitely not json")

        with pytest.raises(SerializationError):
            KVStore.open(path, clock=clock)

    def test_auto_save_failure_keeps_memory(self, tmp_path, clock):
        """A failed save surfaces, but the in-memory write stays."""
        kv = KVStore.open(tmp_path / "nope" / "store.json", clock=clock, auto_save=True)

        with pytest.raises(StorageIOError):
            kv.set("k", "v")
        assert kv.get("k") == "v"

    def test_redis_store(self, clock, redis_client):
        kv = KVStore.open_redis("app", client=redis_client, clock=clock, auto_save=True)

        kv.set("k", "v")

        assert KVStore.open_redis("app", client=redis_client, clock=clock).get("k") == "v"


class TestClose:
    """Tests for the disposal flush."""

    def test_context_manager_flushes(self, clock):
        backend = MemoryBackend()

        with KVStore(backend, StoreConfig(auto_save=True), clock=clock) as kv:
            kv.set("key", "value")
            assert backend.get_stats().writes == 1

        assert backend.get_stats().writes == 2
        assert KVStore(backend, clock=clock).get("key") == "value"

    def test_flush_on_exception(self, path, clock):
        with pytest.raises(RuntimeError):
            with KVStore.open(path, clock=clock, auto_save=True) as kv:
                kv.set("key", "value")
                raise RuntimeError("boom")

        assert KVStore.open(path, clock=clock).get("key") == "value"

    def test_no_flush_without_auto_save(self, clock):
        backend = MemoryBackend()

        with KVStore(backend, clock=clock) as kv:
            kv.set("key", "value")

        assert backend.document is None

    def test_flush_failure_is_logged_not_raised(self, tmp_path, clock, caplog):
        kv = KVStore.open(tmp_path / "nope" / "store.json", clock=clock, auto_save=True)

        with caplog.at_level(logging.ERROR):
            kv.close()

        assert "Final save" in caplog.text

    def test_close_is_idempotent(self, clock):
        backend = MemoryBackend()
        kv = KVStore(backend, StoreConfig(auto_save=True), clock=clock)

        kv.close()
        kv.close()

        assert backend.get_stats().writes == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
