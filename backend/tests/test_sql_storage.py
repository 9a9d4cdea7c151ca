"""SQLite-backed cache storage tests."""

from __future__ import annotations

import pytest

from app.db.session import create_cache_engine
from app.db.storage import SqlStorage
from dca_simulator.cache import CacheStore
from dca_simulator.storage import StorageQuotaExceeded


@pytest.fixture()
def engine(tmp_path):
    engine = create_cache_engine(f"sqlite:///{tmp_path / 'cache.db'}")
    yield engine
    engine.dispose()


def test_set_get_remove(engine):
    storage = SqlStorage(engine)
    storage.set_item("a", "1")
    storage.set_item("a", "2")
    storage.set_item("b", "3")

    assert sorted(storage.keys()) == ["a", "b"]
    assert storage.get_item("a") == "2"
    storage.remove_item("a")
    assert storage.get_item("a") is None
    storage.remove_item("missing")


def test_quota_is_enforced(engine):
    storage = SqlStorage(engine, quota_bytes=30)
    storage.set_item("k1", "x" * 8)
    with pytest.raises(StorageQuotaExceeded):
        storage.set_item("k2", "y" * 8)
    # overwriting an existing key only counts the new value
    storage.set_item("k1", "z" * 10)


def test_entries_survive_a_new_storage_instance(engine, clock):
    CacheStore(SqlStorage(engine), clock=clock).set("historical:BTC-USD:1:2", [{"timestamp": 1, "price": 2.0}])
    reopened = CacheStore(SqlStorage(engine), clock=clock)
    assert reopened.get("historical:BTC-USD:1:2") == [{"timestamp": 1, "price": 2.0}]


def test_cache_store_over_sql_storage(engine, clock):
    cache = CacheStore(SqlStorage(engine), clock=clock)
    cache.set("fresh", 1, ttl=100)
    cache.set("stale", 2, ttl=1)
    clock.advance(10)

    stats = cache.get_stats()
    assert (stats.totalEntries, stats.validEntries, stats.expiredEntries) == (2, 1, 1)
    assert cache.clear_expired() == 1
    assert cache.clear_all() == 1


def test_total_size_is_one_aggregate_over_the_prefix(engine):
    storage = SqlStorage(engine)
    storage.set_item("crypto-dca-cache:a", "12345")
    storage.set_item("crypto-dca-cache:b", "1")
    storage.set_item("other%:c", "zzzz")

    assert storage.total_size("crypto-dca-cache:") == (18 + 5) * 2 + (18 + 1) * 2
    assert storage.total_size() == storage.total_size("crypto-dca-cache:") + (8 + 4) * 2
    assert storage.total_size("other%") == (8 + 4) * 2
    assert storage.total_size("nothing:") == 0
