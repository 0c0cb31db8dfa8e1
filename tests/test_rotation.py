from rotating_cache.exceptions import CapacityExceededError, InvalidConfigurationError
from rotating_cache.options import CacheOptions
from rotating_cache.rotation.manager import RotationManager
from rotating_cache.store import RotatingCache, NIL

import pytest

#-------------OLDEST----------------
def test_oldest_evicts_first_inserted(make_cache):
    cache = make_cache(max_keys=5, rotate_type="oldest")
    for i in range(6):
        cache.set(f"k{i}", i)
    assert cache.stats().keys == 5
    assert not cache.has_key("k0")
    assert all(cache.has_key(f"k{i}") for i in range(1, 6))

def test_oldest_ignores_reads(make_cache, clock):
    cache = make_cache(max_keys=2, rotate_type="oldest")
    cache.set("a", 1)
    clock.advance(1)
    cache.set("b", 2)
    cache.get("a")
    cache.set("c", 3)
    assert sorted(cache.keys()) == ["b", "c"]

def test_oldest_overwrite_moves_key_to_newest(make_cache, clock):
    cache = make_cache(max_keys=2)
    cache.set("a", 1)
    clock.advance(1)
    cache.set("b", 2)
    clock.advance(1)
    cache.set("a", 10)
    cache.set("c", 3)
    assert sorted(cache.keys()) == ["a", "c"]

#-------------INACTIVE----------------
def test_inactive_evicts_least_recently_read(make_cache):
    cache = make_cache(max_keys=2, rotate_type="inactive")
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")
    cache.set("c", 3)
    assert sorted(cache.keys()) == ["a", "c"]

def test_inactive_with_distinct_timestamps(make_cache, clock):
    cache = make_cache(max_keys=3, rotate_type="inactive")
    for key in ("a", "b", "c"):
        cache.set(key, key)
        clock.advance(1)
    cache.get("a")
    clock.advance(1)
    cache.get("b")
    cache.set("d", "d")
    assert sorted(cache.keys()) == ["a", "b", "d"]

#-------------EXPIRY----------------
def test_expiry_evicts_soonest_to_expire(make_cache):
    cache = make_cache(max_keys=3, rotate_type="expiry")
    cache.set("long", 1, 100)
    cache.set("short", 1, 10)
    cache.set("forever", 1)
    cache.set("new", 1, 50)
    assert sorted(cache.keys()) == ["forever", "long", "new"]

def test_expiry_uses_added_plus_ttl(make_cache, clock):
    cache = make_cache(max_keys=2, rotate_type="expiry")
    cache.set("early", 1, 30)
    clock.advance(25)
    cache.set("late", 1, 10)
    cache.set("new", 1, 60)
    assert sorted(cache.keys()) == ["late", "new"]

def test_expiry_never_picks_non_expiring_first(make_cache):
    cache = make_cache(max_keys=2, rotate_type="expiry")
    cache.set("forever", 1)
    cache.set("ttl", 1, 1000)
    cache.set("new", 1)
    assert sorted(cache.keys()) == ["forever", "new"]

def test_expiry_all_non_expiring_falls_back_to_oldest(make_cache, clock):
    cache = make_cache(max_keys=2, rotate_type="expiry")
    cache.set("a", 1)
    cache.set("b", 1)
    cache.set("c", 1)
    assert sorted(cache.keys()) == ["b", "c"]

#-------------NONE----------------
def test_none_raises_on_overflow(make_cache):
    cache = make_cache(max_keys=2, rotate_type="none")
    cache.set("a", 1)
    cache.set("b", 2)
    with pytest.raises(CapacityExceededError):
        cache.set("c", 3)
    assert sorted(cache.keys()) == ["a", "b"]
    assert cache.stats().keys == 2

def test_none_allows_overwrite_at_capacity(make_cache):
    cache = make_cache(max_keys=2, rotate_type="none")
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 3)
    assert cache.get("a") == 3

def test_mset_none_refuses_whole_batch(make_cache):
    cache = make_cache(max_keys=2, rotate_type="none")
    with pytest.raises(CapacityExceededError, match="will be reached"):
        cache.mset([{"key": "a", "value": 1}, {"key": "b", "value": 2}, {"key": "c", "value": 3}])
    assert cache.keys() == []
    assert cache.stats().keys == 0

def test_mset_rotating_evicts_per_set(make_cache):
    cache = make_cache(max_keys=2, rotate_type="oldest")
    cache.mset([("a", 1), ("b", 2), ("c", 3)])
    assert sorted(cache.keys()) == ["b", "c"]

def test_zero_max_keys_stores_nothing(make_cache):
    cache = make_cache(max_keys=0, rotate_type="oldest")
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.keys() == []
    assert cache.stats().keys == 0

def test_zero_max_keys_none_raises(make_cache):
    cache = make_cache(max_keys=0, rotate_type="none")
    with pytest.raises(CapacityExceededError):
        cache.set("a", 1)
    assert cache.stats().keys == 0

def test_unbounded_cache(make_cache):
    cache = make_cache(max_keys=-1, rotate_type="none")
    for i in range(3000):
        cache.set(i, i)
    assert cache.stats().keys == 3000

#-------------CONFIGURATION----------------
def test_invalid_rotate_type():
    with pytest.raises(InvalidConfigurationError, match="Invalid rotation type specified: lru"):
        RotatingCache(rotate_type="lru", checkperiod=0)

#-------------METRICS----------------
def test_rotation_metrics(make_cache):
    cache = make_cache(max_keys=1)
    cache.set("a", 1)
    cache.set("b", 1)
    assert cache.get("a") is NIL
    metrics = cache.rotation.get_metrics()
    assert metrics["rotate_type"] == "oldest"
    assert metrics["n_evicts"] == 1
    assert metrics["n_reuse_evicts"] == 1

def test_flush_all_resets_rotation_metrics(make_cache):
    cache = make_cache(max_keys=1)
    cache.set("a", 1)
    cache.set("b", 1)
    cache.get("a")
    cache.flush_all()
    metrics = cache.rotation.get_metrics()
    assert metrics["n_evicts"] == 0
    assert metrics["n_reuse_evicts"] == 0

def test_manager_needs_rotation():
    manager = RotationManager(CacheOptions(max_keys=3))
    assert not manager.needs_rotation(2)
    assert manager.needs_rotation(3)
    assert manager.needs_rotation(1, incoming=3)

def test_manager_select_victim_on_empty():
    manager = RotationManager(CacheOptions(max_keys=0))
    assert manager.select_victim({}) is None
