import json

from boussole.services.cache import DEFAULT_TTL_MS, InsightCache, Text, Tips
from boussole.services.storage import SQLiteStorage


def test_entry_is_stored_as_json_under_prefixed_key(cache, storage, clock):
    cache.set("inv_3_42", Text("راجع المخزون"))

    raw = storage.get_item("ai_cache_inv_3_42")
    assert json.loads(raw) == {"data": "راجع المخزون", "timestamp": clock.now}


def test_get_returns_value_of_expected_variant(cache):
    cache.set("dash_v2_250_0", Tips(("a", "b")))
    cache.set("inv_1_1", Text("insight"))

    assert cache.get("dash_v2_250_0", Tips) == Tips(("a", "b"))
    assert cache.get("inv_1_1", Text) == Text("insight")


def test_get_with_other_variant_is_a_miss(cache):
    cache.set("exp_2_100", Text("single"))

    assert cache.get("exp_2_100", Tips) is None


def test_entry_valid_up_to_ttl(cache, clock):
    cache.set("cli_2_500", Text("collect debts"))
    clock.now += DEFAULT_TTL_MS

    assert cache.get("cli_2_500", Text) == Text("collect debts")


def test_expired_entry_is_absent_and_evicted(cache, storage, clock):
    cache.set("cli_2_500", Text("collect debts"))
    clock.now += DEFAULT_TTL_MS + 1

    assert cache.get("cli_2_500", Text) is None
    assert storage.get_item("ai_cache_cli_2_500") is None


def test_custom_ttl(storage, clock):
    short = InsightCache(storage, ttl_ms=10, clock=clock)
    short.set("k", Text("v"))
    clock.now += 11

    assert short.get("k", Text) is None


def test_malformed_payload_is_absent_and_evicted(cache, storage):
    storage.set_item("ai_cache_bad", "{not json")
    storage.set_item("ai_cache_wrong_shape", json.dumps({"data": 5, "timestamp": 1}))

    assert cache.get("bad", Text) is None
    assert cache.get("wrong_shape", Text) is None
    assert storage.get_item("ai_cache_bad") is None
    assert storage.get_item("ai_cache_wrong_shape") is None


def test_storage_failures_never_escape(broken_storage, clock):
    broken = InsightCache(broken_storage, clock=clock)

    broken.set("k", Text("v"))
    assert broken.get("k", Text) is None
    broken.invalidate("k")
    assert broken.clear() == 0


def test_invalidate_and_clear(cache, storage):
    cache.set("a", Text("1"))
    cache.set("b", Tips(("2",)))
    storage.set_item("unrelated", "keep me")

    cache.invalidate("a")
    assert cache.get("a", Text) is None

    assert cache.clear() == 1
    assert storage.keys() == ["unrelated"]


def test_unserializable_value_is_dropped_not_raised(cache, storage):
    cache.set("cli_0_0", Text("tip \ud800 end"))

    assert storage.get_item("ai_cache_cli_0_0") is None
    assert cache.get("cli_0_0", Text) is None


def test_sqlite_backed_cache_round_trip_then_expiry(tmp_path, clock):
    sqlite_cache = InsightCache(SQLiteStorage(str(tmp_path / "ai_cache.db")), clock=clock)

    sqlite_cache.set("inv_2_30", Text("صفّ المخزون الراكد"))
    sqlite_cache.set("dash_v2_10_5", Tips(("بع", "وفّر")))

    assert sqlite_cache.get("inv_2_30", Text) == Text("صفّ المخزون الراكد")
    assert sqlite_cache.get("dash_v2_10_5", Tips) == Tips(("بع", "وفّر"))

    clock.now += DEFAULT_TTL_MS + 1

    assert sqlite_cache.get("inv_2_30", Text) is None
    assert sqlite_cache.storage.get_item("ai_cache_inv_2_30") is None
