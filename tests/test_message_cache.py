from relaybot.infrastructure.cache.message_cache import TTLMessageCache

from conftest import FakeClock


def test_set_get_and_overwrite():
    cache = TTLMessageCache()
    assert cache.get("a") is None
    cache.set("a", "1")
    assert cache.get("a") == "1"
    cache.set("a", "2")
    assert cache.get("a") == "2"
    assert len(cache) == 1


def test_oldest_entries_evicted_beyond_capacity():
    cache = TTLMessageCache(max_items=2)
    cache.set("a", "1")
    cache.set("b", "2")
    cache.set("a", "1b")
    cache.set("c", "3")

    assert cache.get("b") is None
    assert cache.get("a") == "1b"
    assert cache.get("c") == "3"
    assert len(cache) == 2


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = TTLMessageCache(ttl_seconds=10, clock=clock)
    cache.set("a", "1")
    cache.set("b", "2")

    clock.advance(5)
    cache.set("b", "2b")
    clock.advance(6)

    assert cache.get("a") is None
    assert cache.get("b") == "2b"
    assert len(cache) == 1
