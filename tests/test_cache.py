from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from newsdesk.core.cache import DatabaseCacheStore, InMemoryCacheStore
from newsdesk.models.cache_entry import CacheEntry

TTL = timedelta(minutes=15)
PAYLOAD = {"totalResults": 1, "articles": [{"url": "https://example.com/a"}]}


@pytest.fixture(params=["memory", "database"])
def cache(request, fake_clock, test_db):
    if request.param == "memory":
        return InMemoryCacheStore(clock=fake_clock)
    return DatabaseCacheStore(test_db, clock=fake_clock)


class TestCacheStore:

    def test_missing_key_returns_none(self, cache):
        assert cache.get("news_top_headlines") is None

    def test_served_verbatim_before_expiry(self, cache, fake_clock):
        cache.put("news_top_headlines", PAYLOAD, TTL)

        fake_clock.advance(minutes=14, seconds=59)

        assert cache.get("news_top_headlines") == PAYLOAD

    def test_absent_at_exact_expiry(self, cache, fake_clock):
        cache.put("news_top_headlines", PAYLOAD, TTL)

        fake_clock.advance(minutes=15)

        assert cache.get("news_top_headlines") is None

    def test_absent_after_expiry(self, cache, fake_clock):
        cache.put("news_category_sports", PAYLOAD, TTL)

        fake_clock.advance(hours=1)

        assert cache.get("news_category_sports") is None

    def test_put_overwrites_and_restarts_ttl(self, cache, fake_clock):
        cache.put("news_top_headlines", {"totalResults": 0, "articles": []}, TTL)
        fake_clock.advance(minutes=10)
        cache.put("news_top_headlines", PAYLOAD, TTL)
        fake_clock.advance(minutes=10)

        assert cache.get("news_top_headlines") == PAYLOAD

    def test_flush_all_clears_every_key(self, cache):
        cache.put("news_top_headlines", PAYLOAD, TTL)
        cache.put("news_category_sports", PAYLOAD, TTL)
        cache.put("unrelated_key", {"x": 1}, TTL)

        cache.flush_all()

        assert cache.get("news_top_headlines") is None
        assert cache.get("news_category_sports") is None
        assert cache.get("unrelated_key") is None


def test_database_cache_removes_expired_rows(test_db, fake_clock):
    cache = DatabaseCacheStore(test_db, clock=fake_clock)
    cache.put("news_top_headlines", PAYLOAD, TTL)

    fake_clock.advance(minutes=16)
    cache.get("news_top_headlines")

    assert test_db.query(CacheEntry).count() == 0


def test_database_cache_is_shared_between_instances(test_db, fake_clock):
    DatabaseCacheStore(test_db, clock=fake_clock).put("news_top_headlines", PAYLOAD, TTL)

    assert DatabaseCacheStore(test_db, clock=fake_clock).get("news_top_headlines") == PAYLOAD


def test_memory_cache_tolerates_concurrent_eviction(fake_clock):
    cache = InMemoryCacheStore(clock=fake_clock)
    cache.put("news_top_headlines", PAYLOAD, TTL)
    fake_clock.advance(minutes=20)

    def evicting_clock():
        # Another request expires the same entry between lookup and eviction
        cache._entries.pop("news_top_headlines", None)
        return fake_clock()

    cache.clock = evicting_clock

    assert cache.get("news_top_headlines") is None


def test_memory_cache_concurrent_reads_of_expired_key(fake_clock):
    cache = InMemoryCacheStore(clock=fake_clock)
    cache.put("news_top_headlines", PAYLOAD, TTL)
    fake_clock.advance(minutes=20)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: cache.get("news_top_headlines"), range(32)))

    assert results == [None] * 32
