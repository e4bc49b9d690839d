import redis

from storefront.core.cache import CatalogCache


class FakeRedis:
    def __init__(self, fail=False):
        self.fail = fail
        self.store = {}

    def get(self, key):
        if self.fail:
            raise redis.ConnectionError("redis down")
        return self.store.get(key)

    def setex(self, key, ttl, value):
        if self.fail:
            raise redis.ConnectionError("redis down")
        self.store[key] = value
        return True


def cache_with(client):
    cache = CatalogCache()
    cache.redis_client = client
    return cache


def test_cache_without_url_is_disabled():
    cache = CatalogCache()
    assert not cache.enabled
    assert cache.set("products:all", [{"id": 1}]) is False
    assert cache.get("products:all") is None


def test_values_are_stored_as_json_under_prefix():
    client = FakeRedis()
    cache = cache_with(client)

    assert cache.set("products:all", [{"id": 1, "price": "1500.00"}], ttl=60)
    assert "catalog:products:all" in client.store
    assert cache.get("products:all") == [{"id": 1, "price": "1500.00"}]
    assert cache.get("products:Shirts") is None


def test_redis_errors_fail_open():
    cache = cache_with(FakeRedis(fail=True))
    assert cache.set("products:all", []) is False
    assert cache.get("products:all") is None
