"""Unit tests for the catalogue cache."""
import time
from concurrent.futures import ThreadPoolExecutor

from hotel_common.cache import CatalogCache


class TestCatalogCache:
    """Test the TTL cache used for room and service listings."""

    def test_key_ignores_unset_parameters_and_order(self):
        """Test cache key normalisation."""
        assert CatalogCache.key("rooms", guests=2, room_type=None) == "rooms:guests=2"
        assert CatalogCache.key("rooms", room_type="suite", guests=2) == CatalogCache.key(
            "rooms", guests=2, room_type="suite"
        )
        assert CatalogCache.key("services") == "services:"

    def test_set_and_get(self):
        """Test basic set and get operations."""
        cache = CatalogCache[list](ttl=60)

        cache.set("rooms:", [1, 2])

        assert cache.get("rooms:") == [1, 2]
        assert cache.get("rooms:guests=3") is None

    def test_ttl_expiration(self):
        """Test that entries expire after the TTL."""
        cache = CatalogCache[list](ttl=1)
        cache.set("rooms:", [1])

        time.sleep(1.1)

        assert cache.get("rooms:") is None

    def test_invalidate_only_touches_its_namespace(self):
        """Test namespace-scoped invalidation."""
        cache = CatalogCache[list](ttl=60)
        cache.set(CatalogCache.key("rooms"), [1])
        cache.set(CatalogCache.key("rooms", guests=4), [2])
        cache.set(CatalogCache.key("services"), [3])

        assert cache.invalidate("rooms") == 2

        assert cache.get(CatalogCache.key("rooms")) is None
        assert cache.get(CatalogCache.key("services")) == [3]

    def test_clear(self):
        """Test clearing every entry."""
        cache = CatalogCache[list](ttl=60)
        cache.set("rooms:", [1])
        cache.set("services:", [2])

        cache.clear()

        assert cache.get("rooms:") is None
        assert cache.get("services:") is None

    def test_concurrent_writes_and_invalidation(self):
        """Test writes and invalidation from several threads."""
        cache = CatalogCache[int](ttl=60, maxsize=64)

        def churn(worker):
            for i in range(200):
                cache.set(CatalogCache.key("rooms", guests=worker, page=i), i)
                if i % 10 == 0:
                    cache.invalidate("rooms")
            return worker

        with ThreadPoolExecutor(max_workers=8) as pool:
            assert sorted(pool.map(churn, range(8))) == list(range(8))

        cache.invalidate("rooms")
        assert cache.get(CatalogCache.key("rooms", guests=0, page=199)) is None
