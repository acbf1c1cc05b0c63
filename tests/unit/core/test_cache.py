"""
SimpleCache / ClientCache 单元测试
"""

import threading
import time
from types import SimpleNamespace

from bravo.core.cache import COLLECTIONS, ClientCache, SimpleCache


class TestSimpleCache:
    """SimpleCache 测试类"""

    def test_set_and_get(self):
        """测试基本的存取功能"""
        cache = SimpleCache(ttl=3600)
        cache.set("key1", "value1")
        assert cache.get("key1") == "value1"
        assert "key1" in cache

    def test_get_nonexistent_key(self):
        cache = SimpleCache(ttl=3600)
        assert cache.get("nonexistent") is None
        assert "nonexistent" not in cache

    def test_cache_expiry(self):
        """测试缓存过期"""
        cache = SimpleCache(ttl=1)
        cache.set("key1", "value1")

        assert cache.get("key1") == "value1"

        time.sleep(1.1)

        assert cache.get("key1") is None

    def test_cache_overwrite(self):
        cache = SimpleCache(ttl=3600)
        cache.set("key1", "value1")
        cache.set("key1", "value2")
        assert cache.get("key1") == "value2"

    def test_clear(self):
        cache = SimpleCache(ttl=3600)
        cache.set("key1", "value1")
        cache.set("key2", "value2")
        cache.clear()
        assert cache.get("key1") is None
        assert cache.get("key2") is None

    def test_delete_and_delete_prefix(self):
        cache = SimpleCache(ttl=3600)
        cache.set("widgets:a", 1)
        cache.set("widgets:b", 2)
        cache.set("columns:a", 3)

        cache.delete("columns:a")
        cache.delete("missing")
        cache.delete_prefix("widgets:")

        assert cache.get("widgets:a") is None
        assert cache.get("widgets:b") is None
        assert cache.get("columns:a") is None

    def test_default_ttl(self):
        cache = SimpleCache()
        assert cache.ttl == 3600

    def test_unicode_key(self):
        """测试 Unicode key"""
        cache = SimpleCache(ttl=3600)
        cache.set("中文键", "中文值")
        assert cache.get("中文键") == "中文值"

    def test_concurrent_access(self):
        """测试并发访问安全性"""
        cache = SimpleCache(ttl=3600)
        errors = []

        def writer():
            try:
                for i in range(100):
                    cache.set(f"key_{i}", i)
            except Exception as e:
                errors.append(e)

        def reader():
            try:
                for i in range(100):
                    cache.get(f"key_{i}")
            except Exception as e:
                errors.append(e)

        threads = [
            threading.Thread(target=writer),
            threading.Thread(target=reader),
            threading.Thread(target=writer),
            threading.Thread(target=reader),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []


def _collection(collection_id, name="c"):
    return SimpleNamespace(collection_id=collection_id, name=name)


def _column(column_id):
    return SimpleNamespace(column_id=column_id)


class TestClientCache:
    def test_ttl_from_argument(self):
        assert ClientCache(ttl=5).ttl == 5

    def test_lists_are_copies(self):
        cache = ClientCache(ttl=3600)
        original = [_collection("a")]
        cache.set_list(COLLECTIONS, original)
        original.append(_collection("b"))

        snapshot = cache.get_list(COLLECTIONS)
        snapshot.clear()

        assert [c.collection_id for c in cache.get_list(COLLECTIONS)] == ["a"]

    def test_missing_list_is_none(self):
        assert ClientCache(ttl=3600).get_list(COLLECTIONS) is None

    def test_add_collection_replaces_same_id(self):
        cache = ClientCache(ttl=3600)
        cache.set_list(COLLECTIONS, [_collection("a", "old"), _collection("b")])

        cache.add_collection(_collection("a", "new"))

        collections = cache.get_list(COLLECTIONS)
        assert [c.collection_id for c in collections] == ["b", "a"]
        assert collections[-1].name == "new"

    def test_add_and_remove_without_cached_list_are_noops(self):
        cache = ClientCache(ttl=3600)

        cache.add_collection(_collection("a"))
        cache.remove_collection("a")
        cache.add_column("w1", _column("x"))

        assert cache.get_list(COLLECTIONS) is None
        assert cache.get_columns("w1") is None

    def test_remove_collection(self):
        cache = ClientCache(ttl=3600)
        cache.set_list(COLLECTIONS, [_collection("a"), _collection("b")])

        cache.remove_collection("a")

        assert [c.collection_id for c in cache.get_list(COLLECTIONS)] == ["b"]

    def test_columns_per_widget(self):
        cache = ClientCache(ttl=3600)
        cache.set_columns("w1", [_column("x"), _column("y")])
        cache.set_columns("w2", [_column("z")])

        cache.add_column("w1", _column("q"))
        cache.remove_column("w1", "x")

        assert [c.column_id for c in cache.get_columns("w1")] == ["y", "q"]
        assert [c.column_id for c in cache.get_columns("w2")] == ["z"]

    def test_widget_keys(self):
        assert ClientCache.widgets_key() == "widgets:"
        assert ClientCache.widgets_key("col-1") == "widgets:col-1"
        assert ClientCache.columns_key("w1") == "columns:w1"

    def test_clear_widgets_keeps_other_entries(self):
        cache = ClientCache(ttl=3600)
        cache.set_widgets("global-pager")
        cache.set_widgets("collection-pager", "col-1")
        cache.set_columns("w1", [_column("x")])

        cache.clear_widgets()

        assert cache.get_widgets() is None
        assert cache.get_widgets("col-1") is None
        assert cache.get_columns("w1") is not None
