import logging
import time
from typing import Any, Dict, List, Optional

from bravo.core.config import settings

logger = logging.getLogger(__name__)

ORGANIZATIONS = "organizations"
USERS = "users"
COLLECTIONS = "collections"
TAGS = "tags"
CUSTOM_FIELDS = "custom_fields"


class SimpleCache:
    def __init__(self, ttl: int = 3600):
        self.ttl = ttl
        self._cache: Dict[str, Dict[str, Any]] = {}
        logger.debug("SimpleCache initialized with TTL=%d seconds", ttl)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def set(self, key: str, value: Any):
        expiry_time = time.time() + self.ttl
        self._cache[key] = {"value": value, "expiry": expiry_time}
        logger.debug("Cache set: key=%s, expires_at=%s", key, expiry_time)

    def get(self, key: str) -> Optional[Any]:
        if key not in self._cache:
            logger.debug("Cache miss: key=%s", key)
            return None

        item = self._cache[key]
        current_time = time.time()
        if current_time > item["expiry"]:
            logger.debug(
                "Cache expired: key=%s, expired_at=%s, current_time=%s",
                key,
                item["expiry"],
                current_time,
            )
            del self._cache[key]
            return None

        logger.debug("Cache hit: key=%s", key)
        return item["value"]

    def delete(self, key: str):
        self._cache.pop(key, None)

    def delete_prefix(self, prefix: str):
        for key in [k for k in self._cache if k.startswith(prefix)]:
            del self._cache[key]

    def clear(self):
        cache_size = len(self._cache)
        self._cache.clear()
        logger.info("Cache cleared: removed %d entries", cache_size)


class ClientCache(SimpleCache):
    """
    BravoClient 的列表缓存

    - organizations / users / collections: 实体列表
    - widgets:<collectionId>: Widget 分页器（"" 表示全局）
    - columns:<widgetCommonId>: Column 列表
    - tags / custom_fields: 分页器（懒加载）

    列表在读取时返回副本。add/remove 只在对应缓存已存在时生效。
    """

    def __init__(self, ttl: Optional[int] = None):
        super().__init__(ttl=settings.BRAVO_CACHE_TTL if ttl is None else ttl)

    def get_list(self, key: str) -> Optional[List[Any]]:
        items = self.get(key)
        return list(items) if items is not None else None

    def set_list(self, key: str, items: List[Any]):
        self.set(key, list(items))

    @staticmethod
    def widgets_key(collection_id: Optional[str] = None) -> str:
        return f"widgets:{collection_id or ''}"

    @staticmethod
    def columns_key(widget_common_id: str) -> str:
        return f"columns:{widget_common_id}"

    def get_widgets(self, collection_id: Optional[str] = None) -> Optional[Any]:
        return self.get(self.widgets_key(collection_id))

    def set_widgets(self, pager: Any, collection_id: Optional[str] = None):
        self.set(self.widgets_key(collection_id), pager)

    def get_columns(self, widget_common_id: str) -> Optional[List[Any]]:
        return self.get_list(self.columns_key(widget_common_id))

    def set_columns(self, widget_common_id: str, columns: List[Any]):
        self.set_list(self.columns_key(widget_common_id), columns)

    def _replace_in(self, key: str, id_field: str, entity: Any):
        items = self.get(key)
        if items is None:
            return
        entity_id = getattr(entity, id_field)
        items[:] = [item for item in items if getattr(item, id_field) != entity_id]
        items.append(entity)

    def _remove_from(self, key: str, id_field: str, entity_id: str):
        items = self.get(key)
        if items is None:
            return
        items[:] = [item for item in items if getattr(item, id_field) != entity_id]

    def add_collection(self, collection: Any):
        self._replace_in(COLLECTIONS, "collection_id", collection)

    def remove_collection(self, collection_id: str):
        self._remove_from(COLLECTIONS, "collection_id", collection_id)

    def add_column(self, widget_common_id: str, column: Any):
        self._replace_in(self.columns_key(widget_common_id), "column_id", column)

    def remove_column(self, widget_common_id: str, column_id: str):
        self._remove_from(self.columns_key(widget_common_id), "column_id", column_id)

    def clear_widgets(self):
        self.delete_prefix("widgets:")
