"""
EntityPager - 实体 hydration 与累积缓存

将分页响应的原始记录懒转换为实体对象，并按到达顺序追加到累积列表中。
同一查询调用两次会得到两个互相独立的 EntityPager，不做去重。

使用示例:
    pager = await client.collections_api.list()
    async for collection in pager:
        ...
    first_page_only = await pager.get_fetched_entities()
    everything = await pager.get_all_entities()
"""

import inspect
import logging
from typing import (
    Any,
    AsyncIterator,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Type,
    TypeVar,
)

from bravo.core.paging import PageState, PageWalker
from bravo.core.response import FavroResponse

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT")

# match(entity, idx) -> truthy；可以是同步函数或协程函数
MatchFunction = Callable[[Any, int], Any]


async def call_match(match: MatchFunction, entity: Any, idx: int) -> Any:
    result = match(entity, idx)
    if inspect.isawaitable(result):
        result = await result
    return result


class EntityPager(Generic[EntityT]):
    """
    分页实体集合

    Args:
        client: 实体反向引用的客户端
        entity_class: 实体类，需提供 hydrate(client, record) 类方法
        first_page: 首个响应
    """

    def __init__(
        self,
        client: Any,
        entity_class: Type[EntityT],
        first_page: Optional[FavroResponse],
    ):
        self._client = client
        self._entity_class = entity_class
        self._walker = PageWalker(first_page)
        self._entities: List[EntityT] = []
        self._entities_by_id: Dict[str, Dict[Any, EntityT]] = {}

    def __repr__(self) -> str:
        return (
            f"<EntityPager {self._entity_class.__name__} "
            f"fetched={len(self._entities)} state={self._walker.state.value}>"
        )

    @property
    def state(self) -> PageState:
        return self._walker.state

    @property
    def exhausted(self) -> bool:
        return self._walker.state is PageState.EXHAUSTED

    @property
    def pages_fetched(self) -> int:
        return self._walker.pages_fetched

    def _hydrate(self, record: Any) -> EntityT:
        return self._entity_class.hydrate(self._client, record)  # type: ignore[attr-defined]

    async def ensure_hydrated(self) -> Optional[List[EntityT]]:
        """
        hydration 最新获取的页面并追加到缓存

        Returns:
            该页新生成的实体（副本）；最新页已 hydration 过时返回 None
        """
        page = self._walker.pending_page
        if page is None:
            return None
        records = await page.get_entities_data()
        new_entities = [self._hydrate(record) for record in records]
        self._entities.extend(new_entities)
        await self._walker.mark_hydrated()
        logger.debug(
            "Hydrated %d %s entities (total=%d)",
            len(new_entities),
            self._entity_class.__name__,
            len(self._entities),
        )
        return list(new_entities)

    async def fetch_next_page(self) -> Optional[List[EntityT]]:
        """
        获取、hydration 并缓存下一页

        适用于关注限流、希望尽早停止翻页的调用方。

        Returns:
            仅包含下一页的实体；没有下一页时返回 None
        """
        await self.ensure_hydrated()
        if not await self._walker.advance():
            return None
        return await self.ensure_hydrated()

    async def get_all_entities(self) -> List[EntityT]:
        """
        穷举获取所有实体（每个剩余页面一次 HTTP 请求）
        """
        await self.ensure_hydrated()
        while await self.fetch_next_page() is not None:
            pass
        return list(self._entities)

    async def get_fetched_entities(self) -> List[EntityT]:
        """Snapshot of everything hydrated so far, without paging further."""
        await self.ensure_hydrated()
        return list(self._entities)

    async def get_first_entity(self) -> Optional[EntityT]:
        await self.ensure_hydrated()
        return self._entities[0] if self._entities else None

    async def __aiter__(self) -> AsyncIterator[EntityT]:
        await self.ensure_hydrated()
        idx = 0
        while True:
            while idx < len(self._entities):
                yield self._entities[idx]
                idx += 1
            if await self.fetch_next_page() is None:
                return

    async def find_index(self, match: MatchFunction) -> int:
        idx = 0
        async for entity in self:
            if await call_match(match, entity, idx):
                return idx
            idx += 1
        return -1

    async def find(self, match: MatchFunction) -> Optional[EntityT]:
        """Return the first match, paging only as far as needed."""
        idx = await self.find_index(match)
        if idx > -1:
            return self._entities[idx]
        return None

    async def filter(self, match: MatchFunction) -> List[EntityT]:
        """
        过滤所有实体

        注意：需要穷举所有页面，可能产生较多 API 请求。
        """
        matches: List[EntityT] = []
        idx = 0
        async for entity in self:
            if await call_match(match, entity, idx):
                matches.append(entity)
            idx += 1
        return matches

    async def find_by_id(
        self, identifier_name: str, identifier_value: Any
    ) -> Optional[EntityT]:
        """
        按标识字段查找实体，遍历过程中顺带建立该字段的索引
        """
        cache = self._entities_by_id.setdefault(identifier_name, {})
        if identifier_value in cache:
            return cache[identifier_value]

        async for entity in self:
            value = getattr(entity, identifier_name, None)
            cache.setdefault(value, entity)
            if value == identifier_value:
                return entity
        return None
