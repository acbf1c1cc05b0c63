"""
FavroAPI - 资源 API 的公共基类

封装“请求 → 包装为 EntityPager”的通用流程。
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Type, TypeVar

from bravo.core.errors import assert_bravo_claim
from bravo.core.hydrator import EntityPager
from bravo.core.request import RequestOptions

if TYPE_CHECKING:
    from bravo.providers.favro.bravo_client import BravoClient

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT")


class FavroAPI:
    """
    Args:
        client: BravoClient 实例，默认使用全局单例
    """

    def __init__(self, client: Optional["BravoClient"] = None):
        if client is None:
            from bravo.providers.favro.bravo_client import get_bravo_client

            client = get_bravo_client()
        self.client = client

    @staticmethod
    def _options(**kwargs: Any) -> RequestOptions:
        """除组织列表外，所有资源接口都需要 organizationId"""
        kwargs.setdefault("require_organization_id", True)
        return RequestOptions(**kwargs)

    async def _request_entities(
        self,
        path: str,
        entity_class: Type[EntityT],
        options: Optional[RequestOptions] = None,
    ) -> EntityPager[EntityT]:
        response = await self.client.request(path, options or self._options())
        return EntityPager(self.client, entity_class, response)

    async def _get_entity(
        self,
        path: str,
        entity_class: Type[EntityT],
        query: Optional[Dict[str, Any]] = None,
    ) -> Optional[EntityT]:
        """获取单个实体；404 时返回 None"""
        options = self._options(query=query, tolerated_statuses=(404,))
        response = await self.client.request(path, options)
        if response.status_code == 404:
            logger.debug("Entity not found at %s", path)
            return None
        pager = EntityPager(self.client, entity_class, response)
        return await pager.get_first_entity()

    async def _write_entity(
        self,
        path: str,
        entity_class: Type[EntityT],
        method: str,
        body: Any,
        query: Optional[Dict[str, Any]] = None,
    ) -> EntityT:
        """
        创建 / 更新实体并返回服务端返回的结果

        Raises:
            BravoError: 响应中没有实体
        """
        options = self._options(method=method, body=body, query=query)
        pager = await self._request_entities(path, entity_class, options)
        entity = await pager.get_first_entity()
        assert_bravo_claim(
            entity, f"Failed to {method} {entity_class.__name__} at {path}"
        )
        return entity

    async def _delete(self, path: str, query: Optional[Dict[str, Any]] = None) -> None:
        await self.client.request(path, self._options(method="delete", query=query))
        logger.info("Deleted Favro entity at %s", path)
