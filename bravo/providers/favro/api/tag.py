"""
TagAPI / CustomFieldAPI

Favro 不提供标签与自定义字段的筛选参数，只能逐页获取。
"""

from typing import Any, Dict, Optional

from bravo.core.hydrator import EntityPager
from bravo.providers.favro.api.base import FavroAPI
from bravo.providers.favro.entities import BravoCustomFieldDefinition, BravoTag


class TagAPI(FavroAPI):
    async def list(self) -> EntityPager[BravoTag]:
        return await self._request_entities("tags", BravoTag)

    async def create(self, name: str, color: Optional[str] = None) -> BravoTag:
        body: Dict[str, Any] = {"name": name}
        if color:
            body["color"] = color
        return await self._write_entity("tags", BravoTag, "post", body)

    async def update(self, tag_id: str, **changes: Any) -> BravoTag:
        """changes: name / color"""
        return await self._write_entity(f"tags/{tag_id}", BravoTag, "put", changes)

    async def delete(self, tag_id: str) -> None:
        await self._delete(f"tags/{tag_id}")


class CustomFieldAPI(FavroAPI):
    async def list(self) -> EntityPager[BravoCustomFieldDefinition]:
        return await self._request_entities("customfields", BravoCustomFieldDefinition)

    async def get(self, custom_field_id: str) -> Optional[BravoCustomFieldDefinition]:
        return await self._get_entity(
            f"customfields/{custom_field_id}", BravoCustomFieldDefinition
        )
