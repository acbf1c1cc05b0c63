"""
GroupAPI

API:
- GET /groups
- GET /groups/{groupId}
- POST /groups
- PUT /groups/{groupId}
- DELETE /groups/{groupId}
"""

from typing import Any, Dict, List, Optional

from bravo.core.hydrator import EntityPager
from bravo.providers.favro.api.base import FavroAPI
from bravo.providers.favro.entities import BravoGroup


class GroupAPI(FavroAPI):
    async def list(self) -> EntityPager[BravoGroup]:
        return await self._request_entities("groups", BravoGroup)

    async def get(self, group_id: str) -> Optional[BravoGroup]:
        return await self._get_entity(f"groups/{group_id}", BravoGroup)

    async def create(
        self, name: str, members: Optional[List[Dict[str, str]]] = None
    ) -> BravoGroup:
        """
        Args:
            name: 分组名称
            members: [{"userId": ..., "role": "administrator" | "member"}]
        """
        body: Dict[str, Any] = {"name": name}
        if members:
            body["members"] = members
        return await self._write_entity("groups", BravoGroup, "post", body)

    async def update(self, group_id: str, body: Dict[str, Any]) -> BravoGroup:
        """body: {name?, addMembers?, removeMembers?, members?}"""
        return await self._write_entity(f"groups/{group_id}", BravoGroup, "put", body)

    async def delete(self, group_id: str) -> None:
        await self._delete(f"groups/{group_id}")
