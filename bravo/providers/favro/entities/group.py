from typing import Any, Dict, List, Optional

from bravo.providers.favro.entities.base import BravoEntity
from bravo.schemas.favro import Group, GroupMember


class BravoGroup(BravoEntity[Group]):
    model_class = Group
    id_field = "group_id"

    @property
    def group_id(self) -> str:
        return self._data.group_id

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def organization_id(self) -> Optional[str]:
        return self._data.organization_id

    @property
    def creator_user_id(self) -> Optional[str]:
        return self._data.creator_user_id

    @property
    def member_count(self) -> int:
        return self._data.member_count

    @property
    def members(self) -> List[GroupMember]:
        return list(self._data.members)

    async def update(self, body: Dict[str, Any]) -> "BravoGroup":
        """
        更新该分组并刷新当前实例的数据

        与 BravoClient.update_group_by_id 不同，返回的是当前实例本身。
        """
        updated = await self._client.update_group_by_id(self.group_id, body)
        self._replace_with(updated)
        return self

    async def delete(self) -> None:
        if self._deleted:
            return
        await self._client.delete_group_by_id(self.group_id)
        self._deleted = True

    def equals(self, other: Any) -> bool:
        return (
            self.has_same_class(other)
            and self.organization_id == other.organization_id
            and self.group_id == other.group_id
        )
