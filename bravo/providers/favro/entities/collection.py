from typing import TYPE_CHECKING, Any, List, Optional

from bravo.core.hydrator import MatchFunction
from bravo.providers.favro.entities.base import BravoEntity
from bravo.schemas.favro import Collection, CollectionMember

if TYPE_CHECKING:
    from bravo.providers.favro.entities.widget import BravoWidget


class BravoCollection(BravoEntity[Collection]):
    model_class = Collection
    id_field = "collection_id"

    @property
    def collection_id(self) -> str:
        return self._data.collection_id

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def organization_id(self) -> Optional[str]:
        return self._data.organization_id

    @property
    def shared_to_users(self) -> List[CollectionMember]:
        return list(self._data.shared_to_users)

    @property
    def archived(self) -> bool:
        return self._data.archived

    async def create_widget(self, name: str, **options: Any) -> "BravoWidget":
        return await self._client.create_widget(self.collection_id, name, **options)

    async def list_widgets(self) -> List["BravoWidget"]:
        return await self._client.list_widgets(self.collection_id)

    async def find_widget(self, match: MatchFunction) -> Optional["BravoWidget"]:
        return await self._client.find_widget(match, self.collection_id)

    async def find_widget_by_name(
        self, name: str, ignore_case: bool = False
    ) -> Optional["BravoWidget"]:
        return await self._client.find_widget_by_name(
            name, self.collection_id, ignore_case=ignore_case
        )

    async def delete(self) -> None:
        """从 Favro 删除该集合（谨慎使用）"""
        if self._deleted:
            return
        await self._client.delete_collection_by_id(self.collection_id)
        self._deleted = True
