from typing import Optional

from bravo.providers.favro.entities.base import BravoEntity
from bravo.schemas.favro import Tag


class BravoTag(BravoEntity[Tag]):
    """A tag definition (organization-wide)."""

    model_class = Tag
    id_field = "tag_id"

    @property
    def tag_id(self) -> str:
        return self._data.tag_id

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def color(self) -> Optional[str]:
        return self._data.color

    @property
    def organization_id(self) -> Optional[str]:
        return self._data.organization_id

    async def delete(self) -> None:
        if self._deleted:
            return
        await self._client.delete_tag_by_id(self.tag_id)
        self._deleted = True
