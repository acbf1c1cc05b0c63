from typing import Optional

from bravo.providers.favro.entities.base import BravoEntity
from bravo.schemas.favro import Column


class BravoColumn(BravoEntity[Column]):
    """A Column (status) of a Widget."""

    model_class = Column
    id_field = "column_id"

    @property
    def column_id(self) -> str:
        return self._data.column_id

    @property
    def widget_common_id(self) -> str:
        return self._data.widget_common_id

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def organization_id(self) -> Optional[str]:
        return self._data.organization_id

    @property
    def position(self) -> int:
        return self._data.position

    @property
    def card_count(self) -> int:
        return self._data.card_count

    @property
    def time_sum(self) -> float:
        return self._data.time_sum

    @property
    def estimation_sum(self) -> float:
        return self._data.estimation_sum

    async def delete(self) -> None:
        if self._deleted:
            return
        await self._client.delete_column_by_id(self.widget_common_id, self.column_id)
        self._deleted = True
