import random
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from bravo.core.hydrator import EntityPager, MatchFunction
from bravo.core.utility import strings_match
from bravo.providers.favro.entities.base import BravoEntity
from bravo.schemas.favro import Widget

if TYPE_CHECKING:
    from bravo.providers.favro.entities.card import BravoCard
    from bravo.providers.favro.entities.column import BravoColumn

WIDGET_COLORS = (
    "blue",
    "lightgreen",
    "brown",
    "purple",
    "orange",
    "yellow",
    "gray",
    "red",
    "cyan",
    "green",
)


class BravoWidget(BravoEntity[Widget]):
    model_class = Widget
    id_field = "widget_common_id"

    @property
    def widget_common_id(self) -> str:
        return self._data.widget_common_id

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def collection_ids(self) -> List[str]:
        return list(self._data.collection_ids)

    @property
    def type(self) -> Optional[str]:
        return self._data.type

    @property
    def color(self) -> Optional[str]:
        return self._data.color

    @property
    def breakdown_card_common_id(self) -> Optional[str]:
        return self._data.breakdown_card_common_id

    @property
    def owner_role(self) -> Optional[str]:
        return self._data.owner_role

    @property
    def edit_role(self) -> Optional[str]:
        return self._data.edit_role

    async def create_column(
        self, name: str, position: Optional[int] = None
    ) -> "BravoColumn":
        return await self._client.create_column(
            self.widget_common_id, name, position=position
        )

    async def list_columns(self) -> List["BravoColumn"]:
        return await self._client.list_columns(self.widget_common_id)

    async def find_column(self, match: MatchFunction) -> Optional["BravoColumn"]:
        return await self._client.find_column(self.widget_common_id, match)

    async def find_column_by_name(
        self, name: str, ignore_case: bool = False
    ) -> Optional["BravoColumn"]:
        return await self.find_column(
            lambda column, _: strings_match(name, column.name, ignore_case=ignore_case)
        )

    async def delete_column(self, column_id: str) -> None:
        await self._client.delete_column_by_id(self.widget_common_id, column_id)

    async def list_cards(self, **query: Any) -> EntityPager["BravoCard"]:
        return await self._client.list_cards(
            widget_common_id=self.widget_common_id, **query
        )

    async def find_card(self, match: MatchFunction) -> Optional["BravoCard"]:
        cards = await self.list_cards()
        return await cards.find(match)

    async def find_card_by_name(
        self, name: str, ignore_case: bool = False
    ) -> Optional["BravoCard"]:
        return await self.find_card(
            lambda card, _: strings_match(name, card.name, ignore_case=ignore_case)
        )

    async def create_card(self, body: Dict[str, Any]) -> "BravoCard":
        return await self._client.create_card(
            {**body, "widgetCommonId": self.widget_common_id}
        )

    async def delete(self) -> None:
        """从 Favro 删除该 Widget（谨慎使用）"""
        if self._deleted:
            return
        await self._client.delete_widget_by_id(self.widget_common_id)
        self._deleted = True

    @staticmethod
    def random_color() -> str:
        return random.choice(WIDGET_COLORS)
