"""
BravoCard - 卡片实例

一个卡片实例 = 卡片的全局数据 + 它在某个 Widget 上的数据。同一张卡片可以
出现在多个 Widget 中：card_common_id 全局唯一，card_id 只对应其中一个 Widget。
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from bravo.core.errors import assert_bravo_claim
from bravo.core.utility import StringOrPattern, is_match
from bravo.providers.favro.card_update_builder import CardUpdateBuilder
from bravo.providers.favro.entities.base import BravoEntity
from bravo.providers.favro.entities.custom_field import BravoCustomField
from bravo.schemas.favro import (
    Attachment,
    Card,
    CardAssignment,
    CardAttachment,
    CardCustomFieldValue,
)

if TYPE_CHECKING:
    from bravo.providers.favro.entities.column import BravoColumn

FAVRO_APP_URL = "https://favro.com"


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class BravoCard(BravoEntity[Card]):
    model_class = Card
    id_field = "card_id"

    def __init__(self, client, data: Dict[str, Any]):
        super().__init__(client, data)
        self._update_builder = CardUpdateBuilder()

    @property
    def card_id(self) -> str:
        """Widget-specific id."""
        return self._data.card_id

    @property
    def card_common_id(self) -> str:
        """Global id, shared by every widget the card appears in."""
        return self._data.card_common_id

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def sequential_id(self) -> Optional[int]:
        return self._data.sequential_id

    @property
    def url(self) -> str:
        """不绑定具体集合的卡片链接"""
        return (
            f"{FAVRO_APP_URL}/organization/{self._client.organization_id}"
            f"?card={self.sequential_id}"
        )

    @property
    def widget_common_id(self) -> Optional[str]:
        return self._data.widget_common_id

    @property
    def column_id(self) -> Optional[str]:
        return self._data.column_id

    @property
    def parent_card_id(self) -> Optional[str]:
        return self._data.parent_card_id

    @property
    def detailed_description(self) -> Optional[str]:
        return self._data.detailed_description

    @property
    def tags(self) -> List[str]:
        """Tag ids."""
        return list(self._data.tags)

    @property
    def assignments(self) -> List[CardAssignment]:
        return list(self._data.assignments)

    @property
    def attachments(self) -> List[CardAttachment]:
        return list(self._data.attachments)

    @property
    def custom_field_values(self) -> List[CardCustomFieldValue]:
        return list(self._data.custom_fields)

    @property
    def start_date(self) -> Optional[datetime]:
        return _parse_date(self._data.start_date)

    @property
    def due_date(self) -> Optional[datetime]:
        return _parse_date(self._data.due_date)

    @property
    def archived(self) -> bool:
        return self._data.archived

    @property
    def update_builder(self) -> CardUpdateBuilder:
        """不带参数调用 update() 时使用这里累积的修改"""
        return self._update_builder

    def equals(self, other: Any) -> bool:
        return self.has_same_class(other) and self.card_common_id == other.card_common_id

    # =========================================================================
    # Custom fields
    # =========================================================================
    async def get_custom_fields(self) -> List[BravoCustomField]:
        """
        卡片上已设置取值的自定义字段（稀疏，不含未设置的字段）

        Raises:
            BravoError: 找不到某个取值对应的字段定义
        """
        definitions = await self._client.list_custom_field_definitions()
        fields: List[BravoCustomField] = []
        for value in self.custom_field_values:
            definition = await definitions.find_by_id(
                "custom_field_id", value.custom_field_id
            )
            assert_bravo_claim(
                definition, f"Could not find Custom Field with ID {value.custom_field_id}"
            )
            fields.append(BravoCustomField(definition, value))
        return fields

    async def get_custom_field_by_field_id(self, custom_field_id: str) -> BravoCustomField:
        """未设置时返回不带取值的字段"""
        for field in await self.get_custom_fields():
            if field.custom_field_id == custom_field_id:
                return field
        definition = await self._client.find_custom_field_definition_by_id(custom_field_id)
        return BravoCustomField(definition)

    async def get_custom_field_by_name(
        self, name: StringOrPattern, field_type: str
    ) -> BravoCustomField:
        """
        按名称与类型查找自定义字段

        自定义字段是全局的且名称不唯一，只有在以下任一条件成立时才返回:
        - 卡片上恰好一个该类型字段匹配
        - 组织内恰好一个该类型字段定义匹配

        Raises:
            BravoError: 无法唯一确定字段
        """

        def matches(field: Any, *_: Any) -> bool:
            return field.type == field_type and is_match(field.name, name)

        on_card = [f for f in await self.get_custom_fields() if matches(f)]
        if len(on_card) == 1:
            return on_card[0]
        assert_bravo_claim(
            len(on_card) == 0,
            f"Multiple Custom Fields on the Card match the name {name}.",
        )

        definitions = await self._client.list_custom_field_definitions()
        matching = await definitions.filter(matches)
        assert_bravo_claim(
            len(matching) < 2,
            "No matching fields found on the Card, "
            "but more than one found in the global list of Custom Fields",
        )
        assert_bravo_claim(len(matching) == 1, "No matching fields found")
        return BravoCustomField(matching[0])

    # =========================================================================
    # Columns
    # =========================================================================
    async def list_widget_columns(self) -> List["BravoColumn"]:
        assert_bravo_claim(
            self.widget_common_id,
            "This card is not on a Widget and cannot have assignable Columns",
        )
        return await self._client.list_columns(self.widget_common_id)

    async def get_column(self) -> "BravoColumn":
        assert_bravo_claim(
            self.widget_common_id and self.column_id,
            "This Card instance does not have a columnId (it is not in a Widget).",
        )
        return await self._client.find_column_by_id(self.widget_common_id, self.column_id)

    async def set_column(self, column_or_id: Union[str, "BravoColumn"]) -> "BravoCard":
        if isinstance(column_or_id, str):
            column_id, widget_common_id = column_or_id, self.widget_common_id
        else:
            column_id, widget_common_id = column_or_id.column_id, column_or_id.widget_common_id
        assert_bravo_claim(column_id, "No valid columnId provided")
        return await self.update({"columnId": column_id, "widgetCommonId": widget_common_id})

    # =========================================================================
    # Mutations
    # =========================================================================
    async def update(self, body: Optional[Dict[str, Any]] = None) -> "BravoCard":
        """
        提交卡片更新并刷新当前实例

        Args:
            body: 更新请求体；不传时使用 update_builder 中累积的修改（并重置构造器）
        """
        if body is None:
            body = self._update_builder.to_body()
            self._update_builder = CardUpdateBuilder()
        updated = await self._client.update_card_by_id(self.card_id, body)
        self._replace_with(updated)
        return self

    async def attach(self, filename: str, data: Union[str, bytes, None] = None) -> Attachment:
        """
        上传附件

        Args:
            filename: 文件名；不提供 data 时从该路径读取内容
            data: 附件内容
        """
        attachment = await self._client.add_attachment_to_card(self.card_id, filename, data)
        raw = self.to_json()
        raw.setdefault("attachments", []).append(attachment.model_dump(by_alias=True))
        self._set_data(raw)
        return attachment

    async def refresh(self) -> "BravoCard":
        """重新获取卡片数据（丢弃未提交的 update_builder 修改）"""
        self._update_builder = CardUpdateBuilder()
        refreshed = await self._client.find_card_by_id(self.card_id)
        assert_bravo_claim(refreshed, f"Card {self.card_id} no longer exists")
        self._replace_with(refreshed)
        return self

    async def delete(self, everywhere: bool = False) -> None:
        """从当前 Widget 删除卡片；everywhere=True 时从所有 Widget 删除"""
        if self._deleted:
            return
        await self._client.delete_card(self.card_id, everywhere=everywhere)
        self._deleted = True
