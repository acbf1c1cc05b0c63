"""
自定义字段: 定义 (BravoCustomFieldDefinition) 与卡片上的取值 (BravoCustomField)
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from bravo.core.errors import BravoError, assert_bravo_claim
from bravo.providers.favro.entities.base import BravoEntity
from bravo.schemas.favro import (
    CardCustomFieldValue,
    CustomFieldDefinition,
    CustomFieldItem,
)

CUSTOM_FIELD_TYPES = (
    "Number",
    "Time",
    "Text",
    "Rating",
    "Voting",
    "Checkbox",
    "Date",
    "Timeline",
    "Link",
    "Members",
    "Tags",
    "Single select",
    "Multiple select",
)
CHOICE_FIELD_TYPES = ("Multiple select", "Tags", "Single select")


class BravoCustomFieldDefinition(BravoEntity[CustomFieldDefinition]):
    model_class = CustomFieldDefinition
    id_field = "custom_field_id"

    @property
    def custom_field_id(self) -> str:
        return self._data.custom_field_id

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def type(self) -> str:
        return self._data.type

    @property
    def enabled(self) -> bool:
        return self._data.enabled

    @property
    def organization_id(self) -> Optional[str]:
        return self._data.organization_id

    @property
    def custom_field_items(self) -> List[CustomFieldItem]:
        return list(self._data.custom_field_items)

    @staticmethod
    def is_choice_field(field_type: str) -> bool:
        return field_type in CHOICE_FIELD_TYPES


class BravoCustomField:
    """
    自定义字段定义 + 卡片上的取值（可选）

    Args:
        definition: 字段定义
        value: 卡片上该字段的原始取值；未设置时为 None
    """

    def __init__(
        self,
        definition: BravoCustomFieldDefinition,
        value: Optional[CardCustomFieldValue] = None,
    ):
        self.definition = definition
        self.value = value

    def __repr__(self) -> str:
        return f"<BravoCustomField {self.type!r} name={self.name!r} set={self.is_set}>"

    @property
    def custom_field_id(self) -> str:
        return self.definition.custom_field_id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def type(self) -> str:
        return self.definition.type

    @property
    def custom_field_items(self) -> List[CustomFieldItem]:
        return self.definition.custom_field_items

    def _raw_value(self) -> Dict[str, Any]:
        if self.value is None:
            return {}
        return self.value.model_dump(by_alias=True)

    @property
    def is_set(self) -> bool:
        if self.value is None:
            return False
        if isinstance(self.value.value, list):
            return len(self.value.value) > 0
        return True

    @property
    def chosen_options(self) -> List[CustomFieldItem]:
        """
        Raises:
            BravoError: 该字段类型没有选项
        """
        assert_bravo_claim(
            BravoCustomFieldDefinition.is_choice_field(self.type),
            f"Fields of type {self.type} do not have named choices.",
        )
        if not self.is_set:
            return []
        items = {item.custom_field_item_id: item for item in self.custom_field_items}
        return [items[chosen] for chosen in self.value.value if chosen in items]

    @property
    def assigned_to(self) -> List[str]:
        assert_bravo_claim(
            self.type == "Members",
            f"Fields of type {self.type} do not have members assigned to them.",
        )
        return list(self._raw_value().get("value") or [])

    @property
    def human_friendly_value(self) -> Any:
        """按字段类型转换为易读的取值；未设置时为 None"""
        if self.value is None:
            return None
        raw = self._raw_value()
        field_type = self.type
        if field_type in ("Number", "Time", "Rating"):
            return raw.get("total")
        if field_type in ("Text", "Checkbox"):
            return raw.get("value")
        if field_type == "Voting":
            voters = list(raw.get("value") or [])
            return {"tally": len(voters), "voters": voters}
        if field_type == "Date":
            return datetime.fromisoformat(raw["value"].replace("Z", "+00:00"))
        if field_type == "Timeline":
            return raw.get("timeline")
        if field_type == "Link":
            return raw.get("link")
        if field_type == "Members":
            return self.assigned_to
        if field_type in ("Tags", "Multiple select"):
            return self.chosen_options
        if field_type == "Single select":
            options = self.chosen_options
            return options[0] if options else None
        raise BravoError(f"Unknown custom field type: {field_type}")
