"""
CardUpdateBuilder - 链式构造卡片更新请求体

Favro 的卡片更新请求体较复杂，尽量把多个修改合并为一次请求以节省限流预算。

使用示例:
    body = (
        CardUpdateBuilder()
        .set_name("New name")
        .assign(["user-1"])
        .add_tags_by_name(["bug"])
        .set_due_date(datetime(2026, 1, 1, tzinfo=timezone.utc))
        .to_body()
    )
    await client.update_card_by_id(card_id, body)
"""

import copy
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Type, Union

from bravo.core.errors import BravoError
from bravo.core.utility import (
    StringOrPattern,
    create_is_match_filter,
    is_match,
    strings_or_objects_to_strings,
)

IdOrEntity = Union[str, Any]


def _custom_field_id(field_or_id: IdOrEntity) -> str:
    return field_or_id if isinstance(field_or_id, str) else field_or_id.custom_field_id


def _iso(date: Optional[datetime]) -> Optional[str]:
    return date.isoformat() if date is not None else None


class CardUpdateBuilder:
    """
    卡片更新请求体构造器

    相反的操作（assign / unassign、add / remove tags）的 ID 列表保持互斥：
    后一次操作会把同一个 ID 从相反的列表中移除。
    """

    def __init__(self, error: Type[BravoError] = BravoError):
        self._update: Dict[str, Any] = {"customFields": []}
        self._error = error

    def __repr__(self) -> str:
        return f"<CardUpdateBuilder {sorted(self._update)}>"

    def _assert(self, claim: Any, message: str) -> None:
        if not claim:
            raise self._error(message)

    def _add_unique(
        self,
        field: str,
        values: Iterable[Any],
        opposing_field: Optional[str] = None,
    ) -> "CardUpdateBuilder":
        values = list(values)
        current: List[Any] = self._update.setdefault(field, [])
        for value in values:
            if value not in current:
                current.append(value)
        if opposing_field and opposing_field in self._update:
            self._update[opposing_field] = [
                v for v in self._update[opposing_field] if v not in values
            ]
        return self

    def _add_unique_by(self, field: str, key: str, items: Iterable[Dict[str, Any]]):
        current: List[Dict[str, Any]] = self._update.setdefault(field, [])
        for item in items:
            current[:] = [c for c in current if c[key] != item[key]]
            current.append(item)
        return self

    def set_name(self, name: str) -> "CardUpdateBuilder":
        self._update["name"] = name
        return self

    def set_description(self, description: str) -> "CardUpdateBuilder":
        self._update["detailedDescription"] = description
        return self

    def assign(self, users_or_ids: Iterable[IdOrEntity]) -> "CardUpdateBuilder":
        user_ids = strings_or_objects_to_strings(users_or_ids, "user_id")
        return self._add_unique("addAssignmentIds", user_ids, "removeAssignmentIds")

    def unassign(self, users_or_ids: Iterable[IdOrEntity]) -> "CardUpdateBuilder":
        user_ids = strings_or_objects_to_strings(users_or_ids, "user_id")
        return self._add_unique("removeAssignmentIds", user_ids, "addAssignmentIds")

    def _set_assignment_completion(
        self, users_or_ids: Iterable[IdOrEntity], completed: bool
    ) -> "CardUpdateBuilder":
        user_ids = strings_or_objects_to_strings(users_or_ids, "user_id")
        return self._add_unique_by(
            "completeAssignments",
            "userId",
            [{"userId": user_id, "completed": completed} for user_id in user_ids],
        )

    def complete_assignment(self, users_or_ids: Iterable[IdOrEntity]) -> "CardUpdateBuilder":
        return self._set_assignment_completion(users_or_ids, True)

    def uncomplete_assignment(self, users_or_ids: Iterable[IdOrEntity]) -> "CardUpdateBuilder":
        return self._set_assignment_completion(users_or_ids, False)

    def add_tags_by_name(self, names: Iterable[str]) -> "CardUpdateBuilder":
        return self._add_unique("addTags", names, "removeTags")

    def remove_tags_by_name(self, names: Iterable[str]) -> "CardUpdateBuilder":
        return self._add_unique("removeTags", names, "addTags")

    def add_tags(self, tags_or_ids: Iterable[IdOrEntity]) -> "CardUpdateBuilder":
        tag_ids = strings_or_objects_to_strings(tags_or_ids, "tag_id")
        return self._add_unique("addTagIds", tag_ids, "removeTagIds")

    def remove_tags(self, tags_or_ids: Iterable[IdOrEntity]) -> "CardUpdateBuilder":
        tag_ids = strings_or_objects_to_strings(tags_or_ids, "tag_id")
        return self._add_unique("removeTagIds", tag_ids, "addTagIds")

    def set_start_date(self, date: Optional[datetime]) -> "CardUpdateBuilder":
        self._update["startDate"] = _iso(date)
        return self

    def unset_start_date(self) -> "CardUpdateBuilder":
        return self.set_start_date(None)

    def set_due_date(self, date: Optional[datetime]) -> "CardUpdateBuilder":
        self._update["dueDate"] = _iso(date)
        return self

    def unset_due_date(self) -> "CardUpdateBuilder":
        return self.set_due_date(None)

    def remove_attachments(self, file_urls: Iterable[str]) -> "CardUpdateBuilder":
        return self._add_unique("removeAttachments", file_urls)

    def add_favro_attachments(self, items: Iterable[Dict[str, str]]) -> "CardUpdateBuilder":
        """items: [{"itemCommonId": ..., "type": "card" | "widget"}]"""
        return self._add_unique_by("addFavroAttachments", "itemCommonId", items)

    def remove_favro_attachments_by_id(
        self, item_common_ids: Iterable[str]
    ) -> "CardUpdateBuilder":
        return self._add_unique("removeFavroAttachmentIds", item_common_ids)

    def archive(self) -> "CardUpdateBuilder":
        self._update["archive"] = True
        return self

    def unarchive(self) -> "CardUpdateBuilder":
        self._update["archive"] = False
        return self

    def add_to_widget(
        self,
        widget_common_id: str,
        column_id: Optional[str] = None,
        lane_id: Optional[str] = None,
        position: Optional[float] = None,
        drag_mode: Optional[str] = None,
        parent_card_id: Optional[str] = None,
    ) -> "CardUpdateBuilder":
        """移动（或添加）到指定 Widget / Column"""
        self._update["widgetCommonId"] = widget_common_id
        optional = {
            "columnId": column_id,
            "laneId": lane_id,
            "position": position,
            "dragMode": drag_mode,
            "parentCardId": parent_card_id,
        }
        self._update.update({k: v for k, v in optional.items() if v is not None})
        return self

    # =========================================================================
    # Custom fields
    # =========================================================================
    def _set_custom_field(
        self, field_or_id: IdOrEntity, update: Dict[str, Any]
    ) -> "CardUpdateBuilder":
        custom_field_id = _custom_field_id(field_or_id)
        fields: List[Dict[str, Any]] = self._update["customFields"]
        fields[:] = [f for f in fields if f["customFieldId"] != custom_field_id]
        fields.append({"customFieldId": custom_field_id, **update})
        return self

    def set_custom_text(self, field_or_id: IdOrEntity, text: str) -> "CardUpdateBuilder":
        self._assert(isinstance(text, str) and text, f'"{text}" is not a valid string')
        return self._set_custom_field(field_or_id, {"value": text})

    def set_custom_number(self, field_or_id: IdOrEntity, number: float) -> "CardUpdateBuilder":
        self._assert(
            isinstance(number, (int, float))
            and not isinstance(number, bool)
            and number == number,
            f"{number} is not a valid number",
        )
        return self._set_custom_field(field_or_id, {"total": number})

    def set_custom_checkbox(self, field_or_id: IdOrEntity, checked: bool) -> "CardUpdateBuilder":
        return self._set_custom_field(field_or_id, {"value": checked})

    def set_custom_link(
        self, field_or_id: IdOrEntity, url: str, text: Optional[str] = None
    ) -> "CardUpdateBuilder":
        return self._set_custom_field(
            field_or_id, {"link": {"url": url, "text": text or url}}
        )

    def set_custom_date(self, field_or_id: IdOrEntity, date: datetime) -> "CardUpdateBuilder":
        return self._set_custom_field(field_or_id, {"value": date.isoformat()})

    def set_custom_vote(self, field_or_id: IdOrEntity, vote: bool) -> "CardUpdateBuilder":
        return self._set_custom_field(field_or_id, {"value": vote})

    def set_custom_rating(self, field_or_id: IdOrEntity, rating: int) -> "CardUpdateBuilder":
        self._assert(0 <= rating <= 5, f"{rating} is not a valid rating (0-5)")
        return self._set_custom_field(field_or_id, {"total": rating})

    def set_custom_single_select(
        self, field_or_id: IdOrEntity, option_or_id: IdOrEntity
    ) -> "CardUpdateBuilder":
        option_id = strings_or_objects_to_strings([option_or_id], "custom_field_item_id")
        return self._set_custom_field(field_or_id, {"value": option_id})

    def set_custom_single_select_by_name(
        self, field_definition: Any, option_name: StringOrPattern
    ) -> "CardUpdateBuilder":
        """
        Args:
            field_definition: 带有 custom_field_items 的字段定义
            option_name: 选项名称（字符串精确匹配或正则）
        """
        matches = create_is_match_filter(option_name, "name")
        option = next(
            (item for item in field_definition.custom_field_items if matches(item)),
            None,
        )
        self._assert(
            option,
            f"No option matching {option_name} found on custom field "
            f"{field_definition.custom_field_id}",
        )
        return self.set_custom_single_select(field_definition, option.custom_field_item_id)

    def set_custom_multiple_select(
        self, field_or_id: IdOrEntity, options_or_ids: Iterable[IdOrEntity]
    ) -> "CardUpdateBuilder":
        option_ids = strings_or_objects_to_strings(options_or_ids, "custom_field_item_id")
        return self._set_custom_field(field_or_id, {"value": option_ids})

    def set_custom_multiple_select_by_name(
        self, field_definition: Any, option_names: List[StringOrPattern]
    ) -> "CardUpdateBuilder":
        self._assert(option_names, "No option names provided")
        options = [
            item
            for item in field_definition.custom_field_items
            if any(is_match(item.name, name) for name in option_names)
        ]
        self._assert(
            len(options) == len(option_names),
            f"Expected to find {len(option_names)} matching options, "
            f"but found {len(options)}.",
        )
        return self.set_custom_multiple_select(field_definition, options)

    def _update_custom_members(
        self, field_or_id: IdOrEntity, users_or_ids: Iterable[IdOrEntity], action: str
    ) -> "CardUpdateBuilder":
        custom_field_id = _custom_field_id(field_or_id)
        user_ids = strings_or_objects_to_strings(users_or_ids, "user_id")
        fields: List[Dict[str, Any]] = self._update["customFields"]
        update = next((f for f in fields if f["customFieldId"] == custom_field_id), None)
        if update is None or "members" not in update:
            update = {
                "customFieldId": custom_field_id,
                "members": {"addUserIds": [], "removeUserIds": [], "completeUsers": []},
            }
            fields[:] = [f for f in fields if f["customFieldId"] != custom_field_id]
            fields.append(update)

        members = update["members"]
        if action == "add":
            members["addUserIds"] = user_ids
        elif action == "remove":
            members["removeUserIds"] = user_ids
        else:
            completed = action == "complete"
            complete_users = [u for u in members["completeUsers"] if u["userId"] not in user_ids]
            complete_users.extend({"userId": u, "completed": completed} for u in user_ids)
            members["completeUsers"] = complete_users
        return self

    def add_custom_members(self, field_or_id: IdOrEntity, users: Iterable[IdOrEntity]):
        return self._update_custom_members(field_or_id, users, "add")

    def remove_custom_members(self, field_or_id: IdOrEntity, users: Iterable[IdOrEntity]):
        return self._update_custom_members(field_or_id, users, "remove")

    def complete_custom_members(self, field_or_id: IdOrEntity, users: Iterable[IdOrEntity]):
        return self._update_custom_members(field_or_id, users, "complete")

    def uncomplete_custom_members(self, field_or_id: IdOrEntity, users: Iterable[IdOrEntity]):
        return self._update_custom_members(field_or_id, users, "uncomplete")

    def to_body(self) -> Dict[str, Any]:
        """可直接用于卡片更新接口的请求体（副本）；未设置自定义字段时省略 customFields"""
        body = copy.deepcopy(self._update)
        if not body["customFields"]:
            del body["customFields"]
        return body
