"""
Favro API 原始记录模型

每种实体一个 pydantic 模型，在 hydration 时统一校验一次。字段名使用
snake_case，通过 alias 对应 API 的 camelCase。
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FavroModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# =============================================================================
# Paging
# =============================================================================
class PageEnvelope(FavroModel):
    """
    分页响应信封: {limit, page, pages, requestId, entities[]}

    page 从 0 开始；当 page >= pages - 1 时为最后一页。
    """

    limit: int = 0
    page: int = 0
    pages: int = 1
    request_id: Optional[str] = None
    entities: List[Any] = Field(default_factory=list)


# =============================================================================
# Organizations / Users / Groups
# =============================================================================
class OrganizationMember(FavroModel):
    user_id: str
    role: Optional[str] = None
    join_date: Optional[str] = None


class Organization(FavroModel):
    organization_id: str
    name: str
    shared_to_users: List[OrganizationMember] = Field(default_factory=list)


class User(FavroModel):
    user_id: str
    name: str = ""
    email: str = ""
    organization_role: Optional[str] = None


class GroupMember(FavroModel):
    user_id: str
    role: Optional[str] = None


class Group(FavroModel):
    group_id: str
    name: str
    organization_id: Optional[str] = None
    creator_user_id: Optional[str] = None
    member_count: int = 0
    members: List[GroupMember] = Field(default_factory=list)


# =============================================================================
# Collections / Widgets / Columns
# =============================================================================
class CollectionMember(FavroModel):
    user_id: str
    role: Optional[str] = None


class Collection(FavroModel):
    collection_id: str
    name: str
    organization_id: Optional[str] = None
    shared_to_users: List[CollectionMember] = Field(default_factory=list)
    public_sharing: Optional[str] = None
    background: Optional[str] = None
    archived: bool = False
    full_members_can_add_widgets: Optional[bool] = None


class Widget(FavroModel):
    widget_common_id: str
    name: str
    organization_id: Optional[str] = None
    collection_ids: List[str] = Field(default_factory=list)
    type: Optional[str] = None
    breakdown_card_common_id: Optional[str] = None
    color: Optional[str] = None
    owner_role: Optional[str] = None
    edit_role: Optional[str] = None


class Column(FavroModel):
    column_id: str
    widget_common_id: str
    name: str
    organization_id: Optional[str] = None
    position: int = 0
    card_count: int = 0
    time_sum: float = 0
    estimation_sum: float = 0


# =============================================================================
# Cards
# =============================================================================
class CardAssignment(FavroModel):
    user_id: str
    completed: bool = False


class CardAttachment(FavroModel):
    name: str = ""
    file_url: str = Field(alias="fileURL")
    thumbnail_url: Optional[str] = Field(default=None, alias="thumbnailURL")


class CardFavroAttachment(FavroModel):
    item_common_id: str
    type: str


class CardCustomFieldValue(FavroModel):
    """Card 上的自定义字段值，不同字段类型的取值结构不同，保留原始结构"""

    model_config = ConfigDict(extra="allow")

    custom_field_id: str
    value: Any = None


class CardTimeOnBoard(FavroModel):
    time: float = 0
    is_stopped: bool = False


class Card(FavroModel):
    card_id: str
    card_common_id: str
    name: str
    organization_id: Optional[str] = None
    widget_common_id: Optional[str] = None
    column_id: Optional[str] = None
    lane_id: Optional[str] = None
    parent_card_id: Optional[str] = None
    todo_list_user_id: Optional[str] = None
    todo_list_completed: Optional[bool] = None
    is_lane: bool = False
    archived: bool = False
    position: Optional[float] = None
    list_position: Optional[float] = None
    sheet_position: Optional[float] = None
    detailed_description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    sequential_id: Optional[int] = None
    start_date: Optional[str] = None
    due_date: Optional[str] = None
    assignments: List[CardAssignment] = Field(default_factory=list)
    num_comments: int = 0
    tasks_total: int = 0
    tasks_done: int = 0
    attachments: List[CardAttachment] = Field(default_factory=list)
    custom_fields: List[CardCustomFieldValue] = Field(default_factory=list)
    time_on_board: Optional[CardTimeOnBoard] = None
    time_on_columns: Dict[str, float] = Field(default_factory=dict)
    favro_attachments: List[CardFavroAttachment] = Field(default_factory=list)


class Attachment(FavroModel):
    """Response of the card attachment upload endpoint."""

    name: str = ""
    file_url: str = Field(alias="fileURL")
    thumbnail_url: Optional[str] = Field(default=None, alias="thumbnailURL")


# =============================================================================
# Tags / Custom fields / Webhooks
# =============================================================================
class Tag(FavroModel):
    tag_id: str
    name: str
    organization_id: Optional[str] = None
    color: Optional[str] = None


class CustomFieldItem(FavroModel):
    custom_field_item_id: str
    name: str


class CustomFieldDefinition(FavroModel):
    custom_field_id: str
    name: str
    type: str
    organization_id: Optional[str] = None
    enabled: bool = True
    custom_field_items: List[CustomFieldItem] = Field(default_factory=list)


class WebhookOptions(FavroModel):
    column_ids: List[str] = Field(default_factory=list)
    notifications: List[str] = Field(default_factory=list)


class Webhook(FavroModel):
    webhook_id: str
    widget_common_id: str
    name: str
    post_to_url: str
    secret: Optional[str] = None
    options: WebhookOptions = Field(default_factory=WebhookOptions)
