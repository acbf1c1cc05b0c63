"""
BravoClient - 面向使用者的 Favro 客户端门面

在 FavroClient（请求 / 限流 / 分页）之上组合资源 API 层，并缓存列表结果
以节省限流预算（Favro 的限流较严格）。

缓存内容:
- 组织列表、成员列表、集合列表
- 按集合划分的 Widget 分页器（"" 表示全局）
- 按 Widget 划分的 Column 列表
- 标签与自定义字段分页器（懒加载）

卡片不缓存。需要最新数据时调用 clear_cache()。

使用示例:
    async with BravoClient() as client:
        collection = await client.find_collection_by_name("Roadmap")
        widget = await client.find_widget_by_name("Board", collection.collection_id)
        cards = await client.list_cards(widget_common_id=widget.widget_common_id)
        async for card in cards:
            print(card.name)
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Union

import httpx

from bravo.core.cache import COLLECTIONS, CUSTOM_FIELDS, ORGANIZATIONS, TAGS, USERS, ClientCache
from bravo.core.client import FavroClient
from bravo.core.errors import BravoNotFoundError, assert_bravo_claim
from bravo.core.hydrator import EntityPager, MatchFunction, call_match
from bravo.core.utility import (
    StringOrPattern,
    create_is_match_filter,
    find_by_field,
    find_required_by_field,
    strings_match,
)
from bravo.providers.favro.api import (
    CardAPI,
    CollectionAPI,
    ColumnAPI,
    CustomFieldAPI,
    GroupAPI,
    OrganizationAPI,
    TagAPI,
    UserAPI,
    WebhookAPI,
    WidgetAPI,
)
from bravo.providers.favro.entities import (
    BravoCard,
    BravoCollection,
    BravoColumn,
    BravoCustomFieldDefinition,
    BravoGroup,
    BravoOrganization,
    BravoTag,
    BravoUser,
    BravoWebhook,
    BravoWidget,
)
from bravo.schemas.favro import Attachment

logger = logging.getLogger(__name__)

_bravo_client: Optional["BravoClient"] = None
_bravo_client_lock = threading.Lock()  # 线程安全锁


class BravoClient(FavroClient):
    """
    Favro 客户端门面

    参数与 FavroClient 相同，额外支持 cache_ttl（秒）。
    """

    def __init__(
        self,
        token: Optional[str] = None,
        user_email: Optional[str] = None,
        organization_id: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        transport_retries: Optional[int] = None,
        cache_ttl: Optional[int] = None,
    ):
        super().__init__(
            token,
            user_email,
            organization_id,
            base_url=base_url,
            http_client=http_client,
            timeout=timeout,
            transport_retries=transport_retries,
        )
        self.cache = ClientCache(ttl=cache_ttl)

        self.organizations_api = OrganizationAPI(self)
        self.users_api = UserAPI(self)
        self.groups_api = GroupAPI(self)
        self.collections_api = CollectionAPI(self)
        self.widgets_api = WidgetAPI(self)
        self.columns_api = ColumnAPI(self)
        self.cards_api = CardAPI(self)
        self.tags_api = TagAPI(self)
        self.custom_fields_api = CustomFieldAPI(self)
        self.webhooks_api = WebhookAPI(self)

    def clear_cache(self) -> None:
        """清空所有缓存，使后续请求获取最新数据"""
        self.cache.clear()

    # =========================================================================
    # Organizations
    # =========================================================================
    async def list_organizations(self) -> List[BravoOrganization]:
        organizations = self.cache.get_list(ORGANIZATIONS)
        if organizations is None:
            pager = await self.organizations_api.list()
            organizations = await pager.get_all_entities()
            self.cache.set_list(ORGANIZATIONS, organizations)
        return organizations

    async def get_current_organization(self) -> Optional[BravoOrganization]:
        if not self.organization_id:
            return None
        return find_by_field(
            await self.list_organizations(), "organization_id", self.organization_id
        )

    async def find_organization_by_name(self, name: str) -> BravoOrganization:
        """忽略大小写；找不到时抛出 BravoNotFoundError"""
        return find_required_by_field(
            await self.list_organizations(), "name", name, ignore_case=True
        )

    async def find_organization_by_id(self, organization_id: str) -> BravoOrganization:
        return find_required_by_field(
            await self.list_organizations(), "organization_id", organization_id
        )

    # =========================================================================
    # Members
    # =========================================================================
    async def list_members(self) -> List[BravoUser]:
        """当前组织的所有成员（包含邮箱与姓名）"""
        users = self.cache.get_list(USERS)
        if users is None:
            pager = await self.users_api.list()
            users = await pager.get_all_entities()
            self.cache.set_list(USERS, users)
        return users

    async def find_member(self, match: Callable[[BravoUser], Any]) -> Optional[BravoUser]:
        return next((user for user in await self.list_members() if match(user)), None)

    async def _find_member_by_field(self, field_name: str, value: StringOrPattern) -> BravoUser:
        user = await self.find_member(create_is_match_filter(value, field_name))
        if user is None:
            raise BravoNotFoundError(f"No user found with {field_name} matching {value}")
        return user

    async def find_member_by_email(self, email: StringOrPattern) -> BravoUser:
        return await self._find_member_by_field("email", email)

    async def find_member_by_name(self, name: StringOrPattern) -> BravoUser:
        return await self._find_member_by_field("name", name)

    async def find_member_by_user_id(self, user_id: str) -> BravoUser:
        return await self._find_member_by_field("user_id", user_id)

    # =========================================================================
    # Groups
    # =========================================================================
    async def list_groups(self) -> List[BravoGroup]:
        return await (await self.groups_api.list()).get_all_entities()

    async def find_group_by_id(self, group_id: str) -> Optional[BravoGroup]:
        return await self.groups_api.get(group_id)

    async def create_group(
        self, name: str, members: Optional[List[Dict[str, str]]] = None
    ) -> BravoGroup:
        return await self.groups_api.create(name, members)

    async def update_group_by_id(self, group_id: str, body: Dict[str, Any]) -> BravoGroup:
        return await self.groups_api.update(group_id, body)

    async def delete_group_by_id(self, group_id: str) -> None:
        await self.groups_api.delete(group_id)

    async def delete_group_by_name(self, name: str) -> None:
        group = find_by_field(await self.list_groups(), "name", name)
        if group is not None:
            await self.delete_group_by_id(group.group_id)

    # =========================================================================
    # Collections
    # =========================================================================
    async def list_collections(self) -> List[BravoCollection]:
        """当前组织的所有集合（不含已归档），结果缓存"""
        collections = self.cache.get_list(COLLECTIONS)
        if collections is None:
            pager = await self.collections_api.list()
            collections = await pager.get_all_entities()
            self.cache.set_list(COLLECTIONS, collections)
        return collections

    async def find_collection(self, match: Callable[[BravoCollection], Any]) -> Optional[BravoCollection]:
        return next((c for c in await self.list_collections() if match(c)), None)

    async def find_collection_by_name(
        self, name: str, ignore_case: bool = False
    ) -> Optional[BravoCollection]:
        """集合名称不要求唯一，只返回第一个匹配项"""
        return find_by_field(
            await self.list_collections(), "name", name, ignore_case=ignore_case
        )

    async def find_collection_by_id(self, collection_id: str) -> BravoCollection:
        """先查缓存，未命中时请求单个集合接口"""
        cached = self.cache.get_list(COLLECTIONS) or []
        collection = find_by_field(cached, "collection_id", collection_id)
        if collection is None:
            collection = await self.collections_api.get(collection_id)
        if collection is None:
            raise BravoNotFoundError(f"No collection found with id {collection_id}")
        return collection

    async def create_collection(
        self,
        name: str,
        public_sharing: str = "organization",
        background: Optional[str] = None,
    ) -> BravoCollection:
        collection = await self.collections_api.create(name, public_sharing, background)
        self.cache.add_collection(collection)
        return collection

    async def delete_collection_by_id(self, collection_id: str) -> None:
        await self.collections_api.delete(collection_id)
        self.cache.remove_collection(collection_id)

    async def delete_collection_by_name(self, name: str, ignore_case: bool = False) -> None:
        collection = await self.find_collection_by_name(name, ignore_case=ignore_case)
        if collection is not None:
            await collection.delete()

    # =========================================================================
    # Widgets
    # =========================================================================
    async def get_widgets_pager(
        self, collection_id: Optional[str] = None
    ) -> EntityPager[BravoWidget]:
        """
        Widget 分页器（按集合缓存）

        可以按需遍历而不必一次取完所有页面。
        """
        pager = self.cache.get_widgets(collection_id)
        if pager is None:
            pager = await self.widgets_api.list(collection_id)
            self.cache.set_widgets(pager, collection_id)
        return pager

    async def list_widgets(self, collection_id: Optional[str] = None) -> List[BravoWidget]:
        pager = await self.get_widgets_pager(collection_id)
        return await pager.get_all_entities()

    async def find_widget(
        self, match: MatchFunction, collection_id: Optional[str] = None
    ) -> Optional[BravoWidget]:
        """非穷举查找；指定 collection_id 可以减少请求次数"""
        pager = await self.get_widgets_pager(collection_id)
        return await pager.find(match)

    async def find_widget_by_name(
        self, name: str, collection_id: Optional[str] = None, ignore_case: bool = False
    ) -> Optional[BravoWidget]:
        """Widget 名称不要求唯一，只返回第一个匹配项"""
        return await self.find_widget(
            lambda widget, _: strings_match(name, widget.name, ignore_case=ignore_case),
            collection_id,
        )

    async def find_widget_by_id(self, widget_common_id: str) -> Optional[BravoWidget]:
        return await self.widgets_api.get(widget_common_id)

    async def create_widget(
        self,
        collection_id: str,
        name: str,
        type: str = "board",
        color: str = "cyan",
        **extra: Any,
    ) -> BravoWidget:
        widget = await self.widgets_api.create(collection_id, name, type, color, **extra)
        self.cache.clear_widgets()
        return widget

    async def delete_widget_by_id(self, widget_common_id: str) -> None:
        await self.widgets_api.delete(widget_common_id)
        self.cache.clear_widgets()
        self.cache.delete(self.cache.columns_key(widget_common_id))

    # =========================================================================
    # Columns
    # =========================================================================
    async def list_columns(self, widget_common_id: str) -> List[BravoColumn]:
        """Widget 的所有 Column（状态），按 Widget 缓存"""
        columns = self.cache.get_columns(widget_common_id)
        if columns is None:
            pager = await self.columns_api.list(widget_common_id)
            columns = await pager.get_all_entities()
            self.cache.set_columns(widget_common_id, columns)
        return columns

    async def find_column(
        self, widget_common_id: str, match: MatchFunction
    ) -> Optional[BravoColumn]:
        for idx, column in enumerate(await self.list_columns(widget_common_id)):
            if await call_match(match, column, idx):
                return column
        return None

    async def find_column_by_id(self, widget_common_id: str, column_id: str) -> BravoColumn:
        column = find_by_field(
            await self.list_columns(widget_common_id), "column_id", column_id
        )
        if column is None:
            raise BravoNotFoundError(
                f"Column with id {column_id} does not exist on Widget with id {widget_common_id}"
            )
        return column

    async def create_column(
        self, widget_common_id: str, name: str, position: Optional[int] = None
    ) -> BravoColumn:
        column = await self.columns_api.create(widget_common_id, name, position)
        self.cache.add_column(widget_common_id, column)
        return column

    async def delete_column_by_id(self, widget_common_id: str, column_id: str) -> None:
        await self.columns_api.delete(column_id)
        self.cache.remove_column(widget_common_id, column_id)

    # =========================================================================
    # Cards
    # =========================================================================
    async def list_cards(self, **query: Any) -> EntityPager[BravoCard]:
        """卡片不缓存；尽量缩小查询范围以减少请求次数"""
        return await self.cards_api.list(**query)

    async def find_cards_by_sequential_id(
        self,
        sequential_id: Union[int, str],
        widget_common_id: Optional[str] = None,
        unique: Optional[bool] = None,
    ) -> List[BravoCard]:
        """
        按卡片序号查找所有实例

        Args:
            sequential_id: 卡片界面中显示的序号（可带前缀或为卡片链接）
            widget_common_id: 只返回该 Widget 上的实例
            unique: 只返回第一个实例
        """
        assert_bravo_claim(sequential_id, "Card sequentialId is required")
        pager = await self.cards_api.list(
            card_sequential_id=sequential_id,
            widget_common_id=widget_common_id,
            unique=unique,
        )
        return await pager.get_all_entities()

    async def find_card_by_id(self, card_id: str) -> Optional[BravoCard]:
        assert_bravo_claim(card_id, "No cardId provided")
        return await self.cards_api.get(card_id)

    async def create_card(self, body: Dict[str, Any]) -> BravoCard:
        return await self.cards_api.create(body)

    async def update_card_by_id(self, card_id: str, body: Dict[str, Any]) -> BravoCard:
        return await self.cards_api.update(card_id, body)

    async def add_attachment_to_card(
        self, card_id: str, filename: str, data: Union[str, bytes, None] = None
    ) -> Attachment:
        return await self.cards_api.add_attachment(card_id, filename, data)

    async def delete_card(self, card_id: str, everywhere: bool = False) -> None:
        await self.cards_api.delete(card_id, everywhere=everywhere)

    # =========================================================================
    # Tags
    # =========================================================================
    async def list_tags(self) -> EntityPager[BravoTag]:
        """标签分页器（懒加载并缓存）"""
        pager = self.cache.get(TAGS)
        if pager is None:
            pager = await self.tags_api.list()
            self.cache.set(TAGS, pager)
        return pager

    async def find_tag_by_id(self, tag_id: str) -> BravoTag:
        tag = await (await self.list_tags()).find_by_id("tag_id", tag_id)
        if tag is None:
            raise BravoNotFoundError(f"No tag found with id {tag_id}")
        return tag

    async def find_tag_by_name(self, name: StringOrPattern) -> Optional[BravoTag]:
        return await (await self.list_tags()).find(create_is_match_filter(name, "name"))

    async def create_tag(self, name: str, color: Optional[str] = None) -> BravoTag:
        tag = await self.tags_api.create(name, color)
        self.cache.delete(TAGS)
        return tag

    async def update_tag(self, tag_id: str, **changes: Any) -> BravoTag:
        tag = await self.tags_api.update(tag_id, **changes)
        self.cache.delete(TAGS)
        return tag

    async def delete_tag_by_id(self, tag_id: str) -> None:
        await self.tags_api.delete(tag_id)
        # 分页器懒加载，无法只删除单个标签
        self.cache.delete(TAGS)

    # =========================================================================
    # Custom fields
    # =========================================================================
    async def list_custom_field_definitions(self) -> EntityPager[BravoCustomFieldDefinition]:
        pager = self.cache.get(CUSTOM_FIELDS)
        if pager is None:
            pager = await self.custom_fields_api.list()
            self.cache.set(CUSTOM_FIELDS, pager)
        return pager

    async def find_custom_field_definition_by_id(
        self, custom_field_id: str
    ) -> BravoCustomFieldDefinition:
        definitions = await self.list_custom_field_definitions()
        definition = await definitions.find_by_id("custom_field_id", custom_field_id)
        if definition is None:
            raise BravoNotFoundError(
                f"No custom field definition found for id {custom_field_id}"
            )
        return definition

    # =========================================================================
    # Webhooks
    # =========================================================================
    async def list_webhooks(self, widget_common_id: Optional[str] = None) -> List[BravoWebhook]:
        return await (await self.webhooks_api.list(widget_common_id)).get_all_entities()

    async def find_webhook_by_name(
        self, name: StringOrPattern, widget_common_id: Optional[str] = None
    ) -> Optional[BravoWebhook]:
        matches = create_is_match_filter(name, "name")
        return next(
            (w for w in await self.list_webhooks(widget_common_id) if matches(w)), None
        )

    async def create_webhook(
        self,
        widget_common_id: str,
        name: str,
        post_to_url: str,
        secret: Optional[str] = None,
        column_ids: Optional[List[str]] = None,
        notifications: Optional[List[str]] = None,
    ) -> BravoWebhook:
        return await self.webhooks_api.create(
            widget_common_id, name, post_to_url, secret, column_ids, notifications
        )

    async def delete_webhook_by_id(self, webhook_id: str) -> None:
        await self.webhooks_api.delete(webhook_id)


def get_bravo_client() -> BravoClient:
    """
    获取全局单例客户端（线程安全）

    使用双重检查锁定模式，防止多线程并发时重复实例化。凭证从配置读取。

    Returns:
        BravoClient: 客户端实例

    Raises:
        BravoConfigError: 未配置 FAVRO_TOKEN / FAVRO_USER_EMAIL
    """
    global _bravo_client

    # 快速路径：已初始化则直接返回
    if _bravo_client is not None:
        return _bravo_client

    # 慢路径：使用锁保护初始化
    with _bravo_client_lock:
        if _bravo_client is not None:
            logger.debug("Reusing existing BravoClient singleton instance (after lock)")
            return _bravo_client

        logger.debug("Creating new BravoClient singleton instance")
        _bravo_client = BravoClient()

    return _bravo_client


def reset_bravo_client() -> None:
    """重置单例（主要用于测试）"""
    global _bravo_client
    with _bravo_client_lock:
        _bravo_client = None
