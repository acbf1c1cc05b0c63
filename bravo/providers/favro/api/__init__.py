"""
Favro API 层 - 资源接口封装

每个类对应一组 Favro REST 资源，返回实体或 EntityPager。除组织列表外，
所有接口都要求客户端已设置 organizationId。

使用示例:
    from bravo.providers.favro.api import CollectionAPI, CardAPI

    collections = await CollectionAPI(client).list()
    async for collection in collections:
        ...

    cards = await CardAPI(client).list(widget_common_id="abc")
    first_page = await cards.get_fetched_entities()
"""

from .base import FavroAPI
from .card import CardAPI
from .collection import CollectionAPI
from .group import GroupAPI
from .organization import OrganizationAPI, UserAPI
from .tag import CustomFieldAPI, TagAPI
from .webhook import WebhookAPI
from .widget import ColumnAPI, WidgetAPI

__all__ = [
    "FavroAPI",
    "CardAPI",
    "CollectionAPI",
    "ColumnAPI",
    "CustomFieldAPI",
    "GroupAPI",
    "OrganizationAPI",
    "TagAPI",
    "UserAPI",
    "WebhookAPI",
    "WidgetAPI",
]
