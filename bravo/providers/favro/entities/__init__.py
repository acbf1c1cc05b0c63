"""
Favro 实体层 - 对原始 API 记录的类型化包装

实体通过 BravoClient 发出后续请求（删除、更新、查找关联实体）。
"""

from .base import BravoEntity
from .card import BravoCard
from .collection import BravoCollection
from .column import BravoColumn
from .custom_field import BravoCustomField, BravoCustomFieldDefinition
from .group import BravoGroup
from .organization import BravoOrganization, BravoUser
from .tag import BravoTag
from .webhook import (
    CARD_EVENT_NAMES,
    BravoWebhook,
    compute_webhook_signature,
    is_valid_webhook_signature,
)
from .widget import BravoWidget

__all__ = [
    "BravoEntity",
    "BravoCard",
    "BravoCollection",
    "BravoColumn",
    "BravoCustomField",
    "BravoCustomFieldDefinition",
    "BravoGroup",
    "BravoOrganization",
    "BravoUser",
    "BravoTag",
    "BravoWebhook",
    "BravoWidget",
    "CARD_EVENT_NAMES",
    "compute_webhook_signature",
    "is_valid_webhook_signature",
]
