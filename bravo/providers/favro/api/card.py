"""
CardAPI - 卡片接口

API:
- GET /cards (分页，描述格式固定为 markdown)
- GET /cards/{cardId}
- POST /cards
- PUT /cards/{cardId}
- POST /cards/{cardId}/attachment?filename=
- DELETE /cards/{cardId}[?everywhere=true]

注意: card_id 只对应卡片在某一个 Widget 上的实例，不是 card_common_id。
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from bravo.core.errors import BravoResponseParseError
from bravo.core.hydrator import EntityPager
from bravo.core.utility import sequential_id_to_number
from bravo.providers.favro.api.base import FavroAPI
from bravo.providers.favro.entities import BravoCard
from bravo.schemas.favro import Attachment

logger = logging.getLogger(__name__)

DESCRIPTION_FORMAT = "markdown"

# 查询参数的 Python 名称 → API 名称
CARD_QUERY_FIELDS = {
    "card_common_id": "cardCommonId",
    "card_sequential_id": "cardSequentialId",
    "collection_id": "collectionId",
    "column_id": "columnId",
    "widget_common_id": "widgetCommonId",
    "todo_list": "todoList",
    "unique": "unique",
    "archived": "archived",
    "lane_id": "laneId",
}


def build_card_query(**query: Any) -> Dict[str, Any]:
    """
    构造卡片查询参数

    cardSequentialId 可以是数字、"PREFIX-123" 或卡片链接，统一转为数字。
    未知的参数名原样透传。
    """
    params: Dict[str, Any] = {"descriptionFormat": DESCRIPTION_FORMAT}
    for name, value in query.items():
        params[CARD_QUERY_FIELDS.get(name, name)] = value
    sequential_id = params.get("cardSequentialId")
    if sequential_id is not None:
        params["cardSequentialId"] = sequential_id_to_number(sequential_id)
    return params


class CardAPI(FavroAPI):
    async def list(self, **query: Any) -> EntityPager[BravoCard]:
        """
        查询卡片（不缓存，按需分页）

        Args:
            **query: widget_common_id / collection_id / column_id / card_common_id /
                card_sequential_id / unique / todo_list / archived ...
        """
        return await self._request_entities(
            "cards", BravoCard, self._options(query=build_card_query(**query))
        )

    async def get(self, card_id: str) -> Optional[BravoCard]:
        return await self._get_entity(
            f"cards/{card_id}", BravoCard, query={"descriptionFormat": DESCRIPTION_FORMAT}
        )

    async def create(self, body: Dict[str, Any]) -> BravoCard:
        """body: {name, widgetCommonId?, columnId?, detailedDescription?, ...}"""
        return await self._write_entity(
            "cards",
            BravoCard,
            "post",
            body,
            query={"descriptionFormat": DESCRIPTION_FORMAT},
        )

    async def update(self, card_id: str, body: Dict[str, Any]) -> BravoCard:
        """body 通常由 CardUpdateBuilder.to_body() 生成"""
        return await self._write_entity(
            f"cards/{card_id}",
            BravoCard,
            "put",
            body,
            query={"descriptionFormat": DESCRIPTION_FORMAT},
        )

    async def add_attachment(
        self, card_id: str, filename: str, data: Union[str, bytes, None] = None
    ) -> Attachment:
        """
        上传附件

        Args:
            card_id: 卡片实例 ID
            filename: 文件名；未提供 data 时从该路径读取内容
            data: 附件内容

        Raises:
            BravoResponseParseError: 响应中没有 fileURL
        """
        if data is None:
            data = Path(filename).read_bytes()
        response = await self.client.request(
            f"cards/{card_id}/attachment",
            self._options(
                method="post", body=data, query={"filename": os.path.basename(filename)}
            ),
        )
        parsed = await response.get_parsed_body()
        try:
            attachment = Attachment.model_validate(parsed)
        except ValidationError as e:
            raise BravoResponseParseError(
                f"Failed to add attachment: {e}", content=response.text
            ) from e
        logger.info("Uploaded attachment %s to card %s", attachment.name, card_id)
        return attachment

    async def delete(self, card_id: str, everywhere: bool = False) -> None:
        """everywhere=True 时从所有 Widget 中删除该卡片"""
        await self._delete(
            f"cards/{card_id}", query={"everywhere": True} if everywhere else None
        )
