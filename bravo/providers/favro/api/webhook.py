"""
WebhookAPI

API:
- GET /webhooks?widgetCommonId=
- POST /webhooks
- DELETE /webhooks/{webhookId}

webhook secret 可以通过列表接口取回，不需要单独保存。
"""

import logging
from typing import Any, Dict, List, Optional

from bravo.core.hydrator import EntityPager
from bravo.core.utility import generate_random_string
from bravo.providers.favro.api.base import FavroAPI
from bravo.providers.favro.entities import BravoWebhook

logger = logging.getLogger(__name__)

WEBHOOK_SECRET_LENGTH = 24


class WebhookAPI(FavroAPI):
    async def list(self, widget_common_id: Optional[str] = None) -> EntityPager[BravoWebhook]:
        return await self._request_entities(
            "webhooks",
            BravoWebhook,
            self._options(query={"widgetCommonId": widget_common_id}),
        )

    async def create(
        self,
        widget_common_id: str,
        name: str,
        post_to_url: str,
        secret: Optional[str] = None,
        column_ids: Optional[List[str]] = None,
        notifications: Optional[List[str]] = None,
    ) -> BravoWebhook:
        """
        创建 webhook

        未提供 secret 时自动生成一个随机 secret。
        """
        body: Dict[str, Any] = {
            "widgetCommonId": widget_common_id,
            "name": name,
            "postToUrl": post_to_url,
            "secret": secret or generate_random_string(WEBHOOK_SECRET_LENGTH),
            "options": {
                "columnIds": column_ids or [],
                "notifications": notifications or [],
            },
        }
        webhook = await self._write_entity("webhooks", BravoWebhook, "post", body)
        logger.info("Created webhook %s for widget %s", webhook.webhook_id, widget_common_id)
        return webhook

    async def delete(self, webhook_id: str) -> None:
        await self._delete(f"webhooks/{webhook_id}")
