import base64
import hashlib
import hmac
from typing import List, Optional

from bravo.providers.favro.entities.base import BravoEntity
from bravo.schemas.favro import Webhook

WEBHOOK_SIGNATURE_HEADER = "X-Favro-Webhook"

CARD_EVENT_NAMES = (
    "Card committed",
    "Card created",
    "Card moved",
    "Card removed",
    "Card updated",
)


def compute_webhook_signature(url: str, secret: str, payload_id: str) -> str:
    """base64(HMAC-SHA1(secret, payload_id + url))"""
    digest = hmac.new(
        secret.encode("utf-8"),
        f"{payload_id}{url}".encode("utf-8"),
        hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def is_valid_webhook_signature(
    url: str, secret: str, payload_id: str, signature: str
) -> bool:
    """
    校验 Favro webhook 签名

    每次推送的 X-Favro-Webhook 请求头是 HMAC-SHA1 摘要的 base64 编码，
    被签名内容为 payloadId 与创建 webhook 时提供的 URL（原样）的拼接。

    Args:
        url: 创建 webhook 时的 postToUrl
        secret: webhook secret
        payload_id: 推送体中的 payloadId
        signature: X-Favro-Webhook 请求头的值

    Returns:
        签名是否有效
    """
    expected = compute_webhook_signature(url, secret, payload_id)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


class BravoWebhook(BravoEntity[Webhook]):
    model_class = Webhook
    id_field = "webhook_id"

    @property
    def webhook_id(self) -> str:
        return self._data.webhook_id

    @property
    def widget_common_id(self) -> str:
        return self._data.widget_common_id

    @property
    def name(self) -> str:
        return self._data.name

    @property
    def post_to_url(self) -> str:
        return self._data.post_to_url

    @property
    def secret(self) -> Optional[str]:
        return self._data.secret

    @property
    def column_ids(self) -> List[str]:
        return list(self._data.options.column_ids)

    @property
    def notifications(self) -> List[str]:
        return list(self._data.options.notifications)

    def is_valid_webhook_signature(self, payload_id: str, signature: str) -> bool:
        if not self.secret:
            return False
        return is_valid_webhook_signature(
            self.post_to_url, self.secret, payload_id, signature
        )

    async def delete(self) -> None:
        if self._deleted:
            return
        await self._client.delete_webhook_by_id(self.webhook_id)
        self._deleted = True
