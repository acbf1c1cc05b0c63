"""
会话状态 (Client Session State)

每次请求完成后都会产生一个新的 SessionState，由调用方（FavroClient）显式地
向前传递。状态本身是不可变的，从不持久化到磁盘。
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from bravo.core.errors import BravoError

if TYPE_CHECKING:
    from bravo.core.response import FavroResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    """
    Snapshot of everything a request needs to know about the session.

    requests_remaining is None while the server has not reported a budget
    (treated as unlimited).
    """

    token: str
    user_email: str
    organization_id: Optional[str] = None
    requests_remaining: Optional[int] = None
    limit: Optional[int] = None
    limit_resets_at: Optional[datetime] = None
    backend_id: Optional[str] = None
    requests_made: int = 0

    @property
    def budget_exhausted(self) -> bool:
        return self.requests_remaining is not None and self.requests_remaining <= 0

    def with_organization(self, organization_id: str) -> "SessionState":
        """
        设置 organizationId（仅当尚未设置，或与已有值相同时）

        Raises:
            BravoError: 已设置为不同的 organizationId
        """
        if self.organization_id and self.organization_id != organization_id:
            raise BravoError("Cannot reset organizationId once it has been set.")
        return replace(self, organization_id=organization_id)

    def with_budget_reset(self) -> "SessionState":
        """
        清除本地记录的剩余请求数（由调用方显式触发）

        预算耗尽后不会自动恢复；调用方确认限流窗口已重置后调用。
        """
        return replace(self, requests_remaining=None)

    def after_response(self, response: "FavroResponse") -> "SessionState":
        """
        根据响应头更新 backend id / 剩余请求数 / 重置时间

        缺失的响应头不会覆盖已知的值。剩余请求数 < 1 或状态码为 429 时，
        剩余请求数固定为 0，使下一次调用在本地直接失败。
        """
        remaining = response.requests_remaining
        if remaining is None:
            remaining = self.requests_remaining
        if response.status_code == 429 or (remaining is not None and remaining < 1):
            remaining = 0

        limit = response.limit if response.limit is not None else self.limit
        resets_at = response.reported_limit_resets_at or self.limit_resets_at

        return replace(
            self,
            requests_made=self.requests_made + 1,
            backend_id=response.backend_id or self.backend_id,
            requests_remaining=remaining,
            limit=limit,
            limit_resets_at=resets_at,
        )

    def stats(self) -> Dict[str, Any]:
        return {
            "total": self.requests_made,
            "remaining": self.requests_remaining,
            "limit": self.limit,
            "limit_resets_at": self.limit_resets_at,
        }
