"""
FavroClient - 有状态的 Favro API 客户端

特性:
- Basic Auth（用户邮箱 + API token）
- 在每次请求之间向前传递 SessionState（限流预算、backend 路由）
- 预算耗尽后在本地直接拒绝请求，直到调用方显式 reset_budget()
- 可选的传输层重试（连接失败、超时）
"""

import logging
from typing import Any, Dict, Optional

import httpx

from bravo.core.auth import mask_token
from bravo.core.config import settings
from bravo.core.errors import BravoConfigError
from bravo.core.request import RequestOptions, dispatch
from bravo.core.response import FavroResponse
from bravo.core.session import SessionState

logger = logging.getLogger(__name__)


class FavroClient:
    """
    Favro API 异步客户端

    Args:
        token: Favro API token，默认读取 FAVRO_TOKEN
        user_email: token 所属用户邮箱，默认读取 FAVRO_USER_EMAIL
        organization_id: 组织 ID，默认读取 FAVRO_ORGANIZATION_ID
        base_url: API 基础地址
        http_client: 外部传入的 httpx.AsyncClient（测试时注入 MockTransport）
        timeout: 请求超时（秒）
        transport_retries: 传输层错误重试次数

    Raises:
        BravoConfigError: 缺少 token 或 user_email
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
    ):
        token = token or settings.FAVRO_TOKEN
        user_email = user_email or settings.FAVRO_USER_EMAIL
        if not token:
            raise BravoConfigError("A Favro API token is required (FAVRO_TOKEN)")
        if not user_email:
            raise BravoConfigError(
                "The email of the token's user is required (FAVRO_USER_EMAIL)"
            )

        self.base_url = base_url or settings.FAVRO_API_BASE_URL
        self.transport_retries = (
            settings.BRAVO_TRANSPORT_RETRIES
            if transport_retries is None
            else transport_retries
        )
        self._state = SessionState(
            token=token,
            user_email=user_email,
            organization_id=organization_id or settings.FAVRO_ORGANIZATION_ID,
        )
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or settings.BRAVO_HTTP_TIMEOUT),
            trust_env=False,
            follow_redirects=True,
        )
        logger.info(
            "Initializing FavroClient for %s (token=%s, organization=%s)",
            user_email,
            mask_token(token),
            self._state.organization_id,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._state.user_email} org={self.organization_id}>"

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def organization_id(self) -> Optional[str]:
        return self._state.organization_id

    @organization_id.setter
    def organization_id(self, organization_id: str) -> None:
        """只能设置一次；设置为不同的值会抛出 BravoError"""
        self._state = self._state.with_organization(organization_id)

    @property
    def user_email(self) -> str:
        return self._state.user_email

    @property
    def request_stats(self) -> Dict[str, Any]:
        return self._state.stats()

    def reset_budget(self) -> None:
        """
        清除已耗尽的请求预算

        仅在确认服务端限流窗口已重置后调用，下一次请求会重新从响应头读取预算。
        """
        logger.info(
            "Resetting local Favro request budget (was %s, resets_at=%s)",
            self._state.requests_remaining,
            self._state.limit_resets_at,
        )
        self._state = self._state.with_budget_reset()

    async def request(
        self, path: str, options: Optional[RequestOptions] = None, **kwargs: Any
    ) -> FavroResponse:
        """
        发出请求并更新会话状态

        Args:
            path: 相对路径（如 "collections"）或完整 URL
            options: 请求参数；也可以通过关键字参数传入（method="post", body=...）

        Returns:
            FavroResponse

        Raises:
            BravoPreconditionError: 本地前置条件不满足（未发出请求）
            BravoRateLimitError: 429
            BravoHTTPError: 其他失败状态
        """
        if options is None:
            options = RequestOptions(**kwargs)
        elif kwargs:
            raise TypeError("Pass either RequestOptions or keyword options, not both")

        result = await dispatch(
            self._http,
            self._state,
            path,
            options,
            base_url=self.base_url,
            client=self,
            retries=self.transport_retries,
        )
        self._state = result.state
        await result.raise_for_status()
        return result.response

    async def close(self) -> None:
        """关闭客户端连接（外部传入的 httpx 客户端由调用方负责关闭）"""
        if self._owns_http_client:
            logger.info("Closing FavroClient connection")
            await self._http.aclose()

    async def __aenter__(self) -> "FavroClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
