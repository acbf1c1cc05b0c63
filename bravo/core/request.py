"""
Request Dispatcher - 单次 Favro API 请求

负责:
- 前置条件检查（预算、organizationId、body 与方法是否兼容），失败时不发请求
- 构造 URL / 请求体 / 请求头
- 发出请求，并基于响应头计算新的 SessionState

dispatch() 不修改任何共享状态：新的会话状态随响应一起返回，由调用方向前传递。
"""

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bravo.core.auth import FavroAuth
from bravo.core.errors import (
    BodyNotAllowedError,
    BravoHTTPError,
    BravoRateLimitError,
    BudgetExhaustedError,
    OrganizationRequiredError,
)
from bravo.core.response import BACKEND_ID_HEADER, FavroResponse
from bravo.core.session import SessionState

if TYPE_CHECKING:
    from bravo.core.client import FavroClient

logger = logging.getLogger(__name__)

FAVRO_API_BASE_URL = "https://favro.com/api/v1"
FAVRO_HOST = "favro.com"  # API 要求固定 Host，否则请求会无提示失败
USER_AGENT = "Bravo <https://github.com/bscotch/favro-sdk> (python-httpx)"
ORGANIZATION_HEADER = "organizationId"

HTTP_METHODS = ("get", "post", "put", "delete")
BODYLESS_METHODS = ("get", "delete")

# 仅在未收到任何响应时重试（连接失败、超时）
RETRYABLE_EXCEPTIONS = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.ReadTimeout,
    httpx.WriteTimeout,
    httpx.PoolTimeout,
)
RETRY_MIN_WAIT = 1
RETRY_MAX_WAIT = 10


@dataclass
class RequestOptions:
    """
    Options for a single Favro request.

    backend_id overrides the last-known backend id for this call only.
    tolerated_statuses lists non-2xx statuses the caller handles itself.
    """

    method: str = "get"
    query: Optional[Dict[str, Any]] = None
    body: Any = None
    headers: Optional[Dict[str, Any]] = None
    backend_id: Optional[str] = None
    exclude_organization_id: bool = False
    require_organization_id: bool = False
    tolerated_statuses: Tuple[int, ...] = field(default_factory=tuple)


@dataclass
class DispatchResult:
    state: SessionState
    response: FavroResponse

    async def raise_for_status(self) -> None:
        """
        检查响应状态

        Raises:
            BravoRateLimitError: 429
            BravoHTTPError: 其他 >= 300 的状态码，或 2xx 响应体中带有 message
        """
        response = self.response
        status = response.status_code
        if status in response.request_options.tolerated_statuses:
            return

        if status >= 300:
            text = response.text
            logger.error(
                "Favro API error %d from %s: %s", status, response.url, text[:200]
            )
            if status == 429:
                raise BravoRateLimitError(
                    "Favro API rate limit reached (status 429)",
                    response_text=text,
                    limit_resets_at=self.state.limit_resets_at,
                )
            raise BravoHTTPError(
                f"Failed with status {status}", status_code=status, response_text=text
            )

        parsed = await response.get_parsed_body()
        if isinstance(parsed, dict) and "message" in parsed:
            message = parsed["message"]
            raise BravoHTTPError(
                f'Unexpected combo of status code ({status}) and response body ("{message}")',
                status_code=status,
                response_data=parsed,
            )


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return f"{value}"


def create_favro_api_url(
    path: str,
    params: Optional[Dict[str, Any]] = None,
    base_url: str = FAVRO_API_BASE_URL,
) -> httpx.URL:
    """
    构造完整请求 URL

    path 可以是相对于 base_url 的路径，也可以是已经完整的 URL（翻页时使用）。
    值为 None 的查询参数会被忽略，已存在的同名参数会被覆盖。
    """
    if path.startswith("http://") or path.startswith("https://"):
        url = httpx.URL(path)
    else:
        path = path if path.startswith("/") else f"/{path}"
        url = httpx.URL(f"{base_url.rstrip('/')}{path}")
    for name, value in (params or {}).items():
        if value is None:
            continue
        url = url.copy_set_param(name, _stringify(value))
    return url


def compute_body(body: Any) -> Tuple[Optional[str], Optional[bytes]]:
    """
    根据 body 类型推导 Content-Type 与请求内容

    - bytes → application/octet-stream
    - str → text/markdown
    - 其他可 JSON 序列化的值 → application/json
    """
    if body is None:
        return None, None
    if isinstance(body, (bytes, bytearray)):
        return "application/octet-stream", bytes(body)
    if isinstance(body, str):
        return "text/markdown", body.encode("utf-8")
    return "application/json", json.dumps(body).encode("utf-8")


def clean_headers(raw_headers: Dict[str, Any]) -> Dict[str, str]:
    """Drop None-valued headers and stringify the rest."""
    return {
        name: _stringify(value)
        for name, value in raw_headers.items()
        if value is not None
    }


def check_preconditions(state: SessionState, options: RequestOptions) -> str:
    """
    请求前置条件检查（不会发出网络请求）

    Returns:
        规范化后的小写 HTTP 方法

    Raises:
        BudgetExhaustedError: 本地记录的剩余请求数 <= 0
        OrganizationRequiredError: 请求需要 organizationId 但未设置
        BodyNotAllowedError: GET / DELETE 请求携带了 body
        ValueError: 不支持的 HTTP 方法
    """
    if state.budget_exhausted:
        raise BudgetExhaustedError(
            "No requests remaining!", limit_resets_at=state.limit_resets_at
        )
    if options.require_organization_id and not state.organization_id:
        raise OrganizationRequiredError("An organizationId must be set for this request")

    method = (options.method or "get").lower()
    if method not in HTTP_METHODS:
        logger.error("Unsupported HTTP method: %s", method)
        raise ValueError(f"Unsupported HTTP method: {method}")
    if method in BODYLESS_METHODS and options.body is not None:
        raise BodyNotAllowedError(f"HTTP Bodies not allowed for {method} method")
    return method


def build_headers(
    state: SessionState, options: RequestOptions, content_type: Optional[str]
) -> Dict[str, str]:
    """
    构造请求头

    调用方传入的 headers 可以覆盖 Content-Type，但不能覆盖认证、
    organizationId 与 backend id。
    """
    organization_id = None if options.exclude_organization_id else state.organization_id
    return clean_headers(
        {
            "Host": FAVRO_HOST,
            "Content-Type": content_type,
            **(options.headers or {}),
            "User-Agent": USER_AGENT,
            ORGANIZATION_HEADER: organization_id,
            BACKEND_ID_HEADER: options.backend_id or state.backend_id,
        }
    )


def _transport_retrying(retries: int) -> AsyncRetrying:
    """获取传输层重试配置（retries=0 表示不重试）"""
    return AsyncRetrying(
        stop=stop_after_attempt(max(retries, 0) + 1),
        wait=wait_exponential(multiplier=1, min=RETRY_MIN_WAIT, max=RETRY_MAX_WAIT),
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


async def dispatch(
    transport: httpx.AsyncClient,
    state: SessionState,
    path: str,
    options: Optional[RequestOptions] = None,
    *,
    base_url: str = FAVRO_API_BASE_URL,
    client: Optional["FavroClient"] = None,
    retries: int = 0,
) -> DispatchResult:
    """
    发出一次 Favro API 请求

    Args:
        transport: httpx 异步客户端
        state: 当前会话状态
        path: 相对 base_url 的路径，或完整 URL
        options: 请求参数
        base_url: API 基础地址
        client: 响应翻页时使用的 FavroClient
        retries: 传输层错误的重试次数

    Returns:
        DispatchResult(新的会话状态, 响应)。HTTP 状态码不在此处检查，
        见 DispatchResult.raise_for_status()。

    Raises:
        BravoPreconditionError: 前置条件不满足（未发出请求）
        httpx.TransportError: 网络错误
    """
    options = options or RequestOptions()
    method = check_preconditions(state, options)

    url = create_favro_api_url(path, options.query, base_url=base_url)
    content_type, content = compute_body(options.body)
    headers = build_headers(state, options, content_type)

    logger.debug(
        "Favro request %s %s (backend=%s)",
        method.upper(),
        url,
        headers.get(BACKEND_ID_HEADER),
    )
    raw_response = await _transport_retrying(retries)(
        transport.request,
        method.upper(),
        url,
        headers=headers,
        content=content,
        auth=FavroAuth(state.user_email, state.token),
    )

    response = FavroResponse(raw_response, request_options=options, client=client)
    new_state = state.after_response(response)
    logger.debug(
        "Favro response %d from %s (remaining=%s, backend=%s)",
        response.status_code,
        url,
        new_state.requests_remaining,
        new_state.backend_id,
    )

    if new_state.requests_remaining == 0:
        logger.warning(
            "Favro API rate limit reached! status=%d, remaining=%s, made=%d, limit=%s, resets_at=%s",
            response.status_code,
            new_state.requests_remaining,
            new_state.requests_made,
            new_state.limit,
            new_state.limit_resets_at,
        )

    return DispatchResult(state=new_state, response=response)
