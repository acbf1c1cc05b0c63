"""
FavroResponse - 单个 HTTP 响应的包装

职责:
- 懒解析 JSON 响应体（只解析一次并缓存）
- 读取限流头 / backend 路由头
- 将响应体分类为: 空 / 单个实体 / 实体数组 / 分页信封
- 基于分页游标请求下一页（固定同一个 backend）
"""

import json
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, List, Optional, Tuple, Union

import httpx
from pydantic import ValidationError

from bravo.core.errors import BravoError, BravoResponseParseError
from bravo.schemas.favro import PageEnvelope

if TYPE_CHECKING:
    from bravo.core.client import FavroClient
    from bravo.core.request import RequestOptions

logger = logging.getLogger(__name__)

RATE_LIMIT_REMAINING_HEADER = "X-RateLimit-Remaining"
RATE_LIMIT_LIMIT_HEADER = "X-RateLimit-Limit"
RATE_LIMIT_RESET_HEADER = "X-RateLimit-Reset"
BACKEND_ID_HEADER = "X-Favro-Backend-Identifier"

_UNSET: Any = object()


@dataclass(frozen=True)
class PageCursor:
    """Continuation facts of one paged envelope."""

    request_id: Optional[str]
    page: int
    pages: int

    @property
    def is_last(self) -> bool:
        return self.page >= self.pages - 1

    @property
    def next_page(self) -> int:
        return self.page + 1


@dataclass(frozen=True)
class EmptyBody:
    """No body, or a non-JSON body."""


@dataclass(frozen=True)
class SingletonBody:
    record: Any


@dataclass(frozen=True)
class ArrayBody:
    records: Tuple[Any, ...]


@dataclass(frozen=True)
class PagedBody:
    cursor: PageCursor
    limit: int
    records: Tuple[Any, ...]


ResponseBody = Union[EmptyBody, SingletonBody, ArrayBody, PagedBody]


def classify_body(parsed: Any) -> ResponseBody:
    """
    根据解析后的 JSON 判断响应体类型

    含有 `page` 或 `entities` 字段的对象视为分页信封，其余对象视为单个实体，
    列表视为实体数组。

    Raises:
        BravoResponseParseError: 分页信封字段类型不正确
    """
    if parsed is None:
        return EmptyBody()
    if isinstance(parsed, list):
        return ArrayBody(tuple(parsed))
    if isinstance(parsed, dict) and ("page" in parsed or "entities" in parsed):
        try:
            envelope = PageEnvelope.model_validate(parsed)
        except ValidationError as e:
            raise BravoResponseParseError(
                f"Malformed paged response: {e}", content=json.dumps(parsed)
            ) from e
        cursor = PageCursor(
            request_id=envelope.request_id,
            page=envelope.page,
            pages=envelope.pages,
        )
        return PagedBody(
            cursor=cursor, limit=envelope.limit, records=tuple(envelope.entities)
        )
    return SingletonBody(parsed)


def _parse_int_header(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            return None


def _parse_reset_header(value: Optional[str]) -> Optional[datetime]:
    """X-RateLimit-Reset 可能是 ISO-8601 时间或 epoch 秒"""
    if not value:
        return None
    value = value.strip()
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        pass
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparsable %s header: %r", RATE_LIMIT_RESET_HEADER, value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class FavroResponse:
    """
    Favro API 响应包装

    Args:
        response: httpx 原始响应（请求时已读取 body）
        request_options: 产生该响应的请求参数，翻页时复用
        client: 用于发出后续翻页请求的 FavroClient
    """

    def __init__(
        self,
        response: httpx.Response,
        request_options: Optional["RequestOptions"] = None,
        client: Optional["FavroClient"] = None,
    ):
        self._response = response
        self._request_options = request_options
        self._client = client
        self._parsed_body: Any = _UNSET
        self._body: Optional[ResponseBody] = None

    def __repr__(self) -> str:
        return f"<FavroResponse [{self.status_code}] {self.url}>"

    @property
    def response(self) -> httpx.Response:
        return self._response

    @property
    def request_options(self) -> "RequestOptions":
        if self._request_options is None:
            from bravo.core.request import RequestOptions

            self._request_options = RequestOptions()
        return self._request_options

    @property
    def url(self) -> str:
        return str(self._response.url)

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def succeeded(self) -> bool:
        return 200 <= self.status_code <= 399

    @property
    def failed(self) -> bool:
        return not self.succeeded

    @property
    def text(self) -> str:
        return self._response.text

    @property
    def requests_remaining(self) -> Optional[int]:
        """剩余请求数；响应头缺失或无法解析时为 None（不限）"""
        return _parse_int_header(self.headers.get(RATE_LIMIT_REMAINING_HEADER))

    @property
    def limit(self) -> Optional[int]:
        return _parse_int_header(self.headers.get(RATE_LIMIT_LIMIT_HEADER))

    @property
    def reported_limit_resets_at(self) -> Optional[datetime]:
        """The reset time exactly as reported by the server, or None."""
        return _parse_reset_header(self.headers.get(RATE_LIMIT_RESET_HEADER))

    @property
    def limit_resets_at(self) -> datetime:
        """限流重置时间；响应头缺失或无法解析时为当前时间"""
        return self.reported_limit_resets_at or datetime.now(timezone.utc)

    @property
    def backend_id(self) -> Optional[str]:
        return self.headers.get(BACKEND_ID_HEADER) or None

    async def get_parsed_body(self) -> Any:
        """
        解析 JSON 响应体（带缓存）

        Returns:
            解析后的 JSON；Content-Type 不是 JSON 或响应体为空时返回 None

        Raises:
            BravoResponseParseError: Content-Type 声明为 JSON 但内容无法解析
        """
        if self._parsed_body is not _UNSET:
            return self._parsed_body

        content_type = self.headers.get("Content-Type", "")
        if not content_type.startswith("application/json"):
            self._parsed_body = None
            return self._parsed_body

        raw = await self._response.aread()
        text = raw.decode("utf-8", errors="replace")
        if not text.strip():
            self._parsed_body = None
            return self._parsed_body
        try:
            self._parsed_body = json.loads(text)
        except ValueError as e:
            raise BravoResponseParseError(
                f"Could not JSON-parse: {text}", content=text
            ) from e
        return self._parsed_body

    async def get_body(self) -> ResponseBody:
        if self._body is None:
            self._body = classify_body(await self.get_parsed_body())
        return self._body

    async def get_cursor(self) -> Optional[PageCursor]:
        body = await self.get_body()
        if isinstance(body, PagedBody):
            return body.cursor
        return None

    async def is_last_page(self) -> bool:
        cursor = await self.get_cursor()
        return cursor is None or cursor.is_last

    async def get_next_page_response(self) -> Optional["FavroResponse"]:
        """
        请求下一页

        复用当前 URL，覆盖其中的 requestId / page 查询参数，并固定使用当前
        响应的 backend id，确保同一个查询的所有分页都由同一个后端返回。

        Returns:
            下一页的 FavroResponse；已是最后一页时返回 None
        """
        cursor = await self.get_cursor()
        if cursor is None or cursor.is_last:
            return None
        if self._client is None:
            raise BravoError("Cannot fetch the next page without a client")

        url = self._response.url
        if cursor.request_id is not None:
            url = url.copy_set_param("requestId", cursor.request_id)
        else:
            url = url.copy_remove_param("requestId")
        url = url.copy_set_param("page", str(cursor.next_page))

        base = self.request_options
        options = replace(
            base,
            method="get",
            query=None,
            body=None,
            backend_id=self.backend_id or base.backend_id,
        )
        logger.debug(
            "Fetching page %d/%d (requestId=%s, backend=%s)",
            cursor.next_page + 1,
            cursor.pages,
            cursor.request_id,
            options.backend_id,
        )
        return await self._client.request(str(url), options)

    async def get_entities_data(self) -> List[Any]:
        """将响应体统一为记录列表"""
        body = await self.get_body()
        if isinstance(body, EmptyBody):
            return []
        if isinstance(body, SingletonBody):
            return [body.record]
        return list(body.records)
