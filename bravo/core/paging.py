"""
PageWalker - 分页游标驱动

状态机:
    EMPTY ──advance──▶ (无页) EXHAUSTED
    HAS_UNHYDRATED_PAGE ──mark_hydrated──▶ HYDRATED | EXHAUSTED(最后一页)
    HYDRATED ──advance──▶ HAS_UNHYDRATED_PAGE | EXHAUSTED

页面严格按 page 递增顺序请求，不并发：下一页的 requestId 只有在当前页
解析之后才能得知。
"""

import enum
import logging
from typing import Optional

from bravo.core.errors import BravoError
from bravo.core.response import FavroResponse

logger = logging.getLogger(__name__)


class PageState(str, enum.Enum):
    EMPTY = "empty"
    HAS_UNHYDRATED_PAGE = "has_unhydrated_page"
    HYDRATED = "hydrated"
    EXHAUSTED = "exhausted"


class PageWalker:
    def __init__(self, first_page: Optional[FavroResponse] = None):
        self._latest_page = first_page
        self._pages_fetched = 1 if first_page is not None else 0
        self._state = (
            PageState.HAS_UNHYDRATED_PAGE if first_page is not None else PageState.EMPTY
        )

    @property
    def state(self) -> PageState:
        return self._state

    @property
    def latest_page(self) -> Optional[FavroResponse]:
        return self._latest_page

    @property
    def pages_fetched(self) -> int:
        return self._pages_fetched

    @property
    def pending_page(self) -> Optional[FavroResponse]:
        """The fetched page still waiting for hydration, if any."""
        if self._state is PageState.HAS_UNHYDRATED_PAGE:
            return self._latest_page
        return None

    async def mark_hydrated(self) -> None:
        """HAS_UNHYDRATED_PAGE → HYDRATED（最后一页时直接进入 EXHAUSTED）"""
        if self._state is not PageState.HAS_UNHYDRATED_PAGE:
            return
        assert self._latest_page is not None
        if await self._latest_page.is_last_page():
            self._state = PageState.EXHAUSTED
            logger.debug("Paging exhausted after %d page(s)", self._pages_fetched)
        else:
            self._state = PageState.HYDRATED

    async def advance(self) -> bool:
        """
        请求下一页

        Returns:
            True 表示取得了新的待 hydration 页面；False 表示没有更多页面

        Raises:
            BravoError: 当前页尚未 hydration
        """
        if self._state is PageState.HAS_UNHYDRATED_PAGE:
            raise BravoError("The latest page must be hydrated before advancing")
        if self._state in (PageState.EMPTY, PageState.EXHAUSTED):
            self._state = PageState.EXHAUSTED
            logger.debug("bravo:paging:next cancelled (no further pages)")
            return False

        assert self._latest_page is not None
        next_page = await self._latest_page.get_next_page_response()
        if next_page is None:
            self._state = PageState.EXHAUSTED
            return False

        self._latest_page = next_page
        self._pages_fetched += 1
        self._state = PageState.HAS_UNHYDRATED_PAGE
        return True
