"""
EntityPager 测试

测试覆盖:
1. 懒 hydration 与累积缓存
2. 按需翻页（find 在匹配后停止请求）
3. 同步 / 异步匹配函数
4. find_by_id 索引
"""

import pytest

from bravo.core.errors import BravoResponseParseError
from bravo.core.hydrator import EntityPager
from bravo.providers.favro.entities import BravoCollection
from tests.unit.favro_fixtures import (
    RecordingHandler,
    collection_record,
    favro_response,
    make_client,
    paged_body,
)


class Record:
    """Minimal entity used to observe hydration."""

    hydrated = 0

    def __init__(self, client, data):
        self.client = client
        self.id = data["id"]

    @classmethod
    def hydrate(cls, client, record):
        cls.hydrated += 1
        return cls(client, record)


def _three_pages():
    return RecordingHandler(
        favro_response(200, paged_body([{"id": 0}, {"id": 1}], page=0, pages=3)),
        favro_response(200, paged_body([{"id": 2}, {"id": 3}], page=1, pages=3)),
        favro_response(200, paged_body([{"id": 4}, {"id": 5}], page=2, pages=3)),
    )


async def _pager(handler, entity_class=Record):
    client = make_client(handler)
    response = await client.request("things")
    return EntityPager(client, entity_class, response)


class TestHydration:
    @pytest.mark.asyncio
    async def test_ensure_hydrated_only_once(self):
        pager = await _pager(_three_pages())

        first = await pager.ensure_hydrated()
        again = await pager.ensure_hydrated()

        assert [e.id for e in first] == [0, 1]
        assert again is None

    @pytest.mark.asyncio
    async def test_fetched_entities_do_not_page(self):
        handler = _three_pages()
        pager = await _pager(handler)

        fetched = await pager.get_fetched_entities()

        assert [e.id for e in fetched] == [0, 1]
        assert handler.call_count == 1

    @pytest.mark.asyncio
    async def test_fetch_next_page_returns_only_new_entities(self):
        pager = await _pager(_three_pages())

        second = await pager.fetch_next_page()
        third = await pager.fetch_next_page()
        beyond = await pager.fetch_next_page()

        assert [e.id for e in second] == [2, 3]
        assert [e.id for e in third] == [4, 5]
        assert beyond is None
        assert pager.exhausted

    @pytest.mark.asyncio
    async def test_get_all_entities(self):
        handler = _three_pages()
        pager = await _pager(handler)

        entities = await pager.get_all_entities()

        assert [e.id for e in entities] == [0, 1, 2, 3, 4, 5]
        assert handler.call_count == 3
        assert pager.pages_fetched == 3

        # 已经穷举，不再发请求
        assert len(await pager.get_all_entities()) == 6
        assert handler.call_count == 3

    @pytest.mark.asyncio
    async def test_returned_lists_are_copies(self):
        pager = await _pager(_three_pages())

        snapshot = await pager.get_fetched_entities()
        snapshot.clear()

        assert len(await pager.get_fetched_entities()) == 2

    @pytest.mark.asyncio
    async def test_first_entity(self):
        handler = _three_pages()
        pager = await _pager(handler)

        first = await pager.get_first_entity()

        assert first.id == 0
        assert handler.call_count == 1

    @pytest.mark.asyncio
    async def test_empty_response(self):
        handler = RecordingHandler(favro_response(200, paged_body([], pages=0)))
        pager = await _pager(handler)

        assert await pager.get_first_entity() is None
        assert await pager.get_all_entities() == []

    @pytest.mark.asyncio
    async def test_singleton_response(self):
        handler = RecordingHandler(favro_response(200, {"id": 9}))
        pager = await _pager(handler)

        assert [e.id for e in await pager.get_all_entities()] == [9]

    @pytest.mark.asyncio
    async def test_invalid_record_raises_parse_error(self):
        handler = RecordingHandler(favro_response(200, [{"name": "no id"}]))
        pager = await _pager(handler, BravoCollection)

        with pytest.raises(BravoResponseParseError):
            await pager.get_all_entities()

    @pytest.mark.asyncio
    async def test_hydrates_real_entities(self):
        handler = RecordingHandler(
            favro_response(200, paged_body([collection_record(1), collection_record(2)]))
        )
        pager = await _pager(handler, BravoCollection)

        collections = await pager.get_all_entities()

        assert [c.collection_id for c in collections] == ["col-1", "col-2"]
        assert collections[0].to_json() == collection_record(1)


class TestIteration:
    @pytest.mark.asyncio
    async def test_async_iteration_in_order(self):
        pager = await _pager(_three_pages())

        ids = [entity.id async for entity in pager]

        assert ids == [0, 1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_find_stops_paging_after_match(self):
        handler = _three_pages()
        pager = await _pager(handler)

        found = await pager.find(lambda entity, idx: entity.id == 2)

        assert found.id == 2
        assert handler.call_count == 2

    @pytest.mark.asyncio
    async def test_find_with_async_match(self):
        pager = await _pager(_three_pages())

        async def is_five(entity, idx):
            return entity.id == 5

        assert (await pager.find(is_five)).id == 5
        assert await pager.find_index(is_five) == 5

    @pytest.mark.asyncio
    async def test_find_missing(self):
        pager = await _pager(_three_pages())

        assert await pager.find(lambda entity, idx: False) is None
        assert await pager.find_index(lambda entity, idx: False) == -1

    @pytest.mark.asyncio
    async def test_filter_is_exhaustive(self):
        handler = _three_pages()
        pager = await _pager(handler)

        evens = await pager.filter(lambda entity, idx: entity.id % 2 == 0)

        assert [e.id for e in evens] == [0, 2, 4]
        assert handler.call_count == 3

    @pytest.mark.asyncio
    async def test_find_by_id_uses_index(self):
        handler = _three_pages()
        pager = await _pager(handler)

        found = await pager.find_by_id("id", 3)
        again = await pager.find_by_id("id", 3)
        earlier = await pager.find_by_id("id", 1)

        assert found is again
        assert earlier.id == 1
        assert handler.call_count == 2

    @pytest.mark.asyncio
    async def test_two_pagers_are_independent(self):
        pager_a = await _pager(_three_pages())
        pager_b = await _pager(_three_pages())

        await pager_a.get_all_entities()

        assert len(await pager_b.get_fetched_entities()) == 2
