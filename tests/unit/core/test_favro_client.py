"""
FavroClient 单元测试
"""

import httpx
import pytest

from bravo.core.client import FavroClient
from bravo.core.config import settings
from bravo.core.errors import (
    BravoConfigError,
    BravoError,
    BravoRateLimitError,
    BudgetExhaustedError,
)
from bravo.core.request import RequestOptions
from tests.unit.favro_fixtures import (
    BASE_URL,
    TOKEN,
    USER_EMAIL,
    RecordingHandler,
    favro_response,
    make_client,
)


@pytest.fixture
def no_env_credentials(monkeypatch):
    monkeypatch.setattr(settings, "FAVRO_TOKEN", None)
    monkeypatch.setattr(settings, "FAVRO_USER_EMAIL", None)
    monkeypatch.setattr(settings, "FAVRO_ORGANIZATION_ID", None)


class TestConstruction:
    def test_missing_token(self, no_env_credentials):
        with pytest.raises(BravoConfigError):
            FavroClient(user_email=USER_EMAIL)

    def test_missing_email(self, no_env_credentials):
        with pytest.raises(BravoConfigError):
            FavroClient(token=TOKEN)

    def test_credentials_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "FAVRO_TOKEN", "env-token")
        monkeypatch.setattr(settings, "FAVRO_USER_EMAIL", "env@example.com")
        monkeypatch.setattr(settings, "FAVRO_ORGANIZATION_ID", "env-org")

        client = FavroClient()

        assert client.user_email == "env@example.com"
        assert client.organization_id == "env-org"
        assert client.state.token == "env-token"

    def test_defaults(self, no_env_credentials):
        client = make_client(RecordingHandler(), organization_id=None)

        assert client.organization_id is None
        assert client.base_url == BASE_URL
        assert client.transport_retries == settings.BRAVO_TRANSPORT_RETRIES


class TestOrganization:
    def test_set_once(self, no_env_credentials):
        client = make_client(RecordingHandler(), organization_id=None)

        client.organization_id = "org-9"
        client.organization_id = "org-9"

        assert client.organization_id == "org-9"

    def test_cannot_change(self):
        client = make_client(RecordingHandler())

        with pytest.raises(BravoError):
            client.organization_id = "another-org"


class TestRequest:
    @pytest.mark.asyncio
    async def test_keyword_options(self):
        handler = RecordingHandler(favro_response(201, {"collectionId": "c1"}))
        client = make_client(handler)

        response = await client.request("collections", method="post", body={"name": "x"})

        assert response.status_code == 201
        assert handler.requests[0].method == "POST"

    @pytest.mark.asyncio
    async def test_options_and_keywords_conflict(self):
        client = make_client(RecordingHandler())

        with pytest.raises(TypeError):
            await client.request("collections", RequestOptions(), method="post")

    @pytest.mark.asyncio
    async def test_state_carried_between_requests(self):
        handler = RecordingHandler(
            favro_response(200, [], remaining=40, limit=50, backend_id="shard-7"),
            favro_response(200, [], remaining=39),
        )
        client = make_client(handler)

        await client.request("collections")
        await client.request("collections")

        assert handler.requests[1].headers["X-Favro-Backend-Identifier"] == "shard-7"
        assert client.request_stats["total"] == 2
        assert client.request_stats["remaining"] == 39
        assert client.request_stats["limit"] == 50

    @pytest.mark.asyncio
    async def test_rate_limited_then_refused_locally(self):
        handler = RecordingHandler(
            favro_response(429, {"message": "Too many requests"}, reset="2099-01-01T00:00:00Z"),
        )
        client = make_client(handler)

        with pytest.raises(BravoRateLimitError) as exc_info:
            await client.request("collections")
        assert exc_info.value.limit_resets_at is not None

        with pytest.raises(BudgetExhaustedError):
            await client.request("collections")

        assert handler.call_count == 1
        assert client.request_stats["remaining"] == 0

    @pytest.mark.asyncio
    async def test_reset_budget_allows_next_request(self):
        handler = RecordingHandler(
            favro_response(200, [], remaining=0),
            favro_response(200, [], remaining=50),
        )
        client = make_client(handler)

        await client.request("collections")
        with pytest.raises(BudgetExhaustedError):
            await client.request("collections")

        client.reset_budget()
        await client.request("collections")

        assert handler.call_count == 2
        assert client.request_stats["remaining"] == 50

    @pytest.mark.asyncio
    async def test_owned_http_client_follows_redirects(self):
        client = FavroClient(TOKEN, USER_EMAIL, base_url=BASE_URL)

        assert client._http.follow_redirects is True
        await client.close()

    @pytest.mark.asyncio
    async def test_failed_request_still_counts(self):
        handler = RecordingHandler(favro_response(500, {"message": "boom"}))
        client = make_client(handler)

        with pytest.raises(BravoError):
            await client.request("collections")

        assert client.request_stats["total"] == 1


class TestClose:
    @pytest.mark.asyncio
    async def test_external_http_client_left_open(self):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(RecordingHandler()))
        client = FavroClient(TOKEN, USER_EMAIL, base_url=BASE_URL, http_client=http_client)

        async with client:
            pass

        assert not http_client.is_closed
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_http_client_closed(self):
        client = FavroClient(TOKEN, USER_EMAIL)

        await client.close()

        assert client._http.is_closed
