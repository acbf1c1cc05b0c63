import json

import pytest
from httpx import Response

from bravo.core.config import settings
from bravo.core.errors import OrganizationRequiredError
from bravo.providers.favro.api import (
    CollectionAPI,
    ColumnAPI,
    GroupAPI,
    OrganizationAPI,
    TagAPI,
    UserAPI,
    WebhookAPI,
    WidgetAPI,
)
from bravo.providers.favro.bravo_client import BravoClient
from tests.unit.favro_fixtures import (
    BASE_URL,
    TOKEN,
    USER_EMAIL,
    collection_record,
    paged_body,
)


def _widget(widget_id="w1", name="Board"):
    return {
        "widgetCommonId": widget_id,
        "name": name,
        "organizationId": "org-1",
        "collectionIds": ["col-1"],
        "type": "board",
        "color": "cyan",
    }


# =============================================================================
# Organizations / Users
# =============================================================================
@pytest.mark.asyncio
async def test_list_organizations_without_organization_header(respx_mock, bravo_client):
    route = respx_mock.get(f"{BASE_URL}/organizations").mock(
        return_value=Response(
            200, json=paged_body([{"organizationId": "org-1", "name": "Bscotch"}])
        )
    )

    organizations = await (await OrganizationAPI(bravo_client).list()).get_all_entities()

    assert organizations[0].name == "Bscotch"
    assert "organizationId" not in route.calls.last.request.headers


@pytest.fixture
def client_without_organization(monkeypatch):
    monkeypatch.setattr(settings, "FAVRO_ORGANIZATION_ID", None)
    return BravoClient(TOKEN, USER_EMAIL, base_url=BASE_URL)


@pytest.mark.asyncio
async def test_organizations_do_not_require_organization_id(respx_mock, client_without_organization):
    client = client_without_organization
    respx_mock.get(f"{BASE_URL}/organizations").mock(return_value=Response(200, json=[]))

    pager = await OrganizationAPI(client).list()

    assert await pager.get_all_entities() == []


@pytest.mark.asyncio
async def test_resource_requests_require_organization_id(respx_mock, client_without_organization):
    client = client_without_organization

    with pytest.raises(OrganizationRequiredError):
        await UserAPI(client).list()
    assert not respx_mock.calls


@pytest.mark.asyncio
async def test_get_organization(respx_mock, bravo_client):
    respx_mock.get(f"{BASE_URL}/organizations/org-1").mock(
        return_value=Response(200, json={"organizationId": "org-1", "name": "Bscotch"})
    )
    respx_mock.get(f"{BASE_URL}/organizations/nope").mock(
        return_value=Response(404, json={"message": "Not found"})
    )

    api = OrganizationAPI(bravo_client)

    assert (await api.get("org-1")).organization_id == "org-1"
    assert await api.get("nope") is None


# =============================================================================
# Collections
# =============================================================================
@pytest.mark.asyncio
async def test_list_collections_archived_filter(respx_mock, bravo_client):
    route = respx_mock.get(f"{BASE_URL}/collections").mock(
        return_value=Response(200, json=paged_body([collection_record(1)]))
    )

    pager = await CollectionAPI(bravo_client).list(archived=True)
    collections = await pager.get_all_entities()

    assert collections[0].collection_id == "col-1"
    assert route.calls.last.request.url.params["archived"] == "true"


@pytest.mark.asyncio
async def test_create_collection_defaults_to_organization_sharing(respx_mock, bravo_client):
    route = respx_mock.post(f"{BASE_URL}/collections").mock(
        return_value=Response(201, json=collection_record(5))
    )

    collection = await CollectionAPI(bravo_client).create("Collection 5")

    assert collection.collection_id == "col-5"
    assert json.loads(route.calls.last.request.content) == {
        "name": "Collection 5",
        "publicSharing": "organization",
    }


@pytest.mark.asyncio
async def test_delete_collection(respx_mock, bravo_client):
    route = respx_mock.delete(f"{BASE_URL}/collections/col-1").mock(return_value=Response(200))

    await CollectionAPI(bravo_client).delete("col-1")

    assert route.called


# =============================================================================
# Widgets / Columns
# =============================================================================
@pytest.mark.asyncio
async def test_list_widgets_by_collection(respx_mock, bravo_client):
    route = respx_mock.get(f"{BASE_URL}/widgets").mock(
        return_value=Response(200, json=paged_body([_widget()]))
    )

    widgets = await (await WidgetAPI(bravo_client).list("col-1")).get_all_entities()

    assert widgets[0].widget_common_id == "w1"
    assert route.calls.last.request.url.params["collectionId"] == "col-1"


@pytest.mark.asyncio
async def test_list_widgets_without_collection(respx_mock, bravo_client):
    route = respx_mock.get(f"{BASE_URL}/widgets").mock(
        return_value=Response(200, json=paged_body([]))
    )

    await WidgetAPI(bravo_client).list()

    assert "collectionId" not in route.calls.last.request.url.params


@pytest.mark.asyncio
async def test_create_widget_defaults(respx_mock, bravo_client):
    route = respx_mock.post(f"{BASE_URL}/widgets").mock(
        return_value=Response(201, json=_widget("w2", "Backlog"))
    )

    widget = await WidgetAPI(bravo_client).create("col-1", "Backlog")

    assert widget.name == "Backlog"
    assert json.loads(route.calls.last.request.content) == {
        "collectionId": "col-1",
        "name": "Backlog",
        "type": "board",
        "color": "cyan",
    }


@pytest.mark.asyncio
async def test_create_column(respx_mock, bravo_client):
    route = respx_mock.post(f"{BASE_URL}/columns").mock(
        return_value=Response(
            201, json={"columnId": "c9", "widgetCommonId": "w1", "name": "Done", "position": 2}
        )
    )

    column = await ColumnAPI(bravo_client).create("w1", "Done", position=2)

    assert column.column_id == "c9"
    assert column.position == 2
    assert json.loads(route.calls.last.request.content) == {
        "widgetCommonId": "w1",
        "name": "Done",
        "position": 2,
    }


# =============================================================================
# Groups / Tags / Webhooks
# =============================================================================
@pytest.mark.asyncio
async def test_group_lifecycle(respx_mock, bravo_client):
    group = {"groupId": "g1", "name": "Devs", "organizationId": "org-1", "memberCount": 1}
    create_route = respx_mock.post(f"{BASE_URL}/groups").mock(
        return_value=Response(201, json=group)
    )
    update_route = respx_mock.put(f"{BASE_URL}/groups/g1").mock(
        return_value=Response(200, json={**group, "name": "Developers"})
    )
    delete_route = respx_mock.delete(f"{BASE_URL}/groups/g1").mock(return_value=Response(200))
    api = GroupAPI(bravo_client)

    created = await api.create("Devs", [{"userId": "u1", "role": "member"}])
    updated = await api.update("g1", {"name": "Developers"})
    await api.delete("g1")

    assert created.member_count == 1
    assert updated.name == "Developers"
    assert json.loads(create_route.calls.last.request.content)["members"] == [
        {"userId": "u1", "role": "member"}
    ]
    assert update_route.called
    assert delete_route.called


@pytest.mark.asyncio
async def test_update_tag(respx_mock, bravo_client):
    route = respx_mock.put(f"{BASE_URL}/tags/t1").mock(
        return_value=Response(200, json={"tagId": "t1", "name": "bug", "color": "red"})
    )

    tag = await TagAPI(bravo_client).update("t1", color="red")

    assert tag.color == "red"
    assert json.loads(route.calls.last.request.content) == {"color": "red"}


@pytest.mark.asyncio
async def test_create_webhook_generates_secret(respx_mock, bravo_client):
    def echo(request):
        body = json.loads(request.content)
        return Response(201, json={"webhookId": "h1", **body})

    route = respx_mock.post(f"{BASE_URL}/webhooks").mock(side_effect=echo)

    webhook = await WebhookAPI(bravo_client).create(
        "w1", "hook", "https://example.com/hook", notifications=["Card created"]
    )

    body = json.loads(route.calls.last.request.content)
    assert len(body["secret"]) == 24
    assert body["options"] == {"columnIds": [], "notifications": ["Card created"]}
    assert webhook.secret == body["secret"]
    assert webhook.notifications == ["Card created"]
