"""Customer metafield upsert through the GraphQL metafieldsSet mutation."""

import json

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from conftest import make_shopify
from gateway.dependencies import get_shopify
from gateway.main import app


class GraphQLFake:
    def __init__(self, response: dict, status: int = 200):
        self.response = response
        self.status = status
        self.variables = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.variables = json.loads(request.content)["variables"]
        return httpx.Response(self.status, json=self.response)


def client_for(fake):
    app.dependency_overrides[get_shopify] = lambda: make_shopify(fake)
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture(autouse=True)
def clear_overrides():
    yield
    app.dependency_overrides.clear()


BODY = {"customerId": "123", "customer_name": "Dana", "customer_role": "Buyer", "customer_phone": 6502530000}


@pytest.mark.asyncio
async def test_metafields_are_set_for_customer_gid():
    fake = GraphQLFake({"data": {"metafieldsSet": {"metafields": [{"key": "name"}], "userErrors": []}}})

    resp = await client_for(fake).post("/update-customer-metafields", json=BODY)

    assert resp.status_code == 200
    assert resp.json()["data"] == [{"key": "name"}]
    sent = {mf["key"]: mf for mf in fake.variables["metafields"]}
    assert set(sent) == {"name", "business_name", "role", "phone"}
    assert all(mf["ownerId"] == "gid://shopify/Customer/123" for mf in sent.values())
    assert sent["phone"] == {
        "ownerId": "gid://shopify/Customer/123",
        "namespace": "custom",
        "key": "phone",
        "type": "number_integer",
        "value": "6502530000",
    }
    assert sent["business_name"]["value"] == ""


@pytest.mark.asyncio
async def test_user_errors_are_reported_even_without_graphql_errors():
    user_errors = [{"field": ["metafields", "0", "value"], "message": "Value is invalid", "code": "INVALID_VALUE"}]
    fake = GraphQLFake({"data": {"metafieldsSet": {"metafields": [], "userErrors": user_errors}}})

    resp = await client_for(fake).post("/update-customer-metafields", json=BODY)

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Metafield validation errors", "details": user_errors}


@pytest.mark.asyncio
async def test_graphql_errors_are_reported():
    fake = GraphQLFake({"errors": [{"message": "Access denied"}]})

    resp = await client_for(fake).post("/update-customer-metafields", json=BODY)

    assert resp.status_code == 400
    assert resp.json()["error"] == "GraphQL errors occurred"


@pytest.mark.asyncio
async def test_transport_failure_is_a_server_error():
    fake = GraphQLFake({"errors": "Internal"}, status=503)

    resp = await client_for(fake).post("/update-customer-metafields", json=BODY)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to update metafields"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, error",
    [
        ({"customerId": "123", "customer_name": "Dana"}, "Missing required fields"),
        ({**BODY, "customerId": "gid://shopify/Customer/123"}, "Invalid customerId"),
    ],
)
async def test_invalid_input_never_reaches_shopify(body, error):
    fake = GraphQLFake({})

    resp = await client_for(fake).post("/update-customer-metafields", json=body)

    assert resp.status_code == 400
    assert resp.json()["error"] == error
    assert fake.variables is None
