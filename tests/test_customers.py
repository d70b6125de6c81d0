"""Customer profile routes against an in-memory document store."""

import pytest
from httpx import ASGITransport, AsyncClient

from gateway.dependencies import get_customer_store, get_notifier
from gateway.main import app
from gateway.notifier import BestEffortNotifier


class FakeCustomerStore:
    def __init__(self):
        self.docs = {}
        self.queries = []

    async def get(self, customer_id):
        doc = self.docs.get(customer_id)
        return dict(doc) if doc is not None else None

    async def create(self, customer_id, data):
        self.docs[customer_id] = dict(data)

    async def update(self, customer_id, data):
        self.docs[customer_id].update(data)

    async def delete(self, customer_id):
        del self.docs[customer_id]

    async def list(self, params):
        self.queries.append(params)
        return list(self.docs.items())[: params.limit]


class BrokenMailer:
    def __init__(self):
        self.calls = 0

    async def send_profile_submitted(self, profile):
        self.calls += 1
        raise ConnectionError("smtp down")


@pytest.fixture
def store():
    return FakeCustomerStore()


@pytest.fixture
def mailer():
    return BrokenMailer()


@pytest.fixture
def client(store, mailer):
    app.dependency_overrides[get_customer_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: BestEffortNotifier(mailer)
    yield AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    app.dependency_overrides.clear()


PROFILE = {
    "customerId": 7001,
    "customer_name": "Dana Reyes",
    "customer_email": "dana@example.com",
    "business_name": "Reyes Outfitters",
    "customer_role": "Buyer",
    "customer_phone": "(650) 253-0000",
    "country": "United States",
    "domain_name": "https://reyes.example.com",
    "number_of_employees": "11-50",
    "retailer_type": "Boutique",
}


@pytest.mark.asyncio
async def test_create_then_update_profile(client, store, mailer, caplog):
    created = await client.post("/customers", json=PROFILE)

    assert created.status_code == 200
    body = created.json()
    assert body["message"] == "Customer profile created successfully"
    assert body["data"]["contact"] == "+1 650-253-0000"
    assert body["data"]["retailerType"] == "Boutique"
    assert store.docs["7001"]["isVerified"] is False
    created_at = store.docs["7001"]["createdAt"]

    updated = await client.post("/customers", json={**PROFILE, "business_name": "Reyes & Co"})

    assert updated.json()["message"] == "Customer profile updated successfully"
    assert "createdAt" not in updated.json()["data"]
    assert store.docs["7001"]["createdAt"] == created_at
    assert store.docs["7001"]["businessName"] == "Reyes & Co"
    # The notification failed both times without affecting the responses.
    assert mailer.calls == 2
    assert "Failed to send admin notification" in caplog.text


@pytest.mark.asyncio
async def test_supplier_fields_are_kept_for_suppliers_only(client, store):
    await client.post(
        "/customers",
        json={
            **PROFILE,
            "customer_role": "Supplier/Vendor",
            "supplier_type": "Manufacturer",
            "business_registration": "REG-1",
        },
    )

    doc = store.docs["7001"]
    assert doc["supplierType"] == "Manufacturer"
    assert doc["businessRegistration"] == "REG-1"
    assert "retailerType" not in doc


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override, code",
    [
        ({"customer_name": ""}, "missing_fields"),
        ({"customer_role": "Admin"}, "invalid_role"),
        ({"domain_name": "reyes.example.com"}, "invalid_url"),
        ({"customer_phone": "12"}, "invalid_phone"),
        ({"number_of_employees": "5000"}, "invalid_employee_count"),
    ],
)
async def test_invalid_profiles_are_rejected_before_any_write(client, store, mailer, override, code):
    resp = await client.post("/customers", json={**PROFILE, **override})

    assert resp.status_code == 400
    assert resp.json()["code"] == code
    assert store.docs == {}
    assert mailer.calls == 0


@pytest.mark.asyncio
async def test_get_and_delete_customer(client, store):
    await client.post("/customers", json=PROFILE)

    got = await client.get("/customers/customer/7001")
    assert got.json()["data"]["id"] == "7001"

    deleted = await client.delete("/customers/customer/7001")
    assert deleted.json()["message"] == "Customer 7001 deleted successfully"

    missing = await client.get("/customers/customer/7001")
    assert missing.status_code == 404
    assert missing.json()["details"] == "No customer found with ID: 7001"


@pytest.mark.asyncio
async def test_verify_requires_boolean(client, store):
    await client.post("/customers", json=PROFILE)

    bad = await client.post("/customers/verify", json={"customerId": "7001", "isVerified": "yes"})
    assert bad.status_code == 400

    ok = await client.post("/customers/verify", json={"customerId": "7001", "isVerified": True})
    assert ok.json()["data"]["isVerified"] is True
    assert store.docs["7001"]["verifiedAt"] is not None

    unknown = await client.post("/customers/verify", json={"customerId": "1", "isVerified": False})
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_list_customers_caps_page_size_and_parses_filters(client, store):
    await client.post("/customers", json=PROFILE)

    resp = await client.get(
        "/customers/customers",
        params={"limit": 500, "isVerified": "false", "role": "Buyer", "sortOrder": "asc"},
    )

    params = store.queries[0]
    assert params.limit == 100
    assert params.is_verified is False
    assert params.role == "Buyer"
    assert params.sort_order == "asc"
    data = resp.json()["data"]
    assert data["customers"][0]["businessName"] == "Reyes Outfitters"
    assert data["customers"][0]["phone"] == "+1 650-253-0000"
    assert data["pageInfo"] == {"hasNextPage": False, "lastDocId": "7001", "totalCount": 1}
