import pytest
from bson import ObjectId


async def place(client, customer, product_id, quantity=1):
    response = await client.post("/api/orders/place-direct", json={
        "product_id": str(product_id), "quantity": quantity, "shipping_address": "12 MG Road",
    }, headers=customer["headers"])
    return response.json()["data"]["order_id"]


@pytest.mark.asyncio
async def test_list_customers_with_order_totals(client, admin, customer, other_customer, catalog):
    await place(client, customer, catalog["product_id"], 2)
    cancelled = await place(client, customer, catalog["product_id"], 1)
    await client.put(f"/api/orders/{cancelled}/cancel", json={}, headers=customer["headers"])

    response = await client.get("/api/admin/customers/", headers=admin["headers"])
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True

    by_email = {c["email"]: c for c in body["customers"]}
    assert by_email["asha@example.com"]["total_orders"] == 2
    assert by_email["asha@example.com"]["total_spent"] == 1000.0
    assert by_email["asha@example.com"]["last_order_date"] is not None
    assert by_email["ravi@example.com"]["total_orders"] == 0
    assert by_email["ravi@example.com"]["last_order_date"] is None
    assert all("password" not in c for c in body["customers"])


@pytest.mark.asyncio
async def test_get_customer(client, db, admin, customer, catalog):
    await db.customer_addresses.insert_one({"customer_id": customer["id"], "city": "Bengaluru", "is_default": True})
    order_id = await place(client, customer, catalog["product_id"])

    response = await client.get(f"/api/admin/customers/{customer['id']}", headers=admin["headers"])
    view = response.json()["customer"]
    assert view["email"] == "asha@example.com"
    assert "password" not in view
    assert [a["city"] for a in view["addresses"]] == ["Bengaluru"]
    assert [o["id"] for o in view["recent_orders"]] == [order_id]
    assert view["total_orders"] == 1

    response = await client.get(f"/api/admin/customers/{ObjectId()}", headers=admin["headers"])
    assert response.status_code == 404
    assert response.json()["message"] == "Customer not found"


@pytest.mark.asyncio
async def test_customers_require_staff(client, customer):
    response = await client.get("/api/admin/customers/", headers=customer["headers"])
    assert response.status_code == 401
