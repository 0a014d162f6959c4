import pytest

from ecomhub.services.addresses import format_address

ADDRESS = {
    "name": "Asha Rao",
    "phone": "9876543210",
    "address_line_1": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}


async def create(client, customer, **overrides):
    response = await client.post("/api/addresses/", json={**ADDRESS, **overrides}, headers=customer["headers"])
    assert response.status_code == 201
    return response.json()["data"]["address_id"]


@pytest.mark.asyncio
async def test_first_address_becomes_default(client, customer):
    first = await create(client, customer)
    await create(client, customer, city="Mysuru")

    response = await client.get("/api/addresses/default", headers=customer["headers"])
    assert response.json()["data"]["id"] == first

    response = await client.get("/api/addresses/", headers=customer["headers"])
    addresses = response.json()["data"]
    assert addresses[0]["id"] == first
    assert [a["is_default"] for a in addresses] == [True, False]


@pytest.mark.asyncio
async def test_default_is_none_without_addresses(client, customer):
    response = await client.get("/api/addresses/default", headers=customer["headers"])
    assert response.status_code == 200
    assert response.json()["data"] is None


@pytest.mark.asyncio
async def test_only_one_default(client, db, customer):
    await create(client, customer)
    second = await create(client, customer, is_default=True)

    assert await db.customer_addresses.count_documents({"customer_id": customer["id"], "is_default": True}) == 1
    response = await client.get("/api/addresses/default", headers=customer["headers"])
    assert response.json()["data"]["id"] == second


@pytest.mark.asyncio
async def test_set_default(client, db, customer):
    await create(client, customer)
    second = await create(client, customer)

    response = await client.put(f"/api/addresses/{second}/set-default", headers=customer["headers"])
    assert response.status_code == 200
    defaults = await db.customer_addresses.find({"customer_id": customer["id"], "is_default": True}).to_list(length=None)
    assert [str(a["_id"]) for a in defaults] == [second]


@pytest.mark.asyncio
async def test_validation(client, customer):
    response = await client.post(
        "/api/addresses/", json={**ADDRESS, "pincode": "5600", "phone": "+91987654"}, headers=customer["headers"],
    )
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert "pincode: Invalid pincode format" in errors
    assert "phone: Invalid phone number format" in errors

    response = await client.post("/api/addresses/", json={"name": "x"}, headers=customer["headers"])
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_get_and_delete(client, customer, other_customer):
    address_id = await create(client, customer)

    response = await client.put(
        f"/api/addresses/{address_id}", json={**ADDRESS, "city": "Hubballi"}, headers=customer["headers"],
    )
    assert response.status_code == 200

    response = await client.get(f"/api/addresses/{address_id}", headers=customer["headers"])
    assert response.json()["data"]["city"] == "Hubballi"
    assert response.json()["data"]["is_default"] is True

    response = await client.get(f"/api/addresses/{address_id}", headers=other_customer["headers"])
    assert response.status_code == 404

    response = await client.delete(f"/api/addresses/{address_id}", headers=customer["headers"])
    assert response.status_code == 200
    response = await client.get(f"/api/addresses/{address_id}", headers=customer["headers"])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_deleting_default_promotes_another(client, customer):
    first = await create(client, customer)
    second = await create(client, customer)

    await client.delete(f"/api/addresses/{first}", headers=customer["headers"])
    response = await client.get("/api/addresses/default", headers=customer["headers"])
    assert response.json()["data"]["id"] == second


def test_format_address():
    text = format_address({**ADDRESS, "address_line_2": None, "landmark": "Near Metro"})
    assert text == (
        "Asha Rao\n12 MG Road\nLandmark: Near Metro\nBengaluru, Karnataka - 560001\nPhone: 9876543210"
    )
