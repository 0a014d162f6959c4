import pytest
from bson import ObjectId

from .helpers import insert_category, insert_product, insert_subcategory


@pytest.mark.asyncio
async def test_list_products_hides_inactive(client, db, catalog):
    await insert_product(db, catalog["category_id"], name="Hidden", status="inactive")

    response = await client.get("/api/products/")
    assert response.status_code == 200
    data = response.json()["data"]
    assert [p["name"] for p in data["products"]] == ["Phone X"]
    assert data["products"][0]["category_name"] == "Electronics"
    assert data["products"][0]["subcategory_name"] == "Phones"
    assert data["pagination"] == {
        "current_page": 1,
        "total_pages": 1,
        "total_items": 1,
        "limit": 12,
        "has_next_page": False,
        "has_prev_page": False,
    }


@pytest.mark.asyncio
async def test_list_products_filters_sorting_and_pages(client, db, catalog):
    other_category = await insert_category(db, "Books")
    await insert_product(db, catalog["category_id"], name="Cheap Phone", price=100.0)
    await insert_product(db, catalog["category_id"], name="Pricey Phone", price=1500.0)
    await insert_product(db, other_category, name="Novel", price=300.0)

    response = await client.get("/api/products/", params={"sort_by": "price", "sort_order": "ASC"})
    prices = [p["price"] for p in response.json()["data"]["products"]]
    assert prices == sorted(prices)

    response = await client.get("/api/products/", params={"min_price": 200, "max_price": 1000})
    assert {p["name"] for p in response.json()["data"]["products"]} == {"Phone X", "Novel"}

    response = await client.get("/api/products/", params={"category_id": str(other_category)})
    assert [p["name"] for p in response.json()["data"]["products"]] == ["Novel"]

    response = await client.get("/api/products/", params={"page": 2, "limit": 3})
    data = response.json()["data"]
    assert len(data["products"]) == 1
    assert data["pagination"]["total_pages"] == 2
    assert data["pagination"]["has_prev_page"] is True


@pytest.mark.asyncio
async def test_search(client, db, catalog):
    await insert_product(db, catalog["category_id"], name="Laptop", description="Thin and light")

    response = await client.get("/api/products/search/LIGHT")
    data = response.json()["data"]
    assert [p["name"] for p in data["products"]] == ["Laptop"]
    assert data["search_query"] == "LIGHT"

    response = await client.get("/api/products/search/a")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_featured(client, db, catalog):
    await insert_product(db, catalog["category_id"], name="Star", featured=True)
    await insert_product(db, catalog["category_id"], name="Hidden Star", featured=True, status="inactive")

    response = await client.get("/api/products/featured/list")
    assert [p["name"] for p in response.json()["data"]] == ["Star"]


@pytest.mark.asyncio
async def test_categories_and_subcategories(client, db, catalog):
    books = await insert_category(db, "Books")
    await insert_subcategory(db, books, "Fiction")
    await insert_subcategory(db, catalog["category_id"], "Accessories")

    response = await client.get("/api/products/categories/all")
    assert [c["name"] for c in response.json()["data"]] == ["Books", "Electronics"]

    response = await client.get("/api/products/subcategories/all")
    names = [(s["category_name"], s["name"]) for s in response.json()["data"]]
    assert names == [("Books", "Fiction"), ("Electronics", "Accessories"), ("Electronics", "Phones")]

    response = await client.get(f"/api/products/categories/{books}/subcategories")
    assert [s["name"] for s in response.json()["data"]] == ["Fiction"]


@pytest.mark.asyncio
async def test_products_by_category_and_subcategory(client, catalog):
    response = await client.get(f"/api/products/category/{catalog['category_id']}")
    assert response.json()["data"]["pagination"]["total_items"] == 1

    response = await client.get(f"/api/products/subcategory/{catalog['subcategory_id']}")
    assert response.json()["data"]["products"][0]["id"] == str(catalog["product_id"])

    response = await client.get("/api/products/category/not-an-id")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_product_with_details(client, db, catalog):
    await db.product_details.insert_one({"product_id": catalog["product_id"], "brand": "Acme", "specifications": {}})

    response = await client.get(f"/api/products/{catalog['product_id']}")
    assert response.status_code == 200
    product = response.json()["data"]
    assert product["id"] == str(catalog["product_id"])
    assert product["details"]["brand"] == "Acme"


@pytest.mark.asyncio
async def test_get_product_missing_or_inactive(client, db, catalog):
    response = await client.get(f"/api/products/{ObjectId()}")
    assert response.status_code == 404
    assert response.json()["message"] == "Product not found"

    inactive = await insert_product(db, catalog["category_id"], status="inactive")
    response = await client.get(f"/api/products/{inactive}")
    assert response.status_code == 404

    response = await client.get("/api/products/123")
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid product ID"


@pytest.mark.asyncio
async def test_reviews_placeholder(client, catalog):
    response = await client.get(f"/api/products/{catalog['product_id']}/reviews")
    assert response.json()["data"] == {"reviews": [], "average_rating": 0, "total_reviews": 0}


@pytest.mark.asyncio
async def test_related_prefers_same_subcategory(client, db, catalog):
    same_sub = await insert_product(db, catalog["category_id"], catalog["subcategory_id"], name="Sibling")
    other_sub = await insert_subcategory(db, catalog["category_id"], "Tablets")
    await insert_product(db, catalog["category_id"], other_sub, name="Cousin")
    await insert_product(db, await insert_category(db, "Books"), name="Stranger")

    response = await client.get(f"/api/products/{catalog['product_id']}/related", params={"limit": 4})
    names = [p["name"] for p in response.json()["data"]]
    assert names == ["Sibling", "Cousin"]
    assert str(catalog["product_id"]) not in [p["id"] for p in response.json()["data"]]

    response = await client.get(f"/api/products/{catalog['product_id']}/related", params={"limit": 1})
    assert [p["id"] for p in response.json()["data"]] == [str(same_sub)]

    response = await client.get(f"/api/products/{ObjectId()}/related")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_products_rejects_unknown_sorting(client, catalog):
    response = await client.get("/api/products/", params={"sort_order": "sideways"})
    assert response.status_code == 400
    assert any(error.startswith("sort_order") for error in response.json()["errors"])

    response = await client.get("/api/products/", params={"sort_by": "quantity"})
    assert response.status_code == 400

    response = await client.get("/api/products/", params={"sort_by": "price", "sort_order": "asc"})
    assert response.status_code == 200
