import pytest
from bson import ObjectId

from .helpers import insert_staff


async def create_role(client, admin, name, description=None):
    response = await client.post(
        "/api/admin/roles/", json={"role_name": name, "description": description}, headers=admin["headers"],
    )
    assert response.status_code == 201
    return response.json()["data"]["id"]


@pytest.mark.asyncio
async def test_roles_require_admin_role(client, staff):
    response = await client.get("/api/admin/roles/", headers=staff["headers"])
    assert response.status_code == 403
    response = await client.get("/api/admin/user-roles/", headers=staff["headers"])
    assert response.status_code == 403
    response = await client.get("/api/admin/roles/")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_role_crud(client, admin):
    role_id = await create_role(client, admin, "Editor", "Edits the catalog")

    response = await client.post("/api/admin/roles/", json={"role_name": "editor"}, headers=admin["headers"])
    assert response.status_code == 400
    assert response.json()["message"] == "Role with this name already exists"

    response = await client.put(
        f"/api/admin/roles/{role_id}", json={"role_name": "Catalog Editor"}, headers=admin["headers"],
    )
    assert response.json()["data"]["role_name"] == "Catalog Editor"

    response = await client.get("/api/admin/roles/", headers=admin["headers"])
    assert [r["role_name"] for r in response.json()["data"]] == ["Catalog Editor", "super_admin"]

    response = await client.delete(f"/api/admin/roles/{role_id}", headers=admin["headers"])
    assert response.status_code == 200
    response = await client.get(f"/api/admin/roles/{role_id}", headers=admin["headers"])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_assign_update_and_remove(client, db, admin):
    user_id = str(await insert_staff(db, email="clerk@example.com", role_name=None))
    editor = await create_role(client, admin, "editor")
    support = await create_role(client, admin, "support")

    body = {"user_id": user_id, "role_id": editor}
    response = await client.post("/api/admin/user-roles/assign", json=body, headers=admin["headers"])
    assert response.status_code == 201
    response = await client.post("/api/admin/user-roles/assign", json=body, headers=admin["headers"])
    assert response.status_code == 400

    response = await client.get(f"/api/admin/user-roles/user/{user_id}", headers=admin["headers"])
    views = response.json()["data"]
    assert [(v["role_name"], v["user_email"]) for v in views] == [("editor", "clerk@example.com")]

    response = await client.put("/api/admin/user-roles/update", json={
        "user_id": user_id, "old_role_id": editor, "new_role_id": support,
    }, headers=admin["headers"])
    assert response.status_code == 200

    response = await client.get(f"/api/admin/user-roles/role/{support}", headers=admin["headers"])
    assert [v["user_id"] for v in response.json()["data"]] == [user_id]
    response = await client.get(f"/api/admin/user-roles/role/{editor}", headers=admin["headers"])
    assert response.json()["data"] == []

    response = await client.delete(f"/api/admin/user-roles/{user_id}/{support}", headers=admin["headers"])
    assert response.status_code == 200
    response = await client.delete(f"/api/admin/user-roles/{user_id}/{support}", headers=admin["headers"])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_assign_unknown_user_or_role(client, admin):
    role_id = await create_role(client, admin, "editor")

    response = await client.post("/api/admin/user-roles/assign", json={
        "user_id": str(ObjectId()), "role_id": role_id,
    }, headers=admin["headers"])
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"

    response = await client.post("/api/admin/user-roles/assign", json={
        "user_id": str(admin["id"]), "role_id": str(ObjectId()),
    }, headers=admin["headers"])
    assert response.status_code == 404
    assert response.json()["message"] == "Role not found"


@pytest.mark.asyncio
async def test_deleting_role_removes_assignments(client, db, admin, staff):
    support = await db.roles.find_one({"role_name": "support"})

    response = await client.delete(f"/api/admin/roles/{support['_id']}", headers=admin["headers"])
    assert response.status_code == 200
    assert await db.user_roles.count_documents({"role_id": support["_id"]}) == 0


@pytest.mark.asyncio
async def test_user_management(client, db, admin):
    user_id = str(await insert_staff(db, email="clerk@example.com", role_name=None))

    response = await client.get("/api/admin/users/", headers=admin["headers"])
    emails = {u["email"] for u in response.json()["data"]}
    assert emails == {"admin@example.com", "clerk@example.com"}

    response = await client.put(
        f"/api/admin/users/{user_id}", json={"email": "admin@example.com"}, headers=admin["headers"],
    )
    assert response.status_code == 400

    response = await client.put(
        f"/api/admin/users/{user_id}", json={"name": "Clerk Two", "status": "INACTIVE"}, headers=admin["headers"],
    )
    assert response.json()["data"]["status"] == "inactive"
    assert response.json()["data"]["roles"] == []

    response = await client.delete(f"/api/admin/users/{user_id}", headers=admin["headers"])
    assert response.status_code == 200
    response = await client.get(f"/api/admin/users/{user_id}", headers=admin["headers"])
    assert response.status_code == 404
