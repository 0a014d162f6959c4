"""
Document factories shared by the test modules.
"""
from ecomhub.utils.security import hash_password
from ecomhub.utils.serializers import utcnow

PASSWORD = "secret123"


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


async def insert_customer(db, name="Asha Rao", email="asha@example.com", phone="9876543210"):
    now = utcnow()
    result = await db.customers.insert_one({
        "name": name,
        "email": email,
        "phone": phone,
        "password": hash_password(PASSWORD),
        "created_at": now,
        "updated_at": now,
    })
    return result.inserted_id


async def insert_category(db, name="Electronics"):
    now = utcnow()
    result = await db.categories.insert_one({"name": name, "description": None, "created_at": now, "updated_at": now})
    return result.inserted_id


async def insert_subcategory(db, category_id, name="Phones"):
    now = utcnow()
    result = await db.subcategories.insert_one({
        "name": name, "category_id": category_id, "description": None, "created_at": now, "updated_at": now,
    })
    return result.inserted_id


async def insert_product(db, category_id, subcategory_id=None, name="Phone X", price=500.0,
                         quantity=10, status="active", featured=False, description="A good phone"):
    now = utcnow()
    result = await db.products.insert_one({
        "name": name,
        "description": description,
        "price": price,
        "quantity": quantity,
        "images": ["https://img.example.com/1.jpg"],
        "category_id": category_id,
        "subcategory_id": subcategory_id,
        "status": status,
        "featured": featured,
        "created_at": now,
        "updated_at": now,
    })
    return result.inserted_id


async def insert_staff(db, email="admin@example.com", role_name="super_admin", status="active"):
    now = utcnow()
    user = await db.users.insert_one({
        "name": "Admin",
        "email": email,
        "phone": None,
        "password": hash_password(PASSWORD),
        "status": status,
        "created_at": now,
        "updated_at": now,
    })
    if role_name:
        role = await db.roles.find_one({"role_name": role_name})
        if role:
            role_id = role["_id"]
        else:
            role_id = (await db.roles.insert_one({
                "role_name": role_name, "description": None, "created_at": now, "updated_at": now,
            })).inserted_id
        await db.user_roles.insert_one({"user_id": user.inserted_id, "role_id": role_id, "assigned_at": now})
    return user.inserted_id


async def add_cart_item(db, customer_id, product_id, quantity=1):
    now = utcnow()
    result = await db.cart.insert_one({
        "customer_id": customer_id, "product_id": product_id, "quantity": quantity,
        "added_at": now, "updated_at": now,
    })
    return result.inserted_id
