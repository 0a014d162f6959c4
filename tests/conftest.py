import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "rzp_test_secret")

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from ecomhub.config.database import get_database
from ecomhub.main import app as fastapi_app
from ecomhub.services.payment_gateway import RazorpayGateway, get_payment_gateway
from ecomhub.utils.notifications import DeliveryReport, get_otp_notifier
from ecomhub.utils.otp import OtpStore, get_otp_store
from ecomhub.utils.rate_limit import reset_rate_limits
from ecomhub.utils.security import create_access_token, create_admin_token

from .helpers import bearer, insert_category, insert_customer, insert_product, insert_staff, insert_subcategory


@pytest.fixture(autouse=True)
def clear_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture
def db():
    return AsyncMongoMockClient()["ecomhub_test"]


@pytest.fixture
def otp_store():
    return OtpStore(ttl_seconds=300, max_attempts=3)


@pytest.fixture
def notifier():
    mock = MagicMock()
    mock.send = AsyncMock(return_value=DeliveryReport(sms_sent=True, email_sent=True))
    return mock


@pytest.fixture
def gateway():
    gw = RazorpayGateway("rzp_test_key", "rzp_test_secret")
    gw.create_order = AsyncMock(return_value={
        "id": "order_TEST123",
        "entity": "order",
        "amount": 50000,
        "currency": "INR",
        "status": "created",
    })
    return gw


@pytest.fixture
def app(db, otp_store, notifier, gateway):
    fastapi_app.dependency_overrides[get_database] = lambda: db
    fastapi_app.dependency_overrides[get_otp_store] = lambda: otp_store
    fastapi_app.dependency_overrides[get_otp_notifier] = lambda: notifier
    fastapi_app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def customer(db):
    customer_id = await insert_customer(db)
    token = create_access_token(str(customer_id), "asha@example.com")
    return {"id": customer_id, "email": "asha@example.com", "phone": "9876543210",
            "token": token, "headers": bearer(token)}


@pytest_asyncio.fixture
async def other_customer(db):
    customer_id = await insert_customer(db, name="Ravi Kumar", email="ravi@example.com", phone="9123456780")
    token = create_access_token(str(customer_id), "ravi@example.com")
    return {"id": customer_id, "headers": bearer(token)}


@pytest_asyncio.fixture
async def catalog(db):
    category_id = await insert_category(db)
    subcategory_id = await insert_subcategory(db, category_id)
    product_id = await insert_product(db, category_id, subcategory_id)
    return {"category_id": category_id, "subcategory_id": subcategory_id, "product_id": product_id}


@pytest_asyncio.fixture
async def admin(db):
    user_id = await insert_staff(db)
    token = create_admin_token(str(user_id), "admin@example.com")
    return {"id": user_id, "token": token, "headers": bearer(token)}


@pytest_asyncio.fixture
async def staff(db):
    """Staff member without the admin role."""
    user_id = await insert_staff(db, email="staff@example.com", role_name="support")
    token = create_admin_token(str(user_id), "staff@example.com")
    return {"id": user_id, "headers": bearer(token)}
