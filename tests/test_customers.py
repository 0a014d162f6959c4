import pytest

from ecomhub.utils.notifications import DeliveryReport
from ecomhub.utils.security import REFRESH, create_refresh_token, decode_token, verify_password

from .helpers import bearer

REGISTRATION = {
    "name": "Meera Iyer",
    "email": "Meera@Example.com",
    "phone": "9988776655",
    "password": "secret123",
}


def sent_otp(notifier):
    return notifier.send.call_args.args[1]


@pytest.mark.asyncio
async def test_otp_registration_flow(client, db, notifier):
    response = await client.post("/api/customers/send-otp", json=REGISTRATION)
    assert response.status_code == 200
    assert response.json()["data"] == {"phone": "9988776655", "email": "meera@example.com"}
    assert await db.customers.count_documents({}) == 0

    response = await client.post("/api/customers/verify-otp", json={"phone": "9988776655", "otp": sent_otp(notifier)})
    assert response.status_code == 201
    customer_id = response.json()["data"]["customer_id"]

    stored = await db.customers.find_one({"email": "meera@example.com"})
    assert str(stored["_id"]) == customer_id
    assert verify_password("secret123", stored["password"])


@pytest.mark.asyncio
async def test_verify_otp_wrong_code(client, notifier):
    await client.post("/api/customers/send-otp", json=REGISTRATION)
    wrong = "000000" if sent_otp(notifier) != "000000" else "111111"

    response = await client.post("/api/customers/verify-otp", json={"phone": "9988776655", "otp": wrong})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid OTP"


@pytest.mark.asyncio
async def test_send_otp_rejects_registered_phone(client, customer):
    response = await client.post("/api/customers/send-otp", json={**REGISTRATION, "phone": customer["phone"]})
    assert response.status_code == 400
    assert response.json()["message"] == "Customer with this email or phone already exists"


@pytest.mark.asyncio
async def test_send_otp_fails_when_no_channel_delivers(client, notifier, otp_store):
    notifier.send.return_value = DeliveryReport(sms_error="SMS gateway not configured", email_error="SMTP not configured")

    response = await client.post("/api/customers/send-otp", json=REGISTRATION)
    assert response.status_code == 500
    assert response.json()["message"] == (
        "Failed to send OTP. SMS: SMS gateway not configured, Email: SMTP not configured"
    )
    assert otp_store.get_payload("9988776655") is None


@pytest.mark.asyncio
async def test_registration_validation(client):
    response = await client.post("/api/customers/send-otp", json={
        "name": "M", "email": "bad", "phone": "12ab", "password": "123",
    })
    assert response.status_code == 400
    assert len(response.json()["errors"]) == 4


@pytest.mark.asyncio
async def test_name_is_html_escaped(client, db):
    response = await client.post("/api/customers/register", json={**REGISTRATION, "name": "<b>Meera</b>"})
    assert response.status_code == 201
    stored = await db.customers.find_one({"email": "meera@example.com"})
    assert stored["name"] == "&lt;b&gt;Meera&lt;/b&gt;"


@pytest.mark.asyncio
async def test_resend_otp(client, notifier, otp_store):
    response = await client.post("/api/customers/resend-otp", json={"phone": "9988776655"})
    assert response.status_code == 400
    assert response.json()["message"] == "No pending registration found for this phone number"

    await client.post("/api/customers/send-otp", json=REGISTRATION)
    first = sent_otp(notifier)
    response = await client.post("/api/customers/resend-otp", json={"phone": "9988776655"})
    assert response.status_code == 200
    assert notifier.send.call_count == 2
    assert otp_store.get_payload("9988776655")["email"] == "meera@example.com"

    second = sent_otp(notifier)
    if first != second:
        stale = await client.post("/api/customers/verify-otp", json={"phone": "9988776655", "otp": first})
        assert stale.status_code == 400


@pytest.mark.asyncio
async def test_direct_register_and_duplicate(client):
    response = await client.post("/api/customers/register", json=REGISTRATION)
    assert response.status_code == 201
    response = await client.post("/api/customers/register", json=REGISTRATION)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_login_success_and_failure(client, customer):
    response = await client.post("/api/customers/login", json={"email": "ASHA@example.com", "password": "secret123"})
    assert response.status_code == 200
    data = response.json()
    assert data["customer"] == {"id": str(customer["id"]), "name": "Asha Rao", "email": "asha@example.com"}
    assert decode_token(data["refresh_token"], REFRESH)["id"] == str(customer["id"])

    response = await client.post("/api/customers/login", json={"email": "asha@example.com", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_auth_header_errors(client):
    response = await client.get("/api/customers/profile")
    assert response.status_code == 401
    assert response.json()["message"] == "Authorization token missing"

    response = await client.get("/api/customers/profile", headers={"Authorization": "Bearer"})
    assert response.json()["message"] == "Invalid token format"

    response = await client.get("/api/customers/profile", headers=bearer("garbage"))
    assert response.json()["message"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_logout_blacklists_tokens(client, customer):
    refresh_token = create_refresh_token(str(customer["id"]), customer["email"])
    response = await client.post(
        "/api/customers/logout", json={"refresh_token": refresh_token}, headers=customer["headers"],
    )
    assert response.status_code == 200

    response = await client.get("/api/customers/profile", headers=customer["headers"])
    assert response.status_code == 401
    assert response.json()["message"] == "Token has been revoked"

    response = await client.post("/api/customers/refresh", json={"refresh_token": refresh_token})
    assert response.status_code == 403
    assert response.json()["message"] == "Refresh token is blacklisted"


@pytest.mark.asyncio
async def test_logout_with_bad_refresh_token(client, customer):
    response = await client.post(
        "/api/customers/logout", json={"refresh_token": "nope"}, headers=customer["headers"],
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Logout failed"


@pytest.mark.asyncio
async def test_refresh(client, customer):
    response = await client.post("/api/customers/refresh", json={})
    assert response.status_code == 401

    response = await client.post("/api/customers/refresh", json={"refresh_token": customer["token"]})
    assert response.status_code == 403

    refresh_token = create_refresh_token(str(customer["id"]), customer["email"])
    response = await client.post("/api/customers/refresh", json={"refresh_token": refresh_token})
    assert response.status_code == 200
    new_token = response.json()["access_token"]

    profile = await client.get("/api/customers/profile", headers=bearer(new_token))
    assert profile.status_code == 200


@pytest.mark.asyncio
async def test_profile_read_and_update(client, customer, other_customer):
    response = await client.get("/api/customers/profile", headers=customer["headers"])
    assert response.status_code == 200
    profile = response.json()["data"]
    assert profile["email"] == "asha@example.com"
    assert "password" not in profile

    response = await client.put(
        "/api/customers/profile", json={"name": "Asha R", "email": "ravi@example.com"}, headers=customer["headers"],
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Email is already registered with another account"

    response = await client.put(
        "/api/customers/profile", json={"name": "Asha R", "email": "asha.r@example.com"}, headers=customer["headers"],
    )
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Asha R"


@pytest.mark.asyncio
async def test_profile_of_deleted_customer(client, db, customer):
    await db.customers.delete_one({"_id": customer["id"]})
    response = await client.get("/api/customers/profile", headers=customer["headers"])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_password_reset_with_verified_otp(client, db, customer, notifier):
    response = await client.post("/api/customers/request-reset-otp", json={"email": customer["email"]})
    assert response.status_code == 200
    otp = sent_otp(notifier)
    assert notifier.send.call_args.args[0] == customer["phone"]

    response = await client.post("/api/customers/verify-reset-otp", json={"phone": customer["phone"], "otp": otp})
    assert response.status_code == 200

    response = await client.post(
        "/api/customers/reset-password", json={"phone": customer["phone"], "new_password": "newpass99"},
    )
    assert response.status_code == 200

    stored = await db.customers.find_one({"_id": customer["id"]})
    assert verify_password("newpass99", stored["password"])

    again = await client.post(
        "/api/customers/reset-password", json={"phone": customer["phone"], "new_password": "another1"},
    )
    assert again.status_code == 400
    assert again.json()["message"] == "OTP verification required or expired."


@pytest.mark.asyncio
async def test_password_reset_with_otp_in_same_request(client, customer, notifier):
    await client.post("/api/customers/request-reset-otp", json={"phone": customer["phone"]})
    response = await client.post("/api/customers/reset-password", json={
        "phone": customer["phone"], "otp": sent_otp(notifier), "new_password": "newpass99",
    })
    assert response.status_code == 200

    login = await client.post("/api/customers/login", json={"email": customer["email"], "password": "newpass99"})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_reset_otp_for_unknown_customer(client):
    response = await client.post("/api/customers/request-reset-otp", json={"phone": "9000000000"})
    assert response.status_code == 404

    response = await client.post("/api/customers/request-reset-otp", json={})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_reset_otp_cannot_complete_registration(client, db, customer, notifier):
    await client.post("/api/customers/request-reset-otp", json={"phone": customer["phone"]})
    otp = sent_otp(notifier)

    response = await client.post("/api/customers/verify-otp", json={"phone": customer["phone"], "otp": otp})
    assert response.status_code == 400
    assert response.json()["message"] == "This OTP was not issued for this request"
    assert await db.customers.count_documents({}) == 1

    response = await client.post("/api/customers/verify-reset-otp", json={"phone": customer["phone"], "otp": otp})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_registration_otp_cannot_reset_password(client, notifier):
    await client.post("/api/customers/send-otp", json=REGISTRATION)
    otp = sent_otp(notifier)

    response = await client.post("/api/customers/verify-reset-otp", json={"phone": "9988776655", "otp": otp})
    assert response.status_code == 400
    assert response.json()["message"] == "This OTP was not issued for this request"

    response = await client.post("/api/customers/verify-otp", json={"phone": "9988776655", "otp": otp})
    assert response.status_code == 201
