"""
Customer accounts: OTP registration, login, token refresh, password reset
and profile.
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from ..config.database import get_database
from ..schemas.common import SuccessResponse, ok
from ..schemas.customer import (
    LoginRequest,
    LogoutRequest,
    PhoneRequest,
    RefreshRequest,
    RegistrationRequest,
    ResetOtpRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
    VerifyOtpRequest,
)
from ..utils.dependencies import validate_object_id
from ..utils.notifications import DeliveryReport, OtpNotifier, get_otp_notifier
from ..utils.otp import OtpStore, generate_otp, get_otp_store
from ..utils.rate_limit import auth_limiter, otp_limiter
from ..utils.security import (
    ACCESS,
    REFRESH,
    AuthenticatedCustomer,
    TokenError,
    blacklist_token,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_current_customer,
    hash_password,
    is_token_blacklisted,
    token_expiry,
    verify_password,
)
from ..utils.serializers import serialize_doc, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])

REGISTRATION_OTP = "registration"
RESET_OTP = "reset"

PROFILE_FIELDS = {"name": 1, "email": 1, "phone": 1, "created_at": 1}


def _require_delivery(report: DeliveryReport, action: str = "send") -> None:
    if not report.delivered:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to {action} OTP. SMS: {report.sms_error}, Email: {report.email_error}",
        )


async def _create_customer(db: AsyncIOMotorDatabase, data: Dict[str, Any]) -> str:
    """Insert a customer; the password must already be hashed."""
    now = utcnow()
    try:
        result = await db.customers.insert_one({
            "name": data["name"],
            "email": data["email"],
            "phone": data["phone"],
            "password": data["password"],
            "created_at": now,
            "updated_at": now,
        })
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Customer with this email or phone already exists")

    logger.info(f"Customer registered: {data['email']} (ID: {result.inserted_id})")
    return str(result.inserted_id)


def _require_otp_purpose(otp_store: OtpStore, phone: str, purpose: str) -> None:
    """Reject a pending OTP issued for the other flow without using it up."""
    payload = otp_store.get_payload(phone)
    if payload is not None and payload.get("purpose") != purpose:
        raise HTTPException(status_code=400, detail="This OTP was not issued for this request")


async def _ensure_unregistered(db: AsyncIOMotorDatabase, email: str, phone: str) -> None:
    existing = await db.customers.find_one({"$or": [{"email": email}, {"phone": phone}]})
    if existing:
        raise HTTPException(status_code=400, detail="Customer with this email or phone already exists")


@router.post("/send-otp", response_model=SuccessResponse, dependencies=[Depends(otp_limiter)])
async def send_registration_otp(
    registration: RegistrationRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
    otp_store: OtpStore = Depends(get_otp_store),
    notifier: OtpNotifier = Depends(get_otp_notifier),
):
    """Start OTP registration: hold the details until the code is verified."""
    await _ensure_unregistered(db, registration.email, registration.phone)

    otp = generate_otp()
    otp_store.store(registration.phone, otp, {
        "purpose": REGISTRATION_OTP,
        "name": registration.name,
        "email": registration.email,
        "phone": registration.phone,
        "password": hash_password(registration.password),
    })

    report = await notifier.send(registration.phone, otp, registration.email)
    if not report.delivered:
        otp_store.discard(registration.phone)
    _require_delivery(report)

    return ok("OTP sent successfully to your phone and email", {
        "phone": registration.phone,
        "email": registration.email,
    })


@router.post("/verify-otp", status_code=201, response_model=SuccessResponse, dependencies=[Depends(otp_limiter)])
async def verify_registration_otp(
    request: VerifyOtpRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
    otp_store: OtpStore = Depends(get_otp_store),
):
    _require_otp_purpose(otp_store, request.phone, REGISTRATION_OTP)
    result = otp_store.verify(request.phone, request.otp)
    if not result.valid:
        raise HTTPException(status_code=400, detail=result.message)

    customer_id = await _create_customer(db, result.payload)
    return ok("Customer registered successfully", {"customer_id": customer_id})


@router.post("/resend-otp", response_model=SuccessResponse, dependencies=[Depends(otp_limiter)])
async def resend_registration_otp(
    request: PhoneRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
    otp_store: OtpStore = Depends(get_otp_store),
    notifier: OtpNotifier = Depends(get_otp_notifier),
):
    if await db.customers.find_one({"phone": request.phone}):
        raise HTTPException(status_code=400, detail="Customer with this phone number already exists")

    payload = otp_store.get_payload(request.phone)
    if payload is None or payload.get("purpose") != REGISTRATION_OTP:
        raise HTTPException(status_code=400, detail="No pending registration found for this phone number")

    otp = generate_otp()
    otp_store.store(request.phone, otp, payload)
    report = await notifier.send(request.phone, otp, payload.get("email"))
    _require_delivery(report, "resend")

    return ok("New OTP sent successfully to your phone and email", {
        "phone": request.phone,
        "email": payload.get("email"),
    })


@router.post("/request-reset-otp", response_model=SuccessResponse, dependencies=[Depends(otp_limiter)])
async def request_reset_otp(
    request: ResetOtpRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
    otp_store: OtpStore = Depends(get_otp_store),
    notifier: OtpNotifier = Depends(get_otp_notifier),
):
    conditions = []
    if request.phone:
        conditions.append({"phone": request.phone})
    if request.email:
        conditions.append({"email": request.email})

    customer = await db.customers.find_one({"$or": conditions})
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    otp = generate_otp()
    otp_store.store(customer["phone"], otp, {"purpose": RESET_OTP, "customer_id": str(customer["_id"])})
    report = await notifier.send(customer["phone"], otp, customer.get("email"))
    _require_delivery(report)

    return ok("OTP sent for password reset", {"phone": customer["phone"], "email": customer.get("email")})


@router.post("/verify-reset-otp", response_model=SuccessResponse, dependencies=[Depends(otp_limiter)])
async def verify_reset_otp(request: VerifyOtpRequest, otp_store: OtpStore = Depends(get_otp_store)):
    _require_otp_purpose(otp_store, request.phone, RESET_OTP)
    result = otp_store.verify(request.phone, request.otp)
    if not result.valid:
        raise HTTPException(status_code=400, detail=result.message)

    otp_store.mark_verified(request.phone, result.payload or {})
    return ok("OTP verified. You can now reset your password.", {"phone": request.phone})


@router.post("/reset-password", response_model=SuccessResponse, dependencies=[Depends(auth_limiter)])
async def reset_password(
    request: ResetPasswordRequest,
    db: AsyncIOMotorDatabase = Depends(get_database),
    otp_store: OtpStore = Depends(get_otp_store),
):
    """Accepts a phone verified through /verify-reset-otp or a fresh OTP."""
    verified = otp_store.consume_verified(request.phone)
    if verified is None and request.otp:
        _require_otp_purpose(otp_store, request.phone, RESET_OTP)
        result = otp_store.verify(request.phone, request.otp)
        verified = result.payload if result.valid else None
    if verified is None:
        raise HTTPException(status_code=400, detail="OTP verification required or expired.")

    result = await db.customers.update_one(
        {"phone": request.phone},
        {"$set": {"password": hash_password(request.new_password), "updated_at": utcnow()}},
    )
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Customer not found")

    logger.info(f"Password reset for customer with phone {request.phone}")
    return ok("Password reset successful")


@router.post("/register", status_code=201, response_model=SuccessResponse, dependencies=[Depends(auth_limiter)])
async def register(registration: RegistrationRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Direct registration without OTP."""
    await _ensure_unregistered(db, registration.email, registration.phone)
    customer_id = await _create_customer(db, {
        **registration.model_dump(),
        "password": hash_password(registration.password),
    })
    return ok("Customer registered successfully", {"customer_id": customer_id})


@router.post("/login", dependencies=[Depends(auth_limiter)])
async def login(credentials: LoginRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    customer = await db.customers.find_one({"email": credentials.email})
    if not customer or not verify_password(credentials.password, customer.get("password")):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    customer_id = str(customer["_id"])
    logger.info(f"Customer logged in: {customer_id}")
    return {
        "success": True,
        "message": "Login successful",
        "access_token": create_access_token(customer_id, customer["email"]),
        "refresh_token": create_refresh_token(customer_id, customer["email"]),
        "customer": {"id": customer_id, "name": customer["name"], "email": customer["email"]},
    }


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: LogoutRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    access_token = request.access_token or customer.token
    try:
        tokens = [(access_token, token_expiry(decode_token(access_token, ACCESS)))]
        if request.refresh_token:
            tokens.append((request.refresh_token, token_expiry(decode_token(request.refresh_token, REFRESH))))
    except TokenError as e:
        logger.info(f"Logout with undecodable token: {e}")
        raise HTTPException(status_code=400, detail="Logout failed")

    for token, expires_at in tokens:
        await blacklist_token(db, token, expires_at)

    logger.info(f"Customer logged out: {customer.id}")
    return ok("Logout successful, tokens blacklisted")


@router.post("/refresh")
async def refresh(request: RefreshRequest, db: AsyncIOMotorDatabase = Depends(get_database)):
    if not request.refresh_token:
        raise HTTPException(status_code=401, detail="Missing refresh token")
    if await is_token_blacklisted(db, request.refresh_token):
        raise HTTPException(status_code=403, detail="Refresh token is blacklisted")

    try:
        payload = decode_token(request.refresh_token, REFRESH)
    except TokenError:
        raise HTTPException(status_code=403, detail="Invalid or expired refresh token")

    return {
        "success": True,
        "message": "New access token generated",
        "access_token": create_access_token(payload["id"], payload.get("email", "")),
    }


@router.get("/profile", response_model=SuccessResponse)
async def get_profile(
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    doc = await db.customers.find_one({"_id": customer.object_id}, PROFILE_FIELDS)
    if not doc:
        raise HTTPException(status_code=404, detail="Customer not found")
    return ok("Profile fetched successfully", serialize_doc(doc))


@router.put("/profile", response_model=SuccessResponse)
async def update_profile(
    update: UpdateProfileRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    customer_id = validate_object_id(customer.id, "customer")
    if not await db.customers.find_one({"_id": customer_id}):
        raise HTTPException(status_code=404, detail="Customer not found")

    taken = await db.customers.find_one({"email": update.email, "_id": {"$ne": customer_id}})
    if taken:
        raise HTTPException(status_code=400, detail="Email is already registered with another account")

    await db.customers.update_one(
        {"_id": customer_id},
        {"$set": {"name": update.name, "email": update.email, "updated_at": utcnow()}},
    )
    doc = await db.customers.find_one({"_id": customer_id}, PROFILE_FIELDS)
    logger.info(f"Customer profile updated: {customer.id}")
    return ok("Profile updated successfully", serialize_doc(doc))
