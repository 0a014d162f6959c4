"""
Razorpay checkout: gateway order creation and payment signature checks.
"""
import logging
import random

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..config.database import get_database
from ..models.payment import PaymentDocument
from ..schemas.common import SuccessResponse, ok
from ..schemas.payment import CreatePaymentOrderRequest, VerifyPaymentRequest
from ..services.orders import change_status
from ..services.payment_gateway import PaymentGatewayError, RazorpayGateway, get_payment_gateway, to_paise
from ..utils.dependencies import verify_owned
from ..utils.rate_limit import general_limiter
from ..utils.security import AuthenticatedCustomer, get_current_customer
from ..utils.serializers import serialize_docs, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"], dependencies=[Depends(general_limiter)])


@router.post("/create-order")
async def create_payment_order(
    request: CreatePaymentOrderRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    """Open a gateway order; the storefront completes payment with the returned key."""
    order = None
    amount = request.amount
    if request.order_id:
        order = await verify_owned(db.orders, request.order_id, customer.object_id, "order", "Order not found")
        if order.get("payment_status") == "paid":
            raise HTTPException(status_code=400, detail="Order is already paid")
        amount = amount or order["total_amount"]

    if not amount:
        raise HTTPException(status_code=400, detail="Amount is required")

    receipt = f"order_rcptid_{random.randint(0, 9999)}"
    try:
        gateway_order = await gateway.create_order(amount, receipt)
    except PaymentGatewayError as e:
        raise HTTPException(status_code=502, detail=f"Payment gateway error: {e}")

    payment = PaymentDocument(
        customer_id=customer.object_id,
        order_id=order["_id"] if order else None,
        razorpay_order_id=gateway_order["id"],
        amount=amount,
        amount_paise=to_paise(amount),
        currency=gateway.currency,
        receipt=receipt,
    )
    await db.order_payments.insert_one(payment.model_dump())

    return {"success": True, "order": gateway_order, "key": gateway.key_id}


@router.post("/verify", response_model=SuccessResponse)
async def verify_payment(
    request: VerifyPaymentRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    payment = await db.order_payments.find_one({
        "razorpay_order_id": request.razorpay_order_id,
        "customer_id": customer.object_id,
    })

    order = None
    linked_order_id = payment.get("order_id") if payment else None
    if request.order_id:
        order = await verify_owned(db.orders, request.order_id, customer.object_id, "order", "Order not found")
        if linked_order_id is not None and linked_order_id != order["_id"]:
            raise HTTPException(status_code=400, detail="Payment does not belong to this order")
    elif linked_order_id is not None:
        order = await db.orders.find_one({"_id": linked_order_id})

    if order:
        if payment is None:
            raise HTTPException(status_code=400, detail="Payment not found for this order")
        if payment["amount_paise"] != to_paise(order["total_amount"]):
            logger.warning(
                f"⚠️  Payment {request.razorpay_order_id} amount {payment['amount']} "
                f"does not match order {order['order_number']} total {order['total_amount']}"
            )
            raise HTTPException(status_code=400, detail="Payment amount does not match order total")

    valid = gateway.verify_signature(
        request.razorpay_order_id, request.razorpay_payment_id, request.razorpay_signature
    )

    if payment:
        await db.order_payments.update_one(
            {"_id": payment["_id"]},
            {"$set": {
                "razorpay_payment_id": request.razorpay_payment_id,
                "razorpay_signature": request.razorpay_signature,
                "status": "paid" if valid else "failed",
                "order_id": order["_id"] if order else payment.get("order_id"),
                "updated_at": utcnow(),
            }},
        )

    if not valid:
        if order:
            await db.orders.update_one({"_id": order["_id"]}, {"$set": {"payment_status": "failed", "updated_at": utcnow()}})
        raise HTTPException(status_code=400, detail="Payment verification failed")

    if order:
        extra = {"payment_status": "paid"}
        if order["status"] == "pending":
            await change_status(db, order, "confirmed", message="Payment received", extra=extra)
        else:
            await db.orders.update_one({"_id": order["_id"]}, {"$set": {**extra, "updated_at": utcnow()}})

    logger.info(f"💳 Payment verified: {request.razorpay_payment_id} for customer {customer.id}")
    return ok("Payment verified successfully", {
        "razorpay_order_id": request.razorpay_order_id,
        "razorpay_payment_id": request.razorpay_payment_id,
        "order_id": str(order["_id"]) if order else None,
    })


@router.get("/order/{order_id}", response_model=SuccessResponse)
async def order_payments(
    order_id: str,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    db: AsyncIOMotorDatabase = Depends(get_database),
):
    order = await verify_owned(db.orders, order_id, customer.object_id, "order", "Order not found")
    payments = await db.order_payments.find(
        {"order_id": order["_id"], "customer_id": customer.object_id}
    ).sort("created_at", -1).to_list(length=None)
    return ok("Payments fetched successfully", serialize_docs(payments))
