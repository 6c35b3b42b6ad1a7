# =========================================================
# FILE: /imagifine/schemas/credits.py
# =========================================================

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AliasChoices, Field, field_validator

from imagifine.schemas.base import ApiModel


class CreateOrderRequest(ApiModel):
    plan_id: str

    @field_validator("plan_id")
    @classmethod
    def validate_plan_id(cls, v: str):
        v = (v or "").strip()
        if not v:
            raise ValueError("Plan ID is required")
        return v


class CreateOrderResponse(ApiModel):
    order_id: str
    amount: int
    credit_quantity: int
    currency: str
    key_id: Optional[str] = None


class VerifyPaymentRequest(ApiModel):
    # checkout widgets post the razorpay_* names
    order_id: str = Field(validation_alias=AliasChoices("orderId", "order_id", "razorpay_order_id"))
    payment_id: str = Field(validation_alias=AliasChoices("paymentId", "payment_id", "razorpay_payment_id"))
    signature: str = Field(validation_alias=AliasChoices("signature", "razorpay_signature"))


class VerifyPaymentResponse(ApiModel):
    success: bool = True
    credits: int
    transaction_id: str
    already_applied: bool = False


class TransactionItem(ApiModel):
    id: str
    order_id: str
    plan_id: str
    amount: int
    currency: str
    credits: int
    status: str
    payment_id: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None


class TransactionDetailResponse(ApiModel):
    transaction: TransactionItem
    payment: Optional[Dict[str, Any]] = None


class PlanItem(ApiModel):
    plan_id: str
    amount: int
    credits: int


class UpdateCreditsRequest(ApiModel):
    credits: int
    user_id: Optional[str] = None


class UpdateCreditsResponse(ApiModel):
    success: bool = True
    user_id: str
    credits: int


class WebhookAck(ApiModel):
    received: bool = True
    status: Optional[str] = None
