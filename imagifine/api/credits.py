# /imagifine/api/credits.py
"""Credits and payment API endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from imagifine.api.deps import get_credit_workflow, get_current_user, require_admin
from imagifine.core.database import get_db
from imagifine.core.errors import GatewayUnavailable, TransactionNotFound
from imagifine.models.user import User
from imagifine.schemas.credits import (
    CreateOrderRequest,
    CreateOrderResponse,
    PlanItem,
    TransactionDetailResponse,
    TransactionItem,
    UpdateCreditsRequest,
    UpdateCreditsResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
    WebhookAck,
)
from imagifine.services import ledger_service
from imagifine.services.credit_service import CreditPurchaseWorkflow

logger = logging.getLogger("imagifine.credits")

router = APIRouter(prefix="/api/credits", tags=["credits"])


@router.get("/plans", response_model=List[PlanItem])
async def list_plans(workflow: CreditPurchaseWorkflow = Depends(get_credit_workflow)):
    """Available credit plans."""
    return [PlanItem(plan_id=p.plan_id, amount=p.amount, credits=p.credits) for p in workflow.plans.values()]


@router.post("/create-order", response_model=CreateOrderResponse)
async def create_order(
    req: CreateOrderRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    workflow: CreditPurchaseWorkflow = Depends(get_credit_workflow),
):
    """Open a gateway order for a plan and record it as pending."""
    order = await workflow.create_order(db, user.id, req.plan_id)
    return CreateOrderResponse(
        order_id=order.order_id,
        amount=order.amount,
        credit_quantity=order.credit_quantity,
        currency=order.currency,
        key_id=workflow.gateway.key_id or None,
    )


@router.post("/verify-payment", response_model=VerifyPaymentResponse)
async def verify_payment(
    req: VerifyPaymentRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    workflow: CreditPurchaseWorkflow = Depends(get_credit_workflow),
):
    """Apply a checkout confirmation relayed by the client."""
    result = await workflow.verify_payment(db, req.order_id, req.payment_id, req.signature, user_id=user.id)
    return VerifyPaymentResponse(
        credits=result.credits,
        transaction_id=result.transaction_id,
        already_applied=result.already_applied,
    )


@router.post("/webhook", response_model=WebhookAck)
async def gateway_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    workflow: CreditPurchaseWorkflow = Depends(get_credit_workflow),
):
    """Razorpay webhook to finalize credit purchases."""
    payload = await request.body()
    signature = request.headers.get("x-razorpay-signature")
    outcome = await workflow.handle_webhook(db, payload, signature)
    return WebhookAck(status=outcome)


@router.get("/transactions", response_model=List[TransactionItem])
async def list_transactions(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    limit: int = 100,
):
    """Ledger entries of the current user, newest first."""
    entries = await ledger_service.list_for_user(db, user.id, limit=max(1, min(limit, 500)))
    return [TransactionItem.model_validate(e) for e in entries]


@router.get("/transaction/{transaction_id}", response_model=TransactionDetailResponse)
async def get_transaction(
    transaction_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    workflow: CreditPurchaseWorkflow = Depends(get_credit_workflow),
):
    entry = await ledger_service.get_for_user(db, user.id, transaction_id)
    if not entry:
        raise TransactionNotFound()

    payment = None
    if entry.payment_id:
        try:
            payment = await workflow.gateway.fetch_payment(entry.payment_id)
        except GatewayUnavailable as exc:
            # the ledger entry is still served without the gateway view
            logger.warning("payment lookup failed for transaction %s: %s", entry.id, exc.message)

    return TransactionDetailResponse(transaction=TransactionItem.model_validate(entry), payment=payment)


@router.put("/update", response_model=UpdateCreditsResponse)
async def update_credits(
    req: UpdateCreditsRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    workflow: CreditPurchaseWorkflow = Depends(get_credit_workflow),
):
    """Overwrite a balance (admin only)."""
    target_id = req.user_id or admin.id
    credits = await workflow.set_balance(db, target_id, req.credits, actor_id=admin.id)
    return UpdateCreditsResponse(user_id=target_id, credits=credits)
