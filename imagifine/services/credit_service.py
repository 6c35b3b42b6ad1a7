# FILE: imagifine/services/credit_service.py
"""
Credit purchase workflow.

Flow:
1. create_order(user_id, plan_id) -> gateway order + pending ledger entry
2. User pays through the gateway checkout
3. verify_payment(order_id, payment_id, signature) (client-relayed) or
   handle_webhook(body, signature) (server-to-server):
   - authenticate the confirmation before touching storage
   - flip the ledger entry to completed and add the plan's credits to the
     owner's balance in one transaction

Idempotency:
- The ledger flip is a conditional UPDATE on status, so a repeated or
  concurrent confirmation for the same order never credits twice; the loser
  gets the already-applied balance back.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from imagifine.core import config
from imagifine.core.config import CreditPlan
from imagifine.core.errors import (
    AccountNotFound,
    BalanceOutOfRange,
    InvalidPlan,
    InvalidSignature,
    OrderPersistenceFailed,
    TransactionNotFound,
    ValidationError,
    VerificationFailed,
)
from imagifine.core.logging_config import PAYMENTS_LOGGER
from imagifine.models.credit_transaction import CreditTransaction, STATUS_COMPLETED
from imagifine.models.user import User
from imagifine.services import ledger_service
from imagifine.services.payment_gateway import (
    PaymentGateway,
    verify_payment_signature,
    verify_webhook_signature,
)

logger = logging.getLogger("imagifine.credits")
payments_logger = logging.getLogger(PAYMENTS_LOGGER)

CAPTURE_EVENTS = {"payment.captured", "order.paid"}
FAILURE_EVENTS = {"payment.failed"}


@dataclass(frozen=True)
class OrderResult:
    order_id: str
    amount: int
    credit_quantity: int
    currency: str


@dataclass(frozen=True)
class VerificationResult:
    credits: int
    transaction_id: str
    already_applied: bool = False


class CreditPurchaseWorkflow:
    def __init__(
        self,
        gateway: PaymentGateway,
        plans: Mapping[str, CreditPlan] = config.CREDIT_PLANS,
        signing_secret: str = config.RAZORPAY_KEY_SECRET,
        webhook_secret: str = config.RAZORPAY_WEBHOOK_SECRET,
        currency: str = config.PAYMENT_CURRENCY,
        max_balance: int = config.MAX_CREDIT_BALANCE,
    ):
        self.gateway = gateway
        self.plans = plans
        self.signing_secret = signing_secret
        self.webhook_secret = webhook_secret
        self.currency = currency
        self.max_balance = max_balance

    # ─────────────────────────────────────────────
    # Order creation
    # ─────────────────────────────────────────────

    def resolve_plan(self, plan_id: str) -> CreditPlan:
        plan = self.plans.get(plan_id)
        if not plan:
            raise InvalidPlan()
        return plan

    async def create_order(self, db: AsyncSession, user_id: str, plan_id: str) -> OrderResult:
        plan = self.resolve_plan(plan_id)

        order_id = await self.gateway.create_order(
            amount=plan.amount,
            currency=self.currency,
            receipt=f"receipt_{uuid.uuid4().hex[:24]}",
            notes={"userId": user_id, "credits": plan.credits, "planId": plan.plan_id},
        )

        try:
            await ledger_service.create_pending(db, order_id, user_id, plan, self.currency)
        except SQLAlchemyError as exc:
            await db.rollback()
            payments_logger.error(
                "ORPHANED order_id=%s user_id=%s plan=%s amount=%s: ledger write failed: %s",
                order_id, user_id, plan.plan_id, plan.amount, exc,
            )
            raise OrderPersistenceFailed(f"Ledger write failed for order {order_id}: {exc}") from exc

        payments_logger.info(
            "order created order_id=%s user_id=%s plan=%s amount=%s credits=%s",
            order_id, user_id, plan.plan_id, plan.amount, plan.credits,
        )
        return OrderResult(
            order_id=order_id,
            amount=plan.amount,
            credit_quantity=plan.credits,
            currency=self.currency,
        )

    # ─────────────────────────────────────────────
    # Confirmation
    # ─────────────────────────────────────────────

    async def verify_payment(
        self, db: AsyncSession, order_id: str, payment_id: str, signature: str, user_id: Optional[str] = None
    ) -> VerificationResult:
        """
        Apply a client-relayed confirmation. When ``user_id`` is given the
        order must belong to that account; another account's order is
        reported as not found so its balance is never returned to the caller.
        """
        # reject forged confirmations before any ledger read
        if not verify_payment_signature(self.signing_secret, order_id, payment_id, signature):
            payments_logger.warning("invalid signature order_id=%s payment_id=%s", order_id, payment_id)
            raise InvalidSignature()

        if user_id is not None:
            entry = await ledger_service.get_by_order_id(db, order_id)
            if not entry or entry.user_id != user_id:
                if entry:
                    payments_logger.warning(
                        "verification for order_id=%s sent by non-owner user_id=%s", order_id, user_id
                    )
                raise TransactionNotFound()

        return await self.apply_confirmed_payment(db, order_id, payment_id)

    async def _current_balance(self, db: AsyncSession, user_id: str) -> int:
        credits = (await db.execute(select(User.credits).where(User.id == user_id))).scalar_one_or_none()
        if credits is None:
            raise AccountNotFound()
        return credits

    async def _already_applied(self, db: AsyncSession, entry: CreditTransaction) -> VerificationResult:
        logger.info("Order %s already completed, skipping credit", entry.order_id)
        return VerificationResult(
            credits=await self._current_balance(db, entry.user_id),
            transaction_id=entry.id,
            already_applied=True,
        )

    async def apply_confirmed_payment(self, db: AsyncSession, order_id: str, payment_id: str) -> VerificationResult:
        """Credit an authenticated confirmation exactly once."""
        entry = await ledger_service.get_by_order_id(db, order_id)
        if not entry:
            raise TransactionNotFound()

        if entry.status == STATUS_COMPLETED:
            return await self._already_applied(db, entry)

        transaction_id = entry.id
        user_id = entry.user_id
        credits = entry.credits

        try:
            claimed = await ledger_service.claim_completion(db, order_id, payment_id)
            if not claimed:
                # a concurrent confirmation completed it first
                await db.rollback()
                entry = await ledger_service.get_by_order_id(db, order_id)
                return await self._already_applied(db, entry)

            result = await db.execute(
                update(User)
                .where(User.id == user_id)
                .values(credits=User.credits + credits)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise VerificationFailed(f"Owner {user_id} of order {order_id} not found")

            new_balance = await self._current_balance(db, user_id)
            await db.commit()
        except VerificationFailed:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            payments_logger.error("verification aborted order_id=%s payment_id=%s: %s", order_id, payment_id, exc)
            raise VerificationFailed(f"Could not apply order {order_id}: {exc}") from exc

        payments_logger.info(
            "payment applied order_id=%s payment_id=%s user_id=%s credits=+%s balance=%s",
            order_id, payment_id, user_id, credits, new_balance,
        )
        return VerificationResult(credits=new_balance, transaction_id=transaction_id)

    async def handle_webhook(self, db: AsyncSession, body: bytes, signature: Optional[str]) -> str:
        """Process a gateway webhook. Returns a short outcome label."""
        if not verify_webhook_signature(self.webhook_secret, body, signature):
            payments_logger.warning("invalid webhook signature")
            raise InvalidSignature("Invalid webhook signature")

        try:
            event = json.loads(body)
            event_type = event.get("event")
            payment = ((event.get("payload") or {}).get("payment") or {}).get("entity") or {}
        except (ValueError, AttributeError) as exc:
            raise ValidationError("Malformed webhook payload") from exc

        order_id = payment.get("order_id")
        payment_id = payment.get("id")

        if event_type in CAPTURE_EVENTS and order_id and payment_id:
            try:
                result = await self.apply_confirmed_payment(db, order_id, payment_id)
            except TransactionNotFound:
                payments_logger.warning("webhook %s for unknown order_id=%s", event_type, order_id)
                return "unknown_order"
            return "already_applied" if result.already_applied else "applied"

        if event_type in FAILURE_EVENTS and order_id:
            changed = await ledger_service.mark_failed(db, order_id, payment_id)
            if changed:
                payments_logger.info("payment failed order_id=%s payment_id=%s", order_id, payment_id)
            return "failed" if changed else "ignored"

        return "ignored"

    # ─────────────────────────────────────────────
    # Administrative overwrite
    # ─────────────────────────────────────────────

    async def set_balance(self, db: AsyncSession, user_id: str, credits: int, actor_id: str) -> int:
        if credits < 0 or credits > self.max_balance:
            raise BalanceOutOfRange(f"Credits must be between 0 and {self.max_balance}")

        try:
            result = await db.execute(
                update(User)
                .where(User.id == user_id)
                .values(credits=credits)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                await db.rollback()
                raise AccountNotFound()
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            raise

        payments_logger.info("balance overwrite user_id=%s credits=%s by=%s", user_id, credits, actor_id)
        return credits
