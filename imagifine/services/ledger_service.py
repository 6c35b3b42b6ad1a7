# FILE: imagifine/services/ledger_service.py
"""Credit transaction ledger: one row per gateway order."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from imagifine.core.config import CreditPlan
from imagifine.models.credit_transaction import (
    CreditTransaction,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PENDING,
)


async def create_pending(
    db: AsyncSession, order_id: str, user_id: str, plan: CreditPlan, currency: str
) -> CreditTransaction:
    entry = CreditTransaction(
        order_id=order_id,
        user_id=user_id,
        plan_id=plan.plan_id,
        amount=plan.amount,
        currency=currency,
        credits=plan.credits,
        status=STATUS_PENDING,
        payment_id=None,
        created_at=datetime.utcnow(),
    )
    db.add(entry)
    await db.commit()
    return entry


async def get_by_order_id(db: AsyncSession, order_id: str) -> Optional[CreditTransaction]:
    result = await db.execute(
        select(CreditTransaction)
        .where(CreditTransaction.order_id == order_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_for_user(db: AsyncSession, user_id: str, transaction_id: str) -> Optional[CreditTransaction]:
    result = await db.execute(
        select(CreditTransaction).where(
            CreditTransaction.id == transaction_id,
            CreditTransaction.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def list_for_user(db: AsyncSession, user_id: str, limit: int = 100) -> List[CreditTransaction]:
    result = await db.execute(
        select(CreditTransaction)
        .where(CreditTransaction.user_id == user_id)
        .order_by(CreditTransaction.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def claim_completion(db: AsyncSession, order_id: str, payment_id: str) -> bool:
    """
    Conditionally flip an entry to completed inside the caller's transaction.

    Only one writer can match the status predicate, so a concurrent duplicate
    sees rowcount 0 and must treat the order as already applied.
    """
    result = await db.execute(
        update(CreditTransaction)
        .where(
            CreditTransaction.order_id == order_id,
            CreditTransaction.status != STATUS_COMPLETED,
        )
        .values(status=STATUS_COMPLETED, payment_id=payment_id, completed_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def mark_failed(db: AsyncSession, order_id: str, payment_id: Optional[str]) -> bool:
    result = await db.execute(
        update(CreditTransaction)
        .where(
            CreditTransaction.order_id == order_id,
            CreditTransaction.status == STATUS_PENDING,
        )
        .values(status=STATUS_FAILED, payment_id=payment_id)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1
