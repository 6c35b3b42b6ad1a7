# /imagifine/models/credit_transaction.py
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from imagifine.core.database import Base

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


class CreditTransaction(Base):
    """One credit purchase attempt, keyed by the gateway's order id."""
    __tablename__ = "credit_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)

    plan_id: Mapped[str] = mapped_column(String(40))

    # Amount in the smallest currency unit (paise)
    amount: Mapped[int] = mapped_column(Integer)
    currency: Mapped[str] = mapped_column(String(3), default="INR")

    # Credits granted once completed
    credits: Mapped[int] = mapped_column(Integer)

    # Status: pending, completed, failed
    status: Mapped[str] = mapped_column(String(20), default=STATUS_PENDING, index=True)

    payment_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'completed', 'failed')", name="ck_credit_transactions_status"),
        CheckConstraint("credits > 0", name="ck_credit_transactions_credits_positive"),
    )

    def __repr__(self) -> str:
        return f"<CreditTransaction(order_id={self.order_id}, user_id={self.user_id}, status={self.status})>"
