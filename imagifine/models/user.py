# /imagifine/models/user.py
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, Boolean, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from imagifine.core.config import DEFAULT_CREDITS
from imagifine.core.database import Base


class User(Base):
    """Registered account with its credit balance and pending email verification."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username: Mapped[str] = mapped_column(String(80), unique=True, index=True)
    # stored lower-cased
    email: Mapped[str] = mapped_column(String(190), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))

    credits: Mapped[int] = mapped_column(Integer, default=DEFAULT_CREDITS)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    # Role: user, admin
    role: Mapped[str] = mapped_column(String(20), default="user")

    # Outstanding verification code, cleared once verified
    otp_code: Mapped[Optional[str]] = mapped_column(String(12), nullable=True)
    otp_expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    otp_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_users_credits_non_negative"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def clear_otp(self) -> None:
        self.otp_code = None
        self.otp_expires_at = None
        self.otp_sent_at = None
