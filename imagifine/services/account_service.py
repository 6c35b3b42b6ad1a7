# FILE: imagifine/services/account_service.py
"""
Account lifecycle: registration with an emailed one-time code, verification,
resend and login.

Registration reuses an unverified account that matches the email or
username and re-issues its code. A freshly created account is deleted again
if the first code cannot be delivered, so no unverifiable account is left
behind.
"""

import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from imagifine.core import config
from imagifine.core.errors import (
    AccountNotFound,
    AlreadyExists,
    InvalidCredentials,
    InvalidOTP,
    NotificationFailed,
    OTPExpired,
    RateLimitedError,
)
from imagifine.models.user import User
from imagifine.services import account_store
from imagifine.services.auth_service import create_token, hash_password, verify_password
from imagifine.services.notification_service import NotificationSender, send_otp

logger = logging.getLogger("imagifine.auth")


def generate_otp(length: int = config.OTP_LENGTH) -> str:
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


class AccountService:
    def __init__(
        self,
        notifier: NotificationSender,
        otp_ttl: timedelta = timedelta(minutes=config.OTP_TTL_MINUTES),
        resend_cooldown: timedelta = timedelta(seconds=config.OTP_RESEND_COOLDOWN_SECONDS),
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.notifier = notifier
        self.otp_ttl = otp_ttl
        self.resend_cooldown = resend_cooldown
        self.clock = clock

    def _issue_otp(self, user: User) -> str:
        now = self.clock()
        code = generate_otp()
        user.otp_code = code
        user.otp_expires_at = now + self.otp_ttl
        user.otp_sent_at = now
        return code

    async def register(self, db: AsyncSession, username: str, email: str, password: str) -> Tuple[User, bool]:
        """Returns (account, created)."""
        email = email.strip().lower()
        existing = await account_store.find_by_email_or_username(db, email, username)

        if existing and existing.is_verified:
            raise AlreadyExists()

        if existing:
            code = self._issue_otp(existing)
            await account_store.save(db, existing)
            # failure here leaves the account as it was, still unverified
            await send_otp(self.notifier, existing.email, code)
            logger.info("Re-issued OTP for unverified user %s", existing.id)
            return existing, False

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            credits=config.DEFAULT_CREDITS,
            is_verified=False,
            role="admin" if email in config.ADMIN_EMAILS else "user",
        )
        code = self._issue_otp(user)
        await account_store.create(db, user)

        try:
            await send_otp(self.notifier, user.email, code)
        except NotificationFailed:
            logger.warning("OTP delivery failed for new user %s, removing account", user.id)
            await account_store.delete(db, user)
            raise

        logger.info("Registered user %s (%s)", user.id, user.username)
        return user, True

    async def verify_otp(self, db: AsyncSession, user_id: str, code: str) -> Tuple[User, str]:
        user = await account_store.get_by_id(db, user_id)
        if not user:
            raise AccountNotFound()

        if not user.otp_code or not user.otp_expires_at:
            raise InvalidOTP()

        if self.clock() > user.otp_expires_at:
            raise OTPExpired()

        if not hmac.compare_digest(code.encode("utf-8"), user.otp_code.encode("utf-8")):
            raise InvalidOTP()

        user.is_verified = True
        user.clear_otp()
        await account_store.save(db, user)

        logger.info("User %s verified", user.id)
        return user, create_token(user.id, user.email)

    async def resend_otp(self, db: AsyncSession, user_id: str) -> User:
        user = await account_store.get_by_id(db, user_id)
        if not user:
            raise AccountNotFound()

        now = self.clock()
        if user.otp_sent_at and now - user.otp_sent_at < self.resend_cooldown:
            raise RateLimitedError()

        code = self._issue_otp(user)
        await account_store.save(db, user)
        await send_otp(self.notifier, user.email, code)
        return user

    async def login(self, db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
        user = await account_store.get_by_email(db, email)
        if not user or not verify_password(password, user.password_hash):
            raise InvalidCredentials()
        if not user.is_verified:
            raise InvalidCredentials("Please verify your email before logging in")
        return user, create_token(user.id, user.email)
