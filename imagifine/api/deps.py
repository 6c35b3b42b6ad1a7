# FILE: imagifine/api/deps.py

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from imagifine.core.database import get_db
from imagifine.core.errors import AccountNotFound, AuthError, ForbiddenError
from imagifine.models.user import User
from imagifine.services import account_store
from imagifine.services.account_service import AccountService
from imagifine.services.auth_service import decode_token
from imagifine.services.credit_service import CreditPurchaseWorkflow
from imagifine.services.notification_service import NotificationSender, SmtpNotificationSender
from imagifine.services.payment_gateway import PaymentGateway, RazorpayGateway

security = HTTPBearer(auto_error=False)


async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(security),
        db: AsyncSession = Depends(get_db),
) -> User:
    if not credentials or not credentials.credentials:
        raise AuthError("Not authenticated")

    user_id = decode_token(credentials.credentials)

    user = await account_store.get_by_id(db, user_id)
    if not user:
        raise AccountNotFound()
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise ForbiddenError()
    return user


# External services are built per request so tests can override them.

def get_notifier() -> NotificationSender:
    return SmtpNotificationSender()


def get_payment_gateway() -> PaymentGateway:
    return RazorpayGateway()


def get_account_service(notifier: NotificationSender = Depends(get_notifier)) -> AccountService:
    return AccountService(notifier)


def get_credit_workflow(gateway: PaymentGateway = Depends(get_payment_gateway)) -> CreditPurchaseWorkflow:
    return CreditPurchaseWorkflow(gateway)
