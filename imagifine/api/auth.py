# FILE: imagifine/api/auth.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from imagifine.api.deps import get_account_service, get_current_user
from imagifine.core.database import get_db
from imagifine.models.user import User
from imagifine.schemas.auth import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResendOtpRequest,
    TokenResponse,
    UserDetail,
    UserPublic,
    VerifyOtpRequest,
)
from imagifine.services.account_service import AccountService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    data: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
):
    user, created = await accounts.register(db, data.username, data.email, data.password)
    if not created:
        response.status_code = 200
        return RegisterResponse(message="User exists but not verified. New OTP sent.", user_id=user.id)
    return RegisterResponse(message="Registration initiated. Please verify your email with OTP", user_id=user.id)


@router.post("/verify-otp", response_model=TokenResponse)
async def verify_otp(
    data: VerifyOtpRequest,
    db: AsyncSession = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
):
    user, token = await accounts.verify_otp(db, data.user_id, data.otp)
    return TokenResponse(
        message="Email verified successfully",
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.post("/resend-otp", response_model=MessageResponse)
async def resend_otp(
    data: ResendOtpRequest,
    db: AsyncSession = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
):
    await accounts.resend_otp(db, data.user_id)
    return MessageResponse(message="New OTP sent successfully")


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
):
    user, token = await accounts.login(db, data.email, data.password)
    return TokenResponse(token=token, user=UserPublic.model_validate(user))


@router.get("/user", response_model=UserDetail)
async def get_user(user: User = Depends(get_current_user)):
    return UserDetail.model_validate(user)
