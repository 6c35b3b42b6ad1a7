# FILE: imagifine/services/account_store.py
"""Keyed access to persisted accounts."""

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from imagifine.core.errors import DuplicateAccount
from imagifine.models.user import User


async def get_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
    return (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()


async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
    email = (email or "").strip().lower()
    return (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()


async def find_by_email_or_username(db: AsyncSession, email: str, username: str) -> Optional[User]:
    email = (email or "").strip().lower()
    result = await db.execute(
        select(User)
        .where(or_(User.email == email, User.username == username))
        .order_by(User.created_at)
    )
    return result.scalars().first()


async def create(db: AsyncSession, user: User) -> User:
    user.email = user.email.strip().lower()
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateAccount()
    return user


async def save(db: AsyncSession, user: User) -> User:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateAccount()
    return user


async def delete(db: AsyncSession, user: User) -> None:
    await db.delete(user)
    await db.commit()
