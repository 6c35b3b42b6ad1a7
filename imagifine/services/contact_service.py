# FILE: imagifine/services/contact_service.py
import logging
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from imagifine.core import config
from imagifine.core.errors import ContactNotFound, NotificationFailed
from imagifine.models.contact import ContactSubmission
from imagifine.services.notification_service import (
    NotificationSender,
    send_contact_admin_notice,
    send_contact_confirmation,
)

logger = logging.getLogger("imagifine.contact")


async def submit(
    db: AsyncSession,
    notifier: NotificationSender,
    first_name: str,
    last_name: str,
    email: str,
    query: str,
    admin_email: str = config.ADMIN_EMAIL,
) -> ContactSubmission:
    """
    Persist a submission, then mail the sender and the admin. The submission
    stays stored when delivery fails; the failure is still raised.
    """
    contact = ContactSubmission(
        first_name=first_name,
        last_name=last_name or "",
        email=email,
        query=query,
        status="new",
    )
    db.add(contact)
    await db.commit()

    try:
        await send_contact_confirmation(notifier, email, first_name, query)
        if admin_email:
            await send_contact_admin_notice(notifier, admin_email, first_name, last_name or "", email, query)
        else:
            logger.warning("ADMIN_EMAIL not configured, skipping admin notice for contact %s", contact.id)
    except NotificationFailed:
        logger.error("Contact %s stored but email delivery failed", contact.id)
        raise

    return contact


async def list_all(db: AsyncSession) -> List[ContactSubmission]:
    result = await db.execute(select(ContactSubmission).order_by(ContactSubmission.created_at.desc()))
    return list(result.scalars().all())


async def update_status(db: AsyncSession, contact_id: str, status: str) -> ContactSubmission:
    contact = (
        await db.execute(select(ContactSubmission).where(ContactSubmission.id == contact_id))
    ).scalar_one_or_none()
    if not contact:
        raise ContactNotFound()

    contact.status = status
    contact.updated_at = datetime.utcnow()
    await db.commit()
    return contact
