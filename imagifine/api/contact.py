# FILE: imagifine/api/contact.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from imagifine.api.deps import get_notifier, require_admin
from imagifine.core.database import get_db
from imagifine.models.user import User
from imagifine.schemas.contact import (
    ContactItem,
    ContactListResponse,
    ContactStatusRequest,
    ContactStatusResponse,
    ContactSubmitRequest,
    ContactSubmitResponse,
)
from imagifine.services import contact_service
from imagifine.services.notification_service import NotificationSender

router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("/submit", response_model=ContactSubmitResponse, status_code=201)
async def submit_contact(
    data: ContactSubmitRequest,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationSender = Depends(get_notifier),
):
    contact = await contact_service.submit(
        db, notifier, data.first_name, data.last_name, data.email, data.query
    )
    return ContactSubmitResponse(message="Your message has been sent successfully!", id=contact.id)


@router.get("/all", response_model=ContactListResponse)
async def list_contacts(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    contacts = await contact_service.list_all(db)
    return ContactListResponse(contacts=[ContactItem.model_validate(c) for c in contacts])


@router.patch("/{contact_id}/status", response_model=ContactStatusResponse)
async def update_contact_status(
    contact_id: str,
    data: ContactStatusRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    contact = await contact_service.update_status(db, contact_id, data.status)
    return ContactStatusResponse(contact=ContactItem.model_validate(contact))
