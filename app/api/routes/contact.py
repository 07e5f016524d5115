from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_session
from app.schemas import ContactMessage, MessageOut, NotificationRequest
from app.services.notification_service import NotificationService

router = APIRouter(prefix="/contact", tags=["contact"])


def get_notification_service(session: AsyncSession = Depends(get_session)) -> NotificationService:
    return NotificationService(session)


@router.post("/send-email", response_model=MessageOut)
async def send_contact_email(
    payload: ContactMessage,
    notification_service: NotificationService = Depends(get_notification_service),
):
    """Forward a contact-form submission to the festival inbox."""
    return await notification_service.send_contact_email(payload)


@router.post("/send-rsvp-email", response_model=MessageOut)
async def send_rsvp_confirmation_email(
    payload: NotificationRequest,
    notification_service: NotificationService = Depends(get_notification_service),
):
    return await notification_service.send_rsvp_confirmation(payload.user_id, payload.event_id)


@router.post("/send-rsvp-cancel-email", response_model=MessageOut)
async def send_rsvp_cancellation_email(
    payload: NotificationRequest,
    notification_service: NotificationService = Depends(get_notification_service),
):
    return await notification_service.send_rsvp_cancellation(payload.user_id, payload.event_id)
