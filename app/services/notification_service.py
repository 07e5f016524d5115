"""Notification service: direct email sends and the RSVP notification queue."""
import asyncio
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import EmailDeliveryError, InternalError, NotFoundError
from app.core.logging import logger
from app.core.timeutils import isoformat
from app.db.models import Event, User
from app.db.repositories import get_event as db_get_event, get_user as db_get_user
from app.events import publisher
from app.notifications import templates
from app.notifications.email import EmailSender, get_email_sender
from app.schemas import ContactMessage

RSVP_CREATED = "rsvp.created"
RSVP_CANCELLED = "rsvp.cancelled"


def rsvp_notification_payload(kind: str, user: User, event: Event) -> dict:
    """
    Snapshot everything the worker needs, so delivery does not depend on the
    user or event still existing when the message is consumed.
    """
    return {
        "type": kind,
        "notification_id": str(uuid.uuid4()),
        "user_id": user.id,
        "event_id": event.id,
        "email": user.email,
        "fullname": user.fullname,
        "event_title": event.title,
        "start_time": isoformat(event.start_time),
        "location": event.location,
    }


def build_rsvp_message(payload: dict) -> Optional[templates.EmailMessage]:
    kind = payload.get("type")
    if kind == RSVP_CREATED:
        return templates.rsvp_confirmation(
            payload["email"], payload.get("fullname"), payload["event_title"],
            payload.get("start_time"), payload.get("location"),
        )
    if kind == RSVP_CANCELLED:
        return templates.rsvp_cancellation(payload["email"], payload.get("fullname"), payload["event_title"])
    return None


async def dispatch_rsvp_notification(kind: str, user: User, event: Event) -> bool:
    """
    Enqueue a notification after the RSVP transaction has committed.

    Never raises: a failed or slow enqueue is logged and the caller carries on.

    Returns:
        True if the message was handed to the broker
    """
    payload = rsvp_notification_payload(kind, user, event)
    try:
        await asyncio.wait_for(
            publisher.publish_event(kind, payload),
            timeout=settings.NOTIFICATION_ENQUEUE_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error(
            f"Timed out after {settings.NOTIFICATION_ENQUEUE_TIMEOUT_SECONDS}s enqueueing {kind} notification "
            f"for user {user.id} / event {event.id}"
        )
        return False
    except Exception as e:
        logger.error(f"Failed to enqueue {kind} notification for user {user.id} / event {event.id}: {e}")
        return False
    logger.debug(f"Enqueued {kind} notification {payload['notification_id']}")
    return True


class NotificationService:
    """Sends emails synchronously for the contact endpoints."""

    def __init__(self, session: AsyncSession, sender: EmailSender = None):
        self.session = session
        self.sender = sender or get_email_sender()

    async def _deliver(self, message: templates.EmailMessage, failure_message: str) -> None:
        try:
            await asyncio.wait_for(self.sender.send(message), timeout=settings.NOTIFICATION_TIMEOUT_SECONDS)
        except asyncio.TimeoutError as e:
            logger.error(f"Timed out sending '{message.subject}' to {message.to_address}")
            raise InternalError(failure_message) from e
        except EmailDeliveryError as e:
            logger.error(f"Error sending '{message.subject}' to {message.to_address}: {e.message}")
            raise InternalError(failure_message) from e

    async def _load(self, user_id: str, event_id: str):
        user = await db_get_user(self.session, user_id)
        if not user:
            raise NotFoundError("User not found")
        event = await db_get_event(self.session, event_id)
        if not event:
            raise NotFoundError("Event not found")
        return user, event

    async def send_contact_email(self, payload: ContactMessage) -> dict:
        message = templates.contact_form(payload.name, payload.email, payload.subject, payload.message)
        await self._deliver(message, "Failed to send email")
        return {"message": "Email sent successfully!"}

    async def send_rsvp_confirmation(self, user_id: str, event_id: str) -> dict:
        logger.info(f"Sending RSVP email for event: {event_id} to user: {user_id}")
        user, event = await self._load(user_id, event_id)
        message = templates.rsvp_confirmation(user.email, user.fullname, event.title, event.start_time, event.location)
        await self._deliver(message, "Failed to send RSVP confirmation email")
        return {"message": "RSVP confirmation email sent successfully!"}

    async def send_rsvp_cancellation(self, user_id: str, event_id: str) -> dict:
        logger.info(f"Sending RSVP cancellation email for event: {event_id} to user: {user_id}")
        user, event = await self._load(user_id, event_id)
        message = templates.rsvp_cancellation(user.email, user.fullname, event.title)
        await self._deliver(message, "Failed to send RSVP cancellation email")
        return {"message": "RSVP cancellation email sent successfully!"}
