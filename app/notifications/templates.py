"""Plain-text templates for festival emails."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.core.timeutils import as_utc


@dataclass
class EmailMessage:
    to_address: str
    subject: str
    text_body: str
    reply_to: Optional[str] = None


RSVP_CONFIRMATION = """Hello {fullname},

You have successfully RSVP'd for the event "{title}".

Event Details:
- Date: {when}
- Location: {location}

We look forward to seeing you there!

Best Regards,
{festival} Team"""

RSVP_CANCELLATION = """Hello {fullname},

You have successfully CANCELLED your RSVP for the event "{title}".

If this was a mistake, you can RSVP again through the event page.

Best Regards,
{festival} Team"""

CONTACT_FORM = """Name: {name}
Email: {email}

Message:
{message}"""


def format_event_time(value) -> str:
    """Render an event start (datetime or ISO string) in the festival's timezone."""
    if not value:
        return "No Date Provided"
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    local = as_utc(value).astimezone(ZoneInfo(settings.EVENT_TIMEZONE))
    return local.strftime("%Y-%m-%d %H:%M")


def rsvp_confirmation(to_address: str, fullname: str, title: str, start_time, location: str) -> EmailMessage:
    return EmailMessage(
        to_address=to_address,
        subject=f"RSVP Confirmation: {title}",
        text_body=RSVP_CONFIRMATION.format(
            fullname=fullname or "there",
            title=title,
            when=format_event_time(start_time),
            location=location or "TBA",
            festival=settings.FESTIVAL_NAME,
        ),
    )


def rsvp_cancellation(to_address: str, fullname: str, title: str) -> EmailMessage:
    return EmailMessage(
        to_address=to_address,
        subject=f"RSVP Cancellation: {title}",
        text_body=RSVP_CANCELLATION.format(
            fullname=fullname or "there",
            title=title,
            festival=settings.FESTIVAL_NAME,
        ),
    )


def contact_form(name: str, email: str, subject: str, message: str) -> EmailMessage:
    """Contact-form submissions go to the festival inbox; replies go back to the sender."""
    return EmailMessage(
        to_address=settings.EMAILS_FROM,
        subject=f"Contact Form Submission: {subject}",
        text_body=CONTACT_FORM.format(name=name, email=email, message=message),
        reply_to=email,
    )
