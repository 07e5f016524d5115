"""Database models package."""
from app.db.models.user import User, RoleEnum
from app.db.models.event import Event
from app.db.models.attendee import EventAttendee
from app.db.models.feedback import EventFeedback
from app.db.models.rsvp import RSVP

__all__ = ["User", "RoleEnum", "Event", "EventAttendee", "EventFeedback", "RSVP"]
