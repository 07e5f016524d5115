"""
RSVP lifecycle: the join and cancel transitions between a user and an event.

Each (user, event) pair is either NOT_RSVPD or RSVPD. ``join`` and ``cancel``
are the only transitions, and both are allowed only while ``now < startTime``.
Once the event starts the pair is frozen.
"""
import enum
from typing import Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache.cache_decorators import invalidate_stats
from app.core.errors import ConflictError, InvalidStateError, NotFoundError
from app.core.logging import logger
from app.core.timeutils import Clock, as_utc, utcnow
from app.db.models import Event, User
from app.db.repositories import (
    add_attendee,
    get_event as db_get_event,
    get_user as db_get_user,
    record_rsvp,
    remove_attendee,
)
from app.services.notification_service import RSVP_CANCELLED, RSVP_CREATED, dispatch_rsvp_notification
from app.services.transaction import run_transaction

DUPLICATE_RSVP = "You have already RSVP'd for this event!"


class RSVPState(str, enum.Enum):
    not_rsvpd = "NOT_RSVPD"
    rsvpd = "RSVPD"


def rsvp_state(event: Event, user_id: str) -> RSVPState:
    return RSVPState.rsvpd if event.has_attendee(user_id) else RSVPState.not_rsvpd


def window_open(event: Event, now) -> bool:
    """RSVP changes are accepted strictly before the event starts."""
    return as_utc(now) < as_utc(event.start_time)


class RSVPService:
    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        self.session = session
        self.clock = clock

    async def _lock_pair(self, event_id: str, user_id: str) -> Tuple[Event, User]:
        # Always event first, then user, so concurrent transitions lock in the same order
        event = await db_get_event(self.session, event_id, for_update=True)
        if not event:
            raise NotFoundError("Event not found")
        user = await db_get_user(self.session, user_id, for_update=True)
        if not user:
            raise NotFoundError("User not found")
        return event, user

    async def join(self, event_id: str, user_id: str) -> dict:
        logger.info(f"Processing RSVP for event: {event_id} by user: {user_id}")

        async def work():
            event, user = await self._lock_pair(event_id, user_id)
            if not window_open(event, self.clock()):
                logger.warning(f"RSVP rejected: event {event_id} has already occurred")
                raise InvalidStateError("Event has already occurred. RSVP not allowed.")
            if rsvp_state(event, user_id) is RSVPState.rsvpd:
                logger.warning(f"RSVP rejected: user {user_id} already attends event {event_id}")
                raise ConflictError(DUPLICATE_RSVP)

            add_attendee(event, user_id)
            record_rsvp(self.session, user_id, event)
            try:
                await self.session.commit()
            except IntegrityError as e:
                # A concurrent join for the same pair won the race
                raise ConflictError(DUPLICATE_RSVP) from e
            return event, user

        event, user = await run_transaction(self.session, work, "Failed to process RSVP")
        logger.info(f"User {user_id} RSVP'd for event {event_id} ({event.attending} attending)")

        await invalidate_stats()
        await dispatch_rsvp_notification(RSVP_CREATED, user, event)
        return {"message": "RSVP successful", "eventId": event_id}

    async def cancel(self, event_id: str, user_id: str) -> dict:
        logger.info(f"Cancelling RSVP for event: {event_id} by user: {user_id}")

        async def work():
            event, user = await self._lock_pair(event_id, user_id)
            if not window_open(event, self.clock()):
                logger.warning(f"Cancellation rejected: event {event_id} has already started")
                raise InvalidStateError("Event has already started. Cancellation not allowed.")

            removed = remove_attendee(event, user_id)
            await self.session.commit()
            return event, user, removed

        event, user, removed = await run_transaction(self.session, work, "Failed to cancel RSVP")
        if not removed:
            logger.info(f"User {user_id} had no RSVP for event {event_id}; nothing to cancel")
            return {"message": "RSVP cancelled successfully", "eventId": event_id}

        logger.info(f"User {user_id} cancelled RSVP for event {event_id} ({event.attending} attending)")
        await invalidate_stats()
        await dispatch_rsvp_notification(RSVP_CANCELLED, user, event)
        return {"message": "RSVP cancelled successfully", "eventId": event_id}
