from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app.schemas import EventCreate, RateRequest
from app.db.repositories import (
    add_feedback,
    create_event as db_create_event,
    delete_event as db_delete_event,
    event_to_dict,
    get_event as db_get_event,
    get_event_by_title,
    get_user as db_get_user,
    list_events as db_list_events,
)
from app.cache.cache_decorators import invalidate_stats
from app.core.config import settings
from app.core.errors import ConflictError, ForbiddenError, InternalError, InvalidInputError, NotFoundError
from app.core.logging import logger
from app.core.timeutils import combine_local
from app.services.transaction import run_transaction
from typing import List, Optional

REQUIRED_FIELDS = ("title", "description", "category", "date", "time", "location", "max_attendees")
DUPLICATE_TITLE = "An event with this title already exists"


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class EventService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_event(self, payload: EventCreate) -> dict:
        """
        Validate and persist a new event. ``date`` and ``time`` are local to
        the festival timezone and are stored as one UTC instant.

        Raises:
            InvalidInputError: If a field is missing or cannot be parsed
            ConflictError: If another event already has this title
        """
        if any(_is_blank(getattr(payload, field)) for field in REQUIRED_FIELDS):
            raise InvalidInputError("All fields are required")

        try:
            start_time = combine_local(payload.date, payload.time, settings.EVENT_TIMEZONE)
        except ValueError:
            raise InvalidInputError("Invalid date or time")

        try:
            max_attendees = int(payload.max_attendees)
        except (TypeError, ValueError):
            raise InvalidInputError("maxAttendees must be an integer")
        if max_attendees < 1:
            raise InvalidInputError("maxAttendees must be a positive integer")

        title = payload.title.strip()
        if await get_event_by_title(self.session, title):
            logger.warning(f"Event creation rejected: title '{title}' is taken")
            raise ConflictError(DUPLICATE_TITLE)

        try:
            event = await db_create_event(
                self.session,
                title=title,
                description=payload.description,
                category=payload.category,
                location=payload.location,
                start_time=start_time,
                max_attendees=max_attendees,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent create of the same title
            await self.session.rollback()
            raise ConflictError(DUPLICATE_TITLE) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(f"Error creating event: {e}")
            raise InternalError("Failed to create event") from e

        logger.info(f"Event {event.id} '{event.title}' created for {start_time.isoformat()}")
        await invalidate_stats()
        return {"message": "Event created successfully", "eventId": event.id}

    async def list_events(self) -> List[dict]:
        events = await db_list_events(self.session)
        return [event_to_dict(ev) for ev in events]

    async def get_event(self, event_id: str, user_id: Optional[str] = None) -> dict:
        ev = await db_get_event(self.session, event_id)
        if not ev:
            raise NotFoundError("Event not found")
        data = event_to_dict(ev)
        data["userHasRSVPed"] = bool(user_id) and ev.has_attendee(user_id)
        return data

    async def rate_event(self, payload: RateRequest) -> dict:
        """
        Record a rating (and optional comment) from an attendee.

        Ratings are stored as given; no range is enforced.

        Raises:
            NotFoundError: If the event or user does not exist
            ForbiddenError: If the user does not currently hold an RSVP for the event
        """
        logger.info(f"Processing rating & comment for event: {payload.event_id} by user: {payload.user_id}")

        async def work():
            ev = await db_get_event(self.session, payload.event_id, for_update=True)
            if not ev:
                raise NotFoundError("Event not found")
            user = await db_get_user(self.session, payload.user_id)
            if not user:
                raise NotFoundError("User not found")
            if not ev.has_attendee(payload.user_id):
                logger.warning(f"Rating rejected: user {payload.user_id} is not attending event {ev.id}")
                raise ForbiddenError("You must RSVP to rate and comment on this event.")

            comment = payload.comment.strip() if payload.comment else None
            add_feedback(ev, payload.user_id, payload.rating, comment or None)
            await self.session.commit()
            return ev

        ev = await run_transaction(self.session, work, "Failed to submit rating and comment")
        await invalidate_stats()
        return {
            "message": "Rating and comment submitted successfully",
            "updatedRatings": ev.ratings,
            "updatedComments": ev.comments,
        }

    async def delete_event(self, event_id: str) -> dict:
        """Delete an event together with its attendance and feedback. RSVP history is kept."""

        async def work():
            ev = await db_get_event(self.session, event_id, for_update=True)
            if not ev:
                raise NotFoundError("Event not found")
            released = ev.attending
            await db_delete_event(self.session, ev)
            await self.session.commit()
            return released

        released = await run_transaction(self.session, work, "Failed to delete event")
        logger.info(f"Event {event_id} deleted, {released} RSVP(s) released")
        await invalidate_stats()
        return {"message": "Event deleted successfully", "eventId": event_id}
