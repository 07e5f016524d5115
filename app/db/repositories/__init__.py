"""
Repository layer for database operations.

Async functions for reading and writing users, events, attendance, feedback
and RSVP history. Single-row creates commit on their own; the writes that make
up an RSVP transition only stage changes and leave the commit to the service
that owns the transaction.
"""
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.user import User
from app.db.models.event import Event
from app.db.models.attendee import EventAttendee
from app.db.models.feedback import EventFeedback
from app.db.models.rsvp import RSVP
from app.core.timeutils import isoformat
from typing import Optional, List, Tuple


# Users

async def create_user(
    db: AsyncSession,
    uid: str,
    email: str,
    hashed_password: str,
    fullname: Optional[str] = None,
    age: Optional[int] = None,
    gender: Optional[str] = None,
    role: str = "user",
) -> User:
    """
    Persist a newly registered user under the UID issued for it.

    Returns:
        Created User object
    """
    user = User(
        id=uid,
        email=email,
        hashed_password=hashed_password,
        fullname=fullname,
        age=age,
        gender=gender,
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user(db: AsyncSession, user_id: str, for_update: bool = False) -> Optional[User]:
    """
    Retrieve user by ID.

    Args:
        db: Database session
        user_id: User's UID
        for_update: Lock the row for the rest of the current transaction

    Returns:
        User object if found, None otherwise
    """
    q = select(User).where(User.id == user_id)
    if for_update:
        q = q.with_for_update().execution_options(populate_existing=True)
    res = await db.execute(q)
    return res.scalars().first()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    q = select(User).where(User.email == email)
    res = await db.execute(q)
    return res.scalars().first()


async def list_users(db: AsyncSession) -> List[User]:
    res = await db.execute(select(User))
    return list(res.scalars().all())


async def get_users_by_ids(db: AsyncSession, user_ids: List[str]) -> List[User]:
    if not user_ids:
        return []
    res = await db.execute(select(User).where(User.id.in_(user_ids)))
    return list(res.scalars().all())


async def count_users(db: AsyncSession) -> int:
    res = await db.execute(select(func.count(User.id)))
    return res.scalar() or 0


async def list_rsvped_events_for_user(db: AsyncSession, user_id: str) -> List[Tuple[str, str]]:
    """
    Events the user currently attends, in the order they were joined.

    Returns:
        List of (event_id, title) pairs
    """
    q = (
        select(Event.id, Event.title)
        .join(EventAttendee, EventAttendee.event_id == Event.id)
        .where(EventAttendee.user_id == user_id)
        .order_by(EventAttendee.id)
    )
    res = await db.execute(q)
    return [(row.id, row.title) for row in res.all()]


# Events

async def create_event(
    db: AsyncSession,
    title: str,
    description: str,
    category: str,
    location: str,
    start_time,
    max_attendees: int,
) -> Event:
    ev = Event(
        title=title,
        description=description,
        category=category,
        location=location,
        start_time=start_time,
        max_attendees=max_attendees,
    )
    db.add(ev)
    await db.commit()
    await db.refresh(ev)
    return ev


async def get_event(db: AsyncSession, event_id: str, for_update: bool = False) -> Optional[Event]:
    """
    Retrieve an event with its attendees and feedback loaded.

    Args:
        db: Database session
        event_id: Event ID
        for_update: Lock the row for the rest of the current transaction

    Returns:
        Event object if found, None otherwise
    """
    q = select(Event).where(Event.id == event_id)
    if for_update:
        q = q.with_for_update().execution_options(populate_existing=True)
    res = await db.execute(q)
    return res.scalars().first()


async def get_event_by_title(db: AsyncSession, title: str) -> Optional[Event]:
    res = await db.execute(select(Event).where(Event.title == title))
    return res.scalars().first()


async def list_events(db: AsyncSession) -> List[Event]:
    res = await db.execute(select(Event).order_by(Event.start_time, Event.created_at))
    return list(res.scalars().all())


async def count_events(db: AsyncSession) -> int:
    res = await db.execute(select(func.count(Event.id)))
    return res.scalar() or 0


async def delete_event(db: AsyncSession, event: Event) -> None:
    """Stage deletion of the event; attendance and feedback rows cascade with it."""
    await db.delete(event)


def event_to_dict(ev: Event) -> dict:
    """Public projection of an event, keyed the way API clients expect it."""
    return {
        'id': ev.id,
        'title': ev.title,
        'description': ev.description,
        'category': ev.category,
        'location': ev.location,
        'startTime': isoformat(ev.start_time),
        'RSVPs': ev.attendee_ids,
        'attending': ev.attending,
        'maxAttendees': ev.max_attendees,
        'Comments': ev.comments,
        'Ratings': ev.ratings,
    }


# Attendance

def add_attendee(event: Event, user_id: str) -> EventAttendee:
    """Stage a new attendance row through the event's collection so it stays in sync."""
    attendee = EventAttendee(event_id=event.id, user_id=user_id)
    event.attendees.append(attendee)
    return attendee


def remove_attendee(event: Event, user_id: str) -> bool:
    """
    Stage removal of the user's attendance row.

    Returns:
        True if a row was removed, False if the user was not attending
    """
    for attendee in list(event.attendees):
        if attendee.user_id == user_id:
            event.attendees.remove(attendee)
            return True
    return False


async def attendance_by_title(db: AsyncSession) -> List[Tuple[str, int]]:
    """Attendee count per event, including events nobody has joined."""
    q = (
        select(Event.title, func.count(EventAttendee.id))
        .outerjoin(EventAttendee, EventAttendee.event_id == Event.id)
        .group_by(Event.id, Event.title)
        .order_by(Event.start_time)
    )
    res = await db.execute(q)
    return [(title, count) for title, count in res.all()]


# Feedback

def add_feedback(event: Event, user_id: str, rating: int, comment: Optional[str] = None) -> EventFeedback:
    fb = EventFeedback(event_id=event.id, user_id=user_id, rating=rating, comment=comment)
    event.feedback.append(fb)
    return fb


async def list_all_ratings(db: AsyncSession) -> List[int]:
    res = await db.execute(select(EventFeedback.rating))
    return list(res.scalars().all())


# RSVP history

def record_rsvp(db: AsyncSession, user_id: str, event: Event) -> RSVP:
    """Stage an audit row carrying a snapshot of the event title."""
    r = RSVP(user_id=user_id, event_id=event.id, event_name=event.title)
    db.add(r)
    return r


async def list_rsvps_for_event(db: AsyncSession, event_id: str) -> List[RSVP]:
    q = select(RSVP).where(RSVP.event_id == event_id).order_by(RSVP.timestamp)
    res = await db.execute(q)
    return list(res.scalars().all())
