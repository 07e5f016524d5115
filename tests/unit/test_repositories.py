"""
Unit tests for repository functions.
Tests user and event persistence, attendance rows and the projections built on them.
"""
import pytest
from datetime import timedelta

from app.db.models import RoleEnum
from app.db.repositories import (
    add_attendee,
    add_feedback,
    attendance_by_title,
    count_events,
    count_users,
    create_user,
    event_to_dict,
    get_event,
    get_user,
    get_user_by_email,
    get_users_by_ids,
    list_all_ratings,
    list_events,
    list_rsvped_events_for_user,
    remove_attendee,
)
from conftest import make_event, make_user


@pytest.mark.unit
@pytest.mark.asyncio
class TestUserRepository:
    """Test user repository functions."""

    async def test_create_user(self, db_session):
        user = await create_user(
            db_session,
            uid="abc123",
            email="newuser@example.com",
            hashed_password="hashed",
            fullname="New User",
            age=31,
            gender="Female",
        )

        assert user.id == "abc123"
        assert user.role == RoleEnum.user
        assert user.created_at is not None

    async def test_get_user_by_email(self, db_session, test_user):
        user = await get_user_by_email(db_session, test_user.email)

        assert user is not None
        assert user.id == test_user.id

    async def test_get_user_not_found(self, db_session):
        assert await get_user(db_session, "ghost") is None
        assert await get_user_by_email(db_session, "nobody@example.com") is None

    async def test_get_users_by_ids_skips_unknown(self, db_session, test_user):
        users = await get_users_by_ids(db_session, [test_user.id, "ghost"])

        assert [u.id for u in users] == [test_user.id]
        assert await get_users_by_ids(db_session, []) == []

    async def test_count_users(self, db_session, test_user):
        await make_user(db_session, "user-2")

        assert await count_users(db_session) == 2


@pytest.mark.unit
@pytest.mark.asyncio
class TestEventRepository:
    """Test event repository functions."""

    async def test_list_events_by_start_time(self, db_session):
        later = await make_event(db_session, title="Closing Concert", starts_in=timedelta(days=5))
        sooner = await make_event(db_session, title="Food Market", starts_in=timedelta(days=1))

        events = await list_events(db_session)

        assert [e.id for e in events] == [sooner.id, later.id]
        assert await count_events(db_session) == 2

    async def test_event_to_dict(self, db_session, test_user, test_event):
        add_attendee(test_event, test_user.id)
        add_feedback(test_event, test_user.id, 5, "Brilliant")
        add_feedback(test_event, test_user.id, 3)
        await db_session.commit()

        data = event_to_dict(test_event)

        assert data["RSVPs"] == [test_user.id]
        assert data["attending"] == 1
        assert data["Ratings"] == [5, 3]
        assert data["Comments"] == ["Brilliant"]
        assert data["maxAttendees"] == 100


@pytest.mark.unit
@pytest.mark.asyncio
class TestAttendanceRepository:
    async def test_add_and_remove_attendee(self, db_session, test_user, test_event):
        add_attendee(test_event, test_user.id)
        await db_session.commit()

        assert await list_rsvped_events_for_user(db_session, test_user.id) == [(test_event.id, "Jazz Night")]

        assert remove_attendee(test_event, test_user.id) is True
        assert remove_attendee(test_event, test_user.id) is False
        await db_session.commit()

        assert await list_rsvped_events_for_user(db_session, test_user.id) == []

    async def test_attendance_by_title_includes_empty_events(self, db_session, test_user, test_event):
        await make_event(db_session, title="Food Market", starts_in=timedelta(days=2))
        add_attendee(test_event, test_user.id)
        await db_session.commit()

        assert await attendance_by_title(db_session) == [("Jazz Night", 1), ("Food Market", 0)]

    async def test_list_all_ratings_across_events(self, db_session, test_user, test_event):
        other = await make_event(db_session, title="Food Market")
        add_feedback(test_event, test_user.id, 4)
        add_feedback(other, test_user.id, 2)
        await db_session.commit()

        assert sorted(await list_all_ratings(db_session)) == [2, 4]

    async def test_event_lookup_loads_collections(self, db_session, test_user, test_event):
        add_attendee(test_event, test_user.id)
        await db_session.commit()

        ev = await get_event(db_session, test_event.id, for_update=True)

        assert ev.attendee_ids == [test_user.id]
