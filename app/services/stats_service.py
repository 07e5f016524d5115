"""
Statistics for the admin dashboard.

Everything here is a read-only snapshot over users, events and feedback, so
results are cached briefly and invalidated by the services that write.
"""
from typing import Dict, Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.cache.cache_decorators import STATS_PREFIX, cached
from app.core.config import settings
from app.core.errors import NotFoundError
from app.db.models import User
from app.db.repositories import (
    attendance_by_title,
    count_events,
    count_users,
    get_event as db_get_event,
    get_users_by_ids,
    list_all_ratings,
    list_users,
)

NO_RATINGS = "No Ratings Yet"
AGE_BANDS = ("18-24", "25-34", "35-44", "45-54", "55+")
GENDERS = ("Male", "Female", "Other")


def age_band(age: Optional[int]) -> Optional[str]:
    """
    Band an age for the charts. ``None`` means the user gave no age and is not counted.

    Anything outside 18-54 lands in "55+", under-18s included.
    """
    if age is None:
        return None
    if 18 <= age <= 24:
        return "18-24"
    if 25 <= age <= 34:
        return "25-34"
    if 35 <= age <= 44:
        return "35-44"
    if 45 <= age <= 54:
        return "45-54"
    return "55+"


def gender_bucket(gender: Optional[str]) -> str:
    normalized = (gender or "").strip().lower()
    if normalized == "male":
        return "Male"
    if normalized == "female":
        return "Female"
    return "Other"


def average_rating(ratings: Iterable[int]) -> str:
    """Mean rating to one decimal place, or the "No Ratings Yet" sentinel."""
    ratings = list(ratings)
    if not ratings:
        return NO_RATINGS
    return f"{sum(ratings) / len(ratings):.1f}"


def demographics(users: Iterable[User]) -> Dict[str, Dict[str, int]]:
    ages = {band: 0 for band in AGE_BANDS}
    genders = {g: 0 for g in GENDERS}
    for user in users:
        band = age_band(user.age)
        if band:
            ages[band] += 1
        genders[gender_bucket(user.gender)] += 1
    return {"ageDistribution": ages, "genderDistribution": genders}


class StatisticsService:
    def __init__(self, session: AsyncSession):
        self.session = session

    @cached(f"{STATS_PREFIX}:dashboard", expire=settings.STATS_CACHE_SECONDS)
    async def dashboard_stats(self) -> dict:
        return {
            "totalAttendees": await count_users(self.session),
            "activeEvents": await count_events(self.session),
            "averageRating": average_rating(await list_all_ratings(self.session)),
        }

    @cached(f"{STATS_PREFIX}:charts", expire=settings.STATS_CACHE_SECONDS)
    async def event_charts(self) -> dict:
        users: List[User] = await list_users(self.session)
        charts = demographics(users)
        charts["attendanceBySession"] = dict(await attendance_by_title(self.session))
        return charts

    @cached(f"{STATS_PREFIX}:event", expire=settings.STATS_CACHE_SECONDS)
    async def event_stats(self, event_id: str) -> dict:
        ev = await db_get_event(self.session, event_id)
        if not ev:
            raise NotFoundError("Event not found")
        return {
            "eventId": ev.id,
            "totalAttendees": ev.attending,
            "averageRating": average_rating(ev.ratings),
        }

    @cached(f"{STATS_PREFIX}:event-charts", expire=settings.STATS_CACHE_SECONDS)
    async def event_charts_by_id(self, event_id: str) -> dict:
        ev = await db_get_event(self.session, event_id)
        if not ev:
            raise NotFoundError("Event not found")
        # Attendee ids that no longer resolve to a user are skipped
        users = await get_users_by_ids(self.session, ev.attendee_ids)
        charts = demographics(users)
        charts["eventId"] = ev.id
        return charts
