"""Admin dashboard statistics."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_session
from app.schemas import ChartsOut, DashboardStatsOut, EventChartsOut, EventStatsOut
from app.services.stats_service import StatisticsService

router = APIRouter(prefix="/admin", tags=["admin"])


def get_stats_service(session: AsyncSession = Depends(get_session)) -> StatisticsService:
    return StatisticsService(session)


@router.get("/stats", response_model=DashboardStatsOut)
@router.get("/statistics", response_model=DashboardStatsOut)
async def get_admin_stats(stats_service: StatisticsService = Depends(get_stats_service)):
    """Registered users, event count and the average of all ratings."""
    return await stats_service.dashboard_stats()


@router.get("/charts", response_model=ChartsOut)
async def get_event_charts(stats_service: StatisticsService = Depends(get_stats_service)):
    """Age and gender distribution over all users, plus attendance per event."""
    return await stats_service.event_charts()


@router.get("/statistics/{event_id}", response_model=EventStatsOut)
async def get_event_stats(event_id: str, stats_service: StatisticsService = Depends(get_stats_service)):
    return await stats_service.event_stats(event_id)


@router.get("/charts/{event_id}", response_model=EventChartsOut)
async def get_event_charts_by_id(event_id: str, stats_service: StatisticsService = Depends(get_stats_service)):
    """Age and gender distribution over one event's attendees."""
    return await stats_service.event_charts_by_id(event_id)
