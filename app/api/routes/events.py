from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import (
    EventCreate,
    EventCreatedOut,
    EventDetailOut,
    EventOut,
    RateOut,
    RateRequest,
    RSVPOut,
    RSVPRequest,
)
from app.db.session import get_session
from app.services.event_service import EventService
from app.services.rsvp_service import RSVPService
from typing import List, Optional

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(session: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(session)


def get_rsvp_service(session: AsyncSession = Depends(get_session)) -> RSVPService:
    return RSVPService(session)


@router.get("", response_model=List[EventOut])
async def get_events(event_service: EventService = Depends(get_event_service)):
    """All events ordered by start time."""
    return await event_service.list_events()


@router.post("/create", response_model=EventCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    payload: EventCreate,
    event_service: EventService = Depends(get_event_service),
):
    return await event_service.create_event(payload)


@router.post("/rsvp", response_model=RSVPOut)
async def rsvp_event(payload: RSVPRequest, rsvp_service: RSVPService = Depends(get_rsvp_service)):
    return await rsvp_service.join(payload.event_id, payload.user_id)


@router.post("/cancel-rsvp", response_model=RSVPOut)
async def cancel_rsvp(payload: RSVPRequest, rsvp_service: RSVPService = Depends(get_rsvp_service)):
    return await rsvp_service.cancel(payload.event_id, payload.user_id)


@router.post("/rate", response_model=RateOut)
async def rate_event(payload: RateRequest, event_service: EventService = Depends(get_event_service)):
    """Rate (and optionally comment on) an event the user has RSVP'd for."""
    return await event_service.rate_event(payload)


@router.get("/{event_id}", response_model=EventDetailOut)
async def get_event_detail(
    event_id: str,
    user_id: Optional[str] = Query(None, alias="userId", description="Report whether this user has RSVP'd"),
    event_service: EventService = Depends(get_event_service),
):
    return await event_service.get_event(event_id, user_id)


@router.delete("/{event_id}")
async def delete_event_endpoint(event_id: str, event_service: EventService = Depends(get_event_service)):
    return await event_service.delete_event(event_id)
