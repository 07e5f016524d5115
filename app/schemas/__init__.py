from pydantic import BaseModel, EmailStr, Field
from typing import Dict, List, Optional, Union
from app.db.models.user import RoleEnum


class _AliasedModel(BaseModel):
    class Config:
        populate_by_name = True


class MessageOut(BaseModel):
    message: str


# Users

class UserRegister(BaseModel):
    fullname: Optional[str] = None
    email: EmailStr
    password: Optional[str] = None
    age: Optional[int] = None
    role: Optional[RoleEnum] = RoleEnum.user
    gender: Optional[str] = None


class RegisterOut(BaseModel):
    message: str
    uid: str
    token: str


class UserProfileOut(_AliasedModel):
    uid: str
    fullname: Optional[str] = None
    email: EmailStr
    age: Optional[int] = None
    gender: Optional[str] = None
    role: str
    created_at: Optional[str] = Field(None, alias="createdAt")
    rsvp_events: List[str] = Field(default_factory=list, alias="rsvpEvents")
    rsvp_event_ids: List[str] = Field(default_factory=list, alias="rsvpEventIds")


# Events

class EventCreate(_AliasedModel):
    """Everything is optional here so that missing fields produce the service's own 400."""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = Field(None, alias="Category")
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = Field(None, alias="Location")
    max_attendees: Optional[Union[int, str]] = Field(None, alias="maxAttendees")


class EventCreatedOut(_AliasedModel):
    message: str
    event_id: str = Field(alias="eventId")


class EventOut(_AliasedModel):
    id: str
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[str] = Field(None, alias="startTime")
    rsvps: List[str] = Field(default_factory=list, alias="RSVPs")
    attending: int = 0
    max_attendees: Optional[int] = Field(None, alias="maxAttendees")
    comments: List[str] = Field(default_factory=list, alias="Comments")
    ratings: List[int] = Field(default_factory=list, alias="Ratings")


class EventDetailOut(EventOut):
    user_has_rsvped: bool = Field(False, alias="userHasRSVPed")


class RSVPRequest(_AliasedModel):
    event_id: str = Field(alias="eventId")
    user_id: str = Field(alias="userId")


class RSVPOut(_AliasedModel):
    message: str
    event_id: str = Field(alias="eventId")


class RateRequest(_AliasedModel):
    event_id: str = Field(alias="eventId")
    user_id: str = Field(alias="userId")
    rating: int
    comment: Optional[str] = None


class RateOut(_AliasedModel):
    message: str
    updated_ratings: List[int] = Field(alias="updatedRatings")
    updated_comments: List[str] = Field(alias="updatedComments")


# Contact / notifications

class ContactMessage(BaseModel):
    name: str
    email: EmailStr
    subject: str
    message: str


class NotificationRequest(_AliasedModel):
    user_id: str = Field(alias="userId")
    event_id: str = Field(alias="eventId")


# Admin statistics

class DashboardStatsOut(_AliasedModel):
    total_attendees: int = Field(alias="totalAttendees")
    active_events: int = Field(alias="activeEvents")
    average_rating: str = Field(alias="averageRating")


class EventStatsOut(_AliasedModel):
    event_id: str = Field(alias="eventId")
    total_attendees: int = Field(alias="totalAttendees")
    average_rating: str = Field(alias="averageRating")


class ChartsOut(_AliasedModel):
    age_distribution: Dict[str, int] = Field(alias="ageDistribution")
    attendance_by_session: Dict[str, int] = Field(alias="attendanceBySession")
    gender_distribution: Dict[str, int] = Field(alias="genderDistribution")


class EventChartsOut(_AliasedModel):
    event_id: str = Field(alias="eventId")
    age_distribution: Dict[str, int] = Field(alias="ageDistribution")
    gender_distribution: Dict[str, int] = Field(alias="genderDistribution")
