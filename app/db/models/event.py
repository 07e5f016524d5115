from sqlalchemy import Column, Integer, String, Text, DateTime, func, Index, UniqueConstraint
from sqlalchemy.orm import relationship
import uuid
from app.db.session import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Event(Base):
    __tablename__ = "events"
    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    location = Column(String(255), nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    # Informational only; RSVPs are not capped by it
    max_attendees = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    attendees = relationship(
        "EventAttendee",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventAttendee.id",
        lazy="selectin",
    )
    feedback = relationship(
        "EventFeedback",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventFeedback.id",
        lazy="selectin",
    )

    __table_args__ = (
        # Titles key the attendance chart, so they are unique among existing events
        UniqueConstraint("title", name="uq_event_title"),
        Index("idx_event_start_time", "start_time"),
        Index("idx_event_created_at", "created_at"),
    )

    @property
    def attendee_ids(self) -> list:
        return [a.user_id for a in self.attendees]

    @property
    def attending(self) -> int:
        return len(self.attendees)

    @property
    def ratings(self) -> list:
        return [f.rating for f in self.feedback]

    @property
    def comments(self) -> list:
        return [f.comment for f in self.feedback if f.comment]

    def has_attendee(self, user_id: str) -> bool:
        return any(a.user_id == user_id for a in self.attendees)
