from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.session import Base


class EventAttendee(Base):
    """Active RSVP of a user for an event. Both the user's and the event's view derive from these rows."""

    __tablename__ = "event_attendees"
    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="attendees")

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_attendee"),
        Index("idx_attendee_user", "user_id"),
        Index("idx_attendee_event", "event_id"),
    )
