from sqlalchemy import Column, String, DateTime, Index
import uuid
from app.db.session import Base
from app.core.timeutils import utcnow


class RSVP(Base):
    """
    Append-only RSVP history.

    No foreign keys: the row keeps a snapshot of the event title and outlives
    the event itself.
    """

    __tablename__ = "rsvps"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(128), nullable=False)
    event_id = Column(String(36), nullable=False)
    event_name = Column(String(255), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_rsvp_user", "user_id"),
        Index("idx_rsvp_event", "event_id"),
    )
