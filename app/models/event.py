"""
Event model
"""

import uuid

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.utils.dates import utcnow

EVENT_TYPES = ("Cleanup", "Plantation", "Donation", "Education", "Healthcare", "Other")


def new_event_id() -> str:
    return uuid.uuid4().hex


class Event(Base):
    __tablename__ = "events"

    id = Column(String(32), primary_key=True, default=new_event_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    event_type = Column(String(50), nullable=False, index=True)
    thumbnail = Column(String(1024), nullable=False)
    location = Column(String(255), nullable=False)
    event_date = Column(DateTime, nullable=False, index=True)

    # Snapshot of the author at creation time
    creator_uid = Column(String(128), nullable=False, index=True)
    creator_email = Column(String(255), nullable=False)
    creator_display_name = Column(String(255), nullable=False)
    creator_photo_url = Column(String(1024), nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    # Relationships
    participants = relationship(
        "Participant",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="Participant.id",
    )
