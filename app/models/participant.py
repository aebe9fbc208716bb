"""
Participant model
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base

class Participant(Base):
    __tablename__ = "event_participants"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(String(32), ForeignKey("events.id"), nullable=False, index=True)
    uid = Column(String(128), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=True)
    photo_url = Column(String(1024), nullable=True)
    joined_at = Column(DateTime, nullable=False)

    # Relationships
    event = relationship("Event", back_populates="participants")

    # A user joins an event at most once, even under concurrent requests
    __table_args__ = (UniqueConstraint("event_id", "uid", name="uq_participant_event_uid"),)
