"""
User model
"""

from sqlalchemy import Column, String, DateTime

from app.core.db import Base
from app.utils.dates import utcnow

class User(Base):
    __tablename__ = "users"

    uid = Column(String(128), primary_key=True)
    email = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=True)
    photo_url = Column(String(1024), default="")
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
