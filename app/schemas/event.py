"""
Event-related Pydantic schemas
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from .user import UserSnapshot

class EventFields(BaseModel):
    """Mutable event fields, shared by create and update"""
    title: str = ""
    description: str = ""
    event_type: str = Field("", alias="eventType")
    thumbnail: str = ""
    location: str = ""
    event_date: Optional[datetime] = Field(None, alias="eventDate")

    class Config:
        populate_by_name = True

class EventCreate(EventFields):
    """Schema for creating an event"""
    creator: Optional[UserSnapshot] = None

class EventUpdate(EventFields):
    """Schema for updating an event"""

class JoinRequest(BaseModel):
    """Body of a join call"""
    user: UserSnapshot

class ParticipantResponse(BaseModel):
    """Participation record"""
    uid: str
    email: str
    display_name: Optional[str] = Field(None, alias="displayName")
    photo_url: Optional[str] = Field(None, alias="photoURL")
    joined_at: datetime = Field(..., alias="joinedAt")

    class Config:
        populate_by_name = True
        from_attributes = True

class EventResponse(BaseModel):
    """Event as returned to clients"""
    id: str
    title: str
    description: str
    event_type: str = Field(..., alias="eventType")
    thumbnail: str
    location: str
    event_date: datetime = Field(..., alias="eventDate")
    creator: UserSnapshot
    participants: List[ParticipantResponse] = []
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True

class EventPage(BaseModel):
    """One page of event search results"""
    events: List[EventResponse]
    total: int
    total_pages: int = Field(..., alias="totalPages")
    current_page: int = Field(..., alias="currentPage")

    class Config:
        populate_by_name = True
