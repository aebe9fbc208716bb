"""
User-related Pydantic schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

class UserSnapshot(BaseModel):
    """Profile fields copied onto an event (creator or participant)"""
    uid: str = ""
    email: str = ""
    display_name: Optional[str] = Field(None, alias="displayName")
    photo_url: Optional[str] = Field(None, alias="photoURL")

    class Config:
        populate_by_name = True
        from_attributes = True

class UserSync(BaseModel):
    """Profile pushed from the identity provider"""
    uid: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = Field(None, alias="displayName")
    photo_url: Optional[str] = Field(None, alias="photoURL")

    class Config:
        populate_by_name = True

class UserResponse(BaseModel):
    """Stored user"""
    uid: str
    email: str
    display_name: Optional[str] = Field(None, alias="displayName")
    photo_url: Optional[str] = Field(None, alias="photoURL")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True
        from_attributes = True
