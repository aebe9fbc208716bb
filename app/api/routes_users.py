"""
User API routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.user import UserSync
from app.services.event_service import EventService
from app.services.user_service import UserService
from app.utils.responses import success_response

# Mounted under /api/auth
auth_router = APIRouter()

# Mounted under /api/users
router = APIRouter()

@auth_router.post("/sync-user")
def sync_user(user_data: UserSync, db: Session = Depends(get_db)):
    """Sync user data from the identity provider"""
    user = UserService.sync_user(user_data, db)
    return success_response(message="User synced", data=user)

@router.get("/{uid}")
def get_user(uid: str, db: Session = Depends(get_db)):
    """Get user profile"""
    user = UserService.get_user(uid, db)
    return success_response(message="User retrieved", data=user)

@router.get("/{uid}/joined-events")
def get_joined_events(uid: str, db: Session = Depends(get_db)):
    """Get events joined by user"""
    events = EventService.list_events_joined_by_user(uid, db)
    return success_response(message=f"Found {len(events)} events", data=events)
