"""
Event API routes
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.schemas.event import EventCreate, EventUpdate, JoinRequest
from app.services.event_service import EventService
from app.utils.responses import success_response

router = APIRouter()

@router.get("")
def list_events(
    event_type: Optional[str] = Query(None, alias="type"),
    search: Optional[str] = None,
    page: int = 1,
    limit: int = settings.DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db)
):
    """Get upcoming events with filtering and pagination"""
    result = EventService.list_events(
        db=db,
        event_type=event_type,
        search=search,
        page=page,
        page_size=limit
    )
    return success_response(message="Events retrieved", data=result)

@router.get("/user/{uid}")
def list_user_events(uid: str, db: Session = Depends(get_db)):
    """Get events created by a user"""
    events = EventService.list_events_by_creator(uid, db)
    return success_response(message=f"Found {len(events)} events", data=events)

@router.get("/{event_id}")
def get_event(event_id: str, db: Session = Depends(get_db)):
    """Get a single event"""
    event = EventService.get_event(event_id, db)
    return success_response(message="Event retrieved", data=event)

@router.post("")
def create_event(event_data: EventCreate, db: Session = Depends(get_db)):
    """Create a new event"""
    event = EventService.create_event(event_data, db)
    return success_response(message="Event created successfully", data=event, status_code=201)

@router.put("/{event_id}")
def update_event(event_id: str, event_data: EventUpdate, db: Session = Depends(get_db)):
    """Update an event's details"""
    event = EventService.update_event(event_id, event_data, db)
    return success_response(message="Event updated successfully", data=event)

@router.post("/{event_id}/join")
def join_event(event_id: str, join_data: JoinRequest, db: Session = Depends(get_db)):
    """Join an event"""
    event = EventService.join_event(event_id, join_data.user, db)
    return success_response(message="Successfully joined the event!", data=event)
