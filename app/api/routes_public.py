"""
Public API routes - health and diagnostics
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db, database_health
from app.services.event_service import EventService
from app.utils.dates import utcnow
from app.utils.responses import success_response

router = APIRouter()

@router.get("/health")
def health_check():
    """Health check that reports database readiness without requiring it"""
    ready = database_health.is_ready()
    return success_response(
        message="Server is running!",
        data={
            "database": "connected" if ready else "disconnected",
            "timestamp": utcnow().isoformat() + "Z",
            "environment": settings.ENVIRONMENT
        }
    )

@router.get("/events/debug/status")
def debug_status(db: Session = Depends(get_db)):
    """Connection state and event count"""
    state = database_health.state
    ready = database_health.is_ready()
    data = {
        "database": {
            "status": state.status,
            "attempts": state.attempts,
            "last_error": state.last_error,
            "last_checked": state.last_checked.isoformat() + "Z" if state.last_checked else None,
            "backend": "firestore" if settings.USE_FIREBASE else "sql"
        },
        "events": {"total": EventService.count_events(db) if ready else None},
        "timestamp": utcnow().isoformat() + "Z",
        "environment": settings.ENVIRONMENT
    }
    return success_response(message="Debug status", data=data)
