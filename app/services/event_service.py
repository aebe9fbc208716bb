"""
Event lifecycle and participation service
"""

import logging
import math
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    AlreadyJoinedError,
    NotFoundError,
    PastEventError,
    ValidationError,
    translate_store_errors,
)
from app.models import EVENT_TYPES
from app.schemas.event import EventCreate, EventFields, EventPage, EventResponse, EventUpdate
from app.schemas.user import UserSnapshot
from app.services.repositories import (
    EventRepo,
    event_doc_to_response,
    event_to_response,
    use_firestore,
)
from app.utils.dates import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

# Required text fields, keyed by attribute with the name clients send
_TEXT_FIELDS = {
    "title": "title",
    "description": "description",
    "event_type": "eventType",
    "thumbnail": "thumbnail",
    "location": "location",
}


def parse_event_id(event_id: str) -> str:
    """Normalize an event id, rejecting anything that is not a UUID"""
    try:
        return uuid.UUID(str(event_id)).hex
    except ValueError:
        raise ValidationError("Invalid event id", fields=["id"]) from None


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_event_fields(fields: EventFields, now: datetime) -> Dict[str, Any]:
    """Check the mutable event fields and return them ready for storage.

    Raises ValidationError naming every offending field.
    """
    errors: List[str] = [alias for attr, alias in _TEXT_FIELDS.items() if _blank(getattr(fields, attr))]
    if "eventType" not in errors and fields.event_type not in EVENT_TYPES:
        errors.append("eventType")

    event_date = to_naive_utc(fields.event_date) if fields.event_date else None
    date_in_past = event_date is not None and event_date <= now
    if event_date is None or date_in_past:
        errors.append("eventDate")

    if errors:
        if errors == ["eventDate"] and date_in_past:
            raise ValidationError("Event date must be in the future", fields=errors)
        raise ValidationError(f"Invalid or missing fields: {', '.join(errors)}", fields=errors)

    return {
        "title": fields.title.strip(),
        "description": fields.description,
        "event_type": fields.event_type,
        "thumbnail": fields.thumbnail,
        "location": fields.location,
        "event_date": event_date,
    }


def validate_creator(creator: Optional[UserSnapshot]) -> Dict[str, Any]:
    if creator is None:
        raise ValidationError("Invalid or missing fields: creator", fields=["creator"])
    missing = [
        f"creator.{alias}"
        for attr, alias in (("uid", "uid"), ("email", "email"), ("display_name", "displayName"))
        if _blank(getattr(creator, attr))
    ]
    if missing:
        raise ValidationError(f"Invalid or missing fields: {', '.join(missing)}", fields=missing)
    return {
        "uid": creator.uid,
        "email": creator.email,
        "display_name": creator.display_name,
        "photo_url": creator.photo_url,
    }


def ensure_joinable(event_date: datetime, participant_uids: List[str], uid: str, now: datetime) -> None:
    """Raise if a user may not join an event in its current state"""
    if to_naive_utc(event_date) < now:
        raise PastEventError()
    if uid in participant_uids:
        raise AlreadyJoinedError()


class EventService:
    """Service for event lifecycle and participation"""

    @staticmethod
    def list_events(
        db: Optional[Session],
        event_type: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> EventPage:
        """Upcoming events, ascending by date, one page at a time"""
        if page_size is None:
            page_size = settings.DEFAULT_PAGE_SIZE
        if page_size <= 0:
            raise ValidationError("Page size must be at least 1", fields=["limit"])
        page_size = min(page_size, settings.MAX_PAGE_SIZE)
        page = max(page, 1)

        if _blank(event_type) or event_type == "all":
            event_type = None
        search = None if _blank(search) else search.strip()
        offset = (page - 1) * page_size
        now = utcnow()

        with translate_store_errors("list events"):
            if not use_firestore():
                rows, total = EventRepo.search_sql(db, now, event_type, search, offset, page_size)
                events = [event_to_response(e) for e in rows]
            else:
                docs, total = EventRepo.search_fs(now, event_type, search, offset, page_size)
                events = [event_doc_to_response(doc_id, data) for doc_id, data in docs]

        return EventPage(
            events=events,
            total=total,
            total_pages=math.ceil(total / page_size),
            current_page=page,
        )

    @staticmethod
    def get_event(event_id: str, db: Optional[Session]) -> EventResponse:
        event_id = parse_event_id(event_id)
        with translate_store_errors("get event"):
            if not use_firestore():
                event = EventRepo.get_by_id_sql(db, event_id)
                if event:
                    return event_to_response(event)
            else:
                data = EventRepo.get_by_id_fs(event_id)
                if data:
                    return event_doc_to_response(event_id, data)
        raise NotFoundError("Event")

    @staticmethod
    def create_event(data: EventCreate, db: Optional[Session]) -> EventResponse:
        now = utcnow()
        fields = validate_event_fields(data, now)
        creator = validate_creator(data.creator)

        with translate_store_errors("create event"):
            if not use_firestore():
                result = event_to_response(EventRepo.create_sql(db, fields, creator, now))
            else:
                event_id = uuid.uuid4().hex
                doc = EventRepo.create_fs(event_id, {
                    **fields,
                    "creator": creator,
                    "participants": [],
                    "participant_uids": [],
                    "created_at": now,
                    "updated_at": now,
                })
                result = event_doc_to_response(event_id, doc)

        logger.info("Event %s created by %s", result.id, creator["uid"])
        return result

    @staticmethod
    def update_event(event_id: str, data: EventUpdate, db: Optional[Session]) -> EventResponse:
        """Overwrite the mutable fields; creator and participants are left alone"""
        event_id = parse_event_id(event_id)
        now = utcnow()

        with translate_store_errors("update event"):
            if not use_firestore():
                event = EventRepo.get_by_id_sql(db, event_id)
                if not event:
                    raise NotFoundError("Event")
                fields = validate_event_fields(data, now)
                result = event_to_response(EventRepo.update_sql(db, event, fields, now))
            else:
                if not EventRepo.get_by_id_fs(event_id):
                    raise NotFoundError("Event")
                fields = validate_event_fields(data, now)
                doc = EventRepo.update_fs(event_id, {**fields, "updated_at": now})
                result = event_doc_to_response(event_id, doc)

        logger.info("Event %s updated", event_id)
        return result

    @staticmethod
    def join_event(event_id: str, user: UserSnapshot, db: Optional[Session]) -> EventResponse:
        """Add a user to the participant list, at most once per uid"""
        event_id = parse_event_id(event_id)
        missing = [name for name in ("uid", "email") if _blank(getattr(user, name))]
        if missing:
            raise ValidationError(f"Invalid or missing fields: {', '.join('user.' + m for m in missing)}",
                                  fields=[f"user.{m}" for m in missing])

        now = utcnow()
        participant = {
            "uid": user.uid,
            "email": user.email,
            "display_name": user.display_name,
            "photo_url": user.photo_url,
            "joined_at": now,
        }

        try:
            with translate_store_errors("join event"):
                if not use_firestore():
                    event = EventRepo.get_by_id_sql(db, event_id)
                    if not event:
                        raise NotFoundError("Event")
                    ensure_joinable(event.event_date, [p.uid for p in event.participants], user.uid, now)
                    result = event_to_response(EventRepo.add_participant_sql(db, event, participant))
                else:
                    doc = EventRepo.add_participant_fs(
                        event_id,
                        participant,
                        lambda data: ensure_joinable(
                            data["event_date"], data.get("participant_uids") or [], user.uid, now
                        ),
                    )
                    result = event_doc_to_response(event_id, doc)
        except (PastEventError, AlreadyJoinedError) as exc:
            logger.warning("Join of event %s by %s rejected: %s", event_id, user.uid, exc.message)
            raise

        logger.info("User %s joined event %s", user.uid, event_id)
        return result

    @staticmethod
    def list_events_by_creator(uid: str, db: Optional[Session]) -> List[EventResponse]:
        with translate_store_errors("list events by creator"):
            if not use_firestore():
                return [event_to_response(e) for e in EventRepo.list_by_creator_sql(db, uid)]
            return [event_doc_to_response(doc_id, data) for doc_id, data in EventRepo.list_by_creator_fs(uid)]

    @staticmethod
    def list_events_joined_by_user(uid: str, db: Optional[Session]) -> List[EventResponse]:
        with translate_store_errors("list joined events"):
            if not use_firestore():
                return [event_to_response(e) for e in EventRepo.list_joined_sql(db, uid)]
            return [event_doc_to_response(doc_id, data) for doc_id, data in EventRepo.list_joined_fs(uid)]

    @staticmethod
    def count_events(db: Optional[Session]) -> int:
        with translate_store_errors("count events"):
            if not use_firestore():
                return EventRepo.count_sql(db)
            return EventRepo.count_fs()
