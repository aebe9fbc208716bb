"""
Repository layer abstracting storage (SQLAlchemy vs Firebase Firestore).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from firebase_admin import firestore
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.core.errors import AlreadyJoinedError, NotFoundError
from app.models import Event, Participant, User
from app.schemas.event import EventResponse, ParticipantResponse
from app.schemas.user import UserResponse, UserSnapshot
from app.services.firebase_client import events_collection, get_firestore_client, users_collection
from app.utils.dates import to_naive_utc


def use_firestore() -> bool:
    return settings.USE_FIREBASE is True


def _timeout() -> float:
    return settings.DB_TIMEOUT_SECONDS


# -------- Conversions --------

def event_to_response(event: Event) -> EventResponse:
    return EventResponse(
        id=event.id,
        title=event.title,
        description=event.description,
        event_type=event.event_type,
        thumbnail=event.thumbnail,
        location=event.location,
        event_date=event.event_date,
        creator=UserSnapshot(
            uid=event.creator_uid,
            email=event.creator_email,
            display_name=event.creator_display_name,
            photo_url=event.creator_photo_url,
        ),
        participants=[
            ParticipantResponse(
                uid=p.uid,
                email=p.email,
                display_name=p.display_name,
                photo_url=p.photo_url,
                joined_at=p.joined_at,
            )
            for p in event.participants
        ],
        created_at=event.created_at,
        updated_at=event.updated_at,
    )


def _naive(value: Any) -> Any:
    return to_naive_utc(value) if isinstance(value, datetime) else value


def event_doc_to_response(doc_id: str, data: Dict[str, Any]) -> EventResponse:
    """Build an EventResponse from a Firestore document dict"""
    creator = data.get("creator") or {}
    participants = [
        ParticipantResponse(
            uid=p.get("uid"),
            email=p.get("email"),
            display_name=p.get("display_name"),
            photo_url=p.get("photo_url"),
            joined_at=_naive(p.get("joined_at")),
        )
        for p in data.get("participants") or []
    ]
    return EventResponse(
        id=doc_id,
        title=data.get("title"),
        description=data.get("description"),
        event_type=data.get("event_type"),
        thumbnail=data.get("thumbnail"),
        location=data.get("location"),
        event_date=_naive(data.get("event_date")),
        creator=UserSnapshot(
            uid=creator.get("uid", ""),
            email=creator.get("email", ""),
            display_name=creator.get("display_name"),
            photo_url=creator.get("photo_url"),
        ),
        participants=participants,
        created_at=_naive(data.get("created_at")),
        updated_at=_naive(data.get("updated_at")),
    )


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        uid=user.uid,
        email=user.email,
        display_name=user.display_name,
        photo_url=user.photo_url,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def user_doc_to_response(data: Dict[str, Any]) -> UserResponse:
    return UserResponse(
        uid=data.get("uid"),
        email=data.get("email"),
        display_name=data.get("display_name"),
        photo_url=data.get("photo_url"),
        created_at=_naive(data.get("created_at")),
        updated_at=_naive(data.get("updated_at")),
    )


def matches_search(data: Dict[str, Any], search: str) -> bool:
    """Case-insensitive substring match against title or description"""
    needle = search.lower()
    return needle in (data.get("title") or "").lower() or needle in (data.get("description") or "").lower()


def escape_like(text: str) -> str:
    """Make LIKE wildcards in user text match literally (escape char is a backslash)"""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# -------- Event repository --------

class EventRepo:
    @staticmethod
    def get_by_id_sql(db: Session, event_id: str) -> Optional[Event]:
        return db.query(Event).filter(Event.id == event_id).first()

    @staticmethod
    def create_sql(db: Session, fields: Dict[str, Any], creator: Dict[str, Any], now: datetime) -> Event:
        event = Event(
            **fields,
            creator_uid=creator["uid"],
            creator_email=creator["email"],
            creator_display_name=creator["display_name"],
            creator_photo_url=creator.get("photo_url"),
            created_at=now,
            updated_at=now,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def search_sql(
        db: Session,
        since: datetime,
        event_type: Optional[str],
        search: Optional[str],
        offset: int,
        limit: int,
    ) -> Tuple[List[Event], int]:
        query = db.query(Event).filter(Event.event_date >= since)
        if event_type:
            query = query.filter(Event.event_type == event_type)
        if search:
            pattern = f"%{escape_like(search.lower())}%"
            query = query.filter(or_(
                func.lower(Event.title).like(pattern, escape="\\"),
                func.lower(Event.description).like(pattern, escape="\\"),
            ))
        total = query.count()
        if offset >= total:
            return [], total
        events = (
            query.options(selectinload(Event.participants))
            .order_by(Event.event_date.asc(), Event.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return events, total

    @staticmethod
    def list_by_creator_sql(db: Session, uid: str) -> List[Event]:
        return db.query(Event).options(selectinload(Event.participants)).filter(
            Event.creator_uid == uid
        ).order_by(Event.event_date.asc(), Event.id.asc()).all()

    @staticmethod
    def list_joined_sql(db: Session, uid: str) -> List[Event]:
        joined = db.query(Participant.event_id).filter(Participant.uid == uid)
        return db.query(Event).options(selectinload(Event.participants)).filter(
            Event.id.in_(joined)
        ).order_by(Event.event_date.asc(), Event.id.asc()).all()

    @staticmethod
    def update_sql(db: Session, event: Event, fields: Dict[str, Any], now: datetime) -> Event:
        for key, value in fields.items():
            setattr(event, key, value)
        event.updated_at = now
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def add_participant_sql(db: Session, event: Event, participant: Dict[str, Any]) -> Event:
        """Append a participant; the (event_id, uid) constraint rejects a concurrent duplicate"""
        event.participants.append(Participant(**participant))
        event.updated_at = participant["joined_at"]
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise AlreadyJoinedError() from exc
        db.refresh(event)
        return event

    @staticmethod
    def count_sql(db: Session) -> int:
        return db.query(Event).count()

    # Firestore shape: collection "events/{event_id}" document with fields
    @staticmethod
    def get_by_id_fs(event_id: str) -> Optional[Dict[str, Any]]:
        doc = events_collection().document(event_id).get(timeout=_timeout())
        return doc.to_dict() if doc.exists else None

    @staticmethod
    def create_fs(event_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        events_collection().document(event_id).set(data, timeout=_timeout())
        return data

    @staticmethod
    def search_fs(
        since: datetime,
        event_type: Optional[str],
        search: Optional[str],
        offset: int,
        limit: int,
    ) -> Tuple[List[Tuple[str, Dict[str, Any]]], int]:
        query = events_collection().where("event_date", ">=", since)
        if event_type:
            query = query.where("event_type", "==", event_type)
        # Firestore has no substring search; filter the ordered stream here
        docs = [
            (d.id, d.to_dict())
            for d in query.order_by("event_date").stream(timeout=_timeout())
        ]
        if search:
            docs = [(doc_id, data) for doc_id, data in docs if matches_search(data, search)]
        docs.sort(key=lambda item: (item[1]["event_date"], item[0]))
        return docs[offset:offset + limit], len(docs)

    @staticmethod
    def _list_fs(field: str, op: str, value: str) -> List[Tuple[str, Dict[str, Any]]]:
        docs = [
            (d.id, d.to_dict())
            for d in events_collection().where(field, op, value).stream(timeout=_timeout())
        ]
        docs.sort(key=lambda item: (item[1]["event_date"], item[0]))
        return docs

    @staticmethod
    def list_by_creator_fs(uid: str) -> List[Tuple[str, Dict[str, Any]]]:
        return EventRepo._list_fs("creator.uid", "==", uid)

    @staticmethod
    def list_joined_fs(uid: str) -> List[Tuple[str, Dict[str, Any]]]:
        return EventRepo._list_fs("participant_uids", "array_contains", uid)

    @staticmethod
    def update_fs(event_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        ref = events_collection().document(event_id)
        ref.update(fields, timeout=_timeout())
        return ref.get(timeout=_timeout()).to_dict()

    @staticmethod
    def add_participant_fs(
        event_id: str,
        participant: Dict[str, Any],
        check: Callable[[Dict[str, Any]], None],
    ) -> Dict[str, Any]:
        """Check-then-append inside a transaction so concurrent joins cannot both append.

        `check` receives the current document and raises to abort.
        """
        ref = events_collection().document(event_id)

        @firestore.transactional
        def _join(transaction) -> Dict[str, Any]:
            snapshot = ref.get(transaction=transaction)
            if not snapshot.exists:
                raise NotFoundError("Event")
            data = snapshot.to_dict()
            check(data)
            data["participants"] = list(data.get("participants") or []) + [participant]
            data["participant_uids"] = list(data.get("participant_uids") or []) + [participant["uid"]]
            data["updated_at"] = participant["joined_at"]
            transaction.update(ref, {
                "participants": data["participants"],
                "participant_uids": data["participant_uids"],
                "updated_at": data["updated_at"],
            })
            return data

        return _join(get_firestore_client().transaction())

    @staticmethod
    def count_fs() -> int:
        result = events_collection().count().get(timeout=_timeout())
        return int(result[0][0].value)


# -------- User repository --------

class UserRepo:
    @staticmethod
    def get_by_uid_sql(db: Session, uid: str) -> Optional[User]:
        return db.query(User).filter(User.uid == uid).first()

    @staticmethod
    def create_sql(db: Session, data: Dict[str, Any]) -> Optional[User]:
        """Insert a new user; None when the uid was inserted concurrently"""
        user = User(**data)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            return None
        db.refresh(user)
        return user

    @staticmethod
    def save_sql(db: Session, user: User) -> User:
        db.commit()
        db.refresh(user)
        return user

    # Firestore user docs under collection users/{uid}
    @staticmethod
    def get_by_uid_fs(uid: str) -> Optional[Dict[str, Any]]:
        doc = users_collection().document(uid).get(timeout=_timeout())
        return doc.to_dict() if doc.exists else None

    @staticmethod
    def set_fs(uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        ref = users_collection().document(uid)
        ref.set(data, merge=True, timeout=_timeout())
        return ref.get(timeout=_timeout()).to_dict()
