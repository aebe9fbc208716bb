"""
User profile sync service
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError, translate_store_errors
from app.schemas.user import UserResponse, UserSync
from app.services.repositories import UserRepo, use_firestore, user_doc_to_response, user_to_response
from app.utils.dates import utcnow

logger = logging.getLogger(__name__)


def default_display_name(email: str) -> str:
    """Local part of an email address"""
    return email.split("@")[0]


def _filled(value: Optional[str]) -> bool:
    return bool(value and value.strip())


class UserService:
    """Create-or-update of profiles pushed from the identity provider"""

    @staticmethod
    def sync_user(data: UserSync, db: Optional[Session]) -> UserResponse:
        """Idempotent upsert keyed by uid.

        Profile fields are only overwritten by non-blank values, so
        replaying the same payload leaves the stored user unchanged.
        """
        missing = [name for name in ("uid", "email") if not _filled(getattr(data, name))]
        if missing:
            raise ValidationError("UID and email are required", fields=missing)

        now = utcnow()
        updates = {
            key: value
            for key, value in (
                ("email", data.email),
                ("display_name", data.display_name),
                ("photo_url", data.photo_url),
            )
            if _filled(value)
        }
        profile = {
            "uid": data.uid,
            "email": data.email,
            "display_name": updates.get("display_name") or default_display_name(data.email),
            "photo_url": updates.get("photo_url", ""),
            "created_at": now,
            "updated_at": now,
        }

        with translate_store_errors("sync user"):
            if not use_firestore():
                user = UserRepo.get_by_uid_sql(db, data.uid)
                if not user:
                    created = UserRepo.create_sql(db, profile)
                    if created:
                        logger.info("User %s created", data.uid)
                        return user_to_response(created)
                    # A concurrent first sync inserted the row; update it instead
                    logger.info("User %s created concurrently, updating", data.uid)
                    user = UserRepo.get_by_uid_sql(db, data.uid)
                changed = {k: v for k, v in updates.items() if getattr(user, k) != v}
                if changed:
                    for key, value in changed.items():
                        setattr(user, key, value)
                    user.updated_at = now
                    user = UserRepo.save_sql(db, user)
                    logger.info("User %s updated: %s", data.uid, ", ".join(sorted(changed)))
                return user_to_response(user)

            doc = UserRepo.get_by_uid_fs(data.uid)
            if not doc:
                doc = UserRepo.set_fs(data.uid, profile)
                logger.info("User %s created", data.uid)
            else:
                changed = {k: v for k, v in updates.items() if doc.get(k) != v}
                if changed:
                    doc = UserRepo.set_fs(data.uid, {**changed, "updated_at": now})
                    logger.info("User %s updated: %s", data.uid, ", ".join(sorted(changed)))
            return user_doc_to_response(doc)

    @staticmethod
    def get_user(uid: str, db: Optional[Session]) -> UserResponse:
        with translate_store_errors("get user"):
            if not use_firestore():
                user = UserRepo.get_by_uid_sql(db, uid)
                if user:
                    return user_to_response(user)
            else:
                doc = UserRepo.get_by_uid_fs(uid)
                if doc:
                    return user_doc_to_response(doc)
        raise NotFoundError("User")
