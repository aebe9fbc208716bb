"""
Tests for user profile sync
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.db import Base
from app.core.errors import NotFoundError, ValidationError
from app.models import User
from app.schemas.user import UserSync
from app.services.repositories import UserRepo
from app.services.user_service import UserService, default_display_name

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_users.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

def stored_state(db, uid):
    user = db.query(User).filter(User.uid == uid).one()
    db.refresh(user)
    return (user.uid, user.email, user.display_name, user.photo_url, user.created_at, user.updated_at)

def test_sync_creates_user_with_default_display_name(db_session):
    """Test new users get the email local part as display name"""
    user = UserService.sync_user(UserSync(uid="u1", email="dana.smith@example.com"), db_session)

    assert user.uid == "u1"
    assert user.email == "dana.smith@example.com"
    assert user.display_name == "dana.smith"
    assert user.photo_url == ""

def test_sync_creates_user_with_given_profile(db_session):
    user = UserService.sync_user(
        UserSync(uid="u1", email="dana@example.com", display_name="Dana", photo_url="dana.png"),
        db_session
    )
    assert user.display_name == "Dana"
    assert user.photo_url == "dana.png"

def test_sync_updates_only_supplied_fields(db_session):
    """Test empty values keep the stored profile"""
    UserService.sync_user(
        UserSync(uid="u1", email="dana@example.com", display_name="Dana", photo_url="dana.png"),
        db_session
    )

    renamed = UserService.sync_user(
        UserSync(uid="u1", email="dana@example.com", display_name="Dana S."), db_session
    )
    assert renamed.display_name == "Dana S."
    assert renamed.photo_url == "dana.png"

    blank = UserService.sync_user(
        UserSync(uid="u1", email="dana@example.com", display_name="", photo_url=""), db_session
    )
    assert blank.display_name == "Dana S."
    assert blank.photo_url == "dana.png"

    new_photo = UserService.sync_user(
        UserSync(uid="u1", email="dana@example.com", photo_url="new.png"), db_session
    )
    assert new_photo.display_name == "Dana S."
    assert new_photo.photo_url == "new.png"

def test_sync_is_idempotent(db_session):
    """Test repeating the same sync leaves stored state unchanged"""
    payload = UserSync(uid="u1", email="dana@example.com", display_name="Dana", photo_url="dana.png")

    UserService.sync_user(payload, db_session)
    after_first = stored_state(db_session, "u1")
    UserService.sync_user(payload, db_session)
    after_second = stored_state(db_session, "u1")

    assert after_first == after_second
    assert db_session.query(User).count() == 1

def test_sync_existing_user_is_idempotent_after_update(db_session):
    UserService.sync_user(UserSync(uid="u1", email="dana@example.com"), db_session)
    update = UserSync(uid="u1", email="dana@example.com", display_name="Dana")

    UserService.sync_user(update, db_session)
    after_first = stored_state(db_session, "u1")
    UserService.sync_user(update, db_session)

    assert stored_state(db_session, "u1") == after_first

@pytest.mark.parametrize("payload, fields", [
    ({"email": "dana@example.com"}, ["uid"]),
    ({"uid": "u1"}, ["email"]),
    ({"uid": " ", "email": ""}, ["uid", "email"]),
])
def test_sync_requires_uid_and_email(db_session, payload, fields):
    with pytest.raises(ValidationError) as exc_info:
        UserService.sync_user(UserSync(**payload), db_session)
    assert exc_info.value.fields == fields

def test_get_user(db_session):
    UserService.sync_user(UserSync(uid="u1", email="dana@example.com"), db_session)

    user = UserService.get_user("u1", db_session)
    assert user.email == "dana@example.com"

    with pytest.raises(NotFoundError):
        UserService.get_user("missing", db_session)

def test_default_display_name():
    assert default_display_name("dana@example.com") == "dana"
    assert default_display_name("no-at-sign") == "no-at-sign"

def test_sync_concurrent_first_sync_updates_existing_row(db_session, monkeypatch):
    """Test a first sync that loses the insert race still succeeds"""
    UserService.sync_user(UserSync(uid="u1", email="dana@example.com"), db_session)

    other = TestingSessionLocal()
    real_lookup = UserRepo.get_by_uid_sql
    lookups = []

    def stale_lookup(db, uid):
        # First lookup runs before the other session's insert is visible
        lookups.append(uid)
        return None if len(lookups) == 1 else real_lookup(db, uid)

    monkeypatch.setattr(UserRepo, "get_by_uid_sql", staticmethod(stale_lookup))
    try:
        user = UserService.sync_user(
            UserSync(uid="u1", email="dana@example.com", display_name="Dana"), other
        )
    finally:
        other.close()

    assert user.display_name == "Dana"
    assert len(lookups) == 2
    assert db_session.query(User).count() == 1
    assert stored_state(db_session, "u1")[2] == "Dana"

def test_sync_ignores_whitespace_profile_values(db_session):
    UserService.sync_user(
        UserSync(uid="u1", email="dana@example.com", display_name="Dana", photo_url="dana.png"),
        db_session
    )
    before = stored_state(db_session, "u1")

    user = UserService.sync_user(
        UserSync(uid="u1", email="dana@example.com", display_name="   ", photo_url="\t"), db_session
    )

    assert user.display_name == "Dana"
    assert user.photo_url == "dana.png"
    assert stored_state(db_session, "u1") == before

def test_sync_new_user_with_whitespace_name_gets_default(db_session):
    user = UserService.sync_user(
        UserSync(uid="u2", email="erin@example.com", display_name="  ", photo_url=" "), db_session
    )
    assert user.display_name == "erin"
    assert user.photo_url == ""
