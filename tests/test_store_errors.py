"""
Tests for storage error translation and connection state
"""

import pytest
from google.api_core import exceptions as gcp_exceptions
from sqlalchemy import create_engine, inspect
from sqlalchemy import exc as sa_exc

from app.core import db as db_module
from app.core.db import ConnectionState, DatabaseHealth, init_db
from app.core.errors import (
    AlreadyJoinedError,
    NotFoundError,
    UnavailableError,
    ValidationError,
    translate_store_errors,
)

@pytest.mark.parametrize("error", [
    sa_exc.OperationalError("SELECT 1", {}, Exception("unable to open database file")),
    sa_exc.DisconnectionError("connection reset"),
    sa_exc.TimeoutError("QueuePool limit reached"),
    gcp_exceptions.ServiceUnavailable("firestore down"),
    gcp_exceptions.DeadlineExceeded("too slow"),
    sa_exc.ProgrammingError("SELECT nope", {}, Exception("no such table")),
    gcp_exceptions.InternalServerError("boom"),
])
def test_store_failures_become_unavailable(error):
    with pytest.raises(UnavailableError) as exc_info:
        with translate_store_errors("test operation"):
            raise error
    assert exc_info.value.status_code == 503
    assert exc_info.value.__cause__ is error

@pytest.mark.parametrize("error", [
    NotFoundError("Event"),
    ValidationError("bad", fields=["title"]),
    AlreadyJoinedError(),
])
def test_service_errors_pass_through(error):
    with pytest.raises(type(error)) as exc_info:
        with translate_store_errors("test operation"):
            raise error
    assert exc_info.value is error

def test_unrelated_errors_are_not_translated():
    with pytest.raises(KeyError):
        with translate_store_errors("test operation"):
            raise KeyError("title")

def test_error_taxonomy_status_codes():
    assert ValidationError("x").status_code == 400
    assert NotFoundError("User").message == "User not found"
    assert NotFoundError().status_code == 404
    assert AlreadyJoinedError().status_code == 409
    assert UnavailableError().error_code == "DATABASE_UNAVAILABLE"

def test_database_health_tracks_state():
    """Test readiness flips with the probe outcome"""
    outcomes = [ConnectionError("refused"), None]

    def probe():
        outcome = outcomes.pop(0)
        if outcome:
            raise outcome

    health = DatabaseHealth(probe)
    assert health.state == ConnectionState()

    assert health.is_ready() is False
    assert health.state.status == "disconnected"
    assert health.state.last_error == "refused"
    assert health.state.attempts == 1

    assert health.is_ready() is True
    assert health.state.status == "connected"
    assert health.state.last_error is None
    assert health.state.attempts == 2
    assert health.state.last_checked is not None

def test_init_db_gives_up_after_retries():
    """Test startup continues without a database once retries run out"""
    calls = []

    def probe():
        calls.append(1)
        raise ConnectionError("refused")

    assert init_db(retries=3, delay=0, health=DatabaseHealth(probe)) is False
    assert len(calls) == 3

def test_init_db_creates_tables_once_ready(monkeypatch):
    """Test tables exist after a retry succeeds"""
    memory_engine = create_engine("sqlite://")
    monkeypatch.setattr(db_module, "engine", memory_engine)
    outcomes = [ConnectionError("refused"), None]

    def probe():
        outcome = outcomes.pop(0)
        if outcome:
            raise outcome

    assert init_db(retries=3, delay=0, health=DatabaseHealth(probe)) is True
    assert {"events", "event_participants", "users"} <= set(inspect(memory_engine).get_table_names())

@pytest.mark.parametrize("error", [
    sa_exc.IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed: users.uid")),
    sa_exc.DataError("INSERT INTO events", {}, Exception("value too long for type character varying(255)")),
])
def test_rejected_values_become_validation_errors(error):
    """Test a reachable store refusing a write is not reported as unavailable"""
    with pytest.raises(ValidationError) as exc_info:
        with translate_store_errors("test operation"):
            raise error
    assert exc_info.value.status_code == 400
    assert exc_info.value.__cause__ is error
