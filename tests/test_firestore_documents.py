"""
Tests for Firestore document conversion helpers
"""

from datetime import datetime, timedelta, timezone

from app.services.repositories import event_doc_to_response, matches_search, user_doc_to_response

def firestore_event(**overrides):
    """Document as Firestore returns it: timestamps come back timezone-aware"""
    data = {
        "title": "Tree Planting",
        "description": "Plant saplings along the RIVER bank",
        "event_type": "Plantation",
        "thumbnail": "trees.png",
        "location": "Riverside",
        "event_date": datetime(2031, 5, 1, 9, 30, tzinfo=timezone.utc),
        "creator": {"uid": "creator-1", "email": "alice@example.com", "display_name": "Alice"},
        "participants": [
            {
                "uid": "user-bob",
                "email": "bob@example.com",
                "display_name": "Bob",
                "photo_url": None,
                "joined_at": datetime(2031, 4, 1, 12, 0, tzinfo=timezone(timedelta(hours=2))),
            }
        ],
        "participant_uids": ["user-bob"],
        "created_at": datetime(2031, 3, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2031, 4, 1, 10, 0, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return data

def test_event_doc_to_response():
    event = event_doc_to_response("a" * 32, firestore_event())

    assert event.id == "a" * 32
    assert event.event_type == "Plantation"
    assert event.event_date == datetime(2031, 5, 1, 9, 30)
    assert event.creator.uid == "creator-1"
    assert event.creator.photo_url is None
    assert len(event.participants) == 1
    # Converted to naive UTC
    assert event.participants[0].joined_at == datetime(2031, 4, 1, 10, 0)
    assert event.updated_at == datetime(2031, 4, 1, 10, 0)

def test_event_doc_without_participants():
    event = event_doc_to_response("b" * 32, firestore_event(participants=None))
    assert event.participants == []

def test_matches_search():
    data = firestore_event()
    assert matches_search(data, "tree")
    assert matches_search(data, "river")
    assert not matches_search(data, "donation")
    assert not matches_search({"title": None, "description": None}, "tree")

def test_user_doc_to_response():
    user = user_doc_to_response({
        "uid": "u1",
        "email": "dana@example.com",
        "display_name": "dana",
        "photo_url": "",
        "created_at": datetime(2031, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2031, 1, 2, tzinfo=timezone.utc),
    })
    assert user.display_name == "dana"
    assert user.created_at == datetime(2031, 1, 1)
