"""
Database models package
"""

from .event import Event, EVENT_TYPES
from .participant import Participant
from .user import User

__all__ = ["Event", "Participant", "User", "EVENT_TYPES"]
