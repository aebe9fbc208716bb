"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .user import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "EventFields",
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    "EventPage",
    "JoinRequest",
    "ParticipantResponse",
    "UserSnapshot",
    "UserSync",
    "UserResponse",
]
