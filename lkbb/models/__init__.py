from lkbb.core.database import Base

# Import all models here to ensure they are registered with Base
from .user import User
from .event import Event, EventCategory
from .participant import Participant, ParticipantDetail
from .score import Score, ScoreDetail
from .winner import Winner
from .participation import Participation

__all__ = [
    "Base",
    "User",
    "Event",
    "EventCategory",
    "Participant",
    "ParticipantDetail",
    "Score",
    "ScoreDetail",
    "Winner",
    "Participation",
]
