"""
Kernel Data Models

SQLAlchemy models for the content catalog and the player aggregate.
"""

from sentence_quest.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow
from sentence_quest.kernel.models.catalog import (
    Theme,
    Campaign,
    Mission,
    MissionType,
    UnlockType,
    Word,
)
from sentence_quest.kernel.models.player import (
    Player,
    MissionProgress,
    PlayerUnlock,
    WordMastery,
    MasteryLevel,
)
from sentence_quest.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "utcnow",
    # Catalog
    "Theme",
    "Campaign",
    "Mission",
    "MissionType",
    "UnlockType",
    "Word",
    # Player
    "Player",
    "MissionProgress",
    "PlayerUnlock",
    "WordMastery",
    "MasteryLevel",
    # Event Log
    "EventLog",
    "EventType",
]
