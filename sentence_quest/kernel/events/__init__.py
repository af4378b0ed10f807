"""
Append-only audit logging for progression changes.
"""

from sentence_quest.kernel.events.event_store import EventStore
from sentence_quest.kernel.models.event_log import EventLog, EventType

__all__ = [
    "EventStore",
    "EventLog",
    "EventType",
]
