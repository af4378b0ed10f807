"""
Immutable event log for the progression audit trail.

Progression mutations are logged here in the same transaction as the write.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, String, func, Index, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from sentence_quest.kernel.models.base import Base, generate_uuid


class EventType(str, Enum):
    """All event types for the audit log."""

    # Player events
    PLAYER_CREATED = "player.created"
    THEME_SELECTED = "player.theme_selected"

    # Progress events
    MISSION_COMPLETED = "progress.mission_completed"
    UNLOCK_GRANTED = "progress.unlock_granted"
    WORD_MASTERY_UPDATED = "progress.word_mastery_updated"

    # Admin events
    PROGRESS_RESET = "admin.progress_reset"


class EventLog(Base):
    """
    Immutable audit event log.

    This table is append-only - no updates or deletes allowed.
    """

    __tablename__ = "event_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )

    event_type: Mapped[EventType] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )

    # Entity reference
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    entity_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,  # bulk admin events have no single entity
        index=True,
    )

    # Actor
    player_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
        index=True,
    )

    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_event_logs_entity", "entity_type", "entity_id"),
        Index("ix_event_logs_player_time", "player_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<EventLog {EventType(self.event_type).value} {self.entity_type}:{self.entity_id}>"
