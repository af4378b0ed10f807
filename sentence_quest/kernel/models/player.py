"""
Player aggregate - profile, mission progress, unlocks and word mastery.

Every row here belongs to exactly one player. Derived values (total stars,
mastery level) are cached on the rows but always recomputed from the
underlying counters on write.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sentence_quest.kernel.models.base import Base, TimestampMixin, generate_uuid, utcnow
from sentence_quest.kernel.models.catalog import Campaign, Theme


class MasteryLevel(str, Enum):
    """Per-word mastery tiers, lowest first."""
    NEW = "new"
    LEARNING = "learning"
    FAMILIAR = "familiar"
    MASTERED = "mastered"


class Player(Base, TimestampMixin):
    """A child's game profile."""

    __tablename__ = "players"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    avatar_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    current_theme_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("themes.id", ondelete="SET NULL"),
        nullable=True,
    )
    current_campaign_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("campaigns.id", ondelete="SET NULL"),
        nullable=True,
    )
    current_mission_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("missions.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Cached sum of MissionProgress.stars
    total_stars: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_play_time_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    current_theme: Mapped[Optional[Theme]] = relationship(foreign_keys=[current_theme_id])
    current_campaign: Mapped[Optional[Campaign]] = relationship(foreign_keys=[current_campaign_id])


class MissionProgress(Base):
    """Best result for one player on one mission."""

    __tablename__ = "mission_progress"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    player_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    mission_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("missions.id", ondelete="CASCADE"),
        nullable=False,
    )
    stars: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("player_id", "mission_id", name="uq_mission_progress_player_mission"),
    )


class PlayerUnlock(Base):
    """A reward granted to a player. Never duplicated."""

    __tablename__ = "player_unlocks"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    player_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    unlock_type: Mapped[str] = mapped_column(String(20), nullable=False)
    unlock_id: Mapped[str] = mapped_column(String(50), nullable=False)
    unlocked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("player_id", "unlock_id", name="uq_player_unlocks_player_unlock"),
    )


class WordMastery(Base):
    """Running performance counters for one player on one word."""

    __tablename__ = "word_mastery"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    player_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    word_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("words.id", ondelete="CASCADE"),
        nullable=False,
    )

    times_seen: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    times_correct_first_try: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    times_needed_hint: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    times_needed_retry: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    streak_current: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    streak_best: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    mastery_level: Mapped[MasteryLevel] = mapped_column(
        String(20),
        nullable=False,
        default=MasteryLevel.NEW,
    )
    last_seen_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint("player_id", "word_id", name="uq_word_mastery_player_word"),
    )
