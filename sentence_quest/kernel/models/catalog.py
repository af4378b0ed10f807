"""
Catalog models - themes, campaigns, missions and vocabulary.

Authored by the admin dashboard; read-only during gameplay.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sentence_quest.kernel.models.base import Base, generate_uuid


class MissionType(str, Enum):
    """Kinds of mission on the story map."""
    PLAY = "play"
    TREASURE = "treasure"
    BOSS = "boss"  # gated on every other mission in the campaign


class UnlockType(str, Enum):
    """Kinds of reward a mission can grant."""
    AVATAR = "avatar"
    STICKER = "sticker"


class Theme(Base):
    """A story world (e.g. a cartoon franchise) grouping campaigns."""

    __tablename__ = "themes"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    campaigns: Mapped[List["Campaign"]] = relationship(
        back_populates="theme",
        order_by="Campaign.order",
    )


class Campaign(Base):
    """An ordered run of missions within a theme."""

    __tablename__ = "campaigns"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    theme_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("themes.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    synopsis: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    theme: Mapped[Optional["Theme"]] = relationship(back_populates="campaigns")
    missions: Mapped[List["Mission"]] = relationship(
        back_populates="campaign",
        order_by="Mission.order",
    )


class Mission(Base):
    """A single playable mission; position in its campaign is `order`."""

    __tablename__ = "missions"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    campaign_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    mission_type: Mapped[MissionType] = mapped_column(
        "type",
        String(20),
        nullable=False,
        default=MissionType.PLAY,
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    unlock_reward_type: Mapped[Optional[UnlockType]] = mapped_column(String(20), nullable=True)
    unlock_reward_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    campaign: Mapped[Optional["Campaign"]] = relationship(back_populates="missions")

    __table_args__ = (
        Index("ix_missions_campaign_order", "campaign_id", "order"),
    )

    @property
    def is_boss(self) -> bool:
        return MissionType(self.mission_type) == MissionType.BOSS

    @property
    def has_unlock_reward(self) -> bool:
        return bool(self.unlock_reward_type and self.unlock_reward_id)


class Word(Base):
    """Sight-word vocabulary entry."""

    __tablename__ = "words"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    text: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    level: Mapped[str] = mapped_column(String(20), nullable=False)  # pre-primer, primer, first-grade
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
