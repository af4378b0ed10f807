"""
Pydantic schemas for the progress API.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ProgressSubmitRequest(BaseModel):
    """
    Mission completion. Either stars_earned (clamped into 1..3) or
    hints_used (converted to stars) must be present.
    """

    player_id: uuid.UUID
    mission_id: uuid.UUID
    stars_earned: Optional[int] = None
    hints_used: Optional[int] = Field(None, ge=0)


class UnlockRewardSchema(BaseModel):
    type: str
    id: str


class ProgressSubmitResponse(BaseModel):
    """Result of a mission completion."""

    stars_earned: int
    best_stars: int
    total_stars: int
    next_mission_id: Optional[uuid.UUID] = None
    unlock_reward: Optional[UnlockRewardSchema] = None
    message: str


class ThemeRef(BaseModel):
    id: uuid.UUID
    name: str
    display_name: str


class CampaignRef(BaseModel):
    id: uuid.UUID
    title: str
    synopsis: Optional[str] = None


class MissionStatusResponse(BaseModel):
    """One mission on the story map."""

    mission_id: uuid.UUID
    title: str
    type: str
    order: int
    is_completed: bool
    is_unlocked: bool
    is_current: bool
    stars: int = 0
    completed_at: Optional[datetime] = None


class UnlockResponse(BaseModel):
    type: str
    id: str
    unlocked_at: datetime


class ProgressResponse(BaseModel):
    """Player's progress through their active campaign."""

    player_id: uuid.UUID
    player_name: str
    current_theme: Optional[ThemeRef] = None
    current_campaign: Optional[CampaignRef] = None
    current_mission_id: Optional[uuid.UUID] = None
    total_stars: int
    missions: List[MissionStatusResponse] = []
    unlocks: List[UnlockResponse] = []
