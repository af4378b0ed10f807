"""
Player profile schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PlayerCreate(BaseModel):
    """Player creation request. Name rules are enforced by PlayerService."""

    name: str
    avatar_id: Optional[str] = Field(None, max_length=50)


class PlayerResponse(BaseModel):
    """Player profile response."""

    id: uuid.UUID
    name: str
    avatar_id: Optional[str] = None
    current_theme_id: Optional[uuid.UUID] = None
    current_campaign_id: Optional[uuid.UUID] = None
    current_mission_id: Optional[uuid.UUID] = None
    total_stars: int = 0
    total_play_time_seconds: int = 0
    updated_at: datetime

    class Config:
        from_attributes = True


class PlayerListResponse(BaseModel):
    players: List[PlayerResponse]


class SelectThemeRequest(BaseModel):
    theme_id: uuid.UUID


class SelectThemeResponse(BaseModel):
    """Player after switching theme, with the campaign they now start in."""

    player: PlayerResponse
    campaign_id: Optional[uuid.UUID] = None


class ThemeProgressItem(BaseModel):
    theme_id: uuid.UUID
    total_missions: int
    completed_missions: int
    total_stars: int
    max_stars: int


class ThemeProgressResponse(BaseModel):
    """Per-theme completion totals for the theme picker."""

    player_id: uuid.UUID
    themes: List[ThemeProgressItem]


class CurrentPlayerResponse(BaseModel):
    """The profile to resume with; None before any player exists."""

    player: Optional[PlayerResponse] = None


class SetCurrentPlayerRequest(BaseModel):
    player_id: uuid.UUID
