"""
Admin schemas.
"""

import uuid
from typing import Optional

from pydantic import BaseModel


class ResetProgressRequest(BaseModel):
    """Reset one player's progress, or everyone's when player_id is omitted."""

    player_id: Optional[uuid.UUID] = None


class ResetProgressResponse(BaseModel):
    message: str
    mission_progress_deleted: int
    word_mastery_deleted: int
