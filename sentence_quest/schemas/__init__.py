"""
Pydantic schemas for API request/response validation.
"""

from sentence_quest.schemas.admin import ResetProgressRequest, ResetProgressResponse
from sentence_quest.schemas.common import HealthResponse
from sentence_quest.schemas.player import (
    CurrentPlayerResponse,
    PlayerCreate,
    PlayerResponse,
    PlayerListResponse,
    SelectThemeRequest,
    SelectThemeResponse,
    SetCurrentPlayerRequest,
    ThemeProgressResponse,
)
from sentence_quest.schemas.theme import ThemeListResponse, ThemeResponse
from sentence_quest.schemas.progress import (
    ProgressSubmitRequest,
    ProgressSubmitResponse,
    ProgressResponse,
)
from sentence_quest.schemas.word_mastery import (
    WordMasterySubmitRequest,
    WordMasterySubmitResponse,
    WordMasteryListResponse,
)

__all__ = [
    # Admin
    "ResetProgressRequest",
    "ResetProgressResponse",
    # Common
    "HealthResponse",
    # Player
    "CurrentPlayerResponse",
    "PlayerCreate",
    "PlayerResponse",
    "PlayerListResponse",
    "SelectThemeRequest",
    "SelectThemeResponse",
    "SetCurrentPlayerRequest",
    "ThemeProgressResponse",
    # Theme
    "ThemeListResponse",
    "ThemeResponse",
    # Progress
    "ProgressSubmitRequest",
    "ProgressSubmitResponse",
    "ProgressResponse",
    # Word mastery
    "WordMasterySubmitRequest",
    "WordMasterySubmitResponse",
    "WordMasteryListResponse",
]
