"""
Word mastery schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class WordPerformanceItem(BaseModel):
    """How the player did on one word."""

    word: str
    correct_first_try: bool = False
    needed_hint: bool = False
    needed_retry: bool = False


class WordMasterySubmitRequest(BaseModel):
    """End-of-session batch for one player."""

    player_id: uuid.UUID
    words: List[WordPerformanceItem]


class WordMasterySubmitResponse(BaseModel):
    updated_word_count: int


class WordMasteryItem(BaseModel):
    word_id: uuid.UUID
    word: str
    times_seen: int
    times_correct_first_try: int
    times_needed_hint: int
    times_needed_retry: int
    streak_current: int
    streak_best: int
    mastery_level: str
    last_seen_at: Optional[datetime] = None


class WordMasteryListResponse(BaseModel):
    player_id: uuid.UUID
    words: List[WordMasteryItem]
