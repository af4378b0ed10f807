"""
Theme catalog schemas.
"""

import uuid
from typing import List

from pydantic import BaseModel


class ThemeResponse(BaseModel):
    id: uuid.UUID
    name: str
    display_name: str
    is_active: bool = True

    class Config:
        from_attributes = True


class ThemeListResponse(BaseModel):
    """Themes a player can pick from."""

    themes: List[ThemeResponse]
