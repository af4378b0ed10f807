"""
Theme catalog endpoints.
"""

from fastapi import APIRouter

from sentence_quest.api.deps import DbSession
from sentence_quest.kernel.storage.progress_store import ProgressStore
from sentence_quest.schemas.theme import ThemeListResponse, ThemeResponse

router = APIRouter()


@router.get("", response_model=ThemeListResponse)
async def list_themes(db: DbSession):
    """Active themes, for the theme picker."""
    themes = await ProgressStore(db).list_active_themes()
    return ThemeListResponse(
        themes=[ThemeResponse.model_validate(t) for t in themes],
    )
