"""
Admin endpoints.

Access control for these routes lives in front of the service (reverse proxy
or parent gate); nothing here checks credentials.
"""

from fastapi import APIRouter

from sentence_quest.api.deps import DbSession, raise_for_progression_error
from sentence_quest.engines.progression import ProgressionError, ProgressLedger
from sentence_quest.schemas.admin import ResetProgressRequest, ResetProgressResponse

router = APIRouter()


@router.post("/reset-progress", response_model=ResetProgressResponse)
async def reset_progress(data: ResetProgressRequest, db: DbSession):
    """Delete mission progress and word mastery for one player, or for everyone."""
    try:
        counts = await ProgressLedger(db).reset_progress(data.player_id)
    except ProgressionError as e:
        raise_for_progression_error(e)

    scope = f"player {data.player_id}" if data.player_id else "all players"
    return ResetProgressResponse(
        message=f"Progress reset for {scope}",
        mission_progress_deleted=counts["mission_progress"],
        word_mastery_deleted=counts["word_mastery"],
    )
