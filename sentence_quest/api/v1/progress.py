"""
Mission progress endpoints: record completions and read the story map.
"""

import uuid

from fastapi import APIRouter

from sentence_quest.api.deps import DbSession, raise_for_progression_error
from sentence_quest.engines.progression import ProgressionError, ProgressLedger, star_message
from sentence_quest.schemas.progress import (
    CampaignRef,
    MissionStatusResponse,
    ProgressResponse,
    ProgressSubmitRequest,
    ProgressSubmitResponse,
    ThemeRef,
    UnlockResponse,
    UnlockRewardSchema,
)

router = APIRouter()


@router.get("/{player_id}", response_model=ProgressResponse)
async def get_progress(player_id: uuid.UUID, db: DbSession):
    """
    Status of every mission in the player's active campaign.

    Unlock state is evaluated fresh on each call from the completed missions.
    """
    try:
        progress = await ProgressLedger(db).get_progress(player_id)
    except ProgressionError as e:
        raise_for_progression_error(e)

    return ProgressResponse(
        player_id=progress.player_id,
        player_name=progress.player_name,
        current_theme=ThemeRef(**progress.current_theme.model_dump())
        if progress.current_theme else None,
        current_campaign=CampaignRef(**progress.current_campaign.model_dump())
        if progress.current_campaign else None,
        current_mission_id=progress.current_mission_id,
        total_stars=progress.total_stars,
        missions=[
            MissionStatusResponse(
                mission_id=m.mission_id,
                title=m.title,
                type=m.mission_type,
                order=m.order,
                is_completed=m.is_completed,
                is_unlocked=m.is_unlocked,
                is_current=m.is_current,
                stars=m.stars,
                completed_at=m.completed_at,
            )
            for m in progress.missions
        ],
        unlocks=[UnlockResponse(**u.model_dump()) for u in progress.unlocks],
    )


@router.post("", response_model=ProgressSubmitResponse)
async def submit_progress(data: ProgressSubmitRequest, db: DbSession):
    """Record a finished mission and move the player on."""
    try:
        result = await ProgressLedger(db).record_completion(
            player_id=data.player_id,
            mission_id=data.mission_id,
            stars_earned=data.stars_earned,
            hints_used=data.hints_used,
        )
    except ProgressionError as e:
        raise_for_progression_error(e)

    return ProgressSubmitResponse(
        stars_earned=result.stars_earned,
        best_stars=result.best_stars,
        total_stars=result.total_stars,
        next_mission_id=result.next_mission_id,
        unlock_reward=UnlockRewardSchema(**result.unlock_reward.model_dump())
        if result.unlock_reward else None,
        message=star_message(result.stars_earned),
    )
