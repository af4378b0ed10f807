"""
Word mastery endpoints.
"""

import uuid

from fastapi import APIRouter

from sentence_quest.api.deps import DbSession, raise_for_progression_error
from sentence_quest.engines.progression import ProgressionError, WordMasteryTracker, WordObservation
from sentence_quest.schemas.word_mastery import (
    WordMasteryItem,
    WordMasteryListResponse,
    WordMasterySubmitRequest,
    WordMasterySubmitResponse,
)

router = APIRouter()


@router.post("", response_model=WordMasterySubmitResponse)
async def submit_word_mastery(data: WordMasterySubmitRequest, db: DbSession):
    """Merge one session's word performance. Words not in the catalog are skipped."""
    observations = [WordObservation(**item.model_dump()) for item in data.words]
    try:
        updated = await WordMasteryTracker(db).record_batch(data.player_id, observations)
    except ProgressionError as e:
        raise_for_progression_error(e)
    return WordMasterySubmitResponse(updated_word_count=updated)


@router.get("/{player_id}", response_model=WordMasteryListResponse)
async def list_word_mastery(player_id: uuid.UUID, db: DbSession):
    try:
        entries = await WordMasteryTracker(db).list_mastery(player_id)
    except ProgressionError as e:
        raise_for_progression_error(e)
    return WordMasteryListResponse(
        player_id=player_id,
        words=[
            WordMasteryItem(**{**e.model_dump(), "mastery_level": e.mastery_level.value})
            for e in entries
        ],
    )
