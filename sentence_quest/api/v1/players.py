"""
Player profile endpoints.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, HTTPException, status

from sentence_quest.api.deps import DbSession, raise_for_progression_error
from sentence_quest.engines.progression import ProgressionError, ProgressLedger
from sentence_quest.kernel.players.player_service import PlayerService
from sentence_quest.schemas.player import (
    CurrentPlayerResponse,
    PlayerCreate,
    PlayerListResponse,
    PlayerResponse,
    SelectThemeRequest,
    SelectThemeResponse,
    SetCurrentPlayerRequest,
    ThemeProgressItem,
    ThemeProgressResponse,
)

router = APIRouter()


@router.get("", response_model=PlayerListResponse)
async def list_players(db: DbSession):
    """All player profiles on this device, most recently active first."""
    players = await PlayerService(db).list_players()
    return PlayerListResponse(
        players=[PlayerResponse.model_validate(p) for p in players],
    )


@router.post("", response_model=PlayerResponse, status_code=status.HTTP_201_CREATED)
async def create_player(data: PlayerCreate, db: DbSession):
    """Create a new player profile."""
    try:
        player = await PlayerService(db).create_player(name=data.name, avatar_id=data.avatar_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return PlayerResponse.model_validate(player)


@router.get("/current", response_model=CurrentPlayerResponse)
async def get_current_player(db: DbSession, player_id: Optional[uuid.UUID] = None):
    """
    The profile to resume with.

    The client passes the id it last played as, if it has one; otherwise the
    most recently active player is returned, or null on a fresh device.
    """
    player = await PlayerService(db).current_player(player_id)
    return CurrentPlayerResponse(
        player=PlayerResponse.model_validate(player) if player else None,
    )


@router.post("/current", response_model=CurrentPlayerResponse)
async def set_current_player(data: SetCurrentPlayerRequest, db: DbSession):
    """Switch profiles: the chosen player becomes the most recently active."""
    player = await PlayerService(db).mark_current(data.player_id)
    if not player:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    return CurrentPlayerResponse(player=PlayerResponse.model_validate(player))


@router.get("/{player_id}", response_model=PlayerResponse)
async def get_player(player_id: uuid.UUID, db: DbSession):
    player = await PlayerService(db).get_player(player_id)
    if not player:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    return PlayerResponse.model_validate(player)


@router.post("/{player_id}/theme", response_model=SelectThemeResponse)
async def select_theme(player_id: uuid.UUID, data: SelectThemeRequest, db: DbSession):
    """
    Switch the player to a theme.

    The player starts at the theme's first campaign with no current mission.
    """
    try:
        player = await ProgressLedger(db).select_theme(player_id, data.theme_id)
    except ProgressionError as e:
        raise_for_progression_error(e)
    return SelectThemeResponse(
        player=PlayerResponse.model_validate(player),
        campaign_id=player.current_campaign_id,
    )


@router.get("/{player_id}/progress-by-theme", response_model=ThemeProgressResponse)
async def progress_by_theme(player_id: uuid.UUID, db: DbSession):
    """Completed missions and stars per theme."""
    try:
        summaries = await ProgressLedger(db).progress_by_theme(player_id)
    except ProgressionError as e:
        raise_for_progression_error(e)
    return ThemeProgressResponse(
        player_id=player_id,
        themes=[ThemeProgressItem(**s.model_dump()) for s in summaries],
    )
