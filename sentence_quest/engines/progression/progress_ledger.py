"""
Progress Ledger - records mission completions and answers progress queries.

Per player and mission the state machine is

    Locked -> Unlocked -> Completed(stars) -> Completed(more stars)

Only Completed is stored (as MissionProgress); Locked/Unlocked come from
MissionGate on every read. Stars never go down and unlocks are granted once.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from sentence_quest.engines.progression.errors import InvalidInputError, NotFoundError
from sentence_quest.engines.progression.mission_gate import MissionGate
from sentence_quest.engines.progression.star_calculator import calculate_stars, clamp_stars
from sentence_quest.kernel.events.event_store import EventStore
from sentence_quest.kernel.models.catalog import MissionType, UnlockType
from sentence_quest.kernel.models.event_log import EventType
from sentence_quest.kernel.models.player import Player
from sentence_quest.kernel.storage.progress_store import ProgressStore
from sentence_quest.logging_config import bind_player, get_logger

logger = get_logger(__name__)


class UnlockReward(BaseModel):
    """Reward descriptor carried by a mission."""

    type: str
    id: str


class CompletionResult(BaseModel):
    """Outcome of recording one mission completion."""

    player_id: uuid.UUID
    mission_id: uuid.UUID
    stars_earned: int  # clamped value submitted for this run
    best_stars: int  # stored value after the write
    improved: bool
    total_stars: int
    next_mission_id: Optional[uuid.UUID] = None
    unlock_reward: Optional[UnlockReward] = None
    unlock_granted: bool = False


class MissionStatus(BaseModel):
    """Derived status of one mission for one player."""

    mission_id: uuid.UUID
    title: str
    mission_type: str
    order: int
    is_completed: bool
    is_unlocked: bool
    is_current: bool
    stars: int = 0
    completed_at: Optional[datetime] = None


class ThemeSummary(BaseModel):
    id: uuid.UUID
    name: str
    display_name: str


class CampaignSummary(BaseModel):
    id: uuid.UUID
    title: str
    synopsis: Optional[str] = None


class UnlockRecord(BaseModel):
    type: str
    id: str
    unlocked_at: datetime


class PlayerProgress(BaseModel):
    """Everything the story map needs for the player's active campaign."""

    player_id: uuid.UUID
    player_name: str
    current_theme: Optional[ThemeSummary] = None
    current_campaign: Optional[CampaignSummary] = None
    current_mission_id: Optional[uuid.UUID] = None
    total_stars: int = 0
    missions: List[MissionStatus] = []
    unlocks: List[UnlockRecord] = []


class ThemeProgress(BaseModel):
    """Completion totals for one theme."""

    theme_id: uuid.UUID
    total_missions: int
    completed_missions: int
    total_stars: int
    max_stars: int


class ProgressLedger:
    """
    Records mission outcomes for players (database-backed).

    Every derived value (unlock status, total stars) is recomputed from the
    stored MissionProgress rows; nothing is cached between calls.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.store = ProgressStore(session)
        self.event_store = EventStore(session)

    async def _require_player(self, player_id: uuid.UUID, with_context: bool = False) -> Player:
        player = await self.store.get_player(player_id, with_context=with_context)
        if not player:
            raise NotFoundError("player", player_id)
        bind_player(player.id)
        return player

    @staticmethod
    def resolve_stars(stars_earned: Optional[int], hints_used: Optional[int] = None) -> int:
        """
        Stars to record for a run.

        Client-reported stars are clamped into [1, 3] rather than rejected,
        tolerating client drift. Without stars, hints_used is converted.
        """
        if stars_earned is None:
            if hints_used is None:
                raise InvalidInputError("stars_earned or hints_used is required")
            return calculate_stars(hints_used)
        if isinstance(stars_earned, bool) or not isinstance(stars_earned, int):
            raise InvalidInputError("stars_earned must be an integer")
        return clamp_stars(stars_earned)

    async def record_completion(
        self,
        player_id: uuid.UUID,
        mission_id: uuid.UUID,
        stars_earned: Optional[int] = None,
        hints_used: Optional[int] = None,
    ) -> CompletionResult:
        """
        Record a finished mission and advance the player.

        Raises:
            NotFoundError: If the player or mission does not exist
            InvalidInputError: If neither a star count nor a hint count is usable
        """
        stars = self.resolve_stars(stars_earned, hints_used)

        player = await self._require_player(player_id)
        mission = await self.store.get_mission(mission_id)
        if not mission:
            raise NotFoundError("mission", mission_id)

        previous = await self.store.get_mission_progress(player_id, mission_id)
        previous_stars = previous.stars if previous else None
        stored = await self.store.upsert_mission_progress(player_id, mission_id, stars)
        improved = previous_stars is None or stored.stars > previous_stars

        unlock_reward: Optional[UnlockReward] = None
        unlock_granted = False
        if mission.has_unlock_reward:
            unlock_reward = UnlockReward(
                type=UnlockType(mission.unlock_reward_type).value,
                id=mission.unlock_reward_id,
            )
            unlock_granted = await self.store.grant_unlock(
                player_id, unlock_reward.type, unlock_reward.id
            )

        next_mission_id: Optional[uuid.UUID] = None
        if mission.campaign_id:
            next_mission = await self.store.find_mission_at(mission.campaign_id, (mission.order or 0) + 1)
            if next_mission:
                next_mission_id = next_mission.id

        total_stars = await self.store.sum_stars(player_id)
        await self.store.update_player(
            player,
            # No next mission: the pointer stays on the one just completed
            current_mission_id=next_mission_id or mission.id,
            total_stars=total_stars,
        )

        await self.event_store.log(
            event_type=EventType.MISSION_COMPLETED,
            entity_type="mission",
            entity_id=mission.id,
            player_id=player_id,
            payload={
                "stars_earned": stars,
                "best_stars": stored.stars,
                "improved": improved,
                "total_stars": total_stars,
            },
        )
        if unlock_granted:
            await self.event_store.log(
                event_type=EventType.UNLOCK_GRANTED,
                entity_type="mission",
                entity_id=mission.id,
                player_id=player_id,
                payload=unlock_reward.model_dump(),
            )

        logger.info(
            "Mission completed",
            extra={
                "mission_id": str(mission_id),
                "stars": stars,
                "improved": improved,
                "total_stars": total_stars,
            },
        )

        return CompletionResult(
            player_id=player_id,
            mission_id=mission_id,
            stars_earned=stars,
            best_stars=stored.stars,
            improved=improved,
            total_stars=total_stars,
            next_mission_id=next_mission_id,
            unlock_reward=unlock_reward,
            unlock_granted=unlock_granted,
        )

    async def get_progress(self, player_id: uuid.UUID) -> PlayerProgress:
        """Fresh status of every mission in the player's active campaign."""
        player = await self._require_player(player_id, with_context=True)

        missions = []
        if player.current_campaign_id:
            missions = await self.store.list_campaign_missions(player.current_campaign_id)

        progress_by_mission = {
            p.mission_id: p for p in await self.store.list_mission_progress(player_id)
        }
        unlocked = MissionGate.unlock_map(missions, progress_by_mission.keys())

        statuses = []
        for mission in MissionGate.ordered(missions):
            progress = progress_by_mission.get(mission.id)
            statuses.append(
                MissionStatus(
                    mission_id=mission.id,
                    title=mission.title,
                    mission_type=MissionType(mission.mission_type).value,
                    order=mission.order or 0,
                    is_completed=progress is not None,
                    is_unlocked=unlocked[mission.id],
                    is_current=mission.id == player.current_mission_id,
                    stars=progress.stars if progress else 0,
                    completed_at=progress.completed_at if progress else None,
                )
            )

        unlocks = await self.store.list_unlocks(player_id)
        theme = player.current_theme
        campaign = player.current_campaign

        return PlayerProgress(
            player_id=player.id,
            player_name=player.name,
            current_theme=ThemeSummary(
                id=theme.id, name=theme.name, display_name=theme.display_name
            ) if theme else None,
            current_campaign=CampaignSummary(
                id=campaign.id, title=campaign.title, synopsis=campaign.synopsis
            ) if campaign else None,
            current_mission_id=player.current_mission_id,
            total_stars=player.total_stars,
            missions=statuses,
            unlocks=[
                UnlockRecord(type=u.unlock_type, id=u.unlock_id, unlocked_at=u.unlocked_at)
                for u in unlocks
            ],
        )

    async def progress_by_theme(self, player_id: uuid.UUID) -> List[ThemeProgress]:
        """Mission and star totals for every theme."""
        await self._require_player(player_id)
        stars_by_mission = {
            p.mission_id: p.stars for p in await self.store.list_mission_progress(player_id)
        }

        summaries = []
        for theme in await self.store.list_themes_with_missions():
            total = completed = stars = 0
            for campaign in theme.campaigns:
                for mission in campaign.missions:
                    total += 1
                    if mission.id in stars_by_mission:
                        completed += 1
                        stars += stars_by_mission[mission.id]
            summaries.append(
                ThemeProgress(
                    theme_id=theme.id,
                    total_missions=total,
                    completed_missions=completed,
                    total_stars=stars,
                    max_stars=total * 3,
                )
            )
        return summaries

    async def select_theme(self, player_id: uuid.UUID, theme_id: uuid.UUID) -> Player:
        """Switch theme, start at its first campaign and clear the mission pointer."""
        player = await self._require_player(player_id)
        theme = await self.store.get_theme(theme_id)
        if not theme:
            raise NotFoundError("theme", theme_id)

        campaign = await self.store.first_campaign(theme_id)
        await self.store.update_player(
            player,
            current_theme_id=theme.id,
            current_campaign_id=campaign.id if campaign else None,
            current_mission_id=None,
        )
        await self.event_store.log(
            event_type=EventType.THEME_SELECTED,
            entity_type="theme",
            entity_id=theme.id,
            player_id=player_id,
            payload={"campaign_id": campaign.id if campaign else None},
        )
        return player

    async def reset_progress(self, player_id: Optional[uuid.UUID] = None) -> dict:
        """
        Wipe mission progress and word mastery for one player, or all players.

        Unlocks and position pointers are left as they are.
        """
        if player_id is not None:
            await self._require_player(player_id)

        counts = await self.store.delete_progress(player_id)
        await self.event_store.log(
            event_type=EventType.PROGRESS_RESET,
            entity_type="player" if player_id else "all_players",
            entity_id=player_id,
            player_id=player_id,
            payload=counts,
        )
        logger.warning(
            "Progress reset",
            extra={"scope": "player" if player_id else "all_players", **counts},
        )
        return counts
