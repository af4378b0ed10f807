"""
Progress Store - persistence boundary for the progression engine.

Engines talk to this class only; it owns every query and the write contract:

- mission progress: INSERT ... ON CONFLICT (player_id, mission_id)
  DO UPDATE ... WHERE stored stars < new stars (monotonic, race-free)
- unlocks: INSERT ... ON CONFLICT (player_id, unlock_id) DO NOTHING
- word mastery: rows read FOR UPDATE; absent rows inserted with
  ON CONFLICT DO NOTHING so a concurrent first insert is detected

PostgreSQL and SQLite both support these upsert forms.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sentence_quest.kernel.models.base import utcnow
from sentence_quest.kernel.models.catalog import Campaign, Mission, Theme, Word
from sentence_quest.kernel.models.player import (
    MissionProgress,
    Player,
    PlayerUnlock,
    WordMastery,
)


class ProgressStore:
    """SQLAlchemy-backed repository for the player aggregate and the catalog reads it needs."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _insert(self, entity):
        """Dialect-specific INSERT construct that supports ON CONFLICT."""
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(entity)
        if dialect == "sqlite":
            return sqlite_insert(entity)
        raise NotImplementedError(f"Upsert not supported for dialect {dialect!r}")

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    async def get_player(self, player_id: uuid.UUID, with_context: bool = False) -> Optional[Player]:
        """Load a player; with_context also loads current theme and campaign."""
        q = select(Player).where(Player.id == player_id).execution_options(populate_existing=True)
        if with_context:
            q = q.options(
                selectinload(Player.current_theme),
                selectinload(Player.current_campaign),
            )
        result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def list_players(self) -> List[Player]:
        q = select(Player).order_by(desc(Player.updated_at))
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def most_recent_player(self) -> Optional[Player]:
        q = (
            select(Player)
            .options(selectinload(Player.current_theme), selectinload(Player.current_campaign))
            .order_by(desc(Player.updated_at))
            .limit(1)
        )
        result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def count_players(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Player))
        return result.scalar() or 0

    async def create_player(self, name: str, avatar_id: Optional[str] = None) -> Player:
        player = Player(name=name, avatar_id=avatar_id, total_stars=0, total_play_time_seconds=0)
        self.session.add(player)
        await self.session.flush()
        await self.session.refresh(player)
        return player

    async def update_player(self, player: Player, **values: Any) -> Player:
        for key, value in values.items():
            setattr(player, key, value)
        player.updated_at = utcnow()
        await self.session.flush()
        return player

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def get_mission(self, mission_id: uuid.UUID) -> Optional[Mission]:
        result = await self.session.execute(select(Mission).where(Mission.id == mission_id))
        return result.scalar_one_or_none()

    async def get_theme(self, theme_id: uuid.UUID) -> Optional[Theme]:
        result = await self.session.execute(select(Theme).where(Theme.id == theme_id))
        return result.scalar_one_or_none()

    async def list_campaign_missions(self, campaign_id: uuid.UUID) -> List[Mission]:
        q = select(Mission).where(Mission.campaign_id == campaign_id).order_by(Mission.order)
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def find_mission_at(self, campaign_id: uuid.UUID, order: int) -> Optional[Mission]:
        """Mission at a given ordinal within a campaign, if any."""
        q = (
            select(Mission)
            .where(Mission.campaign_id == campaign_id, Mission.order == order)
            .limit(1)
        )
        result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def first_campaign(self, theme_id: uuid.UUID) -> Optional[Campaign]:
        q = select(Campaign).where(Campaign.theme_id == theme_id).order_by(Campaign.order).limit(1)
        result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def list_active_themes(self) -> List[Theme]:
        q = select(Theme).where(Theme.is_active.is_(True)).order_by(Theme.display_name)
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def list_themes_with_missions(self) -> List[Theme]:
        q = select(Theme).options(
            selectinload(Theme.campaigns).selectinload(Campaign.missions),
        )
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def find_words(self, texts: Iterable[str]) -> Dict[str, Word]:
        """Catalog words keyed by lowercase text (case-insensitive match)."""
        lowered = sorted({t.lower() for t in texts})
        if not lowered:
            return {}
        q = select(Word).where(func.lower(Word.text).in_(lowered))
        result = await self.session.execute(q)
        return {w.text.lower(): w for w in result.scalars().all()}

    # ------------------------------------------------------------------
    # Mission progress & unlocks
    # ------------------------------------------------------------------

    async def list_mission_progress(self, player_id: uuid.UUID) -> List[MissionProgress]:
        q = (
            select(MissionProgress)
            .where(MissionProgress.player_id == player_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def get_mission_progress(
        self,
        player_id: uuid.UUID,
        mission_id: uuid.UUID,
    ) -> Optional[MissionProgress]:
        q = (
            select(MissionProgress)
            .where(
                MissionProgress.player_id == player_id,
                MissionProgress.mission_id == mission_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def upsert_mission_progress(
        self,
        player_id: uuid.UUID,
        mission_id: uuid.UUID,
        stars: int,
        completed_at: Optional[datetime] = None,
    ) -> MissionProgress:
        """
        Insert the first completion or raise the stored stars.

        A row is only ever updated when the new star count is strictly
        greater; equal or lower results leave stars and timestamp alone.
        Returns the row as stored after the statement.
        """
        stmt = self._insert(MissionProgress).values(
            id=uuid.uuid4(),
            player_id=player_id,
            mission_id=mission_id,
            stars=stars,
            completed_at=completed_at or utcnow(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["player_id", "mission_id"],
            set_={
                "stars": stmt.excluded.stars,
                "completed_at": stmt.excluded.completed_at,
            },
            where=MissionProgress.stars < stmt.excluded.stars,
        )
        await self.session.execute(stmt)
        stored = await self.get_mission_progress(player_id, mission_id)
        if stored is None:
            raise RuntimeError("Mission progress upsert left no row")
        return stored

    async def sum_stars(self, player_id: uuid.UUID) -> int:
        """Full recomputation of a player's stars across all missions."""
        q = select(func.coalesce(func.sum(MissionProgress.stars), 0)).where(
            MissionProgress.player_id == player_id,
        )
        result = await self.session.execute(q)
        return int(result.scalar() or 0)

    async def grant_unlock(self, player_id: uuid.UUID, unlock_type: str, unlock_id: str) -> bool:
        """Record an unlock; returns False when the player already had it."""
        stmt = (
            self._insert(PlayerUnlock)
            .values(
                id=uuid.uuid4(),
                player_id=player_id,
                unlock_type=unlock_type,
                unlock_id=unlock_id,
                unlocked_at=utcnow(),
            )
            .on_conflict_do_nothing(index_elements=["player_id", "unlock_id"])
            .returning(PlayerUnlock.id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def list_unlocks(self, player_id: uuid.UUID) -> List[PlayerUnlock]:
        q = (
            select(PlayerUnlock)
            .where(PlayerUnlock.player_id == player_id)
            .order_by(PlayerUnlock.unlocked_at)
        )
        result = await self.session.execute(q)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Word mastery
    # ------------------------------------------------------------------

    async def lock_word_mastery(
        self,
        player_id: uuid.UUID,
        word_ids: Iterable[uuid.UUID],
    ) -> Dict[uuid.UUID, WordMastery]:
        """Existing mastery rows for these words, row-locked until commit."""
        ids = list(word_ids)
        if not ids:
            return {}
        q = (
            select(WordMastery)
            .where(WordMastery.player_id == player_id, WordMastery.word_id.in_(ids))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(q)
        return {row.word_id: row for row in result.scalars().all()}

    async def insert_word_mastery(
        self,
        player_id: uuid.UUID,
        word_id: uuid.UUID,
        values: Dict[str, Any],
    ) -> bool:
        """Insert a fresh mastery row; False if another writer created it first."""
        stmt = (
            self._insert(WordMastery)
            .values(id=uuid.uuid4(), player_id=player_id, word_id=word_id, **values)
            .on_conflict_do_nothing(index_elements=["player_id", "word_id"])
            .returning(WordMastery.id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def update_word_mastery(self, row: WordMastery, values: Dict[str, Any]) -> WordMastery:
        for key, value in values.items():
            setattr(row, key, value)
        await self.session.flush()
        return row

    async def list_word_mastery(self, player_id: uuid.UUID) -> List[Tuple[WordMastery, Word]]:
        q = (
            select(WordMastery, Word)
            .join(Word, Word.id == WordMastery.word_id)
            .where(WordMastery.player_id == player_id)
            .order_by(Word.text)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(q)
        return [(row[0], row[1]) for row in result.all()]

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    async def delete_progress(self, player_id: Optional[uuid.UUID] = None) -> Dict[str, int]:
        """
        Delete mission progress and word mastery (one player or everyone)
        and zero the cached player stats. Unlocks are kept.
        """
        progress_q = delete(MissionProgress)
        mastery_q = delete(WordMastery)
        players_q = update(Player).values(
            total_stars=0,
            total_play_time_seconds=0,
            updated_at=utcnow(),
        )
        if player_id is not None:
            progress_q = progress_q.where(MissionProgress.player_id == player_id)
            mastery_q = mastery_q.where(WordMastery.player_id == player_id)
            players_q = players_q.where(Player.id == player_id)

        progress_result = await self.session.execute(progress_q.execution_options(synchronize_session=False))
        mastery_result = await self.session.execute(mastery_q.execution_options(synchronize_session=False))
        players_result = await self.session.execute(players_q.execution_options(synchronize_session=False))
        return {
            "mission_progress": progress_result.rowcount or 0,
            "word_mastery": mastery_result.rowcount or 0,
            "players": players_result.rowcount or 0,
        }
