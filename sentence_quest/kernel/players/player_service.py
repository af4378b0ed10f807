"""
Player service for profile management.
"""

import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from sentence_quest.config import get_settings
from sentence_quest.kernel.events.event_store import EventStore
from sentence_quest.kernel.models.event_log import EventType
from sentence_quest.kernel.models.player import Player
from sentence_quest.kernel.storage.progress_store import ProgressStore
from sentence_quest.logging_config import bind_player, get_logger

logger = get_logger(__name__)


class PlayerService:
    """
    Service for player profile operations.

    A household shares one device, so the number of profiles is capped.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.store = ProgressStore(session)
        self.event_store = EventStore(session)
        settings = get_settings()
        self.max_players = settings.max_players
        self.name_max_length = settings.player_name_max_length

    async def create_player(self, name: str, avatar_id: Optional[str] = None) -> Player:
        """
        Create a new player profile.

        Raises:
            ValueError: If the name is blank or too long, or the profile limit is reached
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Player name is required")
        if len(name) > self.name_max_length:
            raise ValueError(f"Name is too long (max {self.name_max_length} characters)")

        player_count = await self.store.count_players()
        if player_count >= self.max_players:
            raise ValueError(f"Maximum of {self.max_players} players reached")

        player = await self.store.create_player(name=name, avatar_id=avatar_id)

        await self.event_store.log(
            event_type=EventType.PLAYER_CREATED,
            entity_type="player",
            entity_id=player.id,
            player_id=player.id,
            payload={"name": player.name, "avatar_id": avatar_id},
        )
        bind_player(player.id)
        logger.info("Player created", extra={"player_count": player_count + 1})
        return player

    async def get_player(self, player_id: uuid.UUID) -> Optional[Player]:
        return await self.store.get_player(player_id)

    async def list_players(self) -> List[Player]:
        """All players, most recently active first."""
        return await self.store.list_players()

    async def current_player(self, player_id: Optional[uuid.UUID] = None) -> Optional[Player]:
        """
        The player the game should resume with.

        A known player_id wins; otherwise the most recently active profile,
        or None on a fresh device.
        """
        if player_id is not None:
            player = await self.store.get_player(player_id, with_context=True)
            if player:
                return player
        return await self.store.most_recent_player()

    async def mark_current(self, player_id: uuid.UUID) -> Optional[Player]:
        """Make this player the most recently active one. None if unknown."""
        player = await self.store.get_player(player_id)
        if not player:
            return None
        bind_player(player.id)
        return await self.store.update_player(player)
