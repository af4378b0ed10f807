"""
Event Store service for append-only audit logging.

Progression writes log here inside the same session, so the audit row
commits or rolls back together with the change it describes.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from sentence_quest.kernel.models.event_log import EventLog, EventType


class EventStore:
    """
    Service for managing the immutable event log.

    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.MISSION_COMPLETED,
            entity_type="mission",
            entity_id=mission.id,
            player_id=player.id,
            payload={"stars": 3},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: Optional[uuid.UUID] = None,
        player_id: Optional[uuid.UUID] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> EventLog:
        """
        Append an event to the audit log.

        Args:
            event_type: The type of event
            entity_type: The type of entity (player, mission, word, ...)
            entity_id: The ID of the entity, if the event targets one
            player_id: The player the event concerns
            payload: Additional event data

        Returns:
            The created EventLog record
        """
        if payload:
            payload = self._serialize_payload(payload)

        event = EventLog(
            event_type=EventType(event_type).value,
            entity_type=entity_type,
            entity_id=entity_id,
            player_id=player_id,
            payload=payload or {},
        )

        self.session.add(event)
        # Caller owns flush/commit
        return event

    async def log_from_model(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: Optional[uuid.UUID],
        player_id: Optional[uuid.UUID],
        payload_model: BaseModel,
    ) -> EventLog:
        """Log an event using a Pydantic model as payload."""
        return await self.log(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            player_id=player_id,
            payload=payload_model.model_dump(mode="json"),
        )

    async def get_player_activity(
        self,
        player_id: uuid.UUID,
        event_types: Optional[List[EventType]] = None,
        limit: int = 100,
    ) -> List[EventLog]:
        """
        Get events concerning a player, newest first.

        Args:
            player_id: The player ID
            event_types: Optional filter for specific event types
            limit: Maximum number of events
        """
        query = select(EventLog).where(EventLog.player_id == player_id)
        if event_types:
            query = query.where(EventLog.event_type.in_([e.value for e in event_types]))
        query = query.order_by(desc(EventLog.created_at)).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    def _serialize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Make a payload JSON-serializable (UUIDs, datetimes, enums, models)."""
        result: Dict[str, Any] = {}
        for key, value in payload.items():
            if isinstance(value, uuid.UUID):
                result[key] = str(value)
            elif isinstance(value, datetime):
                result[key] = value.isoformat()
            elif isinstance(value, BaseModel):
                result[key] = value.model_dump(mode="json")
            elif hasattr(value, "value"):
                result[key] = value.value
            elif isinstance(value, dict):
                result[key] = self._serialize_payload(value)
            elif isinstance(value, (list, tuple)):
                result[key] = [
                    str(v) if isinstance(v, uuid.UUID) else v
                    for v in value
                ]
            else:
                result[key] = value
        return result
