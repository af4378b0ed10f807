"""
Mission Gate - decides which missions in a campaign a player may play.

Rules, evaluated per mission in campaign order:
- The first mission is always unlocked.
- A non-boss mission is unlocked once the mission before it is completed.
- A boss mission is unlocked once every non-boss mission is completed,
  wherever the boss sits in the ordering.

Unlock state is never stored; it is recomputed from completions on every query.
"""

import uuid
from typing import AbstractSet, Dict, List, Sequence

from sentence_quest.kernel.models.catalog import Mission


class MissionGate:
    """Pure unlock queries over (missions, completed mission ids)."""

    @staticmethod
    def ordered(missions: Sequence[Mission]) -> List[Mission]:
        """Missions sorted by their position within the campaign."""
        return sorted(missions, key=lambda m: m.order or 0)

    @classmethod
    def unlock_map(
        cls,
        missions: Sequence[Mission],
        completed_ids: AbstractSet[uuid.UUID],
    ) -> Dict[uuid.UUID, bool]:
        """Map every mission id to whether it is currently playable."""
        ordered = cls.ordered(missions)
        all_regular_done = all(m.id in completed_ids for m in ordered if not m.is_boss)

        unlocked: Dict[uuid.UUID, bool] = {}
        for index, mission in enumerate(ordered):
            if mission.is_boss:
                unlocked[mission.id] = all_regular_done
            elif index == 0:
                unlocked[mission.id] = True
            else:
                unlocked[mission.id] = ordered[index - 1].id in completed_ids
        return unlocked

    @classmethod
    def unlocked_ids(
        cls,
        missions: Sequence[Mission],
        completed_ids: AbstractSet[uuid.UUID],
    ) -> List[uuid.UUID]:
        """Ids of playable missions, in campaign order."""
        unlocked = cls.unlock_map(missions, completed_ids)
        return [m.id for m in cls.ordered(missions) if unlocked[m.id]]

    @classmethod
    def is_unlocked(
        cls,
        mission_id: uuid.UUID,
        missions: Sequence[Mission],
        completed_ids: AbstractSet[uuid.UUID],
    ) -> bool:
        return cls.unlock_map(missions, completed_ids).get(mission_id, False)
