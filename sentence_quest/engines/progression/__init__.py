"""
Progression Engine - stars, mission unlocks, progress ledger and word mastery.

Stars:
- 0 hints: 3 stars, 1 hint: 2 stars, 2+ hints: 1 star (never zero)

Unlocks:
- First mission always open; each mission opens when the previous one is done
- Boss missions open once every non-boss mission in the campaign is done

Word mastery tiers (accuracy = first-try correct / seen):
- Mastered: accuracy >= 90%, streak >= 3, seen >= 5
- Familiar: accuracy >= 70%, seen >= 3
- Learning: seen at least once
- New: never seen
"""

from sentence_quest.engines.progression.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    ProgressionError,
)
from sentence_quest.engines.progression.star_calculator import (
    calculate_stars,
    clamp_stars,
    star_message,
)
from sentence_quest.engines.progression.mission_gate import MissionGate
from sentence_quest.engines.progression.mastery_tier import MasterySnapshot, classify_mastery
from sentence_quest.engines.progression.progress_ledger import (
    CompletionResult,
    PlayerProgress,
    ProgressLedger,
    ThemeProgress,
)
from sentence_quest.engines.progression.word_mastery_tracker import (
    WordMasteryTracker,
    WordObservation,
)

__all__ = [
    "ProgressionError",
    "NotFoundError",
    "InvalidInputError",
    "ConflictError",
    "calculate_stars",
    "clamp_stars",
    "star_message",
    "MissionGate",
    "MasterySnapshot",
    "classify_mastery",
    "ProgressLedger",
    "CompletionResult",
    "PlayerProgress",
    "ThemeProgress",
    "WordMasteryTracker",
    "WordObservation",
]
