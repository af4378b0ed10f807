"""
Mastery tier classification for a single word.

A pure function of the stored counters; the tracker calls it after every
merge and never sets the level any other way.
"""

from pydantic import BaseModel

from sentence_quest.kernel.models.player import MasteryLevel

MASTERED_ACCURACY = 90.0
MASTERED_STREAK = 3
MASTERED_MIN_SEEN = 5

FAMILIAR_ACCURACY = 70.0
FAMILIAR_MIN_SEEN = 3


class MasterySnapshot(BaseModel):
    """Aggregate counters the tier is derived from."""

    times_seen: int = 0
    times_correct_first_try: int = 0
    streak_current: int = 0

    @property
    def accuracy(self) -> float:
        """First-try accuracy as a percentage (0 when never seen)."""
        if self.times_seen <= 0:
            return 0.0
        return self.times_correct_first_try * 100 / self.times_seen


def classify_mastery(snapshot: MasterySnapshot) -> MasteryLevel:
    """First matching tier wins, checked from mastered downwards."""
    accuracy = snapshot.accuracy
    if (
        accuracy >= MASTERED_ACCURACY
        and snapshot.streak_current >= MASTERED_STREAK
        and snapshot.times_seen >= MASTERED_MIN_SEEN
    ):
        return MasteryLevel.MASTERED
    if accuracy >= FAMILIAR_ACCURACY and snapshot.times_seen >= FAMILIAR_MIN_SEEN:
        return MasteryLevel.FAMILIAR
    if snapshot.times_seen >= 1:
        return MasteryLevel.LEARNING
    return MasteryLevel.NEW
