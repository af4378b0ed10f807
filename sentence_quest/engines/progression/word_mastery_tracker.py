"""
Word Mastery Tracker - folds end-of-session word performance into
per-player mastery records.

A batch is aggregated per word first, then merged once per word; the
intermediate states of applying observations one by one mean nothing.
Words missing from the vocabulary catalog are skipped, not reported as errors.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from sentence_quest.engines.progression.errors import InvalidInputError, NotFoundError
from sentence_quest.engines.progression.mastery_tier import MasterySnapshot, classify_mastery
from sentence_quest.kernel.events.event_store import EventStore
from sentence_quest.kernel.models.base import utcnow
from sentence_quest.kernel.models.event_log import EventType
from sentence_quest.kernel.models.player import MasteryLevel, WordMastery
from sentence_quest.kernel.storage.progress_store import ProgressStore
from sentence_quest.logging_config import bind_player, get_logger

logger = get_logger(__name__)


class WordObservation(BaseModel):
    """How the player did on one word in one sentence."""

    word: str
    correct_first_try: bool = False  # no hints and no retries
    needed_hint: bool = False
    needed_retry: bool = False


class BatchAggregate(BaseModel):
    """Per-word counts within a single submitted batch."""

    total: int = 0
    correct_first_try: int = 0
    needed_hint: int = 0
    needed_retry: int = 0

    @property
    def all_first_try(self) -> bool:
        return self.total > 0 and self.correct_first_try == self.total


class MasteryCounters(BaseModel):
    """Stored counters of one mastery record (all zero when the word is new)."""

    times_seen: int = 0
    times_correct_first_try: int = 0
    times_needed_hint: int = 0
    times_needed_retry: int = 0
    streak_current: int = 0
    streak_best: int = 0
    mastery_level: MasteryLevel = MasteryLevel.NEW

    @classmethod
    def from_row(cls, row: WordMastery) -> "MasteryCounters":
        return cls(
            times_seen=row.times_seen or 0,
            times_correct_first_try=row.times_correct_first_try or 0,
            times_needed_hint=row.times_needed_hint or 0,
            times_needed_retry=row.times_needed_retry or 0,
            streak_current=row.streak_current or 0,
            streak_best=row.streak_best or 0,
            mastery_level=MasteryLevel(row.mastery_level or MasteryLevel.NEW),
        )


class MasteryBatchEvent(BaseModel):
    """Audit payload for one mastery submission."""

    submitted: int
    updated_word_ids: List[uuid.UUID]
    dropped_words: List[str]


class WordMasteryEntry(BaseModel):
    """Mastery record joined with its word text, for the parent dashboard."""

    word_id: uuid.UUID
    word: str
    times_seen: int
    times_correct_first_try: int
    times_needed_hint: int
    times_needed_retry: int
    streak_current: int
    streak_best: int
    mastery_level: MasteryLevel
    last_seen_at: Optional[datetime] = None


def aggregate_batch(observations: Sequence[WordObservation]) -> Dict[str, BatchAggregate]:
    """Count occurrences per word (lowercased) within one batch."""
    aggregates: Dict[str, BatchAggregate] = {}
    for obs in observations:
        agg = aggregates.setdefault(obs.word.strip().lower(), BatchAggregate())
        agg.total += 1
        if obs.correct_first_try:
            agg.correct_first_try += 1
        if obs.needed_hint:
            agg.needed_hint += 1
        if obs.needed_retry:
            agg.needed_retry += 1
    return aggregates


def merge_counters(current: MasteryCounters, batch: BatchAggregate) -> MasteryCounters:
    """
    Fold a batch aggregate into stored counters.

    The streak extends by the batch size only if every occurrence was
    correct on the first try; a single miss resets it to zero.
    """
    streak = current.streak_current + batch.total if batch.all_first_try else 0
    merged = MasteryCounters(
        times_seen=current.times_seen + batch.total,
        times_correct_first_try=current.times_correct_first_try + batch.correct_first_try,
        times_needed_hint=current.times_needed_hint + batch.needed_hint,
        times_needed_retry=current.times_needed_retry + batch.needed_retry,
        streak_current=streak,
        streak_best=max(current.streak_best, streak),
    )
    merged.mastery_level = classify_mastery(
        MasterySnapshot(
            times_seen=merged.times_seen,
            times_correct_first_try=merged.times_correct_first_try,
            streak_current=merged.streak_current,
        )
    )
    return merged


def _row_values(counters: MasteryCounters, seen_at: datetime) -> dict:
    values = counters.model_dump()
    values["mastery_level"] = counters.mastery_level.value
    values["last_seen_at"] = seen_at
    return values


class WordMasteryTracker:
    """Merges word-performance batches into WordMastery rows (database-backed)."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.store = ProgressStore(session)
        self.event_store = EventStore(session)

    async def _require_player(self, player_id: uuid.UUID) -> None:
        if not await self.store.get_player(player_id):
            raise NotFoundError("player", player_id)
        bind_player(player_id)

    @staticmethod
    def validate_batch(observations: Sequence[WordObservation]) -> None:
        if not observations:
            raise InvalidInputError("At least one word observation is required")
        for obs in observations:
            if not obs.word or not obs.word.strip():
                raise InvalidInputError("Word text must not be empty")

    async def record_batch(
        self,
        player_id: uuid.UUID,
        observations: Sequence[WordObservation],
    ) -> int:
        """
        Merge one session's observations; returns the number of distinct words updated.

        Raises:
            NotFoundError: If the player does not exist
            InvalidInputError: If the batch is empty or has a blank word
        """
        self.validate_batch(observations)
        await self._require_player(player_id)

        aggregates = aggregate_batch(observations)
        words = await self.store.find_words(aggregates.keys())
        dropped = sorted(text for text in aggregates if text not in words)
        if dropped:
            logger.debug(
                "Skipping words missing from catalog",
                extra={"dropped_words": dropped},
            )

        by_word_id = {words[text].id: agg for text, agg in aggregates.items() if text in words}
        # Empty when every word was dropped; the batch is still audited
        existing = await self.store.lock_word_mastery(player_id, by_word_id.keys())
        now = utcnow()

        for word_id, batch in by_word_id.items():
            row = existing.get(word_id)
            if row is None:
                merged = merge_counters(MasteryCounters(), batch)
                if await self.store.insert_word_mastery(player_id, word_id, _row_values(merged, now)):
                    continue
                # Another request created the row first; merge on top of it
                row = (await self.store.lock_word_mastery(player_id, [word_id]))[word_id]
            merged = merge_counters(MasteryCounters.from_row(row), batch)
            await self.store.update_word_mastery(row, _row_values(merged, now))

        await self.event_store.log_from_model(
            event_type=EventType.WORD_MASTERY_UPDATED,
            entity_type="player",
            entity_id=player_id,
            player_id=player_id,
            payload_model=MasteryBatchEvent(
                submitted=len(observations),
                updated_word_ids=list(by_word_id),
                dropped_words=dropped,
            ),
        )
        logger.info(
            "Word mastery updated",
            extra={"updated_word_count": len(by_word_id), "dropped_count": len(dropped)},
        )
        return len(by_word_id)

    async def list_mastery(self, player_id: uuid.UUID) -> List[WordMasteryEntry]:
        """All mastery records for a player, alphabetical by word."""
        await self._require_player(player_id)
        return [
            WordMasteryEntry(
                word_id=row.word_id,
                word=word.text,
                times_seen=row.times_seen,
                times_correct_first_try=row.times_correct_first_try,
                times_needed_hint=row.times_needed_hint,
                times_needed_retry=row.times_needed_retry,
                streak_current=row.streak_current,
                streak_best=row.streak_best,
                mastery_level=MasteryLevel(row.mastery_level),
                last_seen_at=row.last_seen_at,
            )
            for row, word in await self.store.list_word_mastery(player_id)
        ]
