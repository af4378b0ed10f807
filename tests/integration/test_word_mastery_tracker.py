"""Integration tests for WordMasteryTracker against an in-memory SQLite database."""

import pytest

from sentence_quest.engines.progression.errors import InvalidInputError, NotFoundError
from sentence_quest.engines.progression.word_mastery_tracker import (
    WordMasteryTracker,
    WordObservation,
)
from sentence_quest.kernel.events.event_store import EventStore
from sentence_quest.kernel.models import EventType, MasteryLevel


def _correct(word: str) -> WordObservation:
    return WordObservation(word=word, correct_first_try=True)


def _hinted(word: str) -> WordObservation:
    return WordObservation(word=word, needed_hint=True)


async def _entries(tracker: WordMasteryTracker, player_id):
    return {e.word: e for e in await tracker.list_mastery(player_id)}


class TestRecordBatch:
    async def test_new_words_create_records(self, db_session, catalog, player):
        tracker = WordMasteryTracker(db_session)
        updated = await tracker.record_batch(player.id, [_correct("the"), _hinted("cat")])
        await db_session.commit()

        assert updated == 2
        entries = await _entries(tracker, player.id)
        assert entries["the"].times_seen == 1
        assert entries["the"].times_correct_first_try == 1
        assert entries["the"].streak_current == 1
        assert entries["the"].mastery_level == MasteryLevel.LEARNING
        assert entries["cat"].times_needed_hint == 1
        assert entries["cat"].streak_current == 0
        assert entries["cat"].last_seen_at is not None

    async def test_repeated_word_counted_once_per_record(self, db_session, catalog, player):
        tracker = WordMasteryTracker(db_session)
        updated = await tracker.record_batch(
            player.id, [_correct("the"), _correct("The"), _correct("THE")]
        )
        assert updated == 1

        entries = await _entries(tracker, player.id)
        assert entries["the"].times_seen == 3
        assert entries["the"].streak_current == 3
        assert entries["the"].streak_best == 3
        assert entries["the"].mastery_level == MasteryLevel.FAMILIAR

    async def test_streak_resets_on_any_miss(self, db_session, catalog, player):
        tracker = WordMasteryTracker(db_session)
        await tracker.record_batch(player.id, [_correct("cat")] * 4)
        await tracker.record_batch(player.id, [_correct("cat"), _hinted("cat")])

        entry = (await _entries(tracker, player.id))["cat"]
        assert entry.times_seen == 6
        assert entry.streak_current == 0
        assert entry.streak_best == 4

    async def test_reaches_mastered(self, db_session, catalog, player):
        tracker = WordMasteryTracker(db_session)
        await tracker.record_batch(player.id, [_correct("jump")] * 3)
        await tracker.record_batch(player.id, [_correct("jump")] * 2)

        entry = (await _entries(tracker, player.id))["jump"]
        assert entry.times_seen == 5
        assert entry.streak_current == 5
        assert entry.mastery_level == MasteryLevel.MASTERED

    async def test_unknown_words_skipped(self, db_session, catalog, player):
        tracker = WordMasteryTracker(db_session)
        updated = await tracker.record_batch(player.id, [_correct("the"), _correct("xylophone")])
        assert updated == 1
        assert set(await _entries(tracker, player.id)) == {"the"}

    async def test_only_unknown_words(self, db_session, catalog, player):
        tracker = WordMasteryTracker(db_session)
        assert await tracker.record_batch(player.id, [_correct("xylophone")]) == 0
        assert await tracker.list_mastery(player.id) == []

    async def test_row_created_by_another_request_is_merged(self, db_session, catalog, player, monkeypatch):
        tracker = WordMasteryTracker(db_session)
        await tracker.record_batch(player.id, [_correct("the")] * 2)

        # The first lock misses the row, as if a concurrent request inserted it
        # after our read; the insert then conflicts and the batch is merged on top.
        original_lock = tracker.store.lock_word_mastery
        calls = []

        async def lock_missing_first(player_id, word_ids):
            calls.append(list(word_ids))
            if len(calls) == 1:
                return {}
            return await original_lock(player_id, word_ids)

        monkeypatch.setattr(tracker.store, "lock_word_mastery", lock_missing_first)
        assert await tracker.record_batch(player.id, [_correct("the")]) == 1
        monkeypatch.undo()

        assert len(calls) == 2
        entry = (await _entries(tracker, player.id))["the"]
        assert entry.times_seen == 3
        assert entry.times_correct_first_try == 3
        assert entry.streak_current == 3
        assert entry.mastery_level == MasteryLevel.FAMILIAR

    async def test_batch_is_audited(self, db_session, catalog, player):
        tracker = WordMasteryTracker(db_session)
        await tracker.record_batch(player.id, [_correct("the"), _correct("zebra")])
        await db_session.commit()

        events = await EventStore(db_session).get_player_activity(
            player.id, event_types=[EventType.WORD_MASTERY_UPDATED]
        )
        assert len(events) == 1
        assert events[0].payload["submitted"] == 2
        assert events[0].payload["dropped_words"] == ["zebra"]
        assert events[0].payload["updated_word_ids"] == [str(catalog["words"]["the"].id)]

    async def test_all_unknown_batch_is_still_audited(self, db_session, catalog, player):
        tracker = WordMasteryTracker(db_session)
        await tracker.record_batch(player.id, [_correct("xylophone"), _hinted("Xylophone")])
        await db_session.commit()

        events = await EventStore(db_session).get_player_activity(
            player.id, event_types=[EventType.WORD_MASTERY_UPDATED]
        )
        assert len(events) == 1
        assert events[0].payload["submitted"] == 2
        assert events[0].payload["updated_word_ids"] == []
        assert events[0].payload["dropped_words"] == ["xylophone"]

    async def test_unknown_player(self, db_session, catalog, missing_id):
        with pytest.raises(NotFoundError):
            await WordMasteryTracker(db_session).record_batch(missing_id, [_correct("the")])

    async def test_empty_batch(self, db_session, catalog, player):
        with pytest.raises(InvalidInputError):
            await WordMasteryTracker(db_session).record_batch(player.id, [])


class TestListMastery:
    async def test_alphabetical(self, db_session, catalog, player):
        tracker = WordMasteryTracker(db_session)
        await tracker.record_batch(player.id, [_correct("the"), _correct("cat"), _correct("jump")])
        assert [e.word for e in await tracker.list_mastery(player.id)] == ["cat", "jump", "the"]

    async def test_unknown_player(self, db_session, catalog, missing_id):
        with pytest.raises(NotFoundError):
            await WordMasteryTracker(db_session).list_mastery(missing_id)
