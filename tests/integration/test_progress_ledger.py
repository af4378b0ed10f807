"""Integration tests for ProgressLedger against an in-memory SQLite database."""

import uuid

import pytest
from sqlalchemy import func, select

from sentence_quest.engines.progression.errors import InvalidInputError, NotFoundError
from sentence_quest.engines.progression.progress_ledger import ProgressLedger
from sentence_quest.engines.progression.word_mastery_tracker import (
    WordMasteryTracker,
    WordObservation,
)
from sentence_quest.kernel.events.event_store import EventStore
from sentence_quest.kernel.models import (
    Campaign,
    EventLog,
    EventType,
    MissionProgress,
    PlayerUnlock,
    Theme,
)


class TestRecordCompletion:
    async def test_first_completion(self, db_session, catalog, player):
        ledger = ProgressLedger(db_session)
        result = await ledger.record_completion(player.id, catalog["first"].id, stars_earned=3)
        await db_session.commit()

        assert result.stars_earned == 3
        assert result.best_stars == 3
        assert result.improved is True
        assert result.total_stars == 3
        assert result.next_mission_id == catalog["second"].id
        assert result.unlock_reward is None

        progress = await ledger.get_progress(player.id)
        assert progress.current_mission_id == catalog["second"].id
        assert progress.total_stars == 3

    async def test_stars_never_decrease(self, db_session, catalog, player):
        ledger = ProgressLedger(db_session)
        mission_id = catalog["first"].id

        await ledger.record_completion(player.id, mission_id, stars_earned=2)
        best = await ledger.record_completion(player.id, mission_id, stars_earned=3)
        first_completed_at = (await ledger.store.get_mission_progress(player.id, mission_id)).completed_at
        worse = await ledger.record_completion(player.id, mission_id, stars_earned=1)
        await db_session.commit()

        assert best.best_stars == 3
        assert best.improved is True
        assert worse.stars_earned == 1
        assert worse.best_stars == 3
        assert worse.improved is False
        assert worse.total_stars == 3

        stored = await ledger.store.get_mission_progress(player.id, mission_id)
        assert stored.stars == 3
        assert stored.completed_at == first_completed_at

        count = await db_session.scalar(
            select(func.count()).select_from(MissionProgress).where(MissionProgress.player_id == player.id)
        )
        assert count == 1

    @pytest.mark.parametrize("reported,stored", [(0, 1), (-2, 1), (5, 3)])
    async def test_out_of_range_stars_are_clamped(self, db_session, catalog, player, reported, stored):
        result = await ProgressLedger(db_session).record_completion(
            player.id, catalog["first"].id, stars_earned=reported
        )
        assert result.stars_earned == stored
        assert result.total_stars == stored

    async def test_hints_used_converted_to_stars(self, db_session, catalog, player):
        result = await ProgressLedger(db_session).record_completion(
            player.id, catalog["first"].id, hints_used=1
        )
        assert result.stars_earned == 2

    async def test_missing_stars_and_hints_rejected(self, db_session, catalog, player):
        with pytest.raises(InvalidInputError):
            await ProgressLedger(db_session).record_completion(player.id, catalog["first"].id)

    async def test_unknown_player(self, db_session, catalog, missing_id):
        with pytest.raises(NotFoundError) as exc:
            await ProgressLedger(db_session).record_completion(missing_id, catalog["first"].id, stars_earned=3)
        assert exc.value.entity == "player"

    async def test_unknown_mission(self, db_session, catalog, player, missing_id):
        with pytest.raises(NotFoundError) as exc:
            await ProgressLedger(db_session).record_completion(player.id, missing_id, stars_earned=3)
        assert exc.value.entity == "mission"

    async def test_hint_based_run_through_campaign(self, db_session, catalog, player):
        ledger = ProgressLedger(db_session)
        first = await ledger.record_completion(player.id, catalog["first"].id, hints_used=0)
        assert (first.stars_earned, first.total_stars) == (3, 3)
        assert first.next_mission_id == catalog["second"].id

        second = await ledger.record_completion(player.id, catalog["second"].id, hints_used=2)
        assert (second.stars_earned, second.total_stars) == (1, 4)
        assert second.next_mission_id == catalog["boss"].id

        progress = await ledger.get_progress(player.id)
        assert progress.missions[2].is_unlocked is True

    async def test_total_stars_is_sum_over_missions(self, db_session, catalog, player):
        ledger = ProgressLedger(db_session)
        await ledger.record_completion(player.id, catalog["first"].id, stars_earned=3)
        result = await ledger.record_completion(player.id, catalog["second"].id, stars_earned=2)
        assert result.total_stars == 5

    async def test_last_mission_keeps_pointer(self, db_session, catalog, player):
        ledger = ProgressLedger(db_session)
        result = await ledger.record_completion(player.id, catalog["boss"].id, stars_earned=3)
        await db_session.commit()

        assert result.next_mission_id is None
        progress = await ledger.get_progress(player.id)
        assert progress.current_mission_id == catalog["boss"].id

    async def test_unlock_granted_once(self, db_session, catalog, player):
        ledger = ProgressLedger(db_session)
        first = await ledger.record_completion(player.id, catalog["boss"].id, stars_earned=2)
        second = await ledger.record_completion(player.id, catalog["boss"].id, stars_earned=3)
        await db_session.commit()

        assert first.unlock_reward.type == "avatar"
        assert first.unlock_reward.id == "robot"
        assert first.unlock_granted is True
        # Reward is still reported on replay, but not granted again
        assert second.unlock_reward is not None
        assert second.unlock_granted is False

        count = await db_session.scalar(
            select(func.count()).select_from(PlayerUnlock).where(PlayerUnlock.player_id == player.id)
        )
        assert count == 1

    async def test_completion_is_audited(self, db_session, catalog, player):
        await ProgressLedger(db_session).record_completion(player.id, catalog["boss"].id, stars_earned=3)
        await db_session.commit()

        events = await EventStore(db_session).get_player_activity(player.id)
        types = {e.event_type for e in events}
        assert EventType.MISSION_COMPLETED.value in types
        assert EventType.UNLOCK_GRANTED.value in types


class TestGetProgress:
    async def test_fresh_player(self, db_session, catalog, player):
        progress = await ProgressLedger(db_session).get_progress(player.id)

        assert progress.player_name == "Mia"
        assert progress.current_theme.display_name == "Space Rangers"
        assert progress.current_campaign.title == "Moon Base"
        assert [m.title for m in progress.missions] == ["Launch", "Landing", "Meteor Storm"]
        assert [m.is_unlocked for m in progress.missions] == [True, False, False]
        assert not any(m.is_completed for m in progress.missions)
        assert progress.unlocks == []

    async def test_unlocks_follow_completions(self, db_session, catalog, player):
        ledger = ProgressLedger(db_session)
        await ledger.record_completion(player.id, catalog["first"].id, stars_earned=3)
        progress = await ledger.get_progress(player.id)
        assert [m.is_unlocked for m in progress.missions] == [True, True, False]
        assert progress.missions[0].is_completed is True
        assert progress.missions[0].stars == 3
        assert progress.missions[1].is_current is True

        await ledger.record_completion(player.id, catalog["second"].id, stars_earned=1)
        progress = await ledger.get_progress(player.id)
        boss = progress.missions[2]
        assert boss.mission_type == "boss"
        assert boss.is_unlocked is True
        assert boss.is_completed is False

    async def test_unlocks_listed(self, db_session, catalog, player):
        ledger = ProgressLedger(db_session)
        await ledger.record_completion(player.id, catalog["boss"].id, stars_earned=3)
        progress = await ledger.get_progress(player.id)
        assert [(u.type, u.id) for u in progress.unlocks] == [("avatar", "robot")]

    async def test_player_without_campaign(self, db_session, catalog):
        from sentence_quest.kernel.players.player_service import PlayerService

        newcomer = await PlayerService(db_session).create_player("Leo")
        progress = await ProgressLedger(db_session).get_progress(newcomer.id)
        assert progress.current_campaign is None
        assert progress.missions == []
        assert progress.total_stars == 0

    async def test_unknown_player(self, db_session, catalog, missing_id):
        with pytest.raises(NotFoundError):
            await ProgressLedger(db_session).get_progress(missing_id)


class TestThemes:
    async def test_progress_by_theme(self, db_session, catalog, player):
        ledger = ProgressLedger(db_session)
        await ledger.record_completion(player.id, catalog["first"].id, stars_earned=3)
        await ledger.record_completion(player.id, catalog["second"].id, stars_earned=2)

        summaries = await ledger.progress_by_theme(player.id)
        assert len(summaries) == 1
        summary = summaries[0]
        assert summary.theme_id == catalog["theme"].id
        assert summary.total_missions == 3
        assert summary.completed_missions == 2
        assert summary.total_stars == 5
        assert summary.max_stars == 9

    async def test_select_theme_moves_to_first_campaign(self, db_session, catalog, player):
        ocean = Theme(id=uuid.uuid4(), name="ocean", display_name="Ocean Friends")
        db_session.add(ocean)
        await db_session.flush()
        later = Campaign(id=uuid.uuid4(), theme_id=ocean.id, title="Deep Dive", order=2)
        opening = Campaign(id=uuid.uuid4(), theme_id=ocean.id, title="Shoreline", order=1)
        db_session.add_all([later, opening])
        await db_session.commit()

        ledger = ProgressLedger(db_session)
        await ledger.record_completion(player.id, catalog["first"].id, stars_earned=3)
        updated = await ledger.select_theme(player.id, ocean.id)

        assert updated.current_theme_id == ocean.id
        assert updated.current_campaign_id == opening.id
        assert updated.current_mission_id is None

    async def test_select_unknown_theme(self, db_session, catalog, player, missing_id):
        with pytest.raises(NotFoundError) as exc:
            await ProgressLedger(db_session).select_theme(player.id, missing_id)
        assert exc.value.entity == "theme"


class TestResetProgress:
    async def test_reset_one_player(self, db_session, catalog, player):
        ledger = ProgressLedger(db_session)
        await ledger.record_completion(player.id, catalog["boss"].id, stars_earned=3)
        await WordMasteryTracker(db_session).record_batch(
            player.id, [WordObservation(word="cat", correct_first_try=True)]
        )
        await db_session.commit()

        counts = await ledger.reset_progress(player.id)
        await db_session.commit()

        assert counts["mission_progress"] == 1
        assert counts["word_mastery"] == 1

        progress = await ledger.get_progress(player.id)
        assert progress.total_stars == 0
        assert not any(m.is_completed for m in progress.missions)
        # Unlocks and the mission pointer survive a reset
        assert [u.id for u in progress.unlocks] == ["robot"]
        assert progress.current_mission_id == catalog["boss"].id
        assert await WordMasteryTracker(db_session).list_mastery(player.id) == []

    async def test_reset_unknown_player(self, db_session, catalog, missing_id):
        with pytest.raises(NotFoundError):
            await ProgressLedger(db_session).reset_progress(missing_id)

    async def test_reset_all_players(self, db_session, catalog, player):
        ledger = ProgressLedger(db_session)
        await ledger.record_completion(player.id, catalog["first"].id, stars_earned=2)
        await db_session.commit()

        counts = await ledger.reset_progress()
        await db_session.commit()

        assert counts["mission_progress"] == 1
        assert counts["players"] == 1
        resets = await db_session.scalar(
            select(func.count()).select_from(EventLog).where(
                EventLog.event_type == EventType.PROGRESS_RESET.value,
                EventLog.entity_type == "all_players",
            )
        )
        assert resets == 1
