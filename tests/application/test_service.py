import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from kotoba.application.factory import build_service
from kotoba.domain.errors import InvalidInputError
from kotoba.domain.events import GameCompleted, LearnerSnapshot, LessonCompleted, ReviewCompleted
from kotoba.domain.progression.models import DailyActivity, LearnerStats, StreakState
from kotoba.domain.srs.models import ReviewOutcome, SRSState, Stage
from kotoba.infrastructure.adapters.memory_repository import InMemoryProgressRepository


@pytest.fixture
def repo():
    return InMemoryProgressRepository()


@pytest.fixture
def service(config, repo, clock, catalog):
    return build_service(config, repo=repo, clock=clock, catalog=catalog)


def review(item_id, quality, learner_id="learner"):
    return ReviewCompleted(learner_id, ReviewOutcome(item_id, quality, "kanji"))


@pytest.mark.asyncio
async def test_lesson_then_review_persists_everything(service, repo, now):
    await service.submit(LessonCompleted("learner", ("mizu", "hi"), "kanji"))
    outcome = await service.submit(review("mizu", 5))

    stored = await repo.get_item_state("learner", "mizu")
    assert stored == outcome.srs_state
    assert stored.stage == Stage.APPRENTICE_2
    assert stored.next_review_at == now + timedelta(days=1)

    snapshot = await repo.get_snapshot("learner")
    assert snapshot.stats == outcome.stats
    assert snapshot.stats.lessons_completed == 1
    assert snapshot.stats.reviews_completed == 1
    assert snapshot.streak.current_streak == 1
    assert snapshot.unlocked == frozenset({"first_review"})


@pytest.mark.asyncio
async def test_unlocks_are_recorded_with_ids(service, repo, now):
    await service.submit(GameCompleted("learner", "typing", score=5, max_score=5))

    records = await repo.list_unlocked("learner")
    assert {r.achievement_key for r in records} == {"game_on", "perfect_typing"}
    assert all(len(r.id) == 26 for r in records)
    assert all(r.unlocked_at == now for r in records)


@pytest.mark.asyncio
async def test_review_of_inactive_item_is_rejected(service, repo):
    with pytest.raises(InvalidInputError):
        await service.submit(review("unknown", 4))
    assert (await repo.get_snapshot("learner")).stats == LearnerStats()


@pytest.mark.asyncio
async def test_lesson_skips_active_items(service, repo):
    await service.submit(LessonCompleted("learner", ("mizu",), "kanji"))
    await service.submit(review("mizu", 5))

    outcome = await service.submit(LessonCompleted("learner", ("mizu", "hi"), "kanji"))

    assert [s.item_id for s in outcome.new_item_states] == ["hi"]
    assert (await repo.get_item_state("learner", "mizu")).stage == Stage.APPRENTICE_2


@pytest.mark.asyncio
async def test_lesson_of_only_active_items_is_rejected(service):
    await service.submit(LessonCompleted("learner", ("mizu",), "kanji"))
    with pytest.raises(InvalidInputError):
        await service.submit(LessonCompleted("learner", ("mizu",), "kanji"))


@pytest.mark.asyncio
async def test_streak_grows_across_days(service, clock):
    await service.submit(LessonCompleted("learner", ("a",)))
    clock.advance(days=1)
    await service.submit(LessonCompleted("learner", ("b",)))
    clock.advance(days=1)
    outcome = await service.submit(LessonCompleted("learner", ("c",)))

    assert outcome.streak.current_streak == 3
    assert "three_day_streak" in outcome.newly_unlocked


@pytest.mark.asyncio
async def test_concurrent_submissions_are_serialized(service, repo):
    items = tuple(f"item-{i}" for i in range(10))
    await service.submit(LessonCompleted("learner", items, "kanji"))

    await asyncio.gather(*(service.submit(review(item_id, 4)) for item_id in items))

    stats = (await repo.get_snapshot("learner")).stats
    assert stats.reviews_completed == 10
    assert stats.consecutive_correct == 10


@pytest.mark.asyncio
async def test_learners_are_independent(service, repo):
    await service.submit(LessonCompleted("alice", ("mizu",)))
    await service.submit(GameCompleted("bob", "listening", score=3, max_score=10))

    alice = await repo.get_snapshot("alice")
    bob = await repo.get_snapshot("bob")
    assert alice.stats.lessons_completed == 1
    assert alice.stats.games_played == 0
    assert bob.stats.games_played == 1
    assert await repo.list_item_states("bob") == []


@pytest.mark.asyncio
async def test_review_queue(service, clock):
    await service.submit(LessonCompleted("learner", ("mizu", "hi", "ki"), "kanji"))
    await service.submit(review("mizu", 5))

    queue = await service.review_queue("learner")
    assert [s.item_id for s in queue.due] == ["hi", "ki"]

    clock.advance(days=1)
    queue = await service.review_queue("learner", max_items=1)
    assert len(queue.due) == 1
    assert queue.overflow == 2


@pytest.mark.asyncio
async def test_check_streak_breaks_lapsed_streak(service, repo, today):
    streak = StreakState(
        current_streak=4, longest_streak=4, last_activity_date=today - timedelta(days=3)
    )
    await repo.save_progress("learner", LearnerStats(current_streak=4, longest_streak=4), streak)

    result = await service.check_streak("learner")

    assert result.current_streak == 0
    assert result.longest_streak == 4
    snapshot = await repo.get_snapshot("learner")
    assert snapshot.streak == result
    assert snapshot.stats.current_streak == 0


@pytest.mark.asyncio
async def test_check_streak_does_not_write_unchanged_state(config, clock, catalog, today):
    repo = AsyncMock()
    streak = StreakState(current_streak=2, longest_streak=2, last_activity_date=today)
    repo.get_snapshot.return_value = LearnerSnapshot("learner", streak=streak)
    service = build_service(config, repo=repo, clock=clock, catalog=catalog)

    assert await service.check_streak("learner") == streak
    repo.save_progress.assert_not_called()


@pytest.mark.asyncio
async def test_duplicate_unlock_is_not_fatal(config, clock, catalog):
    repo = AsyncMock()
    repo.get_snapshot.return_value = LearnerSnapshot("learner")
    repo.unlock_achievement.return_value = False
    service = build_service(config, repo=repo, clock=clock, catalog=catalog)

    outcome = await service.submit(GameCompleted("learner", "matching", score=1, max_score=2))

    assert outcome.newly_unlocked == ("game_on",)
    repo.save_progress.assert_awaited_once()


@pytest.mark.asyncio
async def test_reconcile_stats(service, repo):
    await repo.save_item_states(
        "learner",
        [
            SRSState(item_id="hi", item_type="kanji", stage=Stage.GURU_1),
            SRSState(item_id="taberu", item_type="vocabulary", stage=Stage.BURNED),
            SRSState(item_id="wa", item_type="grammar", stage=Stage.MASTER),
            SRSState(item_id="mizu", item_type="kanji", stage=Stage.APPRENTICE_2),
        ],
    )
    await repo.save_progress("learner", LearnerStats(items_learned=9, kanji_count=9), StreakState())

    stats = await service.reconcile_stats("learner")

    assert stats.items_learned == 3
    assert stats.items_burned == 1
    assert stats.kanji_count == 1
    assert stats.vocab_count == 1
    assert (await repo.get_snapshot("learner")).stats == stats


@pytest.mark.asyncio
async def test_daily_activity_accumulates_per_day(service, clock, today):
    await service.submit(LessonCompleted("learner", ("mizu", "hi"), "kanji"))
    await service.submit(review("mizu", 5))
    await service.submit(review("hi", 2))
    clock.advance(days=1)
    game = await service.submit(GameCompleted("learner", "typing", score=2, max_score=10))

    first, second = await service.activity_history("learner")
    assert first == DailyActivity(
        today, xp_earned=first.xp_earned, reviews_completed=2, lessons_completed=1
    )
    # lesson 20, passing review 5 plus first_review 5, failed review 1
    assert first.xp_earned == 31
    assert second == DailyActivity(
        today + timedelta(days=1), xp_earned=game.xp_awarded, games_played=1
    )

    assert await service.activity_history("learner", since=today + timedelta(days=1)) == [second]
    assert await service.activity_history("nobody") == []


@pytest.mark.asyncio
async def test_concurrent_activity_is_not_lost(service):
    items = tuple(f"item-{i}" for i in range(10))
    await service.submit(LessonCompleted("learner", items, "kanji"))

    await asyncio.gather(*(service.submit(review(item_id, 4)) for item_id in items))

    (row,) = await service.activity_history("learner")
    assert row.reviews_completed == 10
    assert row.lessons_completed == 1


@pytest.mark.asyncio
async def test_learner_locks_are_released(service):
    await asyncio.gather(
        *(service.submit(LessonCompleted(f"learner-{i}", ("mizu",))) for i in range(20)),
        *(service.submit(LessonCompleted("shared", (f"item-{i}",))) for i in range(5)),
    )
    assert service._locks == {}


@pytest.mark.asyncio
async def test_failed_submission_releases_lock(service):
    with pytest.raises(InvalidInputError):
        await service.submit(review("unknown", 4))
    assert service._locks == {}


@pytest.mark.asyncio
async def test_untaught_item_cannot_be_reviewed(service, repo):
    await repo.save_item_states("learner", [SRSState(item_id="mizu", item_type="kanji")])

    with pytest.raises(InvalidInputError):
        await service.submit(review("mizu", 5))

    outcome = await service.submit(LessonCompleted("learner", ("mizu",), "kanji"))
    assert outcome.new_item_states[0].stage == Stage.APPRENTICE_1
    await service.submit(review("mizu", 5))
    assert (await repo.get_item_state("learner", "mizu")).stage == Stage.APPRENTICE_2
