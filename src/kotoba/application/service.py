"""
Progression Service - Application layer orchestrator.

Loads learner state from the repository, runs the pure coordinator, and
writes the outcome back.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import date

from kotoba.application.coordinator import ProgressionCoordinator, ProgressionOutcome
from kotoba.application.srs.queue import ReviewQueueResult, build_review_queue
from kotoba.application.stats.metrics_calculator import MetricsCalculator
from kotoba.domain.constants import DEFAULT_MAX_QUEUE_SIZE
from kotoba.domain.errors import InvalidInputError
from kotoba.domain.events import LessonCompleted, ProgressionEvent, ReviewCompleted
from kotoba.domain.ports import ProgressRepository
from kotoba.domain.progression.models import DailyActivity, LearnerStats, StreakState
from kotoba.domain.srs.models import SRSState, Stage

logger = logging.getLogger(__name__)


class ProgressionService:
    """
    Application service for submitting learner events.

    Follows Dependency Inversion: depends on the ProgressRepository
    abstraction, not concrete adapter implementations. Submissions for the
    same learner are serialized with a per-learner lock, so a stale snapshot
    is never written over a newer one.
    """

    def __init__(
        self,
        repo: ProgressRepository,
        coordinator: ProgressionCoordinator,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            repo: The repository (port) for learner state.
            coordinator: Pure event pipeline.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._repo = repo
        self._coordinator = coordinator
        self._calc = calculator or MetricsCalculator(
            learned_stage=coordinator.scheduler.config.learned_stage
        )
        # learner_id -> (lock, holders and waiters); dropped when nobody uses it
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @property
    def clock(self):
        return self._coordinator.clock

    async def submit(self, event: ProgressionEvent) -> ProgressionOutcome:
        """
        Apply one event for its learner and persist the result.

        Raises:
            InvalidInputError: the reviewed item has not been taught to the learner,
                or every item in a lesson already is.
        """
        learner_id = event.learner_id
        async with self._learner_lock(learner_id):
            snapshot = await self._repo.get_snapshot(learner_id)

            item_state: SRSState | None = None
            if isinstance(event, ReviewCompleted):
                item_id = event.outcome.item_id
                item_state = await self._repo.get_item_state(learner_id, item_id)
                if item_state is None or item_state.stage == Stage.NEW:
                    raise InvalidInputError(f"Item {item_id} has not been taught to {learner_id}")
            elif isinstance(event, LessonCompleted):
                event = await self._drop_active_items(event)

            outcome = self._coordinator.handle(event, snapshot, item_state)

            states = list(outcome.new_item_states)
            if outcome.srs_state is not None:
                states.append(outcome.srs_state)
            if states:
                await self._repo.save_item_states(learner_id, states)

            unlocked_at = self.clock.now()
            for key in outcome.newly_unlocked:
                if not await self._repo.unlock_achievement(learner_id, key, unlocked_at):
                    logger.warning(f"Achievement {key} was already recorded for {learner_id}")

            await self._repo.save_progress(learner_id, outcome.stats, outcome.streak)
            await self._repo.record_daily_activity(learner_id, outcome.daily_activity)

        logger.debug(
            f"[service] {learner_id} {type(event).__name__}: +{outcome.xp_awarded} XP, "
            f"unlocked={list(outcome.newly_unlocked)}"
        )
        return outcome

    async def review_queue(
        self, learner_id: str, max_items: int = DEFAULT_MAX_QUEUE_SIZE
    ) -> ReviewQueueResult:
        states = await self._repo.list_item_states(learner_id)
        return build_review_queue(states, self.clock.now(), max_items=max_items)

    async def activity_history(
        self, learner_id: str, since: date | None = None
    ) -> list[DailyActivity]:
        """Per-day activity rows on or after `since`, oldest first."""
        return await self._repo.list_daily_activity(learner_id, since)

    async def check_streak(self, learner_id: str) -> StreakState:
        """
        Midnight job: mark a streak broken if it can no longer be saved.

        Returns the (possibly updated) streak; only writes when it changed.
        """
        async with self._learner_lock(learner_id):
            snapshot = await self._repo.get_snapshot(learner_id)
            streak = self._coordinator.streaks.evaluate_at_midnight(
                snapshot.streak, self.clock.today()
            )
            if streak != snapshot.streak:
                stats = replace(snapshot.stats, current_streak=streak.current_streak)
                await self._repo.save_progress(learner_id, stats, streak)
        return streak

    async def reconcile_stats(self, learner_id: str) -> LearnerStats:
        """Recount mastery counters from the stored item states and save them."""
        async with self._learner_lock(learner_id):
            snapshot = await self._repo.get_snapshot(learner_id)
            summary = self._calc.summarize(await self._repo.list_item_states(learner_id))
            stats = self._calc.reconcile(snapshot.stats, summary)
            if stats != snapshot.stats:
                logger.info(f"[service] Reconciled mastery counters for {learner_id}")
                await self._repo.save_progress(learner_id, stats, snapshot.streak)
        return stats

    async def _drop_active_items(self, event: LessonCompleted) -> LessonCompleted:
        fresh = []
        for item_id in event.item_ids:
            state = await self._repo.get_item_state(event.learner_id, item_id)
            if state is None or state.stage == Stage.NEW:
                fresh.append(item_id)
        if not fresh:
            raise InvalidInputError(
                f"Every item in the lesson is already active for {event.learner_id}"
            )
        return replace(event, item_ids=tuple(fresh))

    @asynccontextmanager
    async def _learner_lock(self, learner_id: str) -> AsyncIterator[None]:
        lock, users = self._locks.get(learner_id) or (asyncio.Lock(), 0)
        self._locks[learner_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[learner_id]
            if users == 1:
                del self._locks[learner_id]
            else:
                self._locks[learner_id] = (lock, users - 1)
