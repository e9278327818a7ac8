"""
In-memory implementation of ProgressRepository.

Dict-backed and process-local. Writes for one learner are serialized by
ProgressionService, which holds a per-learner lock across read-compute-write.
Reads never create entries for unknown learners.
"""

import logging
from datetime import date, datetime

from ulid import ULID

from kotoba.domain.achievements.models import UnlockedAchievement
from kotoba.domain.events import LearnerSnapshot
from kotoba.domain.ports import ProgressRepository
from kotoba.domain.progression.models import DailyActivity, LearnerStats, StreakState
from kotoba.domain.srs.models import SRSState

logger = logging.getLogger(__name__)


class InMemoryProgressRepository(ProgressRepository):
    def __init__(self):
        self._stats: dict[str, LearnerStats] = {}
        self._streaks: dict[str, StreakState] = {}
        self._items: dict[str, dict[str, SRSState]] = {}
        self._unlocked: dict[str, dict[str, UnlockedAchievement]] = {}
        self._activity: dict[str, dict[date, DailyActivity]] = {}

    async def get_snapshot(self, learner_id: str) -> LearnerSnapshot:
        return LearnerSnapshot(
            learner_id=learner_id,
            stats=self._stats.get(learner_id, LearnerStats()),
            streak=self._streaks.get(learner_id, StreakState()),
            unlocked=frozenset(self._unlocked.get(learner_id, {})),
        )

    async def get_item_state(self, learner_id: str, item_id: str) -> SRSState | None:
        return self._items.get(learner_id, {}).get(item_id)

    async def list_item_states(self, learner_id: str) -> list[SRSState]:
        return list(self._items.get(learner_id, {}).values())

    async def save_item_states(self, learner_id: str, states: list[SRSState]) -> None:
        items = self._items.setdefault(learner_id, {})
        for state in states:
            items[state.item_id] = state

    async def save_progress(
        self, learner_id: str, stats: LearnerStats, streak: StreakState
    ) -> None:
        self._stats[learner_id] = stats
        self._streaks[learner_id] = streak

    async def unlock_achievement(
        self, learner_id: str, achievement_key: str, unlocked_at: datetime
    ) -> bool:
        unlocked = self._unlocked.setdefault(learner_id, {})
        if achievement_key in unlocked:
            logger.debug(f"[repo] {learner_id} already has {achievement_key}")
            return False
        unlocked[achievement_key] = UnlockedAchievement(
            id=str(ULID()),
            learner_id=learner_id,
            achievement_key=achievement_key,
            unlocked_at=unlocked_at,
        )
        return True

    async def list_unlocked(self, learner_id: str) -> list[UnlockedAchievement]:
        return sorted(
            self._unlocked.get(learner_id, {}).values(), key=lambda u: u.unlocked_at
        )

    async def record_daily_activity(
        self, learner_id: str, delta: DailyActivity
    ) -> DailyActivity:
        rows = self._activity.setdefault(learner_id, {})
        day = delta.activity_date
        rows[day] = rows.get(day, DailyActivity(day)) + delta
        return rows[day]

    async def list_daily_activity(
        self, learner_id: str, since: date | None = None
    ) -> list[DailyActivity]:
        rows = self._activity.get(learner_id, {})
        return [
            rows[day] for day in sorted(rows) if since is None or day >= since
        ]
