"""
Ports (interfaces) for the engine's external collaborators.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime

from kotoba.domain.events import LearnerSnapshot
from kotoba.domain.progression.models import DailyActivity, LearnerStats, StreakState
from kotoba.domain.srs.models import SRSState


class Clock(ABC):
    """
    Port for reading the current time.

    Implementations:
        - SystemClock: Wall clock in the learner's configured timezone.
        - FixedClock: Frozen instant for deterministic tests.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Timezone-aware current instant."""
        pass

    @abstractmethod
    def today(self) -> date:
        """Current calendar date in the learner's timezone."""
        pass


class ProgressRepository(ABC):
    """
    Port for loading and storing learner progression state.

    The engine never calls this itself; ProgressionService does, around each
    coordinator call, holding a per-learner lock while it does.

    Implementations:
        - InMemoryProgressRepository: Dict-backed store for tests and embedding.
    """

    @abstractmethod
    async def get_snapshot(self, learner_id: str) -> LearnerSnapshot:
        """
        Fetch the learner's stats, streak and unlocked achievement keys.

        Returns a fresh snapshot (all counters zero) for unknown learners.
        """
        pass

    @abstractmethod
    async def get_item_state(self, learner_id: str, item_id: str) -> SRSState | None:
        pass

    @abstractmethod
    async def list_item_states(self, learner_id: str) -> list[SRSState]:
        pass

    @abstractmethod
    async def save_item_states(self, learner_id: str, states: list[SRSState]) -> None:
        pass

    @abstractmethod
    async def save_progress(
        self, learner_id: str, stats: LearnerStats, streak: StreakState
    ) -> None:
        pass

    @abstractmethod
    async def unlock_achievement(
        self, learner_id: str, achievement_key: str, unlocked_at: datetime
    ) -> bool:
        """
        Record an unlock at most once per (learner, key).

        Returns:
            True if the record was created, False if it already existed.
        """
        pass

    @abstractmethod
    async def record_daily_activity(
        self, learner_id: str, delta: DailyActivity
    ) -> DailyActivity:
        """
        Add `delta` to the learner's row for delta.activity_date.

        Returns:
            The accumulated row for that day.
        """
        pass

    @abstractmethod
    async def list_daily_activity(
        self, learner_id: str, since: date | None = None
    ) -> list[DailyActivity]:
        """Rows on or after `since`, oldest first."""
        pass
