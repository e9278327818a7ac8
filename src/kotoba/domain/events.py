"""
Events consumed by the progression coordinator, and the learner snapshot
they are applied to.
"""

from dataclasses import dataclass, field

from kotoba.domain.progression.models import LearnerStats, StreakState
from kotoba.domain.srs.models import ItemType, ReviewOutcome


@dataclass(frozen=True)
class ReviewCompleted:
    learner_id: str
    outcome: ReviewOutcome


@dataclass(frozen=True)
class GameCompleted:
    """
    A finished mini-game session.

    Attributes:
        game_type: One of kotoba.domain.constants.GAME_TYPES.
        score / max_score: Raw score; accuracy is their ratio.
        duration_seconds: Wall time of the session.
        items_practiced: Number of items answered during the session.
    """

    learner_id: str
    game_type: str
    score: int
    max_score: int
    duration_seconds: float = 0.0
    items_practiced: int = 0

    @property
    def accuracy(self) -> float:
        if self.max_score <= 0:
            return 0.0
        return min(1.0, self.score / self.max_score)

    @property
    def is_perfect(self) -> bool:
        return self.max_score > 0 and self.score >= self.max_score


@dataclass(frozen=True)
class LessonCompleted:
    """A lesson introduced `item_ids` into the learner's active set."""

    learner_id: str
    item_ids: tuple[str, ...]
    item_type: ItemType = "vocabulary"


ProgressionEvent = ReviewCompleted | GameCompleted | LessonCompleted


@dataclass(frozen=True)
class LearnerSnapshot:
    """Everything the coordinator needs to know about a learner for one event."""

    learner_id: str
    stats: LearnerStats = field(default_factory=LearnerStats)
    streak: StreakState = field(default_factory=StreakState)
    unlocked: frozenset[str] = frozenset()
