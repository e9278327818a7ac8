"""
Domain models for learner progression: XP, levels, streaks and aggregate stats.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, fields
from datetime import date
from enum import Enum


class XPAction(str, Enum):
    """Actions that earn experience points."""

    LESSON_COMPLETE = "lesson_complete"
    REVIEW_CORRECT = "review_correct"
    REVIEW_INCORRECT = "review_incorrect"
    ITEM_GURU = "item_guru"
    ITEM_MASTER = "item_master"
    ITEM_ENLIGHTENED = "item_enlightened"
    ITEM_BURNED = "item_burned"
    GAME_COMPLETE = "game_complete"
    DAILY_FIRST_REVIEW = "daily_first_review"


@dataclass(frozen=True)
class AwardContext:
    """
    Inputs that scale an action's base award.

    Attributes:
        streak_days: Learner's current streak, drives the bonus multiplier.
        accuracy: Game accuracy in [0, 1]; only used for GAME_COMPLETE.
        count: How many times the action happened (e.g. items in a lesson).
    """

    streak_days: int = 0
    accuracy: float | None = None
    count: int = 1


@dataclass(frozen=True)
class LevelProgress:
    level: int
    xp_into_level: int
    xp_to_next: int
    percent: float


@dataclass(frozen=True)
class StreakState:
    """
    Consecutive-day activity streak.

    Attributes:
        current_streak: Days in the running streak; 0 once broken.
        longest_streak: Best streak ever reached.
        last_activity_date: Calendar day (learner's timezone) of the last credited activity.
        freezes_available: Tokens that each forgive one missed day.
    """

    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: date | None = None
    freezes_available: int = 0


@dataclass(frozen=True)
class SpeedRun:
    """A timed run: how many items were answered within how many seconds."""

    item_count: int
    seconds: float


@dataclass(frozen=True)
class LearnerStats:
    """
    Aggregate counters consumed by progression and achievement checks.

    Owned by the learner's profile and only changed through coordinator outputs.
    """

    total_xp: int = 0
    current_level: int = 0

    # Streak mirror (authoritative copy lives in StreakState)
    current_streak: int = 0
    longest_streak: int = 0
    streak_freezes_available: int = 0

    # Reviews
    reviews_completed: int = 0
    perfect_reviews: int = 0  # lifetime quality-5 reviews
    consecutive_correct: int = 0

    # Mastery
    items_learned: int = 0  # stage >= learned threshold
    items_burned: int = 0
    kanji_count: int = 0  # learned kanji
    vocab_count: int = 0  # learned vocabulary
    lessons_completed: int = 0

    # Games
    games_played: int = 0
    game_perfects: frozenset[str] = frozenset()
    speed_runs: tuple[SpeedRun, ...] = ()


@dataclass(frozen=True)
class DailyActivity:
    """
    Activity counters for one learner on one calendar day.

    The coordinator emits a delta for each event; repositories sum the deltas
    for the same day into one row.
    """

    activity_date: date
    xp_earned: int = 0
    reviews_completed: int = 0
    lessons_completed: int = 0
    games_played: int = 0
    items_learned: int = 0
    items_burned: int = 0

    def __add__(self, other: "DailyActivity") -> "DailyActivity":
        if not isinstance(other, DailyActivity):
            return NotImplemented
        if other.activity_date != self.activity_date:
            raise ValueError(
                f"Cannot merge activity for {other.activity_date} into {self.activity_date}"
            )
        return DailyActivity(
            self.activity_date,
            **{
                f.name: getattr(self, f.name) + getattr(other, f.name)
                for f in fields(self)
                if f.name != "activity_date"
            },
        )


NUMERIC_STATS: frozenset[str] = frozenset(
    f.name for f in fields(LearnerStats) if f.type in (int, "int")
)
