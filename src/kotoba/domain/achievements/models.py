"""
Domain models for achievements.

Conditions form a closed union: every kind is a frozen dataclass listed in
AchievementCondition, and the evaluator matches on it exhaustively.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Literal, assert_never

from kotoba.domain.constants import GAME_TYPES, JLPT_LEVELS
from kotoba.domain.errors import CatalogError
from kotoba.domain.progression.models import NUMERIC_STATS

AchievementCategory = Literal["learning", "streak", "mastery", "social", "games", "special"]
AchievementRarity = Literal["common", "uncommon", "rare", "epic", "legendary"]


@dataclass(frozen=True)
class StatThreshold:
    """Holds when the named LearnerStats counter is at least `count`."""

    stat: str
    count: int


@dataclass(frozen=True)
class GamePerfect:
    """Holds when the learner has a perfect score in `game_type`."""

    game_type: str


@dataclass(frozen=True)
class JlptLevelReached:
    """Holds when the JLPT gate for `level` is open to the learner."""

    level: str


@dataclass(frozen=True)
class SpeedReview:
    """Holds when a recorded run covered `item_count` items within `max_seconds`."""

    item_count: int
    max_seconds: float


AchievementCondition = StatThreshold | GamePerfect | JlptLevelReached | SpeedReview


def validate_condition(condition: AchievementCondition) -> None:
    """Raise CatalogError unless `condition` can be evaluated against LearnerStats."""
    match condition:
        case StatThreshold(stat=stat, count=count):
            if stat not in NUMERIC_STATS:
                raise CatalogError(f"Unknown learner stat '{stat}'")
            if count < 0:
                raise CatalogError(f"Threshold for '{stat}' must be non-negative, got {count}")
        case GamePerfect(game_type=game_type):
            if game_type not in GAME_TYPES:
                raise CatalogError(f"Unknown game type '{game_type}'")
        case JlptLevelReached(level=level):
            if level not in JLPT_LEVELS:
                raise CatalogError(f"Unknown JLPT level '{level}'")
        case SpeedReview(item_count=item_count, max_seconds=max_seconds):
            if item_count < 1 or max_seconds <= 0:
                raise CatalogError(
                    f"Speed condition needs at least one item in positive time, "
                    f"got {item_count} in {max_seconds}s"
                )
        case _:
            assert_never(condition)


@dataclass(frozen=True)
class AchievementDefinition:
    key: str
    name: str
    description: str
    category: AchievementCategory
    condition: AchievementCondition
    xp_reward: int
    rarity: AchievementRarity
    icon: str = ""


@dataclass(frozen=True)
class UnlockedAchievement:
    """Fact record: `learner_id` unlocked `achievement_key` at `unlocked_at`."""

    id: str
    learner_id: str
    achievement_key: str
    unlocked_at: datetime


class AchievementCatalog:
    """
    Immutable, ordered collection of achievement definitions.

    Loaded once at startup (see kotoba.application.achievements.catalog).
    """

    def __init__(self, definitions: Iterable[AchievementDefinition]):
        """
        Raises:
            CatalogError: a key repeats, or a condition names an unknown stat,
                game type or JLPT level.
        """
        self._definitions = tuple(definitions)
        by_key: dict[str, AchievementDefinition] = {}
        for definition in self._definitions:
            if definition.key in by_key:
                raise CatalogError(f"Duplicate achievement key '{definition.key}'")
            validate_condition(definition.condition)
            by_key[definition.key] = definition
        self._by_key = MappingProxyType(by_key)

    def __iter__(self) -> Iterator[AchievementDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: str) -> AchievementDefinition | None:
        return self._by_key.get(key)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(d.key for d in self._definitions)
