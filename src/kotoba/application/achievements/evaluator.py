"""
Achievement evaluator.

Stateless and side-effect free: the same stats and unlocked set always give
the same answer, so it is safe to run after every event.
"""

from collections.abc import Collection
from typing import assert_never

from kotoba.application.progression.jlpt import is_gate_open
from kotoba.domain.achievements.models import (
    AchievementCatalog,
    AchievementCondition,
    AchievementDefinition,
    GamePerfect,
    JlptLevelReached,
    SpeedReview,
    StatThreshold,
)
from kotoba.domain.progression.models import LearnerStats


def evaluate_condition(condition: AchievementCondition, stats: LearnerStats) -> bool:
    match condition:
        case StatThreshold(stat=stat, count=count):
            return getattr(stats, stat) >= count
        case GamePerfect(game_type=game_type):
            return game_type in stats.game_perfects
        case JlptLevelReached(level=level):
            # items_learned counts items at the learned stage (Guru) or above
            return is_gate_open(level, stats.current_level, stats.items_learned)
        case SpeedReview(item_count=item_count, max_seconds=max_seconds):
            return any(
                run.item_count >= item_count and run.seconds <= max_seconds
                for run in stats.speed_runs
            )
        case _:
            assert_never(condition)


class AchievementEvaluator:
    def __init__(self, catalog: AchievementCatalog):
        self.catalog = catalog

    def evaluate(self, stats: LearnerStats, already_unlocked: Collection[str]) -> list[str]:
        """
        Keys whose condition holds for `stats` and that are not yet unlocked.

        Keys come back in catalog order, each at most once. `already_unlocked`
        is never modified.
        """
        return [d.key for d in self.newly_unlocked(stats, already_unlocked)]

    def newly_unlocked(
        self, stats: LearnerStats, already_unlocked: Collection[str]
    ) -> list[AchievementDefinition]:
        return [
            definition
            for definition in self.catalog
            if definition.key not in already_unlocked
            and evaluate_condition(definition.condition, stats)
        ]
