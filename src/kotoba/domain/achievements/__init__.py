# Domain Achievements Package
from .models import (
    AchievementCatalog,
    AchievementCondition,
    AchievementDefinition,
    GamePerfect,
    JlptLevelReached,
    SpeedReview,
    StatThreshold,
    UnlockedAchievement,
    validate_condition,
)

__all__ = [
    "AchievementCatalog",
    "AchievementCondition",
    "AchievementDefinition",
    "GamePerfect",
    "JlptLevelReached",
    "SpeedReview",
    "StatThreshold",
    "UnlockedAchievement",
    "validate_condition",
]
