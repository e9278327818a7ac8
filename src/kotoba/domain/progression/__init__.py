# Domain Progression Package
from .models import (
    NUMERIC_STATS,
    AwardContext,
    DailyActivity,
    LearnerStats,
    LevelProgress,
    SpeedRun,
    StreakState,
    XPAction,
)

__all__ = [
    "AwardContext",
    "DailyActivity",
    "LearnerStats",
    "LevelProgress",
    "NUMERIC_STATS",
    "SpeedRun",
    "StreakState",
    "XPAction",
]
