"""kotoba: learning progression engine for spaced-repetition language study."""

from kotoba.application.achievements.catalog import load_catalog
from kotoba.application.achievements.evaluator import AchievementEvaluator
from kotoba.application.config import EngineConfig, resolve_config
from kotoba.application.coordinator import ProgressionCoordinator, ProgressionOutcome
from kotoba.application.factory import build_coordinator, build_service
from kotoba.application.logging_setup import configure_logging
from kotoba.application.progression.streaks import StreakTracker
from kotoba.application.progression.xp_ledger import XPLedger
from kotoba.application.service import ProgressionService
from kotoba.application.srs.scheduler import SRSScheduler
from kotoba.consts import VERSION
from kotoba.domain.errors import CatalogError, InvalidInputError, KotobaError, RetiredItemError

__version__ = VERSION

__all__ = [
    "AchievementEvaluator",
    "CatalogError",
    "EngineConfig",
    "InvalidInputError",
    "KotobaError",
    "ProgressionCoordinator",
    "ProgressionOutcome",
    "ProgressionService",
    "RetiredItemError",
    "SRSScheduler",
    "StreakTracker",
    "XPLedger",
    "build_coordinator",
    "build_service",
    "configure_logging",
    "load_catalog",
    "resolve_config",
]
