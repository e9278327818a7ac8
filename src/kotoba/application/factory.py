"""
Engine Factory
Centralizes wiring of the progression components from configuration.
"""

from kotoba.application.achievements.catalog import load_catalog
from kotoba.application.achievements.evaluator import AchievementEvaluator
from kotoba.application.config import EngineConfig
from kotoba.application.coordinator import ProgressionCoordinator
from kotoba.application.progression.streaks import StreakTracker
from kotoba.application.progression.xp_ledger import XPLedger
from kotoba.application.service import ProgressionService
from kotoba.application.srs.scheduler import SRSScheduler
from kotoba.domain.achievements.models import AchievementCatalog
from kotoba.domain.ports import Clock, ProgressRepository
from kotoba.infrastructure.adapters.memory_repository import InMemoryProgressRepository
from kotoba.infrastructure.clock import SystemClock


def build_coordinator(
    config: EngineConfig,
    clock: Clock | None = None,
    catalog: AchievementCatalog | None = None,
) -> ProgressionCoordinator:
    """
    Returns a coordinator wired from `config`.

    The catalog is loaded from config.achievement_catalog (or the bundled
    default) unless one is passed in; a malformed catalog raises CatalogError
    here, before any event is processed.
    """
    if catalog is None:
        catalog = load_catalog(config.achievement_catalog)

    return ProgressionCoordinator(
        scheduler=SRSScheduler(config),
        ledger=XPLedger(config),
        streaks=StreakTracker(config),
        evaluator=AchievementEvaluator(catalog),
        clock=clock or SystemClock(config.timezone),
    )


def build_service(
    config: EngineConfig,
    repo: ProgressRepository | None = None,
    clock: Clock | None = None,
    catalog: AchievementCatalog | None = None,
) -> ProgressionService:
    """
    Returns a ProgressionService; defaults to the in-memory repository.
    """
    coordinator = build_coordinator(config, clock=clock, catalog=catalog)
    return ProgressionService(repo or InMemoryProgressRepository(), coordinator)
