# Application Achievements Package
from .catalog import load_catalog, parse_catalog
from .evaluator import AchievementEvaluator, evaluate_condition

__all__ = ["AchievementEvaluator", "evaluate_condition", "load_catalog", "parse_catalog"]
