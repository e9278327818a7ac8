# Application Stats Package
from .metrics_calculator import MetricsCalculator, SRSSummary

__all__ = ["MetricsCalculator", "SRSSummary"]
