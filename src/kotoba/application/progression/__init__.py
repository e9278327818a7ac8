# Application Progression Package
from .jlpt import JLPT_GATES, JlptGate, is_gate_open, is_level_unlocked, jlpt_level_for
from .streaks import StreakTracker
from .xp_ledger import XPLedger, xp_for_level

__all__ = [
    "JLPT_GATES",
    "JlptGate",
    "StreakTracker",
    "XPLedger",
    "is_gate_open",
    "is_level_unlocked",
    "jlpt_level_for",
    "xp_for_level",
]
