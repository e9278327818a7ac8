"""Centralized constants for the kotoba progression engine.

All magic numbers and tunable defaults live here so every layer
imports from a single source of truth.
"""

# ---------- SRS scheduling ----------
MIN_QUALITY = 0
MAX_QUALITY = 5
DEFAULT_PASSING_QUALITY = 3
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 3.0
EASE_FAILURE_PENALTY = 0.2
BOOTSTRAP_INTERVALS = (1.0, 6.0)  # days, first and second success after a reset
MAX_INTERVAL_DAYS = 365.0
APPRENTICE_FAILURE_STEP = 1
SENIOR_FAILURE_STEP = 2  # Guru and above

# ---------- XP ----------
XP_PER_LEVEL_UNIT = 100  # xp to reach level L is 100 * L^2

XP_LESSON_COMPLETE = 10
XP_REVIEW_CORRECT = 5
XP_REVIEW_INCORRECT = 1
XP_ITEM_GURU = 50
XP_ITEM_MASTER = 100
XP_ITEM_ENLIGHTENED = 200
XP_ITEM_BURNED = 500
XP_GAME_BASE = 15
XP_GAME_PERFECT = 50
XP_STREAK_BONUS_PER_DAY = 2  # percent per streak day
XP_DAILY_FIRST_REVIEW = 20

STREAK_BONUS_RATE_PER_DAY = XP_STREAK_BONUS_PER_DAY / 100
STREAK_BONUS_CAP = 2.0

# ---------- Streaks ----------
MAX_STREAK_FREEZES = 2

# ---------- Games ----------
GAME_TYPES = ("matching", "speed-round", "kanji-draw", "sentence-builder", "listening", "typing")
SPEED_GAME_TYPE = "speed-round"

# ---------- JLPT ----------
JLPT_LEVELS = ("N5", "N4", "N3", "N2", "N1")

# ---------- Review queue ----------
DEFAULT_MAX_QUEUE_SIZE = 100
