"""
Streak tracker - pure functions over StreakState.

Dates are calendar days in the learner's timezone; callers get them from the
injected Clock. Datetimes are accepted and truncated to their date.
"""

import logging
from dataclasses import replace
from datetime import date, datetime

from kotoba.application.config import EngineConfig
from kotoba.domain.errors import InvalidInputError
from kotoba.domain.progression.models import StreakState

logger = logging.getLogger(__name__)


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidInputError(f"Expected a date, got {type(value).__name__}")


class StreakTracker:
    """
    Maintains consecutive-day streaks.

    - Same day as the last activity: no change
    - Next day: streak + 1
    - One missed day with a freeze available: freeze consumed, streak kept
    - Anything longer: streak restarts at 1
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()

    def record_activity(self, state: StreakState, activity_date: date | datetime) -> StreakState:
        day = _as_date(activity_date)
        last = state.last_activity_date

        if last is None:
            current = 1
            freezes = state.freezes_available
        else:
            gap = (day - last).days
            if gap < 0:
                raise InvalidInputError(
                    f"Activity on {day.isoformat()} precedes last activity on {last.isoformat()}"
                )
            if gap == 0:
                return state

            freezes = state.freezes_available
            if gap == 1:
                current = state.current_streak + 1
            elif gap == 2 and freezes > 0 and state.current_streak > 0:
                freezes -= 1
                current = state.current_streak
                logger.info(
                    f"[streak] Freeze used for {last.isoformat()}..{day.isoformat()}, "
                    f"{freezes} left"
                )
            else:
                current = 1

        return StreakState(
            current_streak=current,
            longest_streak=max(state.longest_streak, current),
            last_activity_date=day,
            freezes_available=freezes,
        )

    def evaluate_at_midnight(self, state: StreakState, today: date | datetime) -> StreakState:
        """
        Passive check at the start of `today`; never records activity.

        A streak that can no longer be saved (two or more missed days, or one
        missed day with no usable freeze) comes back with current_streak = 0.
        last_activity_date is left untouched.
        """
        day = _as_date(today)
        last = state.last_activity_date
        if last is None or state.current_streak == 0:
            return state

        gap = (day - last).days
        if gap < 0:
            raise InvalidInputError(
                f"Check date {day.isoformat()} precedes last activity on {last.isoformat()}"
            )
        if gap <= 1:
            return state
        if gap == 2 and state.freezes_available > 0:
            return state  # at risk, still savable today

        logger.info(f"[streak] Streak of {state.current_streak} broken on {day.isoformat()}")
        return replace(state, current_streak=0)

    def is_active(self, state: StreakState, today: date | datetime) -> bool:
        """True when activity yesterday or today keeps the streak running."""
        if state.last_activity_date is None or state.current_streak == 0:
            return False
        gap = (_as_date(today) - state.last_activity_date).days
        return 0 <= gap <= 1

    def grant_freezes(self, state: StreakState, count: int = 1) -> StreakState:
        if count < 0:
            raise InvalidInputError(f"count must be non-negative, got {count}")
        freezes = min(state.freezes_available + count, self.config.max_streak_freezes)
        return replace(state, freezes_available=max(freezes, state.freezes_available))
