"""
XP ledger: levels from accumulated XP, and XP awards for actions.

Levels follow a quadratic curve: reaching level L takes 100 * L^2 XP in
total, so level 1 needs 100, level 2 needs 400, level 3 needs 900.

This is a pure computation module with no I/O.
"""

import math

from kotoba.application.config import EngineConfig
from kotoba.domain import constants as c
from kotoba.domain.errors import InvalidInputError
from kotoba.domain.progression.models import AwardContext, LevelProgress, XPAction
from kotoba.domain.srs.models import Stage

BASE_AWARDS: dict[XPAction, int] = {
    XPAction.LESSON_COMPLETE: c.XP_LESSON_COMPLETE,
    XPAction.REVIEW_CORRECT: c.XP_REVIEW_CORRECT,
    XPAction.REVIEW_INCORRECT: c.XP_REVIEW_INCORRECT,
    XPAction.ITEM_GURU: c.XP_ITEM_GURU,
    XPAction.ITEM_MASTER: c.XP_ITEM_MASTER,
    XPAction.ITEM_ENLIGHTENED: c.XP_ITEM_ENLIGHTENED,
    XPAction.ITEM_BURNED: c.XP_ITEM_BURNED,
    XPAction.GAME_COMPLETE: c.XP_GAME_BASE,
    XPAction.DAILY_FIRST_REVIEW: c.XP_DAILY_FIRST_REVIEW,
}

# Actions whose award is scaled by the streak multiplier
STREAK_ELIGIBLE = frozenset(
    {
        XPAction.LESSON_COMPLETE,
        XPAction.REVIEW_CORRECT,
        XPAction.REVIEW_INCORRECT,
        XPAction.GAME_COMPLETE,
    }
)

# Stage reached -> mastery-tier award
TIER_AWARDS: dict[int, XPAction] = {
    Stage.GURU_1: XPAction.ITEM_GURU,
    Stage.MASTER: XPAction.ITEM_MASTER,
    Stage.ENLIGHTENED: XPAction.ITEM_ENLIGHTENED,
    Stage.BURNED: XPAction.ITEM_BURNED,
}


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def xp_for_level(level: int) -> int:
    """Total XP needed to reach `level`."""
    if level <= 0:
        return 0
    return c.XP_PER_LEVEL_UNIT * level * level


class XPLedger:
    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()

    @staticmethod
    def xp_for_level(level: int) -> int:
        return xp_for_level(level)

    @staticmethod
    def level_for(total_xp: int) -> int:
        """Largest level L with 100 * L^2 <= total_xp. Non-positive XP is level 0."""
        if total_xp <= 0:
            return 0
        return math.isqrt(int(total_xp) // c.XP_PER_LEVEL_UNIT)

    def progress_for(self, total_xp: int) -> LevelProgress:
        level = self.level_for(total_xp)
        floor_xp = xp_for_level(level)
        xp_into_level = max(0, total_xp - floor_xp)
        xp_to_next = xp_for_level(level + 1) - floor_xp

        if xp_to_next > 0:
            percent = min(100.0, 100.0 * xp_into_level / xp_to_next)
        else:
            percent = 0.0

        return LevelProgress(
            level=level,
            xp_into_level=xp_into_level,
            xp_to_next=xp_to_next,
            percent=percent,
        )

    def multiplier(self, streak_days: int) -> float:
        """1 + streak_days * rate, capped; never below 1."""
        if streak_days <= 0:
            return 1.0
        bonus = 1.0 + streak_days * self.config.streak_bonus_rate
        return min(bonus, self.config.streak_bonus_cap)

    def award_for(self, action: XPAction, context: AwardContext | None = None) -> int:
        """
        XP earned for `action`.

        GAME_COMPLETE pays the base award plus the perfect-score award scaled by
        accuracy.
        Streak-eligible actions are then scaled by the streak multiplier.
        """
        ctx = context or AwardContext()
        if ctx.count < 0:
            raise InvalidInputError(f"count must be non-negative, got {ctx.count}")

        action = XPAction(action)
        base = float(BASE_AWARDS[action])

        if action is XPAction.GAME_COMPLETE:
            accuracy = 0.0 if ctx.accuracy is None else ctx.accuracy
            if not 0.0 <= accuracy <= 1.0:
                raise InvalidInputError(f"accuracy must be within [0, 1], got {accuracy}")
            base += _round_half_up(accuracy * c.XP_GAME_PERFECT)

        amount = base * ctx.count
        if action in STREAK_ELIGIBLE:
            amount *= self.multiplier(ctx.streak_days)
        return _round_half_up(amount)

    def tier_awards(self, previous_stage: int, new_stage: int) -> list[XPAction]:
        """Mastery-tier awards for every tier crossed moving up to `new_stage`."""
        return [
            action
            for stage, action in TIER_AWARDS.items()
            if previous_stage < stage <= new_stage
        ]
