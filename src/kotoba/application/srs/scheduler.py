"""
Spaced-repetition scheduler.

A modified SM-2 algorithm on a WaniKani-style stage ladder:

- Passing reviews climb one stage and grow the interval by the ease factor
  (the first two passes after a reset use fixed bootstrap intervals).
- Failing reviews drop one stage within Apprentice, two from Guru upward,
  never below Apprentice I, reset the repetition count and restart at the
  first bootstrap interval.
- New items are not scheduled until a lesson moves them to Apprentice I.
- Reaching Burned retires the item from scheduling.

This is a pure computation module with no I/O.
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta

from kotoba.application.config import EngineConfig
from kotoba.domain.constants import MAX_QUALITY, MIN_QUALITY
from kotoba.domain.errors import InvalidInputError, RetiredItemError
from kotoba.domain.srs.models import ItemType, SRSState, Stage

logger = logging.getLogger(__name__)


def validate_quality(quality: object) -> int:
    """Reject anything that is not an int in [0, 5]. Never clamps."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidInputError(f"quality must be an int, got {type(quality).__name__}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidInputError(
            f"quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}"
        )
    return quality


def ease_delta(quality: int) -> float:
    """SM-2 ease adjustment: +0.1 at 5, 0.0 at 4, -0.14 at 3."""
    miss = MAX_QUALITY - quality
    return 0.1 - miss * (0.08 + miss * 0.02)


class SRSScheduler:
    """
    Computes the next SRSState for a graded review.

    Stateless and side-effect free; every call depends only on its arguments
    and the (immutable) config.
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()

    def new_state(self, item_id: str, item_type: ItemType = "vocabulary") -> SRSState:
        """State for an item the learner has not been taught yet. Never due."""
        return SRSState(
            item_id=item_id,
            item_type=item_type,
            stage=Stage.NEW,
            ease_factor=self.config.default_ease,
        )

    def learn(self, item_id: str, item_type: ItemType, now: datetime) -> SRSState:
        """
        State for an item just taught in a lesson.

        Lessons place the item on Apprentice I, due for its first review at `now`.
        """
        return replace(
            self.new_state(item_id, item_type),
            stage=Stage.APPRENTICE_1,
            next_review_at=now,
        )

    def is_passing(self, quality: int) -> bool:
        return quality >= self.config.passing_quality

    def transition(self, state: SRSState, quality: int, now: datetime) -> SRSState:
        """
        Apply one graded review to `state`.

        Args:
            state: Prior scheduling state for the item.
            quality: Recall quality in [0, 5].
            now: Review time; next_review_at is measured from here.

        Raises:
            InvalidInputError: quality is not an int in [0, 5].
            RetiredItemError: the item is already burned.
        """
        validate_quality(quality)
        if state.is_burned:
            raise RetiredItemError(f"Item {state.item_id} is burned and no longer scheduled")

        cfg = self.config
        first_interval, second_interval = cfg.bootstrap_intervals

        if self.is_passing(quality):
            repetitions = state.repetitions + 1
            ease = self._clamp_ease(state.ease_factor + ease_delta(quality))
            if repetitions == 1:
                interval = first_interval
            elif repetitions == 2:
                interval = second_interval
            else:
                interval = state.interval_days * ease
            stage = min(state.stage + 1, Stage.BURNED)
        else:
            repetitions = 0
            ease = self._clamp_ease(state.ease_factor - cfg.ease_failure_penalty)
            interval = first_interval
            step = (
                cfg.apprentice_failure_step
                if state.stage < Stage.GURU_1
                else cfg.senior_failure_step
            )
            stage = max(state.stage - step, Stage.APPRENTICE_1)

        interval = min(max(interval, first_interval), cfg.max_interval_days)
        burned_at = now if stage == Stage.BURNED else None

        logger.debug(
            f"[srs] {state.item_id} q={quality} stage {state.stage}->{stage} "
            f"ease {state.ease_factor:.3f}->{ease:.3f} interval={interval:.3f}d"
        )

        return replace(
            state,
            stage=int(stage),
            ease_factor=ease,
            interval_days=interval,
            repetitions=repetitions,
            last_reviewed_at=now,
            next_review_at=now + timedelta(days=interval),
            burned_at=burned_at,
        )

    def _clamp_ease(self, ease: float) -> float:
        return min(max(ease, self.config.min_ease), self.config.max_ease)
