"""
Domain models for spaced-repetition scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Literal

from kotoba.domain.constants import DEFAULT_EASE_FACTOR

ItemType = Literal["kanji", "vocabulary", "grammar"]


class Stage(IntEnum):
    """Named positions on the mastery ladder."""

    NEW = 0
    APPRENTICE_1 = 1
    APPRENTICE_2 = 2
    APPRENTICE_3 = 3
    APPRENTICE_4 = 4
    GURU_1 = 5
    GURU_2 = 6
    MASTER = 7
    ENLIGHTENED = 8
    BURNED = 9


STAGE_NAMES: dict[int, str] = {
    Stage.NEW: "New",
    Stage.APPRENTICE_1: "Apprentice I",
    Stage.APPRENTICE_2: "Apprentice II",
    Stage.APPRENTICE_3: "Apprentice III",
    Stage.APPRENTICE_4: "Apprentice IV",
    Stage.GURU_1: "Guru I",
    Stage.GURU_2: "Guru II",
    Stage.MASTER: "Master",
    Stage.ENLIGHTENED: "Enlightened",
    Stage.BURNED: "Burned",
}

# Items at or above this stage count as learned
LEARNED_STAGE = Stage.GURU_1


def stage_name(stage: int) -> str:
    return STAGE_NAMES.get(stage, f"Stage {stage}")


@dataclass(frozen=True)
class ReviewOutcome:
    """
    One graded attempt at one curriculum item.

    Attributes:
        item_id: Opaque identifier of a kanji, vocabulary or grammar entry.
        quality: Recall quality, 0 (total failure) to 5 (instant recall).
        item_type: Which curriculum table the item belongs to.
        response_time_ms: Time the learner took to answer, if measured.
    """

    item_id: str
    quality: int
    item_type: ItemType = "vocabulary"
    response_time_ms: int | None = None


@dataclass(frozen=True)
class SRSState:
    """
    Per-(learner, item) scheduling state.

    Attributes:
        item_id: The item this state schedules.
        stage: Index into the stage ladder (see Stage).
        ease_factor: Interval growth multiplier, never below the configured floor.
        interval_days: Days until the next review; fractional values allowed.
        repetitions: Consecutive passing reviews since the last failure.
        next_review_at: last_reviewed_at + interval_days, or None if never reviewed.
        last_reviewed_at: When the last review was graded.
        burned_at: When the item reached the terminal stage, if it has.
    """

    item_id: str
    item_type: ItemType = "vocabulary"
    stage: int = Stage.NEW
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: float = 0.0
    repetitions: int = 0
    next_review_at: datetime | None = None
    last_reviewed_at: datetime | None = None
    burned_at: datetime | None = None

    @property
    def is_burned(self) -> bool:
        return self.stage >= Stage.BURNED

    @property
    def stage_name(self) -> str:
        return stage_name(self.stage)
