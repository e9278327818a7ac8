"""
Metrics calculator for deriving mastery summaries from raw SRS states.

This is a pure computation module with no I/O.
"""

from collections.abc import Iterable
from dataclasses import dataclass, replace

from kotoba.domain.progression.models import LearnerStats
from kotoba.domain.srs.models import LEARNED_STAGE, STAGE_NAMES, SRSState, Stage

STAGE_GROUPS: dict[str, tuple[int, int]] = {
    "new": (Stage.NEW, Stage.NEW),
    "apprentice": (Stage.APPRENTICE_1, Stage.APPRENTICE_4),
    "guru": (Stage.GURU_1, Stage.GURU_2),
    "master": (Stage.MASTER, Stage.MASTER),
    "enlightened": (Stage.ENLIGHTENED, Stage.ENLIGHTENED),
    "burned": (Stage.BURNED, Stage.BURNED),
}

@dataclass
class SRSSummary:
    """
    Counts of a learner's items by stage, stage group and mastery.
    """

    stage_counts: dict[str, int]  # Stage name -> count, every stage present
    group_counts: dict[str, int]  # new/apprentice/guru/master/enlightened/burned
    total: int

    # Mastery counters, in LearnerStats terms
    items_learned: int
    items_burned: int
    kanji_learned: int
    vocab_learned: int

class MetricsCalculator:
    """
    Summarizes SRS states and reconciles LearnerStats counters against them.

    Stateless and side-effect free.
    """

    def __init__(self, learned_stage: int = LEARNED_STAGE):
        self.learned_stage = learned_stage

    def summarize(self, states: Iterable[SRSState]) -> SRSSummary:
        stage_counts = {name: 0 for name in STAGE_NAMES.values()}
        group_counts = {group: 0 for group in STAGE_GROUPS}
        total = learned = burned = kanji = vocab = 0

        for state in states:
            total += 1
            if state.stage in STAGE_NAMES:
                stage_counts[STAGE_NAMES[state.stage]] += 1
            for group, (low, high) in STAGE_GROUPS.items():
                if low <= state.stage <= high:
                    group_counts[group] += 1
                    break

            if state.stage >= self.learned_stage:
                learned += 1
                if state.item_type == "kanji":
                    kanji += 1
                elif state.item_type == "vocabulary":
                    vocab += 1
            if state.is_burned:
                burned += 1

        return SRSSummary(
            stage_counts=stage_counts,
            group_counts=group_counts,
            total=total,
            items_learned=learned,
            items_burned=burned,
            kanji_learned=kanji,
            vocab_learned=vocab,
        )

    def reconcile(self, stats: LearnerStats, summary: SRSSummary) -> LearnerStats:
        """Overwrite the mastery counters in `stats` with the recounted ones."""
        return replace(
            stats,
            items_learned=summary.items_learned,
            items_burned=summary.items_burned,
            kanji_count=summary.kanji_learned,
            vocab_count=summary.vocab_learned,
        )
