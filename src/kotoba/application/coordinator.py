"""
Progression coordinator - applies one learner event end to end.

event -> SRSScheduler -> XPLedger -> StreakTracker -> AchievementEvaluator

Every step is pure; the coordinator returns the new state and the caller
persists it (see ProgressionService).
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import assert_never

from kotoba.application.achievements.evaluator import AchievementEvaluator
from kotoba.application.progression.streaks import StreakTracker
from kotoba.application.progression.xp_ledger import XPLedger
from kotoba.application.srs.scheduler import SRSScheduler
from kotoba.domain.constants import GAME_TYPES, MAX_QUALITY, SPEED_GAME_TYPE
from kotoba.domain.errors import InvalidInputError
from kotoba.domain.events import (
    GameCompleted,
    LearnerSnapshot,
    LessonCompleted,
    ProgressionEvent,
    ReviewCompleted,
)
from kotoba.domain.ports import Clock
from kotoba.domain.progression.models import (
    AwardContext,
    DailyActivity,
    LearnerStats,
    LevelProgress,
    SpeedRun,
    StreakState,
    XPAction,
)
from kotoba.domain.srs.models import SRSState, Stage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class XPAward:
    """One line of the XP breakdown: an action value or `achievement:<key>`."""

    source: str
    amount: int


@dataclass(frozen=True)
class ProgressionOutcome:
    """Consolidated result of one event. Nothing here has been persisted."""

    stats: LearnerStats
    streak: StreakState
    progress: LevelProgress
    daily_activity: DailyActivity
    srs_state: SRSState | None = None
    new_item_states: tuple[SRSState, ...] = ()
    newly_unlocked: tuple[str, ...] = ()
    awards: tuple[XPAward, ...] = ()
    leveled_up: bool = False
    freeze_used: bool = False

    @property
    def xp_awarded(self) -> int:
        return sum(a.amount for a in self.awards)


class ProgressionCoordinator:
    def __init__(
        self,
        scheduler: SRSScheduler,
        ledger: XPLedger,
        streaks: StreakTracker,
        evaluator: AchievementEvaluator,
        clock: Clock,
    ):
        self.scheduler = scheduler
        self.ledger = ledger
        self.streaks = streaks
        self.evaluator = evaluator
        self.clock = clock

    def handle(
        self,
        event: ProgressionEvent,
        snapshot: LearnerSnapshot,
        item_state: SRSState | None = None,
    ) -> ProgressionOutcome:
        """
        Apply `event` to `snapshot`.

        Args:
            event: The completed review, game or lesson.
            snapshot: Learner stats, streak and unlocked keys before the event.
            item_state: Prior SRSState of the reviewed item (review events only).

        Raises:
            InvalidInputError: malformed event or missing/mismatched item state.
        """
        now = self.clock.now()
        today = self.clock.today()

        # A streak that already lapsed earns no bonus
        streak_days = self.streaks.evaluate_at_midnight(snapshot.streak, today).current_streak
        first_of_day = snapshot.streak.last_activity_date != today

        awards: list[XPAward] = []
        srs_state: SRSState | None = None
        new_item_states: tuple[SRSState, ...] = ()
        activity = DailyActivity(today)

        def award(action: XPAction, context: AwardContext | None = None) -> None:
            awards.append(XPAward(action.value, self.ledger.award_for(action, context)))

        match event:
            case ReviewCompleted():
                srs_state = self._apply_review(event, item_state, now)
                quality = event.outcome.quality
                passed = self.scheduler.is_passing(quality)
                award(
                    XPAction.REVIEW_CORRECT if passed else XPAction.REVIEW_INCORRECT,
                    AwardContext(streak_days=streak_days),
                )
                for tier in self.ledger.tier_awards(item_state.stage, srs_state.stage):
                    award(tier)
                if first_of_day:
                    award(XPAction.DAILY_FIRST_REVIEW)
                stats = self._merge_review(snapshot.stats, item_state, srs_state, quality, passed)
                learned_delta, burned = self._mastery_change(item_state, srs_state)
                activity = replace(
                    activity,
                    reviews_completed=1,
                    items_learned=max(0, learned_delta),
                    items_burned=int(burned),
                )
            case GameCompleted():
                self._validate_game(event)
                award(
                    XPAction.GAME_COMPLETE,
                    AwardContext(streak_days=streak_days, accuracy=event.accuracy),
                )
                stats = self._merge_game(snapshot.stats, event)
                activity = replace(activity, games_played=1)
            case LessonCompleted():
                if not event.item_ids:
                    raise InvalidInputError("A lesson must introduce at least one item")
                new_item_states = tuple(
                    self.scheduler.learn(item_id, event.item_type, now)
                    for item_id in event.item_ids
                )
                award(
                    XPAction.LESSON_COMPLETE,
                    AwardContext(streak_days=streak_days, count=len(event.item_ids)),
                )
                stats = replace(
                    snapshot.stats, lessons_completed=snapshot.stats.lessons_completed + 1
                )
                activity = replace(activity, lessons_completed=1)
            case _:
                assert_never(event)

        streak = self.streaks.record_activity(snapshot.streak, today)
        total_xp = stats.total_xp + sum(a.amount for a in awards)
        stats = replace(
            stats,
            total_xp=total_xp,
            current_level=self.ledger.level_for(total_xp),
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
            streak_freezes_available=streak.freezes_available,
        )

        stats, newly_unlocked, rewards = self._unlock_achievements(stats, snapshot.unlocked)
        awards.extend(rewards)

        leveled_up = stats.current_level > snapshot.stats.current_level
        if leveled_up:
            logger.info(
                f"[progression] {snapshot.learner_id} reached level {stats.current_level}"
            )

        return ProgressionOutcome(
            stats=stats,
            streak=streak,
            progress=self.ledger.progress_for(stats.total_xp),
            daily_activity=replace(activity, xp_earned=sum(a.amount for a in awards)),
            srs_state=srs_state,
            new_item_states=new_item_states,
            newly_unlocked=tuple(newly_unlocked),
            awards=tuple(awards),
            leveled_up=leveled_up,
            freeze_used=streak.freezes_available < snapshot.streak.freezes_available,
        )

    def _apply_review(
        self, event: ReviewCompleted, item_state: SRSState | None, now: datetime
    ) -> SRSState:
        if item_state is None:
            raise InvalidInputError(f"No SRS state supplied for item {event.outcome.item_id}")
        if item_state.item_id != event.outcome.item_id:
            raise InvalidInputError(
                f"Review for {event.outcome.item_id} paired with state for {item_state.item_id}"
            )
        return self.scheduler.transition(item_state, event.outcome.quality, now)

    def _merge_review(
        self,
        stats: LearnerStats,
        before: SRSState,
        after: SRSState,
        quality: int,
        passed: bool,
    ) -> LearnerStats:
        learned_delta, burned = self._mastery_change(before, after)

        kanji_count = stats.kanji_count
        vocab_count = stats.vocab_count
        if after.item_type == "kanji":
            kanji_count = max(0, kanji_count + learned_delta)
        elif after.item_type == "vocabulary":
            vocab_count = max(0, vocab_count + learned_delta)

        return replace(
            stats,
            reviews_completed=stats.reviews_completed + 1,
            perfect_reviews=stats.perfect_reviews + (1 if quality == MAX_QUALITY else 0),
            consecutive_correct=stats.consecutive_correct + 1 if passed else 0,
            items_learned=max(0, stats.items_learned + learned_delta),
            items_burned=stats.items_burned + (1 if burned else 0),
            kanji_count=kanji_count,
            vocab_count=vocab_count,
        )

    def _mastery_change(self, before: SRSState, after: SRSState) -> tuple[int, bool]:
        """(+1/0/-1 change in learned status, whether the item just burned)."""
        learned_stage = self.scheduler.config.learned_stage
        was_learned = before.stage >= learned_stage
        is_learned = after.stage >= learned_stage
        burned = after.stage >= Stage.BURNED and before.stage < Stage.BURNED
        return int(is_learned) - int(was_learned), burned

    def _validate_game(self, event: GameCompleted) -> None:
        if event.game_type not in GAME_TYPES:
            raise InvalidInputError(f"Unknown game type '{event.game_type}'")
        if event.score < 0 or event.max_score < 0:
            raise InvalidInputError("Game scores must be non-negative")
        if event.duration_seconds < 0 or event.items_practiced < 0:
            raise InvalidInputError("Game duration and item count must be non-negative")

    def _merge_game(self, stats: LearnerStats, event: GameCompleted) -> LearnerStats:
        game_perfects = stats.game_perfects
        if event.is_perfect:
            game_perfects = game_perfects | {event.game_type}

        speed_runs = stats.speed_runs
        if (
            event.game_type == SPEED_GAME_TYPE
            and event.items_practiced > 0
            and event.duration_seconds > 0
        ):
            run = SpeedRun(item_count=event.items_practiced, seconds=event.duration_seconds)
            if run not in speed_runs:
                speed_runs = speed_runs + (run,)

        return replace(
            stats,
            games_played=stats.games_played + 1,
            game_perfects=game_perfects,
            speed_runs=speed_runs,
        )

    def _unlock_achievements(
        self, stats: LearnerStats, already_unlocked: frozenset[str]
    ) -> tuple[LearnerStats, list[str], list[XPAward]]:
        """
        Unlock everything the stats now satisfy, crediting rewards.

        Reward XP can raise the level and satisfy further level conditions, so
        evaluation repeats until nothing new unlocks; each pass unlocks at least
        one catalog key, which bounds the loop.
        """
        unlocked = set(already_unlocked)
        newly: list[str] = []
        rewards: list[XPAward] = []

        while True:
            definitions = self.evaluator.newly_unlocked(stats, unlocked)
            if not definitions:
                break
            gained = 0
            for definition in definitions:
                unlocked.add(definition.key)
                newly.append(definition.key)
                rewards.append(XPAward(f"achievement:{definition.key}", definition.xp_reward))
                gained += definition.xp_reward
                logger.info(
                    f"[achievements] Unlocked {definition.key} (+{definition.xp_reward} XP)"
                )
            total_xp = stats.total_xp + gained
            stats = replace(stats, total_xp=total_xp, current_level=self.ledger.level_for(total_xp))

        return stats, newly, rewards
