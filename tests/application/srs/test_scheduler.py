from dataclasses import replace
from datetime import timedelta

import pytest

from kotoba.application.srs.scheduler import SRSScheduler, ease_delta, validate_quality
from kotoba.domain.errors import InvalidInputError, RetiredItemError
from kotoba.domain.srs.models import SRSState, Stage


@pytest.fixture
def scheduler(config):
    return SRSScheduler(config)


@pytest.fixture
def fresh(scheduler):
    return scheduler.new_state("taberu", "vocabulary")


def test_new_state_is_unscheduled(fresh):
    assert fresh.stage == Stage.NEW
    assert fresh.ease_factor == 2.5
    assert fresh.repetitions == 0
    assert fresh.next_review_at is None
    assert fresh.stage_name == "New"


def test_learn_starts_on_apprentice_and_is_due_now(scheduler, now):
    learned = scheduler.learn("mizu", "vocabulary", now)
    assert learned.stage == Stage.APPRENTICE_1
    assert learned.stage_name == "Apprentice I"
    assert learned.repetitions == 0
    assert learned.next_review_at == now
    assert learned.last_reviewed_at is None


def test_learned_item_never_falls_back_to_new(scheduler, now):
    state = scheduler.learn("mizu", "vocabulary", now)
    for i in range(3):
        state = scheduler.transition(state, 0, now + timedelta(days=i))
        assert state.stage == Stage.APPRENTICE_1
        assert state.next_review_at is not None


def test_ease_delta_is_monotonic_in_quality():
    assert ease_delta(5) == pytest.approx(0.1)
    assert ease_delta(4) == pytest.approx(0.0)
    assert ease_delta(3) == pytest.approx(-0.14)
    assert ease_delta(3) < ease_delta(4) < ease_delta(5)


class TestSuccess:
    def test_three_perfect_reviews_reach_stage_three(self, scheduler, now):
        state = SRSState(item_id="hi", item_type="kanji", ease_factor=2.5, interval_days=1.0)
        eases = [state.ease_factor]

        for i in range(3):
            state = scheduler.transition(state, 5, now + timedelta(days=i))
            eases.append(state.ease_factor)

        assert state.stage == 3
        assert state.repetitions == 3
        assert eases == sorted(eases)
        assert len(set(eases)) == 4

    def test_bootstrap_then_multiplicative_intervals(self, scheduler, fresh, now):
        first = scheduler.transition(fresh, 5, now)
        assert first.interval_days == 1.0
        assert first.next_review_at == now + timedelta(days=1)

        second = scheduler.transition(first, 5, now)
        assert second.interval_days == 6.0

        third = scheduler.transition(second, 4, now)
        assert third.interval_days == pytest.approx(6.0 * third.ease_factor)

    def test_threshold_quality_passes_with_lower_ease(self, scheduler, fresh, now):
        result = scheduler.transition(fresh, 3, now)
        assert result.stage == 1
        assert result.repetitions == 1
        assert result.ease_factor == pytest.approx(2.36)

    def test_ease_is_capped(self, scheduler, now):
        state = SRSState(item_id="a", item_type="vocabulary", stage=2, ease_factor=2.95)
        assert scheduler.transition(state, 5, now).ease_factor == 3.0

    def test_interval_is_capped(self, scheduler, now):
        state = SRSState(
            item_id="a", item_type="vocabulary", stage=7, repetitions=6, interval_days=300.0
        )
        assert scheduler.transition(state, 5, now).interval_days == 365.0

    def test_reaching_burned_retires_item(self, scheduler, now):
        state = SRSState(
            item_id="a",
            item_type="kanji",
            stage=Stage.ENLIGHTENED,
            repetitions=7,
            interval_days=120.0,
        )
        burned = scheduler.transition(state, 4, now)
        assert burned.stage == Stage.BURNED
        assert burned.is_burned
        assert burned.burned_at == now


class TestFailure:
    @pytest.mark.parametrize("stage", [0, 1, 4, 5, 6, 7, 8])
    @pytest.mark.parametrize("quality", [0, 1, 2])
    def test_failure_resets_repetitions_and_interval(self, scheduler, now, stage, quality):
        state = SRSState(
            item_id="a",
            item_type="vocabulary",
            stage=stage,
            repetitions=4,
            interval_days=40.0,
            ease_factor=2.2,
        )
        result = scheduler.transition(state, quality, now)
        assert result.repetitions == 0
        assert result.interval_days == 1.0
        assert result.ease_factor == pytest.approx(2.0)

    @pytest.mark.parametrize(
        "stage, expected",
        [(0, 1), (1, 1), (2, 1), (3, 2), (4, 3), (5, 3), (6, 4), (8, 6)],
    )
    def test_stage_regression(self, scheduler, now, stage, expected):
        state = SRSState(item_id="a", item_type="vocabulary", stage=stage, repetitions=2)
        assert scheduler.transition(state, 1, now).stage == expected

    def test_ease_never_drops_below_floor(self, scheduler, now):
        state = SRSState(item_id="a", item_type="vocabulary", stage=3, ease_factor=1.35)
        assert scheduler.transition(state, 0, now).ease_factor == 1.3


class TestContract:
    def test_transition_is_deterministic(self, scheduler, now):
        state = SRSState(
            item_id="a", item_type="grammar", stage=4, repetitions=3, interval_days=9.5
        )
        assert scheduler.transition(state, 4, now) == scheduler.transition(state, 4, now)

    def test_input_state_is_not_modified(self, scheduler, fresh, now):
        before = replace(fresh)
        scheduler.transition(fresh, 5, now)
        assert fresh == before
        assert fresh.stage == 0

    @pytest.mark.parametrize("quality", [-1, 6, 3.0, "4", None, True])
    def test_invalid_quality_is_rejected(self, scheduler, fresh, now, quality):
        with pytest.raises(InvalidInputError):
            scheduler.transition(fresh, quality, now)

    def test_invalid_quality_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_quality(9)

    def test_burned_item_cannot_be_reviewed(self, scheduler, now):
        state = SRSState(item_id="a", item_type="kanji", stage=Stage.BURNED, burned_at=now)
        with pytest.raises(RetiredItemError):
            scheduler.transition(state, 5, now)
