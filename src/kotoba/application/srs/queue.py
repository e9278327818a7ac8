"""
Review queue builder.

Builds an ordered review session from a learner's item states by:
1. Dropping burned (retired) items, and New or unscheduled items
2. Keeping items whose next review time has passed
3. Sorting oldest-due first and capping the session size
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from kotoba.domain.constants import DEFAULT_MAX_QUEUE_SIZE
from kotoba.domain.srs.models import SRSState, Stage

logger = logging.getLogger(__name__)


@dataclass
class ReviewQueueResult:
    """Result of queue building operation."""

    due: list[SRSState]  # Items to review now, oldest first
    overflow: int  # Due items left out by the size cap
    retired: list[str]  # Burned items skipped
    unscheduled: list[str]  # New items and items with no next review time


def is_due(state: SRSState, now: datetime) -> bool:
    """An item is due once taught, not burned, and past its next review time."""
    if state.is_burned or state.stage == Stage.NEW or state.next_review_at is None:
        return False
    return state.next_review_at <= now


def due_items(
    states: Iterable[SRSState], now: datetime, limit: int | None = None
) -> list[SRSState]:
    """Due items sorted by next_review_at ascending (oldest first)."""
    due = sorted(
        (s for s in states if is_due(s, now)),
        key=lambda s: (s.next_review_at, s.item_id),
    )
    return due if limit is None else due[:limit]


def build_review_queue(
    states: Iterable[SRSState],
    now: datetime,
    max_items: int = DEFAULT_MAX_QUEUE_SIZE,
) -> ReviewQueueResult:
    """
    Build a review session for `now`.

    Args:
        states: All of the learner's item states.
        now: Current instant; must be comparable with the stored timestamps.
        max_items: Maximum items in the session (default: 100).

    Returns:
        ReviewQueueResult with the ordered queue and diagnostics.
    """
    if max_items < 0:
        raise ValueError("max_items must be non-negative")

    retired: list[str] = []
    unscheduled: list[str] = []
    candidates: list[SRSState] = []

    for state in states:
        if state.is_burned:
            retired.append(state.item_id)
        elif state.stage == Stage.NEW or state.next_review_at is None:
            unscheduled.append(state.item_id)
        else:
            candidates.append(state)

    due = due_items(candidates, now)
    overflow = max(0, len(due) - max_items)
    if overflow:
        logger.debug(f"[queue] {len(due)} items due, capping session at {max_items}")

    return ReviewQueueResult(
        due=due[:max_items],
        overflow=overflow,
        retired=retired,
        unscheduled=unscheduled,
    )
