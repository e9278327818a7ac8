"""Clock adapters."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from kotoba.domain.ports import Clock


class SystemClock(Clock):
    """Wall clock; `today()` is the calendar date in the learner's timezone."""

    def __init__(self, tz: str = "UTC"):
        self.tz = ZoneInfo(tz)

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock(Clock):
    """
    Frozen clock for deterministic runs.

    `today()` is `instant` converted to `tz`, so a late-evening UTC instant can
    already be tomorrow for the learner.
    """

    def __init__(self, instant: datetime, tz: str = "UTC"):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant
        self.tz = ZoneInfo(tz)

    def now(self) -> datetime:
        return self.instant

    def today(self) -> date:
        return self.instant.astimezone(self.tz).date()

    def advance(self, **delta: float) -> None:
        """Move the clock forward, e.g. `clock.advance(days=1, hours=2)`."""
        self.instant = self.instant + timedelta(**delta)
