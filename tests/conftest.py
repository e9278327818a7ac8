from datetime import datetime, timezone

import pytest

from kotoba.application.achievements.catalog import load_catalog
from kotoba.application.config import EngineConfig
from kotoba.infrastructure.clock import FixedClock


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config files
    monkeypatch.setenv("HOME", str(home))
    for var in ("KOTOBA_TIMEZONE", "KOTOBA_MAX_STREAK_FREEZES", "KOTOBA_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def config(mock_home):
    return EngineConfig()


@pytest.fixture
def now():
    return datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def today(now):
    return now.date()


@pytest.fixture
def clock(now):
    return FixedClock(now)


@pytest.fixture(scope="session")
def catalog():
    return load_catalog()
