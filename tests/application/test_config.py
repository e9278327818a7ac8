from pathlib import Path

import pytest
from pydantic import ValidationError

from kotoba.application.config import EngineConfig, resolve_config


def test_defaults(mock_home):
    config = EngineConfig()
    assert config.passing_quality == 3
    assert config.default_ease == 2.5
    assert config.min_ease == 1.3
    assert config.bootstrap_intervals == (1.0, 6.0)
    assert config.streak_bonus_cap == 2.0
    assert config.max_streak_freezes == 2
    assert config.timezone == "UTC"
    assert config.achievement_catalog is None


def test_env_override(mock_home, monkeypatch):
    monkeypatch.setenv("KOTOBA_MAX_STREAK_FREEZES", "4")
    monkeypatch.setenv("KOTOBA_TIMEZONE", "Asia/Tokyo")
    config = EngineConfig()
    assert config.max_streak_freezes == 4
    assert config.timezone == "Asia/Tokyo"


def test_toml_file(mock_home):
    config_dir = mock_home / ".config" / "kotoba"
    config_dir.mkdir(parents=True)
    (config_dir / "config.toml").write_text(
        'timezone = "Europe/Paris"\nstreak_bonus_rate = 0.05\n', encoding="utf-8"
    )
    config = EngineConfig()
    assert config.timezone == "Europe/Paris"
    assert config.streak_bonus_rate == 0.05


def test_legacy_toml_location(mock_home):
    (mock_home / ".kotoba.toml").write_text("max_interval_days = 180.0\n", encoding="utf-8")
    assert EngineConfig().max_interval_days == 180.0


def test_env_beats_toml(mock_home, monkeypatch):
    (mock_home / ".kotoba.toml").write_text('timezone = "Europe/Paris"\n', encoding="utf-8")
    monkeypatch.setenv("KOTOBA_TIMEZONE", "America/New_York")
    assert EngineConfig().timezone == "America/New_York"


def test_resolve_config_drops_none(mock_home, monkeypatch):
    monkeypatch.setenv("KOTOBA_MAX_STREAK_FREEZES", "3")
    config = resolve_config({"max_streak_freezes": None, "passing_quality": 4})
    assert config.max_streak_freezes == 3
    assert config.passing_quality == 4


def test_catalog_path_is_resolved(mock_home):
    config = EngineConfig(achievement_catalog="~/catalog.yaml")
    assert config.achievement_catalog == Path(mock_home / "catalog.yaml").resolve()


@pytest.mark.parametrize(
    "overrides",
    [
        {"timezone": "Mars/Olympus"},
        {"passing_quality": 0},
        {"default_ease": 1.0},
        {"bootstrap_intervals": (6.0, 1.0)},
        {"bootstrap_intervals": (1.0, 400.0)},
        {"streak_bonus_cap": 0.5},
        {"log_level": "LOUD"},
    ],
)
def test_invalid_values(mock_home, overrides):
    with pytest.raises(ValidationError):
        EngineConfig(**overrides)


def test_config_is_frozen(mock_home):
    config = EngineConfig()
    with pytest.raises(ValidationError):
        config.passing_quality = 4
