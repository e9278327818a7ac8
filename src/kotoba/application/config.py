from pathlib import Path
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from kotoba.domain import constants as c
from kotoba.domain.srs.models import LEARNED_STAGE, Stage


class EngineConfig(BaseSettings):
    """
    Tunable parameters for the progression engine.
    Supports loading from:
    1. Environment variables (KOTOBA_*)
    2. Config file (~/.config/kotoba/config.toml or ~/.kotoba.toml)
    3. Manual overrides
    """

    model_config = SettingsConfigDict(
        env_prefix="KOTOBA_",
        extra="ignore",
        frozen=True,
    )

    # SRS
    passing_quality: int = Field(default=c.DEFAULT_PASSING_QUALITY, ge=1, le=c.MAX_QUALITY)
    default_ease: float = c.DEFAULT_EASE_FACTOR
    min_ease: float = Field(default=c.MIN_EASE_FACTOR, gt=0)
    max_ease: float = c.MAX_EASE_FACTOR
    ease_failure_penalty: float = Field(default=c.EASE_FAILURE_PENALTY, ge=0)
    bootstrap_intervals: tuple[float, float] = c.BOOTSTRAP_INTERVALS
    max_interval_days: float = Field(default=c.MAX_INTERVAL_DAYS, gt=0)
    apprentice_failure_step: int = Field(default=c.APPRENTICE_FAILURE_STEP, ge=0)
    senior_failure_step: int = Field(default=c.SENIOR_FAILURE_STEP, ge=0)
    learned_stage: int = Field(default=LEARNED_STAGE, ge=Stage.APPRENTICE_1, le=Stage.BURNED)

    # XP
    streak_bonus_rate: float = Field(default=c.STREAK_BONUS_RATE_PER_DAY, ge=0)
    streak_bonus_cap: float = Field(default=c.STREAK_BONUS_CAP, ge=1.0)

    # Streaks
    max_streak_freezes: int = Field(default=c.MAX_STREAK_FREEZES, ge=0)
    timezone: str = "UTC"

    # Achievements
    achievement_catalog: Path | None = None

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Home may be patched after import (tests), so resolve paths here
        toml_files = [
            Path.home() / ".config/kotoba/config.toml",
            Path.home() / ".kotoba.toml",
        ]

        toml_file = None
        for f in toml_files:
            if f.exists():
                toml_file = f
                break

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("achievement_catalog", mode="before")
    @classmethod
    def resolve_catalog_path(cls, v: Any) -> Path | None:
        if v:
            return Path(v).expanduser().resolve()
        return None

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @model_validator(mode="after")
    def check_bounds(self) -> "EngineConfig":
        if not self.min_ease <= self.default_ease <= self.max_ease:
            raise ValueError("default_ease must lie within [min_ease, max_ease]")
        first, second = self.bootstrap_intervals
        if not 0 < first <= second:
            raise ValueError("bootstrap_intervals must be positive and non-decreasing")
        if second > self.max_interval_days:
            raise ValueError("bootstrap_intervals must not exceed max_interval_days")
        return self


def resolve_config(overrides: dict[str, Any] | None = None) -> EngineConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in EngineConfig
    2. ~/.config/kotoba/config.toml (if exists)
    3. Environment variables (KOTOBA_*)
    4. overrides (None values are dropped so they don't mask lower layers)
    """
    cleaned = {k: v for k, v in (overrides or {}).items() if v is not None}
    return EngineConfig(**cleaned)
