"""
Achievement catalog loading.

The catalog is a YAML list of entries (or a mapping with an `achievements`
list). Entries are validated with pydantic before they become domain
definitions, so a malformed entry fails at load time rather than during
evaluation.
"""

import logging
from importlib import resources
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from kotoba.domain.achievements.models import (
    AchievementCatalog,
    AchievementCategory,
    AchievementCondition,
    AchievementDefinition,
    AchievementRarity,
    GamePerfect,
    JlptLevelReached,
    SpeedReview,
    StatThreshold,
)
from kotoba.domain.constants import GAME_TYPES
from kotoba.domain.errors import CatalogError
from kotoba.domain.progression.models import NUMERIC_STATS

logger = logging.getLogger(__name__)

# Catalog condition type -> LearnerStats counter it thresholds
STAT_CONDITION_TYPES: dict[str, str] = {
    "items_learned": "items_learned",
    "items_burned": "items_burned",
    "streak_days": "current_streak",
    "reviews_completed": "reviews_completed",
    "perfect_reviews": "perfect_reviews",
    "correct_in_a_row": "consecutive_correct",
    "games_played": "games_played",
    "kanji_count": "kanji_count",
    "vocab_count": "vocab_count",
    "lessons_completed": "lessons_completed",
}


class _Spec(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class _CountSpec(_Spec):
    type: Literal[
        "items_learned",
        "items_burned",
        "streak_days",
        "reviews_completed",
        "perfect_reviews",
        "correct_in_a_row",
        "games_played",
        "kanji_count",
        "vocab_count",
        "lessons_completed",
    ]
    count: int = Field(ge=0)

    def to_condition(self) -> AchievementCondition:
        return StatThreshold(stat=STAT_CONDITION_TYPES[self.type], count=self.count)


class _StatSpec(_Spec):
    type: Literal["stat_threshold"]
    stat: str
    count: int = Field(ge=0)

    @field_validator("stat")
    @classmethod
    def known_stat(cls, v: str) -> str:
        if v not in NUMERIC_STATS:
            raise ValueError(f"Unknown learner stat '{v}'")
        return v

    def to_condition(self) -> AchievementCondition:
        return StatThreshold(stat=self.stat, count=self.count)


class _AppLevelSpec(_Spec):
    type: Literal["app_level"]
    level: int = Field(ge=0)

    def to_condition(self) -> AchievementCondition:
        return StatThreshold(stat="current_level", count=self.level)


class _GamePerfectSpec(_Spec):
    type: Literal["game_perfect"]
    game_type: str

    @field_validator("game_type")
    @classmethod
    def known_game(cls, v: str) -> str:
        if v not in GAME_TYPES:
            raise ValueError(f"Unknown game type '{v}'")
        return v

    def to_condition(self) -> AchievementCondition:
        return GamePerfect(game_type=self.game_type)


class _JlptSpec(_Spec):
    type: Literal["jlpt_level"]
    level: Literal["N5", "N4", "N3", "N2", "N1"]

    def to_condition(self) -> AchievementCondition:
        return JlptLevelReached(level=self.level)


class _SpeedSpec(_Spec):
    type: Literal["speed_review"]
    item_count: int = Field(ge=1)
    max_seconds: float = Field(gt=0)

    def to_condition(self) -> AchievementCondition:
        return SpeedReview(item_count=self.item_count, max_seconds=self.max_seconds)


ConditionSpec = Annotated[
    _CountSpec | _StatSpec | _AppLevelSpec | _GamePerfectSpec | _JlptSpec | _SpeedSpec,
    Field(discriminator="type"),
]


class _AchievementSpec(_Spec):
    key: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    icon: str = ""
    category: AchievementCategory
    rarity: AchievementRarity = "common"
    xp_reward: int = Field(default=0, ge=0)
    condition: ConditionSpec

    def to_definition(self) -> AchievementDefinition:
        return AchievementDefinition(
            key=self.key,
            name=self.name,
            description=self.description,
            category=self.category,
            condition=self.condition.to_condition(),
            xp_reward=self.xp_reward,
            rarity=self.rarity,
            icon=self.icon,
        )


_ENTRIES = TypeAdapter(list[_AchievementSpec])


def parse_catalog(raw: Any) -> AchievementCatalog:
    """
    Validate raw catalog data (as loaded from YAML) into an AchievementCatalog.

    Raises:
        CatalogError: on any malformed entry, unknown stat or game type,
            or duplicated key.
    """
    if isinstance(raw, dict):
        raw = raw.get("achievements")
    if not isinstance(raw, list):
        raise CatalogError("Catalog must be a list of achievements")

    try:
        specs = _ENTRIES.validate_python(raw)
    except ValidationError as e:
        raise CatalogError(f"Invalid achievement catalog: {e}") from e

    # Duplicate keys are rejected by AchievementCatalog itself
    return AchievementCatalog(spec.to_definition() for spec in specs)


def load_catalog(path: Path | None = None) -> AchievementCatalog:
    """
    Load the achievement catalog from `path`, or the bundled default.

    Raises:
        CatalogError: if the file cannot be read, is not valid YAML, or
            fails validation.
    """
    try:
        if path is None:
            source = "bundled catalog"
            text = resources.files("kotoba").joinpath("data/achievements.yaml").read_text(
                encoding="utf-8"
            )
        else:
            source = str(path)
            text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Cannot read achievement catalog: {e}") from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise CatalogError(f"Achievement catalog {source} is not valid YAML: {e}") from e

    catalog = parse_catalog(raw)
    logger.info(f"Loaded {len(catalog)} achievements from {source}")
    return catalog
