"""Pydantic configuration schema for YAML engine settings."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError


class ScoringSection(BaseModel):
    strict: bool = False
    include_challenge_points: bool = False


class RankingSection(BaseModel):
    probation_days: int | None = Field(default=None, ge=0)


class BonusSection(BaseModel):
    base_value: float | None = Field(default=None, ge=0)
    zero_limit: int | None = Field(default=None, ge=0)


class AppConfig(BaseModel):
    scoring: ScoringSection = Field(default_factory=ScoringSection)
    ranking: RankingSection = Field(default_factory=RankingSection)
    bonus: BonusSection = Field(default_factory=BonusSection)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {"scoring": self.scoring.model_dump()}
        ranking = self.ranking.model_dump(exclude_none=True)
        if ranking:
            settings["ranking"] = ranking
        bonus = self.bonus.model_dump(exclude_none=True)
        if bonus:
            settings["bonus"] = bonus
        return settings


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
