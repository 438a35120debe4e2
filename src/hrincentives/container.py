"""Dependency injection container for the incentive engine."""

from __future__ import annotations

from typing import Any

from dependency_injector import containers, providers

from .core import (
    AwardResolver,
    BonusEligibilityEvaluator,
    ChallengeLifecycleManager,
    RankingBuilder,
    RankingConfig,
    ScoringCalculator,
)
from .pipeline import ChallengeService, MonthlyClosingPipeline
from .schemas import BonusConfig
from .store import InMemoryStore


class IncentiveContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    store = providers.Singleton(InMemoryStore)

    scoring_calculator = providers.Singleton(
        ScoringCalculator,
        strict=config.scoring.strict,
    )
    bonus_evaluator = providers.Singleton(BonusEligibilityEvaluator)
    ranking_builder = providers.Singleton(RankingBuilder)
    award_resolver = providers.Singleton(AwardResolver)
    challenge_lifecycle = providers.Singleton(ChallengeLifecycleManager)

    closing_pipeline = providers.Factory(
        MonthlyClosingPipeline,
        store=store,
        calculator=scoring_calculator,
        bonus_evaluator=bonus_evaluator,
        ranking_builder=ranking_builder,
        award_resolver=award_resolver,
        include_challenge_points=config.scoring.include_challenge_points,
    )

    challenge_service = providers.Factory(
        ChallengeService,
        store=store,
        lifecycle=challenge_lifecycle,
    )


def create_container(
    *,
    settings: dict | None = None,
    store: Any | None = None,
) -> IncentiveContainer:
    """Instantiate container with optional overrides."""

    container = IncentiveContainer()
    settings = settings if isinstance(settings, dict) else {}

    container.config.from_dict({"scoring": settings.get("scoring") or {}})

    bonus_defaults = settings.get("bonus") or {}
    bonus_config = BonusConfig(**bonus_defaults) if bonus_defaults else None
    if bonus_config is not None:
        container.bonus_evaluator.override(
            providers.Singleton(BonusEligibilityEvaluator, config=bonus_config)
        )

    if store is not None:
        container.store.override(providers.Object(store))
    elif bonus_config is not None:
        container.store.override(providers.Singleton(InMemoryStore, default_bonus=bonus_config))

    ranking_settings = settings.get("ranking") or {}
    if ranking_settings:
        ranking_config = RankingConfig(**ranking_settings)
        container.ranking_builder.override(
            providers.Singleton(RankingBuilder, config=ranking_config)
        )

    return container
