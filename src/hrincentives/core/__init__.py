"""Pure incentive engine components."""

from __future__ import annotations

from .awards import AwardResolver, award_matches_period, merge_history, resolve_prize
from .bonus import BonusDecision, BonusEligibilityEvaluator
from .challenges import ChallengeLifecycleManager, is_eligible
from .periods import Period, parse_date, parse_period
from .ranking import RankingBuilder, RankingCandidate, RankingConfig, compute_trend, rank_lookup
from .scoring import (
    ScoreSummary,
    ScoringCalculator,
    challenge_points,
    edit_evaluation,
    expected_task_days,
    finalize_evaluation,
    task_applies,
)

__all__ = [
    "AwardResolver",
    "BonusDecision",
    "BonusEligibilityEvaluator",
    "ChallengeLifecycleManager",
    "Period",
    "RankingBuilder",
    "RankingCandidate",
    "RankingConfig",
    "ScoreSummary",
    "ScoringCalculator",
    "award_matches_period",
    "challenge_points",
    "compute_trend",
    "edit_evaluation",
    "expected_task_days",
    "finalize_evaluation",
    "is_eligible",
    "merge_history",
    "parse_date",
    "parse_period",
    "rank_lookup",
    "resolve_prize",
    "task_applies",
]
