"""Pydantic value records shared by the engine and its collaborators."""

from __future__ import annotations

from .award import (
    RECURRING_PERIOD,
    UNDEFINED_PRIZE,
    Award,
    AwardHistoryEntry,
    AwardStatus,
    AwardWinner,
    PositionValue,
    history_key,
)
from .bonus import BonusConfig
from .challenge import (
    Challenge,
    ChallengeParticipation,
    ChallengeStatus,
    Difficulty,
    Eligibility,
    EligibilityType,
    ParticipationStatus,
    ParticipationType,
    Submission,
)
from .employee import ActorContext, ActorRole, Employee
from .evaluation import AssignmentTarget, Evaluation, Periodicity, Task, evaluation_key
from .ranking import NotificationLevel, RankingEntry, RankingSettings, TieBreaker, Trend

__all__ = [
    "RECURRING_PERIOD",
    "UNDEFINED_PRIZE",
    "ActorContext",
    "ActorRole",
    "AssignmentTarget",
    "Award",
    "AwardHistoryEntry",
    "AwardStatus",
    "AwardWinner",
    "BonusConfig",
    "Challenge",
    "ChallengeParticipation",
    "ChallengeStatus",
    "Difficulty",
    "Eligibility",
    "EligibilityType",
    "Employee",
    "Evaluation",
    "NotificationLevel",
    "ParticipationStatus",
    "ParticipationType",
    "Periodicity",
    "PositionValue",
    "RankingEntry",
    "RankingSettings",
    "Submission",
    "Task",
    "TieBreaker",
    "Trend",
    "evaluation_key",
    "history_key",
]
