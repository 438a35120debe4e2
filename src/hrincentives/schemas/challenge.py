from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import AliasChoices, Field, model_validator

from .base import DocumentModel


class ChallengeStatus(str, Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    EVALUATING = "evaluating"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class ParticipationType(str, Enum):
    MANDATORY = "Obrigatório"
    OPTIONAL = "Opcional"


class Difficulty(str, Enum):
    EASY = "Fácil"
    MEDIUM = "Médio"
    HARD = "Difícil"


class EligibilityType(str, Enum):
    ALL = "all"
    DEPARTMENT = "department"
    ROLE = "role"
    INDIVIDUAL = "individual"


class Eligibility(DocumentModel):
    type: EligibilityType = EligibilityType.ALL
    entity_ids: list[str] = Field(default_factory=list)


class Challenge(DocumentModel):
    """Gamified challenge definition; its status is independent of participations."""

    id: str
    title: str
    description: str = ""
    category: str | None = None
    period_start: dt.date = Field(
        validation_alias=AliasChoices("periodStart", "periodStartDate", "period_start"),
        serialization_alias="periodStart",
    )
    period_end: dt.date = Field(
        validation_alias=AliasChoices("periodEnd", "periodEndDate", "period_end"),
        serialization_alias="periodEnd",
    )
    points: int = Field(default=0, ge=0)
    difficulty: Difficulty = Difficulty.MEDIUM
    participation_type: ParticipationType = ParticipationType.OPTIONAL
    eligibility: Eligibility = Field(default_factory=Eligibility)
    evaluation_metrics: str = ""
    status: ChallengeStatus = ChallengeStatus.DRAFT

    @model_validator(mode="after")
    def _check_period(self) -> "Challenge":
        if self.period_end < self.period_start:
            raise ValueError("periodEnd must not be before periodStart")
        return self

    @property
    def is_optional(self) -> bool:
        return self.participation_type is ParticipationType.OPTIONAL


class ParticipationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class Submission(DocumentModel):
    text: str | None = None
    file_url: str | None = None


class ChallengeParticipation(DocumentModel):
    """Progress of one employee on one challenge."""

    challenge_id: str
    employee_id: str
    status: ParticipationStatus = ParticipationStatus.PENDING
    submission: Submission | None = None
    score: float | None = None
    feedback: str | None = None
    accepted_at: dt.datetime | None = None
    submitted_at: dt.datetime | None = None
    evaluated_at: dt.datetime | None = None
    evaluator_id: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return self.challenge_id, self.employee_id

    @property
    def is_resolved(self) -> bool:
        return self.status in (ParticipationStatus.APPROVED, ParticipationStatus.REJECTED)
