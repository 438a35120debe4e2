"""Storage collaborator contracts consumed by the engine."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..core.periods import Period
from ..schemas import (
    Award,
    AwardHistoryEntry,
    BonusConfig,
    Challenge,
    ChallengeParticipation,
    Employee,
    Evaluation,
    RankingSettings,
    Task,
)
from .memory import InMemoryStore


@runtime_checkable
class EvaluationStore(Protocol):
    def list_employees(self, organization_id: str) -> list[Employee]:
        """Return the organization's employees."""

    def list_tasks(self, organization_id: str) -> list[Task]:
        """Return the organization's task definitions."""

    def list_evaluations(
        self, organization_id: str, employee_id: str, date_range: Period
    ) -> list[Evaluation]:
        """Return one employee's evaluations dated within ``date_range``."""


@runtime_checkable
class SettingsStore(Protocol):
    def get_ranking_settings(self, organization_id: str) -> RankingSettings:
        """Return ranking settings, defaults when none were saved."""

    def get_bonus_config(self, organization_id: str) -> BonusConfig:
        """Return the bonus rule, defaults when none was saved."""


@runtime_checkable
class AwardStore(Protocol):
    def list_active_awards(self, organization_id: str, period: Period) -> list[Award]:
        """Return active awards that may apply to ``period``."""

    def get_award(self, organization_id: str, award_id: str) -> Award | None:
        """Return an award by id or None."""

    def append_award_history(self, organization_id: str, entry: AwardHistoryEntry) -> None:
        """Record a resolution; replaces an earlier entry for the same award and period."""

    def list_award_history(self, organization_id: str) -> list[AwardHistoryEntry]:
        """Return history, most recent period first."""


@runtime_checkable
class ChallengeStore(Protocol):
    def get_challenge(self, organization_id: str, challenge_id: str) -> Challenge | None:
        """Return a challenge by id or None."""

    def list_challenges(self, organization_id: str) -> list[Challenge]:
        """Return all challenges of the organization."""

    def save_challenge(self, organization_id: str, challenge: Challenge) -> None:
        """Insert or replace a challenge."""

    def get_participation(
        self, organization_id: str, challenge_id: str, employee_id: str
    ) -> ChallengeParticipation | None:
        """Return the participation row or None when never created."""

    def upsert_participation(
        self, organization_id: str, participation: ChallengeParticipation
    ) -> None:
        """Insert or replace the row keyed by (challenge, employee)."""

    def list_participations(
        self, organization_id: str, challenge_id: str | None = None
    ) -> list[ChallengeParticipation]:
        """Return participations, optionally for one challenge."""


@runtime_checkable
class IncentiveStore(EvaluationStore, SettingsStore, AwardStore, ChallengeStore, Protocol):
    """Everything the closing pipeline and challenge service read and write."""


__all__ = [
    "AwardStore",
    "ChallengeStore",
    "EvaluationStore",
    "InMemoryStore",
    "IncentiveStore",
    "SettingsStore",
]
