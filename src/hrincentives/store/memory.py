"""In-memory storage collaborator."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Iterable, Mapping

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..core.awards import award_matches_period
from ..core.periods import Period
from ..schemas import (
    Award,
    AwardHistoryEntry,
    AwardStatus,
    BonusConfig,
    Challenge,
    ChallengeParticipation,
    Employee,
    Evaluation,
    RankingSettings,
    Task,
)


class SnapshotLoadError(ValueError):
    """Raised when a snapshot contains invalid records."""

    def __init__(self, errors: list[str]):
        super().__init__("Snapshot loading failed")
        self.errors = errors

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Snapshot loading failed: {self.errors}"


class _Organization:
    def __init__(self) -> None:
        self.employees: dict[str, Employee] = {}
        self.tasks: dict[str, Task] = {}
        self.evaluations: dict[str, Evaluation] = {}
        self.ranking_settings: RankingSettings | None = None
        self.bonus_config: BonusConfig | None = None
        self.awards: dict[str, Award] = {}
        self.history: dict[tuple[str, str], AwardHistoryEntry] = {}
        self.challenges: dict[str, Challenge] = {}
        self.participations: dict[tuple[str, str], ChallengeParticipation] = {}


class InMemoryStore:
    """Organization-scoped store backed by dictionaries.

    Writes replace by key (last write wins), which also makes award
    history idempotent per (award, period).
    """

    def __init__(
        self,
        *,
        default_bonus: BonusConfig | None = None,
        default_ranking: RankingSettings | None = None,
    ) -> None:
        self._orgs: defaultdict[str, _Organization] = defaultdict(_Organization)
        self._default_bonus = default_bonus or BonusConfig()
        self._default_ranking = default_ranking or RankingSettings()

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any], **defaults: Any) -> "InMemoryStore":
        """Build a store from ``{"organizations": {org_id: {...collections}}}``."""
        store = cls(**defaults)
        errors: list[str] = []
        organizations = (snapshot or {}).get("organizations") or {}
        for org_id, data in organizations.items():
            store._load_organization(str(org_id), data or {}, errors)
        if errors:
            raise SnapshotLoadError(errors)
        return store

    def _load_organization(
        self, org_id: str, data: Mapping[str, Any], errors: list[str]
    ) -> None:
        loaders: list[tuple[str, type[BaseModel], Any]] = [
            ("employees", Employee, self.add_employee),
            ("tasks", Task, self.add_task),
            ("evaluations", Evaluation, self.save_evaluation),
            ("awards", Award, self.save_award),
            ("awardHistory", AwardHistoryEntry, self.append_award_history),
            ("challenges", Challenge, self.save_challenge),
            ("participations", ChallengeParticipation, self.upsert_participation),
        ]
        for name, model, add in loaders:
            for idx, raw in enumerate(data.get(name) or [], start=1):
                try:
                    add(org_id, model.model_validate(raw))
                except PydanticValidationError as exc:
                    errors.append(f"{org_id}.{name}[{idx}]: {exc}")

        singletons: list[tuple[str, type[BaseModel], Any]] = [
            ("rankingSettings", RankingSettings, self.save_ranking_settings),
            ("bonusConfig", BonusConfig, self.save_bonus_config),
        ]
        for name, model, save in singletons:
            if data.get(name) is None:
                continue
            try:
                save(org_id, model.model_validate(data[name]))
            except PydanticValidationError as exc:
                errors.append(f"{org_id}.{name}: {exc}")

    # employees and tasks

    def add_employee(self, organization_id: str, employee: Employee) -> None:
        self._orgs[organization_id].employees[employee.id] = employee

    def list_employees(self, organization_id: str) -> list[Employee]:
        return list(self._org(organization_id).employees.values())

    def add_task(self, organization_id: str, task: Task) -> None:
        self._orgs[organization_id].tasks[task.id] = task

    def list_tasks(self, organization_id: str) -> list[Task]:
        return list(self._org(organization_id).tasks.values())

    # evaluations

    def save_evaluation(self, organization_id: str, evaluation: Evaluation) -> None:
        self._orgs[organization_id].evaluations[evaluation.id] = evaluation

    def list_evaluations(
        self, organization_id: str, employee_id: str, date_range: Period
    ) -> list[Evaluation]:
        return sorted(
            (
                evaluation
                for evaluation in self._org(organization_id).evaluations.values()
                if evaluation.employee_id == employee_id
                and date_range.contains(evaluation.evaluation_date)
            ),
            key=lambda item: (item.evaluation_date, item.task_id),
        )

    # settings

    def save_ranking_settings(self, organization_id: str, settings: RankingSettings) -> None:
        self._orgs[organization_id].ranking_settings = settings

    def get_ranking_settings(self, organization_id: str) -> RankingSettings:
        return self._org(organization_id).ranking_settings or self._default_ranking

    def save_bonus_config(self, organization_id: str, config: BonusConfig) -> None:
        self._orgs[organization_id].bonus_config = config

    def get_bonus_config(self, organization_id: str) -> BonusConfig:
        return self._org(organization_id).bonus_config or self._default_bonus

    # awards

    def save_award(self, organization_id: str, award: Award) -> None:
        self._orgs[organization_id].awards[award.id] = award

    def delete_award(self, organization_id: str, award_id: str) -> None:
        self._orgs[organization_id].awards.pop(award_id, None)

    def get_award(self, organization_id: str, award_id: str) -> Award | None:
        return self._org(organization_id).awards.get(award_id)

    def list_active_awards(self, organization_id: str, period: Period) -> list[Award]:
        return [
            award
            for award in self._org(organization_id).awards.values()
            if award.status is AwardStatus.ACTIVE and award_matches_period(award, period)
        ]

    def append_award_history(self, organization_id: str, entry: AwardHistoryEntry) -> None:
        self._orgs[organization_id].history[entry.key] = entry

    def list_award_history(self, organization_id: str) -> list[AwardHistoryEntry]:
        entries = self._org(organization_id).history.values()
        return sorted(entries, key=lambda item: item.period, reverse=True)

    # challenges

    def save_challenge(self, organization_id: str, challenge: Challenge) -> None:
        self._orgs[organization_id].challenges[challenge.id] = challenge

    def get_challenge(self, organization_id: str, challenge_id: str) -> Challenge | None:
        return self._org(organization_id).challenges.get(challenge_id)

    def list_challenges(self, organization_id: str) -> list[Challenge]:
        return sorted(
            self._org(organization_id).challenges.values(),
            key=lambda item: item.period_start,
            reverse=True,
        )

    def get_participation(
        self, organization_id: str, challenge_id: str, employee_id: str
    ) -> ChallengeParticipation | None:
        return self._org(organization_id).participations.get((challenge_id, employee_id))

    def upsert_participation(
        self, organization_id: str, participation: ChallengeParticipation
    ) -> None:
        self._orgs[organization_id].participations[participation.key] = participation

    def list_participations(
        self, organization_id: str, challenge_id: str | None = None
    ) -> list[ChallengeParticipation]:
        rows: Iterable[ChallengeParticipation] = self._org(organization_id).participations.values()
        if challenge_id is not None:
            rows = (row for row in rows if row.challenge_id == challenge_id)
        return list(rows)

    def _org(self, organization_id: str) -> _Organization:
        # reads never create organizations
        return self._orgs.get(organization_id) or _Organization()
