"""Store-bound orchestration around the pure engine."""

from __future__ import annotations

import datetime as dt
import json
from dataclasses import asdict
from functools import partial
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence

import pendulum
import structlog

from . import __version__
from .core import (
    AwardResolver,
    BonusDecision,
    BonusEligibilityEvaluator,
    ChallengeLifecycleManager,
    Period,
    RankingBuilder,
    RankingCandidate,
    ScoreSummary,
    ScoringCalculator,
    challenge_points,
    expected_task_days,
    parse_period,
    rank_lookup,
)
from .errors import PeriodOpenError, PermissionDeniedError, ValidationError
from .schemas import (
    ActorContext,
    ActorRole,
    AwardHistoryEntry,
    Challenge,
    ChallengeParticipation,
    ChallengeStatus,
    Employee,
    ParticipationStatus,
    RankingEntry,
    Submission,
)
from .store import IncentiveStore


def scoped_organization(actor: ActorContext, organization_id: str | None = None) -> str:
    """Organization a computation runs in; never crosses the actor's own."""
    if actor.role is ActorRole.SUPERADMIN:
        target = organization_id or actor.organization_id
        if not target:
            raise PermissionDeniedError("Super-admin must name an organization")
        return target
    if not actor.organization_id:
        raise PermissionDeniedError(f"User {actor.user_id!r} has no organization")
    if organization_id and organization_id != actor.organization_id:
        raise PermissionDeniedError(
            f"User {actor.user_id!r} cannot act on organization {organization_id!r}"
        )
    return actor.organization_id


def require_admin(actor: ActorContext) -> None:
    if not actor.is_admin:
        raise PermissionDeniedError(f"User {actor.user_id!r} is not an administrator")


class OutputWriter:
    """Persist closing reports."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, default=_json_default),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False, default=_json_default))
            handle.write("\n")


class MonthlyClosingPipeline:
    """Evaluations -> scores -> {bonus, ranking} -> awards -> history."""

    def __init__(
        self,
        *,
        store: IncentiveStore,
        calculator: ScoringCalculator,
        bonus_evaluator: BonusEligibilityEvaluator,
        ranking_builder: RankingBuilder,
        award_resolver: AwardResolver,
        include_challenge_points: bool = False,
        writer: OutputWriter | None = None,
        now_provider: Callable[[], dt.datetime] | None = None,
    ) -> None:
        self._store = store
        self._calculator = calculator
        self._bonus = bonus_evaluator
        self._ranking = ranking_builder
        self._awards = award_resolver
        self._include_challenge_points = bool(include_challenge_points)
        self._writer = writer or OutputWriter()
        self._now_provider = now_provider or pendulum.now
        self._logger = structlog.get_logger(__name__)

    def summarize(
        self,
        organization_id: str,
        employees: Iterable[Employee],
        period: Period,
        *,
        strict: bool | None = None,
    ) -> list[ScoreSummary]:
        tasks = self._store.list_tasks(organization_id)
        summaries: list[ScoreSummary] = []
        for employee in employees:
            evaluations = self._store.list_evaluations(organization_id, employee.id, period)
            summaries.append(
                self._calculator.summarize(
                    employee.id,
                    period,
                    evaluations,
                    required=expected_task_days(employee, tasks, period),
                    strict=strict,
                )
            )
        return summaries

    def build_ranking(
        self,
        actor: ActorContext,
        period: Period | str,
        *,
        organization_id: str | None = None,
        manual_order: Sequence[str] | None = None,
        summaries: Sequence[ScoreSummary] | None = None,
    ) -> list[RankingEntry]:
        org = scoped_organization(actor, organization_id)
        settings = self._store.get_ranking_settings(org)
        if not settings.public_view_enabled and not actor.is_admin:
            raise PermissionDeniedError("Ranking is not public in this organization")

        resolved = parse_period(period)
        previous = self._rank(org, resolved.previous(), manual_order, None, None)
        return self._rank(org, resolved, manual_order, rank_lookup(previous), summaries)

    def _rank(
        self,
        org: str,
        period: Period,
        manual_order: Sequence[str] | None,
        previous_ranks: dict[str, int] | None,
        summaries: Sequence[ScoreSummary] | None,
    ) -> list[RankingEntry]:
        settings = self._store.get_ranking_settings(org)
        employees = [e for e in self._store.list_employees(org) if e.is_active]
        ranked = self._ranking.filter_probation(employees, settings, period)
        if summaries is None:
            summaries = self.summarize(org, ranked, period, strict=False)
        by_employee = {summary.employee_id: summary for summary in summaries}

        candidates = []
        for employee in ranked:
            summary = by_employee.get(employee.id)
            if summary is None:
                continue
            score = summary.score
            if self._include_challenge_points:
                score += self._challenge_points(org, employee.id, period)
            candidates.append(
                RankingCandidate(
                    employee_id=employee.id,
                    score=score,
                    zeros=summary.zeros,
                    admission_date=employee.admission_date,
                    employee_name=employee.name,
                    department=employee.department,
                )
            )
        return self._ranking.build(
            candidates,
            settings,
            manual_order=manual_order,
            previous_ranks=previous_ranks,
        )

    def _ensure_closed(self, period: Period) -> None:
        """Winners are final only once the whole period is in the past."""
        now = self._now_provider()
        today = dt.date(now.year, now.month, now.day)
        if period.end >= today:
            raise PeriodOpenError(period.key, today)

    def _challenge_points(self, org: str, employee_id: str, period: Period) -> int:
        in_period = {
            challenge.id
            for challenge in self._store.list_challenges(org)
            if period.contains(challenge.period_end)
        }
        return challenge_points(
            participation
            for participation in self._store.list_participations(org)
            if participation.employee_id == employee_id and participation.challenge_id in in_period
        )

    def bonuses(
        self,
        organization_id: str,
        summaries: Iterable[ScoreSummary],
    ) -> list[BonusDecision]:
        rule = self._store.get_bonus_config(organization_id)
        return [
            self._bonus.evaluate(summary.employee_id, summary.period, summary.zeros, config=rule)
            for summary in summaries
        ]

    def resolve_award(
        self,
        actor: ActorContext,
        award_id: str,
        period: Period | str,
        *,
        organization_id: str | None = None,
        manual_order: Sequence[str] | None = None,
        notes: str | None = None,
        delivery_photo_url: str | None = None,
    ) -> AwardHistoryEntry:
        """Resolve a single award and record it, replacing an earlier resolution."""
        require_admin(actor)
        org = scoped_organization(actor, organization_id)
        self._ensure_closed(parse_period(period))
        ranking = self.build_ranking(actor, period, organization_id=org, manual_order=manual_order)
        entry = self._awards.resolve_by_id(
            award_id,
            partial(self._store.get_award, org),
            ranking,
            period,
            notes=notes,
            delivery_photo_url=delivery_photo_url,
        )
        self._store.append_award_history(org, entry)
        self._logger.info(
            "award.resolved",
            organization_id=org,
            award_id=award_id,
            period=entry.period,
            winners=len(entry.winners),
        )
        return entry

    def run(
        self,
        actor: ActorContext,
        period: Period | str,
        *,
        organization_id: str | None = None,
        strict: bool | None = None,
        manual_order: Sequence[str] | None = None,
        output_path: Path | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> dict[str, Any]:
        """Close a period: every computation happens before anything is written."""
        require_admin(actor)
        org = scoped_organization(actor, organization_id)
        resolved = parse_period(period)
        log = self._logger.bind(organization_id=org, period=resolved.key)
        self._ensure_closed(resolved)

        employees = [e for e in self._store.list_employees(org) if e.is_active]
        summaries = self.summarize(org, employees, resolved, strict=strict)
        bonuses = self.bonuses(org, summaries)
        ranking = self.build_ranking(
            actor,
            resolved,
            organization_id=org,
            manual_order=manual_order,
            summaries=summaries,
        )
        awards = self._store.list_active_awards(org, resolved)
        history = self._awards.resolve_all(awards, ranking, resolved)

        for entry in history:
            self._store.append_award_history(org, entry)
            log.info("award.resolved", award_id=entry.award_id, winners=len(entry.winners))
            if audit_logger:
                audit_logger.append({"event": "award.resolved", "organization_id": org, **entry.to_document()})

        for decision in bonuses:
            log.info(
                "closing.bonus",
                employee_id=decision.employee_id,
                zeros=decision.zeros,
                eligible=decision.eligible,
                amount=decision.amount,
            )
            if audit_logger:
                audit_logger.append({"event": "closing.bonus", "organization_id": org, **asdict(decision)})

        report = {
            "metadata": {
                "organization_id": org,
                "period": resolved.key,
                "employee_count": len(employees),
                "closed_by": actor.user_id,
                "timestamp": self._now_provider(),
                "app_version": __version__,
            },
            "scores": [asdict(summary) for summary in summaries],
            "bonuses": [asdict(decision) for decision in bonuses],
            "ranking": [entry.to_document() for entry in ranking],
            "awards": [entry.to_document() for entry in history],
        }
        report = json.loads(json.dumps(report, ensure_ascii=False, default=_json_default))
        if output_path is not None:
            self._writer.write(output_path, report)
        log.info("closing.completed", ranked=len(ranking), awards=len(history))
        return report


class ChallengeService:
    """Challenge operations on behalf of an actor, persisted through the store."""

    def __init__(self, *, store: IncentiveStore, lifecycle: ChallengeLifecycleManager) -> None:
        self._store = store
        self._lifecycle = lifecycle
        self._logger = structlog.get_logger(__name__)

    def participation(
        self,
        actor: ActorContext,
        challenge_id: str,
        employee_id: str | None = None,
    ) -> ChallengeParticipation:
        """Return the participation row, creating the pending row on first check."""
        org = scoped_organization(actor)
        challenge = self._challenge(org, challenge_id)
        employee = self._employee(org, self._subject(actor, employee_id))
        existing = self._store.get_participation(org, challenge.id, employee.id)
        participation = self._lifecycle.participation_for(challenge, employee, existing)
        if existing is None:
            self._store.upsert_participation(org, participation)
        return participation

    def accept(self, actor: ActorContext, challenge_id: str) -> ChallengeParticipation:
        org = scoped_organization(actor)
        challenge = self._challenge(org, challenge_id)
        employee = self._employee(org, actor.user_id)
        existing = self._store.get_participation(org, challenge.id, employee.id)
        updated = self._lifecycle.accept(challenge, employee, existing)
        return self._save(org, updated, "challenge.accepted")

    def submit(
        self,
        actor: ActorContext,
        challenge_id: str,
        submission: Submission,
    ) -> ChallengeParticipation:
        org = scoped_organization(actor)
        challenge = self._challenge(org, challenge_id)
        employee = self._employee(org, actor.user_id)
        existing = self._store.get_participation(org, challenge.id, employee.id)
        updated = self._lifecycle.submit(challenge, employee, submission, existing)
        return self._save(org, updated, "challenge.submitted")

    def evaluate(
        self,
        actor: ActorContext,
        challenge_id: str,
        employee_id: str,
        decision: ParticipationStatus,
        *,
        score: float | None = None,
        feedback: str | None = None,
    ) -> ChallengeParticipation:
        require_admin(actor)
        org = scoped_organization(actor)
        challenge = self._challenge(org, challenge_id)
        employee = self._employee(org, employee_id)
        existing = self._store.get_participation(org, challenge.id, employee.id)
        participation = self._lifecycle.participation_for(challenge, employee, existing)
        updated = self._lifecycle.evaluate(
            challenge,
            participation,
            decision,
            evaluator_id=actor.user_id,
            score=score,
            feedback=feedback,
        )
        return self._save(org, updated, "challenge.evaluated")

    def change_status(
        self,
        actor: ActorContext,
        challenge_id: str,
        target: ChallengeStatus,
        *,
        override: bool = False,
    ) -> Challenge:
        require_admin(actor)
        org = scoped_organization(actor)
        challenge = self._challenge(org, challenge_id)
        updated = self._lifecycle.transition(
            challenge,
            target,
            participations=self._store.list_participations(org, challenge.id),
            override=override,
        )
        self._store.save_challenge(org, updated)
        self._logger.info(
            "challenge.status_changed",
            organization_id=org,
            challenge_id=challenge.id,
            from_status=challenge.status.value,
            to_status=updated.status.value,
            override=override,
        )
        return updated

    def tick(
        self,
        organization_id: str,
        *,
        today: dt.date | None = None,
    ) -> list[tuple[str, ChallengeStatus, ChallengeStatus]]:
        """Apply time-driven status moves to every challenge of the organization."""
        changes: list[tuple[str, ChallengeStatus, ChallengeStatus]] = []
        for challenge in self._store.list_challenges(organization_id):
            advanced = self._lifecycle.advance(challenge, today=today)
            if advanced.status is challenge.status:
                continue
            self._store.save_challenge(organization_id, advanced)
            changes.append((challenge.id, challenge.status, advanced.status))
            self._logger.info(
                "challenge.advanced",
                organization_id=organization_id,
                challenge_id=challenge.id,
                from_status=challenge.status.value,
                to_status=advanced.status.value,
            )
        return changes

    def _challenge(self, org: str, challenge_id: str) -> Challenge:
        challenge = self._store.get_challenge(org, challenge_id)
        if challenge is None:
            raise ValidationError(f"Unknown challenge: {challenge_id!r}")
        return challenge

    def _employee(self, org: str, employee_id: str) -> Employee:
        for employee in self._store.list_employees(org):
            if employee.id == employee_id:
                return employee
        raise ValidationError(f"Unknown employee: {employee_id!r}")

    @staticmethod
    def _subject(actor: ActorContext, employee_id: str | None) -> str:
        if employee_id is None or employee_id == actor.user_id:
            return actor.user_id
        require_admin(actor)
        return employee_id

    def _save(
        self, org: str, participation: ChallengeParticipation, event: str
    ) -> ChallengeParticipation:
        self._store.upsert_participation(org, participation)
        self._logger.info(
            event,
            organization_id=org,
            challenge_id=participation.challenge_id,
            employee_id=participation.employee_id,
            status=participation.status.value,
        )
        return participation


def _json_default(value: Any) -> Any:
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
