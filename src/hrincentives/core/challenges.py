"""Challenge and participation state machines."""

from __future__ import annotations

import datetime as dt
from typing import Any, Callable, Iterable

import pendulum
import structlog

from ..errors import InvalidTransitionError, NotEligibleError, ValidationError
from ..schemas import (
    Challenge,
    ChallengeParticipation,
    ChallengeStatus,
    EligibilityType,
    Employee,
    ParticipationStatus,
    Submission,
)

_ADMIN_FORWARD: dict[ChallengeStatus, ChallengeStatus] = {
    ChallengeStatus.DRAFT: ChallengeStatus.SCHEDULED,
    ChallengeStatus.SCHEDULED: ChallengeStatus.ACTIVE,
    ChallengeStatus.ACTIVE: ChallengeStatus.EVALUATING,
    ChallengeStatus.EVALUATING: ChallengeStatus.COMPLETED,
}

_ACCEPTING = (ChallengeStatus.SCHEDULED, ChallengeStatus.ACTIVE)
_SUBMITTING = (ChallengeStatus.ACTIVE, ChallengeStatus.EVALUATING)


def is_eligible(challenge: Challenge, employee: Employee) -> bool:
    eligibility = challenge.eligibility
    if eligibility.type is EligibilityType.ALL:
        return True
    if eligibility.type is EligibilityType.DEPARTMENT:
        return employee.department in eligibility.entity_ids
    if eligibility.type is EligibilityType.ROLE:
        return employee.role in eligibility.entity_ids
    return employee.id in eligibility.entity_ids


class ChallengeLifecycleManager:
    """Drive challenges and participations through their lifecycles.

    Every operation returns a new record and never mutates its inputs.
    """

    def __init__(self, *, now_provider: Callable[[], dt.datetime] | None = None) -> None:
        self._now_provider = now_provider or pendulum.now
        self._logger = structlog.get_logger(__name__)

    # -- challenge status -------------------------------------------------

    def advance(self, challenge: Challenge, *, today: dt.date | None = None) -> Challenge:
        """Apply the time-driven moves scheduled -> active -> evaluating."""
        day = today or self._today()
        status = challenge.status
        if status is ChallengeStatus.SCHEDULED and day >= challenge.period_start:
            status = ChallengeStatus.ACTIVE
        if status is ChallengeStatus.ACTIVE and day > challenge.period_end:
            status = ChallengeStatus.EVALUATING
        if status is challenge.status:
            return challenge
        return challenge.model_copy(update={"status": status})

    def transition(
        self,
        challenge: Challenge,
        target: ChallengeStatus,
        *,
        participations: Iterable[ChallengeParticipation] = (),
        override: bool = False,
    ) -> Challenge:
        """Administrative status change."""
        current = challenge.status
        if target is current:
            raise InvalidTransitionError(current, target, "challenge already in this status")

        if override:
            self._logger.warning(
                "challenge.status_override",
                challenge_id=challenge.id,
                from_status=current.value,
                to_status=target.value,
            )
            return challenge.model_copy(update={"status": target})

        if target is ChallengeStatus.ARCHIVED:
            return challenge.model_copy(update={"status": target})

        if _ADMIN_FORWARD.get(current) is not target:
            raise InvalidTransitionError(current, target)

        if target is ChallengeStatus.COMPLETED:
            pending = [
                p.employee_id
                for p in participations
                if p.challenge_id == challenge.id and p.status is ParticipationStatus.SUBMITTED
            ]
            if pending:
                raise InvalidTransitionError(
                    current,
                    target,
                    f"{len(pending)} submission(s) still awaiting evaluation",
                )
        return challenge.model_copy(update={"status": target})

    @staticmethod
    def ensure_deletable(challenge: Challenge) -> None:
        if challenge.status in (ChallengeStatus.ACTIVE, ChallengeStatus.EVALUATING):
            raise InvalidTransitionError(
                challenge.status, "deleted", "active or evaluating challenges cannot be deleted"
            )

    # -- participation status ---------------------------------------------

    def participation_for(
        self,
        challenge: Challenge,
        employee: Employee,
        existing: ChallengeParticipation | None = None,
    ) -> ChallengeParticipation:
        """Return the employee's participation, creating the implicit pending row."""
        self._require_eligible(challenge, employee)
        if existing is not None:
            return existing
        return ChallengeParticipation(challenge_id=challenge.id, employee_id=employee.id)

    def accept(
        self,
        challenge: Challenge,
        employee: Employee,
        existing: ChallengeParticipation | None = None,
    ) -> ChallengeParticipation:
        participation = self.participation_for(challenge, employee, existing)
        target = ParticipationStatus.ACCEPTED
        if not challenge.is_optional:
            raise InvalidTransitionError(
                participation.status, target, "mandatory challenges need no acceptance"
            )
        if participation.status is not ParticipationStatus.PENDING:
            raise InvalidTransitionError(participation.status, target)
        if challenge.status not in _ACCEPTING:
            raise InvalidTransitionError(
                participation.status, target, f"challenge is {challenge.status.value}"
            )
        return participation.model_copy(
            update={"status": target, "accepted_at": self._now_provider()}
        )

    def submit(
        self,
        challenge: Challenge,
        employee: Employee,
        submission: Submission,
        existing: ChallengeParticipation | None = None,
    ) -> ChallengeParticipation:
        participation = self.participation_for(challenge, employee, existing)
        target = ParticipationStatus.SUBMITTED
        if not (submission.text or "").strip() and not submission.file_url:
            raise ValidationError("Submission needs a text or a file")

        ready = {ParticipationStatus.ACCEPTED, ParticipationStatus.REJECTED}
        if not challenge.is_optional:
            ready.add(ParticipationStatus.PENDING)
        if participation.status not in ready:
            raise InvalidTransitionError(participation.status, target)
        if challenge.status not in _SUBMITTING:
            raise InvalidTransitionError(
                participation.status, target, f"challenge is {challenge.status.value}"
            )

        update: dict[str, Any] = {
            "status": target,
            "submission": submission,
            "submitted_at": self._now_provider(),
            "score": None,
        }
        if participation.status is ParticipationStatus.REJECTED:
            update.update(evaluated_at=None, evaluator_id=None)
        return participation.model_copy(update=update)

    def evaluate(
        self,
        challenge: Challenge,
        participation: ChallengeParticipation,
        decision: ParticipationStatus,
        *,
        evaluator_id: str,
        score: float | None = None,
        feedback: str | None = None,
    ) -> ChallengeParticipation:
        """Approve (with a score) or reject (with feedback) a submission."""
        if participation.challenge_id != challenge.id:
            raise ValidationError("Participation belongs to another challenge")
        if decision not in (ParticipationStatus.APPROVED, ParticipationStatus.REJECTED):
            raise InvalidTransitionError(participation.status, decision)
        if participation.status is not ParticipationStatus.SUBMITTED:
            raise InvalidTransitionError(participation.status, decision)

        if decision is ParticipationStatus.APPROVED:
            if score is None:
                raise ValidationError("Approving a submission requires a score")
            if score < 0:
                raise ValidationError(f"Score cannot be negative: {score}")
        elif not (feedback or "").strip():
            raise ValidationError("Rejecting a submission requires feedback")

        return participation.model_copy(
            update={
                "status": decision,
                "score": score if decision is ParticipationStatus.APPROVED else None,
                "feedback": feedback,
                "evaluator_id": evaluator_id,
                "evaluated_at": self._now_provider(),
            }
        )

    def _require_eligible(self, challenge: Challenge, employee: Employee) -> None:
        if not is_eligible(challenge, employee):
            raise NotEligibleError(challenge.id, employee.id)

    def _today(self) -> dt.date:
        now = self._now_provider()
        return dt.date(now.year, now.month, now.day)
