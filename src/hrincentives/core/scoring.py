"""Aggregate an employee's daily evaluations into a period score."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

import pendulum

from ..errors import IncompleteDataError, ValidationError
from ..schemas import (
    AssignmentTarget,
    ChallengeParticipation,
    Employee,
    Evaluation,
    ParticipationStatus,
    Periodicity,
    Task,
)
from .periods import Period

TaskDay = tuple[str, dt.date]


@dataclass(slots=True)
class ScoreSummary:
    """Score and zero count of one employee over one period."""

    employee_id: str
    period: str
    score: int
    zeros: int
    evaluated: int
    drafts: int = 0
    missing: list[TaskDay] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing


class ScoringCalculator:
    """Pure scoring over already-fetched evaluations.

    Drafts never count. In strict mode every required task-day needs a
    finalized evaluation, otherwise :class:`IncompleteDataError` is raised.
    """

    def __init__(self, *, strict: bool | None = False) -> None:
        self._strict = bool(strict)

    def summarize(
        self,
        employee_id: str,
        period: Period,
        evaluations: Iterable[Evaluation],
        *,
        required: Iterable[TaskDay] | None = None,
        strict: bool | None = None,
    ) -> ScoreSummary:
        strict_mode = self._strict if strict is None else strict
        score = 0
        zeros = 0
        finalized = 0
        drafts = 0
        covered: set[TaskDay] = set()

        for evaluation in evaluations:
            if evaluation.employee_id != employee_id:
                continue
            if not period.contains(evaluation.evaluation_date):
                continue
            if evaluation.is_draft:
                drafts += 1
                continue
            ensure_justified(evaluation)
            finalized += 1
            score += evaluation.score
            if evaluation.is_zero:
                zeros += 1
            covered.add((evaluation.task_id, evaluation.evaluation_date))

        missing = sorted(
            (item for item in set(required or ()) if item not in covered),
            key=lambda item: (item[1], item[0]),
        )
        if strict_mode and missing:
            raise IncompleteDataError(employee_id, missing)

        return ScoreSummary(
            employee_id=employee_id,
            period=period.key,
            score=score,
            zeros=zeros,
            evaluated=finalized,
            drafts=drafts,
            missing=missing,
        )


def ensure_justified(evaluation: Evaluation) -> None:
    """A finalized zero must carry a justification."""
    if evaluation.is_zero and not (evaluation.justification or "").strip():
        raise ValidationError(
            f"Evaluation {evaluation.id!r} scored 0 without justification"
        )


def finalize_evaluation(evaluation: Evaluation) -> Evaluation:
    """Return the finalized copy of a draft evaluation."""
    finalized = evaluation.model_copy(update={"is_draft": False})
    ensure_justified(finalized)
    return finalized


def edit_evaluation(
    evaluation: Evaluation,
    changes: dict[str, Any],
    *,
    now_provider: Callable[[], dt.datetime] | None = None,
) -> Evaluation:
    """Supersede an evaluation with edited fields.

    Identity fields cannot change. Editing a finalized record stamps
    ``last_edited``; the input record is left untouched.
    """
    frozen_fields = {"id", "employee_id", "task_id", "evaluation_date"}
    blocked = frozen_fields.intersection(changes)
    if blocked:
        raise ValidationError(f"Cannot edit identity fields: {sorted(blocked)}")

    payload = evaluation.model_dump()
    payload.update(changes)
    if not evaluation.is_draft:
        now = (now_provider or pendulum.now)()
        payload["last_edited"] = now
    try:
        edited = Evaluation.model_validate(payload)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    if not edited.is_draft:
        ensure_justified(edited)
    return edited


def task_applies(task: Task, employee: Employee, day: dt.date) -> bool:
    """Whether ``task`` must be evaluated for ``employee`` on ``day``."""
    if task.periodicity is Periodicity.DAILY:
        scheduled = True
    elif task.periodicity is Periodicity.SPECIFIC_DAYS:
        # 0 = Sunday; date.weekday() has Monday = 0
        scheduled = (day.weekday() + 1) % 7 in task.specific_days
    else:
        scheduled = day in task.specific_dates
    if not scheduled:
        return False

    if task.assigned_to is None:
        return True
    if task.assigned_to is AssignmentTarget.DEPARTMENT:
        return task.assigned_entity_id == employee.department
    if task.assigned_to is AssignmentTarget.ROLE:
        return task.assigned_entity_id == employee.role
    return task.assigned_entity_id == employee.id


def expected_task_days(
    employee: Employee,
    tasks: Iterable[Task],
    period: Period,
    *,
    until: dt.date | None = None,
) -> list[TaskDay]:
    """Every (task, day) pair the employee should have been evaluated on."""
    if not employee.is_active:
        return []
    task_list = list(tasks)
    required: list[TaskDay] = []
    for day in period.days():
        if until is not None and day > until:
            break
        if employee.admission_date and day < employee.admission_date:
            continue
        required.extend(
            (task.id, day) for task in task_list if task_applies(task, employee, day)
        )
    return required


def challenge_points(participations: Iterable[ChallengeParticipation]) -> int:
    """Points earned from approved challenge participations."""
    return int(
        sum(
            participation.score or 0
            for participation in participations
            if participation.status is ParticipationStatus.APPROVED
        )
    )
