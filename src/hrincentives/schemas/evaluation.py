from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Literal

from pydantic import AliasChoices, Field

from .base import DocumentModel


class Evaluation(DocumentModel):
    """Daily evaluation of one task for one employee."""

    id: str
    employee_id: str
    task_id: str
    evaluation_date: dt.date = Field(
        validation_alias=AliasChoices("date", "evaluationDate", "evaluation_date"),
        serialization_alias="date",
    )
    score: Literal[0, 10]
    justification: str | None = None
    evidence_url: str | None = None
    evaluator_id: str
    is_draft: bool = False
    last_edited: dt.datetime | None = None

    @property
    def is_zero(self) -> bool:
        return self.score == 0


def evaluation_key(employee_id: str, task_id: str, day: dt.date | str) -> str:
    """Deterministic evaluation id, one per employee, task and day."""
    day_text = day.isoformat() if isinstance(day, dt.date) else str(day)
    return f"{employee_id}-{task_id}-{day_text}"


class Periodicity(str, Enum):
    DAILY = "daily"
    SPECIFIC_DAYS = "specific_days"
    SPECIFIC_DATES = "specific_dates"


class AssignmentTarget(str, Enum):
    ROLE = "role"
    DEPARTMENT = "department"
    INDIVIDUAL = "individual"


class Task(DocumentModel):
    """Evaluation criterion and who it applies to.

    No ``assigned_to`` means the task applies to the whole organization.
    ``specific_days`` holds weekday numbers with 0 = Sunday.
    """

    id: str
    title: str
    description: str = ""
    criteria: str = ""
    category: str | None = None
    priority: Literal["low", "medium", "high"] | None = None
    periodicity: Periodicity = Periodicity.DAILY
    specific_days: list[int] = Field(default_factory=list)
    specific_dates: list[dt.date] = Field(default_factory=list)
    assigned_to: AssignmentTarget | None = None
    assigned_entity_id: str | None = None
