from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import Field, model_validator

from .base import DocumentModel

RECURRING_PERIOD = "recorrente"
UNDEFINED_PRIZE = "Prêmio Indefinido"


class AwardStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


class PositionValue(DocumentModel):
    """Payout for a single winning position."""

    monetary: float | None = None
    non_monetary: str | None = None


class Award(DocumentModel):
    """Award definition.

    Recurring awards use ``period="recorrente"``; the others name a
    ``specific_month`` and carry its ``YYYY-MM`` key as ``period``.
    ``eligible_departments`` containing ``"all"`` matches every department.
    """

    id: str
    title: str
    description: str = ""
    monetary_value: float | None = None
    non_monetary_value: str | None = None
    period: str = RECURRING_PERIOD
    winner_count: int = Field(default=1, ge=1)
    eligible_departments: list[str] = Field(default_factory=lambda: ["all"])
    status: AwardStatus = AwardStatus.DRAFT
    is_recurring: bool = True
    specific_month: dt.date | None = None
    values_per_position: dict[int, PositionValue] | None = None

    @model_validator(mode="after")
    def _check_period(self) -> "Award":
        if self.is_recurring:
            if self.period != RECURRING_PERIOD or self.specific_month is not None:
                raise ValueError("recurring awards use period 'recorrente' and no specificMonth")
            return self
        if self.specific_month is None:
            raise ValueError("non-recurring awards need a specificMonth")
        month_key = self.specific_month.strftime("%Y-%m")
        if self.period != month_key:
            raise ValueError(f"period must be {month_key!r} for specificMonth {self.specific_month}")
        return self


class AwardWinner(DocumentModel):
    rank: int
    employee_name: str
    prize: str
    employee_id: str | None = None


class AwardHistoryEntry(DocumentModel):
    """Immutable record of one award resolution for one period."""

    id: str
    award_id: str
    period: str
    award_title: str
    winners: list[AwardWinner] = Field(default_factory=list)
    notes: str | None = None
    delivery_photo_url: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return self.award_id, self.period


def history_key(award_id: str, period: str) -> str:
    return f"{award_id}-{period}"
