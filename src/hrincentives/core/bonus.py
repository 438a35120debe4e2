"""Monthly bonus eligibility."""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import ValidationError
from ..schemas import BonusConfig


@dataclass(slots=True)
class BonusDecision:
    employee_id: str
    period: str
    zeros: int
    zero_limit: int
    eligible: bool
    amount: float


class BonusEligibilityEvaluator:
    """Apply the organization's zero limit; the limit itself is still eligible."""

    def __init__(self, *, config: BonusConfig | None = None) -> None:
        self._config = config or BonusConfig()

    def evaluate(
        self,
        employee_id: str,
        period: str,
        zeros: int,
        *,
        config: BonusConfig | None = None,
    ) -> BonusDecision:
        rule = config or self._config
        if zeros < 0:
            raise ValidationError(f"Zero count cannot be negative: {zeros}")
        eligible = zeros <= rule.zero_limit
        return BonusDecision(
            employee_id=employee_id,
            period=period,
            zeros=zeros,
            zero_limit=rule.zero_limit,
            eligible=eligible,
            amount=float(rule.base_value) if eligible else 0.0,
        )
