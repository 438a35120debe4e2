"""Typed failures raised by the incentive engine."""

from __future__ import annotations

from typing import Any, Iterable


class IncentiveError(Exception):
    """Base class for recoverable engine failures."""


class ValidationError(IncentiveError, ValueError):
    """Raised when a record or argument breaks a data invariant."""


class IncompleteDataError(IncentiveError):
    """Raised by strict scoring when required task-days have no evaluation."""

    def __init__(self, employee_id: str, missing: Iterable[tuple[str, Any]]):
        self.employee_id = employee_id
        self.missing = sorted(missing, key=lambda item: (str(item[1]), item[0]))
        super().__init__(
            f"Employee {employee_id!r} has {len(self.missing)} task-day(s) without evaluation"
        )


class NotEligibleError(IncentiveError):
    """Raised when an employee outside a challenge's eligibility acts on it."""

    def __init__(self, challenge_id: str, employee_id: str):
        self.challenge_id = challenge_id
        self.employee_id = employee_id
        super().__init__(
            f"Employee {employee_id!r} is not eligible for challenge {challenge_id!r}"
        )


class InvalidTransitionError(IncentiveError):
    """Raised for a state-machine move that is not allowed."""

    def __init__(self, current: Any, target: Any, reason: str | None = None):
        self.current = current
        self.target = target
        self.reason = reason
        message = f"Cannot move from {_label(current)!r} to {_label(target)!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AwardNotFoundError(IncentiveError):
    """Raised when an award id no longer exists at resolution time."""

    def __init__(self, award_id: str):
        self.award_id = award_id
        super().__init__(f"Award {award_id!r} not found")


class PeriodOpenError(IncentiveError):
    """Raised when closing a period that has not ended yet."""

    def __init__(self, period: str, today: Any):
        self.period = period
        self.today = today
        super().__init__(f"Period {period!r} is still open on {today}")


class PermissionDeniedError(IncentiveError):
    """Raised when the acting user may not perform an operation."""


def _label(value: Any) -> str:
    return str(getattr(value, "value", value))


__all__ = [
    "IncentiveError",
    "ValidationError",
    "IncompleteDataError",
    "NotEligibleError",
    "InvalidTransitionError",
    "AwardNotFoundError",
    "PermissionDeniedError",
    "PeriodOpenError",
]
