"""Leaderboard construction with deterministic tie-breaking."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence

from ..schemas import Employee, RankingEntry, RankingSettings, TieBreaker, Trend
from .periods import Period


@dataclass
class RankingConfig:
    """Configuration for ranking construction."""

    probation_days: int = 90


@dataclass(frozen=True, slots=True)
class RankingCandidate:
    employee_id: str
    score: int
    zeros: int
    admission_date: dt.date | None = None
    employee_name: str | None = None
    department: str | None = None


class RankingBuilder:
    """Order candidates by score and assign contiguous ranks 1..N.

    Equal scores are resolved by the organization's tie-breaker. Entries
    that stay fully tied keep their input order (Python's sort is stable),
    so no two entries ever share a rank.
    """

    def __init__(self, *, config: RankingConfig | None = None) -> None:
        self._config = config or RankingConfig()

    def build(
        self,
        candidates: Iterable[RankingCandidate],
        settings: RankingSettings,
        *,
        manual_order: Sequence[str] | None = None,
        previous_ranks: Mapping[str, int] | None = None,
    ) -> list[RankingEntry]:
        ordered = sorted(
            candidates,
            key=self._sort_key(settings.tie_breaker, manual_order or ()),
        )
        prior = previous_ranks or {}
        return [
            RankingEntry(
                rank=position,
                employee_id=candidate.employee_id,
                score=candidate.score,
                zeros=candidate.zeros,
                trend=compute_trend(position, prior.get(candidate.employee_id)),
                employee_name=candidate.employee_name,
                department=candidate.department,
            )
            for position, candidate in enumerate(ordered, start=1)
        ]

    def in_probation(self, employee: Employee, period: Period) -> bool:
        if employee.admission_date is None:
            return False
        cutoff = employee.admission_date + dt.timedelta(days=self._config.probation_days)
        return cutoff > period.end

    def filter_probation(
        self,
        employees: Iterable[Employee],
        settings: RankingSettings,
        period: Period,
    ) -> list[Employee]:
        """Drop probationary employees unless the organization includes them."""
        if settings.include_probation:
            return list(employees)
        return [employee for employee in employees if not self.in_probation(employee, period)]

    @staticmethod
    def _sort_key(
        tie_breaker: TieBreaker,
        manual_order: Sequence[str],
    ) -> Callable[[RankingCandidate], tuple[Any, ...]]:
        if tie_breaker is TieBreaker.ZEROS:
            return lambda c: (-c.score, c.zeros)
        if tie_breaker is TieBreaker.ADMISSION_DATE:
            return lambda c: (
                -c.score,
                c.admission_date is None,
                c.admission_date or dt.date.max,
            )
        positions: dict[str, int] = {}
        for employee_id in manual_order:
            positions.setdefault(employee_id, len(positions))
        unlisted = len(positions)
        return lambda c: (-c.score, positions.get(c.employee_id, unlisted))


def compute_trend(current_rank: int, previous_rank: int | None) -> Trend:
    if previous_rank is None or previous_rank == current_rank:
        return Trend.STABLE
    return Trend.UP if current_rank < previous_rank else Trend.DOWN


def rank_lookup(entries: Iterable[RankingEntry]) -> dict[str, int]:
    return {entry.employee_id: entry.rank for entry in entries}
