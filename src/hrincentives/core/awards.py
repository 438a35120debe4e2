"""Award matching, payout resolution and history entry creation."""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from ..errors import AwardNotFoundError, ValidationError
from ..schemas import (
    RECURRING_PERIOD,
    UNDEFINED_PRIZE,
    Award,
    AwardHistoryEntry,
    AwardStatus,
    AwardWinner,
    RankingEntry,
    history_key,
)
from .periods import Period, parse_period

ALL_DEPARTMENTS = "all"


def award_matches_period(award: Award, period: Period) -> bool:
    if award.period != RECURRING_PERIOD and award.period != period.key:
        return False
    if award.specific_month is not None and not period.contains(award.specific_month):
        return False
    return True


def department_eligible(award: Award, department: str | None) -> bool:
    if ALL_DEPARTMENTS in award.eligible_departments:
        return True
    return department is not None and department in award.eligible_departments


def resolve_prize(award: Award, position: int) -> str:
    """Payout for a winning position.

    Fallback order: per-position monetary, per-position non-monetary,
    award monetary, award non-monetary, then the undefined placeholder.
    """
    slot = (award.values_per_position or {}).get(position)
    if slot is not None and slot.monetary:
        return format_money(slot.monetary)
    if slot is not None and slot.non_monetary:
        return slot.non_monetary
    if award.monetary_value:
        return format_money(award.monetary_value)
    if award.non_monetary_value:
        return award.non_monetary_value
    return UNDEFINED_PRIZE


def format_money(value: float) -> str:
    return f"R$ {value:.2f}"


class AwardResolver:
    """Turn a period's ranking into award history entries."""

    def is_candidate(
        self,
        award: Award,
        period: Period | str,
        ranking: Sequence[RankingEntry] = (),
    ) -> bool:
        """Whether an active ``award`` applies to the period and to a ranked department."""
        if award.status is not AwardStatus.ACTIVE:
            return False
        if not award_matches_period(award, parse_period(period)):
            return False
        return any(department_eligible(award, entry.department) for entry in ranking)

    def candidate_awards(
        self,
        awards: Iterable[Award],
        period: Period | str,
        ranking: Sequence[RankingEntry] = (),
    ) -> list[Award]:
        resolved_period = parse_period(period)
        return [award for award in awards if self.is_candidate(award, resolved_period, ranking)]

    def resolve(
        self,
        award: Award,
        ranking: Sequence[RankingEntry],
        period: Period | str,
        *,
        notes: str | None = None,
        delivery_photo_url: str | None = None,
    ) -> AwardHistoryEntry:
        """Pick the top eligible employees; positions restart at 1 within the eligible subset."""
        period_key = parse_period(period).key
        eligible = [
            entry
            for entry in sorted(ranking, key=lambda item: item.rank)
            if department_eligible(award, entry.department)
        ]
        winners = [
            AwardWinner(
                rank=position,
                employee_id=entry.employee_id,
                employee_name=entry.employee_name or entry.employee_id,
                prize=resolve_prize(award, position),
            )
            for position, entry in enumerate(eligible[: award.winner_count], start=1)
        ]
        return AwardHistoryEntry(
            id=history_key(award.id, period_key),
            award_id=award.id,
            period=period_key,
            award_title=award.title,
            winners=winners,
            notes=notes,
            delivery_photo_url=delivery_photo_url,
        )

    def resolve_by_id(
        self,
        award_id: str,
        lookup: Callable[[str], Award | None],
        ranking: Sequence[RankingEntry],
        period: Period | str,
        **extras: str | None,
    ) -> AwardHistoryEntry:
        award = lookup(award_id)
        if award is None:
            raise AwardNotFoundError(award_id)
        if not self.is_candidate(award, period, ranking):
            raise ValidationError(
                f"Award {award_id!r} ({award.status.value}, period {award.period!r}) "
                f"does not apply to {parse_period(period).key} rankings"
            )
        return self.resolve(award, ranking, period, **extras)

    def resolve_all(
        self,
        awards: Iterable[Award],
        ranking: Sequence[RankingEntry],
        period: Period | str,
    ) -> list[AwardHistoryEntry]:
        return [
            self.resolve(award, ranking, period)
            for award in self.candidate_awards(awards, period, ranking)
        ]


def merge_history(
    history: Iterable[AwardHistoryEntry],
    entry: AwardHistoryEntry,
) -> list[AwardHistoryEntry]:
    """Return history with ``entry`` replacing any earlier resolution of the same key."""
    kept = [item for item in history if item.key != entry.key]
    kept.append(entry)
    return kept
