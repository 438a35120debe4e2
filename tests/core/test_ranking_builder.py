from __future__ import annotations

import datetime as dt

import pytest

from hrincentives.core import Period, RankingBuilder, RankingCandidate, RankingConfig
from hrincentives.schemas import Employee, RankingSettings, TieBreaker, Trend


def build_candidate(employee_id: str, score: int, zeros: int = 0, **kwargs) -> RankingCandidate:
    return RankingCandidate(employee_id=employee_id, score=score, zeros=zeros, **kwargs)


def ids(entries) -> list[str]:
    return [entry.employee_id for entry in entries]


def test_fewer_zeros_wins_a_score_tie():
    candidates = [build_candidate("A", 950, zeros=1), build_candidate("B", 950, zeros=0)]

    entries = RankingBuilder().build(candidates, RankingSettings())

    assert ids(entries) == ["B", "A"]
    assert [entry.rank for entry in entries] == [1, 2]


def test_ranks_are_contiguous_and_ordered_by_score():
    candidates = [
        build_candidate("A", 100),
        build_candidate("B", 300),
        build_candidate("C", 200),
        build_candidate("D", 200),
    ]

    entries = RankingBuilder().build(candidates, RankingSettings())

    assert [entry.rank for entry in entries] == [1, 2, 3, 4]
    scores = [entry.score for entry in entries]
    assert scores == sorted(scores, reverse=True)
    # full ties keep input order
    assert ids(entries) == ["B", "C", "D", "A"]


def test_earlier_admission_wins_and_missing_date_sorts_last():
    settings = RankingSettings(tie_breaker=TieBreaker.ADMISSION_DATE)
    candidates = [
        build_candidate("late", 500, admission_date=dt.date(2022, 3, 1)),
        build_candidate("unknown", 500),
        build_candidate("early", 500, admission_date=dt.date(2019, 5, 2)),
    ]

    entries = RankingBuilder().build(candidates, settings)

    assert ids(entries) == ["early", "late", "unknown"]


def test_manual_order_resolves_ties_only():
    settings = RankingSettings(tie_breaker=TieBreaker.MANUAL)
    candidates = [
        build_candidate("A", 400),
        build_candidate("B", 400),
        build_candidate("C", 400),
        build_candidate("D", 900),
    ]

    entries = RankingBuilder().build(candidates, settings, manual_order=["C", "A"])

    assert ids(entries) == ["D", "C", "A", "B"]


def test_trend_compares_with_previous_ranks():
    candidates = [build_candidate("A", 300), build_candidate("B", 200), build_candidate("C", 100)]

    entries = RankingBuilder().build(
        candidates,
        RankingSettings(),
        previous_ranks={"A": 2, "B": 1},
    )

    assert [entry.trend for entry in entries] == [Trend.UP, Trend.DOWN, Trend.STABLE]


def test_probation_filter_uses_configured_days():
    period = Period.month(2024, 7)
    veteran = Employee(id="V", name="V", department="RH", admission_date=dt.date(2020, 1, 1))
    newcomer = Employee(id="N", name="N", department="RH", admission_date=dt.date(2024, 6, 1))
    undated = Employee(id="U", name="U", department="RH")
    builder = RankingBuilder(config=RankingConfig(probation_days=30))

    kept = builder.filter_probation([veteran, newcomer, undated], RankingSettings(), period)

    assert [employee.id for employee in kept] == ["V", "N", "U"]
    strict_builder = RankingBuilder()
    assert [e.id for e in strict_builder.filter_probation([veteran, newcomer, undated], RankingSettings(), period)] == ["V", "U"]
    included = RankingSettings(include_probation=True)
    assert len(strict_builder.filter_probation([veteran, newcomer], included, period)) == 2


@pytest.mark.parametrize("tie_breaker", list(TieBreaker))
def test_empty_input_gives_empty_ranking(tie_breaker: TieBreaker):
    assert RankingBuilder().build([], RankingSettings(tie_breaker=tie_breaker)) == []


def test_manual_order_first_occurrence_wins():
    settings = RankingSettings(tie_breaker=TieBreaker.MANUAL)
    candidates = [build_candidate("B", 400), build_candidate("A", 400)]

    entries = RankingBuilder().build(candidates, settings, manual_order=["A", "B", "A"])

    assert ids(entries) == ["A", "B"]
