from __future__ import annotations

import datetime as dt
from typing import Any

import pytest

from hrincentives.core import (
    Period,
    ScoringCalculator,
    edit_evaluation,
    expected_task_days,
    finalize_evaluation,
)
from hrincentives.errors import IncompleteDataError, ValidationError
from hrincentives.schemas import Employee, Evaluation, Task, evaluation_key

JULY = Period.month(2024, 7)


def build_evaluation(day: int, score: int, **kwargs: Any) -> Evaluation:
    defaults: dict[str, Any] = {
        "employee_id": "E-1",
        "task_id": "T-1",
        "evaluation_date": dt.date(2024, 7, day),
        "score": score,
        "evaluator_id": "A-1",
    }
    defaults.update(kwargs)
    if score == 0 and "justification" not in defaults:
        defaults["justification"] = "Tarefa não realizada"
    defaults.setdefault(
        "id", evaluation_key(defaults["employee_id"], defaults["task_id"], defaults["evaluation_date"])
    )
    return Evaluation(**defaults)


def test_score_sums_finalized_evaluations_and_counts_zeros():
    evaluations = [
        build_evaluation(1, 10),
        build_evaluation(2, 10),
        build_evaluation(3, 0),
        build_evaluation(4, 10),
    ]

    summary = ScoringCalculator().summarize("E-1", JULY, evaluations)

    assert summary.score == 30
    assert summary.zeros == 1
    assert summary.evaluated == 4
    assert summary.period == "2024-07"


def test_drafts_never_contribute():
    evaluations = [
        build_evaluation(1, 10),
        build_evaluation(2, 10, is_draft=True),
        build_evaluation(3, 0, is_draft=True, justification=None),
    ]

    summary = ScoringCalculator().summarize("E-1", JULY, evaluations)

    assert summary.score == 10
    assert summary.zeros == 0
    assert summary.drafts == 2


def test_score_is_ten_per_positive_evaluation():
    scores = [10, 0, 10, 10, 0, 10, 0]
    evaluations = [build_evaluation(day, score) for day, score in enumerate(scores, start=1)]

    summary = ScoringCalculator().summarize("E-1", JULY, evaluations)

    assert summary.score == 10 * scores.count(10)
    assert summary.zeros == scores.count(0)


def test_other_employees_and_out_of_range_records_are_ignored():
    evaluations = [
        build_evaluation(1, 10),
        build_evaluation(2, 10, employee_id="E-2"),
        build_evaluation(1, 10, evaluation_date=dt.date(2024, 6, 30)),
    ]

    summary = ScoringCalculator().summarize("E-1", JULY, evaluations)

    assert summary.score == 10
    assert summary.evaluated == 1


def test_zero_without_justification_is_rejected():
    evaluations = [build_evaluation(1, 0, justification="  ")]

    with pytest.raises(ValidationError):
        ScoringCalculator().summarize("E-1", JULY, evaluations)


def test_strict_mode_reports_missing_task_days():
    period = Period.between(dt.date(2024, 7, 1), dt.date(2024, 7, 3))
    required = [("T-1", dt.date(2024, 7, d)) for d in (1, 2, 3)]
    evaluations = [
        build_evaluation(1, 10),
        build_evaluation(2, 10, is_draft=True),
    ]
    calculator = ScoringCalculator(strict=True)

    with pytest.raises(IncompleteDataError) as exc:
        calculator.summarize("E-1", period, evaluations, required=required)

    assert exc.value.employee_id == "E-1"
    assert exc.value.missing == [("T-1", dt.date(2024, 7, 2)), ("T-1", dt.date(2024, 7, 3))]


def test_lenient_mode_omits_missing_days():
    period = Period.between(dt.date(2024, 7, 1), dt.date(2024, 7, 3))
    required = [("T-1", dt.date(2024, 7, d)) for d in (1, 2, 3)]

    summary = ScoringCalculator().summarize(
        "E-1", period, [build_evaluation(1, 10)], required=required
    )

    assert summary.score == 10
    assert len(summary.missing) == 2
    assert not summary.complete


def test_strict_flag_per_call_overrides_default():
    period = Period.between(dt.date(2024, 7, 1), dt.date(2024, 7, 1))
    required = [("T-1", dt.date(2024, 7, 1))]

    with pytest.raises(IncompleteDataError):
        ScoringCalculator().summarize("E-1", period, [], required=required, strict=True)


def test_expected_task_days_follow_periodicity_and_assignment():
    employee = Employee(id="E-1", name="Alice", department="RH", role="Recrutadora")
    tasks = [
        Task(id="daily", title="Daily"),
        Task(id="fridays", title="Fridays", periodicity="specific_days", specific_days=[5]),
        Task(id="once", title="Once", periodicity="specific_dates", specific_dates=[dt.date(2024, 7, 2)]),
        Task(id="sales", title="Sales only", assigned_to="department", assigned_entity_id="Vendas"),
        Task(id="mine", title="Mine", assigned_to="individual", assigned_entity_id="E-1"),
    ]
    # 2024-07-05 is a Friday
    period = Period.between(dt.date(2024, 7, 1), dt.date(2024, 7, 5))

    required = expected_task_days(employee, tasks, period)

    assert required.count(("fridays", dt.date(2024, 7, 5))) == 1
    assert ("fridays", dt.date(2024, 7, 4)) not in required
    assert ("once", dt.date(2024, 7, 2)) in required
    assert not any(task_id == "sales" for task_id, _ in required)
    assert sum(1 for task_id, _ in required if task_id == "daily") == 5
    assert sum(1 for task_id, _ in required if task_id == "mine") == 5


def test_expected_task_days_skip_inactive_and_pre_admission():
    tasks = [Task(id="daily", title="Daily")]
    inactive = Employee(id="E-1", name="A", department="RH", is_active=False)
    newcomer = Employee(id="E-2", name="B", department="RH", admission_date=dt.date(2024, 7, 30))

    assert expected_task_days(inactive, tasks, JULY) == []
    assert expected_task_days(newcomer, tasks, JULY) == [
        ("daily", dt.date(2024, 7, 30)),
        ("daily", dt.date(2024, 7, 31)),
    ]


def test_finalize_requires_justification_for_zero():
    draft = build_evaluation(1, 0, is_draft=True, justification=None)

    with pytest.raises(ValidationError):
        finalize_evaluation(draft)
    assert draft.is_draft is True


def test_edit_stamps_last_edited_and_keeps_original():
    original = build_evaluation(1, 10)
    stamp = dt.datetime(2024, 8, 1, 9, 30)

    edited = edit_evaluation(
        original,
        {"score": 0, "justification": "Entrega fora do prazo"},
        now_provider=lambda: stamp,
    )

    assert edited.score == 0
    assert edited.last_edited == stamp
    assert original.score == 10
    assert original.last_edited is None


def test_edit_rejects_identity_changes_and_bad_scores():
    original = build_evaluation(1, 10)

    with pytest.raises(ValidationError):
        edit_evaluation(original, {"task_id": "T-2"})
    with pytest.raises(ValidationError):
        edit_evaluation(original, {"score": 5})
    with pytest.raises(ValidationError):
        edit_evaluation(original, {"score": 0, "justification": ""})
