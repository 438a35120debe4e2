from __future__ import annotations

import pytest

from hrincentives.core import BonusEligibilityEvaluator
from hrincentives.errors import ValidationError
from hrincentives.schemas import BonusConfig


def test_zero_limit_is_inclusive():
    evaluator = BonusEligibilityEvaluator(config=BonusConfig(base_value=150, zero_limit=2))

    at_limit = evaluator.evaluate("E-1", "2024-07", 2)
    beyond = evaluator.evaluate("E-1", "2024-07", 3)

    assert at_limit.eligible is True
    assert at_limit.amount == pytest.approx(150.0)
    assert beyond.eligible is False
    assert beyond.amount == 0.0


def test_defaults_follow_general_settings():
    decision = BonusEligibilityEvaluator().evaluate("E-1", "2024-07", 0)

    assert decision.zero_limit == 3
    assert decision.amount == pytest.approx(100.0)


def test_per_call_rule_overrides_default():
    evaluator = BonusEligibilityEvaluator()

    decision = evaluator.evaluate("E-1", "2024-07", 1, config=BonusConfig(base_value=80, zero_limit=0))

    assert decision.eligible is False
    assert decision.zero_limit == 0


def test_negative_zero_count_is_invalid():
    with pytest.raises(ValidationError):
        BonusEligibilityEvaluator().evaluate("E-1", "2024-07", -1)
