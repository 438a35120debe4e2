from __future__ import annotations

import pytest
from pydantic import ValidationError

from hrincentives.config import ConfigManager
from hrincentives.container import create_container
from hrincentives.schemas.config import AppConfig, load_config
from hrincentives.store import InMemoryStore


def test_create_container_with_overrides():
    container = create_container(
        settings={
            "scoring": {"strict": True, "include_challenge_points": True},
            "ranking": {"probation_days": 30},
            "bonus": {"base_value": 250.0, "zero_limit": 1},
        }
    )

    calculator = container.scoring_calculator()
    ranking = container.ranking_builder()
    bonus = container.bonus_evaluator()
    pipeline = container.closing_pipeline()
    store = container.store()

    assert calculator._strict is True
    assert ranking._config.probation_days == 30
    assert bonus._config.base_value == 250.0
    assert pipeline._include_challenge_points is True
    assert store.get_bonus_config("any-org").zero_limit == 1


def test_defaults_without_settings():
    container = create_container()

    assert container.scoring_calculator()._strict is False
    assert container.ranking_builder()._config.probation_days == 90
    assert container.closing_pipeline()._include_challenge_points is False
    assert container.store() is container.store()


def test_supplied_store_is_shared():
    store = InMemoryStore()
    container = create_container(store=store)

    assert container.closing_pipeline()._store is store
    assert container.challenge_service()._store is store


def test_load_config_validation():
    data = {"scoring": {"strict": True}, "bonus": {"zero_limit": 2}}
    app_config = load_config(data)
    assert isinstance(app_config, AppConfig)
    settings = app_config.to_settings()
    assert settings["scoring"]["strict"] is True
    assert settings["bonus"] == {"zero_limit": 2}
    assert "ranking" not in settings


def test_load_config_rejects_bad_values():
    with pytest.raises(ValidationError):
        load_config({"bonus": {"zero_limit": -1}})
    with pytest.raises(ValidationError):
        load_config(["not", "a", "mapping"])


def test_config_manager_reads_yaml(tmp_path):
    (tmp_path / "settings.yaml").write_text(
        "scoring:\n  strict: true\nranking:\n  probation_days: 60\n", encoding="utf-8"
    )

    app_config = ConfigManager(tmp_path).load_app_config()

    assert app_config.scoring.strict is True
    assert app_config.ranking.probation_days == 60
