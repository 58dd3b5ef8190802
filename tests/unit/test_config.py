"""Unit tests for configuration."""

import pytest

from config import Settings
from models.domain import MentionSource
from services.item_recognition.config import ExtractionConfig


def test_default_settings(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    settings = Settings(_env_file=None)

    assert settings.app_name == "ItemSurge"
    assert settings.debug is False
    assert settings.database_url == "sqlite:///./itemsurge.db"
    assert settings.openai_model == "o4-mini"
    assert settings.voting_runs == 3
    assert settings.voting_threshold == 0.6
    assert settings.greedy_matching is False
    assert settings.margin_threshold == 1_000_000


def test_custom_settings(monkeypatch):
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("DEBUG", "True")
    monkeypatch.setenv("API_PORT", "9000")
    monkeypatch.setenv("VOTING_RUNS", "5")
    monkeypatch.setenv("GREEDY_MATCHING", "true")

    settings = Settings()

    assert settings.app_name == "TestApp"
    assert settings.debug is True
    assert settings.api_port == 9000
    assert settings.voting_runs == 5
    assert settings.greedy_matching is True


def test_extraction_config_from_settings(monkeypatch):
    monkeypatch.setenv("GREEDY_MATCHING", "true")
    monkeypatch.setenv("CONFIDENCE_LLM_ONLY", "0.75")
    monkeypatch.setenv("FUZZY_MAX_DISTANCE", "1")

    config = ExtractionConfig.from_settings(Settings())

    assert config.greedy is True
    assert config.confidence_llm_only == 0.75
    assert config.fuzzy_max_distance == 1


def test_band_for_every_source():
    config = ExtractionConfig()

    assert {source: config.band_for(source) for source in MentionSource} == {
        MentionSource.BOTH: 1.0,
        MentionSource.LLM_ONLY: 0.8,
        MentionSource.ALGO_VALIDATED: 0.7,
    }


def test_extraction_config_is_immutable():
    config = ExtractionConfig()
    greedy = config.with_greedy()

    assert config.greedy is False
    assert greedy.greedy is True
    with pytest.raises(Exception):
        config.greedy = True
