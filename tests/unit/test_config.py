"""Tests for service settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from imperium.config import Settings, get_settings
from imperium.domain.rules_config import DEFAULT_RULES, RoundRules


def test_default_settings_match_default_rules():
    settings = Settings()
    assert settings.rules() == DEFAULT_RULES


def test_round_settings_flow_into_rules():
    rules = Settings(total_rounds=3, turns_per_round=20, bot_count=1).rules()
    assert rules.rounds == RoundRules(total_rounds=3, turns_per_round=20, bot_count=1)
    assert rules.combat == DEFAULT_RULES.combat
    assert rules.economy == DEFAULT_RULES.economy


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("IMPERIUM_TOTAL_ROUNDS", "7")
    monkeypatch.setenv("IMPERIUM_BOT_COUNT", "0")
    settings = Settings()
    assert settings.total_rounds == 7
    assert settings.bot_count == 0


@pytest.mark.parametrize("field", ["total_rounds", "turns_per_round"])
def test_positive_round_settings(field):
    with pytest.raises(ValidationError):
        Settings(**{field: 0})


def test_get_settings_is_cached():
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
