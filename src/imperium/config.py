"""Lightweight configuration for the Imperium service."""

from __future__ import annotations

import logging
from dataclasses import replace
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from imperium.domain.rules_config import DEFAULT_RULES, RoundRules, RulesConfig
from imperium.domain.tables import TABLES_VERSION


class Settings(BaseSettings):
    """Application settings; every field can be set through ``IMPERIUM_*`` variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="IMPERIUM_"
    )

    rules_version: str = Field(default=TABLES_VERSION, description="Ruleset version in use")
    total_rounds: int = Field(default=10, description="Rounds per game", gt=0)
    turns_per_round: int = Field(default=50, description="Turns granted each round", gt=0)
    bot_count: int = Field(default=4, description="Bot empires created with each game", ge=0)
    default_seed: int = Field(
        default=0,
        description="Seed used when a new game does not supply one",
        ge=0,
    )
    log_level: str = Field(default="INFO", description="Root log level for the service")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Origins allowed to call the HTTP API",
    )

    def rules(self) -> RulesConfig:
        """Default rules with the round settings applied."""

        rounds = RoundRules(
            total_rounds=self.total_rounds,
            turns_per_round=self.turns_per_round,
            bot_count=self.bot_count,
        )
        return replace(DEFAULT_RULES, rounds=rounds)


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    settings = Settings()
    logging.getLogger("imperium").setLevel(settings.log_level.upper())
    return settings
