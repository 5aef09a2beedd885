from __future__ import annotations

import pydantic as p
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from assessor.model import DeploymentEnvironment

from .base import BaseSettings as AssessorBaseSettings
from .base import ConfigSection


class PostgresqlSecrets(ConfigSection):
    username: p.Secret[str] | None = None
    password: p.Secret[str] | None = None


class OpenAISecrets(ConfigSection):
    """OpenAI API secrets."""

    secret_key: p.Secret[str]


class AnthropicSecrets(ConfigSection):
    """Anthropic API secrets."""

    api_key: p.Secret[str]


class LLMSecrets(ConfigSection):
    """LLM vendor API secrets."""

    openai: OpenAISecrets | None = None
    anthropic: AnthropicSecrets | None = None


class Secrets(AssessorBaseSettings):
    """
    Secrets are read from the process environment, e.g.
    `ASSESSOR_LLM__OPENAI__SECRET_KEY` or `ASSESSOR_POSTGRESQL__PASSWORD`
    """

    model_config = SettingsConfigDict(env_prefix="ASSESSOR_", env_nested_delimiter="__", extra="ignore")

    env: DeploymentEnvironment

    postgresql: PostgresqlSecrets = PostgresqlSecrets()
    llm: LLMSecrets = LLMSecrets()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings
