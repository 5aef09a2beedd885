"""LLM configuration settings."""

from __future__ import annotations

from assessor.llm.provider import ProviderType

from .base import ConfigSection


class ModelSettings(ConfigSection):
    """Settings for a specific model."""

    provider: ProviderType = ProviderType.OpenAI
    model: str = "gpt-4o-mini"
    max_tokens: int = 2048
    temperature: float = 0.3
    # retries inside the provider client; the scorer applies its own policy on top
    max_retries: int = 0
    timeout_seconds: float = 60.0


class ScoringModels(ConfigSection):
    """Model configuration for the different scoring tasks."""

    scoring: ModelSettings = ModelSettings()
    interview: ModelSettings = ModelSettings(model="gpt-4o", max_tokens=4096)


class LLMSettings(ConfigSection):
    """Root LLM configuration."""

    models: ScoringModels = ScoringModels()
