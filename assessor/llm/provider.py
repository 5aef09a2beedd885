"""Chat models backing the external scorer."""

from __future__ import annotations

import enum
from dataclasses import dataclass

import pydantic as p
from langchain_core.language_models import BaseChatModel


class ProviderType(enum.Enum):
    OpenAI = "openai"
    Anthropic = "anthropic"


@dataclass(frozen=True)
class ModelConfig:
    provider: ProviderType
    model_name: str
    temperature: float = 0.3
    max_tokens: int = 2048
    # client-side bound; the scorer enforces its own, usually tighter, timeout
    timeout: float = 60.0
    max_retries: int = 0


def create_chat_model(
    config: ModelConfig,
    *,
    openai_api_key: p.Secret[str] | None = None,
    anthropic_api_key: p.Secret[str] | None = None,
) -> BaseChatModel:
    """Create the LangChain chat model a scorer talks to.

    Raises:
        ValueError: the provider's API key is not configured; callers treat
            this as "scorer unavailable" rather than a boot failure
    """
    match config.provider:
        case ProviderType.OpenAI:
            from langchain_openai import ChatOpenAI

            key = _require(openai_api_key, config.provider)
            return ChatOpenAI(
                model=config.model_name,
                temperature=config.temperature,
                max_completion_tokens=config.max_tokens,
                timeout=config.timeout,
                max_retries=config.max_retries,
                api_key=key,
                # every scoring prompt asks for a single JSON object
                model_kwargs={"response_format": {"type": "json_object"}},
            )
        case ProviderType.Anthropic:
            from langchain_anthropic import ChatAnthropic

            key = _require(anthropic_api_key, config.provider)
            return ChatAnthropic(
                model_name=config.model_name,
                temperature=config.temperature,
                max_tokens_to_sample=config.max_tokens,
                timeout=config.timeout,
                max_retries=config.max_retries,
                api_key=key,
                stop=None,
            )


def _require(secret: p.Secret[str] | None, provider: ProviderType) -> p.SecretStr:
    if secret is None:
        raise ValueError(f"no API key configured for scoring provider {provider.value!r}")
    return p.SecretStr(secret.get_secret_value())
