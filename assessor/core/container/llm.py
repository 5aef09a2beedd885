"""LLM container for dependency injection."""

from __future__ import annotations

import typing as t

import jinja2
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Dependency, Provider, Singleton
from langchain_core.language_models import BaseChatModel

from assessor.llm import ChatModelScorer, create_chat_model, ExternalScorer, ModelConfig, UnavailableScorer

from ..config.evaluation import ScorerPolicySettings
from ..config.llm import ModelSettings
from ..config.secrets import LLMSecrets


def create_model(settings: ModelSettings, secrets: LLMSecrets) -> BaseChatModel:
    """Create a chat model from settings."""
    config = ModelConfig(
        provider=settings.provider,
        model_name=settings.model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        timeout=settings.timeout_seconds,
        max_retries=settings.max_retries,
    )
    return create_chat_model(
        config,
        openai_api_key=secrets.openai.secret_key if secrets.openai else None,
        anthropic_api_key=secrets.anthropic.api_key if secrets.anthropic else None,
    )


def create_scorer(
    model_factory: t.Callable[[], BaseChatModel], policy: ScorerPolicySettings, env: jinja2.Environment
) -> ExternalScorer:
    """
    A deployment without API keys still evaluates attempts; every model-backed
    answer then degrades to its fallback score with reason `unavailable`
    """
    try:
        model = model_factory()
    except ValueError as e:
        return UnavailableScorer(str(e))
    return ChatModelScorer(
        model,
        env=env,
        timeout=policy.timeout_seconds,
        max_retries=policy.max_retries,
        backoff=policy.backoff_seconds,
        backoff_cap=policy.backoff_cap_seconds,
    )


class LLMContainer(DeclarativeContainer):
    """Container for LLM services."""

    config: Configuration = Configuration()
    secrets: Configuration = Configuration()
    policy: Configuration = Configuration()
    env: Provider[jinja2.Environment] = Dependency(instance_of=jinja2.Environment)

    llm_secrets: Provider[LLMSecrets] = Singleton(LLMSecrets, secrets)
    scorer_policy: Provider[ScorerPolicySettings] = Singleton(ScorerPolicySettings, policy)

    scoring_model: Provider[BaseChatModel] = Singleton(
        create_model, settings=config.models.scoring.as_(ModelSettings), secrets=llm_secrets
    )
    interview_model: Provider[BaseChatModel] = Singleton(
        create_model, settings=config.models.interview.as_(ModelSettings), secrets=llm_secrets
    )

    scorer: Provider[ExternalScorer] = Singleton(
        create_scorer, model_factory=scoring_model.provider, policy=scorer_policy, env=env
    )
    interview_scorer: Provider[ExternalScorer] = Singleton(
        create_scorer, model_factory=interview_model.provider, policy=scorer_policy, env=env
    )
