"""Evaluation container: registry, interview intelligence and the orchestrator."""

from __future__ import annotations

import typing as t

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Dependency, Provider, Singleton

from assessor.llm import ExternalScorer

from ..config.evaluation import EvaluationSettings
from ..provider import TimestampProvider
from .storage import SessionFactory

if t.TYPE_CHECKING:
    from assessor.evaluation import InterviewIntelligence, Orchestrator, StrategyRegistry

# assessor.evaluation imports assessor.core; import it when providers are called


def provide_intelligence(scorer: ExternalScorer, session_factory: SessionFactory) -> InterviewIntelligence:
    from assessor.evaluation.intelligence import InterviewIntelligence

    return InterviewIntelligence(scorer, session_factory)


def provide_registry(
    scorer: ExternalScorer,
    intelligence: InterviewIntelligence,
    session_factory: SessionFactory,
    settings: EvaluationSettings,
) -> StrategyRegistry:
    from assessor.evaluation.registry import create_registry

    return create_registry(scorer, intelligence, session_factory, settings)


def provide_orchestrator(
    registry: StrategyRegistry, session_factory: SessionFactory, clock: TimestampProvider
) -> Orchestrator:
    from assessor.evaluation.orchestrator import Orchestrator

    return Orchestrator(registry, session_factory, clock=clock)


class EvaluationContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    scorer: Provider[ExternalScorer] = Dependency()
    interview_scorer: Provider[ExternalScorer] = Dependency()
    session_factory: Provider[SessionFactory] = Dependency()
    clock: Provider[TimestampProvider] = Dependency()

    settings: Provider[EvaluationSettings] = Singleton(EvaluationSettings, config)
    intelligence: Provider[InterviewIntelligence] = Singleton(
        provide_intelligence, scorer=interview_scorer, session_factory=session_factory
    )
    registry: Provider[StrategyRegistry] = Singleton(
        provide_registry,
        scorer=scorer,
        intelligence=intelligence,
        session_factory=session_factory,
        settings=settings,
    )
    orchestrator: Provider[Orchestrator] = Singleton(
        provide_orchestrator, registry=registry, session_factory=session_factory, clock=clock
    )
