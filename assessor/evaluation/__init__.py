import importlib
import typing as t

__all__ = [
    # errors
    "AnalysisTimeout",
    "AttemptNotFound",
    "EvaluationError",
    "MalformedScorerResponse",
    "PersistenceError",
    "ScorerTimeout",
    "ScorerUnavailable",
    "StructuralError",
    "TransientExternalError",
    # contract
    "EvaluationResult",
    "Evaluator",
    "StrategyRegistry",
    "create_registry",
    "InterviewIntelligence",
    "Orchestrator",
]

_exports: dict[str, str] = {
    "AnalysisTimeout": "errors",
    "AttemptNotFound": "errors",
    "EvaluationError": "errors",
    "MalformedScorerResponse": "errors",
    "PersistenceError": "errors",
    "ScorerTimeout": "errors",
    "ScorerUnavailable": "errors",
    "StructuralError": "errors",
    "TransientExternalError": "errors",
    "EvaluationResult": "base",
    "Evaluator": "base",
    "StrategyRegistry": "registry",
    "create_registry": "registry",
    "InterviewIntelligence": "intelligence",
    "Orchestrator": "orchestrator",
}

if t.TYPE_CHECKING:
    from .base import EvaluationResult, Evaluator
    from .errors import AnalysisTimeout, AttemptNotFound, EvaluationError, MalformedScorerResponse, PersistenceError, \
        ScorerTimeout, ScorerUnavailable, StructuralError, TransientExternalError
    from .intelligence import InterviewIntelligence
    from .orchestrator import Orchestrator
    from .registry import create_registry, StrategyRegistry


# the scorer imports the error taxonomy from here while the evaluators import
# the scorer, so submodules load on first use
def __getattr__(name: str) -> t.Any:
    if name in _exports:
        module = importlib.import_module(f"{__name__}.{_exports[name]}")
        return getattr(module, name)
    raise AttributeError(f"module {__name__} has no attribute {name}")
