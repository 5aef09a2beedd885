"""
Failure taxonomy for evaluation.

Evaluator failures (`EvaluationError` and subclasses) are always absorbed
into a score: structural problems score zero, external failures score the
evaluator's fallback. Only `PersistenceError` can fail an orchestration.
"""

import typing as t


class EvaluationError(Exception):
    reason: t.ClassVar[str] = "error"


class StructuralError(EvaluationError):
    """Malformed answer or question data; never retried."""

    reason = "structural"


class TransientExternalError(EvaluationError):
    """The external scorer did not produce a result in time; retried with backoff."""

    reason = "transient"


class ScorerTimeout(TransientExternalError):
    reason = "timeout"


class ScorerUnavailable(TransientExternalError):
    reason = "unavailable"


class AnalysisTimeout(TransientExternalError):
    reason = "analysis_timeout"


class MalformedScorerResponse(EvaluationError):
    """The scorer answered, but not with the structure we asked for."""

    reason = "malformed_response"


class PersistenceError(Exception):
    """The store is unreachable or rejected a write; safe to re-trigger."""


class AttemptNotFound(LookupError):
    pass
