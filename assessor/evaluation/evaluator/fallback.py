from __future__ import annotations

from assessor.model import Answer, Question

from ..base import EvaluationResult, Evaluator
from ..errors import StructuralError


class FallbackEvaluator(Evaluator):
    """Catches question types nobody registered for; they score zero with an explanation."""

    name = "fallback"
    is_fast = True

    async def evaluate(self, answer: Answer, question: Question) -> EvaluationResult:
        raise StructuralError(f"no evaluator registered for question type {question.type_tag!r}")
