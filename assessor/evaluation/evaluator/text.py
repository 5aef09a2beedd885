from __future__ import annotations

import typing as t

import pydantic as p

from assessor.lib.util import clamp
from assessor.model import Answer, Question

from ..base import answer_text, EvaluationResult, ModelBackedEvaluator


class TextAssessment(p.BaseModel):
    score: t.Annotated[float, p.Field(allow_inf_nan=False)]
    feedback: str = ""
    strengths: list[str] = []
    improvements: list[str] = []


class TextEvaluator(ModelBackedEvaluator):
    """Free-text answers judged against the expected answer or rubric."""

    name = "text"
    template = "scorer/subjective.j2"

    async def evaluate(self, answer: Answer, question: Question) -> EvaluationResult:
        text = answer_text(answer)
        points = float(question.points)
        if not text.strip():
            return EvaluationResult(
                score=0.0,
                max_score=points,
                feedback={"evaluation_method": self.name, "feedback": "No answer provided"},
                summary="No answer provided",
            )

        result = await self.request(
            TextAssessment,
            question=question.config.get("question", ""),
            expected=question.config.get("expectedAnswer") or question.config.get("rubric"),
            answer=text,
            points=question.points,
        )
        score = clamp(result.score, 0.0, points)
        feedback: dict[str, t.Any] = {
            "evaluation_method": self.name,
            "feedback": result.feedback,
            "strengths": result.strengths,
            "improvements": result.improvements,
        }
        return EvaluationResult(score=score, max_score=points, feedback=feedback, summary=result.feedback)
