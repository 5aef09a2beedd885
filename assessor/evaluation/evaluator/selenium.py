from __future__ import annotations

import typing as t

import pydantic as p

from assessor.model import Answer, Question

from ..base import answer_code, EvaluationResult, ModelBackedEvaluator, Percent, round_score
from ..errors import StructuralError


class SeleniumAnalysis(p.BaseModel):
    locator_quality: Percent = 0.0
    test_flow: Percent = 0.0
    best_practices: Percent = 0.0
    overall_score: Percent
    improvements: list[str] = []
    locator_analysis: list[dict[str, t.Any]] = []


class SeleniumEvaluator(ModelBackedEvaluator):
    """Browser-automation scripts, judged on locators, flow and practice."""

    name = "selenium"
    template = "scorer/selenium.j2"

    async def evaluate(self, answer: Answer, question: Question) -> EvaluationResult:
        code, language = answer_code(answer, question, default_language="java")
        if not code.strip():
            raise StructuralError("empty selenium script")

        analysis = await self.request(
            SeleniumAnalysis,
            problem=question.config.get("problem") or question.config.get("question", ""),
            code=code,
            language=language,
            test_cases=question.config.get("testCases", []),
        )
        score = round_score(analysis.overall_score / 100 * question.points)
        return EvaluationResult(
            score=float(score),
            max_score=float(question.points),
            feedback={
                "evaluation_method": self.name,
                "locator_quality": analysis.locator_quality,
                "test_flow": analysis.test_flow,
                "best_practices": analysis.best_practices,
                "overall_score": analysis.overall_score,
                "improvements": analysis.improvements,
                "locator_analysis": analysis.locator_analysis,
            },
            summary=(
                f"Selenium Score: {analysis.overall_score:.0f}/100. "
                f"Locator Quality: {analysis.locator_quality:.0f}/100. "
                f"Test Flow: {analysis.test_flow:.0f}/100. "
                f"Best Practices: {analysis.best_practices:.0f}/100."
            ),
        )
