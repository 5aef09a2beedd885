from __future__ import annotations

import pydantic as p

from assessor.model import Answer, Question

from ..base import answer_code, EvaluationResult, ModelBackedEvaluator, Percent, round_score
from ..errors import StructuralError


class CaseResult(p.BaseModel):
    name: str = ""
    passed: bool = False
    message: str = ""


class CodeAnalysis(p.BaseModel):
    test_results: list[CaseResult] = []
    code_quality: Percent = 50.0
    efficiency: Percent = 70.0
    syntax_errors: list[str] = []
    logic_errors: list[str] = []
    time_complexity: str | None = None
    improvements: list[str] = []


def code_score(analysis: CodeAnalysis, points: float) -> int:
    """Weighted score: 40% tests, 30% quality, 20% efficiency, 10% syntax, minus error penalties."""
    if analysis.test_results:
        pass_rate = sum(1 for r in analysis.test_results if r.passed) / len(analysis.test_results)
    else:
        pass_rate = 0.5
    syntax = 50.0 if analysis.syntax_errors else 100.0

    score = points * (
        0.4 * pass_rate + 0.3 * analysis.code_quality / 100 + 0.2 * analysis.efficiency / 100 + 0.1 * syntax / 100
    )
    if analysis.syntax_errors:
        score *= 0.8
    if analysis.logic_errors:
        score *= 0.9
    return min(round_score(score), int(points))


class CodeEvaluator(ModelBackedEvaluator):
    name = "code"
    template = "scorer/coding.j2"

    async def evaluate(self, answer: Answer, question: Question) -> EvaluationResult:
        code, language = answer_code(answer, question)
        if not code.strip():
            raise StructuralError("empty code submission")

        analysis = await self.request(
            CodeAnalysis,
            problem=question.config.get("problem") or question.config.get("question", ""),
            expected=question.config.get("expectedSolution"),
            code=code,
            language=language,
            test_cases=question.config.get("testCases", []),
        )
        points = float(question.points)
        score = code_score(analysis, points)

        passed = sum(1 for r in analysis.test_results if r.passed)
        parts = [f"Overall Score: {score}/{question.points}."]
        if analysis.test_results:
            parts.append(f"Test Cases: {passed}/{len(analysis.test_results)} passed.")
        parts.append(f"Code Quality: {analysis.code_quality:.0f}/100.")
        if analysis.syntax_errors:
            parts.append(f"Found {len(analysis.syntax_errors)} syntax error(s).")
        if analysis.time_complexity:
            parts.append(f"Time Complexity: {analysis.time_complexity}.")

        return EvaluationResult(
            score=float(score),
            max_score=points,
            feedback={
                "evaluation_method": self.name,
                "language": language,
                "test_results": [r.model_dump() for r in analysis.test_results],
                "code_quality_score": analysis.code_quality,
                "performance_score": analysis.efficiency,
                "syntax_errors": analysis.syntax_errors,
                "logic_errors": analysis.logic_errors,
                "improvements": analysis.improvements,
            },
            summary=" ".join(parts),
        )
