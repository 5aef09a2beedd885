from __future__ import annotations

import os
import typing as t

import pydantic as p

from assessor.model import Answer, Question

from ..base import EvaluationResult, ModelBackedEvaluator, Percent, round_score
from ..errors import StructuralError
from .code import CaseResult

COMPLEXITY_SCORES: t.Final[dict[str, int]] = {
    "O(1)": 100,
    "O(log n)": 90,
    "O(n)": 80,
    "O(n log n)": 70,
    "O(n²)": 50,
    "O(n^2)": 50,
    "O(n³)": 30,
    "O(n^3)": 30,
    "O(2^n)": 10,
}
DEFAULT_COMPLEXITY_SCORE: t.Final = 60

LANGUAGES: t.Final[dict[str, str]] = {
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "java": "java",
    "cpp": "cpp",
    "c": "c",
    "cs": "csharp",
    "php": "php",
    "go": "go",
    "rb": "ruby",
}

# files analyzed when none is marked as main
MaxProjectFiles: t.Final = 3


class ProjectAnalysis(p.BaseModel):
    success: bool = False
    code_quality: Percent = 0.0
    test_results: list[CaseResult] = []
    time_complexity: str | None = None
    errors: list[str] = []
    warnings: list[str] = []
    improvements: list[str] = []
    hints: list[str] = []


class ScoreFactors(t.NamedTuple):
    code_quality: float
    tests: float
    performance: float
    errors: float

    @property
    def overall(self) -> int:
        return round_score(self.code_quality * 0.3 + self.tests * 0.4 + self.performance * 0.2 + self.errors * 0.1)


def score_factors(analysis: ProjectAnalysis) -> ScoreFactors:
    if analysis.test_results:
        tests = sum(1 for r in analysis.test_results if r.passed) / len(analysis.test_results) * 100
    else:
        tests = 75.0 if analysis.success else 25.0
    performance = DEFAULT_COMPLEXITY_SCORE
    if analysis.time_complexity:
        performance = COMPLEXITY_SCORES.get(analysis.time_complexity.strip(), DEFAULT_COMPLEXITY_SCORE)
    return ScoreFactors(
        code_quality=analysis.code_quality,
        tests=tests,
        performance=float(performance),
        errors=float(max(0, 100 - 20 * len(analysis.errors))),
    )


def project_source(answer: Answer, question: Question) -> tuple[str, str]:
    """Concatenate the files worth analyzing into one listing; return `(code, language)`."""
    content = answer.content
    language = question.config.get("language") or "javascript"
    if not isinstance(content, dict):
        raise StructuralError("project answer must be an object")

    files = content.get("files")
    if isinstance(files, list) and files:
        entries = [f for f in t.cast(list[t.Any], files) if isinstance(f, dict)]
        main = [f for f in entries if f.get("isMainFile") or _looks_like_main(f)]
        selected = main or entries[:MaxProjectFiles]
        if not any(_file_content(f).strip() for f in selected):
            raise StructuralError("empty code submission")
        code = "\n\n".join(f"// File: {_file_name(f) or 'unnamed'}\n{_file_content(f)}" for f in selected)
        if selected:
            first = selected[0]
            extension = os.path.splitext(_file_name(first))[1].lstrip(".").lower()
            language = LANGUAGES.get(extension) or first.get("language") or language
    elif isinstance(content.get("code"), str):
        code = content["code"]
        language = content.get("language") or language
    else:
        raise StructuralError("no code found in project submission")

    if not code.strip():
        raise StructuralError("empty code submission")
    return code, language


def _file_name(entry: dict[str, t.Any]) -> str:
    return str(entry.get("file_name") or entry.get("path") or entry.get("name") or "")


def _file_content(entry: dict[str, t.Any]) -> str:
    return str(entry.get("content") or entry.get("file_content") or "")


def _looks_like_main(entry: dict[str, t.Any]) -> bool:
    name = _file_name(entry)
    return "main" in name or "index" in name


class ProjectEvaluator(ModelBackedEvaluator):
    """Multi-file projects scored on quality, tests, complexity and errors."""

    name = "project"
    template = "scorer/project.j2"

    async def evaluate(self, answer: Answer, question: Question) -> EvaluationResult:
        code, language = project_source(answer, question)
        analysis = await self.request(
            ProjectAnalysis,
            problem=question.config.get("problem") or question.config.get("question", ""),
            code=code,
            language=language,
            test_cases=question.config.get("testCases", []),
        )
        factors = score_factors(analysis)
        overall = factors.overall
        score = round_score(overall / 100 * question.points)

        if analysis.test_results:
            passed = sum(1 for r in analysis.test_results if r.passed)
            tests_line = f"{passed}/{len(analysis.test_results)} passed"
        else:
            tests_line = "No tests provided"

        return EvaluationResult(
            score=float(score),
            max_score=float(question.points),
            feedback={
                "evaluation_method": self.name,
                "overall_score": overall,
                "language": language,
                "score_breakdown": factors._asdict(),
                "test_results": [r.model_dump() for r in analysis.test_results],
                "errors": analysis.errors,
                "warnings": analysis.warnings,
                "improvements": analysis.improvements,
                "hints": analysis.hints,
            },
            summary=(
                f"Project Evaluation - Overall Score: {overall}%. Test Results: {tests_line}. "
                f"Performance: {analysis.time_complexity or 'Not analyzed'} time complexity."
            ),
        )
