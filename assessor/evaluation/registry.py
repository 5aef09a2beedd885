"""Strategy registry: question type tag to evaluator."""

from __future__ import annotations

import typing as t

from assessor.llm import ExternalScorer
from assessor.model import Answer, Question, QuestionType

from .base import Evaluator, SessionFactory
from .evaluator import ChoiceEvaluator, CodeEvaluator, FallbackEvaluator, InterviewEvaluator, ProjectEvaluator, \
    SeleniumEvaluator, TextEvaluator
from .intelligence import InterviewIntelligence

if t.TYPE_CHECKING:
    from assessor.core.config import EvaluationSettings


class StrategyRegistry(object):
    def __init__(self, fallback: Evaluator | None = None, *, selenium_markers: t.Sequence[str] = ()) -> None:
        self._evaluators: dict[str, Evaluator] = {}
        self.fallback = fallback or FallbackEvaluator()
        self.selenium_markers = tuple(selenium_markers)

    def register(self, type_tag: QuestionType | str, evaluator: Evaluator) -> None:
        tag = type_tag.value if isinstance(type_tag, QuestionType) else type_tag
        self._evaluators[tag] = evaluator

    def get(self, type_tag: str) -> Evaluator:
        return self._evaluators.get(type_tag, self.fallback)

    def resolve(self, question: Question, answer: Answer) -> Evaluator:
        tag = question.type_tag
        if tag == QuestionType.Coding.value and self.is_selenium(question, answer):
            tag = QuestionType.Selenium.value
        return self.get(tag)

    def is_selenium(self, question: Question, answer: Answer) -> bool:
        """Coding questions configured for selenium, or whose code drives a browser."""
        config = question.config
        if "selenium" in str(config.get("language", "")).lower() or config.get("questionType") == "selenium":
            return True

        content = answer.content
        sources: list[t.Any] = []
        if isinstance(content, str):
            sources.append(content)
        elif isinstance(content, dict):
            sources.append(content.get("code"))
            files = content.get("files")
            if isinstance(files, list) and files and isinstance(files[0], dict):
                sources.append(files[0].get("content"))
        return any(isinstance(s, str) and any(m in s for m in self.selenium_markers) for s in sources)

    def __contains__(self, type_tag: str) -> bool:
        return type_tag in self._evaluators


def create_registry(
    scorer: ExternalScorer,
    intelligence: InterviewIntelligence,
    session_factory: SessionFactory,
    settings: EvaluationSettings,
) -> StrategyRegistry:
    ratio = settings.fallback_ratio
    registry = StrategyRegistry(selenium_markers=settings.selenium_markers)
    registry.register(QuestionType.MultipleChoice, ChoiceEvaluator())
    registry.register(QuestionType.Subjective, TextEvaluator(scorer, fallback_ratio=ratio.get("subjective", 0.0)))
    registry.register(QuestionType.Coding, CodeEvaluator(scorer, fallback_ratio=ratio.get("coding", 0.0)))
    registry.register(QuestionType.Selenium, SeleniumEvaluator(scorer, fallback_ratio=ratio.get("selenium", 0.0)))
    registry.register(QuestionType.Project, ProjectEvaluator(scorer, fallback_ratio=ratio.get("project_based", 0.0)))
    registry.register(
        QuestionType.Interview,
        InterviewEvaluator(
            intelligence,
            session_factory,
            max_polls=settings.interview.max_polls,
            poll_interval=settings.interview.poll_interval_seconds,
            fallback_ratio=ratio.get("interview", 0.5),
        ),
    )
    return registry
